from .config import AppConfig, load_app_config, parse_env_specs, parse_mount_specs

__all__ = ["AppConfig", "load_app_config", "parse_env_specs", "parse_mount_specs"]
