from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

import yaml

from funcbridge.errors import ConfigError

logger = logging.getLogger(__name__)

DATABASE_URL_ENV = "FUNCBRIDGE_DATABASE_URL"


def parse_env_specs(specs: Iterable[str]) -> Dict[str, str]:
    """KEY=VALUE entries, split on the first '='. Entries without '=' or with an empty key are skipped."""
    env: Dict[str, str] = {}
    for spec in specs:
        key, sep, value = spec.partition("=")
        if not sep or not key:
            logger.debug("ignoring env spec %r", spec)
            continue
        env[key] = value
    return env


def parse_mount_specs(specs: Iterable[str]) -> List[Tuple[str, str]]:
    """
    HOST:VIRTUAL entries as (host, virtual) pairs, in order.

    Split on the last ':' so host paths may carry colons (C:\\data:/data).
    Entries without ':' or with an empty side are skipped.
    """
    mounts: List[Tuple[str, str]] = []
    for spec in specs:
        host, sep, virtual = spec.rpartition(":")
        if not sep or not host or not virtual:
            logger.debug("ignoring mount spec %r", spec)
            continue
        mounts.append((host, virtual))
    return mounts


@dataclass(frozen=True)
class AppConfig:
    name: str = "funcbridge"
    version: str = "0.1.0"
    env: Dict[str, str] = field(default_factory=dict)
    mounts: List[Tuple[str, str]] = field(default_factory=list)
    strict_mounts: bool = False
    tools_root: Optional[Path] = None
    database_url: Optional[str] = None
    log_level: str = "WARNING"

    def with_overrides(
        self,
        env_specs: Iterable[str] = (),
        mount_specs: Iterable[str] = (),
        tools_root: Optional[Path] = None,
        log_level: Optional[str] = None,
    ) -> "AppConfig":
        """Command line values go after the file's: later mounts/env win."""
        env = dict(self.env)
        env.update(parse_env_specs(env_specs))
        return replace(
            self,
            env=env,
            mounts=self.mounts + parse_mount_specs(mount_specs),
            tools_root=tools_root or self.tools_root,
            log_level=log_level or self.log_level,
        )


def _env_section(raw: Union[None, Mapping[str, Any], List[Any]], path: Path) -> Dict[str, str]:
    if raw is None:
        return {}
    if isinstance(raw, Mapping):
        return {str(k): "" if v is None else str(v) for k, v in raw.items()}
    if isinstance(raw, list):
        return parse_env_specs(str(s) for s in raw)
    raise ConfigError.because(f"'env' must be a mapping or a list in {path}", path=str(path))


def _mounts_section(raw: Any, path: Path) -> List[Tuple[str, str]]:
    if raw is None:
        return []
    if isinstance(raw, list):
        return parse_mount_specs(str(s) for s in raw)
    if isinstance(raw, Mapping):
        # host: virtual, same shape as the in-code mapping
        return [(str(h), str(v)) for h, v in raw.items()]
    raise ConfigError.because(f"'mounts' must be a list or a mapping in {path}", path=str(path))


def _from_config_dir(config_path: Path, p: Any) -> Path:
    p = Path(p).expanduser()
    if p.is_absolute():
        return p
    return (config_path.parent / p).resolve()


def load_app_config(path: Path) -> AppConfig:
    if not path.exists():
        raise ConfigError.because(f"Config file not found: {path}", path=str(path))
    try:
        raw: Dict[str, Any] = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    except yaml.YAMLError as e:
        raise ConfigError.because(f"Invalid YAML in {path}: {e}", path=str(path)) from e
    if not isinstance(raw, dict):
        raise ConfigError.because(f"Config root must be a mapping: {path}", path=str(path))

    # relative paths in the file are relative to the file, not the process cwd
    tools_root = raw.get("tools_root")
    if tools_root is not None:
        tools_root = _from_config_dir(path, tools_root)
    mounts = [(str(_from_config_dir(path, host)), virtual) for host, virtual in _mounts_section(raw.get("mounts"), path)]

    return AppConfig(
        name=str(raw.get("name", "funcbridge")),
        version=str(raw.get("version", "0.1.0")),
        env=_env_section(raw.get("env"), path),
        mounts=mounts,
        strict_mounts=bool(raw.get("strict_mounts", False)),
        tools_root=tools_root,
        database_url=os.getenv(DATABASE_URL_ENV) or raw.get("database_url"),
        log_level=str(raw.get("log_level", "WARNING")).upper(),
    )
