from .models import (
    ConfigError,
    ConversionError,
    ErrorCode,
    FuncBridgeError,
    InvalidSignature,
    InvocationError,
    PathNotMounted,
    RegistryError,
    error_code_for,
)

__all__ = [
    "ConfigError",
    "ConversionError",
    "ErrorCode",
    "FuncBridgeError",
    "InvalidSignature",
    "InvocationError",
    "PathNotMounted",
    "RegistryError",
    "error_code_for",
]
