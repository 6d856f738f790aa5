"""Call one function implementation uniformly from any front end, with sandboxed file access."""

from funcbridge.app import App
from funcbridge.config import AppConfig
from funcbridge.errors import (
    ConversionError,
    FuncBridgeError,
    InvalidSignature,
    InvocationError,
    PathNotMounted,
)
from funcbridge.gateway import CallResult, FunctionGateway
from funcbridge.invoke import CallContext
from funcbridge.registry import FunctionRegistry, Param
from funcbridge.vfs import FileInfo, VirtualEnvironment

__version__ = "0.1.0"

__all__ = [
    "App",
    "AppConfig",
    "CallContext",
    "CallResult",
    "ConversionError",
    "FileInfo",
    "FuncBridgeError",
    "FunctionGateway",
    "FunctionRegistry",
    "InvalidSignature",
    "InvocationError",
    "Param",
    "PathNotMounted",
    "VirtualEnvironment",
]
