from __future__ import annotations

import errno
from dataclasses import dataclass
from typing import Any, Dict, Optional


class ErrorCode:
    """Stable error codes carried in CallResult.error["code"]."""
    INVALID_SIGNATURE = "INVALID_SIGNATURE"
    REGISTRY_ERROR = "REGISTRY_ERROR"
    CONFIG_ERROR = "CONFIG_ERROR"

    CONVERSION_ERROR = "CONVERSION_ERROR"
    INVOCATION_ERROR = "INVOCATION_ERROR"
    INVALID_RETURN = "INVALID_RETURN"
    INVALID_ARGUMENT = "INVALID_ARGUMENT"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INTERNAL_ERROR = "INTERNAL_ERROR"

    PATH_NOT_MOUNTED = "PATH_NOT_MOUNTED"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    NOT_A_DIRECTORY = "NOT_A_DIRECTORY"
    IS_A_DIRECTORY = "IS_A_DIRECTORY"
    ALREADY_EXISTS = "ALREADY_EXISTS"
    IO_ERROR = "IO_ERROR"


@dataclass(frozen=True, eq=False)
class FuncBridgeError(Exception):
    code: str
    message: str
    details: Optional[Dict[str, Any]] = None

    def __str__(self) -> str:
        return self.message

    def to_json(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details or {},
        }


class InvalidSignature(FuncBridgeError):
    """Registration-time: the callable does not follow the context/failure contract."""

    @classmethod
    def because(cls, function: str, reason: str) -> "InvalidSignature":
        return cls(
            ErrorCode.INVALID_SIGNATURE,
            f"invalid signature for {function!r}: {reason}",
            {"function": function},
        )


class RegistryError(FuncBridgeError):
    @classmethod
    def because(cls, message: str, **details: Any) -> "RegistryError":
        return cls(ErrorCode.REGISTRY_ERROR, message, details)


class ConfigError(FuncBridgeError):
    @classmethod
    def because(cls, message: str, **details: Any) -> "ConfigError":
        return cls(ErrorCode.CONFIG_ERROR, message, details)


class ConversionError(FuncBridgeError):
    """An argument value could not be coerced to its declared type."""

    @classmethod
    def for_argument(
        cls,
        argument: str,
        source_type: str,
        target_type: str,
        reason: Optional[str] = None,
    ) -> "ConversionError":
        message = f"cannot convert argument {argument!r} from {source_type} to {target_type}"
        if reason:
            message = f"{message}: {reason}"
        return cls(
            ErrorCode.CONVERSION_ERROR,
            message,
            {"argument": argument, "source_type": source_type, "target_type": target_type},
        )


class InvocationError(FuncBridgeError):
    """The invoked function signalled failure (returned or raised)."""

    @classmethod
    def wrap(cls, function: str, failure: Any) -> "InvocationError":
        details: Dict[str, Any] = {"function": function, "error_type": type(failure).__name__}
        if isinstance(failure, BaseException):
            details["kind"] = error_code_for(failure)
        return cls(ErrorCode.INVOCATION_ERROR, str(failure), details)

    @classmethod
    def bad_return(cls, function: str, reason: str) -> "InvocationError":
        return cls(ErrorCode.INVALID_RETURN, f"{function!r} {reason}", {"function": function})


class PathNotMounted(FuncBridgeError):
    @classmethod
    def for_path(cls, virtual_path: str) -> "PathNotMounted":
        return cls(
            ErrorCode.PATH_NOT_MOUNTED,
            f"path not mounted: {virtual_path}",
            {"path": virtual_path},
        )


_OS_ERROR_CODES = (
    (FileNotFoundError, ErrorCode.NOT_FOUND),
    (PermissionError, ErrorCode.PERMISSION_DENIED),
    (NotADirectoryError, ErrorCode.NOT_A_DIRECTORY),
    (IsADirectoryError, ErrorCode.IS_A_DIRECTORY),
    (FileExistsError, ErrorCode.ALREADY_EXISTS),
)


def error_code_for(exc: BaseException) -> str:
    """Map an exception to the ErrorCode reported in envelopes and audit rows."""
    if isinstance(exc, FuncBridgeError):
        return exc.code
    for exc_type, code in _OS_ERROR_CODES:
        if isinstance(exc, exc_type):
            return code
    if isinstance(exc, OSError):
        if exc.errno == errno.ENOTDIR:
            return ErrorCode.NOT_A_DIRECTORY
        return ErrorCode.IO_ERROR
    return ErrorCode.INTERNAL_ERROR
