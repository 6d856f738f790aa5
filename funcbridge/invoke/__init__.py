from .coercion import coerce_arguments, coerce_value
from .context import CallContext
from .invoker import call
from .response import build_error_response, build_success_response

__all__ = [
    "CallContext",
    "build_error_response",
    "build_success_response",
    "call",
    "coerce_arguments",
    "coerce_value",
]
