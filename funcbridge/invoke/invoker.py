from __future__ import annotations

import logging
from typing import Any, List, Mapping

from funcbridge.errors import InvocationError
from funcbridge.registry.types import FunctionDescriptor

from .coercion import coerce_arguments
from .context import CallContext

logger = logging.getLogger(__name__)


def _is_failure(value: Any) -> bool:
    if value is None:
        return False
    if isinstance(value, BaseException):
        return True
    return bool(value)


def _as_invocation_error(descriptor: FunctionDescriptor, failure: Any) -> InvocationError:
    if isinstance(failure, InvocationError):
        return failure
    return InvocationError.wrap(descriptor.name, failure)


def call(descriptor: FunctionDescriptor, context: CallContext, args_by_name: Mapping[str, Any]) -> List[Any]:
    """
    Coerce `args_by_name`, run the function once and return its non-failure results.

    Raises ConversionError when an argument cannot be coerced and InvocationError
    when the function returns a failure or raises. No retries, no timeout.
    """
    coerced = coerce_arguments(descriptor, args_by_name)

    try:
        results, failure = descriptor.adapter(context, coerced)
    except Exception as e:
        logger.debug("%s raised %s", descriptor.name, type(e).__name__)
        raise _as_invocation_error(descriptor, e) from e

    if _is_failure(failure):
        err = _as_invocation_error(descriptor, failure)
        if isinstance(failure, BaseException) and failure is not err:
            raise err from failure
        raise err

    return results
