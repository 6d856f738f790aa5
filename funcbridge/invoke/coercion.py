from __future__ import annotations

import math
import re
from typing import Any, Dict, Mapping

from funcbridge.errors import ConversionError
from funcbridge.registry.types import ArgDescriptor, FunctionDescriptor, SemanticKind, SemanticType

_INT_TEXT = re.compile(r"[+-]?[0-9]+")
_BOOL_TEXT = {"true": True, "false": False, "1": True, "0": False}
_FLOAT32_MAX = 3.4028234663852886e38
_MAX_INT_DIGITS = 4300


def _source(value: Any) -> str:
    return type(value).__name__


def _preview(value: str, limit: int = 40) -> str:
    return value if len(value) <= limit else f"{value[:limit]}... ({len(value)} chars)"


def _fail(name: str, value: Any, st: SemanticType, reason: str = "") -> ConversionError:
    return ConversionError.for_argument(name, _source(value), st.label, reason or None)


def fit_integer(value: int, st: SemanticType) -> int:
    """Truncate-and-reinterpret `value` into the target width (no-op for plain int)."""
    if st.bits is None:
        return value
    value &= (1 << st.bits) - 1
    if st.signed and value >= 1 << (st.bits - 1):
        value -= 1 << st.bits
    return value


def _in_range(value: int, st: SemanticType) -> bool:
    if st.bits is None:
        return True
    if st.signed:
        return -(1 << (st.bits - 1)) <= value < (1 << (st.bits - 1))
    return 0 <= value < (1 << st.bits)


def _to_integer(name: str, value: Any, st: SemanticType) -> int:
    if isinstance(value, bool):
        raise _fail(name, value, st)
    if isinstance(value, int):
        return fit_integer(value, st)
    if isinstance(value, float):
        if not math.isfinite(value):
            raise _fail(name, value, st, "not a finite number")
        return fit_integer(math.trunc(value), st)
    if isinstance(value, str):
        if not _INT_TEXT.fullmatch(value) or (not st.signed and value.startswith("-")):
            raise _fail(name, value, st, f"invalid integer literal {_preview(value)!r}")
        too_long = f"integer literal too long ({len(value)} chars)"
        if len(value.lstrip("+-")) > _MAX_INT_DIGITS:
            raise _fail(name, value, st, too_long)
        try:
            parsed = int(value)
        except ValueError as e:
            # int() refuses digit strings past sys.get_int_max_str_digits()
            raise _fail(name, value, st, too_long) from e
        if not _in_range(parsed, st):
            raise _fail(name, value, st, f"{_preview(value)} out of range")
        return parsed
    raise _fail(name, value, st)


def _to_float(name: str, value: Any, st: SemanticType) -> float:
    if isinstance(value, bool):
        raise _fail(name, value, st)
    if isinstance(value, float):
        return value
    if isinstance(value, int):
        try:
            return float(value)
        except OverflowError as e:
            raise _fail(name, value, st, "out of range") from e
    if isinstance(value, str):
        try:
            parsed = float(value)
        except ValueError as e:
            raise _fail(name, value, st, f"invalid number literal {value!r}") from e
        if st.bits == 32 and math.isfinite(parsed) and abs(parsed) > _FLOAT32_MAX:
            raise _fail(name, value, st, f"{value} out of range")
        return parsed
    raise _fail(name, value, st)


def _to_bool(name: str, value: Any, st: SemanticType) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value in _BOOL_TEXT:
        return _BOOL_TEXT[value]
    raise _fail(name, value, st)


def coerce_value(name: str, value: Any, st: SemanticType) -> Any:
    """Convert one supplied value to `st`, raising ConversionError on mismatch."""
    kind = st.kind
    if kind is SemanticKind.INTEGER:
        return _to_integer(name, value, st)
    if kind is SemanticKind.NUMBER:
        return _to_float(name, value, st)
    if kind is SemanticKind.BOOLEAN:
        return _to_bool(name, value, st)
    if kind is SemanticKind.STRING:
        if isinstance(value, str):
            return value
        raise _fail(name, value, st)
    if kind is SemanticKind.ARRAY:
        if not isinstance(value, (list, tuple)):
            raise _fail(name, value, st)
        items = st.items
        if items is None:
            return list(value)
        return [
            coerce_value(f"{name}[{i}]", v, items) if v is not None else items.zero()
            for i, v in enumerate(value)
        ]
    if st.python_type is not None and not isinstance(value, st.python_type):
        raise _fail(name, value, st)
    return value


def coerce_argument(arg: ArgDescriptor, args_by_name: Mapping[str, Any]) -> Any:
    value = args_by_name.get(arg.name)
    if value is None:
        return arg.default if arg.has_default else arg.semantic_type.zero()
    return coerce_value(arg.name, value, arg.semantic_type)


def coerce_arguments(descriptor: FunctionDescriptor, args_by_name: Mapping[str, Any]) -> Dict[str, Any]:
    """
    Coerce an untyped argument bag into typed call arguments, in declaration order.

    Missing (or null) arguments take the declared default or the type's zero
    value; they never fail. Unknown keys are ignored.
    """
    return {arg.name: coerce_argument(arg, args_by_name) for arg in descriptor.args}
