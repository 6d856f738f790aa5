from __future__ import annotations

import collections.abc
import inspect
import logging
import types
import typing
from typing import Any, Callable, Dict, List, Optional, Tuple, get_args, get_origin

from funcbridge.errors import InvalidSignature, InvocationError
from funcbridge.invoke.context import CallContext

from .types import (
    ArgDescriptor,
    Float32,
    Float64,
    FunctionDescriptor,
    Int8,
    Int16,
    Int32,
    Int64,
    ReturnDescriptor,
    SemanticKind,
    SemanticType,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)

logger = logging.getLogger(__name__)

_POSITIONAL = (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)

_SIZED: Dict[Any, SemanticType] = {
    Int8: SemanticType(SemanticKind.INTEGER, "Int8", bits=8),
    Int16: SemanticType(SemanticKind.INTEGER, "Int16", bits=16),
    Int32: SemanticType(SemanticKind.INTEGER, "Int32", bits=32),
    Int64: SemanticType(SemanticKind.INTEGER, "Int64", bits=64),
    UInt8: SemanticType(SemanticKind.INTEGER, "UInt8", bits=8, signed=False),
    UInt16: SemanticType(SemanticKind.INTEGER, "UInt16", bits=16, signed=False),
    UInt32: SemanticType(SemanticKind.INTEGER, "UInt32", bits=32, signed=False),
    UInt64: SemanticType(SemanticKind.INTEGER, "UInt64", bits=64, signed=False),
    Float32: SemanticType(SemanticKind.NUMBER, "Float32", bits=32),
    Float64: SemanticType(SemanticKind.NUMBER, "Float64", bits=64),
}

_PLAIN: Dict[Any, SemanticType] = {
    bool: SemanticType(SemanticKind.BOOLEAN, "bool"),
    int: SemanticType(SemanticKind.INTEGER, "int"),
    float: SemanticType(SemanticKind.NUMBER, "float", bits=64),
    str: SemanticType(SemanticKind.STRING, "str"),
}

_ANY_OBJECT = SemanticType(SemanticKind.OBJECT, "Any")


def _label(ann: Any) -> str:
    if ann is inspect.Parameter.empty:
        return "Any"
    if isinstance(ann, type):
        return ann.__name__
    return str(ann).replace("typing.", "")


def semantic_type(ann: Any) -> SemanticType:
    """Reduce a parameter/return annotation to its SemanticType."""
    if ann is inspect.Parameter.empty or ann is Any:
        return _ANY_OBJECT
    if ann in _SIZED:
        return _SIZED[ann]
    if ann in _PLAIN:
        return _PLAIN[ann]

    origin = get_origin(ann)
    args = get_args(ann)

    if ann is list or origin in (list, collections.abc.Sequence, collections.abc.MutableSequence):
        items = semantic_type(args[0]) if args else _ANY_OBJECT
        return SemanticType(SemanticKind.ARRAY, _label(ann), items=items)

    if origin is tuple and len(args) == 2 and args[1] is Ellipsis:
        return SemanticType(SemanticKind.ARRAY, _label(ann), items=semantic_type(args[0]))

    # No structural introspection: records, mappings and unions are opaque.
    python_type = ann if isinstance(ann, type) else None
    return SemanticType(SemanticKind.OBJECT, _label(ann), python_type=python_type)


def _is_union(origin: Any) -> bool:
    return origin is typing.Union or origin is types.UnionType


def _is_failure_type(ann: Any) -> bool:
    """True for E, Optional[E] and E | None where E is an exception class."""
    if isinstance(ann, type):
        return issubclass(ann, BaseException)
    if _is_union(get_origin(ann)):
        members = [a for a in get_args(ann) if a is not type(None)]
        return bool(members) and all(isinstance(a, type) and issubclass(a, BaseException) for a in members)
    return False


def _return_annotations(fn_name: str, ann: Any) -> Tuple[Any, ...]:
    if ann is inspect.Signature.empty:
        raise InvalidSignature.because(fn_name, "missing return annotation; the last return must be a failure slot")
    if _is_failure_type(ann):
        return ()
    if get_origin(ann) is tuple:
        args = get_args(ann)
        if not args or Ellipsis in args:
            raise InvalidSignature.because(fn_name, "variadic or empty tuple returns are not supported")
        if not _is_failure_type(args[-1]):
            raise InvalidSignature.because(fn_name, f"last return must be an exception type, got {_label(args[-1])}")
        return tuple(args[:-1])
    raise InvalidSignature.because(fn_name, f"last return must be an exception type, got {_label(ann)}")


def _signature(fn: Callable, fn_name: str) -> inspect.Signature:
    try:
        return inspect.signature(fn, eval_str=True)
    except (NameError, SyntaxError, TypeError) as e:
        raise InvalidSignature.because(fn_name, f"cannot resolve annotations ({e})") from e
    except ValueError as e:
        raise InvalidSignature.because(fn_name, f"no signature available ({e})") from e


def _check_context(fn_name: str, params: List[inspect.Parameter]) -> None:
    if not params:
        raise InvalidSignature.because(fn_name, "first parameter must be a CallContext")
    first = params[0]
    ann = first.annotation
    if first.kind not in _POSITIONAL or not (isinstance(ann, type) and issubclass(ann, CallContext)):
        raise InvalidSignature.because(
            fn_name, f"first parameter must be a CallContext, got {first.name}: {_label(ann)}"
        )


def parameter_names(fn: Callable) -> List[str]:
    """Declared names of the user-facing parameters (context excluded)."""
    sig = _signature(fn, getattr(fn, "__name__", repr(fn)))
    return list(sig.parameters)[1:]


def _build_adapter(fn: Callable, fn_name: str, names: Tuple[str, ...], n_returns: int):
    def adapter(context: CallContext, args_by_name: Dict[str, Any]) -> Tuple[List[Any], Any]:
        out = fn(context, *[args_by_name[n] for n in names])
        if n_returns == 0:
            return [], out
        if not isinstance(out, tuple) or len(out) != n_returns + 1:
            got = f"{len(out)}-tuple" if isinstance(out, tuple) else type(out).__name__
            return [], InvocationError.bad_return(fn_name, f"returned {got}, expected a {n_returns + 1}-tuple")
        return list(out[:-1]), out[-1]

    return adapter


def analyze(fn: Callable, name: Optional[str] = None, description: str = "") -> FunctionDescriptor:
    """
    Build the FunctionDescriptor for `fn`.

    The first parameter must be annotated CallContext and the return annotation
    must end in a failure slot (an exception type, optionally Optional). Arguments
    are named arg1, arg2, ... until the registry applies overrides.
    """
    fn_name = name or getattr(fn, "__name__", None) or repr(fn)
    sig = _signature(fn, fn_name)
    params = list(sig.parameters.values())
    _check_context(fn_name, params)

    args: List[ArgDescriptor] = []
    for i, p in enumerate(params[1:], start=1):
        if p.kind not in _POSITIONAL:
            raise InvalidSignature.because(fn_name, f"parameter {p.name!r} must be positional ({p.kind.description})")
        arg = ArgDescriptor(name=f"arg{i}", semantic_type=semantic_type(p.annotation))
        if p.default is not inspect.Parameter.empty:
            arg = ArgDescriptor(name=arg.name, semantic_type=arg.semantic_type, default=p.default)
        args.append(arg)

    return_anns = _return_annotations(fn_name, sig.return_annotation)
    returns = tuple(ReturnDescriptor(semantic_type=semantic_type(a)) for a in return_anns)

    descriptor = FunctionDescriptor(
        name=fn_name,
        description=description or (inspect.getdoc(fn) or "").split("\n\n")[0],
        args=tuple(args),
        returns=returns,
        adapter=_build_adapter(fn, fn_name, tuple(a.name for a in args), len(returns)),
    )
    logger.debug("analyzed %s: %d args, %d returns", fn_name, len(args), len(returns))
    return descriptor
