from __future__ import annotations

from dataclasses import dataclass, field, replace
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Dict, List, NewType, Optional, Tuple


# Sized numeric annotations. At runtime these are plain int/float values;
# the coercer uses them to pick the target width.
Int8 = NewType("Int8", int)
Int16 = NewType("Int16", int)
Int32 = NewType("Int32", int)
Int64 = NewType("Int64", int)
UInt8 = NewType("UInt8", int)
UInt16 = NewType("UInt16", int)
UInt32 = NewType("UInt32", int)
UInt64 = NewType("UInt64", int)
Float32 = NewType("Float32", float)
Float64 = NewType("Float64", float)


class SemanticKind(str, Enum):
    INTEGER = "integer"
    NUMBER = "number"
    STRING = "string"
    BOOLEAN = "boolean"
    ARRAY = "array"
    OBJECT = "object"


@dataclass(frozen=True)
class SemanticType:
    """Declared type of an argument or return, reduced to what coercion and schemas need."""
    kind: SemanticKind
    label: str                              # e.g. "int", "UInt32", "list[str]"
    bits: Optional[int] = None              # width for sized integers / Float32
    signed: bool = True
    items: Optional["SemanticType"] = None  # element type for arrays
    python_type: Any = None                 # concrete class for object targets

    @property
    def is_integer(self) -> bool:
        return self.kind is SemanticKind.INTEGER

    @property
    def is_float(self) -> bool:
        return self.kind is SemanticKind.NUMBER

    def zero(self) -> Any:
        if self.kind is SemanticKind.INTEGER:
            return 0
        if self.kind is SemanticKind.NUMBER:
            return 0.0
        if self.kind is SemanticKind.STRING:
            return ""
        if self.kind is SemanticKind.BOOLEAN:
            return False
        if self.kind is SemanticKind.ARRAY:
            return []
        return None


_NO_DEFAULT = object()


@dataclass(frozen=True)
class ArgDescriptor:
    name: str
    semantic_type: SemanticType
    description: str = ""
    default: Any = field(default=_NO_DEFAULT, repr=False, compare=False)

    @property
    def has_default(self) -> bool:
        return self.default is not _NO_DEFAULT


@dataclass(frozen=True)
class ReturnDescriptor:
    semantic_type: SemanticType
    description: str = ""


# (context, coerced args by name) -> (ordered results, failure or None)
Adapter = Callable[[Any, Dict[str, Any]], Tuple[List[Any], Any]]


@dataclass(frozen=True)
class FunctionDescriptor:
    """Registration-time metadata for one callable. Context and failure slots are excluded."""
    name: str
    description: str
    args: Tuple[ArgDescriptor, ...]
    returns: Tuple[ReturnDescriptor, ...]
    adapter: Adapter = field(repr=False, compare=False)
    source: str = "code"                    # "code" or the manifest path it came from

    def with_param_names(self, names: List[str], descriptions: Optional[List[str]] = None) -> "FunctionDescriptor":
        """Override argument names/descriptions by index; extra entries are ignored."""
        descriptions = descriptions or []
        args = list(self.args)
        for i, name in enumerate(names):
            if i < len(args) and name:
                args[i] = replace(args[i], name=name)
        for i, desc in enumerate(descriptions):
            if i < len(args) and desc:
                args[i] = replace(args[i], description=desc)
        if len({a.name for a in args}) != len(args):
            raise ValueError(f"duplicate argument names for {self.name!r}: {[a.name for a in args]}")

        # The adapter was built against the old names; translate on the way in.
        old_by_new = {new.name: old.name for new, old in zip(args, self.args)}
        inner = self.adapter

        def adapter(context: Any, args_by_name: Dict[str, Any]) -> Tuple[List[Any], Any]:
            return inner(context, {old_by_new.get(k, k): v for k, v in args_by_name.items()})

        return replace(self, args=tuple(args), adapter=adapter)

    def with_return_descriptions(self, descriptions: List[str]) -> "FunctionDescriptor":
        returns = list(self.returns)
        for i, desc in enumerate(descriptions):
            if i < len(returns) and desc:
                returns[i] = replace(returns[i], description=desc)
        return replace(self, returns=tuple(returns))

    def arg_names(self) -> List[str]:
        return [a.name for a in self.args]


@dataclass(frozen=True)
class Param:
    """Explicit name/description for one argument, supplied at registration."""
    name: str
    description: str = ""


@dataclass(frozen=True)
class FunctionSpec:
    """Static function metadata discovered from a manifest."""
    name: str                              # e.g. "calculator.add"
    handler: str                           # e.g. "tools.calculator.tool:add"
    description: str = ""
    params: Tuple[Param, ...] = ()
    returns: Tuple[str, ...] = ()          # return descriptions by index
    manifest_path: Optional[Path] = None
