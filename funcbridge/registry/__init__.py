from .analyzer import analyze, semantic_type
from .registry import FunctionRegistry
from .schema import request_schema, response_schema
from .types import (
    ArgDescriptor,
    Float32,
    Float64,
    FunctionDescriptor,
    Int8,
    Int16,
    Int32,
    Int64,
    Param,
    ReturnDescriptor,
    SemanticKind,
    SemanticType,
    UInt8,
    UInt16,
    UInt32,
    UInt64,
)

__all__ = [
    "ArgDescriptor",
    "Float32",
    "Float64",
    "FunctionDescriptor",
    "FunctionRegistry",
    "Int8",
    "Int16",
    "Int32",
    "Int64",
    "Param",
    "ReturnDescriptor",
    "SemanticKind",
    "SemanticType",
    "UInt8",
    "UInt16",
    "UInt32",
    "UInt64",
    "analyze",
    "request_schema",
    "response_schema",
    "semantic_type",
]
