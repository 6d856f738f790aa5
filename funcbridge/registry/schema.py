from __future__ import annotations

from typing import Any, Dict, Optional

from .types import FunctionDescriptor, SemanticKind, SemanticType

JSON_SCHEMA_DRAFT = "https://json-schema.org/draft/2020-12/schema"


def type_schema(st: SemanticType) -> Dict[str, Any]:
    # Objects have no nested schema; they are documented as strings.
    if st.kind is SemanticKind.ARRAY:
        items = st.items if st.items is not None else SemanticType(SemanticKind.OBJECT, "Any")
        return {"type": "array", "items": type_schema(items)}
    if st.kind is SemanticKind.OBJECT:
        return {"type": "string"}
    return {"type": st.kind.value}


def request_schema(descriptor: FunctionDescriptor) -> Dict[str, Any]:
    """Object schema with one property per argument; every argument is listed as required."""
    properties: Dict[str, Any] = {}
    for arg in descriptor.args:
        prop = type_schema(arg.semantic_type)
        if arg.description:
            prop["description"] = arg.description
        properties[arg.name] = prop
    return {
        "$schema": JSON_SCHEMA_DRAFT,
        "title": f"{descriptor.name} request",
        "type": "object",
        "properties": properties,
        "required": [a.name for a in descriptor.args],
    }


def result_keys(count: int) -> list:
    if count == 1:
        return ["result"]
    return [f"result{i}" for i in range(count)]


def response_schema(descriptor: FunctionDescriptor) -> Optional[Dict[str, Any]]:
    if not descriptor.returns:
        return None
    properties: Dict[str, Any] = {}
    for key, ret in zip(result_keys(len(descriptor.returns)), descriptor.returns):
        prop = type_schema(ret.semantic_type)
        if ret.description:
            prop["description"] = ret.description
        properties[key] = prop
    return {
        "$schema": JSON_SCHEMA_DRAFT,
        "title": f"{descriptor.name} response",
        "type": "object",
        "properties": properties,
    }
