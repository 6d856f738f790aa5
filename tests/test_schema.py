from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from funcbridge.invoke import CallContext
from funcbridge.registry import FunctionRegistry, Int64, Param, analyze, request_schema, response_schema


@dataclass
class Config:
    name: str


def shape(
    ctx: CallContext,
    count: Int64,
    ratio: float,
    label: str,
    on: bool,
    tags: list[str],
    cfg: Config,
) -> tuple[int, Optional[Exception]]:
    return count, None


def pair(ctx: CallContext, a: str) -> tuple[str, list[int], Optional[Exception]]:
    return a, [], None


def nothing(ctx: CallContext) -> Optional[Exception]:
    return None


def test_request_schema_types_and_required():
    d = analyze(shape).with_param_names(["count", "ratio", "label", "on", "tags", "cfg"])
    s = request_schema(d)
    assert s["type"] == "object"
    assert list(s["properties"]) == ["count", "ratio", "label", "on", "tags", "cfg"]
    assert s["properties"]["count"] == {"type": "integer"}
    assert s["properties"]["ratio"] == {"type": "number"}
    assert s["properties"]["label"] == {"type": "string"}
    assert s["properties"]["on"] == {"type": "boolean"}
    assert s["properties"]["tags"] == {"type": "array", "items": {"type": "string"}}
    # records are not introspected
    assert s["properties"]["cfg"] == {"type": "string"}
    assert s["required"] == ["count", "ratio", "label", "on", "tags", "cfg"]


def test_descriptions_attach_to_properties():
    reg = FunctionRegistry()
    d = reg.register(
        pair,
        params=[Param("a", "input text")],
        returns=["echo", "numbers"],
    )
    req = request_schema(d)
    assert req["properties"]["a"] == {"type": "string", "description": "input text"}

    resp = response_schema(d)
    assert resp["properties"] == {
        "result0": {"type": "string", "description": "echo"},
        "result1": {"type": "array", "items": {"type": "integer"}, "description": "numbers"},
    }


def test_single_return_uses_result_key():
    resp = response_schema(analyze(shape))
    assert list(resp["properties"]) == ["result"]


def test_no_returns_has_no_response_schema():
    assert response_schema(analyze(nothing)) is None
    assert request_schema(analyze(nothing))["required"] == []
