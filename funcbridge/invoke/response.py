from __future__ import annotations

from typing import Any, Dict, Sequence

from funcbridge.registry.schema import result_keys


def build_success_response(results: Sequence[Any]) -> Dict[str, Any]:
    """{} for no results, {"result": v} for one, {"result0": .., "result1": ..} for more."""
    return dict(zip(result_keys(len(results)), results))


def build_error_response(message: str) -> Dict[str, Any]:
    return {"error": message}
