from __future__ import annotations

import json
from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.orm import Session as DBSession

from .models import CallRun, Event


def _json_safe(value: Any) -> Any:
    # Function results can be arbitrary objects; store their text form.
    try:
        return json.loads(json.dumps(value, default=str))
    except (TypeError, ValueError):
        return repr(value)


def log_event(
    db: DBSession,
    request_id: str,
    event_type: str,
    payload: Optional[Dict[str, Any]] = None,
) -> None:
    db.add(Event(
        request_id=request_id,
        event_type=event_type,
        payload_json=_json_safe(payload or {}),
    ))


def create_call_run(
    db: DBSession,
    request_id: str,
    function_name: str,
    channel: str,
    args_json: Dict[str, Any],
    status: str = "started",
) -> str:
    run = CallRun(
        request_id=request_id,
        function_name=function_name,
        channel=channel,
        status=status,
        args_json=_json_safe(args_json),
        results_json=[],
        error_json={},
        latency_ms=0,
    )
    db.add(run)
    db.flush()  # assigns call_run_id
    return run.call_run_id


def finalize_call_run(
    db: DBSession,
    call_run_id: str,
    status: str,
    results: List[Any],
    error_json: Dict[str, Any],
    latency_ms: int,
) -> None:
    run: CallRun = db.get(CallRun, call_run_id)
    run.status = status
    run.results_json = _json_safe(results or [])
    run.error_json = _json_safe(error_json or {})
    run.latency_ms = latency_ms


def get_call_run(db: DBSession, call_run_id: str) -> CallRun | None:
    return db.get(CallRun, call_run_id)


def list_call_runs(db: DBSession, function_name: Optional[str] = None, limit: int = 20) -> list[CallRun]:
    stmt = select(CallRun).order_by(CallRun.ts.desc()).limit(limit)
    if function_name:
        stmt = stmt.where(CallRun.function_name == function_name)
    return list(db.execute(stmt).scalars().all())


def list_events(db: DBSession, request_id: str) -> list[Event]:
    stmt = select(Event).where(Event.request_id == request_id).order_by(Event.ts)
    return list(db.execute(stmt).scalars().all())
