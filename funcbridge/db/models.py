from __future__ import annotations

import uuid
from datetime import datetime, timezone

from sqlalchemy import DateTime, Integer, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column
from sqlalchemy.types import JSON


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Base(DeclarativeBase):
    pass


class Event(Base):
    __tablename__ = "events"

    event_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    ts: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    request_id: Mapped[str] = mapped_column(String(64), index=True)
    event_type: Mapped[str] = mapped_column(String(64), index=True)  # call_started|call_succeeded|call_failed
    payload_json: Mapped[dict] = mapped_column(JSON, default=dict)


class CallRun(Base):
    __tablename__ = "call_runs"

    call_run_id: Mapped[str] = mapped_column(String(64), primary_key=True, default=lambda: str(uuid.uuid4()))
    ts: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow)

    request_id: Mapped[str] = mapped_column(String(64), index=True)
    function_name: Mapped[str] = mapped_column(String(256), index=True)
    channel: Mapped[str] = mapped_column(String(32), default="local")
    status: Mapped[str] = mapped_column(String(32), index=True)  # started|ok|error

    args_json: Mapped[dict] = mapped_column(JSON, default=dict)
    results_json: Mapped[list] = mapped_column(JSON, default=list)
    error_json: Mapped[dict] = mapped_column(JSON, default=dict)

    latency_ms: Mapped[int] = mapped_column(Integer, default=0)
