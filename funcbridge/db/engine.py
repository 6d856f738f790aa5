from __future__ import annotations

import os
from contextlib import contextmanager
from typing import Iterator, Optional

from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

from funcbridge.config.config import DATABASE_URL_ENV

from .models import Base

DEFAULT_DATABASE_URL = "sqlite:///./funcbridge_audit.db"


def get_database_url() -> str:
    return os.getenv(DATABASE_URL_ENV, DEFAULT_DATABASE_URL)


def make_engine(url: str) -> Engine:
    # SQLite needs this flag for multithreaded use; harmless otherwise
    connect_args = {"check_same_thread": False} if url.startswith("sqlite") else {}
    return create_engine(url, echo=False, connect_args=connect_args)


class AuditStore:
    """Engine + session factory for the call-audit ledger."""

    def __init__(self, database_url: Optional[str] = None, create_tables: bool = True):
        self.url = database_url or get_database_url()
        self.engine = make_engine(self.url)
        self._session_factory = sessionmaker(
            bind=self.engine,
            autoflush=False,
            expire_on_commit=False,
        )
        if create_tables:
            self.create_all()

    def create_all(self) -> None:
        Base.metadata.create_all(bind=self.engine)

    @contextmanager
    def session(self) -> Iterator[Session]:
        session: Session = self._session_factory()
        try:
            yield session
            session.commit()
        except Exception:
            session.rollback()
            raise
        finally:
            session.close()

    def dispose(self) -> None:
        self.engine.dispose()
