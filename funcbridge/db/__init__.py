from .engine import AuditStore
from .init_db import init_db
from .models import Base, CallRun, Event

__all__ = ["AuditStore", "Base", "CallRun", "Event", "init_db"]
