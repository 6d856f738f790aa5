from __future__ import annotations

import logging
from typing import Optional

from .engine import AuditStore

logger = logging.getLogger(__name__)


def init_db(database_url: Optional[str] = None) -> str:
    """Create the audit tables. Returns the database URL used."""
    store = AuditStore(database_url, create_tables=False)
    try:
        store.create_all()
    finally:
        store.dispose()
    logger.info("audit tables created at %s", store.url)
    return store.url
