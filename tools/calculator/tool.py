from __future__ import annotations

import logging
from typing import Optional

from funcbridge.errors import PathNotMounted
from funcbridge.invoke import CallContext

logger = logging.getLogger(__name__)


def add(ctx: CallContext, x: int, y: int) -> tuple[int, Optional[Exception]]:
    """Adds two integers together."""
    env = ctx.env
    if env.getenv("DEBUG") == "true":
        try:
            env.write_file("debug.log", f"Adding {x} + {y}")
        except (OSError, PathNotMounted) as e:
            logger.warning("debug.log not written: %s", e)
    return x + y, None


def divide(ctx: CallContext, x: float, y: float) -> tuple[float, float, Optional[Exception]]:
    """Quotient and remainder; dividing by zero is a failure."""
    if y == 0:
        return 0.0, 0.0, ZeroDivisionError("division by zero")
    return x // y, x % y, None


def total(ctx: CallContext, values: list[float]) -> tuple[float, Optional[Exception]]:
    return sum(values), None
