from __future__ import annotations

from pathlib import Path
from typing import Optional

import pytest

from funcbridge import App, AppConfig
from funcbridge.invoke import CallContext
from funcbridge.vfs import VirtualEnvironment

REPO_ROOT = Path(__file__).resolve().parents[1]
TOOLS_ROOT = REPO_ROOT / "tools"


def add(ctx: CallContext, x: int, y: int) -> tuple[int, Optional[Exception]]:
    """Adds two integers together."""
    return x + y, None


@pytest.fixture
def sandbox(tmp_path: Path) -> Path:
    root = tmp_path / "sandbox"
    root.mkdir()
    return root


@pytest.fixture
def env(sandbox: Path) -> VirtualEnvironment:
    return VirtualEnvironment({"DEBUG": "true"}, {str(sandbox): "/"})


@pytest.fixture
def ctx(env: VirtualEnvironment) -> CallContext:
    return CallContext(env=env, request_id="test-request")


@pytest.fixture
def app(sandbox: Path) -> App:
    a = App(AppConfig(mounts=[(str(sandbox), "/")]))
    a.register(add, name="Add", description="Adds two integers together")
    return a
