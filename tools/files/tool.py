from __future__ import annotations

from typing import Optional

from funcbridge.invoke import CallContext
from funcbridge.vfs import FileInfo


def write_text(ctx: CallContext, path: str, text: str) -> Optional[Exception]:
    ctx.env.write_file(path, text)
    return None


def read_text(ctx: CallContext, path: str, offset: int = 0, length: int = -1) -> tuple[str, Optional[Exception]]:
    data = ctx.env.read_file(path, offset, length)
    return data.decode("utf-8", errors="replace"), None


def list_dir(ctx: CallContext, path: str = ".") -> tuple[list[FileInfo], Optional[Exception]]:
    return ctx.env.list_file(path), None


def find(ctx: CallContext, root: str, pattern: str, recursive: bool = False) -> tuple[list[str], Optional[Exception]]:
    return ctx.env.find_file(root, pattern, recursive), None


def cwd(ctx: CallContext) -> tuple[str, Optional[Exception]]:
    return ctx.env.get_current_directory(), None
