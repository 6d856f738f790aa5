from __future__ import annotations

import logging
import os
import posixpath
from collections.abc import Mapping
from types import MappingProxyType
from typing import Iterable, Iterator, Optional, Tuple, Union

from funcbridge.errors import ConfigError, PathNotMounted

logger = logging.getLogger(__name__)

MountSource = Union[Mapping[str, str], Iterable[Tuple[str, str]]]


def clean_virtual_path(path: str, cwd: str = "/") -> str:
    """
    Lexically clean a virtual path, joining relative paths onto `cwd`.

    Pure string work: `.` and `..` collapse, `..` above `/` clamps to `/`,
    backslashes count as separators, no trailing slash except for `/`.
    """
    path = path.replace("\\", "/")
    if not path.startswith("/"):
        path = posixpath.join(cwd or "/", path)
    # normpath keeps a leading "//", collapse it first
    return posixpath.normpath("/" + path.lstrip("/"))


class MountTable(Mapping[str, str]):
    """
    Virtual prefix -> absolute host root.

    Built from host -> virtual pairs (a mapping, or an iterable of tuples in
    order). Two inputs normalizing to the same prefix: the later one wins with
    a warning, or ConfigError when `strict` is set.
    """

    def __init__(self, mounts: Optional[MountSource] = None, strict: bool = False):
        pairs = mounts.items() if isinstance(mounts, Mapping) else (mounts or ())
        table = {}
        for host, virtual in pairs:
            prefix = clean_virtual_path(virtual)
            host_root = os.path.abspath(host)
            if prefix in table and table[prefix] != host_root:
                if strict:
                    raise ConfigError.because(
                        f"duplicate mount for {prefix}: {table[prefix]} and {host_root}",
                        virtual=prefix,
                    )
                logger.warning("mount %s: %s overrides %s", prefix, host_root, table[prefix])
            table[prefix] = host_root
        self._table = MappingProxyType(table)

    def __getitem__(self, prefix: str) -> str:
        return self._table[prefix]

    def __iter__(self) -> Iterator[str]:
        return iter(self._table)

    def __len__(self) -> int:
        return len(self._table)

    def __repr__(self) -> str:
        return f"MountTable({dict(self._table)!r})"

    def match(self, cleaned: str) -> Optional[Tuple[str, str]]:
        """Longest prefix of `cleaned` ending on a path boundary, as (prefix, host_root)."""
        best: Optional[Tuple[str, str]] = None
        for prefix, host_root in self._table.items():
            if prefix == "/" or cleaned == prefix or cleaned.startswith(prefix + "/"):
                if best is None or len(prefix) > len(best[0]):
                    best = (prefix, host_root)
        return best


def resolve_path(mounts: MountTable, cwd: str, virtual_path: str) -> str:
    """Map a virtual path to its host path, or raise PathNotMounted."""
    cleaned = clean_virtual_path(virtual_path, cwd)
    hit = mounts.match(cleaned)
    if hit is None:
        raise PathNotMounted.for_path(cleaned)
    prefix, host_root = hit
    rest = cleaned[len(prefix):].lstrip("/")
    if not rest:
        return host_root
    return os.path.join(host_root, *rest.split("/"))
