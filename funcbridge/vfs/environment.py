from __future__ import annotations

import errno
import logging
import os
import posixpath
import stat
from dataclasses import dataclass
from fnmatch import fnmatchcase
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Union

from .locks import ReadWriteLock
from .resolver import MountSource, MountTable, clean_virtual_path, resolve_path

logger = logging.getLogger(__name__)

FILE_MODE = 0o644


@dataclass(frozen=True)
class FileInfo:
    name: str
    size: int
    is_dir: bool


def _as_bytes(data: Union[bytes, bytearray, memoryview, str]) -> bytes:
    if isinstance(data, str):
        return data.encode("utf-8")
    return bytes(data)


class VirtualEnvironment:
    """
    Sandbox handed to invoked functions.

    Environment variables and mounts are fixed at construction. The current
    directory is the only mutable state and sits behind a read/write lock.
    Every path argument is virtual; anything outside the mounts raises
    PathNotMounted, host I/O failures surface as the builtin OSError subclasses.
    """

    def __init__(
        self,
        env_vars: Optional[Mapping[str, str]] = None,
        mounts: Optional[MountSource] = None,
        cwd: str = "/",
        strict_mounts: bool = False,
    ):
        self._env: Mapping[str, str] = MappingProxyType(dict(env_vars or {}))
        self._mounts = MountTable(mounts, strict=strict_mounts)
        self._cwd = clean_virtual_path(cwd)
        self._lock = ReadWriteLock()

    def __repr__(self) -> str:
        return f"VirtualEnvironment(mounts={dict(self._mounts)!r}, cwd={self._cwd!r})"

    # ---- environment variables ----

    def getenv(self, key: str) -> str:
        return self._env.get(key, "")

    def list_env(self) -> Dict[str, str]:
        return dict(self._env)

    @property
    def mounts(self) -> MountTable:
        return self._mounts

    # ---- paths ----

    def resolve_path(self, virtual_path: str) -> str:
        with self._lock.read():
            cwd = self._cwd
        return resolve_path(self._mounts, cwd, virtual_path)

    def get_current_directory(self) -> str:
        with self._lock.read():
            return self._cwd

    def change_current_directory(self, virtual_path: str) -> None:
        with self._lock.write():
            host = resolve_path(self._mounts, self._cwd, virtual_path)
            st = os.stat(host)
            if not stat.S_ISDIR(st.st_mode):
                raise NotADirectoryError(errno.ENOTDIR, os.strerror(errno.ENOTDIR), virtual_path)
            self._cwd = clean_virtual_path(virtual_path, self._cwd)
            logger.debug("cwd -> %s", self._cwd)

    # ---- file operations ----

    def write_file(self, path: str, data: Union[bytes, str]) -> None:
        host = self.resolve_path(path)
        fd = os.open(host, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, "wb") as f:
            f.write(_as_bytes(data))

    def read_file(self, path: str, offset: int = 0, length: int = -1) -> bytes:
        """
        Read up to `length` bytes starting at `offset`.

        Hitting end of file early returns the shorter data. `length=-1` means
        the rest of the file; other negative lengths raise ValueError.
        """
        if length < -1:
            raise ValueError(f"negative read length: {length}")
        host = self.resolve_path(path)
        with open(host, "rb") as f:
            if offset > 0:
                f.seek(offset)
            if length == -1:
                return f.read()
            chunks = []
            remaining = length
            while remaining > 0:
                chunk = f.read(remaining)
                if not chunk:
                    break
                chunks.append(chunk)
                remaining -= len(chunk)
            return b"".join(chunks)

    def rewrite_file(self, path: str, offset: int, data: Union[bytes, str]) -> None:
        """Overwrite bytes of an existing file in place, starting at `offset`."""
        if offset < 0:
            raise ValueError(f"negative offset: {offset}")
        host = self.resolve_path(path)
        fd = os.open(host, os.O_WRONLY)
        with os.fdopen(fd, "wb") as f:
            f.seek(offset)
            f.write(_as_bytes(data))

    def copy_file(self, src: str, dst: str) -> None:
        src_host = self.resolve_path(src)
        dst_host = self.resolve_path(dst)
        with open(src_host, "rb") as f:
            data = f.read()
        fd = os.open(dst_host, os.O_WRONLY | os.O_CREAT | os.O_TRUNC, FILE_MODE)
        with os.fdopen(fd, "wb") as f:
            f.write(data)

    def remove_file(self, path: str) -> None:
        os.remove(self.resolve_path(path))

    def chmod(self, path: str, mode: int) -> None:
        os.chmod(self.resolve_path(path), mode)

    def list_file(self, path: str) -> List[FileInfo]:
        """Entries of one directory, sorted by name. Symlinks are not followed."""
        host = self.resolve_path(path)
        with os.scandir(host) as it:
            entries = sorted(it, key=lambda e: e.name)
        return [
            FileInfo(
                name=e.name,
                size=e.stat(follow_symlinks=False).st_size,
                is_dir=e.is_dir(follow_symlinks=False),
            )
            for e in entries
        ]

    def find_file(self, root: str, pattern: str, recursive: bool = False) -> List[str]:
        """
        Virtual paths under `root` whose entry name matches the glob `pattern`.

        Names are matched case-sensitively. Without `recursive` only the direct
        children of `root` are considered. Results come in lexical depth-first order
        and are always absolute, even for a relative `root`.
        """
        with self._lock.read():
            cwd = self._cwd
        host_root = resolve_path(self._mounts, cwd, root)
        virtual_root = clean_virtual_path(root, cwd)

        found: List[str] = []

        def walk(host_dir: str, virtual_dir: str) -> None:
            with os.scandir(host_dir) as it:
                entries = sorted(it, key=lambda e: e.name)
            for e in entries:
                vpath = posixpath.join(virtual_dir, e.name)
                if fnmatchcase(e.name, pattern):
                    found.append(vpath)
                if recursive and e.is_dir(follow_symlinks=False):
                    walk(e.path, vpath)

        walk(host_root, virtual_root)
        return found
