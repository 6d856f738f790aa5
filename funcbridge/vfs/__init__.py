from .environment import FileInfo, VirtualEnvironment
from .locks import ReadWriteLock
from .resolver import MountTable, clean_virtual_path, resolve_path

__all__ = [
    "FileInfo",
    "MountTable",
    "ReadWriteLock",
    "VirtualEnvironment",
    "clean_virtual_path",
    "resolve_path",
]
