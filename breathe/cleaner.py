"""Safe deletion of files and directories, to the trash or permanently."""

from __future__ import annotations

import os
import shutil
from pathlib import Path

from .history import HistoryDB, Operation, OpType

_PROTECTED_PATHS = frozenset(
    {
        "/", "/usr", "/etc", "/var", "/tmp", "/opt",
        "/bin", "/sbin", "/lib", "/lib64",
        "/System", "/Library", "/Applications",
        "/Windows", "/Program Files",
        "/home", "/root",
    }
)


class ProtectedPathError(ValueError):
    """Raised when asked to delete a path that must never be deleted."""

    def __init__(self, detail: str) -> None:
        super().__init__(f"refusing to delete protected system path: {detail}")


class PathTraversalError(ValueError):
    """Raised when a path contains ``..``."""

    def __init__(self) -> None:
        super().__init__("path contains directory traversal")


def _home() -> str:
    try:
        return str(Path.home())
    except (RuntimeError, KeyError):
        return ""


def _clean(path: str) -> str:
    cleaned = os.path.normpath(path)
    if cleaned.startswith("//"):
        cleaned = "/" + cleaned.lstrip("/")
    return cleaned


def validate_path(path: str) -> None:
    """Raise unless ``path`` is absolute and safe to delete."""
    if not os.path.isabs(path):
        raise ValueError("path must be absolute")
    cleaned = _clean(path)
    if ".." in path:
        raise PathTraversalError()
    if cleaned in _PROTECTED_PATHS:
        raise ProtectedPathError(path)
    if cleaned == _home():
        raise ProtectedPathError("home directory")
    parts = cleaned.split(os.sep)
    if len(parts) <= 2 and parts[0] == "":
        raise ProtectedPathError("top-level directory")


def _tree_size(path: str) -> int:
    total = 0
    for directory, dirnames, filenames in os.walk(path):
        names = filenames + [d for d in dirnames if os.path.islink(os.path.join(directory, d))]
        for name in names:
            try:
                total += os.lstat(os.path.join(directory, name)).st_size
            except OSError:
                continue
    return total


class Cleaner:
    """Deletes paths after validation and records what was done."""

    def __init__(self, db: HistoryDB | None, use_trash: bool) -> None:
        self.db = db
        self.use_trash = use_trash

    def delete(self, path: str) -> Operation:
        """Trash or remove ``path`` and return the operation that was performed."""
        validate_path(path)
        info = os.stat(path)
        is_dir = os.path.isdir(path)
        size = _tree_size(path) if is_dir else info.st_size

        dest_path = ""
        if self.use_trash:
            op_type = OpType.TRASH
            dest_path = self._move_to_trash(path)
        else:
            op_type = OpType.DELETE
            if is_dir and not os.path.islink(path):
                shutil.rmtree(path)
            else:
                os.remove(path)

        op = Operation(
            type=op_type,
            source_path=path,
            dest_path=dest_path,
            file_size=size,
            reversible=self.use_trash,
        )
        if self.db is not None:
            op.id = self.db.record(op)
        return op

    @staticmethod
    def _move_to_trash(path: str) -> str:
        trash = os.path.join(_home(), ".Trash")
        name = os.path.basename(_clean(path))
        target = os.path.join(trash, name)
        if os.path.exists(target):
            target = os.path.join(trash, f"{name}_{os.getpid()}")
        os.rename(path, target)
        return target