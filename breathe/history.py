"""Persistent log of file operations, stored in SQLite."""

from __future__ import annotations

import json
import os
import sqlite3
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum

_TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"

_SCHEMA = """
CREATE TABLE IF NOT EXISTS operations (
    id INTEGER PRIMARY KEY,
    timestamp DATETIME DEFAULT CURRENT_TIMESTAMP,
    operation TEXT NOT NULL,
    source_path TEXT NOT NULL,
    dest_path TEXT,
    file_size INTEGER,
    file_hash TEXT,
    reversible BOOLEAN DEFAULT 0,
    metadata JSON
);
CREATE INDEX IF NOT EXISTS idx_source ON operations(source_path);
CREATE INDEX IF NOT EXISTS idx_timestamp ON operations(timestamp);
"""

_SELECT = (
    "SELECT id, timestamp, operation, source_path, dest_path, file_size, "
    "file_hash, reversible, metadata FROM operations"
)


class OpType(str, Enum):
    """Kind of recorded operation."""

    MOVE = "move"
    DELETE = "delete"
    TRASH = "trash"


@dataclass
class Operation:
    """One recorded file operation."""

    type: OpType
    source_path: str
    dest_path: str = ""
    file_size: int = 0
    file_hash: str = ""
    reversible: bool = False
    metadata: dict[str, str] = field(default_factory=dict)
    id: int = 0
    timestamp: datetime | None = None


class OperationNotFound(LookupError):
    """Raised when no operation has the requested id."""


def _parse_timestamp(value: object) -> datetime | None:
    if not isinstance(value, str):
        return None
    try:
        return datetime.strptime(value, _TIMESTAMP_FORMAT).replace(tzinfo=timezone.utc)
    except ValueError:
        return None


def _row_to_operation(row: tuple) -> Operation:
    op_id, stamp, kind, source, dest, size, digest, reversible, metadata = row
    meta: dict[str, str] = {}
    if metadata is not None:
        try:
            meta = json.loads(metadata) or {}
        except ValueError:
            meta = {}
    return Operation(
        type=OpType(kind),
        source_path=source,
        dest_path=dest or "",
        file_size=size or 0,
        file_hash=digest or "",
        reversible=bool(reversible),
        metadata=meta,
        id=op_id,
        timestamp=_parse_timestamp(stamp),
    )


class HistoryDB:
    """Operation history backed by an SQLite file."""

    def __init__(self, path: str | os.PathLike) -> None:
        path = os.fspath(path)
        os.makedirs(os.path.dirname(path) or ".", mode=0o755, exist_ok=True)
        self._conn = sqlite3.connect(path, check_same_thread=False)
        try:
            self._conn.executescript(_SCHEMA)
        except sqlite3.Error:
            self._conn.close()
            raise

    def close(self) -> None:
        """Close the database connection."""
        self._conn.close()

    def __enter__(self) -> HistoryDB:
        return self

    def __exit__(self, *args) -> None:
        self.close()

    def record(self, op: Operation) -> int:
        """Store an operation and return its new id."""
        with self._conn:
            cursor = self._conn.execute(
                "INSERT INTO operations (operation, source_path, dest_path, file_size, "
                "file_hash, reversible, metadata) VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    OpType(op.type).value,
                    op.source_path,
                    op.dest_path,
                    op.file_size,
                    op.file_hash,
                    op.reversible,
                    json.dumps(op.metadata),
                ),
            )
        return cursor.lastrowid

    def search(self, query: str) -> list[Operation]:
        """Return operations whose source or destination contains ``query``, newest first."""
        pattern = f"%{query}%"
        rows = self._conn.execute(
            f"{_SELECT} WHERE source_path LIKE ? OR dest_path LIKE ? "
            "ORDER BY timestamp DESC, id DESC",
            (pattern, pattern),
        )
        return [_row_to_operation(row) for row in rows]

    def since(self, moment: datetime) -> list[Operation]:
        """Return operations recorded at or after ``moment``, newest first."""
        if moment.tzinfo is None:
            moment = moment.astimezone()
        stamp = moment.astimezone(timezone.utc).strftime(_TIMESTAMP_FORMAT)
        rows = self._conn.execute(
            f"{_SELECT} WHERE timestamp >= ? ORDER BY timestamp DESC, id DESC",
            (stamp,),
        )
        return [_row_to_operation(row) for row in rows]

    def get(self, op_id: int) -> Operation:
        """Return the operation with the given id."""
        row = self._conn.execute(f"{_SELECT} WHERE id = ?", (op_id,)).fetchone()
        if row is None:
            raise OperationNotFound(f"operation not found: {op_id}")
        return _row_to_operation(row)


def format_size(size: int) -> str:
    """Format a byte count with binary units, e.g. ``1.5 KB``."""
    unit = 1024
    if size < unit:
        return f"{size} B"
    div, exp = unit, 0
    n = size // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{size / div:.1f} {'KMGTPE'[exp]}B"