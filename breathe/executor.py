"""Carries out an organize plan, moving files and logging each move."""

from __future__ import annotations

import hashlib
import os
from datetime import date

from .history import HistoryDB, Operation, OpType
from .rules import FilePlan, Plan


def file_hash(path: str) -> str:
    """Return the SHA-256 hex digest of the file at ``path``."""
    digest = hashlib.sha256()
    with open(path, "rb") as handle:
        for chunk in iter(lambda: handle.read(1 << 16), b""):
            digest.update(chunk)
    return digest.hexdigest()


def _split_ext(path: str) -> tuple[str, str]:
    name = os.path.basename(path)
    dot = name.rfind(".")
    if dot < 0:
        return path, ""
    ext = name[dot:]
    return path[: len(path) - len(ext)], ext


class Executor:
    """Moves the files of a plan, or only reports the moves in a dry run."""

    def __init__(self, db: HistoryDB | None, dry_run: bool) -> None:
        self.db = db
        self.dry_run = dry_run

    def execute(self, plan: Plan) -> list[str]:
        """Carry out every move in ``plan`` and return the final destinations.

        Stops at the first failure with an ``OSError`` naming the file.
        """
        destinations = []
        for fp in plan.files:
            try:
                destinations.append(self._move_file(fp))
            except OSError as exc:
                raise OSError(f"failed to move {fp.source}: {exc}") from exc
        return destinations

    def _move_file(self, fp: FilePlan) -> str:
        if not self.dry_run:
            os.makedirs(os.path.dirname(fp.dest) or ".", mode=0o755, exist_ok=True)

        dest = fp.dest
        if os.path.exists(dest):
            base, ext = _split_ext(dest)
            dest = f"{base}_{date.today():%Y-%m-%d}{ext}"

        if self.dry_run:
            print(f"[DRY RUN] {fp.source} -> {dest}")
            return dest

        try:
            digest = file_hash(fp.source)
        except OSError:
            digest = ""

        os.rename(fp.source, dest)

        if self.db is not None:
            self.db.record(
                Operation(
                    type=OpType.MOVE,
                    source_path=fp.source,
                    dest_path=dest,
                    file_size=fp.size,
                    file_hash=digest,
                    reversible=True,
                    metadata={"original_name": os.path.basename(fp.source)},
                )
            )
        return dest