"""Walk a directory tree and report every entry found."""

from __future__ import annotations

import os
from collections.abc import Iterator
from dataclasses import dataclass


@dataclass(frozen=True)
class Entry:
    """A file or directory found while scanning."""

    path: str
    name: str
    size: int = 0
    is_dir: bool = False


@dataclass(frozen=True)
class ScanResult:
    """Either an entry or the error met while reading a directory."""

    entry: Entry | None = None
    error: OSError | None = None


def scan(root: str | os.PathLike) -> Iterator[ScanResult]:
    """Yield a result for every entry below ``root``.

    Directories are reported with size 0 and descended into; symbolic links
    are reported but never followed. A directory that cannot be read yields
    a result carrying the error.
    """
    pending = [os.fspath(root)]
    while pending:
        directory = pending.pop()
        try:
            with os.scandir(directory) as it:
                items = sorted(it, key=lambda item: item.name)
        except OSError as exc:
            yield ScanResult(error=exc)
            continue

        subdirs = []
        for item in items:
            try:
                is_dir = item.is_dir(follow_symlinks=False)
                info = item.stat(follow_symlinks=False)
            except OSError:
                continue
            path = os.path.join(directory, item.name)
            size = 0 if is_dir else info.st_size
            yield ScanResult(entry=Entry(path=path, name=item.name, size=size, is_dir=is_dir))
            if is_dir:
                subdirs.append(path)
        pending.extend(reversed(subdirs))