"""Rules that map filenames to destination directories, and move plans."""

from __future__ import annotations

import os
from dataclasses import asdict, dataclass, field
from pathlib import Path

from .config import OrganizeRule
from .patterns import path_match


def expand_braces(pattern: str) -> list[str]:
    """Expand ``{a,b,c}`` groups into one pattern per alternative."""
    start = pattern.find("{")
    if start == -1:
        return [pattern]
    end = pattern.find("}", start)
    if end == -1:
        return [pattern]
    prefix, suffix = pattern[:start], pattern[end + 1:]
    result: list[str] = []
    for option in pattern[start + 1:end].split(","):
        result.extend(expand_braces(prefix + option + suffix))
    return result


@dataclass
class FilePlan:
    """One file and where it is to be moved."""

    source: str
    dest: str
    size: int = 0


@dataclass
class Plan:
    """All planned moves, in order and grouped by destination directory."""

    files: list[FilePlan] = field(default_factory=list)
    by_dest: dict[str, list[FilePlan]] = field(default_factory=dict)

    def to_dict(self) -> dict:
        """Return the plan as JSON-ready data."""
        return {
            "files": [asdict(fp) for fp in self.files],
            "by_dest": {
                dest: [asdict(fp) for fp in files] for dest, files in self.by_dest.items()
            },
        }


def _expand_home(dest: str) -> str:
    if not dest.startswith("~"):
        return dest
    rest = dest[1:].lstrip(os.sep)
    return os.path.normpath(os.path.join(str(Path.home()), rest))


class RuleMatcher:
    """Picks the destination of a file from the first rule that matches it."""

    def __init__(self, rules: list[OrganizeRule]) -> None:
        self.rules = list(rules)

    def match(self, filename: str) -> str:
        """Return the destination of ``filename``, or an empty string."""
        for rule in self.rules:
            for pattern in expand_braces(rule.match):
                try:
                    if path_match(pattern, filename):
                        return rule.dest
                except ValueError:
                    continue
        return ""

    def create_plan(self, source_path: str) -> Plan:
        """Plan moves for the files directly inside ``source_path``."""
        plan = Plan()
        with os.scandir(source_path) as it:
            entries = sorted(it, key=lambda entry: entry.name)
        for entry in entries:
            if entry.is_dir(follow_symlinks=False):
                continue
            try:
                info = entry.stat(follow_symlinks=False)
            except OSError:
                continue
            dest = self.match(entry.name)
            if not dest:
                continue
            dest = _expand_home(dest)
            fp = FilePlan(
                source=os.path.normpath(os.path.join(source_path, entry.name)),
                dest=os.path.normpath(os.path.join(dest, entry.name)),
                size=info.st_size,
            )
            plan.files.append(fp)
            plan.by_dest.setdefault(dest, []).append(fp)
        return plan