"""JSON report of a scanned tree and the junk found in it."""

from __future__ import annotations

import json
from typing import Any, TextIO

from .patterns import JunkGroup, Matcher
from .tree import Tree


def _children(tree: Tree, path: str, depth: int, max_depth: int) -> list[dict] | None:
    if max_depth > 0 and depth >= max_depth:
        return None
    if tree.get(path) is None:
        return None
    entries = []
    for child in tree.children(path):
        entry: dict[str, Any] = {
            "path": child.path,
            "name": child.name,
            "size": child.size,
            "is_dir": child.is_dir,
        }
        if child.is_dir:
            nested = _children(tree, child.path, depth + 1, max_depth)
            if nested:
                entry["children"] = nested
        entries.append(entry)
    return entries


def _group_to_dict(group: JunkGroup) -> dict[str, Any]:
    return {
        "Name": group.name,
        "Pattern": group.pattern,
        "Safe": group.safe,
        "Paths": list(group.paths),
        "Total": group.total,
    }


def tree_to_dict(tree: Tree, matcher: Matcher | None = None, max_depth: int = 0) -> dict:
    """Describe ``tree`` as a JSON-ready dict, nesting at most ``max_depth`` levels.

    A ``max_depth`` of zero or less means no limit. Junk groups are included
    only when a matcher is given and finds something.
    """
    root = tree.root()
    output: dict[str, Any] = {
        "path": root.path,
        "total_size": root.size,
        "total_files": tree.file_count(),
        "children": _children(tree, root.path, 0, max_depth),
    }
    if matcher is not None:
        groups = matcher.group_junk(tree)
        if groups:
            output["junk"] = [_group_to_dict(group) for group in groups]
    return output


def write_json(
    tree: Tree, out: TextIO, matcher: Matcher | None = None, max_depth: int = 0
) -> None:
    """Write the report for ``tree`` to ``out`` as indented JSON."""
    json.dump(tree_to_dict(tree, matcher, max_depth), out, indent=2, ensure_ascii=False)
    out.write("\n")