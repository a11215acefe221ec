"""In-memory directory tree with sizes rolled up to every ancestor."""

from __future__ import annotations

import os
import threading
from dataclasses import dataclass, field

from .scan import Entry


def _parent(path: str) -> str:
    return os.path.normpath(os.path.dirname(path))


def _base(path: str) -> str:
    stripped = path.rstrip(os.sep)
    if not stripped:
        return os.sep if path else "."
    return os.path.basename(stripped)


@dataclass(eq=False)
class Node:
    """A file or directory in the tree."""

    path: str
    name: str
    size: int = 0
    is_dir: bool = False
    children: dict[str, Node] = field(default_factory=dict, repr=False)


class Tree:
    """Thread-safe tree of scanned entries keyed by path."""

    def __init__(self, root_path: str) -> None:
        self._root = Node(path=root_path, name=_base(root_path), is_dir=True)
        self._nodes: dict[str, Node] = {root_path: self._root}
        self._lock = threading.RLock()

    def root(self) -> Node:
        """Return the root node."""
        with self._lock:
            return self._root

    def _attach(self, node: Node, key: str) -> None:
        self._nodes[node.path] = node
        parent = self._nodes.get(_parent(node.path))
        if parent is not None:
            parent.children[key] = node

    def _ensure_parents(self, path: str) -> None:
        root_path = self._root.path
        relative = path[len(root_path):] if path.startswith(root_path) else path
        parts = relative.split(os.sep)
        current = root_path
        for part in parts[:-1]:
            if not part:
                continue
            current = os.path.normpath(os.path.join(current, part))
            if current not in self._nodes:
                self._attach(Node(path=current, name=part, is_dir=True), part)

    def _propagate_size(self, path: str, size: int) -> None:
        while True:
            parent_path = _parent(path)
            if parent_path == path or parent_path == ".":
                break
            parent = self._nodes.get(parent_path)
            if parent is not None:
                parent.size += size
            path = parent_path

    def add_entry(self, entry: Entry) -> None:
        """Insert a scanned entry, creating missing parents and adding file sizes upward."""
        with self._lock:
            self._ensure_parents(entry.path)
            node = self._nodes.get(entry.path)
            if node is None:
                node = Node(path=entry.path, name=entry.name, is_dir=entry.is_dir)
                self._attach(node, entry.name)
            if not entry.is_dir:
                node.size = entry.size
                self._propagate_size(entry.path, entry.size)

    def children(self, path: str) -> list[Node]:
        """Return the children of ``path``, largest first."""
        with self._lock:
            node = self._nodes.get(path)
            if node is None:
                return []
            return sorted(node.children.values(), key=lambda child: child.size, reverse=True)

    def get(self, path: str) -> Node | None:
        """Return the node at ``path``, or None."""
        with self._lock:
            return self._nodes.get(path)

    def file_count(self) -> int:
        """Return the number of non-directory nodes."""
        with self._lock:
            return sum(1 for node in self._nodes.values() if not node.is_dir)

    def remove(self, path: str) -> None:
        """Remove a node and its subtree, subtracting its size from every ancestor."""
        with self._lock:
            node = self._nodes.get(path)
            if node is None:
                return

            parent_path = _parent(path)
            while parent_path != path and parent_path != ".":
                parent = self._nodes.get(parent_path)
                if parent is not None:
                    parent.size -= node.size
                previous = parent_path
                parent_path = _parent(parent_path)
                if parent_path == previous:
                    break

            parent = self._nodes.get(_parent(path))
            if parent is not None:
                parent.children.pop(node.name, None)

            stack = [node]
            while stack:
                current = stack.pop()
                stack.extend(current.children.values())
                self._nodes.pop(current.path, None)

    def add(self, path: str, is_dir: bool, size: int) -> None:
        """Insert a node with an explicit size; ancestors' sizes are left unchanged."""
        with self._lock:
            self._ensure_parents(path)
            node = self._nodes.get(path)
            if node is None:
                name = _base(path)
                node = Node(path=path, name=name, is_dir=is_dir)
                self._attach(node, name)
            node.size = size