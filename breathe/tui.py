"""Interactive terminal browser for a directory scan."""

from __future__ import annotations

import curses
import os
import queue
import sqlite3
import threading
from enum import Enum

from .cleaner import Cleaner
from .config import Config, data_path
from .history import HistoryDB, format_size
from .patterns import Matcher
from .scan import ScanResult, scan
from .tree import Tree

SPINNER_FRAMES = ("⣾ ", "⣽ ", "⣻ ", "⢿ ", "⡿ ", "⣟ ", "⣯ ", "⣷ ")

HELP_LINE = (
    "[↑↓] Navigate  [Enter] Open dir  [h] Back  [Space] Select  "
    "[d] Delete  [Tab] Junk  [q] Quit"
)

_DONE = object()


class View(Enum):
    """Which panel the browser shows."""

    SCAN = 0
    JUNK = 1


class Model:
    """State of the browser: the growing tree, cursor, selection and view."""

    def __init__(self, cfg: Config, scan_path: str, db: HistoryDB | None = None) -> None:
        self.cfg = cfg
        self.scan_path = scan_path
        self.current_path = scan_path
        self.tree = Tree(scan_path)
        self.matcher = Matcher(cfg.junk_patterns)
        self.db = db
        self.scanning = True
        self.cursor = 0
        self.offset = 0
        self.selected: set[str] = set()
        self.view = View.SCAN
        self.width = 0
        self.height = 0
        self.file_count = 0
        self.last_path = ""
        self.status_msg = ""
        self.spinner_frame = 0

    def add_result(self, result: ScanResult) -> None:
        """Add one scan result to the tree; results carrying an error are ignored."""
        if result.error is not None or result.entry is None:
            return
        self.tree.add_entry(result.entry)
        self.file_count += 1
        self.last_path = result.entry.path

    def finish_scan(self) -> None:
        """Mark the scan as complete."""
        self.scanning = False

    def resize(self, width: int, height: int) -> None:
        """Record the terminal size."""
        self.width = width
        self.height = height

    def visible_items(self) -> int:
        """Return how many list rows fit on screen."""
        available = self.height - 6
        if self.scanning:
            available -= 1
        return max(available, 5)

    def _delete_item(self, path: str) -> None:
        cleaner = Cleaner(self.db, True)
        try:
            cleaner.delete(path)
        except (OSError, ValueError, sqlite3.Error) as exc:
            self.status_msg = f"Error: {exc}"
            return
        self.tree.remove(path)
        self.status_msg = f"Trashed: {os.path.basename(path)}"

    def handle_key(self, key: str) -> bool:
        """Apply a key press; return True when the browser should quit."""
        children = self.tree.children(self.current_path)
        max_items = self.visible_items()
        self.status_msg = ""

        if key in ("q", "ctrl+c"):
            return True
        if key in ("j", "down"):
            if self.cursor < len(children) - 1:
                self.cursor += 1
                if self.cursor >= self.offset + max_items:
                    self.offset = self.cursor - max_items + 1
        elif key in ("k", "up"):
            if self.cursor > 0:
                self.cursor -= 1
                if self.cursor < self.offset:
                    self.offset = self.cursor
        elif key in ("enter", "l", "right"):
            if 0 <= self.cursor < len(children) and children[self.cursor].is_dir:
                self.current_path = children[self.cursor].path
                self.cursor = 0
                self.offset = 0
        elif key in ("h", "left", "backspace"):
            if self.current_path != self.scan_path:
                self.current_path = os.path.dirname(self.current_path)
                self.cursor = 0
                self.offset = 0
        elif key == "tab":
            self.view = View.JUNK if self.view is View.SCAN else View.SCAN
        elif key == " ":
            if 0 <= self.cursor < len(children):
                path = children[self.cursor].path
                if path in self.selected:
                    self.selected.discard(path)
                else:
                    self.selected.add(path)
        elif key == "d":
            if self.selected:
                for path in sorted(self.selected):
                    self._delete_item(path)
                self.selected = set()
            elif 0 <= self.cursor < len(children):
                self._delete_item(children[self.cursor].path)
            remaining = self.tree.children(self.current_path)
            if self.cursor >= len(remaining) and self.cursor > 0:
                self.cursor = len(remaining) - 1
        return False

    def render(self) -> str:
        """Return the screen contents as text."""
        parts = []
        if self.scanning:
            frame = SPINNER_FRAMES[self.spinner_frame % len(SPINNER_FRAMES)]
            parts.append(
                f"{frame} Scanning... {self.file_count} files | {self.scan_path}\n"
            )
            if self.last_path:
                rel = os.path.relpath(self.last_path, self.scan_path)
                if len(rel.encode("utf-8")) > 60:
                    pieces = rel.split(os.sep)
                    if len(pieces) > 3:
                        rel = os.path.join(pieces[0], "...", pieces[-1])
                parts.append(f"  → {rel}\n")
        else:
            parts.append(f"Scan complete: {self.file_count} files | {self.scan_path}\n")

        parts.append(f"Total: {format_size(self.tree.root().size)}\n\n")
        parts.append(self._render_tree() if self.view is View.SCAN else self._render_junk())

        if self.status_msg:
            parts.append("\n" + self.status_msg)
        parts.append("\n" + HELP_LINE)
        return "".join(parts)

    def _render_tree(self) -> str:
        parts = []
        children = self.tree.children(self.current_path)

        if self.current_path != self.scan_path:
            rel = os.path.relpath(self.current_path, self.scan_path)
            parts.append(f"📂 {rel}\n\n")

        end = min(self.offset + self.visible_items(), len(children))
        if self.offset > 0:
            parts.append(f"  ↑ {self.offset} more above\n")

        for index, child in enumerate(children[self.offset:end], start=self.offset):
            prefix = "> " if index == self.cursor else "  "
            mark = "●" if child.path in self.selected else " "
            icon = "📁" if child.is_dir else "📄"
            parts.append(f"{prefix}{mark} {icon} {child.name} {format_size(child.size)}\n")

        if end < len(children):
            parts.append(f"  ↓ {len(children) - end} more below\n")
        return "".join(parts)

    def _render_junk(self) -> str:
        groups = self.matcher.group_junk(self.tree)
        if not groups:
            return "No junk detected\n"
        parts = [f"🗑️  Detected Junk ({len(groups)} groups)\n\n"]
        for group in groups:
            icon = "✓" if group.safe else "⚠"
            parts.append(
                f"[{icon}] {group.name} ({len(group.paths)} dirs) "
                f"{format_size(group.total)}\n"
            )
        return "".join(parts)


def _offer(out: queue.Queue, item: object, stop: threading.Event) -> bool:
    while not stop.is_set():
        try:
            out.put(item, timeout=0.1)
            return True
        except queue.Full:
            continue
    return False


def _feed(path: str, out: queue.Queue, stop: threading.Event) -> None:
    for result in scan(path):
        if not _offer(out, result, stop):
            return
    _offer(out, _DONE, stop)


_SPECIAL_KEYS = {
    curses.KEY_UP: "up",
    curses.KEY_DOWN: "down",
    curses.KEY_LEFT: "left",
    curses.KEY_RIGHT: "right",
    curses.KEY_BACKSPACE: "backspace",
    curses.KEY_ENTER: "enter",
}

_CHAR_KEYS = {
    "\n": "enter",
    "\r": "enter",
    "\t": "tab",
    "\x7f": "backspace",
    "\x08": "backspace",
    "\x03": "ctrl+c",
}


def _key_name(key: int | str) -> str:
    if isinstance(key, int):
        return _SPECIAL_KEYS.get(key, "")
    return _CHAR_KEYS.get(key, key)


def _draw(stdscr, model: Model) -> None:
    stdscr.erase()
    height, width = stdscr.getmaxyx()
    for row, line in enumerate(model.render().split("\n")):
        if row >= height:
            break
        attr = curses.A_NORMAL
        if line.startswith("> "):
            attr = curses.A_REVERSE
        elif line.startswith("Total: "):
            attr = curses.A_BOLD
        try:
            stdscr.addnstr(row, 0, line, max(width - 1, 0), attr)
        except curses.error:
            pass
    stdscr.refresh()


def _loop(stdscr, model: Model, results: queue.Queue) -> None:
    try:
        curses.curs_set(0)
    except curses.error:
        pass
    stdscr.timeout(100)
    height, width = stdscr.getmaxyx()
    model.resize(width, height)

    while True:
        for _ in range(2000):
            try:
                item = results.get_nowait()
            except queue.Empty:
                break
            if item is _DONE:
                model.finish_scan()
                break
            model.add_result(item)

        if model.scanning:
            model.spinner_frame = (model.spinner_frame + 1) % len(SPINNER_FRAMES)

        _draw(stdscr, model)

        try:
            key = stdscr.get_wch()
        except curses.error:
            continue
        if key == curses.KEY_RESIZE:
            height, width = stdscr.getmaxyx()
            model.resize(width, height)
            continue
        name = _key_name(key)
        if name and model.handle_key(name):
            return


def run(cfg: Config, path: str) -> None:
    """Scan ``path`` in the background and browse the results interactively."""
    try:
        db: HistoryDB | None = HistoryDB(data_path())
    except (OSError, sqlite3.Error):
        db = None

    model = Model(cfg, path, db)
    results: queue.Queue = queue.Queue(maxsize=1000)
    stop = threading.Event()
    worker = threading.Thread(target=_feed, args=(path, results, stop), daemon=True)
    worker.start()
    try:
        curses.wrapper(_loop, model, results)
    except KeyboardInterrupt:
        pass
    finally:
        stop.set()
        if db is not None:
            db.close()