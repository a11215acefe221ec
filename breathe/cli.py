"""Command-line interface: scan, organize, history, undo and clean."""

from __future__ import annotations

import argparse
import json
import os
import sqlite3
import sys
from datetime import datetime, timedelta
from typing import NamedTuple

import yaml

from . import config as config_mod
from .cleaner import Cleaner
from .executor import Executor
from .history import HistoryDB, Operation, OpType
from .patterns import Matcher
from .report import write_json
from .rules import Plan, RuleMatcher
from .scan import scan

_TOP_LIMIT = 30


class _CommandError(RuntimeError):
    """A command failed in a way the user should be told about."""


class TopLevelItem(NamedTuple):
    """One entry of a top-level scan."""

    name: str
    size: int
    is_dir: bool


def format_bytes(size: int) -> str:
    """Format a byte count right-aligned in a fixed width, e.g. ``   1.5 KB``."""
    unit = 1024
    if size < unit:
        return f"{size:7d} B"
    div, exp = unit, 0
    n = size // unit
    while n >= unit:
        div *= unit
        exp += 1
        n //= unit
    return f"{size / div:6.1f} {'KMGTPE'[exp]}B"


def dir_size(path: str) -> int:
    """Return the total size of every non-directory entry below ``path``.

    Symbolic links are counted by their own size and never followed;
    unreadable entries are skipped.
    """
    try:
        info = os.lstat(path)
    except OSError:
        return 0
    if not os.path.isdir(path) or os.path.islink(path):
        return info.st_size

    total = 0
    for directory, dirnames, filenames in os.walk(path):
        linked_dirs = [d for d in dirnames if os.path.islink(os.path.join(directory, d))]
        for name in filenames + linked_dirs:
            try:
                total += os.lstat(os.path.join(directory, name)).st_size
            except OSError:
                continue
    return total


def top_level_scan(path: str) -> list[TopLevelItem]:
    """Print the size of each entry directly inside ``path``, largest first.

    Returns the entries in the order printed.
    """
    with os.scandir(path) as it:
        entries = sorted(it, key=lambda entry: entry.name)

    print(f"Scanning {path} (top-level only)...")

    items = []
    for entry in entries:
        try:
            is_dir = entry.is_dir(follow_symlinks=False)
            info = entry.stat(follow_symlinks=False)
        except OSError:
            continue
        size = dir_size(entry.path) if is_dir else info.st_size
        items.append(TopLevelItem(entry.name, size, is_dir))

    items.sort(key=lambda item: item.size, reverse=True)
    total = sum(item.size for item in items)

    print(f"\nTotal: {format_bytes(total)}\n")
    for index, item in enumerate(items):
        if index >= _TOP_LIMIT:
            print(f"  ... and {len(items) - _TOP_LIMIT} more")
            break
        icon = "📁" if item.is_dir else "📄"
        print(f"{icon} {format_bytes(item.size)}  {item.name}")
    return items


def _json_scan(cfg: config_mod.Config, path: str) -> None:
    from .tree import Tree

    tree = Tree(path)
    for result in scan(path):
        if result.error is None and result.entry is not None:
            tree.add_entry(result.entry)
    write_json(tree, sys.stdout, Matcher(cfg.junk_patterns), 3)


def _cmd_scan(args: argparse.Namespace) -> None:
    path = os.path.abspath(args.path)
    cfg = config_mod.load(args.config)
    if args.top:
        top_level_scan(path)
    elif args.json:
        _json_scan(cfg, path)
    else:
        from .tui import run

        run(cfg, path)


def _output_plan(plan: Plan, as_json: bool) -> None:
    if as_json:
        print(json.dumps(plan.to_dict(), indent=2, ensure_ascii=False))
        return
    for dest, files in plan.by_dest.items():
        print(f"\n{dest} ({len(files)} files)")
        for fp in files:
            print(f"  {os.path.basename(fp.source)}")


def _cmd_organize(args: argparse.Namespace) -> None:
    path = args.path
    if path is None:
        path = os.path.join(os.environ.get("HOME", ""), "Downloads")
    path = os.path.abspath(path)
    cfg = config_mod.load(args.config)

    plan = RuleMatcher(cfg.organize_rules).create_plan(path)

    if args.plan or args.json:
        _output_plan(plan, args.json)
    elif args.dry_run:
        Executor(None, True).execute(plan)
    elif args.apply:
        with HistoryDB(config_mod.data_path()) as db:
            Executor(db, False).execute(plan)
    else:
        print(
            f"Would organize {len(plan.files)} files. Use --plan to see details, "
            "--dry-run to preview, or --apply to execute."
        )


def _operation_to_dict(op: Operation) -> dict:
    return {
        "ID": op.id,
        "Timestamp": op.timestamp.isoformat() if op.timestamp else None,
        "Type": OpType(op.type).value,
        "SourcePath": op.source_path,
        "DestPath": op.dest_path,
        "FileSize": op.file_size,
        "FileHash": op.file_hash,
        "Reversible": op.reversible,
        "Metadata": op.metadata,
    }


def _cmd_history(args: argparse.Namespace) -> None:
    with HistoryDB(config_mod.data_path()) as db:
        if args.query is not None:
            ops = db.search(args.query)
        else:
            days = args.since if args.since > 0 else 7
            ops = db.since(datetime.now() - timedelta(days=days))

    if args.json:
        print(json.dumps([_operation_to_dict(op) for op in ops], indent=2, ensure_ascii=False))
        return

    if not ops:
        print("No operations found")
        return

    for op in ops:
        stamp = op.timestamp.strftime("%Y-%m-%d %H:%M") if op.timestamp else "0001-01-01 00:00"
        line = f"{op.id} | {stamp} | {OpType(op.type).value} | {os.path.basename(op.source_path)}"
        if op.dest_path:
            line += f" -> {op.dest_path}"
        print(line)


def _cmd_undo(args: argparse.Namespace) -> None:
    try:
        op_id = int(args.id, 10)
    except ValueError:
        raise _CommandError(f"invalid operation ID: {args.id}") from None

    with HistoryDB(config_mod.data_path()) as db:
        try:
            op = db.get(op_id)
        except LookupError:
            raise _CommandError(f"operation not found: {op_id}") from None

    if not op.reversible:
        raise _CommandError(f"operation {op_id} is not reversible")

    kind = OpType(op.type)
    if kind is OpType.MOVE:
        os.rename(op.dest_path, op.source_path)
        print(f"Moved {op.dest_path} back to {op.source_path}")
    elif kind is OpType.TRASH:
        os.rename(op.dest_path, op.source_path)
        print(f"Restored {op.source_path} from trash")
    else:
        raise _CommandError(f"cannot undo operation type: {kind.value}")


def _cmd_clean(args: argparse.Namespace) -> None:
    if not args.yes:
        raise _CommandError("use --yes to confirm deletion")

    with HistoryDB(config_mod.data_path()) as db:
        cleaner = Cleaner(db, args.trash)
        action = "trashed" if args.trash else "deleted"
        for path in args.paths:
            try:
                abs_path = os.path.abspath(path)
            except (OSError, ValueError) as exc:
                print(f"skip {path}: {exc}", file=sys.stderr)
                continue
            try:
                cleaner.delete(abs_path)
            except (OSError, ValueError, sqlite3.Error) as exc:
                print(f"failed {path}: {exc}", file=sys.stderr)
            else:
                print(f"{action} {abs_path}")


def _build_parser() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--config",
        default=argparse.SUPPRESS,
        help="config file (default ~/.config/breathe/config.yaml)",
    )

    parser = argparse.ArgumentParser(
        prog="breathe",
        description="Let your disk breathe. Scan for space hogs, detect junk, and organize files.",
    )
    parser.add_argument(
        "--config", default="", help="config file (default ~/.config/breathe/config.yaml)"
    )
    sub = parser.add_subparsers(dest="command")

    scan_p = sub.add_parser("scan", parents=[common], help="Scan directory for disk usage")
    scan_p.add_argument("path", nargs="?", default=".")
    scan_p.add_argument("--json", action="store_true", help="output as JSON")
    scan_p.add_argument("--junk", action="store_true", help="show only detected junk")
    scan_p.add_argument(
        "--top", action="store_true", help="quick top-level scan only (faster for large dirs)"
    )
    scan_p.set_defaults(handler=_cmd_scan)

    org_p = sub.add_parser("organize", parents=[common], help="Organize files by type")
    org_p.add_argument("path", nargs="?", default=None)
    org_p.add_argument("--dry-run", action="store_true", help="show what would happen")
    org_p.add_argument("--apply", action="store_true", help="execute the plan")
    org_p.add_argument("--plan", action="store_true", help="output plan")
    org_p.add_argument("--json", action="store_true", help="output as JSON")
    org_p.set_defaults(handler=_cmd_organize)

    hist_p = sub.add_parser("history", parents=[common], help="Search operation history")
    hist_p.add_argument("query", nargs="?", default=None)
    hist_p.add_argument("--since", type=int, default=0, help="show operations from last N days")
    hist_p.add_argument("--json", action="store_true", help="output as JSON")
    hist_p.set_defaults(handler=_cmd_history)

    undo_p = sub.add_parser("undo", parents=[common], help="Undo an operation")
    undo_p.add_argument("id")
    undo_p.set_defaults(handler=_cmd_undo)

    clean_p = sub.add_parser("clean", parents=[common], help="Delete files or directories")
    clean_p.add_argument("paths", nargs="+")
    clean_p.add_argument("--yes", action="store_true", help="confirm deletion")
    clean_p.add_argument(
        "--trash",
        action=argparse.BooleanOptionalAction,
        default=True,
        help="move to trash instead of permanent delete",
    )
    clean_p.add_argument("--pattern", default="", help="match junk pattern name")
    clean_p.set_defaults(handler=_cmd_clean)

    return parser


def main(argv: list[str] | None = None) -> int:
    """Run the command line and return the exit status."""
    parser = _build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit as exc:
        return exc.code if isinstance(exc.code, int) else 1

    handler = getattr(args, "handler", None)
    if handler is None:
        parser.print_help()
        return 0

    try:
        handler(args)
    except (
        _CommandError,
        OSError,
        ValueError,
        LookupError,
        sqlite3.Error,
        yaml.YAMLError,
    ) as exc:
        print(exc, file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())