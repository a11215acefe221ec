# breathe

Let your disk breathe. `breathe` finds what uses up disk space, spots common
junk such as `node_modules`, `__pycache__` and build output, and sorts a messy
downloads folder into tidy places. Every move and deletion it makes is written
to a local SQLite history, so moves and trashed items can be undone.

## Installation

```
pip install .
```

Python 3.10 or newer is needed. The only dependency is PyYAML. The
interactive browser uses the standard `curses` module, so it runs on Linux,
macOS and other POSIX systems.

To run the tests:

```
pip install ".[test]"
pytest
```

## Commands

Every command accepts `--config PATH`, either before or after the command name.

### scan

```
breathe scan [path]
```

Scans a directory (the current one by default) in the background and opens an
interactive browser in the terminal while the scan runs. Entries are listed
largest first. Symbolic links are listed but not followed.

Keys: `↑`/`↓` or `j`/`k` move, `Enter`/`l`/`→` open a directory,
`h`/`←`/`Backspace` go back (never above the scanned directory), `Space`
selects, `d` moves the selected items (or the current item) to the trash,
`Tab` switches between the tree and the junk view, `q` or `Ctrl+C` quits.

Options:

- `--json` scans, then prints the tree (children nested up to three levels)
  with `path`, `total_size`, `total_files` and `children`, plus a `junk` list
  of groups when any junk was found.
- `--top` only looks at the entries directly inside the directory, prints the
  total and the 30 largest of them, and says how many more there are.

### organize

```
breathe organize [path]
```

Sorts the files (not directories) directly inside a folder, `$HOME/Downloads`
by default, using the organize rules: documents to `~/Documents`, pictures to
`~/Pictures`, archives to `~/Downloads/Archives` and so on. With no option it
only says how many files it would move.

- `--plan` lists each destination directory with the files that go there.
- `--json` prints the plan as JSON, with `files` and `by_dest`.
- `--dry-run` prints every move as `[DRY RUN] source -> dest` without doing it.
- `--apply` moves the files and records each move, with the file's SHA-256,
  in the history. When a file of that name already exists at the destination,
  today's date is added to the name (`report_2024-05-01.pdf`).

### history

```
breathe history [query]
```

Lists recorded operations, newest first, as `id | time | type | name -> dest`.
With a query it shows those whose source or destination path contains it.
Without one it shows the last seven days, or the last N days with
`--since N`. `--json` prints them as JSON.

### undo

```
breathe undo <id>
```

Undoes a move or a trash operation, by its id from `breathe history`, by
moving the file back to where it came from. Permanent deletions cannot be
undone.

### clean

```
breathe clean --yes <paths...>
```

Moves the given files or directories to `~/.Trash` (adding the process id to
the name if something of that name is already there) and records each in the
history. Use `--no-trash` to delete permanently instead. Without `--yes`
nothing is done. The root, system directories such as `/usr` and `/etc`,
every top-level directory, your home directory and any path containing `..`
are refused. Failures are reported per path and do not stop the others.

## Configuration

Pass `--config path/to/config.yaml`. Without it, or when the file does not
exist, built-in defaults are used; a file that is not valid YAML, or that has
the wrong shape, is an error. A configuration looks like:

```yaml
junk_patterns:
  - name: node_modules
    pattern: "**/node_modules"
    safe: true
organize_rules:
  - match: "*.{pdf,doc,docx}"
    dest: ~/Documents
  - match: "*"
    dest: ~/Downloads/Unsorted
deletion:
  trash_threshold: 1GB
  always_trash: [".pdf", ".doc", ".xlsx"]
```

Organize rules are tried in order; the first whose pattern matches the file
name wins, and a leading `~` in `dest` stands for the home directory. Junk
patterns are matched against full paths: `*` and `?` stay within one path
component, `**` spans any number of directories, `[...]` is a character class
and `{a,b}` lists alternatives. A path found to be junk is not searched
further.

The history is kept in `~/.local/share/breathe/history.db`.

## What it does not do

- The `deletion` settings (`trash_threshold`, `always_trash`) are read from
  the configuration but nothing acts on them.
- `breathe scan --junk` and `breathe clean --pattern NAME` are accepted but
  have no effect.
- The trash is the plain directory `~/.Trash`; the desktop's own trash is not
  used.

## Using it from Python

```python
from breathe.config import default_config
from breathe.rules import RuleMatcher
from breathe.executor import Executor

matcher = RuleMatcher(default_config().organize_rules)
plan = matcher.create_plan("/path/to/Downloads")
for item in plan.files:
    print(item.source, "->", item.dest)

Executor(None, dry_run=True).execute(plan)
```

Other pieces:

- `breathe.scan.scan(root)` yields a `ScanResult` for every entry below a
  directory; `breathe.tree.Tree` collects them with sizes rolled up to every
  ancestor.
- `breathe.patterns.Matcher` finds and groups junk in a tree;
  `breathe.patterns.path_match` is the glob matcher on its own.
- `breathe.report.write_json` writes the JSON report that `scan --json`
  prints.
- `breathe.cleaner.Cleaner` trashes or deletes after `validate_path`.
- `breathe.history.HistoryDB` records, searches and fetches operations and
  can be used as a context manager.