"""Glob matching with ``**`` and braces, and detection of junk directories."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from functools import lru_cache

from .config import JunkPattern
from .tree import Node, Tree

_SEP = "/"
_CLASS_SPECIAL = "\\]^-["


def _bad_pattern(pattern: str) -> ValueError:
    return ValueError(f"syntax error in pattern: {pattern!r}")


def _find_unescaped(text: str, char: str) -> int:
    i = 0
    while i < len(text):
        if text[i] == "\\":
            i += 2
            continue
        if text[i] == char:
            return i
        i += 1
    return -1


def _expand(pattern: str) -> list[str]:
    """Expand every ``{a,b}`` group, nested groups included."""
    start = _find_unescaped(pattern, "{")
    if start < 0:
        return [pattern]
    alternatives = []
    depth = 0
    last = start + 1
    i = start
    while i < len(pattern):
        ch = pattern[i]
        if ch == "\\":
            i += 2
            continue
        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                alternatives.append(pattern[last:i])
                break
        elif ch == "," and depth == 1:
            alternatives.append(pattern[last:i])
            last = i + 1
        i += 1
    else:
        raise _bad_pattern(pattern)
    prefix, suffix = pattern[:start], pattern[i + 1:]
    expanded: list[str] = []
    for alternative in alternatives:
        expanded.extend(_expand(prefix + alternative + suffix))
    return expanded


def _class_char(comp: str, i: int, pattern: str) -> tuple[str, int]:
    if i >= len(comp):
        raise _bad_pattern(pattern)
    if comp[i] == "\\":
        if i + 1 >= len(comp):
            raise _bad_pattern(pattern)
        return comp[i + 1], i + 2
    return comp[i], i + 1


def _char_class(comp: str, i: int, pattern: str) -> tuple[str, int]:
    j = i + 1
    negate = j < len(comp) and comp[j] in "!^"
    if negate:
        j += 1
    body = []
    while True:
        if j >= len(comp):
            raise _bad_pattern(pattern)
        if comp[j] == "]":
            break
        low, j = _class_char(comp, j, pattern)
        if j + 1 < len(comp) and comp[j] == "-" and comp[j + 1] != "]":
            high, j = _class_char(comp, j + 1, pattern)
            if high < low:
                raise _bad_pattern(pattern)
            body.append(f"{_escape_in_class(low)}-{_escape_in_class(high)}")
        else:
            body.append(_escape_in_class(low))
    if not body:
        raise _bad_pattern(pattern)
    inner = "".join(body)
    regex = f"[^/{inner}]" if negate else f"(?!/)[{inner}]"
    return regex, j + 1


def _escape_in_class(ch: str) -> str:
    return "\\" + ch if ch in _CLASS_SPECIAL else ch


def _component(comp: str, pattern: str) -> str:
    out = []
    i = 0
    while i < len(comp):
        ch = comp[i]
        if ch == "*":
            while i < len(comp) and comp[i] == "*":
                i += 1
            out.append("[^/]*")
            continue
        if ch == "[":
            regex, i = _char_class(comp, i, pattern)
            out.append(regex)
            continue
        if ch == "?":
            out.append("[^/]")
        elif ch == "\\":
            if i + 1 >= len(comp):
                raise _bad_pattern(pattern)
            i += 1
            out.append(re.escape(comp[i]))
        else:
            out.append(re.escape(ch))
        i += 1
    return "".join(out)


def _to_regex(pattern: str, original: str) -> str:
    comps = pattern.split(_SEP)
    regex = ""
    need_sep = False
    for index, comp in enumerate(comps):
        last = index == len(comps) - 1
        if comp == "**":
            if last:
                regex += "(?:/.*)?" if need_sep else ".*"
            else:
                if need_sep:
                    regex += _SEP
                regex += "(?:.*/)?"
                need_sep = False
            continue
        if need_sep:
            regex += _SEP
        regex += _component(comp, original)
        need_sep = True
    return regex


@lru_cache(maxsize=512)
def _compile(pattern: str) -> tuple[re.Pattern[str], ...]:
    return tuple(
        re.compile(_to_regex(expanded, pattern), re.DOTALL) for expanded in _expand(pattern)
    )


def path_match(pattern: str, name: str) -> bool:
    """Report whether ``name`` matches the glob ``pattern``.

    ``*`` and ``?`` stay within one path component, ``**`` as a whole component
    spans any number of directories, ``[...]`` is a character class and
    ``{a,b}`` lists alternatives. A malformed pattern raises ``ValueError``.
    """
    return any(regex.fullmatch(name) for regex in _compile(pattern))


@dataclass(frozen=True)
class Match:
    """A junk pattern that matched a path."""

    name: str
    pattern: str
    safe: bool
    path: str


@dataclass
class JunkGroup:
    """All paths matched by one junk pattern, with their combined size."""

    name: str
    pattern: str
    safe: bool
    paths: list[str] = field(default_factory=list)
    total: int = 0


class Matcher:
    """Finds junk in paths and trees using a list of junk patterns."""

    def __init__(self, patterns: list[JunkPattern]) -> None:
        self.patterns = list(patterns)

    def match(self, path: str) -> list[Match]:
        """Return every pattern that matches ``path``; malformed patterns never match."""
        matches = []
        for pattern in self.patterns:
            try:
                matched = path_match(pattern.pattern, path)
            except ValueError:
                continue
            if matched:
                matches.append(Match(pattern.name, pattern.pattern, pattern.safe, path))
        return matches

    def find_junk(self, tree: Tree) -> dict[str, list[Match]]:
        """Map each junk path in ``tree`` to its matches, not descending into junk."""
        junk: dict[str, list[Match]] = {}
        stack: list[Node] = [tree.root()]
        while stack:
            node = stack.pop()
            matches = self.match(node.path)
            if matches:
                junk[node.path] = matches
                continue
            stack.extend(reversed(tree.children(node.path)))
        return junk

    def group_junk(self, tree: Tree) -> list[JunkGroup]:
        """Group the junk in ``tree`` by pattern name and total its size."""
        groups: dict[str, JunkGroup] = {}
        for path, matches in self.find_junk(tree).items():
            node = tree.get(path)
            size = node.size if node is not None else 0
            for match in matches:
                group = groups.get(match.name)
                if group is None:
                    groups[match.name] = JunkGroup(
                        match.name, match.pattern, match.safe, [path], size
                    )
                else:
                    group.paths.append(path)
                    group.total += size
        return list(groups.values())