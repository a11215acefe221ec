"""Configuration: junk patterns, organize rules and deletion settings."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml


@dataclass
class JunkPattern:
    """A named glob that marks a path as reclaimable junk."""

    name: str = ""
    pattern: str = ""
    safe: bool = False


@dataclass
class OrganizeRule:
    """A filename glob and the directory matching files are moved into."""

    match: str = ""
    dest: str = ""


@dataclass
class Deletion:
    """Settings that govern how deletions are carried out."""

    trash_threshold: str = ""
    always_trash: list[str] = field(default_factory=list)


@dataclass
class Config:
    """The complete configuration."""

    junk_patterns: list[JunkPattern] = field(default_factory=list)
    organize_rules: list[OrganizeRule] = field(default_factory=list)
    deletion: Deletion = field(default_factory=Deletion)


def default_config() -> Config:
    """Return the built-in configuration."""
    return Config(
        junk_patterns=[
            JunkPattern("node_modules", "**/node_modules", True),
            JunkPattern("JS build output", "**/{dist,build,.next,.nuxt,out}/", True),
            JunkPattern("C# build output", "**/{bin,obj}/", True),
            JunkPattern(
                "Browser automation",
                "**/{.chrome-data,chrome-data,puppeteer_data,.playwright}/",
                True,
            ),
            JunkPattern(
                "Package caches", "**/{.npm/_cacache,.yarn/cache,.pnpm-store}/", True
            ),
            JunkPattern("Python cache", "**/__pycache__/", True),
            JunkPattern("Git repos", "**/.git", False),
        ],
        organize_rules=[
            OrganizeRule("*.{pdf,doc,docx,txt,rtf,odt}", "~/Documents"),
            OrganizeRule("*.{csv,xlsx,xls}", "~/Documents/Data"),
            OrganizeRule("*.{json,xml}", "~/Documents/Data"),
            OrganizeRule("*.{jpg,jpeg,png,gif,webp,svg,heic}", "~/Pictures"),
            OrganizeRule("Screenshot*.png", "~/Pictures/Screenshots"),
            OrganizeRule("*.{mp4,mov,avi,mkv,webm}", "~/Movies"),
            OrganizeRule("*.{mp3,wav,flac,m4a,aac}", "~/Music"),
            OrganizeRule("*.{dmg,pkg}", "~/Downloads/Installers"),
            OrganizeRule("*.{zip,tar,gz,rar,7z}", "~/Downloads/Archives"),
            OrganizeRule("*", "~/Downloads/Unsorted"),
        ],
        deletion=Deletion(trash_threshold="1GB", always_trash=[".pdf", ".doc", ".xlsx"]),
    )


def _as_mapping(value: Any, what: str) -> dict:
    if value is None:
        return {}
    if not isinstance(value, dict):
        raise ValueError(f"{what} must be a mapping, got {type(value).__name__}")
    return value


def _as_list(value: Any, what: str) -> list:
    if value is None:
        return []
    if not isinstance(value, list):
        raise ValueError(f"{what} must be a sequence, got {type(value).__name__}")
    return value


def _as_str(value: Any, what: str) -> str:
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    raise ValueError(f"{what} must be a string, got {type(value).__name__}")


def _as_bool(value: Any, what: str) -> bool:
    if value is None:
        return False
    if not isinstance(value, bool):
        raise ValueError(f"{what} must be a boolean, got {type(value).__name__}")
    return value


def _parse(data: Any) -> Config:
    root = _as_mapping(data, "config")
    patterns = []
    for item in _as_list(root.get("junk_patterns"), "junk_patterns"):
        entry = _as_mapping(item, "junk pattern")
        patterns.append(
            JunkPattern(
                name=_as_str(entry.get("name"), "name"),
                pattern=_as_str(entry.get("pattern"), "pattern"),
                safe=_as_bool(entry.get("safe"), "safe"),
            )
        )
    rules = []
    for item in _as_list(root.get("organize_rules"), "organize_rules"):
        entry = _as_mapping(item, "organize rule")
        rules.append(
            OrganizeRule(
                match=_as_str(entry.get("match"), "match"),
                dest=_as_str(entry.get("dest"), "dest"),
            )
        )
    deletion = _as_mapping(root.get("deletion"), "deletion")
    return Config(
        junk_patterns=patterns,
        organize_rules=rules,
        deletion=Deletion(
            trash_threshold=_as_str(deletion.get("trash_threshold"), "trash_threshold"),
            always_trash=[
                _as_str(v, "always_trash entry")
                for v in _as_list(deletion.get("always_trash"), "always_trash")
            ],
        ),
    )


def load(path: str | Path | None) -> Config:
    """Load configuration from a YAML file.

    An empty path or a missing file yields the built-in defaults. Malformed
    YAML raises ``yaml.YAMLError``; a wrongly shaped document raises ``ValueError``.
    """
    if not path:
        return default_config()
    try:
        text = Path(path).read_text(encoding="utf-8")
    except FileNotFoundError:
        return default_config()
    return _parse(yaml.safe_load(text))


def default_path() -> str:
    """Return the default location of the configuration file."""
    return str(Path.home() / ".config" / "breathe" / "config.yaml")


def data_path() -> str:
    """Return the location of the history database."""
    return str(Path.home() / ".local" / "share" / "breathe" / "history.db")