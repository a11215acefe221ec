"""Disk space manager and file organizer: scanning, junk detection, organizing and undoable history."""

__version__ = "0.1.0"