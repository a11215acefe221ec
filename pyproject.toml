[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "breathe"
version = "0.1.0"
description = "Disk space manager and file organizer: find space hogs, detect junk, tidy downloads."
requires-python = ">=3.10"
keywords = ["disk usage", "cleanup", "junk", "organizer", "files", "terminal", "history", "undo"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Environment :: Console :: Curses",
    "Intended Audience :: End Users/Desktop",
    "Intended Audience :: System Administrators",
    "Operating System :: POSIX",
    "Operating System :: MacOS",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Filesystems",
    "Topic :: Utilities",
]
dependencies = [
    "pyyaml",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
breathe = "breathe.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["breathe"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
