from __future__ import annotations

from enum import StrEnum, auto

DEFAULT_OUTPUT_NAME = "output.txt"
GITIGNORE_NAME = ".gitignore"
SUMMARYIGNORE_NAME = ".summaryignore"

# Matched by plain string prefix against root-relative POSIX paths.
BUILTIN_IGNORES: tuple[str, ...] = (
    ".git",
    ".vscode/",
    "node_modules/",
    "vendor/",
    ".idea/",
    GITIGNORE_NAME,
    SUMMARYIGNORE_NAME,
)

BINARY_SNIFF_BYTES = 512

ALL_FILES = "all"


class SelectionMode(StrEnum):
    """How the selection source file is interpreted.

    ``ALL`` needs no source file. ``LIST`` reads one relative path per line,
    ``REGEX`` one regular expression per line.
    """

    ALL = auto()
    LIST = auto()
    REGEX = auto()


class OutputBase(StrEnum):
    """Directory a relative output path is resolved against."""

    ROOT = auto()
    CWD = auto()
