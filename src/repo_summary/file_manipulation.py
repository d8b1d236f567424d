from __future__ import annotations

from pathlib import Path

from repo_summary.config import BINARY_SNIFF_BYTES
from repo_summary.logging import logger


def relpath(path: Path, root: Path) -> str:
    """Send the relative path of path from root.

    Args:
        path (Path): the path to "relativise"
        root (Path): the root to relativise from

    Returns:
        str: the relative path from root to path, with POSIX separators.
            The root itself maps to the empty string. If path is not under
            root, returns the original path as a string.
    """
    try:
        rel = path.relative_to(root).as_posix()
    except ValueError:
        return str(path)
    return "" if rel == "." else rel


def normalize_rel(raw: str) -> str:
    """Normalize a user-supplied relative path to the walker's form.

    Args:
        raw (str): a path as written in a selection file, e.g. ``.\\src\\app.py``

    Returns:
        str: the path with forward slashes and without leading ``./``
    """
    rel = raw.strip().replace("\\", "/")
    while rel.startswith("./"):
        rel = rel[2:]
    return rel.rstrip("/")


def is_binary(path: Path, nbytes: int = BINARY_SNIFF_BYTES) -> bool:
    """Check if a file is binary by looking for a NUL byte in its first bytes.

    A file that cannot be opened or read counts as binary so that one
    unreadable file never aborts the run.

    Args:
        path (Path): the file path to check
        nbytes (int, optional): number of bytes to sample. Defaults to 512.

    Returns:
        bool: True if the sample contains ``\\x00`` or the file is unreadable
    """
    try:
        with path.open("rb") as f:
            chunk = f.read(nbytes)
    except OSError as e:
        logger.warning("unreadable file treated as binary", path=str(path), reason=str(e))
        return True
    return b"\x00" in chunk


def read_text_lines(path: Path) -> list[str]:
    """Read a newline-delimited text file, trimmed, without blank lines.

    Args:
        path (Path): the file path to read

    Returns:
        list[str]: the stripped, non-empty lines in file order
    """
    lines = path.read_text(encoding="utf-8").splitlines()
    return [s for s in (ln.strip() for ln in lines) if s]


def read_file_bytes(path: Path) -> bytes | None:
    """Read a file's raw content for the summary.

    Args:
        path (Path): the file path to read

    Returns:
        bytes | None: the raw bytes, or None (with a warning) if the read failed
    """
    try:
        return path.read_bytes()
    except OSError as e:
        logger.warning("failed to read file", path=str(path), reason=str(e))
        return None
