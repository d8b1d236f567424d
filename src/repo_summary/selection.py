from __future__ import annotations

import re
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field

from repo_summary.config import SelectionMode
from repo_summary.exceptions import PatternCompileError, SelectionFileError
from repo_summary.file_manipulation import normalize_rel, read_text_lines
from repo_summary.logging import logger


class SelectionSpec(BaseModel):
    """Which non-ignored files make it into the summary.

    Selection only filters the walk: listed files are written in traversal order,
    not list order, and ignore rules still drop them.

    Attributes:
        mode: ``all``, ``list`` or ``regex``.
        paths: ordered relative paths, used in ``list`` mode.
        patterns: ordered compiled expressions, used in ``regex`` mode.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    mode: SelectionMode = Field(default=SelectionMode.ALL, description="Selection strategy")
    paths: tuple[str, ...] = Field(default=(), description="Explicit relative paths")
    patterns: tuple[re.Pattern[str], ...] = Field(default=(), description="Compiled path patterns")

    def matches(self, rel: str) -> bool:
        """Check whether a root-relative file path is in scope.

        Args:
            rel (str): the POSIX path relative to the root

        Returns:
            bool: True if the path is selected
        """
        if self.mode is SelectionMode.LIST:
            return rel in self.paths
        if self.mode is SelectionMode.REGEX:
            return any(p.search(rel) for p in self.patterns)
        return True


def compile_patterns(lines: list[str]) -> tuple[re.Pattern[str], ...]:
    """Compile selection patterns in order.

    Args:
        lines (list[str]): the trimmed, non-empty pattern lines

    Raises:
        PatternCompileError: on the first pattern that is not a valid regex

    Returns:
        tuple[re.Pattern[str], ...]: the compiled patterns
    """
    out: list[re.Pattern[str]] = []
    for line in lines:
        try:
            out.append(re.compile(line))
        except re.error as e:
            raise PatternCompileError(pattern=line, reason=str(e)) from e
    return tuple(out)


def parse_path_list(lines: list[str]) -> tuple[str, ...]:
    """Normalize listed paths, dropping comments and duplicates but keeping order."""
    seen: dict[str, None] = {}
    for line in lines:
        if line.startswith("#"):
            continue
        rel = normalize_rel(line)
        if rel:
            seen.setdefault(rel, None)
    return tuple(seen)


def load_selection(mode: SelectionMode, source: str | Path | None, root: Path) -> SelectionSpec:
    """Build the selection for a run.

    Args:
        mode (SelectionMode): how to interpret `source`
        source (str | Path | None): the selection file; relative paths resolve against `root`
        root (Path): the project root

    Raises:
        SelectionFileError: if the source file cannot be read

    Returns:
        SelectionSpec: the read-only selection
    """
    if mode is SelectionMode.ALL or source is None:
        return SelectionSpec()

    path = Path(source)
    if not path.is_absolute():
        path = root / path
    try:
        lines = read_text_lines(path)
    except (OSError, UnicodeDecodeError) as e:
        raise SelectionFileError(file=path, reason=str(e)) from e

    if mode is SelectionMode.LIST:
        spec = SelectionSpec(mode=mode, paths=parse_path_list(lines))
        logger.info("loaded file list", path=str(path), entries=len(spec.paths))
    else:
        spec = SelectionSpec(mode=mode, patterns=compile_patterns(lines))
        logger.info("loaded regex patterns", path=str(path), entries=len(spec.patterns))
    return spec
