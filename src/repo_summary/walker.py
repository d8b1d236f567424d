"""Depth-first traversal of the project tree."""

from __future__ import annotations

import os
from enum import Enum, auto
from pathlib import Path
from typing import TYPE_CHECKING

from pydantic import BaseModel, ConfigDict, Field

from repo_summary.config import SelectionMode
from repo_summary.exceptions import WalkError
from repo_summary.file_manipulation import is_binary, read_file_bytes, relpath
from repo_summary.logging import logger

if TYPE_CHECKING:
    from collections.abc import Iterator

    from repo_summary.ignore import IgnoreRuleSet
    from repo_summary.output_construction import SummaryWriter
    from repo_summary.selection import SelectionSpec


class Visit(Enum):
    """Outcome of the per-entry decision."""

    DESCEND = auto()
    SKIP_ENTRY = auto()
    SKIP_SUBTREE = auto()


class WalkEntry(BaseModel):
    """A filesystem node met during the walk."""

    model_config = ConfigDict(frozen=True)

    path: Path = Field(..., description="Absolute path")
    rel: str = Field(..., description="Path relative to the root, POSIX separators")
    is_dir: bool = Field(default=False, description="Whether the entry is a directory")

    @property
    def name(self) -> str:
        return self.path.name


class DirectoryListing(BaseModel):
    """Immediate children of one directory, in visit order."""

    directories: list[str] = Field(default_factory=list)
    files: list[str] = Field(default_factory=list)


class WalkReport(BaseModel):
    """Counters for one content pass."""

    included: list[str] = Field(default_factory=list, description="Files written to the summary")
    ignored: int = Field(default=0, description="Files skipped by ignore rules")
    binary: int = Field(default=0, description="Files skipped as binary or unreadable")
    unselected: int = Field(default=0, description="Files outside the selection")
    missing: list[str] = Field(default_factory=list, description="Listed paths never found")


class Walker:
    """Walk a project root once per pass, applying ignore rules and selection.

    The walker owns the rule set and the selection; the output sink is passed
    to :meth:`run`. Entries of each directory are visited in name order so two
    runs over an unchanged tree yield the same output.
    """

    def __init__(self, root: Path, rules: IgnoreRuleSet, selection: SelectionSpec) -> None:
        self.root = root
        self.rules = rules
        self.selection = selection

    def decide(self, entry: WalkEntry) -> Visit:
        """Decide what to do with one entry before looking at its content.

        Args:
            entry (WalkEntry): the entry under consideration

        Returns:
            Visit: ``SKIP_SUBTREE`` for an ignored directory, ``SKIP_ENTRY`` for an
                ignored file, ``DESCEND`` otherwise
        """
        if self.rules.should_ignore(entry.rel, is_dir=entry.is_dir):
            return Visit.SKIP_SUBTREE if entry.is_dir else Visit.SKIP_ENTRY
        return Visit.DESCEND

    def _scan(self, directory: Path) -> list[os.DirEntry[str]]:
        try:
            with os.scandir(directory) as it:
                return sorted(it, key=lambda e: e.name)
        except OSError as e:
            raise WalkError(path=directory, reason=str(e)) from e

    def _is_dir(self, dir_entry: os.DirEntry[str]) -> bool:
        try:
            return dir_entry.is_dir(follow_symlinks=False)
        except OSError as e:
            raise WalkError(path=Path(dir_entry.path), reason=str(e)) from e

    def iter_entries(self, report: WalkReport | None = None) -> Iterator[WalkEntry]:
        """Yield every non-ignored entry under the root, depth-first.

        Ignored files are logged and skipped; ignored directories are neither
        yielded nor descended into.

        Args:
            report (WalkReport | None): if given, ignored files are counted on it

        Raises:
            WalkError: if a directory cannot be listed

        Yields:
            WalkEntry: each kept directory before its children, then each kept file
        """
        stack: list[Iterator[os.DirEntry[str]]] = [iter(self._scan(self.root))]
        while stack:
            dir_entry = next(stack[-1], None)
            if dir_entry is None:
                stack.pop()
                continue
            path = Path(dir_entry.path)
            entry = WalkEntry(path=path, rel=relpath(path, self.root), is_dir=self._is_dir(dir_entry))
            visit = self.decide(entry)
            if visit is Visit.SKIP_SUBTREE:
                logger.info("ignoring directory", path=entry.rel)
            elif visit is Visit.SKIP_ENTRY:
                logger.info("ignoring", path=entry.rel)
                if report is not None:
                    report.ignored += 1
            else:
                yield entry
                if entry.is_dir:
                    stack.append(iter(self._scan(path)))

    def capture_structure(self) -> dict[str, DirectoryListing]:
        """Map every kept directory to the base names of its kept children.

        Returns:
            dict[str, DirectoryListing]: keyed by relative directory path, the root being ``""``
        """
        structure: dict[str, DirectoryListing] = {"": DirectoryListing()}
        for entry in self.iter_entries():
            parent = relpath(entry.path.parent, self.root)
            listing = structure.setdefault(parent, DirectoryListing())
            if entry.is_dir:
                listing.directories.append(entry.name)
                structure.setdefault(entry.rel, DirectoryListing())
            else:
                listing.files.append(entry.name)
        return structure

    def run(self, writer: SummaryWriter) -> WalkReport:
        """Stream every selected text file to `writer`.

        Args:
            writer (SummaryWriter): the open summary sink

        Raises:
            WalkError: if the traversal fails mid-walk

        Returns:
            WalkReport: what was included and skipped
        """
        report = WalkReport()
        seen: set[str] = set()
        for entry in self.iter_entries(report):
            if entry.is_dir:
                continue
            seen.add(entry.rel)
            if not self.selection.matches(entry.rel):
                report.unselected += 1
                continue
            if not entry.path.is_file():
                logger.info("ignoring non-regular file", path=entry.rel)
                report.binary += 1
                continue
            if is_binary(entry.path):
                logger.info("ignoring binary file", path=entry.rel)
                report.binary += 1
                continue
            content = read_file_bytes(entry.path)
            if content is None:
                report.binary += 1
                continue
            writer.write_file(entry.rel, content)
            report.included.append(entry.rel)

        if self.selection.mode is SelectionMode.LIST:
            report.missing = [rel for rel in self.selection.paths if rel not in seen]
            for rel in report.missing:
                if (self.root / rel).exists():
                    logger.warning("listed file skipped by ignore rules", path=rel)
                else:
                    logger.warning("listed file not found", path=rel)
        return report
