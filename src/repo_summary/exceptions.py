from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class RepoSummaryError(Exception):
    """Base exception for errors in the repo_summary module."""

    def __str__(self) -> str:
        return getattr(self, "message", self.__class__.__name__)


@dataclass(frozen=True)
class IgnoreFileError(RepoSummaryError):
    """Raised when an ignore file contains a pattern that cannot be compiled."""

    file: Path
    reason: str

    @property
    def message(self) -> str:
        return f"failed to compile {self.file.name}: {self.reason}"


@dataclass(frozen=True)
class SelectionFileError(RepoSummaryError):
    """Raised when the selection source file cannot be read."""

    file: Path
    reason: str

    @property
    def message(self) -> str:
        return f"failed to read selection file {self.file}: {self.reason}"


@dataclass(frozen=True)
class PatternCompileError(RepoSummaryError):
    """Raised when a selection regex does not compile."""

    pattern: str
    reason: str

    @property
    def message(self) -> str:
        return f"failed to compile regex pattern '{self.pattern}': {self.reason}"


@dataclass(frozen=True)
class OutputFileError(RepoSummaryError):
    """Raised when the summary file cannot be created or written."""

    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"failed to write output file {self.path}: {self.reason}"


@dataclass(frozen=True)
class WorkingDirectoryError(RepoSummaryError):
    """Raised when the current working directory cannot be resolved."""

    reason: str

    @property
    def message(self) -> str:
        return f"error getting current directory: {self.reason}"


@dataclass(frozen=True)
class WalkError(RepoSummaryError):
    """Raised when the directory traversal fails on an entry."""

    path: Path
    reason: str

    @property
    def message(self) -> str:
        return f"failed to process files under {self.path}: {self.reason}"


@dataclass(frozen=True)
class LogFileError(RepoSummaryError):
    """Raised when the log file cannot be opened."""

    path: str
    reason: str

    @property
    def message(self) -> str:
        return f"failed to open log file {self.path}: {self.reason}"
