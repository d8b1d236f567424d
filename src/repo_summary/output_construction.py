from __future__ import annotations

import json
from typing import TYPE_CHECKING, BinaryIO

from repo_summary.exceptions import OutputFileError

if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path
    from types import TracebackType

    from repo_summary.walker import DirectoryListing

STRUCTURE_HEADER = "## Project Structure\n"
CONTENTS_HEADER = "## File Contents\n\n"
FENCE = "```"


def render_structure(structure: Mapping[str, DirectoryListing]) -> str:
    """Render the directory mapping as indented JSON.

    Args:
        structure (Mapping[str, DirectoryListing]): relative directory path to its children

    Returns:
        str: the JSON text, keys in visit order
    """
    payload = {rel: listing.model_dump() for rel, listing in structure.items()}
    return json.dumps(payload, indent=2, ensure_ascii=False)


class SummaryWriter:
    """Stream summary sections to an open binary handle.

    File bodies are written as raw bytes; headers and fences are UTF-8. Used
    as a context manager, the handle is closed on exit whether or not the
    body raised; whatever was written stays on disk.
    """

    def __init__(self, stream: BinaryIO, path: Path) -> None:
        self.stream = stream
        self.path = path

    def __enter__(self) -> SummaryWriter:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        try:
            self.stream.close()
        except OSError as e:
            if exc is None:
                raise OutputFileError(path=self.path, reason=str(e)) from e

    def _write(self, data: bytes) -> None:
        try:
            self.stream.write(data)
        except OSError as e:
            raise OutputFileError(path=self.path, reason=str(e)) from e

    def _write_text(self, text: str) -> None:
        self._write(text.encode("utf-8"))

    def write_structure(self, structure: Mapping[str, DirectoryListing]) -> None:
        """Write the "Project Structure" section."""
        self._write_text(f"{STRUCTURE_HEADER}{FENCE}json\n{render_structure(structure)}\n{FENCE}\n\n")

    def begin_contents(self) -> None:
        self._write_text(CONTENTS_HEADER)

    def write_file(self, rel: str, content: bytes) -> None:
        """Write one file section: a heading with `rel` and the verbatim content in a fence.

        Args:
            rel (str): the file path relative to the root
            content (bytes): the raw file content
        """
        self._write_text(f"### {rel}\n{FENCE}\n")
        self._write(content)
        self._write_text(f"\n{FENCE}\n")


def open_summary(path: Path) -> SummaryWriter:
    """Create (or truncate) the summary file and return a writer over it.

    Args:
        path (Path): the output file

    Raises:
        OutputFileError: if the file cannot be created

    Returns:
        SummaryWriter: the writer bound to the open file, to be used in a ``with`` block
    """
    try:
        stream = path.open("wb")
    except OSError as e:
        raise OutputFileError(path=path, reason=str(e)) from e
    return SummaryWriter(stream, path)
