"""
repo_summary: flatten a project directory into one text summary.

Overview
--------
Walks a project tree depth-first in name order and writes a single document
made of:

1) an optional **Project Structure** block: a JSON map from each directory's
   relative path to its immediate sub-directories and files,
2) a **File Contents** part: one ``### <relative path>`` heading and one fenced
   block of verbatim content per selected text file.

Version-control metadata, editor settings, dependency directories, the tool's
own ignore files and the output file are always skipped. Patterns from the
root ``.gitignore`` and ``.summaryignore`` are honored. Files with a NUL byte in
their first 512 bytes are treated as binary and skipped.

Selection is either ``all`` or a file holding one relative path per line
(``--select-mode list``) or one regular expression per line
(``--select-mode regex``).

Usage
-----
Run ``python -m repo_summary.cli --help`` for full options. Common examples:
    - Whole project into ./output.txt:
        uv run python -m repo_summary.cli
    - Only Go sources under src/:
        echo '^src/.*\\.go$' > patterns.txt
        uv run python -m repo_summary.cli --select patterns.txt
    - An explicit list of files, no structure block:
        uv run python -m repo_summary.cli --select files.txt --select-mode list --no-structure
    - Prompt for the root and selection:
        uv run python -m repo_summary.cli --interactive
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from repo_summary import __version__
from repo_summary.config import ALL_FILES, DEFAULT_OUTPUT_NAME, OutputBase, SelectionMode
from repo_summary.exceptions import RepoSummaryError, WorkingDirectoryError
from repo_summary.file_manipulation import relpath
from repo_summary.ignore import IgnoreRuleSet
from repo_summary.logging import logger, setup_logging
from repo_summary.output_construction import open_summary
from repo_summary.selection import load_selection
from repo_summary.settings import Settings, env_default
from repo_summary.walker import Walker

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from repo_summary.walker import WalkReport


def parse_args(argv: Sequence[str] | None = None) -> Settings:
    """Parse command-line arguments into settings.

    Args:
        argv (Sequence[str] | None): arguments without the program name; ``sys.argv`` when None

    Returns:
        Settings: the validated settings
    """
    p = argparse.ArgumentParser(
        prog="repo-summary",
        description="Concatenate a project's text files into a single summary document.",
    )
    p.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    p.add_argument(
        "--root",
        type=str,
        default=env_default("REPO_SUMMARY_ROOT"),
        help="Project root (default: current directory).",
    )
    p.add_argument(
        "--select",
        type=str,
        default=ALL_FILES,
        help="'all', or a file listing paths or regex patterns (relative to the root).",
    )
    p.add_argument(
        "--select-mode",
        type=SelectionMode,
        choices=[SelectionMode.LIST, SelectionMode.REGEX],
        default=SelectionMode.REGEX,
        help="How to read the --select file.",
    )
    p.add_argument(
        "--output",
        type=Path,
        default=Path(env_default("REPO_SUMMARY_OUTPUT", DEFAULT_OUTPUT_NAME)),
        help="Summary file (default: output.txt).",
    )
    p.add_argument(
        "--output-base",
        type=OutputBase,
        choices=list(OutputBase),
        default=OutputBase.ROOT,
        help="Directory a relative --output is resolved against.",
    )
    p.add_argument("--no-structure", action="store_true", help="Omit the project structure block.")
    p.add_argument(
        "--ignore",
        action="append",
        default=[],
        metavar="PREFIX",
        help="Extra path prefix to always ignore (repeatable).",
    )
    p.add_argument(
        "--log-file",
        type=str,
        default=env_default("REPO_SUMMARY_LOG_FILE"),
        help="Log file path.",
    )
    p.add_argument("--interactive", action="store_true", help="Prompt for root and selection.")
    args = p.parse_args(argv)
    return Settings(**vars(args))


def prompt_settings(settings: Settings, ask: Callable[[str], str] | None = None) -> Settings:
    """Fill root and selection from interactive prompts.

    Args:
        settings (Settings): settings parsed from the command line
        ask (Callable[[str], str] | None): prompt function, ``input`` when None

    Returns:
        Settings: a copy with ``root`` and ``select`` replaced by the answers
    """
    ask = ask or input
    root = ask("Enter the root directory path (leave blank for current directory): ").strip()
    select = ask("Enter 'all' to process all files, or provide a filepath for a selection file: ").strip()
    return settings.model_copy(update={"root": root, "select": select or ALL_FILES})


def resolve_root(settings: Settings) -> Path:
    """Return the absolute project root.

    Raises:
        WorkingDirectoryError: if the root is blank and the current directory is gone

    Returns:
        Path: the resolved root
    """
    if settings.root.strip():
        return Path(settings.root.strip()).expanduser().resolve()
    try:
        return Path.cwd()
    except OSError as e:
        raise WorkingDirectoryError(reason=str(e)) from e


def resolve_output(settings: Settings, root: Path) -> Path:
    """Return the absolute output path, relative ones anchored per ``output_base``."""
    out = settings.output.expanduser()
    if out.is_absolute():
        return out
    if settings.output_base is OutputBase.CWD:
        try:
            return Path.cwd() / out
        except OSError as e:
            raise WorkingDirectoryError(reason=str(e)) from e
    return root / out


def generate_summary(settings: Settings) -> tuple[Path, WalkReport]:
    """Run one summary: load rules and selection, then write the document.

    Args:
        settings (Settings): the run configuration

    Raises:
        RepoSummaryError: on any fatal error (bad ignore file or pattern, output
            not writable, traversal failure)

    Returns:
        tuple[Path, WalkReport]: the output path and what went into it
    """
    root = resolve_root(settings)
    output = resolve_output(settings, root)

    extra = list(settings.ignore)
    output_rel = relpath(output.resolve(), root)
    if not Path(output_rel).is_absolute():
        extra.append(output_rel)

    rules = IgnoreRuleSet.load(root, extra_prefixes=extra)
    selection = load_selection(settings.selection_mode, settings.select, root)
    walker = Walker(root, rules, selection)
    logger.info("summarizing", root=str(root), output=str(output), mode=str(selection.mode))

    with open_summary(output) as writer:
        if not settings.no_structure:
            writer.write_structure(walker.capture_structure())
        writer.begin_contents()
        report = walker.run(writer)
    return output, report


def main(argv: Sequence[str] | None = None) -> int:
    settings = parse_args(argv)
    if settings.interactive:
        settings = prompt_settings(settings)

    try:
        if settings.log_file:
            setup_logging(settings.log_file)
        output, report = generate_summary(settings)
    except RepoSummaryError as e:
        logger.error("summary aborted", error=str(e))
        print(e, file=sys.stderr)
        return 1

    print(f"Wrote {output} files={len(report.included)}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
