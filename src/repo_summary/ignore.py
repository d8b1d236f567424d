"""Ignore rules: built-in prefixes layered with ``.gitignore`` and ``.summaryignore``."""

from __future__ import annotations

from typing import TYPE_CHECKING

import pathspec
from pydantic import BaseModel, ConfigDict, Field

from repo_summary.config import BUILTIN_IGNORES, GITIGNORE_NAME, SUMMARYIGNORE_NAME
from repo_summary.exceptions import IgnoreFileError
from repo_summary.logging import logger

if TYPE_CHECKING:
    from collections.abc import Sequence
    from pathlib import Path


def load_ignore_file(path: Path) -> pathspec.GitIgnoreSpec | None:
    """Compile a gitignore-style file into a GitIgnoreSpec.

    Args:
        path (Path): the ignore file, e.g. ``<root>/.gitignore``

    Raises:
        IgnoreFileError: if the file exists but cannot be read or holds an invalid pattern

    Returns:
        pathspec.GitIgnoreSpec | None: the compiled patterns, or None if the file is absent
    """
    if not path.is_file():
        return None
    try:
        spec = pathspec.GitIgnoreSpec.from_lines(path.read_text(encoding="utf-8").splitlines())
    except (OSError, ValueError) as e:
        raise IgnoreFileError(file=path, reason=str(e)) from e
    logger.info("loaded ignore file", path=str(path), patterns=len(spec.patterns))
    return spec


class IgnoreRuleSet(BaseModel):
    """Immutable set of ignore rules for one run.

    Attributes:
        prefixes: literal prefixes matched with ``str.startswith``.
        gitignore: patterns from the root ``.gitignore``, if any.
        summaryignore: patterns from the root ``.summaryignore``, if any.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    prefixes: tuple[str, ...] = Field(default=BUILTIN_IGNORES, description="Built-in literal prefixes")
    gitignore: pathspec.GitIgnoreSpec | None = Field(default=None, description="VCS ignore patterns")
    summaryignore: pathspec.GitIgnoreSpec | None = Field(default=None, description="Tool ignore patterns")

    @classmethod
    def load(cls, root: Path, extra_prefixes: Sequence[str] = ()) -> IgnoreRuleSet:
        """Build the rule set for `root`.

        Args:
            root (Path): the project root holding the optional ignore files
            extra_prefixes (Sequence[str]): prefixes appended to the built-ins,
                typically the output file's relative path

        Returns:
            IgnoreRuleSet: the loaded rules
        """
        extras = tuple(p for p in extra_prefixes if p and p not in BUILTIN_IGNORES)
        return cls(
            prefixes=BUILTIN_IGNORES + extras,
            gitignore=load_ignore_file(root / GITIGNORE_NAME),
            summaryignore=load_ignore_file(root / SUMMARYIGNORE_NAME),
        )

    def matches_prefix(self, rel: str) -> bool:
        return any(rel.startswith(prefix) for prefix in self.prefixes)

    def should_ignore(self, rel: str, *, is_dir: bool = False) -> bool:
        """Decide whether a root-relative path is excluded.

        Directories are tested with a trailing slash so that directory-only
        rules (``node_modules/``, ``build/``) prune the directory itself.

        Args:
            rel (str): the POSIX path relative to the root
            is_dir (bool): whether the path names a directory

        Returns:
            bool: True if any built-in prefix or ignore-file pattern matches
        """
        if not rel:
            return False
        candidate = f"{rel}/" if is_dir else rel
        if self.matches_prefix(candidate):
            return True
        return any(spec is not None and spec.match_file(candidate) for spec in (self.gitignore, self.summaryignore))
