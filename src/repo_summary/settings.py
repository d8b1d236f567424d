from __future__ import annotations

import os
from pathlib import Path

from dotenv import dotenv_values, find_dotenv
from pydantic import BaseModel, ConfigDict, Field

from repo_summary.config import ALL_FILES, DEFAULT_OUTPUT_NAME, OutputBase, SelectionMode

ENV_FILE = find_dotenv(usecwd=True)


def env_default(name: str, fallback: str = "") -> str:
    """Read a default from the process environment, then from the nearest ``.env``.

    Args:
        name (str): the variable name, e.g. ``REPO_SUMMARY_OUTPUT``
        fallback (str): value used when the variable is set nowhere

    Returns:
        str: the resolved default
    """
    if name in os.environ:
        return os.environ[name]
    if ENV_FILE:
        value = dotenv_values(ENV_FILE).get(name)
        if value is not None:
            return value
    return fallback


class Settings(BaseModel):
    """Configuration settings for a repo_summary run."""

    model_config = ConfigDict(arbitrary_types_allowed=True, frozen=True)

    root: str = Field(default="", description="Project root; blank means the current directory.")
    select: str = Field(default=ALL_FILES, description="'all' or a selection file path.")
    select_mode: SelectionMode = Field(
        default=SelectionMode.REGEX,
        description="How the selection file is read.",
    )
    output: Path = Field(default=Path(DEFAULT_OUTPUT_NAME), description="Summary output file.")
    output_base: OutputBase = Field(
        default=OutputBase.ROOT,
        description="Base directory for a relative output path.",
    )
    no_structure: bool = Field(default=False, description="Omit the project structure section.")
    ignore: list[str] = Field(default_factory=list, description="Extra built-in ignore prefixes.")
    log_file: str = Field(default="", description="Log file path.")
    interactive: bool = Field(default=False, description="Prompt for root and selection.")

    @property
    def selection_mode(self) -> SelectionMode:
        """Effective selection mode: ``all`` overrides the configured file mode."""
        if not self.select.strip() or self.select.strip() == ALL_FILES:
            return SelectionMode.ALL
        return self.select_mode
