from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

from repo_summary.exceptions import LogFileError

if TYPE_CHECKING:
    from pathlib import Path

_LOGGING_CONFIGURED = False


def setup_logging(filename: str | Path | None = None) -> structlog.BoundLogger:
    """Set up structured logging for the repo_summary module.

    Diagnostics are user-facing, so the default destination is stdout. Passing a
    filename (e.g. from ``--log-file``) after the first call swaps the handlers
    for a single UTF-8 file handler.

    Args:
        filename: Optional path to a log file. If None, logs are written to stdout.

    Raises:
        LogFileError: if the log file cannot be opened; the current handlers are kept.

    Returns:
        A structlog logger instance configured for the repo_summary module.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if filename:
        try:
            handlers: list[logging.Handler] = [logging.FileHandler(str(filename), encoding="utf-8")]
        except OSError as e:
            raise LogFileError(path=str(filename), reason=str(e)) from e
    else:
        handlers = [logging.StreamHandler(sys.stdout)]

    if not _LOGGING_CONFIGURED:
        logging.basicConfig(
            level=logging.INFO,
            handlers=handlers,
            format="%(message)s",
        )
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(logging.INFO),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_CONFIGURED = True
    elif filename:
        root = logging.getLogger()
        for handler in list(root.handlers):
            if type(handler) in {logging.FileHandler, logging.StreamHandler}:
                root.removeHandler(handler)
                handler.close()
        for handler in handlers:
            handler.setFormatter(logging.Formatter("%(message)s"))
            root.addHandler(handler)

    return structlog.get_logger("repo_summary")


logger = setup_logging()
