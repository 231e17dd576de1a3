from __future__ import annotations

import logging
import sys
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from pathlib import Path

_LOGGING_CONFIGURED = False


def setup_logging(
    filename: str | Path | None = None,
    *,
    level: int = logging.INFO,
    force: bool = False,
) -> structlog.BoundLogger:
    """Route structlog JSON events to stderr or a file, once or again on demand.

    The module configures a stderr logger at import time; the CLI calls this a
    second time with `force=True` once `--log-file` and `--verbose` are known,
    which replaces the root handlers and the level filter. Logs never go to
    stdout, which carries the exported repository stream.

    Args:
        filename: Optional path to a log file. If None, logs are written to stderr.
        level: Minimum level to emit.
        force: Reconfigure even if logging was already set up (used by the CLI once
            the log destination and verbosity are known).

    Returns:
        A structlog logger instance configured for the gprepo package.
    """
    global _LOGGING_CONFIGURED  # noqa: PLW0603
    if force or not _LOGGING_CONFIGURED:
        handlers: list[logging.Handler] = []
        if filename:
            handlers.append(logging.FileHandler(str(filename), encoding="utf-8"))
        else:
            handlers.append(logging.StreamHandler(sys.stderr))

        logging.basicConfig(
            level=level,
            handlers=handlers,
            format="%(message)s",
            force=True,
        )
        structlog.configure(
            processors=[
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.processors.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.processors.JSONRenderer(),
            ],
            wrapper_class=structlog.make_filtering_bound_logger(level),
            context_class=dict,
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=False,
        )
        _LOGGING_CONFIGURED = True

    return structlog.get_logger("gprepo")


logger = setup_logging()
