"""structlog configuration for grid-dialogs.

Call ``configure_logging()`` once at startup (the CLI does it for you);
modules obtain loggers through ``get_logger(__name__)``. Until then the
processor chain is installed without touching stdlib handlers, so a
host application's logging setup stays in charge.
"""

from __future__ import annotations

import logging
import sys
from typing import Any, Literal

import structlog

LogFormat = Literal["console", "json"]

_configured = False
_processors_installed = False


def _install_processors(fmt: LogFormat = "console") -> None:
    global _processors_installed

    renderer: Any
    if fmt == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.stdlib.add_logger_name,
            structlog.stdlib.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )
    _processors_installed = True


def configure_logging(level: str = "WARNING", fmt: LogFormat = "console") -> None:
    """Configure structlog processors and the stdlib root handler.

    Safe to call more than once; later calls replace the configuration.

    Args:
        level: Log level name (e.g., "DEBUG", "INFO").
        fmt: "console" for human-readable output, "json" for JSON lines.
    """
    global _configured

    log_level = getattr(logging, level.upper(), logging.WARNING)
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=log_level,
        force=True,
    )
    _install_processors(fmt)
    _configured = True


def is_configured() -> bool:
    """Whether configure_logging() has run in this process."""
    return _configured


def get_logger(name: str | None = None, **initial_values: Any) -> Any:
    """Return a structlog logger bound to ``name`` and any initial context."""
    if not _processors_installed:
        _install_processors()
    logger = structlog.get_logger(name)
    if initial_values:
        logger = logger.bind(**initial_values)
    return logger
