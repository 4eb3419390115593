"""Structured logging configuration for aumai-packageseal.

structlog is routed through the standard library logger named
``aumai_packageseal`` so that applications embedding the library keep control
of the root logger.  Library loggers carry their own processor chain; only
:func:`configure_logging`, called by the CLI, attaches a handler.

Environment Variables:
    AUMAI_PACKAGESEAL_LOG_FORMAT: "json" for JSON lines, "console" (default) otherwise
    AUMAI_PACKAGESEAL_LOG_LEVEL: DEBUG, INFO, WARNING (default) or ERROR
"""

from __future__ import annotations

import logging
import os
import sys
from typing import TextIO

import structlog
from structlog.typing import Processor

DEFAULT_LOG_LEVEL = "WARNING"
DEFAULT_LOG_FORMAT = "console"
LOGGER_NAMESPACE = "aumai_packageseal"

ENV_LOG_FORMAT = "AUMAI_PACKAGESEAL_LOG_FORMAT"
ENV_LOG_LEVEL = "AUMAI_PACKAGESEAL_LOG_LEVEL"

_logging_configured = False


def _get_shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


class _StderrHandler(logging.StreamHandler):
    """Write to whatever ``sys.stderr`` is when a record is emitted."""

    @property  # type: ignore[override]
    def stream(self) -> TextIO:
        return sys.stderr

    @stream.setter
    def stream(self, value: TextIO) -> None:
        pass


def configure_logging(
    log_format: str | None = None,
    log_level: str | None = None,
    force: bool = False,
) -> None:
    """Attach a rendering handler to the ``aumai_packageseal`` stdlib logger.

    Only applications call this; the CLI does so on start-up.  Importing the
    library never touches the global structlog or logging configuration.

    Args:
        log_format: "json" or "console". Defaults to the environment or "console".
        log_level: Minimum level name. Defaults to the environment or "WARNING".
        force: Reconfigure even if logging was already configured.
    """
    global _logging_configured

    if _logging_configured and not force:
        return

    log_format = (log_format or os.environ.get(ENV_LOG_FORMAT, DEFAULT_LOG_FORMAT)).lower()
    log_level = (log_level or os.environ.get(ENV_LOG_LEVEL, DEFAULT_LOG_LEVEL)).upper()

    renderer: Processor
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=False)

    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_get_shared_processors(),
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )
    handler = _StderrHandler()
    handler.setFormatter(formatter)

    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    package_logger.handlers.clear()
    package_logger.addHandler(handler)
    package_logger.setLevel(getattr(logging, log_level, logging.WARNING))
    package_logger.propagate = False

    _logging_configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a structured logger writing to the stdlib logger *name*.

    The processor chain is bound to this logger alone, so the host
    application's ``structlog.configure`` settings are neither used nor
    replaced.  Event dicts reach stdlib handlers through
    ``ProcessorFormatter.wrap_for_formatter``.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("packageseal.key.fetched", identity="alice")
    """
    return structlog.wrap_logger(
        logging.getLogger(name),
        processors=[
            structlog.stdlib.filter_by_level,
            *_get_shared_processors(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
    )


logging.getLogger(LOGGER_NAMESPACE).addHandler(logging.NullHandler())

__all__ = ["configure_logging", "get_logger"]
