"""Structured logging for analysis runs using structlog.

Library modules log through plain ``logging.getLogger(__name__)`` loggers
(or a logger injected by the caller). The host application calls
:func:`configure_logging` once to route those records through structlog's
``ProcessorFormatter``.
"""

import logging
import sys
from typing import TextIO

import structlog

# Context keys bound for the duration of one analysis run
ANALYSIS_CONTEXT_KEYS = ("workflow_id", "workflow_name")


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
    ]


def _renderer(json_output: bool) -> list:
    if json_output:
        # Tracebacks from contained rule-module failures become a string field
        return [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return [structlog.dev.ConsoleRenderer(colors=True)]


def configure_logging(
    log_level: str = "info",
    json_output: bool = False,
    stream: TextIO | None = None,
) -> logging.Handler:
    """Configure structlog and the root logging handler.

    Args:
        log_level: Logging level string (debug/info/warning/error).
        json_output: If True, output JSON lines (CI / machine consumption).
            If False, coloured console output.
        stream: Where records are written. Defaults to stderr so analysis
            reports printed on stdout stay clean.

    Returns:
        The installed root handler.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    shared_processors = _shared_processors()

    structlog.configure(
        processors=shared_processors + [structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta]
            + _renderer(json_output),
            foreign_pre_chain=shared_processors,
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)
    return handler


def configure_from_settings(settings=None) -> logging.Handler:
    """Configure logging from :class:`flowaudit.config.Settings`."""
    if settings is None:
        from flowaudit.config import get_settings

        settings = get_settings()
    return configure_logging(log_level=settings.log_level, json_output=settings.json_logs)


def bind_analysis_context(workflow_id: str | None, workflow_name: str | None = None) -> None:
    """Bind the workflow being analysed to the current logging context."""
    ctx = {"workflow_id": workflow_id or "unknown"}
    if workflow_name:
        ctx["workflow_name"] = workflow_name
    structlog.contextvars.bind_contextvars(**ctx)


def clear_analysis_context() -> None:
    """Unbind the analysis context, leaving any caller-bound keys in place."""
    structlog.contextvars.unbind_contextvars(*ANALYSIS_CONTEXT_KEYS)
