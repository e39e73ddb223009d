"""Structured logging for the brandrag API, CLI and services.

One processor chain renders every event, either as coloured console lines
(development) or JSON (``APP_ENV=production`` or ``json_output=True``).
Standard-library ``logging`` records from uvicorn, httpx and aiosqlite go
through the same formatter.

Per-request and per-brand fields are carried in structlog context
variables: :func:`bind_context` attaches them (``request_id``, ``brand_id``,
``document_id``) so every event logged further down the call chain includes
them, and :func:`clear_context` drops them when the unit of work ends.
"""

import logging
import os
import sys

import structlog

# Chatty at INFO; their per-call lines add nothing to the events we log.
_QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite", "openai")


def configure_logging(log_level: str = "INFO", json_output: bool = False) -> structlog.BoundLogger:
    """Configure structlog and route stdlib logging through it.

    Args:
        log_level: DEBUG, INFO, WARNING or ERROR.
        json_output: Force JSON output regardless of ``APP_ENV``.

    Returns:
        The root structlog logger.
    """
    use_json = json_output or os.environ.get("APP_ENV", "development") == "production"
    level = log_level.upper()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.dev.set_exc_info,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if use_json:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[*shared_processors, renderer],
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                *shared_processors,
                renderer,
            ],
        )
    )

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    if level != "DEBUG":
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    return structlog.get_logger()


def get_logger(name: str) -> structlog.BoundLogger:
    """Return a logger bound with ``logger_name=name``, configuring defaults on first use."""
    if not structlog.is_configured():
        configure_logging()

    return structlog.get_logger(logger_name=name)


def bind_context(**values: object) -> None:
    """Attach *values* to every event logged in the current context.

    ``None`` values are skipped so callers can pass optional ids directly.
    """
    structlog.contextvars.bind_contextvars(
        **{key: value for key, value in values.items() if value is not None}
    )


def clear_context() -> None:
    """Drop everything bound with :func:`bind_context`."""
    structlog.contextvars.clear_contextvars()
