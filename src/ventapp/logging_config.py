"""Structured logging for the API server and the ``vent`` client.

The server logs to stdout (JSON in production). Client commands log to
stderr at WARNING so diagnostics never interleave with the replies and
history they print on stdout.
"""

import logging
import sys
from collections.abc import Mapping
from typing import Any, TextIO

import structlog

REDACTED = "***REDACTED***"

SENSITIVE_KEYS: frozenset[str] = frozenset(
    {"api_key", "authorization", "openrouter_api_key", "secret", "token"}
)

# One INFO line per outbound request or access; too chatty for our logs.
NOISY_LOGGERS: tuple[str, ...] = ("uvicorn.access", "httpx", "httpcore")


def _scrub(value: Any) -> Any:
    if isinstance(value, Mapping):
        return {
            k: REDACTED if str(k).lower() in SENSITIVE_KEYS else _scrub(v)
            for k, v in value.items()
        }
    return value


def redact_secrets(
    logger: logging.Logger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    """Mask sensitive values, including ones nested in header mappings."""
    for key, value in event_dict.items():
        if key.lower() in SENSITIVE_KEYS:
            event_dict[key] = REDACTED
        else:
            event_dict[key] = _scrub(value)
    return event_dict


def _renderer(environment: str, stream: TextIO) -> structlog.types.Processor:
    if environment == "production":
        # Complaints are mostly Chinese; keep them readable in the JSON.
        return structlog.processors.JSONRenderer(ensure_ascii=False)
    return structlog.dev.ConsoleRenderer(colors=stream.isatty())


def configure_logging(
    environment: str = "development",
    log_level: str = "INFO",
    stream: TextIO | None = None,
) -> None:
    """Route structlog and stdlib logging through one handler.

    Args:
        environment: 'production' for JSON lines, anything else for
            console output (colored only when ``stream`` is a terminal).
        log_level: Root log level name (DEBUG, INFO, WARNING, ...).
        stream: Destination; defaults to stdout.
    """
    stream = stream if stream is not None else sys.stdout

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        redact_secrets,
    ]

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *pre_chain,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            # uvicorn and other stdlib loggers get the same timestamp/level.
            foreign_pre_chain=pre_chain,
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(environment, stream),
            ],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(log_level.upper())

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
