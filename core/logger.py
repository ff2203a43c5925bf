"""Structured logging — JSON outside dev, coloured console in dev.

Log events from the signing path carry chain, action kind and public
digests only.  ``redact_key_material`` scrubs any event field that looks
like key material before it reaches a renderer.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog

from config.settings import settings

_SECRET_FIELDS = frozenset({"private_key", "key", "secret", "seed", "mnemonic"})
_REDACTED = "***"

_configured = False


def redact_key_material(
    _logger: Any, _method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """structlog processor that masks secret-looking fields."""
    for name in list(event_dict):
        if name.lower() in _SECRET_FIELDS:
            event_dict[name] = _REDACTED
    return event_dict


def setup_logging(level: str | None = None) -> None:
    """Configure structlog processors and stdlib integration.  Idempotent."""
    global _configured
    if _configured:
        return

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        redact_key_material,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.APP_ENV == "dev":
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer(colors=True)
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    formatter = structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    # stdout belongs to the CLI's JSON output
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel((level or settings.LOG_LEVEL).upper())
    _configured = True


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Return a bound logger for the given module name."""
    setup_logging()
    return structlog.get_logger(name)
