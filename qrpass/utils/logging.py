"""Structured logging configuration using structlog.

Modules log through the standard library (``logging.getLogger(__name__)``);
the root handler formats those records with structlog's
``ProcessorFormatter`` so they share one processor chain, including
credential redaction.
"""

import logging
import re
import sys
from typing import Literal

import structlog
from structlog.typing import EventDict, Processor, WrappedLogger

# Event keys whose values must never reach a log sink
_SENSITIVE_KEYS = frozenset({"token", "secret", "secret_key", "token_secret_key", "authorization"})
_REDACTED = "[REDACTED]"

# Compact JWS: base64url JSON header (always starts "eyJ"), claims, signature
_COMPACT_TOKEN = re.compile(r"eyJ[\w-]*\.[\w-]+\.[\w-]*")

_HANDLER_NAME = "qrpass"


def redact_sensitive(_logger: WrappedLogger, _method: str, event_dict: EventDict) -> EventDict:
    """Mask credential material bound to a log event or embedded in its message."""
    for key in _SENSITIVE_KEYS.intersection(event_dict):
        event_dict[key] = _REDACTED
    event = event_dict.get("event")
    if isinstance(event, str):
        event_dict["event"] = _COMPACT_TOKEN.sub(_REDACTED, event)
    return event_dict


def _shared_processors() -> list[Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.ExtraAdder(),
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        redact_sensitive,
    ]


def build_formatter(log_format: Literal["json", "console"] = "json") -> structlog.stdlib.ProcessorFormatter:
    """Return a ``logging.Formatter`` that renders stdlib records through structlog."""
    processors: list[Processor] = [structlog.stdlib.ProcessorFormatter.remove_processors_meta]
    if log_format == "console":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors += [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=processors,
    )


def setup_logging(
    log_level: str = "INFO",
    log_format: Literal["json", "console"] = "json",
) -> None:
    """Configure structured logging with structlog.

    Args:
        log_level: Standard Python log level name (INFO, DEBUG, etc.).
        log_format: ``"json"`` for machine-readable output or ``"console"``
            for coloured local output.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.processors.StackInfoRenderer(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(build_formatter(log_format))

    root = logging.getLogger()
    # Replace only our own handler so repeated setup (and test capture handlers) survive
    for existing in list(root.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(level)

    # Reduce noise from third-party libraries
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)
