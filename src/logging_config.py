"""
Structured logging with correlation IDs.

Uses structlog: JSON lines in production, colored console output in
development. Every entry emitted while a webhook is handled carries the
request's ``trace_id``; entries emitted while a call report is being
processed also carry its ``call_id`` and ``contact_id``.

Call summaries and transcripts can run to several kilobytes, so long
string values are clipped before rendering.

Usage:
    from src.logging_config import get_logger

    logger = get_logger(__name__)
    logger.info("field_extraction_complete", total_fields=7, transcript_fields=3)
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Any, Iterator

import structlog

from src.config import get_settings

trace_id_var: ContextVar[str] = ContextVar("trace_id", default="")
call_id_var: ContextVar[str] = ContextVar("call_id", default="")
contact_id_var: ContextVar[str] = ContextVar("contact_id", default="")

MAX_LOGGED_VALUE_LENGTH = 300

_CONTEXT_VARS = (
    ("trace_id", trace_id_var),
    ("call_id", call_id_var),
    ("contact_id", contact_id_var),
)


def _inject_context_vars(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    """Add the correlation IDs that are set in the current context."""
    for key, var in _CONTEXT_VARS:
        value = var.get("")
        if value and key not in event_dict:
            event_dict[key] = value
    return event_dict


def _clip_long_values(
    logger: Any, method_name: str, event_dict: dict[str, Any]
) -> dict[str, Any]:
    for key, value in event_dict.items():
        if key != "event" and isinstance(value, str) and len(value) > MAX_LOGGED_VALUE_LENGTH:
            event_dict[key] = f"{value[:MAX_LOGGED_VALUE_LENGTH]}... ({len(value)} chars)"
    return event_dict


def generate_trace_id() -> str:
    """Generate a short, unique trace ID for request correlation."""
    return uuid.uuid4().hex[:12]


@contextmanager
def bind_call_context(call_id: str | None, contact_id: str | None = None) -> Iterator[None]:
    """Tag every log entry inside the block with the call and contact IDs."""
    call_token = call_id_var.set(call_id or "")
    contact_token = contact_id_var.set(contact_id or "")
    try:
        yield
    finally:
        contact_id_var.reset(contact_token)
        call_id_var.reset(call_token)


def setup_logging() -> None:
    """
    Configure structlog and route stdlib logging through it.

    - **Production**: JSON output to stdout.
    - **Development / staging**: colored console output.
    """
    settings = get_settings()

    shared_processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        _inject_context_vars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        _clip_long_values,
    ]

    if settings.is_production:
        renderer: structlog.types.Processor = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())

    structlog.configure(
        processors=[
            *shared_processors,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    # uvicorn and httpx log through stdlib; give them the same renderer
    formatter = structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=shared_processors,
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            renderer,
        ],
    )

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(settings.log_level.upper())

    for noisy in ("httpx", "httpcore", "asyncio"):
        logging.getLogger(noisy).setLevel(logging.WARNING)
    # Access logs come from RequestIdMiddleware instead
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)
