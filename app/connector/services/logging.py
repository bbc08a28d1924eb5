from __future__ import annotations

"""Structured logging for the connector: structlog rendered as JSON via orjson."""

import logging
import os
import sys
from typing import Any

import orjson
import structlog


def _orjson_dumps(obj: Any, default: Any | None = None, **_: Any) -> str:
    # structlog.JSONRenderer passes extra kwargs; orjson only understands `default`
    return orjson.dumps(
        obj,
        default=default,  # type: ignore[arg-type]
        option=orjson.OPT_SORT_KEYS | orjson.OPT_APPEND_NEWLINE,
    ).decode()


def _drop_secrets(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Never let the API key reach the log stream."""

    for key in ("api_key", "x-gladia-key", "headers"):
        if key in event_dict:
            event_dict[key] = "***"
    return event_dict


def configure_logging(level: str = "INFO") -> None:
    """Configure structlog with JSON rendering and stdlib bridge.

    LOG_LEVEL env var overrides provided level.
    """
    env_level = os.getenv("LOG_LEVEL")
    if env_level:
        level = env_level
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    logging.basicConfig(level=numeric_level, handlers=[logging.StreamHandler(sys.stdout)])
    # httpx logs every request line at INFO; keep it for DEBUG runs only
    logging.getLogger("httpx").setLevel(max(numeric_level, logging.WARNING))

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _drop_secrets,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.UnicodeDecoder(),
            structlog.processors.JSONRenderer(serializer=_orjson_dumps),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(**initial: Any) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger, optionally bound to initial context."""

    logger = structlog.get_logger()
    return logger.bind(**initial) if initial else logger
