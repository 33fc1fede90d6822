"""
structlog setup for ChainRisk.

One JSON line per event on stdout (LOG_FORMAT=console for local runs).
Events are snake_case names carried as `event_type`; chain, address and
source travel as keyword context. Upstream URLs logged under `source` or
`url` have API keys masked before rendering.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

from backend_chainrisk.config.env import mask_api_key

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_LEVEL_VALUE = getattr(logging, LOG_LEVEL, logging.INFO)
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").strip().lower()

ADDRESS_LOG_PREFIX = 16
URL_KEYS = ("source", "url")


def _normalize_event(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """structlog 'event' -> event_type."""
    if "event" in event_dict and "event_type" not in event_dict:
        event_dict["event_type"] = event_dict.pop("event")
    return event_dict


def _mask_urls(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in URL_KEYS:
        value = event_dict.get(key)
        if isinstance(value, str):
            event_dict[key] = mask_api_key(value)
    return event_dict


def configure_structlog(log_format: str = LOG_FORMAT, level: int = LOG_LEVEL_VALUE) -> None:
    renderer: Any
    if log_format == "json":
        renderer = structlog.processors.JSONRenderer()
    else:
        renderer = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="timestamp"),
            structlog.processors.format_exc_info,
            _mask_urls,
            _normalize_event,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stdout),
        cache_logger_on_first_use=True,
    )


if not structlog.is_configured():
    configure_structlog()


def get_logger(name: str) -> structlog.BoundLogger:
    """Module logger: get_logger(__name__).info("balance_fetched", chain="ethereum", address=short_address(a))."""
    return structlog.get_logger(name).bind(logger=name)


def short_address(address: str | None) -> str:
    address = address or ""
    if len(address) > ADDRESS_LOG_PREFIX:
        return address[:ADDRESS_LOG_PREFIX] + "..."
    return address
