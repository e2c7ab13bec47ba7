"""
Structured logging for list-state hosts.

Library modules log through the standard ``logging`` module; the adapters
log through structlog.  ``setup_logging`` routes both into a single stdout
handler that renders JSON lines (or coloured console lines while
developing), each tagged with the service name.
"""

from __future__ import annotations

import enum
import logging
import sys
from typing import Any

import structlog

# ======================================================================
# Constants
# ======================================================================

SERVICE_NAME: str = "list-state"


# ======================================================================
# Custom processors
# ======================================================================


def add_service_name(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Inject the service name into every log event."""
    event_dict.setdefault("service", SERVICE_NAME)
    return event_dict


def render_enum_values(logger: Any, method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    """Replace enum members (change reasons, data types) by their plain values."""
    for key, value in event_dict.items():
        if isinstance(value, enum.Enum):
            event_dict[key] = value.value
    return event_dict


def _shared_processors() -> list[structlog.types.Processor]:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        add_service_name,  # type: ignore[list-item]
        render_enum_values,  # type: ignore[list-item]
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]


# ======================================================================
# Setup
# ======================================================================


def setup_logging(log_level: str = "INFO", *, json_output: bool = True) -> None:
    """
    Route structlog and stdlib records to one stdout handler.

    Calling it again replaces the previous handler.

    Parameters
    ----------
    log_level:
        Minimum severity as a string.  Notifier lifecycle traces switched
        on by ``debug_mode`` only appear at ``DEBUG``.
    json_output:
        JSON lines when true, ``structlog.dev.ConsoleRenderer`` otherwise.
    """
    level = getattr(logging, log_level.upper(), logging.INFO)
    pre_chain = _shared_processors()

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    renderer: structlog.types.Processor = (
        structlog.processors.JSONRenderer() if json_output else structlog.dev.ConsoleRenderer()
    )
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            foreign_pre_chain=pre_chain,
            processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
        )
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


# ======================================================================
# Logger factory
# ======================================================================


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Return a structlog logger named *name*; bind data source context on it::

        log = get_logger("list_state.events").bind(data_source="orders")
        log.info("data_requested", reason=ChangeReason.SEARCH)
    """
    return structlog.get_logger(name)  # type: ignore[no-any-return]
