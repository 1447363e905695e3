"""Structured logging setup.

structlog drives all log output; the renderer is JSON or a console renderer
depending on ``Settings.log_format``. Records go to stdout unless the caller
passes another stream, e.g. stderr when stdout carries machine output.
"""

import logging
import sys
from typing import Any, TextIO

import structlog
from structlog.types import Processor

from candle_sim.config import LogFormat, Settings, get_settings


def setup_logging(settings: Settings | None = None, *, stream: TextIO | None = None) -> None:
    """Configure stdlib level and structlog processors from settings.

    Safe to call repeatedly; each call replaces the root handler.
    """
    settings = settings or get_settings()
    stream = stream or sys.stdout

    logging.basicConfig(
        format="%(message)s",
        stream=stream,
        level=getattr(logging, settings.log_level),
        force=True,
    )

    # Drop below-level events before any rendering work.
    shared_processors: list[Processor] = [
        structlog.stdlib.filter_by_level,
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
    ]

    if settings.log_format == LogFormat.JSON:
        processors: list[Processor] = [
            *shared_processors,
            structlog.processors.dict_tracebacks,
            structlog.processors.JSONRenderer(),
        ]
    else:
        processors = [
            *shared_processors,
            structlog.dev.ConsoleRenderer(colors=stream.isatty()),
        ]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Return a structlog logger.

    Args:
        name: Logger name. ``None`` uses the calling module's name.
    """
    return structlog.get_logger(name)


def log_order_execution(
    logger: structlog.stdlib.BoundLogger,
    *,
    kind: str,
    quantity: float | None,
    price: float | None,
    amount: float,
    record_id: str,
    **kwargs: Any,
) -> None:
    """Log an accepted ledger operation."""
    logger.info(
        "order_execution",
        kind=kind,
        quantity=quantity,
        price=price,
        amount=amount,
        record_id=record_id,
        **kwargs,
    )


def log_order_rejected(
    logger: structlog.stdlib.BoundLogger,
    *,
    action: str,
    error: str,
    **kwargs: Any,
) -> None:
    """Log a rejected ledger operation."""
    logger.warning(
        "order_rejected",
        action=action,
        error=error,
        **kwargs,
    )


def log_candle(
    logger: structlog.stdlib.BoundLogger,
    *,
    open_: float,
    close: float,
    volume: int,
    history_len: int,
    **kwargs: Any,
) -> None:
    """Log a generated candle at debug level."""
    logger.debug(
        "candle_generated",
        open=open_,
        close=close,
        volume=volume,
        history_len=history_len,
        **kwargs,
    )
