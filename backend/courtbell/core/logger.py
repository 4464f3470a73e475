"""
Logging setup for CourtBell.

Every record passing through the ``courtbell`` logger carries a
``correlation_id`` attribute, filled from the request-scoped context variable
set by ``CorrelationMiddleware`` ("-" outside of a request).
"""
from __future__ import annotations

import logging
import sys
from contextvars import ContextVar

from courtbell.core.config import settings

correlation_id_var: ContextVar[str] = ContextVar("correlation_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] [cid=%(correlation_id)s] %(message)s"


class CorrelationIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "correlation_id"):
            record.correlation_id = correlation_id_var.get()
        return True


def configure_logging(level: int | None = None) -> logging.Logger:
    """Configure the package logger once; repeated calls only adjust the level."""
    root = logging.getLogger("courtbell")
    root.setLevel(level if level is not None else (logging.DEBUG if settings.DEBUG else logging.INFO))

    if not any(getattr(h, "_courtbell", False) for h in root.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.addFilter(CorrelationIdFilter())
        handler._courtbell = True  # type: ignore[attr-defined]
        root.addHandler(handler)
        root.propagate = False

    return root


logger = configure_logging()
