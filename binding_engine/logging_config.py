"""
Logging setup for binding resolution.

Every line of one resolution pass carries the binding request's
``namespace/name`` as ``trace_id``. Output goes to stderr so stdout stays
free for ``--json`` results.

Environment Variables:
    BINDING_LOG_LEVEL: Level name - default: INFO
    BINDING_LOG_FORMAT: json or text - default: json
"""

import logging
import os
import sys
from typing import Optional

from pythonjsonlogger import jsonlogger

NO_TRACE = "N/A"


def _formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return jsonlogger.JsonFormatter(
            "%(asctime)s %(name)s %(levelname)s %(message)s %(trace_id)s",
            rename_fields={"asctime": "timestamp", "name": "logger", "levelname": "level"},
        )
    return logging.Formatter("%(levelname)s %(name)s [%(trace_id)s] %(message)s")


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """
    Replace the root logger's handlers with one stderr handler.

    Arguments override BINDING_LOG_LEVEL / BINDING_LOG_FORMAT; an unknown
    level name falls back to INFO.
    """
    level_name = (level or os.getenv("BINDING_LOG_LEVEL", "INFO")).upper()
    resolved = logging.getLevelName(level_name)
    if not isinstance(resolved, int):
        resolved = logging.INFO

    handler = logging.StreamHandler(sys.stderr)
    handler.addFilter(TraceIDFilter())
    handler.setFormatter(_formatter((fmt or os.getenv("BINDING_LOG_FORMAT", "json")).lower()))

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(resolved)

    # live reads log every request at DEBUG
    logging.getLogger("urllib3").setLevel(max(resolved, logging.WARNING))


def get_logger(name: str, trace_id: Optional[str] = None) -> logging.LoggerAdapter:
    """Logger adapter stamping ``trace_id`` (namespace/name) on each record."""
    return logging.LoggerAdapter(logging.getLogger(name), {"trace_id": trace_id or NO_TRACE})


class TraceIDFilter(logging.Filter):
    """Fills ``trace_id`` for records logged without the adapter."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "trace_id"):
            record.trace_id = NO_TRACE  # type: ignore
        return True
