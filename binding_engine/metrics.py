"""
Prometheus metrics for binding resolution.

Metrics stay unregistered (and every tracking call is a no-op) until
init_metrics() or start_metrics_server() is called.

Usage:
    from binding_engine.metrics import start_metrics_server, track_annotation

    start_metrics_server(enabled=True, port=8080)
    track_annotation("resolved")
"""

import logging
import threading
from contextlib import contextmanager
from typing import Generator, Optional

from prometheus_client import Counter, Histogram, start_http_server

logger = logging.getLogger(__name__)

ANNOTATIONS_TOTAL: Optional[Counter] = None
RESOLVE_DURATION: Optional[Histogram] = None

_metrics_initialized = False
_metrics_lock = threading.Lock()


def init_metrics() -> None:
    """
    Register metrics with the default registry (idempotent, thread-safe).
    """
    global ANNOTATIONS_TOTAL, RESOLVE_DURATION, _metrics_initialized

    with _metrics_lock:
        if _metrics_initialized:
            return

        # Annotation outcomes (labels: outcome = resolved | skipped)
        ANNOTATIONS_TOTAL = Counter(
            "binding_annotations_total",
            "Total number of binding annotations processed",
            labelnames=["outcome"],
        )

        # Full resolution pass duration (labels: stage = contexts | compose)
        RESOLVE_DURATION = Histogram(
            "binding_resolve_duration_seconds",
            "Duration of binding resolution stages in seconds",
            labelnames=["stage"],
            buckets=(0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0, 30.0),
        )

        _metrics_initialized = True
        logger.info("Prometheus metrics initialized")


def start_metrics_server(enabled: bool, port: int) -> None:
    """
    Start the Prometheus HTTP endpoint in a background thread.

    Args:
        enabled: Whether to start the server at all
        port: HTTP port for /metrics
    """
    if not enabled:
        logger.info("Metrics server disabled")
        return

    init_metrics()
    start_http_server(port, addr="0.0.0.0")
    logger.info(f"Metrics server started on http://0.0.0.0:{port}/metrics")


@contextmanager
def track_resolve_duration(stage: str) -> Generator[None, None, None]:
    """
    Time a resolution stage.

    Usage:
        with track_resolve_duration("contexts"):
            ...
    """
    if RESOLVE_DURATION is None:
        yield
        return

    with RESOLVE_DURATION.labels(stage=stage).time():
        yield


def track_annotation(outcome: str) -> None:
    """Count one processed annotation (``resolved`` or ``skipped``)."""
    if ANNOTATIONS_TOTAL is not None:
        ANNOTATIONS_TOTAL.labels(outcome=outcome).inc()
