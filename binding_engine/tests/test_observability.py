"""
Tests for logging setup and metrics tracking.
"""

import json
import logging

from prometheus_client import REGISTRY

from binding_engine import metrics
from binding_engine.logging_config import TraceIDFilter, get_logger, setup_logging


def test_json_log_lines_carry_trace_id(capsys):
    setup_logging(level="INFO", fmt="json")
    try:
        get_logger("binding.test", trace_id="testing/binding-request").info("resolving")
        line = capsys.readouterr().err.strip().splitlines()[-1]
    finally:
        logging.getLogger().handlers.clear()

    record = json.loads(line)
    assert record["message"] == "resolving"
    assert record["trace_id"] == "testing/binding-request"
    assert record["level"] == "INFO"


def test_text_format_and_unknown_level(capsys):
    setup_logging(level="LOUD", fmt="text")
    try:
        assert logging.getLogger().level == logging.INFO
        logging.getLogger("binding.test").info("plain")
        line = capsys.readouterr().err.strip().splitlines()[-1]
    finally:
        logging.getLogger().handlers.clear()

    assert line == "INFO binding.test [N/A] plain"


def test_trace_id_filter_defaults():
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "msg", None, None)

    assert TraceIDFilter().filter(record)
    assert record.trace_id == "N/A"


def test_annotation_counter():
    metrics.init_metrics()
    metrics.init_metrics()

    before = REGISTRY.get_sample_value("binding_annotations_total", {"outcome": "skipped"}) or 0
    metrics.track_annotation("skipped")
    after = REGISTRY.get_sample_value("binding_annotations_total", {"outcome": "skipped"})

    assert after == before + 1


def test_resolve_duration_observed():
    metrics.init_metrics()

    with metrics.track_resolve_duration("compose"):
        pass

    assert REGISTRY.get_sample_value("binding_resolve_duration_seconds_count", {"stage": "compose"}) >= 1
