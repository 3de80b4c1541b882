"""Tests for structured logging and Prometheus metrics helpers."""

import json
import logging

import pytest
import structlog
from prometheus_client import REGISTRY as PROM_REGISTRY

from readyscan.config import MonitoringConfig
from readyscan.observability import METRICS, configure_logging, export_prometheus, histogram, increment


def get_histogram_count(metric, **labels):
    """Current observation count of a (possibly labelled) histogram."""
    target = metric.labels(**labels) if labels else metric
    for family in target.collect():
        for sample in family.samples:
            if sample.name.endswith("_count") and all(sample.labels.get(k) == v for k, v in labels.items()):
                return sample.value
    return 0.0


def get_counter_value(name, **labels):
    return PROM_REGISTRY.get_sample_value(name, labels) or 0.0


@pytest.fixture
def restore_logging():
    """Undo global logging configuration after the test."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    for handler in root.handlers:
        if handler not in handlers:
            handler.close()
    root.handlers = handlers
    root.setLevel(level)
    structlog.reset_defaults()


class TestMetrics:
    """Counter and histogram helpers."""

    def test_increment_labelled_counter(self):
        """increment() adds to the labelled child."""
        name = "readyscan_section_failures_total"
        before = get_counter_value(name, section="llm", state="failed")

        increment("section_failures_total", labels={"section": "llm", "state": "failed"})
        increment("section_failures_total", 2, labels={"section": "llm", "state": "failed"})

        assert get_counter_value(name, section="llm", state="failed") == before + 3

    def test_histogram_observe(self):
        """histogram() records one observation per call."""
        metric = METRICS["scan_duration_seconds"]
        before = get_histogram_count(metric)

        histogram("scan_duration_seconds", 0.2)

        assert get_histogram_count(metric) == before + 1

    def test_unknown_metric_ignored(self):
        """Names outside the metric table are a no-op."""
        increment("no_such_metric")
        histogram("no_such_metric", 1.0)

    def test_export_contains_metric_names(self):
        """The text exposition lists readyscan metrics."""
        increment("scans_total", labels={"outcome": "ok"})

        text = export_prometheus()

        assert "readyscan_scans_total" in text
        assert "readyscan_rule_duration_seconds" in text


class TestLogging:
    """structlog configuration."""

    def test_file_output_is_json(self, tmp_path, restore_logging):
        """With a log file, records are written as JSON lines carrying the scan id."""
        log_file = tmp_path / "logs" / "scan.log"
        configure_logging(MonitoringConfig(log_file=str(log_file), log_level="debug"))

        with structlog.contextvars.bound_contextvars(scan_id="abc123"):
            structlog.get_logger("readyscan.test").info("Scan started", url="https://example.com/")

        records = [json.loads(line) for line in log_file.read_text().splitlines()]
        started = next(r for r in records if r["event"] == "Scan started")
        assert started["scan_id"] == "abc123"
        assert started["url"] == "https://example.com/"
        assert started["level"] == "info"

    def test_log_dir_created(self, tmp_path):
        """The log file's parent directory is created on validation."""
        MonitoringConfig(log_file=str(tmp_path / "nested" / "dir" / "x.log"))

        assert (tmp_path / "nested" / "dir").is_dir()

    def test_console_output(self, restore_logging, capsys):
        """Without a file, logging goes to stderr."""
        configure_logging(MonitoringConfig(log_level="INFO"))

        structlog.get_logger("readyscan.test").warning("Section failed", section="llm")

        assert "Section failed" in capsys.readouterr().err
