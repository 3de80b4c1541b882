"""
Prometheus metrics for scans, rules and optional sections.
"""

from __future__ import annotations

from typing import Any, Dict

from prometheus_client import REGISTRY as _PROM_REGISTRY
from prometheus_client import Counter as _OrigCounter
from prometheus_client import Histogram as _OrigHistogram

# ---------------------------------------------------------------------------
# Duplicate-safe Prometheus metric wrappers
# ---------------------------------------------------------------------------
# Module re-imports during the test suite must not register collectors twice.


def _duplicate_safe_factory(metric_cls):
    """Return a factory that reuses an existing collector if already present."""

    def _factory(name: str, documentation: str, *args, **kwargs):  # type: ignore[override]
        # Counters register under their base name without the _total suffix.
        for key in (name, name.removesuffix("_total")):
            existing = _PROM_REGISTRY._names_to_collectors.get(key)
            if existing is not None:
                return existing  # type: ignore[return-value]

        try:
            return metric_cls(name, documentation, *args, **kwargs)  # type: ignore[call-arg]
        except ValueError:
            # Registration lost the race, fall back to the now-existing collector.
            return _PROM_REGISTRY._names_to_collectors[name]  # type: ignore[return-value]

    return _factory


Counter = _duplicate_safe_factory(_OrigCounter)  # type: ignore[assignment]
Histogram = _duplicate_safe_factory(_OrigHistogram)  # type: ignore[assignment]


def _create_metrics() -> Dict[str, Any]:
    return {
        "scans_total": Counter(
            "readyscan_scans_total",
            "Total number of completed scans",
            ["outcome"],
        ),
        "scan_duration_seconds": Histogram(
            "readyscan_scan_duration_seconds",
            "Wall-clock duration of a full scan",
            buckets=(0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0, 10.0, 30.0),
        ),
        "rule_duration_seconds": Histogram(
            "readyscan_rule_duration_seconds",
            "Execution time of a single rule",
            ["rule_id"],
            buckets=(0.001, 0.005, 0.01, 0.05, 0.1, 0.5, 1.0),
        ),
        "rule_failures_total": Counter(
            "readyscan_rule_failures_total",
            "Rules that raised during evaluation",
            ["rule_id", "error_type"],
        ),
        "findings_total": Counter(
            "readyscan_findings_total",
            "Findings emitted by rules",
            ["category", "severity"],
        ),
        "readiness_score": Histogram(
            "readyscan_readiness_score",
            "Distribution of overall readiness scores",
            buckets=(10, 20, 30, 40, 50, 60, 70, 80, 90, 100),
        ),
        "section_failures_total": Counter(
            "readyscan_section_failures_total",
            "Optional scan sections that failed or timed out",
            ["section", "state"],
        ),
    }


METRICS: Dict[str, Any] = _create_metrics()
