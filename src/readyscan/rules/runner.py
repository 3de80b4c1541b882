"""
Concurrent rule execution with per-rule failure isolation.
"""

from __future__ import annotations

import asyncio
import time
from typing import List, Optional, Sequence, Tuple

import structlog

from readyscan.config import RuleToggles
from readyscan.document import Document
from readyscan.observability import histogram, increment
from readyscan.protocols import Finding

from .base import Rule, as_findings
from .registry import RuleRegistry, load_builtin_rules

logger = structlog.get_logger(__name__)


class RuleRunner:
    """
    Evaluates every enabled rule of a registry against one document.

    Rules run concurrently in worker threads. A rule that raises is logged and
    contributes no findings; the other rules are unaffected. Output order is
    (priority, rule id, emission order), independent of completion order.
    """

    def __init__(
        self,
        registry: Optional[RuleRegistry] = None,
        toggles: Optional[RuleToggles] = None,
        *,
        concurrent: bool = True,
    ) -> None:
        self.registry = registry if registry is not None else load_builtin_rules()
        self.toggles = toggles
        self.concurrent = concurrent
        self.logger = logger.bind(component="RuleRunner")

    def enabled_rules(self, document: Document) -> List[Rule]:
        toggles = self.toggles or document.config.rules
        categories = toggles.enabled_categories()
        disabled = set(toggles.disabled)
        return [
            rule
            for rule in self.registry
            if rule.meta.category in categories and rule.meta.id not in disabled
        ]

    async def run(self, document: Document) -> List[Finding]:
        if not self.concurrent:
            return self.run_sync(document)

        self.registry.freeze()
        document.prime()
        rules = self.enabled_rules(document)
        results = await asyncio.gather(
            *(asyncio.to_thread(self._evaluate, rule, document) for rule in rules),
            return_exceptions=True,
        )
        return self._collect(rules, results)

    def run_sync(self, document: Document) -> List[Finding]:
        """Sequential evaluation for callers without an event loop."""
        self.registry.freeze()
        document.prime()
        rules = self.enabled_rules(document)
        results: List[object] = []
        for rule in rules:
            try:
                results.append(self._evaluate(rule, document))
            except Exception as e:  # noqa: BLE001 - isolation boundary
                results.append(e)
        return self._collect(rules, results)

    def _evaluate(self, rule: Rule, document: Document) -> List[Finding]:
        start = time.perf_counter()
        try:
            return as_findings(rule.evaluate(document))
        finally:
            histogram("rule_duration_seconds", time.perf_counter() - start, {"rule_id": rule.meta.id})

    def _collect(self, rules: Sequence[Rule], results: Sequence[object]) -> List[Finding]:
        keyed: List[Tuple[Tuple[int, str, int], Finding]] = []
        for rule, result in zip(rules, results):
            if isinstance(result, BaseException):
                if not isinstance(result, Exception):
                    raise result
                self.logger.warning(
                    "Rule failed",
                    rule_id=rule.meta.id,
                    error_type=type(result).__name__,
                    error=str(result),
                )
                increment("rule_failures_total", labels={"rule_id": rule.meta.id, "error_type": type(result).__name__})
                continue
            for index, finding in enumerate(result):  # type: ignore[arg-type]
                keyed.append(((rule.meta.priority, rule.meta.id, index), finding))
                increment(
                    "findings_total",
                    labels={"category": finding.category.value, "severity": finding.severity.value},
                )

        keyed.sort(key=lambda item: item[0])
        findings = [finding for _, finding in keyed]
        self.logger.debug("Rules evaluated", rules=len(rules), findings=len(findings))
        return findings
