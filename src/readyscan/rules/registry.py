"""
Rule registry.

Rules register once, at import of their module, and the registry is frozen
before the first scan reads it.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from typing import Callable, Dict, Iterator, List

import structlog

from readyscan.exceptions import DuplicateRuleError, RegistryFrozenError, UnknownRuleError

from .base import Rule, RuleMeta

logger = structlog.get_logger(__name__)

RuleFactory = Callable[[RuleMeta], Rule]


@dataclass(slots=True, frozen=True)
class RegisteredRule:
    meta: RuleMeta
    rule: Rule
    factory: RuleFactory


class RuleRegistry:
    """Ordered mapping of rule id to rule instance."""

    def __init__(self) -> None:
        self._rules: Dict[str, RegisteredRule] = {}
        self._frozen = False
        self._lock = threading.Lock()

    def register(self, meta: RuleMeta, implementation: RuleFactory) -> Rule:
        """Register a rule class (or any factory taking ``RuleMeta``) under ``meta.id``."""
        with self._lock:
            if self._frozen:
                raise RegistryFrozenError(meta.id)
            if meta.id in self._rules:
                raise DuplicateRuleError(meta.id)
            rule = implementation(meta)
            if not isinstance(rule, Rule):
                raise TypeError(f"Implementation for '{meta.id}' does not satisfy the Rule protocol")
            self._rules[meta.id] = RegisteredRule(meta=meta, rule=rule, factory=implementation)
        logger.debug("Rule registered", rule_id=meta.id, category=meta.category.value)
        return rule

    def freeze(self) -> None:
        with self._lock:
            self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def get(self, rule_id: str) -> Rule:
        try:
            return self._rules[rule_id].rule
        except KeyError:
            raise UnknownRuleError(rule_id) from None

    def entries(self) -> List[RegisteredRule]:
        return list(self._rules.values())

    def __contains__(self, rule_id: object) -> bool:
        return rule_id in self._rules

    def __iter__(self) -> Iterator[Rule]:
        return (entry.rule for entry in list(self._rules.values()))

    def __len__(self) -> int:
        return len(self._rules)

    def copy(self, entries: List[RegisteredRule] | None = None) -> RuleRegistry:
        """New unfrozen registry holding ``entries`` (default: all) in the given order."""
        clone = RuleRegistry()
        for entry in entries if entries is not None else self.entries():
            clone.register(entry.meta, entry.factory)
        return clone


REGISTRY = RuleRegistry()


def register(meta: RuleMeta, implementation: RuleFactory) -> Rule:
    """Register into the process-wide registry."""
    return REGISTRY.register(meta, implementation)


def load_builtin_rules() -> RuleRegistry:
    """Import the built-in rule modules and freeze the process-wide registry."""
    from . import builtin  # noqa: F401

    REGISTRY.freeze()
    return REGISTRY
