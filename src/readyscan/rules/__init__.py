"""Rule plugin contract, registry and runner."""

from .base import BaseRule, Rule, RuleMeta, RuleOutcome, as_findings
from .registry import REGISTRY, RegisteredRule, RuleRegistry, load_builtin_rules, register
from .runner import RuleRunner

__all__ = [
    "BaseRule",
    "Rule",
    "RuleMeta",
    "RuleOutcome",
    "as_findings",
    "REGISTRY",
    "RegisteredRule",
    "RuleRegistry",
    "load_builtin_rules",
    "register",
    "RuleRunner",
]
