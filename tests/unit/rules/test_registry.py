"""Unit tests for the rule registry."""

import pytest

from readyscan.document import Document
from readyscan.exceptions import DuplicateRuleError, RegistryFrozenError, UnknownRuleError
from readyscan.protocols import Category, Severity
from readyscan.rules import REGISTRY, BaseRule, RuleMeta, RuleRegistry, load_builtin_rules


class NoopRule(BaseRule):
    def evaluate(self, document: Document):
        return None


def meta(rule_id: str = "TEST-001", priority: int = 100) -> RuleMeta:
    return RuleMeta(
        id=rule_id,
        title="Test rule",
        category=Category.MISC,
        severity=Severity.LOW,
        priority=priority,
    )


class TestRuleRegistry:
    """Registration, lookup and freezing."""

    def test_register_and_get(self):
        """A registered rule is retrievable by id and carries its metadata."""
        registry = RuleRegistry()
        rule = registry.register(meta(), NoopRule)

        assert "TEST-001" in registry
        assert registry.get("TEST-001") is rule
        assert rule.meta.priority == 100
        assert len(registry) == 1

    def test_duplicate_id_rejected(self):
        """Registering the same id twice raises and keeps the first rule."""
        registry = RuleRegistry()
        first = registry.register(meta(), NoopRule)

        with pytest.raises(DuplicateRuleError) as exc_info:
            registry.register(meta(), NoopRule)

        assert exc_info.value.rule_id == "TEST-001"
        assert registry.get("TEST-001") is first

    def test_frozen_registry_rejects_registration(self):
        """Registration after freeze() fails."""
        registry = RuleRegistry()
        registry.register(meta("TEST-001"), NoopRule)
        registry.freeze()

        assert registry.frozen
        with pytest.raises(RegistryFrozenError):
            registry.register(meta("TEST-002"), NoopRule)
        assert len(registry) == 1

    def test_unknown_rule(self):
        """Looking up an unregistered id raises UnknownRuleError, which is also a KeyError."""
        registry = RuleRegistry()

        with pytest.raises(UnknownRuleError, match="Unknown rule 'NOPE'"):
            registry.get("NOPE")
        with pytest.raises(KeyError):
            registry.get("NOPE")

    def test_non_rule_implementation_rejected(self):
        """Factories must produce objects satisfying the Rule protocol."""
        registry = RuleRegistry()

        with pytest.raises(TypeError):
            registry.register(meta(), lambda m: object())

    def test_copy_is_unfrozen(self):
        """copy() rebuilds an independent, writable registry."""
        registry = RuleRegistry()
        registry.register(meta("TEST-001"), NoopRule)
        registry.freeze()

        clone = registry.copy()
        clone.register(meta("TEST-002"), NoopRule)

        assert len(clone) == 2
        assert len(registry) == 1


class TestBuiltinRegistry:
    """The process-wide registry populated by the built-in rule modules."""

    def test_builtin_rules_loaded_and_frozen(self):
        """Loading built-ins freezes the global registry."""
        registry = load_builtin_rules()

        assert registry is REGISTRY
        assert registry.frozen
        for rule_id in ("AIREAD-001", "AIREAD-003", "AIREAD-014", "CHUNK-001", "EXTRACT-001", "CRAWL-001",
                        "TECH-001", "TECH-007", "A11Y-001", "KG-001"):
            assert rule_id in registry

    def test_loading_twice_is_harmless(self):
        """Re-importing the built-ins does not re-register anything."""
        first = len(load_builtin_rules())
        second = len(load_builtin_rules())

        assert first == second

    def test_builtin_ids_unique(self):
        """Every registered rule has a distinct id."""
        ids = [rule.meta.id for rule in load_builtin_rules()]

        assert len(ids) == len(set(ids))
