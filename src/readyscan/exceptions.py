"""
Exception hierarchy for readyscan.
"""

from __future__ import annotations


class ReadyScanError(Exception):
    """Base class for all readyscan errors."""


class ConfigurationError(ReadyScanError):
    """Raised when a configuration cannot be loaded or is inconsistent."""


class RegistryError(ReadyScanError):
    """Base class for rule registry errors."""


class DuplicateRuleError(RegistryError):
    """Raised when a rule id is registered twice."""

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Rule '{rule_id}' is already registered")
        self.rule_id = rule_id


class RegistryFrozenError(RegistryError):
    """Raised when registering into a registry that is already in use."""

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Cannot register rule '{rule_id}': registry is frozen")
        self.rule_id = rule_id


class UnknownRuleError(RegistryError, KeyError):
    """Raised when looking up a rule id that was never registered."""

    def __init__(self, rule_id: str) -> None:
        super().__init__(f"Unknown rule '{rule_id}'")
        self.rule_id = rule_id

    def __str__(self) -> str:
        return self.args[0]
