"""
Contract for the external language-model collaborator.

The scanner never talks to a model service itself. Whatever implements
:class:`LLMAnalyzer` returns opaque JSON-like payloads that are passed through
to the result and read by the readiness scorer, which tolerates missing or
malformed keys.
"""

from __future__ import annotations

from typing import Any, Mapping, Protocol, runtime_checkable

from readyscan.document import Document


@runtime_checkable
class LLMAnalyzer(Protocol):
    async def summarize(self, document: Document) -> Mapping[str, Any]:
        """Summary payload: ``summary``, ``keyTopics``, ``pageType``, ``readingLevel``..."""
        ...

    async def assess_hallucination(self, document: Document) -> Mapping[str, Any]:
        """Hallucination report with ``hallucinationRiskScore`` and ``triggers``."""
        ...

    async def mirror_test(self, document: Document) -> Mapping[str, Any]:
        """Mirror report whose ``summary`` holds ``alignmentScore`` and ``critical``."""
        ...
