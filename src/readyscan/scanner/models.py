from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from readyscan.chunking.models import ChunkingAnalysis
from readyscan.extractability.models import ExtractabilityMap
from readyscan.protocols import Category, Finding
from readyscan.scoring.models import ScoringResult

OPTIONAL_SECTIONS: Tuple[str, ...] = ("rules", "chunking", "extractability", "llm", "hallucination", "mirror")


class SectionState(str, Enum):
    """Outcome of one optional scan section."""

    OK = "ok"
    SKIPPED = "skipped"
    FAILED = "failed"
    TIMED_OUT = "timed_out"


@dataclass(slots=True, frozen=True)
class ScanResult:
    """Aggregate produced by one scan of one document."""

    scan_id: str
    url: str
    timestamp: datetime
    issues: Tuple[Finding, ...]
    scores: Dict[Category, int]
    scoring: ScoringResult
    chunking: Optional[ChunkingAnalysis] = None
    extractability: Optional[ExtractabilityMap] = None
    llm: Optional[Mapping[str, Any]] = None
    hallucination_report: Optional[Mapping[str, Any]] = None
    mirror_report: Optional[Mapping[str, Any]] = None
    sections: Dict[str, SectionState] = field(default_factory=dict)
    duration_seconds: float = 0.0

    @property
    def overall_score(self) -> float:
        return self.scoring.readiness.overall

    @property
    def grade(self) -> str:
        return self.scoring.readiness.grade

    def issues_in(self, category: Category) -> Tuple[Finding, ...]:
        return tuple(f for f in self.issues if f.category is category)
