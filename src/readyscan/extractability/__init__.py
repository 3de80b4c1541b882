from .content_types import analyze_content_types
from .detection import DetectionStrategy, HeuristicDetector
from .mapper import ExtractabilityMapper, classify_level
from .models import (
    ContentSource,
    ContentTypeBreakdown,
    ContentTypeStat,
    ExtractabilityIssue,
    ExtractabilityLevel,
    ExtractabilityMap,
    ExtractabilityScore,
    ExtractabilitySummary,
    ExtractableNode,
)

__all__ = [
    "ContentSource",
    "ContentTypeBreakdown",
    "ContentTypeStat",
    "DetectionStrategy",
    "ExtractabilityIssue",
    "ExtractabilityLevel",
    "ExtractabilityMap",
    "ExtractabilityMapper",
    "ExtractabilityScore",
    "ExtractabilitySummary",
    "ExtractableNode",
    "HeuristicDetector",
    "analyze_content_types",
    "classify_level",
]
