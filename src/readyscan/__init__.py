"""
readyscan: deterministic AI-readiness audit of a single web page.

    from readyscan import Scanner
    result = Scanner().scan_sync(Document.from_html(html, url))
    result.scoring.readiness.grade
"""

from readyscan.chunking import Chunker, ChunkingAnalysis, ContentChunk, analyze_chunk_quality
from readyscan.config import ScanConfig, settings
from readyscan.document import Document
from readyscan.exceptions import (
    ConfigurationError,
    DuplicateRuleError,
    ReadyScanError,
    RegistryError,
    RegistryFrozenError,
    UnknownRuleError,
)
from readyscan.extractability import ExtractabilityMap, ExtractabilityMapper
from readyscan.protocols import Category, Finding, FindingLocation, Severity
from readyscan.rules import REGISTRY, BaseRule, RuleMeta, RuleRegistry, RuleRunner, load_builtin_rules, register
from readyscan.scanner import LLMAnalyzer, Scanner, ScanResult, SectionState, fetch_document, to_json
from readyscan.scoring import ScoringEngine, ScoringResult

__version__ = "0.1.0"

__all__ = [
    "BaseRule",
    "Category",
    "Chunker",
    "ChunkingAnalysis",
    "ConfigurationError",
    "ContentChunk",
    "Document",
    "DuplicateRuleError",
    "ExtractabilityMap",
    "ExtractabilityMapper",
    "Finding",
    "FindingLocation",
    "LLMAnalyzer",
    "REGISTRY",
    "ReadyScanError",
    "RegistryError",
    "RegistryFrozenError",
    "RuleMeta",
    "RuleRegistry",
    "RuleRunner",
    "ScanConfig",
    "ScanResult",
    "Scanner",
    "ScoringEngine",
    "ScoringResult",
    "SectionState",
    "Severity",
    "UnknownRuleError",
    "analyze_chunk_quality",
    "fetch_document",
    "load_builtin_rules",
    "register",
    "settings",
    "to_json",
]
