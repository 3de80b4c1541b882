from .config import (
    ChunkingConfig,
    DimensionWeights,
    ExtractabilityConfig,
    FetchConfig,
    FilterConfig,
    GradeBand,
    LazyConfig,
    LLMConfig,
    MonitoringConfig,
    RuleToggles,
    ScanConfig,
    ScoringConfig,
    find_config_file,
    settings,
)

__all__ = [
    "ChunkingConfig",
    "DimensionWeights",
    "ExtractabilityConfig",
    "FetchConfig",
    "FilterConfig",
    "GradeBand",
    "LazyConfig",
    "LLMConfig",
    "MonitoringConfig",
    "RuleToggles",
    "ScanConfig",
    "ScoringConfig",
    "find_config_file",
    "settings",
]
