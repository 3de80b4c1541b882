"""
Configuration management for readyscan using Pydantic.
"""

from __future__ import annotations

import logging
import threading
from pathlib import Path
from typing import Any, ClassVar, Dict, List, Literal, Optional, cast

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from readyscan.exceptions import ConfigurationError
from readyscan.protocols import Category, Severity

# --- Setup Logging ---
log = logging.getLogger(__name__)

# --- Defaults ---

DEFAULT_SEVERITY_MULTIPLIERS: Dict[Severity, float] = {
    Severity.CRITICAL: 3.0,
    Severity.HIGH: 2.0,
    Severity.MEDIUM: 1.0,
    Severity.LOW: 0.5,
    Severity.INFO: 0.0,
}

DEFAULT_CATEGORY_WEIGHTS: Dict[Category, float] = {
    Category.READABILITY: 1.5,
    Category.EXTRACTION: 1.4,
    Category.CHUNKING: 1.3,
    Category.CRAWLABILITY: 1.2,
    Category.ACCESSIBILITY: 1.2,
    Category.KNOWLEDGE_GRAPH: 1.1,
    Category.TECHNICAL: 1.0,
    Category.HALLUCINATION: 0.9,
    Category.MISC: 0.5,
}

DEFAULT_QUICK_WIN_KEYWORDS = ["missing", "add", "include", "use", "meta", "alt", "title", "h1"]

# --- Nested Configuration Models ---


class GradeBand(BaseModel):
    """Lower bound (inclusive) of a letter grade."""

    min_score: float
    grade: str


DEFAULT_GRADE_TABLE: List[GradeBand] = [
    GradeBand(min_score=97, grade="A+"),
    GradeBand(min_score=93, grade="A"),
    GradeBand(min_score=90, grade="A-"),
    GradeBand(min_score=87, grade="B+"),
    GradeBand(min_score=83, grade="B"),
    GradeBand(min_score=80, grade="B-"),
    GradeBand(min_score=77, grade="C+"),
    GradeBand(min_score=73, grade="C"),
    GradeBand(min_score=70, grade="C-"),
    GradeBand(min_score=60, grade="D"),
    GradeBand(min_score=0, grade="F"),
]


class DimensionWeights(BaseModel):
    """Weights of the five readiness dimensions. Must sum to 1.0."""

    content_quality: float = 0.30
    comprehensibility: float = 0.25
    extractability: float = 0.20
    discoverability: float = 0.15
    trustworthiness: float = 0.10

    @model_validator(mode="after")
    def check_sum(self) -> "DimensionWeights":
        total = sum(self.as_dict().values())
        if abs(total - 1.0) > 1e-6:
            raise ValueError(f"dimension weights must sum to 1.0, got {total:.4f}")
        return self

    def as_dict(self) -> Dict[str, float]:
        return {
            "content_quality": self.content_quality,
            "discoverability": self.discoverability,
            "extractability": self.extractability,
            "comprehensibility": self.comprehensibility,
            "trustworthiness": self.trustworthiness,
        }


class ScoringConfig(BaseModel):
    """Constants of the category and readiness scoring model."""

    severity_multipliers: Dict[Severity, float] = Field(
        default_factory=lambda: dict(DEFAULT_SEVERITY_MULTIPLIERS),
        description="Multiplier applied to a finding's impact by severity.",
    )
    category_weights: Dict[Category, float] = Field(
        default_factory=lambda: dict(DEFAULT_CATEGORY_WEIGHTS),
        description="Relative weight of each category in the overall category score.",
    )
    penalty_factor: float = Field(default=0.5, description="Scale applied to weighted impact penalties.")
    no_findings_score: float = Field(default=95.0, description="Score of a category or dimension with no findings.")
    cap_at_baseline: bool = Field(
        default=True,
        description="Never let a penalized score exceed the no-findings score.",
    )
    dimension_weights: DimensionWeights = Field(default_factory=DimensionWeights)
    grade_table: List[GradeBand] = Field(default_factory=lambda: list(DEFAULT_GRADE_TABLE))
    trust_baseline: float = Field(default=85.0, description="Trust score when no hallucination report exists.")
    hallucination_penalty_per_issue: float = 3.0
    hallucination_penalty_cap: float = 20.0
    hidden_content_threshold: float = Field(default=20.0, description="Hidden percent above which extractability is reduced.")
    quick_win_min_impact: float = 15.0
    quick_win_keywords: List[str] = Field(default_factory=lambda: list(DEFAULT_QUICK_WIN_KEYWORDS))
    max_quick_wins: int = 5
    roadmap_bucket_size: int = 5
    agent_capability_threshold: float = Field(default=70.0, description="Dimension score at which an agent capability is granted.")
    blocker_threshold: float = Field(default=60.0, description="Dimension score below which a blocker is reported.")
    benchmark_mean: float = 65.0
    benchmark_std: float = 15.0

    @field_validator("severity_multipliers")
    @classmethod
    def validate_multipliers(cls, v: Dict[Severity, float]) -> Dict[Severity, float]:
        """Every severity needs a multiplier."""
        missing = [s.value for s in Severity if s not in v]
        if missing:
            raise ValueError(f"severity_multipliers missing entries for: {', '.join(missing)}")
        return v

    @field_validator("category_weights")
    @classmethod
    def validate_category_weights(cls, v: Dict[Category, float]) -> Dict[Category, float]:
        """Every category needs a weight."""
        missing = [c.value for c in Category if c not in v]
        if missing:
            raise ValueError(f"category_weights missing entries for: {', '.join(missing)}")
        return v

    @field_validator("grade_table")
    @classmethod
    def validate_grade_table(cls, v: List[GradeBand]) -> List[GradeBand]:
        """Bands must be strictly descending and end at 0 so every score has a grade."""
        if not v:
            raise ValueError("grade_table must not be empty")
        thresholds = [band.min_score for band in v]
        if any(a <= b for a, b in zip(thresholds, thresholds[1:])):
            raise ValueError("grade_table thresholds must be strictly descending")
        if thresholds[-1] > 0:
            raise ValueError("grade_table must end with a band starting at 0")
        return v

    def grade_for(self, score: float) -> str:
        for band in self.grade_table:
            if score >= band.min_score:
                return band.grade
        return self.grade_table[-1].grade


class ChunkingConfig(BaseModel):
    """Configuration for content chunking."""

    strategy: Literal["auto", "heading-based", "paragraph-based"] = Field(
        default="auto", description="Chunking strategy; 'auto' picks heading-based when headings exist."
    )
    min_headings: int = Field(default=2, description="Headings required for heading-based chunking in auto mode.")
    large_chunk_tokens: int = 1000
    small_chunk_tokens: int = 50
    high_noise_ratio: float = 0.5


class ExtractabilityConfig(BaseModel):
    """Configuration for the DOM extractability mapper."""

    max_nodes: int = Field(default=500, description="Maximum number of content nodes sampled.")
    include_hidden: bool = Field(default=True, description="Include hidden nodes in the sample.")
    min_text_length: int = Field(default=5, description="Nodes with shorter text are skipped unless include_hidden is set.")
    hidden_threshold: float = 20.0
    interactive_threshold: float = 30.0
    iframe_threshold: float = 10.0
    server_rendered_threshold: float = 50.0
    low_score_threshold: float = 70.0

    @field_validator("max_nodes")
    @classmethod
    def validate_max_nodes(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_nodes must be positive")
        return v


class FilterConfig(BaseModel):
    """Post-filters applied to rule findings before presentation."""

    min_impact_score: float = Field(default=8, description="Drop findings below this impact.")
    min_confidence: float = Field(default=0.7, description="Drop findings below this confidence.")
    max_issues: int = Field(default=15, description="Keep at most this many findings.")

    @field_validator("min_confidence")
    @classmethod
    def validate_confidence(cls, v: float) -> float:
        if not 0.0 <= v <= 1.0:
            raise ValueError("min_confidence must be between 0.0 and 1.0")
        return v


class RuleToggles(BaseModel):
    """Enable or disable rule families by category."""

    airead: bool = True
    extract: bool = True
    chunk: bool = True
    crawl: bool = True
    tech: bool = True
    kg: bool = True
    a11y: bool = True
    hall: bool = True
    disabled: List[str] = Field(default_factory=list, description="Rule ids to skip.")

    def enabled_categories(self) -> set[Category]:
        toggles = {
            Category.READABILITY: self.airead,
            Category.EXTRACTION: self.extract,
            Category.CHUNKING: self.chunk,
            Category.CRAWLABILITY: self.crawl,
            Category.TECHNICAL: self.tech,
            Category.KNOWLEDGE_GRAPH: self.kg,
            Category.ACCESSIBILITY: self.a11y,
            Category.HALLUCINATION: self.hall,
            Category.MISC: True,
        }
        return {category for category, on in toggles.items() if on}


class LLMConfig(BaseModel):
    """Settings passed through to the optional language-model collaborator."""

    enabled: bool = False
    provider: Optional[str] = None
    model: Optional[str] = None
    base_url: Optional[str] = None
    api_key: Optional[str] = Field(default=None, repr=False)
    timeout_seconds: float = Field(default=30.0, description="Timeout for each collaborator call.")
    summary: bool = True
    hallucination: bool = True
    mirror_test: bool = True

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("timeout_seconds must be positive")
        return v


class FetchConfig(BaseModel):
    """HTTP fetch boundary settings."""

    timeout: float = Field(default=15.0, description="HTTP request timeout in seconds.")
    user_agent: str = Field(
        default="readyscan/0.1 (+https://github.com/readyscan/readyscan)",
        description="User-Agent string for HTTP requests.",
    )
    follow_redirects: bool = True


class MonitoringConfig(BaseModel):
    """Configuration for logging and metrics."""

    enabled: bool = True
    log_level: str = Field(default="INFO", description="Logging level (e.g., DEBUG, INFO, WARNING).")
    log_file: str | None = Field(default=None, description="Path to log file. If None, logs to console.")

    @field_validator("log_file", mode="before")
    @classmethod
    def create_parent_dir(cls, v: str | Path | None) -> str | None:
        if v is None:
            return None
        path = Path(v)
        path.parent.mkdir(parents=True, exist_ok=True)
        return str(path)


# --- Main Configuration Class ---


class ScanConfig(BaseSettings):
    max_chunk_tokens: int = Field(default=1200, description="Token budget of a single chunk.")
    enable_chunking: bool = True
    enable_extractability: bool = True
    filters: FilterConfig = Field(default_factory=FilterConfig)
    rules: RuleToggles = Field(default_factory=RuleToggles)
    scoring: ScoringConfig = Field(default_factory=ScoringConfig)
    chunking: ChunkingConfig = Field(default_factory=ChunkingConfig)
    extractability: ExtractabilityConfig = Field(default_factory=ExtractabilityConfig)
    llm: LLMConfig = Field(default_factory=LLMConfig)
    fetch: FetchConfig = Field(default_factory=FetchConfig)
    monitoring: MonitoringConfig = Field(default_factory=MonitoringConfig)

    model_config = SettingsConfigDict(env_prefix="READYSCAN_", env_nested_delimiter="__", case_sensitive=False)

    @field_validator("max_chunk_tokens")
    @classmethod
    def validate_chunk_tokens(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("max_chunk_tokens must be positive")
        return v

    @classmethod
    def strict(cls, **overrides: Any) -> ScanConfig:
        """Fewer, higher-confidence findings; crawl, tech and a11y rules off."""
        data: Dict[str, Any] = {
            "filters": {"min_impact_score": 15, "min_confidence": 0.8, "max_issues": 10},
            "rules": {"crawl": False, "tech": False, "a11y": False},
        }
        data.update(overrides)
        return cls.model_validate(data)

    @classmethod
    def verbose(cls, **overrides: Any) -> ScanConfig:
        """Report every finding."""
        data: Dict[str, Any] = {"filters": {"min_impact_score": 0, "min_confidence": 0.0, "max_issues": 100}}
        data.update(overrides)
        return cls.model_validate(data)

    @classmethod
    def from_yaml(cls, path: Path) -> ScanConfig:
        log.debug("Loading configuration from YAML file: %s", path)
        if not path.is_file():
            raise FileNotFoundError(f"Configuration file not found or is not a file: {path}")
        with open(path, "r", encoding="utf-8") as f:
            yaml_data = yaml.safe_load(f)
        if not yaml_data:
            log.warning("Configuration file is empty: %s. Using default settings.", path)
            return cls.model_validate({})
        if not isinstance(yaml_data, dict):
            raise ConfigurationError(f"Configuration file must contain a mapping at the top level: {path}")
        return cls.model_validate(yaml_data)


def find_config_file() -> Path | None:
    current_dir = Path.cwd()
    for path in (current_dir / "readyscan.yaml", current_dir / "readyscan.yml"):
        if path.exists():
            return path
    return None


# --- Lazy Configuration Loader ---


class LazyConfig:
    """
    A proxy for the ScanConfig object that delays its loading and validation
    until an attribute is first accessed, so a bad config file cannot break
    imports.
    """

    _config: ClassVar[ScanConfig | None] = None
    _lock: ClassVar[threading.Lock] = threading.Lock()

    def __getattr__(self, name: str) -> Any:
        if self.__class__._config is None:
            with self.__class__._lock:
                if self.__class__._config is None:
                    self.__class__._config = self._load_config_with_fallback()
        return getattr(self.__class__._config, name)

    @classmethod
    def reset(cls) -> None:
        with cls._lock:
            cls._config = None

    def _load_config_with_fallback(self) -> ScanConfig:
        """Load configuration from file or fall back to defaults."""
        config_path = find_config_file()
        if config_path:
            try:
                log.info("Lazy loading configuration from: %s", config_path)
                return ScanConfig.from_yaml(config_path)
            except (ValidationError, ConfigurationError, FileNotFoundError, yaml.YAMLError) as e:
                log.error(
                    "Failed to load or validate configuration from '%s': %s. Falling back to default settings.",
                    config_path,
                    e,
                    exc_info=log.getEffectiveLevel() <= logging.DEBUG,
                )
        else:
            log.info("No config file found. Using default settings for lazy load.")
        return ScanConfig()


settings: "ScanConfig" = cast("ScanConfig", LazyConfig())
