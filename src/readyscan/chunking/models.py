from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Optional, Tuple

ChunkStrategy = Literal["heading-based", "paragraph-based", "paragraph-based (fallback)"]
QualityLevel = Literal["excellent", "good", "fair", "poor"]


@dataclass(slots=True, frozen=True)
class ContentChunk:
    """A bounded segment of the page's main text."""

    id: str
    start_selector: str
    token_count: int
    text: str
    noise_ratio: float
    word_count: int
    character_count: int
    end_selector: Optional[str] = None
    heading: Optional[str] = None
    heading_level: Optional[int] = None
    has_code: bool = False
    has_lists: bool = False
    has_tables: bool = False


@dataclass(slots=True, frozen=True)
class ChunkingAnalysis:
    """Chunks plus simple reductions over them."""

    chunks: Tuple[ContentChunk, ...]
    total_tokens: int
    total_chunks: int
    average_tokens_per_chunk: int
    average_noise_ratio: float
    strategy: ChunkStrategy

    @classmethod
    def from_chunks(cls, chunks: Tuple[ContentChunk, ...], strategy: ChunkStrategy) -> ChunkingAnalysis:
        total_tokens = sum(c.token_count for c in chunks)
        count = len(chunks)
        return cls(
            chunks=chunks,
            total_tokens=total_tokens,
            total_chunks=count,
            average_tokens_per_chunk=round(total_tokens / count) if count else 0,
            average_noise_ratio=round(sum(c.noise_ratio for c in chunks) / count, 2) if count else 0.0,
            strategy=strategy,
        )


@dataclass(slots=True, frozen=True)
class ChunkQuality:
    quality: QualityLevel
    issues: Tuple[str, ...]
    recommendations: Tuple[str, ...]
