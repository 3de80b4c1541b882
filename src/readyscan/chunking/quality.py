from __future__ import annotations

from typing import List

from readyscan.config import ChunkingConfig

from .models import ChunkQuality, ContentChunk, QualityLevel

_LEVELS: tuple[QualityLevel, ...] = ("excellent", "good", "fair")


def analyze_chunk_quality(chunk: ContentChunk, config: ChunkingConfig | None = None) -> ChunkQuality:
    """Grade one chunk by how many size, noise or heading problems it has."""
    config = config or ChunkingConfig()
    issues: List[str] = []
    recommendations: List[str] = []

    if chunk.token_count > config.large_chunk_tokens:
        issues.append(f"Chunk is very large (>{config.large_chunk_tokens} tokens)")
        recommendations.append("Split into smaller sections using subheadings")
    elif chunk.token_count < config.small_chunk_tokens:
        issues.append(f"Chunk is very small (<{config.small_chunk_tokens} tokens)")
        recommendations.append("Consider merging with adjacent chunks")

    if chunk.noise_ratio > config.high_noise_ratio:
        issues.append(f"High noise ratio (>{round(config.high_noise_ratio * 100)}%)")
        recommendations.append("Remove excessive whitespace, comments, or non-content elements")

    if not chunk.heading:
        issues.append("Chunk lacks a clear heading")
        recommendations.append("Add descriptive heading to improve context")

    quality = _LEVELS[len(issues)] if len(issues) < len(_LEVELS) else "poor"
    return ChunkQuality(quality=quality, issues=tuple(issues), recommendations=tuple(recommendations))
