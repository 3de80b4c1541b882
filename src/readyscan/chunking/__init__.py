from .chunker import Chunker, noise_ratio
from .models import ChunkingAnalysis, ChunkQuality, ChunkStrategy, ContentChunk, QualityLevel
from .quality import analyze_chunk_quality

__all__ = [
    "ChunkQuality",
    "ChunkStrategy",
    "Chunker",
    "ChunkingAnalysis",
    "ContentChunk",
    "QualityLevel",
    "analyze_chunk_quality",
    "noise_ratio",
]
