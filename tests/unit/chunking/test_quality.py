"""Unit tests for per-chunk quality grading."""

from readyscan.chunking import ContentChunk, analyze_chunk_quality
from readyscan.config import ChunkingConfig


def make_chunk(tokens=200, noise=0.1, heading="Overview"):
    text = " ".join(["word"] * tokens)
    return ContentChunk(
        id="chunk-1",
        start_selector="p:nth-of-type(1)",
        token_count=tokens,
        text=text,
        noise_ratio=noise,
        word_count=tokens,
        character_count=len(text),
        heading=heading,
        heading_level=2 if heading else None,
    )


class TestChunkQuality:
    """Issue detection and the quality ladder."""

    def test_excellent(self):
        """A mid-sized, clean, headed chunk has no issues."""
        quality = analyze_chunk_quality(make_chunk())

        assert quality.quality == "excellent"
        assert quality.issues == ()
        assert quality.recommendations == ()

    def test_good_without_heading(self):
        """A missing heading alone drops the grade one step."""
        quality = analyze_chunk_quality(make_chunk(heading=None))

        assert quality.quality == "good"
        assert quality.issues == ("Chunk lacks a clear heading",)
        assert quality.recommendations == ("Add descriptive heading to improve context",)

    def test_fair_large_and_noisy(self):
        """Two issues give fair."""
        quality = analyze_chunk_quality(make_chunk(tokens=1500, noise=0.7))

        assert quality.quality == "fair"
        assert quality.issues == ("Chunk is very large (>1000 tokens)", "High noise ratio (>50%)")

    def test_poor(self):
        """Three issues give poor."""
        quality = analyze_chunk_quality(make_chunk(tokens=10, noise=0.9, heading=None))

        assert quality.quality == "poor"
        assert len(quality.issues) == 3
        assert "Chunk is very small (<50 tokens)" in quality.issues
        assert len(quality.recommendations) == 3

    def test_thresholds_configurable(self):
        """Size limits come from the chunking configuration."""
        config = ChunkingConfig(large_chunk_tokens=100)

        quality = analyze_chunk_quality(make_chunk(tokens=200), config)

        assert quality.issues == ("Chunk is very large (>100 tokens)",)
