"""Unit tests for content chunking."""

import time

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from readyscan.chunking import Chunker, noise_ratio
from readyscan.config import ChunkingConfig, ScanConfig
from readyscan.document import Document


def chunk(html, **config):
    scan_config = ScanConfig(**config)
    document = Document(url="https://example.com/", html=html, config=scan_config)
    chunker = Chunker(scan_config)
    return chunker, document, chunker.chunk(document)


class TestStrategySelection:
    """Auto, forced and fallback strategies."""

    def test_single_heading_uses_paragraphs(self, flat_html):
        """One heading is not enough for heading-based chunking."""
        _, _, analysis = chunk(flat_html)

        assert analysis.strategy == "paragraph-based"
        assert analysis.total_chunks >= 1

    def test_multiple_headings_use_headings(self, article_html):
        """The sample article splits at each heading inside <main>."""
        _, _, analysis = chunk(article_html)

        assert analysis.strategy == "heading-based"
        assert [c.heading for c in analysis.chunks] == ["How Readyscan Audits Pages", "Structure", "Scoring"]
        assert [c.heading_level for c in analysis.chunks] == [1, 2, 2]

    def test_forced_heading_mode_without_headings_falls_back(self):
        """Forcing heading-based on a heading-less page reports the fallback."""
        html = "<html><body><p>One paragraph.</p><p>Another paragraph.</p></body></html>"
        _, _, analysis = chunk(html, chunking=ChunkingConfig(strategy="heading-based"))

        assert analysis.strategy == "paragraph-based (fallback)"
        assert analysis.total_chunks == 1

    def test_forced_paragraph_mode(self, article_html):
        """Paragraph mode ignores headings when asked to."""
        _, _, analysis = chunk(article_html, chunking=ChunkingConfig(strategy="paragraph-based"))

        assert analysis.strategy == "paragraph-based"
        assert all(c.heading is None for c in analysis.chunks)


class TestHeadingChunks:
    """Heading-based grouping."""

    def test_leading_content_forms_headless_chunk(self):
        """Text before the first heading becomes its own chunk."""
        html = "<main><p>Intro text.</p><h2>First</h2><p>Alpha.</p><h2>Second</h2><p>Beta.</p></main>"
        _, _, analysis = chunk(html)

        assert [c.heading for c in analysis.chunks] == [None, "First", "Second"]
        assert analysis.chunks[0].text == "Intro text."
        assert analysis.chunks[1].text == "First\nAlpha."

    def test_structure_flags(self, article_html):
        """Lists and tables are flagged on the chunk that contains them."""
        _, _, analysis = chunk(article_html)
        by_heading = {c.heading: c for c in analysis.chunks}

        assert by_heading["Structure"].has_lists
        assert not by_heading["Structure"].has_tables
        assert by_heading["Scoring"].has_tables
        assert not by_heading["How Readyscan Audits Pages"].has_lists

    def test_code_flag(self):
        """Preformatted code marks has_code."""
        html = "<main><h2>A</h2><pre><code>print(1)</code></pre><h2>B</h2><p>Plain.</p></main>"
        _, _, analysis = chunk(html)

        assert analysis.chunks[0].has_code
        assert not analysis.chunks[1].has_code


class TestParagraphChunks:
    """Token-budgeted packing."""

    def test_blocks_packed_under_budget(self):
        """Paragraphs accumulate until the next would exceed the budget."""
        paragraphs = "".join(f"<p>{' '.join(['word'] * 4)}</p>" for _ in range(5))
        _, _, analysis = chunk(f"<body>{paragraphs}</body>", max_chunk_tokens=10)

        assert [c.token_count for c in analysis.chunks] == [8, 8, 4]
        assert all(c.token_count <= 10 for c in analysis.chunks)

    def test_oversized_block_split_on_words(self):
        """A single paragraph above the budget is split into budget-sized pieces."""
        words = " ".join(f"w{i}" for i in range(25))
        _, _, analysis = chunk(f"<body><p>{words}</p></body>", max_chunk_tokens=10)

        assert [c.token_count for c in analysis.chunks] == [10, 10, 5]
        assert analysis.chunks[1].text.split()[0] == "w10"

    def test_ids_sequential(self):
        """Chunk ids are numbered from 1 in order."""
        paragraphs = "".join(f"<p>{' '.join(['word'] * 6)}</p>" for _ in range(4))
        _, _, analysis = chunk(f"<body>{paragraphs}</body>", max_chunk_tokens=6)

        assert [c.id for c in analysis.chunks] == ["chunk-1", "chunk-2", "chunk-3", "chunk-4"]

    def test_selectors(self):
        """Blocks with an id use it; other paragraphs use their position."""
        html = '<body><p id="intro">Hello there.</p><p>Second one.</p></body>'
        _, _, analysis = chunk(html, max_chunk_tokens=2)

        assert analysis.chunks[0].start_selector == "#intro"
        assert analysis.chunks[1].start_selector == "p:nth-of-type(2)"

    def test_large_document_chunks_quickly(self):
        """Thousands of paragraphs chunk in well under a few seconds with correct positions."""
        paragraphs = "".join(f"<p>Paragraph {i} carries a short sentence.</p>" for i in range(1, 2001))
        html = f"<html><body><main>{paragraphs}</main></body></html>"

        started = time.perf_counter()
        _, _, analysis = chunk(html, max_chunk_tokens=20)
        elapsed = time.perf_counter() - started

        assert elapsed < 5.0
        assert analysis.total_chunks > 100
        for c in analysis.chunks:
            position = int(c.start_selector.removeprefix("p:nth-of-type(").rstrip(")"))
            assert c.text.startswith(f"Paragraph {position} ")
        assert analysis.chunks[-1].text.rstrip().endswith("Paragraph 2000 carries a short sentence.")


class TestExtraction:
    """Text extraction and noise."""

    def test_scripts_excluded_but_counted_as_noise(self):
        """Script text never appears in chunks but raises the noise ratio."""
        html = "<main><p>Hello readers of this page</p><script>var tracking = initTracker();</script></main>"
        chunker, document, analysis = chunk(html)

        assert "tracking" not in chunker.extract_text(document)
        assert "tracking" not in analysis.chunks[0].text
        assert analysis.chunks[0].noise_ratio > noise_ratio("Hello readers of this page")

    def test_container_preference(self):
        """<main> wins over <article>, which wins over <body>."""
        html = "<body><p>Outside.</p><article><p>Article.</p></article><main><p>Main.</p></main></body>"
        chunker, document, _ = chunk(html)

        assert chunker.extract_text(document) == "Main."

    def test_empty_document(self):
        """An empty page yields no chunks and zeroed aggregates."""
        _, _, analysis = chunk("")

        assert analysis.total_chunks == 0
        assert analysis.total_tokens == 0
        assert analysis.average_tokens_per_chunk == 0
        assert analysis.average_noise_ratio == 0.0

    def test_aggregates_are_reductions(self, article_html):
        """Totals and averages are computed from the chunk list."""
        _, _, analysis = chunk(article_html)
        tokens = [c.token_count for c in analysis.chunks]

        assert analysis.total_tokens == sum(tokens)
        assert analysis.total_chunks == len(tokens)
        assert analysis.average_tokens_per_chunk == round(sum(tokens) / len(tokens))

    def test_deterministic(self, article_html):
        """Chunking the same document twice gives equal analyses."""
        chunker, document, first = chunk(article_html)

        assert chunker.chunk(document) == first


class TestNoiseRatio:
    """The noise formula."""

    def test_empty_text_is_pure_noise(self):
        """Empty text scores 1.0."""
        assert noise_ratio("") == 1.0

    def test_known_value(self):
        """One space in eleven characters gives 0.5 / 11."""
        assert noise_ratio("hello world") == round(0.5 / 11, 2)

    def test_punctuation_runs(self):
        """Runs of punctuation are heavily penalized."""
        assert noise_ratio("wait... what?!") > noise_ratio("wait. what?")

    @given(st.text(max_size=200), st.integers(min_value=0, max_value=500))
    def test_bounds(self, text, script_chars):
        """The ratio always lies in [0, 1]."""
        assert 0.0 <= noise_ratio(text, script_chars) <= 1.0


WORDS = st.sampled_from(["alpha", "beta", "gamma", "delta", "epsilon", "zeta", "eta", "theta"])
BLOCK = st.tuples(st.booleans(), st.lists(WORDS, min_size=1, max_size=30))


class TestCoverageProperty:
    """Chunks together reproduce the extracted text."""

    @settings(max_examples=50, deadline=None)
    @given(st.lists(BLOCK, max_size=15), st.integers(min_value=3, max_value=40))
    def test_chunks_cover_extracted_text(self, blocks, max_tokens):
        """Joining chunk texts equals extract_text modulo whitespace."""
        body = "".join(
            f"<h2>{' '.join(words)}</h2>" if is_heading else f"<p>{' '.join(words)}</p>" for is_heading, words in blocks
        )
        chunker, document, analysis = chunk(f"<html><body>{body}</body></html>", max_chunk_tokens=max_tokens)

        joined = " ".join(c.text for c in analysis.chunks).split()

        assert joined == chunker.extract_text(document).split()
        assert analysis.total_tokens == len(joined)
