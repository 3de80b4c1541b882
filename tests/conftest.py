"""
Shared fixtures for readyscan tests.

Provides sample pages, a finding factory and document builders so each test
module can stay focused on the behaviour under test.
"""

import os
from typing import Callable

import pytest

from readyscan.config import LazyConfig, ScanConfig
from readyscan.document import Document
from readyscan.protocols import Category, Finding, FindingLocation, Severity

# ============================================================================
# Pytest Configuration
# ============================================================================


def pytest_configure(config):
    """Register custom markers."""
    config.addinivalue_line("markers", "unit: Unit tests for individual components")
    config.addinivalue_line("markers", "integration: End-to-end scans over sample documents")


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Keep READYSCAN_* variables from the host out of every test."""
    for key in list(os.environ):
        if key.startswith("READYSCAN_"):
            monkeypatch.delenv(key, raising=False)
    yield
    LazyConfig.reset()


# ============================================================================
# Sample Pages
# ============================================================================

PARAGRAPH = (
    "Readyscan evaluates how well a page can be read by automated agents. It looks at structure, "
    "metadata and the amount of text that survives without running any scripts. "
)


@pytest.fixture
def article_html() -> str:
    """A well-structured article page."""
    return f"""
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="utf-8">
        <title>How Readyscan Audits Pages for Automated Readers</title>
        <meta name="description" content="A walkthrough of the checks readyscan runs and how its scores are computed for a single page.">
        <meta name="viewport" content="width=device-width, initial-scale=1">
        <meta property="og:title" content="How Readyscan Audits Pages">
        <meta property="og:description" content="A walkthrough of readyscan's checks.">
        <link rel="canonical" href="https://example.com/guide">
        <script type="application/ld+json">
        {{"@context": "https://schema.org", "@type": "Article", "headline": "How Readyscan Audits Pages",
          "author": {{"@type": "Person", "name": "Dana Example"}}, "datePublished": "2024-01-15"}}
        </script>
    </head>
    <body>
        <header><nav aria-label="Primary"><a href="/">Home</a> <a href="/docs">Docs</a></nav></header>
        <main>
            <article>
                <h1>How Readyscan Audits Pages</h1>
                <p>{PARAGRAPH}</p>
                <h2>Structure</h2>
                <p>{PARAGRAPH}</p>
                <ul><li>Headings</li><li>Landmarks</li></ul>
                <h2>Scoring</h2>
                <p>{PARAGRAPH}</p>
                <table><tr><th scope="col">Grade</th></tr><tr><td>A</td></tr></table>
            </article>
        </main>
        <footer><p>Contact us at <a href="mailto:team@example.com">team@example.com</a></p></footer>
    </body>
    </html>
    """


@pytest.fixture
def flat_html() -> str:
    """A single <h1> over about 2000 characters of body text, without landmarks."""
    body = "".join(f"<p>{PARAGRAPH}</p>" for _ in range(12))
    return f"<html><head><title>Flat page</title></head><body><div><h1>Flat page</h1>{body}</div></body></html>"


# ============================================================================
# Factories
# ============================================================================


@pytest.fixture
def scan_config() -> ScanConfig:
    return ScanConfig()


@pytest.fixture
def make_document(scan_config) -> Callable[..., Document]:
    def _make(html: str, url: str = "https://example.com/page", *, status: int | None = 200, config=None) -> Document:
        return Document(url=url, html=html, status=status, config=config or scan_config)

    return _make


@pytest.fixture
def make_finding() -> Callable[..., Finding]:
    counter = iter(range(1, 10_000))

    def _make(
        category: Category = Category.READABILITY,
        severity: Severity = Severity.MEDIUM,
        impact: float = 10,
        title: str | None = None,
        remediation: str = "Fix the markup.",
        **kwargs,
    ) -> Finding:
        n = next(counter)
        return Finding(
            id=kwargs.pop("id", f"{category.value}-T{n:03d}"),
            title=title or f"Test finding {n}",
            category=category,
            severity=severity,
            description=kwargs.pop("description", "Synthetic finding used in tests."),
            remediation=remediation,
            impact_score=impact,
            location=kwargs.pop("location", FindingLocation(url="https://example.com/page")),
            **kwargs,
        )

    return _make
