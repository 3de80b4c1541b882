"""
Image markup that helps agents interpret visual content.
"""

from __future__ import annotations

import posixpath

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import attr

GENERIC_ALT = ("image", "picture", "photo", "img", "icon", "logo", "graphic")


def _is_generic_alt(alt: str) -> bool:
    return any(alt == p or alt.startswith(p + " ") or alt.endswith(" " + p) for p in GENERIC_ALT)


def _filename_stem(src: str) -> str:
    name = src.rsplit("/", 1)[-1].lower()
    return posixpath.splitext(name)[0]


class ImagesRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        images = soup.find_all("img")
        if not images:
            return None
        findings = []

        poor_alt = []
        for img in images:
            alt = attr(img, "alt").strip()
            src = attr(img, "src") or "unknown"
            if not alt:
                continue
            alt_lower = alt.lower()
            if _is_generic_alt(alt_lower):
                poor_alt.append(f'"{alt[:30]}" on {src[:30]}')
            if alt_lower == _filename_stem(src):
                poor_alt.append(f'"{alt}" (filename as alt)')
        if poor_alt:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-037",
                    title="Poor quality alt text",
                    severity=Severity.MEDIUM,
                    description=(
                        f'Found {len(poor_alt)} image(s) with generic or low-quality alt text like "image", "photo", '
                        "or just the filename. AI agents need descriptive alt text to understand image content."
                    ),
                    remediation=(
                        "Write descriptive alt text that explains what the image shows and its context. Avoid "
                        'generic words like "image" or "photo".'
                    ),
                    impact=20,
                    confidence=0.85,
                    evidence=poor_alt[:3],
                    tags=["images", "alt-text", "accessibility"],
                )
            )

        uncaptioned = sum(
            1 for fig in soup.find_all("figure") if fig.find("img") is not None and fig.find("figcaption") is None
        )
        if uncaptioned:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-038",
                    title="Figures missing captions",
                    severity=Severity.LOW,
                    description=(
                        f"Found {uncaptioned} <figure> element(s) with images but no <figcaption>. Captions provide "
                        "additional context for AI agents."
                    ),
                    remediation="Add <figcaption> elements to <figure> tags to provide additional context about the image.",
                    impact=10,
                    selector="figure",
                    evidence=[f"Figures without captions: {uncaptioned}"],
                    tags=["images", "figures", "captions"],
                )
            )

        total = len(images)
        lazy = sum(1 for img in images if attr(img, "loading") == "lazy")
        if total > 3 and lazy == 0:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-039",
                    title="Missing lazy loading on images",
                    severity=Severity.LOW,
                    description=(
                        f"Found {total} images but none use lazy loading. While not directly AI-related, lazy "
                        "loading improves page performance which affects crawl budget."
                    ),
                    remediation='Add loading="lazy" to images below the fold to improve page load performance.',
                    impact=5,
                    confidence=0.8,
                    evidence=[f"Total images: {total}", f"Images with lazy loading: {lazy}"],
                    tags=["images", "performance", "optimization"],
                )
            )

        responsive = sum(1 for img in images if img.has_attr("srcset")) + len(soup.find_all("picture"))
        if total > 5 and responsive == 0:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-040",
                    title="No responsive images",
                    severity=Severity.LOW,
                    description=(
                        f"Found {total} images but none use srcset or <picture> for responsiveness. AI agents with "
                        "visual capabilities benefit from appropriate image sizes."
                    ),
                    remediation=(
                        "Use srcset attribute or <picture> elements to provide multiple image sizes for different "
                        "contexts."
                    ),
                    impact=8,
                    confidence=0.7,
                    evidence=[f"Total images: {total}", f"Responsive images: {responsive}"],
                    tags=["images", "responsive", "optimization"],
                )
            )

        return findings


register(
    RuleMeta(
        id="AIREAD-037",
        title="Image optimization for AI",
        category=Category.READABILITY,
        severity=Severity.MEDIUM,
        priority=13,
        tags=("images", "accessibility", "ai-vision"),
        description="Checks alt text quality, figure captions and image delivery attributes.",
    ),
    ImagesRule,
)
