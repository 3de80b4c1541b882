"""
Text alternatives and metadata for video, audio, SVG and embeds.
"""

from __future__ import annotations

from readyscan.document import Document
from readyscan.protocols import Category, Severity
from readyscan.rules.base import BaseRule, RuleMeta, RuleOutcome
from readyscan.rules.registry import register
from readyscan.text import attr, element_text

VIDEO_HOSTS = ("youtube", "vimeo", "dailymotion")


class MultimediaRule(BaseRule):
    def evaluate(self, document: Document) -> RuleOutcome:
        soup = document.soup
        findings = []

        iframes = soup.find_all("iframe")
        video_tags = soup.find_all("video")
        video_embeds = [f for f in iframes if any(host in attr(f, "src") for host in VIDEO_HOSTS)]
        video_count = len(video_tags) + len(video_embeds)
        transcript_links = [
            a
            for a in soup.find_all("a")
            if "transcript" in attr(a, "href").lower() or "transcript" in element_text(a).lower()
        ]

        if video_count:
            uncaptioned = sum(
                1 for v in video_tags if v.find("track", attrs={"kind": ["captions", "subtitles"]}) is None
            )
            if uncaptioned:
                findings.append(
                    self.finding(
                        document,
                        id="AIREAD-066",
                        title="Videos without captions",
                        severity=Severity.MEDIUM,
                        description=(
                            f"Found {uncaptioned} video(s) without caption tracks. Captions provide text alternatives "
                            "that AI can process."
                        ),
                        remediation='Add <track kind="captions"> elements to video tags with WebVTT caption files.',
                        impact=20,
                        selector="video",
                        evidence=[f"Videos without captions: {uncaptioned}"],
                        tags=["video", "captions", "accessibility"],
                    )
                )

            if "VideoObject" not in document.schema_types:
                findings.append(
                    self.finding(
                        document,
                        id="AIREAD-067",
                        title="Videos lack structured data",
                        severity=Severity.MEDIUM,
                        description=(
                            "Page contains videos but no VideoObject schema markup. Structured data helps AI "
                            "understand video content."
                        ),
                        remediation="Add VideoObject schema with name, description, thumbnailUrl, and other metadata.",
                        impact=18,
                        evidence=[f"Videos: {video_count}", "No VideoObject schema"],
                        tags=["video", "schema", "structured-data"],
                    )
                )

            if not transcript_links:
                findings.append(
                    self.finding(
                        document,
                        id="AIREAD-068",
                        title="No video transcripts available",
                        severity=Severity.LOW,
                        description=(
                            "Videos present but no transcript links found. Full text transcripts are ideal for AI "
                            "content understanding."
                        ),
                        remediation=(
                            "Provide full text transcripts for videos. Link to them near the video or include them "
                            "on the page."
                        ),
                        impact=12,
                        confidence=0.7,
                        evidence=[f"Videos: {video_count}", "No transcript links"],
                        tags=["video", "transcripts", "accessibility"],
                    )
                )

        audio = soup.find_all("audio")
        if audio:
            if not any("transcript" in attr(a, "href").lower() for a in transcript_links):
                findings.append(
                    self.finding(
                        document,
                        id="AIREAD-069",
                        title="Audio content without transcripts",
                        severity=Severity.MEDIUM,
                        description=(
                            f"Found {len(audio)} audio element(s) without transcript links. Audio content is "
                            "inaccessible to AI without text alternatives."
                        ),
                        remediation="Provide text transcripts for all audio content (podcasts, audio clips, etc.).",
                        impact=18,
                        confidence=0.8,
                        selector="audio",
                        evidence=[f"Audio elements: {len(audio)}"],
                        tags=["audio", "transcripts", "accessibility"],
                    )
                )
            if not {"PodcastEpisode", "PodcastSeries"} & document.schema_types:
                findings.append(
                    self.finding(
                        document,
                        id="AIREAD-070",
                        title="Audio content lacks podcast schema",
                        severity=Severity.LOW,
                        description=(
                            "Audio content present but no PodcastEpisode/PodcastSeries schema. Structured data helps "
                            "AI categorize audio content."
                        ),
                        remediation="Add PodcastEpisode or AudioObject schema for audio content.",
                        impact=10,
                        confidence=0.7,
                        evidence=[f"Audio elements: {len(audio)}"],
                        tags=["audio", "schema", "podcast"],
                    )
                )

        undescribed_svgs = sum(
            1
            for svg in soup.find_all("svg")
            if svg.find("title") is None
            and not attr(svg, "aria-label")
            and attr(svg, "role") != "presentation"
            and attr(svg, "aria-hidden") != "true"
        )
        if undescribed_svgs:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-071",
                    title="SVGs without accessible descriptions",
                    severity=Severity.LOW,
                    description=(
                        f"Found {undescribed_svgs} SVG(s) without <title> elements or aria-label. Descriptive text "
                        "helps AI understand SVG content."
                    ),
                    remediation=(
                        'Add <title> elements inside SVGs, use aria-label, or mark decorative SVGs with aria-hidden="true".'
                    ),
                    impact=8,
                    confidence=0.9,
                    selector="svg",
                    evidence=[f"SVGs without descriptions: {undescribed_svgs}"],
                    tags=["svg", "accessibility", "graphics"],
                )
            )

        untitled_embeds = sum(
            1
            for f in iframes
            if any(key in attr(f, "src") for key in ("youtube", "vimeo", "embed")) and not attr(f, "title")
        )
        if untitled_embeds:
            findings.append(
                self.finding(
                    document,
                    id="AIREAD-072",
                    title="Embedded content without titles",
                    severity=Severity.MEDIUM,
                    description=(
                        f"Found {untitled_embeds} iframe(s) without title attributes. Titles help AI understand "
                        "embedded content purpose."
                    ),
                    remediation=(
                        'Add descriptive title attributes to all iframe elements (e.g., title="YouTube video: '
                        'Tutorial Name").'
                    ),
                    impact=12,
                    selector="iframe",
                    evidence=[f"Iframes without titles: {untitled_embeds}"],
                    tags=["iframe", "embedded", "accessibility"],
                )
            )

        return findings


register(
    RuleMeta(
        id="AIREAD-066",
        title="Video and multimedia optimization",
        category=Category.READABILITY,
        severity=Severity.MEDIUM,
        priority=12,
        tags=("video", "multimedia", "transcripts"),
        description="Checks multimedia elements for transcripts, captions and semantic markup.",
    ),
    MultimediaRule,
)
