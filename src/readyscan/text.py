"""
Text helpers shared by rules, the chunker and the extractability mapper.
"""

from __future__ import annotations

import re

from bs4 import Tag

_WHITESPACE_RE = re.compile(r"\s+")
_SENTENCE_RE = re.compile(r"[^.!?]+[.!?]+")
_WORD_RE = re.compile(r"\b[\w'-]+\b")


def collapse_whitespace(text: str) -> str:
    """Collapse whitespace runs to a single space and strip the ends."""
    return _WHITESPACE_RE.sub(" ", text).strip()


def estimate_tokens(text: str) -> int:
    """Whitespace word count used as the token estimate everywhere.

    Monotonic in the amount of text and stable across runs.
    """
    if not text:
        return 0
    return len(text.split())


def element_text(element: Tag | None) -> str:
    """Visible text of an element with whitespace collapsed.

    Script, style and template contents are not part of ``get_text`` output.
    """
    if element is None:
        return ""
    return collapse_whitespace(element.get_text(" "))


def snippet(text: str, length: int = 100) -> str:
    text = collapse_whitespace(text)
    return text if len(text) <= length else text[:length]


def sentences(text: str) -> list[str]:
    return [s.strip() for s in _SENTENCE_RE.findall(text) if s.strip()]


def words(text: str) -> list[str]:
    return _WORD_RE.findall(text)


def class_list(element: Tag) -> list[str]:
    value = element.get("class")
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return list(value)


def attr(element: Tag, name: str) -> str:
    """Attribute value as a plain string, '' when missing."""
    value = element.get(name)
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return " ".join(value)
    return str(value)
