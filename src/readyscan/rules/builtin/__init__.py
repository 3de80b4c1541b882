"""
Built-in rule set. Importing this package registers every rule.
"""

from . import (  # noqa: F401
    accessibility,
    chunk_window,
    content_clarity,
    content_quality,
    context_clarity,
    crawlability,
    extraction,
    formatting,
    headings,
    images,
    knowledge_graph,
    links,
    meta_tags,
    multimedia,
    performance,
    readability,
    security,
    semantic_structure,
    token_efficiency,
)
