"""
Static heuristics that guess how a node's content is delivered.

Nothing here executes scripts or computes styles; every check reads the
element's own markup and, for framework mount points, its ancestors.
"""

from __future__ import annotations

import re
from typing import Protocol, runtime_checkable

from bs4 import Tag

from readyscan.text import attr, class_list, element_text

FRAMEWORK_ATTRIBUTES = frozenset(
    {"data-react-root", "data-reactroot", "ng-app", "ng-controller", "v-app", "data-vue-app", "data-gatsby", "data-svelte"}
)
FRAMEWORK_ID_PREFIXES = ("__next", "__nuxt")
MOUNT_IDS = frozenset({"root", "app", "main-app", "__next", "__nuxt"})

HIDDEN_CLASSES = frozenset({"hidden", "invisible", "d-none", "sr-only", "visually-hidden"})
_HIDDEN_STYLE_RE = re.compile(r"display\s*:\s*none|visibility\s*:\s*hidden|opacity\s*:\s*0(?![.\d]*[1-9])", re.I)

INTERACTIVE_ATTRIBUTES = ("data-toggle", "data-bs-toggle", "data-dropdown", "data-modal", "data-accordion")
INTERACTIVE_ROLES = frozenset({"button", "tab", "menu", "menuitem", "tooltip", "dialog"})
_EVENT_HANDLER_RE = re.compile(r"^on(click|dblclick|hover|mouse\w+|pointer\w+|touch\w+|key\w+|focus|blur|change|input)$")


@runtime_checkable
class DetectionStrategy(Protocol):
    """Classifies single elements. Implementations must be side-effect free."""

    def is_shadow_host(self, element: Tag) -> bool: ...

    def requires_interaction(self, element: Tag) -> bool: ...

    def is_hidden(self, element: Tag) -> bool: ...

    def is_client_rendered(self, element: Tag) -> bool: ...


def _has_framework_marker(element: Tag) -> bool:
    if FRAMEWORK_ATTRIBUTES.intersection(element.attrs):
        return True
    element_id = attr(element, "id")
    return bool(element_id) and element_id.startswith(FRAMEWORK_ID_PREFIXES)


class HeuristicDetector:
    """Default :class:`DetectionStrategy` built on attribute and class patterns."""

    def is_shadow_host(self, element: Tag) -> bool:
        # Custom elements are the usual shadow root hosts.
        return "-" in (element.name or "") or "shadowroot" in element.attrs or "shadowrootmode" in element.attrs

    def requires_interaction(self, element: Tag) -> bool:
        if any(attr(element, name) for name in INTERACTIVE_ATTRIBUTES):
            return True
        if any(_EVENT_HANDLER_RE.match(name) and attr(element, name) for name in element.attrs):
            return True
        if attr(element, "role").strip().lower() in INTERACTIVE_ROLES:
            return True
        return element.name == "details" and "open" not in element.attrs

    def is_hidden(self, element: Tag) -> bool:
        if _HIDDEN_STYLE_RE.search(attr(element, "style")):
            return True
        if attr(element, "aria-hidden").strip().lower() == "true" or "hidden" in element.attrs:
            return True
        return not HIDDEN_CLASSES.isdisjoint(class_list(element))

    def is_client_rendered(self, element: Tag) -> bool:
        """An empty container that a client-side framework is expected to fill."""
        if element_text(element) or element.find(True) is not None:
            return False
        if any(name.startswith("data-") for name in element.attrs):
            return True
        if attr(element, "id") in MOUNT_IDS:
            return True
        if _has_framework_marker(element):
            return True
        return any(isinstance(parent, Tag) and _has_framework_marker(parent) for parent in element.parents)
