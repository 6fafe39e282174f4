"""Highlight marker elements and the group that owns them.

A marker is a ``<span>`` wrapping (part of) a highlighted text run::

    <span class="anchormark-highlight anchormark-highlight-yellow"
          data-highlight-id="hl-..." data-highlight-color="yellow"
          data-note="..." title="..." data-highlight-part="1"
          style="...">text</span>

One highlight record owns one or more markers; ``MarkerGroup`` is that
one-to-many relation made explicit, so recolour/note/removal never need to
re-derive "which spans belong together" by hand.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

from anchormark.dom.nodes import Element, TextNode

if TYPE_CHECKING:
    from collections.abc import Iterator

    from anchormark.config import MarkerConfig
    from anchormark.dom.nodes import Document

logger = logging.getLogger(__name__)

MARKER_CLASS = "anchormark-highlight"
STYLE_ELEMENT_ID = "anchormark-highlight-styles"

ID_ATTR = "data-highlight-id"
COLOR_ATTR = "data-highlight-color"
NOTE_ATTR = "data-note"
PART_ATTR = "data-highlight-part"


class HighlightColor(StrEnum):
    """The fixed highlight palette."""

    YELLOW = "yellow"
    BLUE = "blue"
    PURPLE = "purple"


@dataclass(frozen=True)
class ColorValues:
    background: str
    solid: str


HIGHLIGHT_COLORS: dict[HighlightColor, ColorValues] = {
    HighlightColor.YELLOW: ColorValues("rgba(255,245,200,0.85)", "#fff5c8"),
    HighlightColor.BLUE: ColorValues("rgba(181,228,255,0.85)", "#b5e4ff"),
    HighlightColor.PURPLE: ColorValues("rgba(220,198,255,0.85)", "#dcc6ff"),
}


def _inline_style(color: HighlightColor) -> str:
    return (
        "display: inline !important; white-space: inherit !important; "
        f"background-color: {HIGHLIGHT_COLORS[color].background} !important;"
    )


def marker_attrs(
    highlight_id: str,
    color: HighlightColor,
    note: str | None = None,
    *,
    part: int | None = None,
    class_name: str = MARKER_CLASS,
) -> dict[str, str]:
    """Attributes for a new marker element."""
    attrs = {
        "class": f"{class_name} {class_name}-{color}",
        ID_ATTR: highlight_id,
        COLOR_ATTR: str(color),
        "style": _inline_style(color),
    }
    if note:
        attrs[NOTE_ATTR] = note
        attrs["title"] = note
    if part is not None:
        attrs[PART_ATTR] = str(part)
    return attrs


def is_marker(element: Element, class_name: str = MARKER_CLASS) -> bool:
    return (
        element.tag == "span"
        and element.has_class(class_name)
        and ID_ATTR in element.attrs
    )


def marker_id(element: Element) -> str | None:
    """The highlight id a marker carries, or None for non-markers."""
    return element.get(ID_ATTR) or None


def find_markers(
    root: Element,
    highlight_id: str | None = None,
    class_name: str = MARKER_CLASS,
) -> list[Element]:
    """All markers under *root*, optionally only those of one highlight."""
    return root.find_all(
        lambda e: is_marker(e, class_name)
        and (highlight_id is None or e.get(ID_ATTR) == highlight_id)
    )


def _stylesheet(class_name: str) -> str:
    rules = [
        f".{class_name} {{ display: inline !important; "
        "white-space: inherit !important; "
        "box-decoration-break: clone; -webkit-box-decoration-break: clone; "
        "border-radius: 2px; padding: 1px 0; margin: 0 -1px; cursor: pointer; "
        "text-decoration: none !important; }",
    ]
    rules.extend(
        f".{class_name}-{color} {{ background-color: {values.background} !important; }}"
        for color, values in HIGHLIGHT_COLORS.items()
    )
    rules.append(f".{class_name}:hover {{ opacity: 0.8; }}")
    return "\n".join(rules)


def ensure_highlight_styles(
    document: Document, config: MarkerConfig | None = None
) -> Element:
    """Inject the marker stylesheet into ``<head>`` once; return it."""
    class_name = config.class_name if config else MARKER_CLASS
    style_id = config.style_element_id if config else STYLE_ELEMENT_ID
    existing = document.get_element_by_id(style_id)
    if existing is not None:
        return existing

    style = Element("style", {"id": style_id})
    style.append(TextNode(_stylesheet(class_name)))
    document.head.append(style)
    logger.debug("Injected highlight stylesheet #%s", style_id)
    return style


def clear_empty_markers(root: Element, class_name: str = MARKER_CLASS) -> int:
    """Unwrap markers holding no visible text; return how many went."""
    removed = 0
    for marker in find_markers(root, class_name=class_name):
        if marker.text_content.strip():
            continue
        parent = marker.parent
        if parent is None:
            continue
        marker.unwrap()
        parent.normalize()
        removed += 1
    if removed:
        logger.debug("Cleared %d empty highlight markers", removed)
    return removed


class MarkerGroup:
    """All markers rendered for one highlight id."""

    def __init__(
        self,
        document: Document,
        highlight_id: str,
        markers: list[Element],
        class_name: str = MARKER_CLASS,
    ) -> None:
        self.document = document
        self.highlight_id = highlight_id
        self.markers = markers
        self.class_name = class_name

    @classmethod
    def collect(
        cls, document: Document, highlight_id: str, class_name: str = MARKER_CLASS
    ) -> MarkerGroup:
        """Gather every marker of *highlight_id* currently in the document."""
        return cls(
            document,
            highlight_id,
            find_markers(document.root, highlight_id, class_name),
            class_name,
        )

    def __len__(self) -> int:
        return len(self.markers)

    def __iter__(self) -> Iterator[Element]:
        return iter(self.markers)

    def __repr__(self) -> str:
        return f"<MarkerGroup {self.highlight_id} parts={len(self.markers)}>"

    @property
    def text(self) -> str:
        return "".join(m.text_content for m in self.markers)

    def set_color(self, color: HighlightColor) -> None:
        for marker in self.markers:
            old = marker.get(COLOR_ATTR)
            if old:
                marker.remove_class(f"{self.class_name}-{old}")
            marker.add_class(f"{self.class_name}-{color}")
            marker.set(COLOR_ATTR, str(color))
            marker.set("style", _inline_style(color))

    def set_note(self, note: str | None) -> None:
        for marker in self.markers:
            if note:
                marker.set(NOTE_ATTR, note)
                marker.set("title", note)
            else:
                marker.remove_attr(NOTE_ATTR)
                marker.remove_attr("title")

    def unwrap(self) -> int:
        """Replace every marker by its children; return how many were removed.

        Markers no longer in the document are skipped, so a second call is
        a no-op returning 0.
        """
        removed = 0
        for marker in self.markers:
            if marker.parent is None or not self.document.contains(marker):
                continue
            self.document.unwrap(marker)
            removed += 1
        self.markers = []
        return removed
