"""Tests for marker attributes, the stylesheet, and MarkerGroup."""

from __future__ import annotations

from anchormark.config import MarkerConfig
from anchormark.dom.nodes import Document, Element, TextNode
from anchormark.dom.parse import parse_html
from anchormark.dom.text_map import select_text
from anchormark.render.applier import SpanApplier
from anchormark.render.markers import (
    HIGHLIGHT_COLORS,
    NOTE_ATTR,
    STYLE_ELEMENT_ID,
    HighlightColor,
    MarkerGroup,
    clear_empty_markers,
    ensure_highlight_styles,
    find_markers,
    is_marker,
    marker_attrs,
    marker_id,
)


def _highlight(doc: Document, text: str, highlight_id: str) -> MarkerGroup:
    text_range = select_text(doc.body, text)
    assert text_range is not None
    return SpanApplier(config=MarkerConfig()).apply(
        doc, text_range, HighlightColor.YELLOW, highlight_id
    )


class TestMarkerAttrs:
    def test_basic(self) -> None:
        """A marker carries the id, color class and inline background."""
        attrs = marker_attrs("hl-1", HighlightColor.BLUE)
        assert attrs["class"] == "anchormark-highlight anchormark-highlight-blue"
        assert attrs["data-highlight-id"] == "hl-1"
        assert attrs["data-highlight-color"] == "blue"
        assert HIGHLIGHT_COLORS[HighlightColor.BLUE].background in attrs["style"]
        assert NOTE_ATTR not in attrs

    def test_note_and_part(self) -> None:
        attrs = marker_attrs("hl-1", HighlightColor.YELLOW, "remember", part=2)
        assert attrs[NOTE_ATTR] == "remember"
        assert attrs["title"] == "remember"
        assert attrs["data-highlight-part"] == "2"

    def test_is_marker_requires_id(self) -> None:
        """The marker class alone is not enough to count as a marker."""
        plain = Element("span", {"class": "anchormark-highlight"})
        assert not is_marker(plain)
        plain.set("data-highlight-id", "hl-1")
        assert is_marker(plain)
        assert marker_id(plain) == "hl-1"
        assert marker_id(Element("span")) is None


class TestStylesheet:
    def test_injected_once(self) -> None:
        doc = parse_html("<p>x</p>")
        first = ensure_highlight_styles(doc)
        second = ensure_highlight_styles(doc)
        assert first is second
        styles = doc.head.find_all(lambda e: e.tag == "style")
        assert len(styles) == 1
        assert first.id == STYLE_ELEMENT_ID

    def test_rules_cover_palette(self) -> None:
        """The stylesheet has a rule for every color."""
        css = ensure_highlight_styles(parse_html("<p>x</p>")).text_content
        for color in HighlightColor:
            assert f".anchormark-highlight-{color}" in css

    def test_configured_names(self) -> None:
        """Custom class and style element names are honoured."""
        config = MarkerConfig(class_name="mark", style_element_id="mark-css")
        style = ensure_highlight_styles(parse_html("<p>x</p>"), config)
        assert style.id == "mark-css"
        assert ".mark-purple" in style.text_content


class TestMarkerGroup:
    def test_collect_by_id(self, fox_document: Document) -> None:
        _highlight(fox_document, "the quick brown fox", "hl-a")
        _highlight(fox_document, "lazy dog", "hl-b")
        group = MarkerGroup.collect(fox_document, "hl-b")
        assert len(group) == 1
        assert group.text == "lazy dog"
        assert len(find_markers(fox_document.root)) == 2

    def test_set_color(self, formatted_document: Document) -> None:
        group = _highlight(formatted_document, "bold middle italic", "hl-c")
        group.set_color(HighlightColor.PURPLE)
        for marker in group:
            assert marker.has_class("anchormark-highlight-purple")
            assert not marker.has_class("anchormark-highlight-yellow")
            assert marker.get("data-highlight-color") == "purple"
            assert HIGHLIGHT_COLORS[HighlightColor.PURPLE].background in (
                marker.get("style") or ""
            )

    def test_set_and_clear_note(self, fox_document: Document) -> None:
        group = _highlight(fox_document, "lazy dog", "hl-d")
        group.set_note("good boy")
        assert group.markers[0].get("title") == "good boy"
        group.set_note(None)
        assert NOTE_ATTR not in group.markers[0].attrs
        assert "title" not in group.markers[0].attrs

    def test_unwrap_is_idempotent(self, fox_document: Document) -> None:
        """Unwrapping an already unwrapped group does nothing."""
        group = _highlight(fox_document, "lazy dog", "hl-e")
        again = MarkerGroup.collect(fox_document, "hl-e")
        assert group.unwrap() == 1
        assert again.unwrap() == 0
        assert group.unwrap() == 0
        assert find_markers(fox_document.root) == []


class TestClearEmptyMarkers:
    def test_removes_blank_markers_only(self) -> None:
        """Markers left without visible text are removed; others stay."""
        doc = parse_html("<p>keep</p>")
        p = doc.body.element_children[0]
        blank = Element("span", marker_attrs("hl-x", HighlightColor.YELLOW))
        blank.append(TextNode("  "))
        p.append(blank)
        _highlight(doc, "keep", "hl-y")
        assert clear_empty_markers(doc.body) == 1
        assert [marker_id(m) for m in find_markers(doc.root)] == ["hl-y"]
        assert p.text_content == "keep  "
