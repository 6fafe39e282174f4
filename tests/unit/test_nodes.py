"""Tests for the in-memory tree: mutation primitives and the Document host."""

from __future__ import annotations

import pytest

from anchormark.dom.nodes import Document, Element, TextNode
from anchormark.dom.parse import inner_html, parse_html
from anchormark.dom.selection import TextRange, iter_range_segments
from anchormark.dom.text_map import select_text
from anchormark.errors import DomError


def _paragraph(*children: TextNode | Element) -> Element:
    return Element("p", children=list(children))


# ---------------------------------------------------------------------------
# Element / TextNode primitives
# ---------------------------------------------------------------------------
class TestTextNodeSplit:
    """TextNode.split mirrors DOM Text.splitText."""

    def test_split_keeps_head_returns_tail(self) -> None:
        """Splitting keeps the first part in place and returns the new tail."""
        text = TextNode("abcdef")
        p = _paragraph(text)
        tail = text.split(2)
        assert text.data == "ab"
        assert tail.data == "cdef"
        assert p.children == [text, tail]

    def test_split_out_of_bounds(self) -> None:
        text = TextNode("abc")
        _paragraph(text)
        with pytest.raises(DomError):
            text.split(4)

    def test_split_detached(self) -> None:
        with pytest.raises(DomError):
            TextNode("abc").split(1)


class TestElementMutation:
    """insert/remove/unwrap/normalize."""

    def test_append_moves_node(self) -> None:
        text = TextNode("x")
        a = _paragraph(text)
        b = Element("div")
        b.append(text)
        assert a.children == []
        assert text.parent is b

    def test_cannot_insert_into_own_subtree(self) -> None:
        """An element cannot become its own descendant."""
        outer = Element("div")
        inner = Element("span")
        outer.append(inner)
        with pytest.raises(DomError):
            inner.append(outer)

    def test_insert_before_foreign_ref(self) -> None:
        p = Element("p")
        with pytest.raises(DomError):
            p.insert_before(TextNode("x"), TextNode("y"))

    def test_unwrap_replaces_with_children(self) -> None:
        span = Element("span", children=[TextNode("b")])
        p = _paragraph(TextNode("a"), span, TextNode("c"))
        moved = span.unwrap()
        assert [n.data for n in moved] == ["b"]  # type: ignore[attr-defined]
        assert p.text_content == "abc"
        assert len(p.children) == 3
        assert span.parent is None

    def test_normalize_merges_and_drops_empty(self) -> None:
        """Adjacent text nodes merge and empty ones disappear."""
        p = _paragraph(TextNode("a"), TextNode(""), TextNode("b"), Element("br"))
        p.normalize()
        assert len(p.children) == 2
        assert isinstance(p.children[0], TextNode)
        assert p.children[0].data == "ab"

    def test_classes(self) -> None:
        """Adding is ordered and deduplicated; removing the last drops the attribute."""
        el = Element("span", {"class": "a"})
        el.add_class("b", "a")
        assert el.classes == ["a", "b"]
        el.remove_class("a", "b")
        assert "class" not in el.attrs

    def test_index_and_siblings(self) -> None:
        a, b = TextNode("a"), TextNode("b")
        _paragraph(a, b)
        assert b.index == 1
        assert a.next_sibling is b
        assert b.previous_sibling is a
        assert b.next_sibling is None

    def test_detached_index_raises(self) -> None:
        with pytest.raises(DomError):
            _ = TextNode("a").index


# ---------------------------------------------------------------------------
# Document host operations
# ---------------------------------------------------------------------------
class TestDocumentHost:
    """The DocumentHost operations the core relies on."""

    def test_wrap_whole_text_node(self) -> None:
        doc = parse_html("<p>hello</p>")
        text = next(doc.body.iter_text_nodes())
        span = doc.wrap(text, "span", {"class": "x"})
        assert inner_html(doc.body) == '<p><span class="x">hello</span></p>'
        assert text.parent is span

    def test_unwrap_merges_text(self) -> None:
        doc = parse_html("<p>a<span>b</span>c</p>")
        span = doc.body.find(lambda e: e.tag == "span")
        assert span is not None
        doc.unwrap(span)
        p = doc.body.element_children[0]
        assert len(p.children) == 1
        assert p.text_content == "abc"

    def test_wrap_detached_raises(self) -> None:
        doc = parse_html("<p>a</p>")
        with pytest.raises(DomError):
            doc.wrap(TextNode("loose"), "span", {})

    def test_head_created_when_missing(self) -> None:
        """A document without a head gets one on demand."""
        doc = Document(Element("html"))
        assert doc.head.tag == "head"
        assert doc.root.children[0] is doc.head

    def test_select_reports_normalised_text(self) -> None:
        """The selection text is whitespace-normalised."""
        doc = parse_html("<p>one   two\n three</p>")
        text = next(doc.body.iter_text_nodes())
        selection = doc.select(TextRange(text, 4, text, len(text)))
        assert selection.text == "two three"
        assert doc.get_selection() is selection
        doc.clear_selection()
        assert doc.get_selection() is None

    def test_apply_background_paints_each_segment(self) -> None:
        """The native paint command wraps each covered text segment."""
        doc = parse_html("<p>aa<b>bb</b>cc</p>")
        text_range = select_text(doc.body, "abbc")
        assert text_range is not None
        painted = doc.apply_background(text_range, "red")
        assert [p.text_content for p in painted] == ["a", "bb", "c"]
        assert all(p.get("style") == "background-color: red;" for p in painted)
        assert doc.body.text_content == "aabbcc"


# ---------------------------------------------------------------------------
# Ranges
# ---------------------------------------------------------------------------
class TestRanges:
    """TextRange helpers and segment iteration."""

    def test_segments_clip_first_and_last(self) -> None:
        """Only the first and last text nodes are clipped to the range."""
        doc = parse_html("<p>abc<i>def</i>ghi</p>")
        nodes = doc.text_nodes(doc.body)
        text_range = TextRange(nodes[0], 1, nodes[2], 2)
        segments = [(n.data, s, e) for n, s, e in iter_range_segments(doc, text_range)]
        assert segments == [("abc", 1, 3), ("def", 0, 3), ("ghi", 0, 2)]

    def test_common_ancestor(self) -> None:
        doc = parse_html("<p>abc<i>def</i></p>")
        nodes = doc.text_nodes(doc.body)
        ancestor = TextRange(nodes[0], 0, nodes[1], 1).common_ancestor()
        assert ancestor is not None
        assert ancestor.tag == "p"

    def test_collapsed(self) -> None:
        text = TextNode("abc")
        assert TextRange(text, 1, text, 1).collapsed
        assert not TextRange(text, 1, text, 2).collapsed

    def test_detached_boundary_raises(self) -> None:
        doc = parse_html("<p>abc</p>")
        node = doc.text_nodes(doc.body)[0]
        stray = TextNode("zzz")
        with pytest.raises(DomError):
            list(iter_range_segments(doc, TextRange(node, 0, stray, 1)))

    def test_reversed_range_raises(self) -> None:
        doc = parse_html("<p>abc<i>def</i></p>")
        first, second = doc.text_nodes(doc.body)
        with pytest.raises(DomError):
            list(iter_range_segments(doc, TextRange(second, 0, first, 1)))
