"""Tests for structural path computation and tolerant resolution."""

from __future__ import annotations

from anchormark.anchoring.structural_path import (
    compute_path,
    resolve_path,
    resolve_root,
    text_node_index,
)
from anchormark.dom.nodes import Document, TextNode
from anchormark.dom.parse import parse_html

NESTED = (
    '<article id="a"><div><p>x</p></div><div><p>y</p><p>z</p></div></article>'
)


def _find_text(html: str, text: str) -> tuple[Document, TextNode]:
    doc = parse_html(html)
    node = next(t for t in doc.text_nodes(doc.body) if t.data == text)
    return doc, node


class TestComputePath:
    """Path tokens from the content root down."""

    def test_nth_of_type_only_when_needed(self) -> None:
        """The nth-of-type suffix is written only for later siblings."""
        doc, z = _find_text(NESTED, "z")
        root = doc.get_element_by_id("a")
        assert root is not None
        assert z.parent is not None
        assert compute_path(z.parent, root) == (
            "article-container[article#a]",
            "div:nth-of-type(2)",
            "p:nth-of-type(2)",
        )

    def test_id_segment(self) -> None:
        """An element id replaces the position suffix."""
        doc, node = _find_text('<main><p id="lede">hi</p></main>', "hi")
        root = doc.body.find(lambda e: e.tag == "main")
        assert root is not None
        assert node.parent is not None
        assert compute_path(node.parent, root) == ("article-container[main]", "p#lede")

    def test_root_itself(self) -> None:
        doc = parse_html("<p>x</p>")
        assert compute_path(doc.body, doc.body) == ("article-container[body]",)

    def test_text_node_index(self) -> None:
        """The ordinal counts only text children of the parent."""
        doc, node = _find_text("<p>one<br>two</p>", "two")
        assert node.parent is not None
        assert text_node_index(node.parent, node) == 1


class TestResolvePath:
    """Exact walk, then tail search, then tag-only walk."""

    def test_exact(self) -> None:
        """A path resolves by walking it step by step."""
        doc, z = _find_text(NESTED, "z")
        path = (
            "article-container[article#a]",
            "div:nth-of-type(2)",
            "p:nth-of-type(2)",
        )
        assert resolve_path(doc, path) is z.parent

    def test_tail_fallback_after_wrapping(self) -> None:
        """An extra wrapper is bridged by matching the last two segments."""
        wrapped = NESTED.replace('<article id="a">', '<article id="a"><section>')
        wrapped = wrapped.replace("</article>", "</section></article>")
        doc, z = _find_text(wrapped, "z")
        path = (
            "article-container[article#a]",
            "div:nth-of-type(2)",
            "p:nth-of-type(2)",
        )
        assert resolve_path(doc, path) is z.parent

    def test_tag_only_fallback(self) -> None:
        """Changed ids still resolve through tag names."""
        doc, x = _find_text('<article id="a"><div><p>x</p></div></article>', "x")
        path = ("article-container[article#a]", "div#missing", "p")
        assert resolve_path(doc, path) is x.parent

    def test_unresolvable(self) -> None:
        doc = parse_html('<article id="a"><p>x</p></article>')
        path = ("article-container[article#a]", "table", "tr")
        assert resolve_path(doc, path) is None

    def test_garbage_segment(self) -> None:
        """An unparseable token gives None."""
        doc = parse_html("<p>x</p>")
        assert resolve_path(doc, ("article-container[body]", "??")) is None

    def test_empty_path(self) -> None:
        assert resolve_path(parse_html("<p>x</p>"), ()) is None


class TestResolveRoot:
    def test_by_id(self) -> None:
        doc = parse_html('<div id="story" class="article">x</div>')
        root = resolve_root(doc, "article-container[div#story]")
        assert root is not None
        assert root.id == "story"

    def test_by_tag_and_class(self) -> None:
        """Tag and classes pick the right candidate root."""
        doc = parse_html(
            '<div class="content">a</div><div class="article special">b</div>'
        )
        root = resolve_root(doc, "article-container[div.article.special]")
        assert root is not None
        assert root.text_content == "b"

    def test_body(self) -> None:
        doc = parse_html("<p>x</p>")
        assert resolve_root(doc, "article-container[body]") is doc.body

    def test_not_a_root_token(self) -> None:
        doc = parse_html("<p>x</p>")
        assert resolve_root(doc, "div") is None
        assert resolve_root(doc, None) is None
