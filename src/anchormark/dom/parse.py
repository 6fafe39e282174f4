"""HTML <-> in-memory tree conversion.

Parsing goes through selectolax's Lexbor backend, walking nodes via
``child`` / ``next`` iteration (which exposes text nodes), and copies the
result into the mutable ``anchormark.dom.nodes`` model.  Serialisation is a
straightforward recursive writer.
"""

from __future__ import annotations

import html as html_module
import logging
import re
from typing import TYPE_CHECKING, Any

from selectolax.lexbor import LexborHTMLParser

from anchormark.dom.nodes import Document, Element, TextNode
from anchormark.errors import DomError

if TYPE_CHECKING:
    from anchormark.dom.nodes import Node

logger = logging.getLogger(__name__)

# Element names we keep; selectolax reports comments/doctypes with other names
_ELEMENT_NAME = re.compile(r"^[a-z][a-z0-9:-]*$")

VOID_TAGS = frozenset(
    (
        "area",
        "base",
        "br",
        "col",
        "embed",
        "hr",
        "img",
        "input",
        "link",
        "meta",
        "source",
        "track",
        "wbr",
    )
)

# Children of these are written out verbatim
_RAW_TEXT_TAGS = frozenset(("script", "style"))


def _convert(node: Any) -> Node | None:
    """Copy one selectolax node (and its subtree) into the tree model."""
    tag = node.tag

    # Text node: selectolax uses "-text" as the tag
    if tag == "-text":
        text = node.text_content
        return TextNode(text) if text else None

    if not tag or not _ELEMENT_NAME.match(tag.lower()):
        return None

    attrs = {name: value or "" for name, value in node.attributes.items()}
    element = Element(tag, attrs)
    child = node.child
    while child is not None:
        converted = _convert(child)
        if converted is not None:
            element.append(converted)
        child = child.next
    return element


def parse_html(html: str) -> Document:
    """Parse *html* (a full document or a fragment) into a ``Document``.

    Fragments are placed inside ``<body>``, as browsers do.
    """
    tree = LexborHTMLParser(html or "")
    source_root = tree.root

    root = _convert(source_root) if source_root is not None else None
    if not isinstance(root, Element) or root.tag != "html":
        root = Element("html")

    document = Document(root)
    # Touch head/body so they exist even for empty input
    _ = document.head, document.body
    logger.debug(
        "Parsed %d bytes into %d text nodes",
        len(html or ""),
        len(document.text_nodes(document.body)),
    )
    return document


def _format_attrs(attrs: dict[str, str]) -> str:
    return "".join(
        f' {name}="{html_module.escape(value, quote=True)}"'
        for name, value in attrs.items()
    )


def to_html(node: Node, *, raw_text: bool = False) -> str:
    """Serialise *node* and its subtree to an HTML string."""
    if isinstance(node, TextNode):
        return node.data if raw_text else html_module.escape(node.data, quote=False)
    if not isinstance(node, Element):
        msg = f"Cannot serialise {type(node).__name__}"
        raise DomError(msg)
    open_tag = f"<{node.tag}{_format_attrs(node.attrs)}>"
    if node.tag in VOID_TAGS:
        return open_tag
    raw = node.tag in _RAW_TEXT_TAGS
    inner = "".join(to_html(child, raw_text=raw) for child in node.children)
    return f"{open_tag}{inner}</{node.tag}>"


def inner_html(element: Element) -> str:
    """Serialise the children of *element*."""
    raw = element.tag in _RAW_TEXT_TAGS
    return "".join(to_html(child, raw_text=raw) for child in element.children)


def document_to_html(document: Document) -> str:
    """Serialise a whole document, doctype included."""
    return f"<!DOCTYPE html>{to_html(document.root)}"
