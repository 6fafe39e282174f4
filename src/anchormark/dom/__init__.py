"""Document tree model, HTML conversion, and tree utilities."""

from anchormark.dom.content_root import (
    find_content_root,
    find_document_content_root,
    is_content_root,
)
from anchormark.dom.host import DocumentHost
from anchormark.dom.nodes import Document, Element, Node, TextNode
from anchormark.dom.parse import document_to_html, inner_html, parse_html, to_html
from anchormark.dom.selection import Selection, TextRange, iter_range_segments
from anchormark.dom.text_map import (
    TextMap,
    find_nearest,
    normalize_whitespace,
    select_text,
)

__all__ = [
    "Document",
    "DocumentHost",
    "Element",
    "Node",
    "Selection",
    "TextMap",
    "TextNode",
    "TextRange",
    "document_to_html",
    "find_content_root",
    "find_document_content_root",
    "find_nearest",
    "inner_html",
    "is_content_root",
    "iter_range_segments",
    "normalize_whitespace",
    "parse_html",
    "select_text",
    "to_html",
]
