"""Locate the main readable content ("content root") of a document.

Offsets and structural paths are computed relative to this element so they
stay stable when navigation, headers and sidebars around the article change.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from anchormark.dom.nodes import Element

if TYPE_CHECKING:
    from anchormark.dom.nodes import Document, Node

logger = logging.getLogger(__name__)

CONTENT_ROOT_CLASSES = frozenset(
    (
        "article",
        "content",
        "article-content",
        "post-content",
        "anchormark-reader-container",
        "anchormark-article-container",
    )
)
CONTENT_ROOT_IDS = frozenset(("article", "content"))

# Added to a content root once a highlight has been anchored inside it
ARTICLE_CONTAINER_CLASS = "anchormark-article-container"


def is_content_root(element: Element) -> bool:
    """True if *element* carries one of the common article/content markers."""
    if element.tag in ("article", "main"):
        return True
    if element.get("role") == "main":
        return True
    if element.id in CONTENT_ROOT_IDS:
        return True
    return any(c in CONTENT_ROOT_CLASSES for c in element.classes)


def find_content_root(node: Node) -> Element | None:
    """Nearest content-root ancestor of *node*, else the enclosing ``<body>``.

    Returns None when *node* is not attached under a body element.
    """
    start = node if isinstance(node, Element) else node.parent
    body: Element | None = None
    current = start
    while current is not None:
        if current.tag == "body":
            body = current
            break
        if is_content_root(current):
            return current
        current = current.parent
    if body is None:
        logger.debug("No body ancestor for %r", node)
    return body


def find_document_content_root(document: Document) -> Element:
    """First content root in *document*, falling back to its body."""
    root = document.body.find(is_content_root)
    return root if root is not None else document.body


def describe_root(element: Element) -> str:
    """Identifier for a content root: ``tag#id``, ``tag.class.class`` or ``tag``."""
    if element.id:
        return f"{element.tag}#{element.id}"
    classes = [c for c in element.classes if c != ARTICLE_CONTAINER_CLASS]
    if classes:
        return f"{element.tag}.{'.'.join(classes)}"
    return element.tag
