"""Structural paths: a best-effort address of an element under its content root.

A path looks like::

    ("article-container[article#story]", "div:nth-of-type(2)", "p#lede")

The first token names the content root; each following token is a tag
optionally qualified by ``#id`` or ``:nth-of-type(k)`` (1-based, only
written when k > 1).  Resolution tries the exact walk first, then the last
two segments anywhere under the root, then a tag-only walk.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from anchormark.dom.content_root import describe_root, is_content_root
from anchormark.dom.nodes import Document, Element

logger = logging.getLogger(__name__)

_ROOT_TOKEN = re.compile(r"^article-container\[(.*)\]$")
_SEGMENT = re.compile(
    r"^(?P<tag>[a-z][a-z0-9:-]*)"
    r"(?:#(?P<id>.+?)|:nth-of-type\((?P<nth>\d+)\))?$"
)


@dataclass(frozen=True)
class _Segment:
    tag: str
    id: str | None = None
    nth: int = 1


def _parse_segment(token: str) -> _Segment | None:
    match = _SEGMENT.match(token)
    if match is None:
        return None
    nth = int(match["nth"]) if match["nth"] else 1
    return _Segment(match["tag"], match["id"], nth)


def _segment_for(element: Element) -> str:
    if element.id:
        return f"{element.tag}#{element.id}"
    parent = element.parent
    if parent is None:
        return element.tag
    index = 1
    for sibling in parent.element_children:
        if sibling is element:
            break
        if sibling.tag == element.tag:
            index += 1
    return f"{element.tag}:nth-of-type({index})" if index > 1 else element.tag


def compute_path(element: Element, root: Element) -> tuple[str, ...]:
    """Path tokens from *root* down to *element* (inclusive)."""
    segments: list[str] = []
    current: Element | None = element
    while current is not None and current is not root:
        segments.append(_segment_for(current))
        current = current.parent
    if current is None:
        logger.debug("%r is not under root %r", element, root)
    segments.reverse()
    return (f"article-container[{describe_root(root)}]", *segments)


def text_node_index(node_parent: Element, node: object) -> int:
    """Ordinal of *node* among the text-node children of *node_parent*."""
    for i, child in enumerate(node_parent.text_children):
        if child is node:
            return i
    return 0


# ---------------------------------------------------------------------------
# Resolution
# ---------------------------------------------------------------------------


def _match(element: Element, segment: _Segment) -> bool:
    if element.tag != segment.tag:
        return False
    if segment.id is not None:
        return element.id == segment.id
    return True


def _child_for(parent: Element, segment: _Segment) -> Element | None:
    if segment.id is not None:
        return next(
            (c for c in parent.element_children if _match(c, segment)), None
        )
    same_tag = [c for c in parent.element_children if c.tag == segment.tag]
    if len(same_tag) >= segment.nth:
        return same_tag[segment.nth - 1]
    return None


def _walk(root: Element, segments: list[_Segment]) -> Element | None:
    current = root
    for segment in segments:
        found = _child_for(current, segment)
        if found is None:
            return None
        current = found
    return current


def _walk_tags(root: Element, tags: list[str]) -> Element | None:
    """First element reachable by a child-chain of *tags*, depth-first."""
    if not tags:
        return root
    for child in root.element_children:
        if child.tag == tags[0]:
            found = _walk_tags(child, tags[1:])
            if found is not None:
                return found
    return None


def resolve_root(document: Document, token: str | None) -> Element | None:
    """Find the content root named by a path's first token."""
    if token is None:
        return None
    match = _ROOT_TOKEN.match(token)
    if match is None:
        return None
    identifier = match[1]

    id_match = re.search(r"#([^.#]+)", identifier)
    if id_match:
        by_id = document.get_element_by_id(id_match[1])
        if by_id is not None:
            return by_id

    tag = re.match(r"^([a-z0-9]+)", identifier)
    classes = set(identifier.split(".")[1:]) if "." in identifier else set()
    candidates = document.find_all(
        lambda e: bool(tag) and e.tag == tag[1] and is_content_root(e)
    )
    for candidate in candidates:
        if classes and classes.issubset(candidate.classes):
            return candidate
    if candidates:
        return candidates[0]
    if tag and tag[1] == "body":
        return document.body
    return document.body.find(is_content_root)


def resolve_path(
    document: Document, path: tuple[str, ...] | list[str], root: Element | None = None
) -> Element | None:
    """Resolve *path* to an element, or None.

    *root* overrides the content root named by the path's first token.
    """
    if not path:
        return None
    tokens = list(path)
    if _ROOT_TOKEN.match(tokens[0]):
        root = root or resolve_root(document, tokens[0])
        tokens = tokens[1:]
    if root is None:
        root = document.body

    segments = [_parse_segment(t) for t in tokens]
    if any(s is None for s in segments):
        logger.warning("Unparseable structural path: %s", " > ".join(path))
        return None
    parsed = [s for s in segments if s is not None]
    if not parsed:
        return root

    found = _walk(root, parsed)
    if found is not None:
        logger.debug("Resolved structural path exactly: %s", " > ".join(tokens))
        return found

    # Last two segments anywhere under the root
    tail = parsed[-2:]
    for candidate in root.iter_elements():
        if _match(candidate, tail[0]):
            found = _walk(candidate, tail[1:]) if len(tail) > 1 else candidate
            if found is not None:
                logger.debug("Resolved structural path by tail: %s", tail)
                return found

    # Tag names only
    found = _walk_tags(root, [s.tag for s in parsed])
    if found is not None:
        logger.debug("Resolved structural path by tag names")
    return found
