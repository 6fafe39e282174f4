"""Matching strategies for the ``TextLocator`` cascade.

Each strategy is a small object with a ``name`` and a
``find(descriptor, context)`` method returning a flattened ``Match`` or
None.  They share nothing but the ``LocateContext``, so each can be tested
alone and the cascade can be reordered.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from anchormark.anchoring.structural_path import resolve_path
from anchormark.dom.text_map import find_nearest
from anchormark.errors import DomError

if TYPE_CHECKING:
    from anchormark.anchoring.descriptor import AnchorDescriptor
    from anchormark.dom.nodes import Document, Element
    from anchormark.dom.text_map import TextMap

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Match:
    """A flattened ``[start, end)`` span in the content root's text."""

    start: int
    end: int


@dataclass
class LocateContext:
    """Everything a strategy may look at: the document, its root, the text."""

    document: Document
    root: Element
    text_map: TextMap

    @property
    def text(self) -> str:
        return self.text_map.text


class MatchStrategy(Protocol):
    name: str

    def find(
        self, descriptor: AnchorDescriptor, context: LocateContext
    ) -> Match | None: ...


def _find_within(
    text: str, needle: str, lo: int, hi: int, near: int | None = None
) -> int:
    """Occurrence of *needle* starting in ``[lo, hi]`` closest to *near*.

    The first one in the span when *near* is None; -1 when there is none.
    """
    best = -1
    index = text.find(needle, lo)
    while index != -1 and index <= hi:
        if near is None:
            return index
        if best == -1 or abs(index - near) < abs(best - near):
            best = index
        index = text.find(needle, index + 1)
    return best


class StructuralPathStrategy:
    """Follow the stored structural path and look for the text there."""

    name = "structural"

    def find(
        self, descriptor: AnchorDescriptor, context: LocateContext
    ) -> Match | None:
        if not descriptor.structural_path:
            return None
        element = resolve_path(
            context.document, descriptor.structural_path, root=context.root
        )
        if element is None or not element.is_inside(context.root):
            return None

        exact = descriptor.exact_text
        text = context.text
        text_children = element.text_children
        index = descriptor.node_index
        if index is not None and 0 <= index < len(text_children):
            try:
                lo, hi = context.text_map.node_span(text_children[index])
            except DomError:
                lo = hi = -1
            if lo != -1:
                found = _find_within(text, exact, lo, hi, descriptor.start)
                if found != -1:
                    return Match(found, found + len(exact))

        span = context.text_map.element_span(element)
        if span is None:
            return None
        found = _find_within(text, exact, span[0], span[1], descriptor.start)
        if found == -1:
            return None
        return Match(found, found + len(exact))


class ExactQuoteStrategy:
    """Plain substring search, nearest to the stored start when repeated."""

    name = "exact"

    def find(
        self, descriptor: AnchorDescriptor, context: LocateContext
    ) -> Match | None:
        index = find_nearest(context.text, descriptor.exact_text, descriptor.start)
        if index == -1:
            return None
        return Match(index, index + len(descriptor.exact_text))


def _flexible(literal: str) -> str:
    """Regex for *literal* where every space may be any whitespace or none."""
    return r"\s*".join(re.escape(part) for part in literal.split(" "))


class ContextQuoteStrategy:
    """``before \\s* exact \\s* after`` with whitespace-flexible literals."""

    name = "context"

    def find(
        self, descriptor: AnchorDescriptor, context: LocateContext
    ) -> Match | None:
        if not descriptor.has_context:
            return None
        pattern = re.compile(
            _flexible(descriptor.text_before)
            + r"\s*(?P<exact>"
            + _flexible(descriptor.exact_text)
            + r")\s*"
            + _flexible(descriptor.text_after)
        )
        found = pattern.search(context.text)
        if found is None:
            return None
        return Match(found.start("exact"), found.end("exact"))


class FuzzyChunkStrategy:
    """Best per-character agreement of a sliding window with the quote.

    The window is the quote's length capped at ``window``; a position wins
    only with a score strictly above ``threshold``.
    """

    name = "fuzzy"

    def __init__(self, threshold: float = 0.7, window: int = 50) -> None:
        self.threshold = threshold
        self.window = window

    def find(
        self, descriptor: AnchorDescriptor, context: LocateContext
    ) -> Match | None:
        text = context.text
        exact = descriptor.exact_text
        needle = exact[: self.window]
        size = len(needle)
        if size == 0 or size > len(text):
            return None

        best_index, best_score = -1, 0.0
        for i in range(len(text) - size + 1):
            hits = sum(1 for a, b in zip(text[i : i + size], needle) if a == b)
            score = hits / size
            if score > best_score and score > self.threshold:
                best_index, best_score = i, score
                if hits == size:
                    break
        if best_index == -1:
            return None
        logger.debug("Fuzzy match at %d (score %.2f)", best_index, best_score)
        return Match(best_index, min(best_index + len(exact), len(text)))


class PositionStrategy:
    """Reuse the stored offsets verbatim if they still fit the text."""

    name = "position"

    def find(
        self, descriptor: AnchorDescriptor, context: LocateContext
    ) -> Match | None:
        start, end = descriptor.start, descriptor.end
        if start is None or end is None:
            return None
        if 0 <= start < end <= len(context.text):
            return Match(start, end)
        return None
