"""Flattened, whitespace-normalised text of a subtree, mapped back to nodes.

Matching happens in this flattened coordinate space; wrapping has to happen
on live text nodes.  ``TextMap`` records, for every character it emits,
which text node and raw offset it came from, so an abstract
``(start, end)`` can be translated back to a ``TextRange``.

Flattening rules:
- ``script`` / ``style`` / ``noscript`` / ``template`` are skipped entirely
- whitespace runs (including ``\\u00a0``) collapse to a single space, also
  across node boundaries; leading whitespace is dropped
- whitespace-only text nodes directly inside block containers are
  indentation between tags and emit no characters of their own
- entering or leaving a block element, and ``<br>``, act as a word
  separator: a single *virtual* space (no backing node) is emitted before
  the next visible character when none is already present
"""

from __future__ import annotations

import re
from bisect import bisect_left
from typing import TYPE_CHECKING

from anchormark.dom.nodes import Element, TextNode
from anchormark.dom.selection import TextRange
from anchormark.errors import DomError

if TYPE_CHECKING:
    from anchormark.dom.nodes import Node

# Tags whose text never renders
SKIP_TAGS = frozenset(("script", "style", "noscript", "template"))

# Containers where whitespace-only children are formatting artefacts
WHITESPACE_CONTAINERS = frozenset(
    (
        "html",
        "body",
        "table",
        "tbody",
        "thead",
        "tfoot",
        "tr",
        "td",
        "th",
        "ul",
        "ol",
        "li",
        "dl",
        "dt",
        "dd",
        "div",
        "section",
        "article",
        "aside",
        "header",
        "footer",
        "nav",
        "main",
        "figure",
        "figcaption",
        "blockquote",
    )
)

# Elements that start a new line of text when rendered
BLOCK_ELEMENTS = WHITESPACE_CONTAINERS | frozenset(
    ("p", "h1", "h2", "h3", "h4", "h5", "h6", "pre", "hr", "address", "form")
)

# Whitespace pattern matching JS /\s+/g, includes \u00a0 (nbsp)
_WHITESPACE_RUN = re.compile(r"[\s\u00a0]+")


def normalize_whitespace(text: str) -> str:
    """Collapse every whitespace run to a single space."""
    return _WHITESPACE_RUN.sub(" ", text)


def is_whitespace(char: str) -> bool:
    return char.isspace() or char == "\u00a0"


_Point = tuple[TextNode, int]


class TextMap:
    """Flattened text of a root element with a per-character node map."""

    def __init__(self, root: Element) -> None:
        self.root = root
        self._chars: list[str] = []
        self._starts: list[_Point | None] = []
        self._ends: list[_Point | None] = []
        self._node_chars: dict[TextNode, tuple[list[int], list[int]]] = {}
        self._node_bounds: dict[TextNode, tuple[int, int]] = {}
        self.nodes: list[TextNode] = []
        self._pending_separator = False
        for child in root.children:
            self._walk(child)
        self.text = "".join(self._chars)

    @classmethod
    def build(cls, root: Element) -> TextMap:
        return cls(root)

    def __len__(self) -> int:
        return len(self.text)

    # -- construction -------------------------------------------------------

    def _separator(self) -> None:
        if self._chars and self._chars[-1] != " ":
            self._pending_separator = True

    def _emit(self, char: str, node: TextNode | None, raw: int) -> None:
        flat = len(self._chars)
        self._chars.append(char)
        if node is None:
            self._starts.append(None)
            self._ends.append(None)
            return
        self._starts.append((node, raw))
        self._ends.append((node, raw + 1))
        raws, flats = self._node_chars.setdefault(node, ([], []))
        raws.append(raw)
        flats.append(flat)

    def _walk(self, node: Node) -> None:
        if isinstance(node, TextNode):
            self._walk_text(node)
            return
        if not isinstance(node, Element) or node.tag in SKIP_TAGS:
            return
        if node.tag == "br":
            self._separator()
            return
        block = node.tag in BLOCK_ELEMENTS
        if block:
            self._separator()
        for child in node.children:
            self._walk(child)
        if block:
            self._separator()

    def _walk_text(self, node: TextNode) -> None:
        self.nodes.append(node)
        start = len(self._chars)
        parent = node.parent
        data = node.data
        if (
            parent is not None
            and parent.tag in WHITESPACE_CONTAINERS
            and _WHITESPACE_RUN.fullmatch(data)
        ):
            self._separator()
            self._node_bounds[node] = (start, start)
            return

        for raw, char in enumerate(data):
            if is_whitespace(char):
                if self._chars and self._chars[-1] != " ":
                    self._emit(" ", node, raw)
                    self._pending_separator = False
                continue
            if self._pending_separator:
                self._emit(" ", None, raw)
                self._pending_separator = False
            self._emit(char, node, raw)
        self._node_bounds[node] = (start, len(self._chars))

    # -- queries ------------------------------------------------------------

    def node_span(self, node: TextNode) -> tuple[int, int]:
        """Flattened ``[start, end)`` covered by *node*."""
        try:
            return self._node_bounds[node]
        except KeyError:
            msg = f"{node!r} is not under the mapped root"
            raise DomError(msg) from None

    def element_span(self, element: Element) -> tuple[int, int] | None:
        """Flattened ``[start, end)`` covered by *element*'s text, if any."""
        spans = [
            self._node_bounds[t]
            for t in element.iter_text_nodes()
            if t in self._node_bounds
        ]
        if not spans:
            return None
        return spans[0][0], spans[-1][1]

    def offset_of(self, node: TextNode, raw_offset: int) -> int:
        """Flattened offset of the boundary point ``(node, raw_offset)``."""
        start, end = self.node_span(node)
        entry = self._node_chars.get(node)
        if entry is None:
            return start
        raws, flats = entry
        i = bisect_left(raws, raw_offset)
        if i < len(raws):
            return flats[i]
        return end

    def to_range(self, start: int, end: int) -> TextRange:
        """Translate flattened ``[start, end)`` into concrete node boundaries."""
        if not 0 <= start < end <= len(self._chars):
            msg = f"Offsets [{start}, {end}) outside text of length {len(self)}"
            raise DomError(msg)
        first = next(
            (self._starts[i] for i in range(start, end) if self._starts[i]), None
        )
        last = next(
            (self._ends[i] for i in range(end - 1, start - 1, -1) if self._ends[i]),
            None,
        )
        if first is None or last is None:
            msg = f"No text node backs offsets [{start}, {end})"
            raise DomError(msg)
        return TextRange(first[0], first[1], last[0], last[1])

    def range_offsets(self, text_range: TextRange) -> tuple[int, int]:
        return (
            self.offset_of(text_range.start_node, text_range.start_offset),
            self.offset_of(text_range.end_node, text_range.end_offset),
        )

    def slice_range(self, text_range: TextRange) -> str:
        """Normalised text covered by *text_range*."""
        start, end = self.range_offsets(text_range)
        return self.text[start:end]


def select_text(
    root: Element, text: str, occurrence: int = 1
) -> TextRange | None:
    """Range covering the *occurrence*-th match of *text* under *root*.

    Stands in for a user's mouse selection in tests and in the CLI.
    """
    text_map = TextMap.build(root)
    needle = normalize_whitespace(text).strip()
    if not needle:
        return None
    index = -1
    for _ in range(max(occurrence, 1)):
        index = text_map.text.find(needle, index + 1)
        if index == -1:
            return None
    return text_map.to_range(index, index + len(needle))


def find_nearest(text: str, needle: str, near: int | None = None) -> int:
    """Index of the occurrence of *needle* in *text* closest to *near*.

    Returns the first occurrence when *near* is None, and -1 when there is
    no occurrence at all.
    """
    index = text.find(needle)
    if index == -1 or near is None:
        return index
    best = index
    while index != -1:
        if abs(index - near) < abs(best - near):
            best = index
        if index > near:
            break
        index = text.find(needle, index + 1)
    return best
