"""Selection ranges over text nodes.

Callers obtain a ``Selection`` from the host and pass it explicitly into
the anchor builder; nothing reads ambient selection state.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from anchormark.dom.nodes import Element, TextNode
from anchormark.errors import DomError

if TYPE_CHECKING:
    from collections.abc import Iterator

    from anchormark.dom.nodes import Document


@dataclass(frozen=True, eq=False)
class TextRange:
    """Start and end boundary points, each a (text node, local offset) pair."""

    start_node: TextNode
    start_offset: int
    end_node: TextNode
    end_offset: int

    @property
    def collapsed(self) -> bool:
        return self.start_node is self.end_node and self.start_offset == self.end_offset

    @property
    def single_node(self) -> bool:
        return self.start_node is self.end_node

    def common_ancestor(self) -> Element | None:
        """Deepest element containing both boundary nodes."""
        start_chain = list(self.start_node.ancestors())
        end_chain = set(map(id, self.end_node.ancestors()))
        for element in start_chain:
            if id(element) in end_chain:
                return element
        return None


@dataclass(frozen=True)
class Selection:
    """A live selection: its range plus the plain text the host reports."""

    range: TextRange
    text: str


def iter_range_segments(
    document: Document, text_range: TextRange
) -> Iterator[tuple[TextNode, int, int]]:
    """Yield ``(node, start, end)`` for every text node the range touches.

    The first node is clipped to the start offset, the last to the end
    offset, interior nodes are yielded whole.
    """
    scope = text_range.common_ancestor() or document.root
    nodes = document.text_nodes(scope)
    try:
        first = next(i for i, n in enumerate(nodes) if n is text_range.start_node)
        last = next(i for i, n in enumerate(nodes) if n is text_range.end_node)
    except StopIteration:
        msg = "Range boundary is not attached to the document"
        raise DomError(msg) from None
    if last < first:
        msg = "Range end precedes range start"
        raise DomError(msg)

    for i in range(first, last + 1):
        node = nodes[i]
        start = text_range.start_offset if i == first else 0
        end = text_range.end_offset if i == last else len(node)
        yield node, start, end
