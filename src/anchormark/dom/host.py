"""Protocol defining the host document-tree interface.

The anchoring and rendering core only talks to the tree through these
operations.  ``anchormark.dom.nodes.Document`` is the in-memory
implementation; a browser bridge would be another.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from collections.abc import Callable

    from anchormark.dom.nodes import Element, Node, TextNode
    from anchormark.dom.selection import Selection, TextRange


class DocumentHost(Protocol):
    """Operations the surrounding application must supply."""

    root: Element

    @property
    def body(self) -> Element: ...

    @property
    def head(self) -> Element: ...

    def text_nodes(self, root: Element) -> list[TextNode]:
        """Enumerate all text nodes under *root*, in document order."""
        ...

    def split_text(self, node: TextNode, offset: int) -> TextNode:
        """Split *node* at *offset* and return the new trailing node."""
        ...

    def wrap(self, node: TextNode, tag: str, attrs: dict[str, str]) -> Element:
        """Wrap the whole of *node* in a new element carrying *attrs*."""
        ...

    def unwrap(self, element: Element) -> list[Node]:
        """Replace *element* with its children, merging adjacent text."""
        ...

    def get_selection(self) -> Selection | None:
        """Current selection range and its plain text, if any."""
        ...

    def apply_background(self, text_range: TextRange, color: str) -> list[Element]:
        """Native "paint background" command over a range.

        Returns the elements it produced.  Hosts without such a command
        raise ``NotImplementedError``.
        """
        ...

    def find_all(self, predicate: Callable[[Element], bool]) -> list[Element]: ...

    def contains(self, node: Node) -> bool: ...
