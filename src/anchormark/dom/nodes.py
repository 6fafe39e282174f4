"""In-memory mutable document tree.

A deliberately small node model (elements and text nodes only) that the
anchoring and rendering code mutates directly.  ``Document`` implements the
``DocumentHost`` protocol, so the whole anchor/locate/apply cycle can run
against parsed HTML without a browser.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from anchormark.errors import DomError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterator

    from anchormark.dom.selection import Selection, TextRange

logger = logging.getLogger(__name__)


class Node:
    """Common base for elements and text nodes."""

    def __init__(self) -> None:
        self.parent: Element | None = None

    @property
    def index(self) -> int:
        """Position of this node among its parent's children."""
        if self.parent is None:
            msg = "Detached node has no index"
            raise DomError(msg)
        for i, child in enumerate(self.parent.children):
            if child is self:
                return i
        msg = "Node not found among its parent's children"
        raise DomError(msg)

    @property
    def next_sibling(self) -> Node | None:
        if self.parent is None:
            return None
        i = self.index + 1
        siblings = self.parent.children
        return siblings[i] if i < len(siblings) else None

    @property
    def previous_sibling(self) -> Node | None:
        if self.parent is None:
            return None
        i = self.index - 1
        return self.parent.children[i] if i >= 0 else None

    def ancestors(self) -> Iterator[Element]:
        """Yield parent, grandparent, ... up to the tree root."""
        current = self.parent
        while current is not None:
            yield current
            current = current.parent

    def is_inside(self, element: Element) -> bool:
        """True if *element* is this node or one of its ancestors."""
        if self is element:
            return True
        return any(a is element for a in self.ancestors())

    def remove(self) -> None:
        """Detach this node from its parent."""
        if self.parent is None:
            return
        self.parent.remove_child(self)


class TextNode(Node):
    """A run of character data."""

    def __init__(self, data: str) -> None:
        super().__init__()
        self.data = data

    def __len__(self) -> int:
        return len(self.data)

    def __repr__(self) -> str:
        preview = self.data if len(self.data) <= 30 else self.data[:27] + "..."
        return f"TextNode({preview!r})"

    def split(self, offset: int) -> TextNode:
        """Split at *offset*; this node keeps the head, the tail is returned.

        The tail is inserted right after this node, mirroring DOM
        ``Text.splitText``.
        """
        if not 0 <= offset <= len(self.data):
            msg = f"Split offset {offset} outside text node of length {len(self.data)}"
            raise DomError(msg)
        if self.parent is None:
            msg = "Cannot split a detached text node"
            raise DomError(msg)
        tail = TextNode(self.data[offset:])
        self.data = self.data[:offset]
        self.parent.insert_after(tail, self)
        return tail


class Element(Node):
    """An element with a tag, attributes and ordered children."""

    def __init__(
        self,
        tag: str,
        attrs: dict[str, str] | None = None,
        children: list[Node] | None = None,
    ) -> None:
        super().__init__()
        self.tag = tag.lower()
        self.attrs: dict[str, str] = dict(attrs or {})
        self.children: list[Node] = []
        for child in children or []:
            self.append(child)

    def __repr__(self) -> str:
        ident = f"#{self.id}" if self.id else ""
        return f"<Element {self.tag}{ident} children={len(self.children)}>"

    # -- attributes ---------------------------------------------------------

    @property
    def id(self) -> str | None:
        return self.attrs.get("id") or None

    @property
    def classes(self) -> list[str]:
        return self.attrs.get("class", "").split()

    def has_class(self, name: str) -> bool:
        return name in self.classes

    def add_class(self, *names: str) -> None:
        classes = self.classes
        for name in names:
            if name not in classes:
                classes.append(name)
        self.attrs["class"] = " ".join(classes)

    def remove_class(self, *names: str) -> None:
        classes = [c for c in self.classes if c not in names]
        if classes:
            self.attrs["class"] = " ".join(classes)
        else:
            self.attrs.pop("class", None)

    def get(self, name: str, default: str | None = None) -> str | None:
        return self.attrs.get(name, default)

    def set(self, name: str, value: str) -> None:
        self.attrs[name] = value

    def remove_attr(self, name: str) -> None:
        self.attrs.pop(name, None)

    # -- structure ----------------------------------------------------------

    @property
    def element_children(self) -> list[Element]:
        return [c for c in self.children if isinstance(c, Element)]

    @property
    def text_children(self) -> list[TextNode]:
        return [c for c in self.children if isinstance(c, TextNode)]

    def _adopt(self, node: Node) -> None:
        if isinstance(node, Element) and self.is_inside(node):
            msg = f"Cannot insert {node!r} inside its own subtree"
            raise DomError(msg)
        node.remove()
        node.parent = self

    def append(self, node: Node) -> Node:
        self._adopt(node)
        self.children.append(node)
        return node

    def insert_before(self, node: Node, ref: Node | None) -> Node:
        """Insert *node* before *ref* (append when *ref* is None)."""
        if ref is None:
            return self.append(node)
        if ref.parent is not self:
            msg = "Reference node is not a child of this element"
            raise DomError(msg)
        self._adopt(node)
        self.children.insert(ref.index, node)
        return node

    def insert_after(self, node: Node, ref: Node) -> Node:
        if ref.parent is not self:
            msg = "Reference node is not a child of this element"
            raise DomError(msg)
        return self.insert_before(node, ref.next_sibling)

    def remove_child(self, node: Node) -> Node:
        if node.parent is not self:
            msg = "Node is not a child of this element"
            raise DomError(msg)
        del self.children[node.index]
        node.parent = None
        return node

    def replace_child(self, new: Node, old: Node) -> Node:
        self.insert_before(new, old)
        return self.remove_child(old)

    def unwrap(self) -> list[Node]:
        """Replace this element with its own children; return the moved nodes."""
        parent = self.parent
        if parent is None:
            msg = "Cannot unwrap a detached element"
            raise DomError(msg)
        moved = list(self.children)
        for child in moved:
            parent.insert_before(child, self)
        parent.remove_child(self)
        return moved

    def normalize(self) -> None:
        """Merge adjacent text nodes and drop empty ones, recursively."""
        merged: list[Node] = []
        for child in self.children:
            if isinstance(child, TextNode):
                if not child.data:
                    child.parent = None
                    continue
                if merged and isinstance(merged[-1], TextNode):
                    merged[-1].data += child.data
                    child.parent = None
                    continue
            elif isinstance(child, Element):
                child.normalize()
            merged.append(child)
        self.children = merged

    # -- traversal ----------------------------------------------------------

    def iter(self) -> Iterator[Node]:
        """Yield every descendant in document order (excluding self)."""
        for child in self.children:
            yield child
            if isinstance(child, Element):
                yield from child.iter()

    def iter_elements(self) -> Iterator[Element]:
        for node in self.iter():
            if isinstance(node, Element):
                yield node

    def iter_text_nodes(self) -> Iterator[TextNode]:
        for node in self.iter():
            if isinstance(node, TextNode):
                yield node

    def find(self, predicate: Callable[[Element], bool]) -> Element | None:
        for element in self.iter_elements():
            if predicate(element):
                return element
        return None

    def find_all(self, predicate: Callable[[Element], bool]) -> list[Element]:
        return [e for e in self.iter_elements() if predicate(e)]

    @property
    def text_content(self) -> str:
        return "".join(t.data for t in self.iter_text_nodes())


class Document:
    """A parsed document: the ``<html>`` root plus the current selection.

    Implements the ``DocumentHost`` protocol consumed by the anchoring core.
    """

    def __init__(self, root: Element) -> None:
        self.root = root
        self.selection: Selection | None = None

    def __repr__(self) -> str:
        return f"<Document root={self.root!r}>"

    @property
    def head(self) -> Element:
        head = next((e for e in self.root.element_children if e.tag == "head"), None)
        if head is None:
            head = Element("head")
            first = self.root.children[0] if self.root.children else None
            self.root.insert_before(head, first)
        return head

    @property
    def body(self) -> Element:
        body = next((e for e in self.root.element_children if e.tag == "body"), None)
        if body is None:
            body = Element("body")
            self.root.append(body)
        return body

    def get_element_by_id(self, element_id: str) -> Element | None:
        return self.root.find(lambda e: e.id == element_id)

    def find_all(self, predicate: Callable[[Element], bool]) -> list[Element]:
        return self.root.find_all(predicate)

    def contains(self, node: Node) -> bool:
        return node.is_inside(self.root)

    # -- DocumentHost -------------------------------------------------------

    def text_nodes(self, root: Element) -> list[TextNode]:
        return list(root.iter_text_nodes())

    def split_text(self, node: TextNode, offset: int) -> TextNode:
        return node.split(offset)

    def wrap(self, node: TextNode, tag: str, attrs: dict[str, str]) -> Element:
        """Wrap a whole text node in a new element and return the element."""
        parent = node.parent
        if parent is None:
            msg = "Cannot wrap a detached text node"
            raise DomError(msg)
        wrapper = Element(tag, attrs)
        parent.replace_child(wrapper, node)
        wrapper.append(node)
        return wrapper

    def unwrap(self, element: Element) -> list[Node]:
        parent = element.parent
        moved = element.unwrap()
        if parent is not None:
            parent.normalize()
        return moved

    def get_selection(self) -> Selection | None:
        return self.selection

    def select(self, text_range: TextRange) -> Selection:
        """Make *text_range* the current selection, like a user drag would."""
        from anchormark.dom.selection import Selection
        from anchormark.dom.text_map import TextMap

        text_map = TextMap.build(self.body)
        self.selection = Selection(text_range, text_map.slice_range(text_range))
        return self.selection

    def clear_selection(self) -> None:
        self.selection = None

    def apply_background(self, text_range: TextRange, color: str) -> list[Element]:
        """Paint *color* behind the range, like ``hiliteColor``.

        Produces one styled ``<span>`` per covered text-node segment and
        returns them.  Callers treat the result as best-effort.
        """
        from anchormark.dom.selection import iter_range_segments

        painted: list[Element] = []
        for node, start, end in list(iter_range_segments(self, text_range)):
            if start >= end:
                continue
            target = node
            if end < len(target):
                target.split(end)
            if start > 0:
                target = target.split(start)
            painted.append(
                self.wrap(target, "span", {"style": f"background-color: {color};"})
            )
        logger.debug("apply_background painted %d segments", len(painted))
        return painted
