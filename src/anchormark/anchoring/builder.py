"""Build an ``AnchorDescriptor`` from a live selection.

The descriptor records the selected text, the text around it, its absolute
offsets in the content root's flattened text, and a structural path to the
element the selection started in.  Each piece feeds a different strategy of
``TextLocator`` when the page is loaded again.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from anchormark.anchoring.descriptor import AnchorDescriptor
from anchormark.anchoring.structural_path import compute_path, text_node_index
from anchormark.config import AnchorConfig, get_settings
from anchormark.dom.content_root import find_content_root
from anchormark.dom.text_map import TextMap, find_nearest, normalize_whitespace
from anchormark.errors import AnchorBuildError, DomError, SelectionError

if TYPE_CHECKING:
    from anchormark.dom.nodes import Element
    from anchormark.dom.selection import Selection, TextRange

logger = logging.getLogger(__name__)

# Han, kana, hangul: one character carries roughly a word, so more context
_LOGOGRAPHIC = re.compile(
    r"[\u3040-\u30ff\u3400-\u4dbf\u4e00-\u9fff\uac00-\ud7af\uf900-\ufaff]"
)


def is_logographic(text: str) -> bool:
    return _LOGOGRAPHIC.search(text) is not None


class AnchorBuilder:
    """Turns a ``Selection`` into a durable ``AnchorDescriptor``."""

    def __init__(self, config: AnchorConfig | None = None) -> None:
        self.config = config or get_settings().anchor

    def build(self, selection: Selection) -> AnchorDescriptor:
        """Describe *selection* so it can be found again after a reload.

        Raises:
            SelectionError: The selection is collapsed or whitespace-only.
            AnchorBuildError: The selection is not attached under a body.
        """
        text_range = selection.range
        exact = normalize_whitespace(selection.text).strip()
        if text_range.collapsed or not exact:
            msg = "Selection is empty or whitespace-only"
            raise SelectionError(msg)

        root = find_content_root(text_range.start_node)
        if root is None:
            msg = "No content root found for the selection"
            raise AnchorBuildError(msg)

        text_map = TextMap.build(root)
        text = text_map.text
        range_start, range_end = self._range_offsets(text_map, text_range)

        match = self._match(text, exact, range_start)
        context = (
            self.config.logographic_context_chars
            if is_logographic(exact)
            else self.config.context_chars
        )

        if match is None:
            logger.warning(
                "Could not locate %r in root text; keeping structural data only",
                exact[:30],
            )
            before = after = ""
            start, end = range_start, range_end
        else:
            start, end = match
            before = text[max(0, start - context) : start]
            after = text[end : end + context]

        structural_path, node_index = self._structure(text_range, root)
        descriptor = AnchorDescriptor(
            exact_text=exact,
            text_before=before,
            text_after=after,
            start=start,
            end=end,
            structural_path=structural_path,
            node_index=node_index,
        )
        logger.info(
            "Built anchor for %r: start=%s end=%s path=%s",
            exact[:20],
            start,
            end,
            " > ".join(structural_path),
        )
        return descriptor

    @staticmethod
    def _range_offsets(
        text_map: TextMap, text_range: TextRange
    ) -> tuple[int | None, int | None]:
        try:
            return text_map.range_offsets(text_range)
        except DomError:
            # Selection leaves the content root
            logger.debug("Selection range extends outside the content root")
            return None, None

    def _match(
        self, text: str, exact: str, near: int | None
    ) -> tuple[int, int] | None:
        """Find ``exact`` in ``text``; return its flattened ``(start, end)``."""
        index = find_nearest(text, exact, near)
        if index != -1:
            return index, index + len(exact)

        prefix = exact[: self.config.prefix_probe_chars]
        index = find_nearest(text, prefix, near)
        if index != -1:
            logger.debug("Anchored %r by its %d-char prefix", exact[:20], len(prefix))
            return index, min(index + len(exact), len(text))

        for position in range(min(self.config.probe_start_positions, len(exact))):
            sizes = range(self.config.probe_min_chars, self.config.probe_max_chars + 1)
            for size in sizes:
                probe = exact[position : position + size]
                if len(probe) < size:
                    break
                index = find_nearest(text, probe, near)
                if index != -1:
                    start = max(0, index - position)
                    logger.debug(
                        "Anchored %r by probe %r at selection position %d",
                        exact[:20],
                        probe,
                        position,
                    )
                    return start, min(start + len(exact), len(text))
        return None

    @staticmethod
    def _structure(
        text_range: TextRange, root: Element
    ) -> tuple[tuple[str, ...], int | None]:
        parent = text_range.start_node.parent
        if parent is None or not parent.is_inside(root):
            return (), None
        node_index = text_node_index(parent, text_range.start_node)
        return compute_path(parent, root), node_index
