"""Wrap a resolved text range in highlight markers.

Strategies are tried in order until one produces markers:

1. ``SingleNodeStrategy``: the range sits in one text node; split it into
   before/selected/after and wrap the middle.
2. ``MultiNodeStrategy``: the range crosses nodes; clip the first and last
   text node, take interior ones whole, wrap every non-blank piece with the
   same highlight id and a part number.
3. ``NativeBackgroundStrategy``: ask the host to paint the range, then tag
   what it produced.  Hosts are free to vary here, so this is a fallback.

A strategy that fails half-way has its markers unwrapped again before the
next one runs, so the tree is never left half-highlighted.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Protocol

from anchormark.config import MarkerConfig, get_settings
from anchormark.dom.selection import iter_range_segments
from anchormark.dom.text_map import SKIP_TAGS
from anchormark.errors import AnchormarkError, ApplicationError
from anchormark.render.markers import (
    HIGHLIGHT_COLORS,
    HighlightColor,
    MarkerGroup,
    marker_attrs,
)

if TYPE_CHECKING:
    from collections.abc import Sequence

    from anchormark.dom.host import DocumentHost
    from anchormark.dom.nodes import Element, TextNode
    from anchormark.dom.selection import TextRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class MarkerSpec:
    """What every marker of one highlight carries."""

    highlight_id: str
    color: HighlightColor
    note: str | None
    class_name: str

    def attrs(self, part: int | None = None) -> dict[str, str]:
        return marker_attrs(
            self.highlight_id,
            self.color,
            self.note,
            part=part,
            class_name=self.class_name,
        )


class ApplyStrategy(Protocol):
    name: str

    def apply(
        self,
        document: DocumentHost,
        text_range: TextRange,
        spec: MarkerSpec,
        produced: list[Element],
    ) -> bool:
        """Wrap *text_range*, appending each new marker to *produced*.

        Returns False when the strategy does not apply to this range.
        """
        ...


def _wrap_segment(
    document: DocumentHost,
    node: TextNode,
    start: int,
    end: int,
    attrs: dict[str, str],
) -> Element:
    target = node
    if end < len(target):
        document.split_text(target, end)
    if start > 0:
        target = document.split_text(target, start)
    return document.wrap(target, "span", attrs)


class SingleNodeStrategy:
    name = "single-node"

    def apply(
        self,
        document: DocumentHost,
        text_range: TextRange,
        spec: MarkerSpec,
        produced: list[Element],
    ) -> bool:
        if not text_range.single_node:
            return False
        node = text_range.start_node
        start, end = text_range.start_offset, text_range.end_offset
        if start >= end or not node.data[start:end].strip():
            return False
        produced.append(_wrap_segment(document, node, start, end, spec.attrs()))
        return True


class MultiNodeStrategy:
    name = "multi-node"

    def apply(
        self,
        document: DocumentHost,
        text_range: TextRange,
        spec: MarkerSpec,
        produced: list[Element],
    ) -> bool:
        segments = [
            (node, start, end)
            for node, start, end in iter_range_segments(document, text_range)
            if start < end
            and node.data[start:end].strip()
            and (node.parent is None or node.parent.tag not in SKIP_TAGS)
        ]
        if not segments:
            return False
        for part, (node, start, end) in enumerate(segments, start=1):
            produced.append(
                _wrap_segment(document, node, start, end, spec.attrs(part))
            )
        return True


class NativeBackgroundStrategy:
    name = "native-background"

    def apply(
        self,
        document: DocumentHost,
        text_range: TextRange,
        spec: MarkerSpec,
        produced: list[Element],
    ) -> bool:
        painted = document.apply_background(
            text_range, HIGHLIGHT_COLORS[spec.color].background
        )
        multi = len(painted) > 1
        part = 0
        for element in painted:
            if not element.text_content.strip():
                document.unwrap(element)
                continue
            part += 1
            element.attrs.update(spec.attrs(part if multi else None))
            produced.append(element)
        return bool(produced)


DEFAULT_STRATEGIES: tuple[ApplyStrategy, ...] = (
    SingleNodeStrategy(),
    MultiNodeStrategy(),
    NativeBackgroundStrategy(),
)


class SpanApplier:
    """Renders highlight markers for resolved ranges."""

    def __init__(
        self,
        strategies: Sequence[ApplyStrategy] | None = None,
        config: MarkerConfig | None = None,
    ) -> None:
        self.strategies = tuple(strategies or DEFAULT_STRATEGIES)
        self.config = config or get_settings().markers

    def apply(
        self,
        document: DocumentHost,
        text_range: TextRange,
        color: HighlightColor,
        highlight_id: str,
        note: str | None = None,
    ) -> MarkerGroup:
        """Wrap *text_range* and return the resulting markers as a group.

        Raises:
            ApplicationError: No strategy could wrap the range.
        """
        if text_range.collapsed:
            msg = "Cannot highlight a collapsed range"
            raise ApplicationError(msg)

        spec = MarkerSpec(
            highlight_id, HighlightColor(color), note, self.config.class_name
        )
        for strategy in self.strategies:
            produced: list[Element] = []
            try:
                applied = strategy.apply(document, text_range, spec, produced)
            except (AnchormarkError, NotImplementedError, ValueError) as exc:
                logger.warning(
                    "Strategy %s failed for %s: %s", strategy.name, highlight_id, exc
                )
                self._rollback(document, text_range, produced)
                continue
            if applied and produced:
                logger.info(
                    "Applied %s with %s strategy (%d markers)",
                    highlight_id,
                    strategy.name,
                    len(produced),
                )
                return MarkerGroup(
                    document, highlight_id, produced, spec.class_name
                )
            if produced:
                self._rollback(document, text_range, produced)

        msg = f"No strategy could apply highlight {highlight_id}"
        raise ApplicationError(msg)

    @staticmethod
    def _rollback(
        document: DocumentHost, text_range: TextRange, produced: list[Element]
    ) -> None:
        for marker in reversed(produced):
            if marker.parent is not None:
                document.unwrap(marker)
        # Re-merge any split that never got wrapped
        for node in (text_range.start_node, text_range.end_node):
            if node.parent is not None:
                node.parent.normalize()
        if produced:
            logger.debug("Rolled back %d partial markers", len(produced))
