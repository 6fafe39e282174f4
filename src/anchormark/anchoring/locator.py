"""Resolve an ``AnchorDescriptor`` against a (possibly changed) document."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING

from anchormark.anchoring.strategies import (
    ContextQuoteStrategy,
    ExactQuoteStrategy,
    FuzzyChunkStrategy,
    LocateContext,
    MatchStrategy,
    PositionStrategy,
    StructuralPathStrategy,
)
from anchormark.anchoring.structural_path import resolve_root
from anchormark.config import LocatorConfig, get_settings
from anchormark.dom.content_root import find_document_content_root
from anchormark.dom.text_map import TextMap
from anchormark.errors import DomError, ResolutionError

if TYPE_CHECKING:
    from collections.abc import Sequence

    from anchormark.anchoring.descriptor import AnchorDescriptor
    from anchormark.dom.nodes import Document, Element
    from anchormark.dom.selection import TextRange

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocatedSpan:
    """Where a descriptor resolved to, in flattened and concrete terms."""

    start: int
    end: int
    strategy: str
    range: TextRange


def default_strategies(
    config: LocatorConfig | None = None,
) -> tuple[MatchStrategy, ...]:
    config = config or get_settings().locator
    return (
        StructuralPathStrategy(),
        ExactQuoteStrategy(),
        ContextQuoteStrategy(),
        FuzzyChunkStrategy(
            threshold=config.fuzzy_threshold, window=config.fuzzy_window
        ),
        PositionStrategy(),
    )


class TextLocator:
    """Runs the strategy cascade, stopping at the first success."""

    def __init__(
        self,
        strategies: Sequence[MatchStrategy] | None = None,
        config: LocatorConfig | None = None,
    ) -> None:
        self.strategies = tuple(strategies or default_strategies(config))

    def content_root(self, descriptor: AnchorDescriptor, document: Document) -> Element:
        """The root named by the descriptor's path, else the document's."""
        token = descriptor.structural_path[0] if descriptor.structural_path else None
        root = resolve_root(document, token)
        return root if root is not None else find_document_content_root(document)

    def locate(
        self,
        descriptor: AnchorDescriptor,
        document: Document,
        *,
        highlight_id: str | None = None,
    ) -> LocatedSpan:
        """Resolve *descriptor* to a concrete range in *document*.

        *highlight_id* only labels the error when nothing matches.

        Raises:
            ResolutionError: Every strategy failed.
        """
        root = self.content_root(descriptor, document)
        context = LocateContext(document, root, TextMap.build(root))

        for strategy in self.strategies:
            match = strategy.find(descriptor, context)
            if match is None:
                logger.debug(
                    "Strategy %s found nothing for %r",
                    strategy.name,
                    descriptor.exact_text[:20],
                )
                continue
            try:
                text_range = context.text_map.to_range(match.start, match.end)
            except DomError as exc:
                logger.debug("Strategy %s match not mappable: %s", strategy.name, exc)
                continue
            logger.info(
                "Located %r via %s at [%d, %d)",
                descriptor.exact_text[:20],
                strategy.name,
                match.start,
                match.end,
            )
            return LocatedSpan(match.start, match.end, strategy.name, text_range)

        msg = f"Could not locate {descriptor.exact_text[:30]!r} in the document"
        raise ResolutionError(msg, highlight_id=highlight_id)
