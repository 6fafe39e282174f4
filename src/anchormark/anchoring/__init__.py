"""Anchor construction and resolution."""

from anchormark.anchoring.builder import AnchorBuilder
from anchormark.anchoring.descriptor import AnchorDescriptor
from anchormark.anchoring.locator import LocatedSpan, TextLocator, default_strategies
from anchormark.anchoring.strategies import (
    ContextQuoteStrategy,
    ExactQuoteStrategy,
    FuzzyChunkStrategy,
    LocateContext,
    Match,
    MatchStrategy,
    PositionStrategy,
    StructuralPathStrategy,
)
from anchormark.anchoring.structural_path import compute_path, resolve_path

__all__ = [
    "AnchorBuilder",
    "AnchorDescriptor",
    "ContextQuoteStrategy",
    "ExactQuoteStrategy",
    "FuzzyChunkStrategy",
    "LocateContext",
    "LocatedSpan",
    "Match",
    "MatchStrategy",
    "PositionStrategy",
    "StructuralPathStrategy",
    "TextLocator",
    "compute_path",
    "default_strategies",
    "resolve_path",
]
