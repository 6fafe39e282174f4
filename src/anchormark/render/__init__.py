"""Rendering of highlight markers into the document tree."""

from anchormark.render.applier import (
    MultiNodeStrategy,
    NativeBackgroundStrategy,
    SingleNodeStrategy,
    SpanApplier,
)
from anchormark.render.markers import (
    HIGHLIGHT_COLORS,
    HighlightColor,
    MarkerGroup,
    clear_empty_markers,
    ensure_highlight_styles,
    find_markers,
    marker_id,
)

__all__ = [
    "HIGHLIGHT_COLORS",
    "HighlightColor",
    "MarkerGroup",
    "MultiNodeStrategy",
    "NativeBackgroundStrategy",
    "SingleNodeStrategy",
    "SpanApplier",
    "clear_empty_markers",
    "ensure_highlight_styles",
    "find_markers",
    "marker_id",
]
