"""Highlight records, persistence, and the coordinating façade."""

from anchormark.highlights.backends import (
    JsonFileBackend,
    KeyValueBackend,
    MemoryBackend,
)
from anchormark.highlights.coordinator import (
    ApplyOutcome,
    ApplyState,
    HighlightCoordinator,
    RestoreReport,
)
from anchormark.highlights.export import highlights_to_markdown
from anchormark.highlights.models import (
    Highlight,
    StoredHighlight,
    from_record,
    new_highlight_id,
    to_record,
)
from anchormark.highlights.store import HighlightStore

__all__ = [
    "ApplyOutcome",
    "ApplyState",
    "Highlight",
    "HighlightCoordinator",
    "HighlightStore",
    "JsonFileBackend",
    "KeyValueBackend",
    "MemoryBackend",
    "RestoreReport",
    "StoredHighlight",
    "from_record",
    "highlights_to_markdown",
    "new_highlight_id",
    "to_record",
]
