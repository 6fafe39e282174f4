"""Highlight records and their persisted wire format.

``Highlight`` is the in-process record (a plain dataclass wrapping an
``AnchorDescriptor``).  ``StoredHighlight`` is the pydantic model of the
JSON object kept in storage; its field aliases are the camelCase keys the
browser-side records have always used, so existing stores stay readable.
"""

from __future__ import annotations

import secrets
import time
from dataclasses import dataclass, field, replace

from pydantic import BaseModel, ConfigDict, Field

from anchormark.anchoring.descriptor import AnchorDescriptor
from anchormark.render.markers import HighlightColor


def now_ms() -> int:
    """Current time as epoch milliseconds."""
    return int(time.time() * 1000)


def new_highlight_id() -> str:
    """Opaque, time-ordered, unique id: ``hl-<epoch-ms>-<random hex>``."""
    return f"hl-{now_ms()}-{secrets.token_hex(4)}"


@dataclass
class Highlight:
    """A highlight on one page.

    Attributes:
        id: Immutable correlation key between record and rendered markers.
        url: Page identity; highlights are partitioned by it.
        color: Palette color.
        anchor: Where the span was when the highlight was made.
        note: Optional free text.
        created_at: Epoch milliseconds.
        updated_at: Epoch milliseconds; bumped by note/color changes.
    """

    url: str
    color: HighlightColor
    anchor: AnchorDescriptor
    note: str | None = None
    id: str = field(default_factory=new_highlight_id)
    created_at: int = field(default_factory=now_ms)
    updated_at: int = field(default_factory=now_ms)

    @property
    def text(self) -> str:
        return self.anchor.exact_text

    def with_changes(self, **changes: object) -> Highlight:
        """Copy with *changes* applied and ``updated_at`` bumped.

        ``id`` and ``created_at`` cannot be changed.
        """
        for frozen in ("id", "created_at"):
            if frozen in changes:
                msg = f"Highlight.{frozen} is immutable"
                raise ValueError(msg)
        if "color" in changes:
            changes["color"] = HighlightColor(str(changes["color"]))
        changes.setdefault("updated_at", max(now_ms(), self.updated_at))
        return replace(self, **changes)  # type: ignore[arg-type]


class StoredHighlight(BaseModel):
    """One persisted record, as it appears in the JSON array."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str
    url: str
    text: str
    color: HighlightColor
    note: str | None = None
    created_at: int = Field(alias="createdAt")
    updated_at: int = Field(alias="updatedAt")
    text_before: str = Field(default="", alias="textBefore")
    text_after: str = Field(default="", alias="textAfter")
    dom_path: list[str] | None = Field(default=None, alias="domPath")
    node_index: int | None = Field(default=None, alias="nodeIndex")
    start: int | None = None
    end: int | None = None

    @classmethod
    def from_highlight(cls, highlight: Highlight) -> StoredHighlight:
        anchor = highlight.anchor
        return cls(
            id=highlight.id,
            url=highlight.url,
            text=anchor.exact_text,
            color=highlight.color,
            note=highlight.note,
            created_at=highlight.created_at,
            updated_at=highlight.updated_at,
            text_before=anchor.text_before,
            text_after=anchor.text_after,
            dom_path=list(anchor.structural_path) or None,
            node_index=anchor.node_index,
            start=anchor.start,
            end=anchor.end,
        )

    def to_highlight(self) -> Highlight:
        anchor = AnchorDescriptor(
            exact_text=self.text,
            text_before=self.text_before,
            text_after=self.text_after,
            start=self.start,
            end=self.end,
            structural_path=tuple(self.dom_path or ()),
            node_index=self.node_index,
        )
        return Highlight(
            url=self.url,
            color=self.color,
            anchor=anchor,
            note=self.note,
            id=self.id,
            created_at=self.created_at,
            updated_at=self.updated_at,
        )


def to_record(highlight: Highlight) -> dict[str, object]:
    """JSON-ready dict for *highlight*, camelCase keys, unset optionals dropped."""
    return StoredHighlight.from_highlight(highlight).model_dump(
        mode="json", by_alias=True, exclude_none=True
    )


def from_record(record: dict[str, object]) -> Highlight:
    """Parse one stored record.  Raises ``pydantic.ValidationError``."""
    return StoredHighlight.model_validate(record).to_highlight()
