"""Markdown export of a page's highlights and notes."""

from __future__ import annotations

from datetime import UTC, datetime
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterable

    from anchormark.highlights.models import Highlight


def _timestamp(epoch_ms: int) -> str:
    moment = datetime.fromtimestamp(epoch_ms / 1000, tz=UTC)
    return moment.strftime("%Y-%m-%d %H:%M UTC")


def _quote(text: str) -> str:
    return "\n".join(f"> {line}" if line else ">" for line in text.splitlines())


def highlights_to_markdown(
    url: str, highlights: Iterable[Highlight], *, title: str | None = None
) -> str:
    """Render *highlights* as a Markdown document, oldest first.

    Each highlight becomes a block quote tagged with its color, followed by
    its note (if any) and creation time.
    """
    ordered = sorted(highlights, key=lambda h: (h.created_at, h.id))
    lines = [f"# {title or 'Highlights'}", "", f"Source: <{url}>", ""]
    if not ordered:
        lines.append("_No highlights._")
        return "\n".join(lines) + "\n"

    for highlight in ordered:
        lines.append(_quote(highlight.text))
        lines.append("")
        meta = f"*{highlight.color}* · {_timestamp(highlight.created_at)}"
        lines.append(meta)
        if highlight.note:
            lines.append("")
            lines.append(f"**Note:** {highlight.note}")
        lines.append("")
        lines.append("---")
        lines.append("")
    return "\n".join(lines)
