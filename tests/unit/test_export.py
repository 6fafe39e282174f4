"""Tests for the Markdown export of highlights."""

from __future__ import annotations

from anchormark.anchoring.descriptor import AnchorDescriptor
from anchormark.highlights.export import highlights_to_markdown
from anchormark.highlights.models import Highlight
from anchormark.render.markers import HighlightColor

URL = "https://example.com/fox"


def _highlight(text: str, created_at: int, note: str | None = None) -> Highlight:
    return Highlight(
        url=URL,
        color=HighlightColor.BLUE,
        anchor=AnchorDescriptor(exact_text=text),
        note=note,
        id=f"hl-{created_at}",
        created_at=created_at,
        updated_at=created_at,
    )


class TestHighlightsToMarkdown:
    def test_empty(self) -> None:
        assert highlights_to_markdown(URL, []) == (
            "# Highlights\n\nSource: <https://example.com/fox>\n\n_No highlights._\n"
        )

    def test_quote_meta_and_note(self) -> None:
        """Each highlight becomes a quote, a color and date line, and its note."""
        md = highlights_to_markdown(
            URL, [_highlight("the quick brown fox", 1_700_000_000_000, note="fast")]
        )
        assert "> the quick brown fox" in md
        assert "*blue* · 2023-11-14 22:13 UTC" in md
        assert "**Note:** fast" in md
        assert md.rstrip().endswith("---")

    def test_oldest_first(self) -> None:
        """Highlights are listed in creation order."""
        md = highlights_to_markdown(
            URL,
            [_highlight("second", 2_000), _highlight("first", 1_000)],
        )
        assert md.index("> first") < md.index("> second")

    def test_custom_title_and_no_note(self) -> None:
        md = highlights_to_markdown(URL, [_highlight("plain", 0)], title="Reading")
        assert md.startswith("# Reading\n")
        assert "**Note:**" not in md
