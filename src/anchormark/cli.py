"""Command-line interface for anchormark.

Operates on saved HTML pages and a JSON highlight store, so the full
anchor / locate / render cycle can be driven without a browser.

Usage:
    anchormark highlight PAGE.html --url URL --text TEXT [--color C] [--note N]
    anchormark restore PAGE.html --url URL [--output OUT.html]
    anchormark list [--url URL]
    anchormark export --url URL [--output FILE.md]
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from rich.console import Console
from rich.table import Table

from anchormark.dom.parse import document_to_html, parse_html
from anchormark.dom.text_map import select_text
from anchormark.errors import AnchormarkError
from anchormark.highlights.backends import JsonFileBackend
from anchormark.highlights.coordinator import HighlightCoordinator
from anchormark.highlights.export import highlights_to_markdown
from anchormark.highlights.store import HighlightStore
from anchormark.render.markers import HighlightColor

if TYPE_CHECKING:
    from anchormark.config import Settings
    from anchormark.dom.nodes import Document

logger = logging.getLogger(__name__)

console = Console()

DEFAULT_STORE_PATH = Path("anchormark-highlights.json")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="anchormark",
        description="Create, restore and export durable text highlights.",
    )
    parser.add_argument(
        "--store",
        type=Path,
        default=None,
        help="Store file (default: STORE__PATH or ./anchormark-highlights.json)",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    # highlight
    hl_p = sub.add_parser("highlight", help="Highlight text in a saved page")
    hl_p.add_argument("page", type=Path, help="HTML file")
    hl_p.add_argument("--url", required=True, help="Page URL")
    hl_p.add_argument("--text", required=True, help="Text to highlight")
    hl_p.add_argument(
        "--occurrence", type=int, default=1, help="Which match of --text (default: 1)"
    )
    hl_p.add_argument(
        "--color",
        default=HighlightColor.YELLOW.value,
        choices=[c.value for c in HighlightColor],
    )
    hl_p.add_argument("--note", default=None, help="Optional note")
    hl_p.add_argument("--output", type=Path, default=None, help="Write rendered HTML")

    # restore
    restore_p = sub.add_parser("restore", help="Re-render stored highlights")
    restore_p.add_argument("page", type=Path, help="HTML file")
    restore_p.add_argument("--url", required=True, help="Page URL")
    restore_p.add_argument(
        "--output", type=Path, default=None, help="Write rendered HTML"
    )

    # list
    list_p = sub.add_parser("list", help="List stored highlights")
    list_p.add_argument("--url", default=None, help="Only this page")

    # export
    export_p = sub.add_parser("export", help="Export highlights as Markdown")
    export_p.add_argument("--url", required=True, help="Page URL")
    export_p.add_argument("--output", type=Path, default=None, help="Markdown file")

    return parser


def _store(path: Path | None, settings: Settings) -> HighlightStore:
    store_path = path or settings.store.path or DEFAULT_STORE_PATH
    return HighlightStore(JsonFileBackend(store_path), settings.store)


def _load_page(page: Path) -> Document:
    return parse_html(page.read_text(encoding="utf-8"))


def _write_page(document: Document, output: Path | None, con: Console) -> None:
    if output is None:
        return
    output.write_text(document_to_html(document), encoding="utf-8")
    con.print(f"Rendered page written to [cyan]{output}[/]")


async def _cmd_highlight(
    args: argparse.Namespace,
    store: HighlightStore,
    settings: Settings,
    *,
    console: Console | None = None,
) -> int:
    """Select the requested text, highlight it, and persist the record."""
    con = console or globals()["console"]
    document = _load_page(args.page)
    coordinator = HighlightCoordinator(document, store, args.url, settings=settings)
    await coordinator.restore_all_for_url()

    text_range = select_text(document.body, args.text, args.occurrence)
    if text_range is None:
        con.print(
            f"[red]Error:[/] occurrence {args.occurrence} of {args.text!r} not found"
        )
        return 1
    selection = document.select(text_range)

    outcome = await coordinator.apply(selection, args.color, args.note)
    if not outcome.ok or outcome.highlight is None:
        con.print(f"[red]Failed:[/] {outcome.error}")
        return 1

    parts = len(outcome.markers) if outcome.markers is not None else 0
    con.print(
        f"[green]Highlighted[/] {outcome.highlight.text!r} "
        f"as [bold]{outcome.highlight.id}[/] ({parts} marker(s))"
    )
    if not outcome.persisted:
        con.print("[yellow]Warning:[/] highlight was not saved to the store")
    _write_page(document, args.output, con)
    return 0


async def _cmd_restore(
    args: argparse.Namespace,
    store: HighlightStore,
    settings: Settings,
    *,
    console: Console | None = None,
) -> int:
    """Restore every stored highlight for a page and report the outcome."""
    con = console or globals()["console"]
    document = _load_page(args.page)
    coordinator = HighlightCoordinator(document, store, args.url, settings=settings)
    report = await coordinator.restore_all_for_url()

    table = Table(title=f"Restore: {args.url}")
    table.add_column("Restored", style="green")
    table.add_column("Orphaned", style="red")
    table.add_column("Skipped")
    table.add_row(str(report.restored), str(report.orphaned), str(report.skipped))
    con.print(table)
    for highlight_id in report.orphaned_ids:
        con.print(f"  [dim]orphaned:[/] {highlight_id}")

    _write_page(document, args.output, con)
    return 0


async def _cmd_list(
    url: str | None,
    store: HighlightStore,
    *,
    console: Console | None = None,
) -> int:
    """List stored highlights as a Rich table."""
    con = console or globals()["console"]
    highlights = await store.list(url) if url else await store.list_all()
    if not highlights:
        con.print("[yellow]No highlights found.[/]")
        return 0

    table = Table(title="Highlights")
    table.add_column("ID", style="dim")
    table.add_column("URL", style="cyan")
    table.add_column("Color")
    table.add_column("Text")
    table.add_column("Note")
    for h in highlights:
        text = h.text if len(h.text) <= 40 else h.text[:37] + "..."
        table.add_row(h.id, h.url, str(h.color), text, h.note or "")
    con.print(table)
    return 0


async def _cmd_export(
    url: str,
    output: Path | None,
    store: HighlightStore,
    *,
    console: Console | None = None,
) -> int:
    """Export one page's highlights as Markdown."""
    con = console or globals()["console"]
    markdown = highlights_to_markdown(url, await store.list(url))
    if output is None:
        con.print(markdown, markup=False, highlight=False)
    else:
        output.write_text(markdown, encoding="utf-8")
        con.print(f"Exported to [cyan]{output}[/]")
    return 0


def main(argv: list[str] | None = None) -> None:
    """Entry point for the ``anchormark`` console script."""
    from anchormark import setup_logging
    from anchormark.config import get_settings

    parser = _build_parser()
    args = parser.parse_args(sys.argv[1:] if argv is None else argv)

    settings = get_settings()
    setup_logging(settings)
    store = _store(args.store, settings)

    async def _run() -> int:
        match args.command:
            case "highlight":
                return await _cmd_highlight(args, store, settings)
            case "restore":
                return await _cmd_restore(args, store, settings)
            case "list":
                return await _cmd_list(args.url, store)
            case "export":
                return await _cmd_export(args.url, args.output, store)
        return 2

    try:
        code = asyncio.run(_run())
    except (FileNotFoundError, AnchormarkError) as exc:
        console.print(f"[red]Error:[/] {exc}")
        sys.exit(1)
    if code:
        sys.exit(code)
