"""The public face of the highlighting subsystem for one document.

``HighlightCoordinator`` ties builder, locator, applier and store together
and is the error boundary: every public method returns a boolean or a
report and logs what went wrong instead of raising into the host.

Tree changes and the in-memory highlight map are updated first; the store
write is awaited afterwards, and a failed write is logged without undoing
the visible state.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import StrEnum
from typing import TYPE_CHECKING

from anchormark.anchoring.builder import AnchorBuilder
from anchormark.anchoring.locator import TextLocator
from anchormark.config import get_settings
from anchormark.dom.content_root import ARTICLE_CONTAINER_CLASS, find_content_root
from anchormark.errors import AnchormarkError, StorageError
from anchormark.highlights.models import Highlight
from anchormark.render.applier import SpanApplier
from anchormark.render.markers import (
    HighlightColor,
    MarkerGroup,
    clear_empty_markers,
    ensure_highlight_styles,
    find_markers,
    marker_id,
)

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from anchormark.config import Settings
    from anchormark.dom.nodes import Document, Element
    from anchormark.dom.selection import Selection
    from anchormark.highlights.store import HighlightStore

logger = logging.getLogger(__name__)


class ApplyState(StrEnum):
    """Progress of one apply request."""

    IDLE = "idle"
    BUILDING = "building"
    APPLYING = "applying"
    APPLIED = "applied"
    FAILED = "failed"


@dataclass
class ApplyOutcome:
    """Where an apply request ended up, and what it produced."""

    state: ApplyState
    highlight: Highlight | None = None
    markers: MarkerGroup | None = None
    error: str | None = None
    persisted: bool = False

    @property
    def ok(self) -> bool:
        return self.state is ApplyState.APPLIED


@dataclass
class RestoreReport:
    """Counts from one ``restore_all_for_url`` pass."""

    restored: int = 0
    orphaned: int = 0
    skipped: int = 0
    orphaned_ids: list[str] = field(default_factory=list)
    strategies: dict[str, str] = field(default_factory=dict)

    @property
    def total(self) -> int:
        return self.restored + self.orphaned + self.skipped


class HighlightCoordinator:
    """Highlight operations bound to one document and one page URL."""

    def __init__(
        self,
        document: Document,
        store: HighlightStore,
        url: str,
        *,
        builder: AnchorBuilder | None = None,
        locator: TextLocator | None = None,
        applier: SpanApplier | None = None,
        settings: Settings | None = None,
    ) -> None:
        settings = settings or get_settings()
        self.document = document
        self.store = store
        self.url = url
        self.settings = settings
        self.builder = builder or AnchorBuilder(settings.anchor)
        self.locator = locator or TextLocator(config=settings.locator)
        self.applier = applier or SpanApplier(config=settings.markers)
        self.highlights: dict[str, Highlight] = {}
        self.state = ApplyState.IDLE

    @property
    def _class_name(self) -> str:
        return self.settings.markers.class_name

    async def _persist(self, operation: str, call: Awaitable[object]) -> bool:
        try:
            await call
        except StorageError as exc:
            logger.warning("Could not persist %s: %s", operation, exc)
            return False
        return True

    def _group_for(self, marker: Element) -> MarkerGroup | None:
        highlight_id = marker_id(marker)
        if highlight_id is None or not self.document.contains(marker):
            return None
        group = MarkerGroup.collect(self.document, highlight_id, self._class_name)
        return group if len(group) else None

    # -- apply --------------------------------------------------------------

    async def apply(
        self,
        selection: Selection,
        color: HighlightColor | str,
        note: str | None = None,
    ) -> ApplyOutcome:
        """Anchor, render and persist a highlight for *selection*."""
        try:
            color = HighlightColor(color)
        except ValueError:
            logger.warning("Unknown highlight color %r", color)
            return ApplyOutcome(ApplyState.FAILED, error=f"unknown color {color!r}")

        self.state = ApplyState.BUILDING
        try:
            descriptor = self.builder.build(selection)
        except AnchormarkError as exc:
            logger.warning("Highlight rejected while anchoring: %s", exc)
            self.state = ApplyState.FAILED
            return ApplyOutcome(self.state, error=str(exc))

        highlight = Highlight(url=self.url, color=color, anchor=descriptor, note=note)
        root = find_content_root(selection.range.start_node)
        self.state = ApplyState.APPLYING
        try:
            group = self.applier.apply(
                self.document, selection.range, color, highlight.id, note
            )
        except AnchormarkError as exc:
            logger.warning("Highlight %s could not be applied: %s", highlight.id, exc)
            self.state = ApplyState.FAILED
            return ApplyOutcome(self.state, highlight=highlight, error=str(exc))

        self.state = ApplyState.APPLIED
        if root is not None:
            root.add_class(ARTICLE_CONTAINER_CLASS)
        ensure_highlight_styles(self.document, self.settings.markers)
        self.highlights[highlight.id] = highlight
        self.document.clear_selection()
        persisted = await self._persist(
            f"new highlight {highlight.id}", self.store.save(highlight)
        )
        return ApplyOutcome(
            self.state, highlight=highlight, markers=group, persisted=persisted
        )

    async def apply_highlight(
        self,
        selection: Selection,
        color: HighlightColor | str,
        note: str | None = None,
    ) -> bool:
        try:
            outcome = await self.apply(selection, color, note)
        except Exception:
            logger.exception("Unexpected error applying highlight")
            self.state = ApplyState.FAILED
            return False
        return outcome.ok

    # -- mutate -------------------------------------------------------------

    async def remove_highlight(self, marker: Element) -> bool:
        """Unwrap every marker of *marker*'s highlight and delete its record.

        Returns False, without raising, if the marker is already gone.
        """
        try:
            group = self._group_for(marker)
            if group is None:
                logger.debug("remove_highlight: marker is not a live highlight")
                return False
            highlight_id = group.highlight_id
            removed = group.unwrap()
            clear_empty_markers(self.document.body, self._class_name)
            self.highlights.pop(highlight_id, None)
            logger.info("Removed highlight %s (%d markers)", highlight_id, removed)
            await self._persist(
                f"removal of {highlight_id}", self.store.delete(highlight_id)
            )
        except Exception:
            logger.exception("Unexpected error removing highlight")
            return False
        return True

    async def update_note(self, marker: Element, note: str | None) -> bool:
        try:
            group = self._group_for(marker)
            if group is None:
                return False
            highlight_id = group.highlight_id
            note = note or None
            group.set_note(note)
            current = self.highlights.get(highlight_id)
            if current is not None:
                self.highlights[highlight_id] = current.with_changes(note=note)
            await self._persist(
                f"note on {highlight_id}",
                self.store.update(highlight_id, note=note),
            )
        except Exception:
            logger.exception("Unexpected error updating note")
            return False
        return True

    async def change_color(
        self, marker: Element, color: HighlightColor | str
    ) -> bool:
        try:
            color = HighlightColor(color)
        except ValueError:
            logger.warning("Unknown highlight color %r", color)
            return False
        try:
            group = self._group_for(marker)
            if group is None:
                return False
            highlight_id = group.highlight_id
            group.set_color(color)
            current = self.highlights.get(highlight_id)
            if current is not None:
                self.highlights[highlight_id] = current.with_changes(color=color)
            await self._persist(
                f"color of {highlight_id}",
                self.store.update(highlight_id, color=color),
            )
        except Exception:
            logger.exception("Unexpected error changing highlight color")
            return False
        return True

    # -- restore ------------------------------------------------------------

    def _restore_one(self, highlight: Highlight, report: RestoreReport) -> None:
        existing = MarkerGroup.collect(self.document, highlight.id, self._class_name)
        if len(existing):
            report.skipped += 1
            self.highlights[highlight.id] = highlight
            return
        try:
            span = self.locator.locate(
                highlight.anchor, self.document, highlight_id=highlight.id
            )
            self.applier.apply(
                self.document, span.range, highlight.color, highlight.id, highlight.note
            )
        except AnchormarkError as exc:
            logger.warning("Highlight %s orphaned on this load: %s", highlight.id, exc)
            report.orphaned += 1
            report.orphaned_ids.append(highlight.id)
            return
        report.restored += 1
        report.strategies[highlight.id] = span.strategy
        self.highlights[highlight.id] = highlight

    async def restore_all_for_url(self, url: str | None = None) -> RestoreReport:
        """Re-render every stored highlight for *url* (default: this page).

        Each record is handled on its own; one that cannot be located is
        counted as orphaned and left in storage.
        """
        url = url or self.url
        report = RestoreReport()
        try:
            highlights = await self.store.list(url)
        except StorageError as exc:
            logger.warning("Could not load highlights for %s: %s", url, exc)
            return report

        for highlight in highlights:
            try:
                self._restore_one(highlight, report)
            except Exception:
                logger.exception("Unexpected error restoring %s", highlight.id)
                report.orphaned += 1
                report.orphaned_ids.append(highlight.id)

        if report.restored:
            ensure_highlight_styles(self.document, self.settings.markers)
        logger.info(
            "Restored %d, orphaned %d, skipped %d highlights for %s",
            report.restored,
            report.orphaned,
            report.skipped,
            url,
        )
        return report

    # -- queries ------------------------------------------------------------

    def markers(self) -> dict[str, MarkerGroup]:
        """Every highlight currently rendered, grouped by id."""
        groups: dict[str, MarkerGroup] = {}
        for element in find_markers(self.document.root, class_name=self._class_name):
            highlight_id = marker_id(element)
            if highlight_id is None:
                continue
            group = groups.setdefault(
                highlight_id,
                MarkerGroup(self.document, highlight_id, [], self._class_name),
            )
            group.markers.append(element)
        return groups
