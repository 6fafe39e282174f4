"""Exception hierarchy for anchormark.

Components raise these; ``HighlightCoordinator`` is the boundary that turns
them into boolean results and log lines for the host application.
"""

from __future__ import annotations


class AnchormarkError(Exception):
    """Base class for all anchormark errors."""


class DomError(AnchormarkError):
    """An invalid operation on the document tree (detached node, bad offset)."""


class SelectionError(AnchormarkError):
    """The selection is empty, collapsed, or whitespace-only."""


class AnchorBuildError(AnchormarkError):
    """No usable content root could be located for the selection."""


class ResolutionError(AnchormarkError):
    """Every locator strategy failed; the highlight is orphaned for this load."""

    def __init__(self, message: str, highlight_id: str | None = None) -> None:
        self.highlight_id = highlight_id
        super().__init__(message)


class ApplicationError(AnchormarkError):
    """Every span-applier strategy failed to wrap a resolved range."""


class StorageError(AnchormarkError):
    """The key-value backend failed after the allowed retries."""

    def __init__(self, message: str, operation: str) -> None:
        self.operation = operation
        super().__init__(message)

    def __str__(self) -> str:
        return f"{self.args[0]} (operation: {self.operation})"
