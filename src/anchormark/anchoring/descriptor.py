"""The durable, reload-surviving description of a highlighted span."""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class AnchorDescriptor:
    """Where a highlighted span was found when it was created.

    Attributes:
        exact_text: The highlighted text, whitespace-normalised. Never empty.
        text_before: Normalised context immediately preceding ``exact_text``
            in the content root's flattened text (empty if unknown).
        text_after: Normalised context immediately following ``exact_text``.
        start: Absolute flattened offset of the span at creation time.
            Invalidated by structural change; kept as a last resort.
        end: Exclusive end offset matching ``start``.
        structural_path: Tokens from the content root down to the element
            that contained the selection start. Best-effort hint only.
        node_index: Ordinal of the originating text node among its parent's
            text-node children.
    """

    exact_text: str
    text_before: str = ""
    text_after: str = ""
    start: int | None = None
    end: int | None = None
    structural_path: tuple[str, ...] = field(default_factory=tuple)
    node_index: int | None = None

    def __post_init__(self) -> None:
        if not self.exact_text.strip():
            msg = "AnchorDescriptor.exact_text must not be empty"
            raise ValueError(msg)
        if self.start is not None and self.end is not None and self.start > self.end:
            msg = f"AnchorDescriptor start {self.start} exceeds end {self.end}"
            raise ValueError(msg)

    @property
    def has_context(self) -> bool:
        return bool(self.text_before or self.text_after)
