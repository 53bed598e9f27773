from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from varify.exceptions import MalformedEditSequenceError

Position = tuple[int, int]


@dataclass(frozen=True)
class EditOperation:
    """Replace ``[start, end)`` of the original text with ``replacement``."""

    start: int
    end: int
    replacement: str

    @property
    def delta(self) -> int:
        return len(self.replacement) - (self.end - self.start)


@dataclass(frozen=True)
class AppliedEdit:
    edit: EditOperation
    physical_start: int
    physical_end: int


def validate_edits(text: str, edits: Sequence[EditOperation]) -> None:
    previous: EditOperation | None = None
    for index, edit in enumerate(edits):
        if edit.start < 0 or edit.end < edit.start or edit.end > len(text):
            raise MalformedEditSequenceError(
                f"span [{edit.start}, {edit.end}) is outside the text (length {len(text)})",
                index=index,
            )
        if previous is not None:
            if edit.start < previous.start:
                raise MalformedEditSequenceError(
                    f"start {edit.start} precedes previous start {previous.start}",
                    index=index,
                )
            if edit.start < previous.end:
                raise MalformedEditSequenceError(
                    f"span [{edit.start}, {edit.end}) overlaps [{previous.start}, {previous.end})",
                    index=index,
                )
        previous = edit


def apply_edits(
    text: str, edits: Sequence[EditOperation]
) -> tuple[str, list[AppliedEdit]]:
    """Splice ``edits`` into ``text`` left to right.

    Offsets are in the original text's coordinates. Each splice lands at the
    original span shifted by the summed length change of every earlier edit.
    """
    validate_edits(text, edits)
    buffer = text
    delta = 0
    applied: list[AppliedEdit] = []
    for edit in edits:
        start = edit.start + delta
        end = edit.end + delta
        buffer = buffer[:start] + edit.replacement + buffer[end:]
        applied.append(AppliedEdit(edit=edit, physical_start=start, physical_end=start + len(edit.replacement)))
        delta += edit.delta
    return buffer, applied


def rewrite(text: str, edits: Sequence[EditOperation]) -> str:
    rewritten, _ = apply_edits(text, edits)
    return rewritten


def offset_to_position(text: str, offset: int) -> Position:
    """Zero-based ``(line, character)`` for an offset into ``text``."""
    line = text.count("\n", 0, offset)
    line_start = text.rfind("\n", 0, offset) + 1
    return line, offset - line_start
