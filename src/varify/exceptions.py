"""Exception types raised by the varify engine."""

from __future__ import annotations


class VarifyError(Exception):
    """Base class for varify usage errors."""


class MalformedEditSequenceError(VarifyError, ValueError):
    """Edits handed to the rewrite engine overlap or are out of order.

    ``index`` is the position of the offending edit in the sequence the
    caller supplied.
    """

    def __init__(self, reason: str, *, index: int) -> None:
        super().__init__(f"edit #{index}: {reason}")
        self.reason = reason
        self.index = index
