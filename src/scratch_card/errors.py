"""Exceptions raised by card construction and reveal operations."""

from __future__ import annotations

from typing import List, Sequence


class ConstructionError(ValueError):
    """The card cannot be built; fatal for the session being created."""

    def __init__(self, message: str, reasons: Sequence[str] = ()):
        super().__init__(message)
        self.reasons: List[str] = list(reasons)


class RevealError(Exception):
    """Base class for recoverable reveal failures."""

    def __init__(self, row: int, col: int, message: str):
        super().__init__(message)
        self.row = row
        self.col = col


class OutOfBounds(RevealError):
    def __init__(self, row: int, col: int, rows: int, cols: int):
        super().__init__(
            row, col, f"Cell ({row}, {col}) is outside the {rows}x{cols} card"
        )
        self.rows = rows
        self.cols = cols


class AlreadyRevealed(RevealError):
    def __init__(self, row: int, col: int):
        super().__init__(row, col, f"Cell ({row}, {col}) is already revealed")
