"""Reveal tracking and win/exhaustion predicates for a single card."""

from __future__ import annotations

import logging
from collections import Counter
from typing import FrozenSet, List, Optional

from ..errors import AlreadyRevealed, OutOfBounds
from ..feasibility import TRIPLE_SIZE
from .card import Card, Cell

logger = logging.getLogger(__name__)

OUTCOME_WON = "won"
OUTCOME_EXHAUSTED = "exhausted"


class GameState:
    """Mutable play state over an immutable card.

    `reveal` is the only operation that updates the tally; `reveal_all` only
    uncovers cells for display.
    """

    def __init__(self, card: Card):
        self.card = card
        self._revealed: List[List[bool]] = [
            [False] * card.cols for _ in range(card.rows)
        ]
        self._tally: Counter[str] = Counter()
        self._revealed_count = 0
        self.moves = 0

    @property
    def rows(self) -> int:
        return self.card.rows

    @property
    def cols(self) -> int:
        return self.card.cols

    @property
    def tally(self) -> Counter[str]:
        return Counter(self._tally)

    @property
    def revealed_cells(self) -> FrozenSet[Cell]:
        return frozenset(
            (r, c)
            for r in range(self.rows)
            for c in range(self.cols)
            if self._revealed[r][c]
        )

    def is_revealed(self, row: int, col: int) -> bool:
        if not self.card.contains(row, col):
            raise OutOfBounds(row, col, self.rows, self.cols)
        return self._revealed[row][col]

    def reveal(self, row: int, col: int) -> str:
        """Uncover one cell and count its symbol.

        Raises OutOfBounds or AlreadyRevealed without mutating anything.
        """
        if not self.card.contains(row, col):
            raise OutOfBounds(row, col, self.rows, self.cols)
        if self._revealed[row][col]:
            raise AlreadyRevealed(row, col)
        symbol = self.card.symbol_at(row, col)
        self._revealed[row][col] = True
        self._revealed_count += 1
        self._tally[symbol] += 1
        self.moves += 1
        logger.debug("Revealed (%d, %d) -> %r, tally %s", row, col, symbol, dict(self._tally))
        return symbol

    def has_won(self) -> bool:
        return any(count >= TRIPLE_SIZE for count in self._tally.values())

    def is_complete(self) -> bool:
        return self._revealed_count == self.rows * self.cols

    def outcome(self) -> Optional[str]:
        # A reveal that both completes the board and makes a triple is a win.
        if self.has_won():
            return OUTCOME_WON
        if self.is_complete():
            return OUTCOME_EXHAUSTED
        return None

    def matched_symbols(self) -> List[str]:
        return sorted(s for s, count in self._tally.items() if count >= TRIPLE_SIZE)

    def reveal_all(self) -> None:
        """Uncover every cell for display; the tally is left as is."""
        for r in range(self.rows):
            for c in range(self.cols):
                self._revealed[r][c] = True
        self._revealed_count = self.rows * self.cols
