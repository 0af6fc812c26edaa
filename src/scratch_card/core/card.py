"""Card generation: hidden symbol layout with a guaranteed winning triple."""

from __future__ import annotations

import hashlib
import json
import logging
from collections import Counter
from dataclasses import dataclass
from typing import Dict, FrozenSet, Iterator, List, Optional, Sequence, Tuple

from ..errors import ConstructionError
from ..feasibility import TRIPLE_SIZE, check_card_size
from ..rng import RandomSource, create_rng
from ..symbols import SYMBOLS

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]

# A filler draw that hits the winning symbol is kept with this probability
# and re-drawn otherwise.
WINNING_SYMBOL_ACCEPT_PROBABILITY = 0.7


@dataclass(frozen=True)
class Card:
    """Immutable symbol layout of a scratch card."""

    rows: int
    cols: int
    symbols: Tuple[Tuple[str, ...], ...]
    winning_symbol: Optional[str]
    winning_cells: FrozenSet[Cell]

    @classmethod
    def from_symbols(
        cls,
        matrix: Sequence[Sequence[str]],
        *,
        winning_cells: Sequence[Cell] = (),
    ) -> "Card":
        """Build a card from an explicit layout, bypassing the generator.

        `winning_cells` is optional; when given it must name three cells that
        share one symbol.
        """
        rows = len(matrix)
        cols = len(matrix[0]) if rows else 0
        feas = check_card_size(rows=rows, cols=cols)
        if not feas.feasible:
            raise ConstructionError("Card layout is too small", feas.reasons)
        if any(len(row) != cols for row in matrix):
            raise ConstructionError("Card layout rows must all have the same length")
        unknown = sorted({s for row in matrix for s in row if s not in SYMBOLS})
        if unknown:
            raise ConstructionError(f"Unknown symbols in layout: {unknown}")

        symbols = tuple(tuple(row) for row in matrix)
        cells = frozenset((int(r), int(c)) for r, c in winning_cells)
        winning_symbol: Optional[str] = None
        if cells:
            if len(cells) != TRIPLE_SIZE:
                raise ConstructionError(f"Winning triple must name {TRIPLE_SIZE} distinct cells")
            if any(not (0 <= r < rows and 0 <= c < cols) for r, c in cells):
                raise ConstructionError("Winning triple lies outside the card")
            found = {symbols[r][c] for r, c in cells}
            if len(found) != 1:
                raise ConstructionError("Winning triple cells must share one symbol")
            winning_symbol = found.pop()
        return cls(
            rows=rows,
            cols=cols,
            symbols=symbols,
            winning_symbol=winning_symbol,
            winning_cells=cells,
        )

    def symbol_at(self, row: int, col: int) -> str:
        return self.symbols[row][col]

    def cells(self) -> Iterator[Cell]:
        """All coordinates in row-major order."""
        for r in range(self.rows):
            for c in range(self.cols):
                yield (r, c)

    def contains(self, row: int, col: int) -> bool:
        return 0 <= row < self.rows and 0 <= col < self.cols

    def symbol_counts(self) -> Dict[str, int]:
        return dict(Counter(s for row in self.symbols for s in row))

    def fingerprint(self) -> str:
        payload = json.dumps(
            {
                "symbols": [list(row) for row in self.symbols],
                "winning_cells": sorted(list(c) for c in self.winning_cells),
            },
            ensure_ascii=True,
            separators=(",", ":"),
        )
        return "sha256:" + hashlib.sha256(payload.encode("utf-8")).hexdigest()


def draw_filler_symbol(rng: RandomSource, winning_symbol: str) -> str:
    """Uniform draw that keeps the winning symbol only 70% of the time."""
    while True:
        symbol = rng.choice(SYMBOLS)
        if symbol != winning_symbol:
            return symbol
        if rng.random() < WINNING_SYMBOL_ACCEPT_PROBABILITY:
            return symbol


def generate_card(
    rows: int,
    cols: int,
    *,
    rng: Optional[RandomSource] = None,
    seed: Optional[int] = None,
    rng_engine: str = "py_random",
) -> Card:
    """Generate a card whose winning symbol sits on three random cells.

    Raises ConstructionError when the dimensions cannot hold three cells.
    """
    feas = check_card_size(rows=rows, cols=cols)
    if not feas.feasible:
        raise ConstructionError(f"Cannot build a {rows}x{cols} card", feas.reasons)
    if rng is None:
        rng = create_rng(rng_engine, seed)

    winning_symbol = rng.choice(SYMBOLS)
    coords: List[Cell] = [(r, c) for r in range(rows) for c in range(cols)]
    triple = frozenset(rng.sample(coords, TRIPLE_SIZE))

    matrix: List[List[str]] = []
    for r in range(rows):
        row: List[str] = []
        for c in range(cols):
            if (r, c) in triple:
                row.append(winning_symbol)
            else:
                row.append(draw_filler_symbol(rng, winning_symbol))
        matrix.append(row)

    card = Card(
        rows=rows,
        cols=cols,
        symbols=tuple(tuple(row) for row in matrix),
        winning_symbol=winning_symbol,
        winning_cells=triple,
    )
    logger.debug(
        "Generated %dx%d card, winning symbol %r at %s",
        rows,
        cols,
        winning_symbol,
        sorted(triple),
    )
    return card
