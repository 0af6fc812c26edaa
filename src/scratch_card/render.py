from __future__ import annotations

from typing import List

from .core.game import GameState
from .symbols import CELL_WIDTH, PLACEHOLDER


def render_cell(symbol: str) -> str:
    return symbol.center(CELL_WIDTH)


def render_card(state: GameState, *, show_all: bool = False) -> str:
    """Text grid with a column-index header row and a row-index left column.

    Hidden cells show the placeholder unless `show_all` is set.
    """
    label_width = len(str(max(state.rows - 1, 0)))
    header = " " * label_width + " " + " ".join(
        str(c).center(CELL_WIDTH) for c in range(state.cols)
    )
    lines: List[str] = [header.rstrip()]
    for r in range(state.rows):
        cells = []
        for c in range(state.cols):
            if show_all or state.is_revealed(r, c):
                cells.append(render_cell(state.card.symbol_at(r, c)))
            else:
                cells.append(PLACEHOLDER)
        lines.append(str(r).rjust(label_width) + " " + " ".join(cells))
    return "\n".join(lines)
