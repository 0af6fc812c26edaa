"""Coordinate-selection strategies used by the driving loop."""

from __future__ import annotations

from typing import FrozenSet, Iterable, List, Optional, Protocol, Tuple

import typer

from .rng import RandomSource, create_rng

Cell = Tuple[int, int]


class Strategy(Protocol):
    def select(self, rows: int, cols: int, revealed: FrozenSet[Cell]) -> Cell:
        ...


class StrategyExhausted(IndexError):
    """A scripted strategy ran out of moves before the game ended."""


class RandomStrategy:
    """Pick uniformly among the cells not yet revealed."""

    def __init__(self, rng: Optional[RandomSource] = None):
        self.rng = rng or create_rng("py_random")

    def select(self, rows: int, cols: int, revealed: FrozenSet[Cell]) -> Cell:
        hidden = [(r, c) for r in range(rows) for c in range(cols) if (r, c) not in revealed]
        if not hidden:
            raise StrategyExhausted("No hidden cells left to select")
        return self.rng.choice(hidden)


class ScriptedStrategy:
    def __init__(self, moves: Iterable[Cell]):
        self._moves: List[Cell] = [(int(r), int(c)) for r, c in moves]
        self._pos = 0

    def select(self, rows: int, cols: int, revealed: FrozenSet[Cell]) -> Cell:
        if self._pos >= len(self._moves):
            raise StrategyExhausted(f"Script exhausted after {self._pos} moves")
        move = self._moves[self._pos]
        self._pos += 1
        return move


def parse_cell(text: str) -> Cell:
    """Parse "row col" or "row,col" into a coordinate pair."""
    parts = text.replace(",", " ").split()
    if len(parts) != 2:
        raise ValueError(f"Expected two integers 'row col', got {text!r}")
    return int(parts[0]), int(parts[1])


class PromptStrategy:
    """Ask the player for a cell on the terminal."""

    def __init__(self, prompt: str = "Cell to scratch (row col)"):
        self.prompt = prompt

    def select(self, rows: int, cols: int, revealed: FrozenSet[Cell]) -> Cell:
        while True:
            raw = typer.prompt(self.prompt)
            try:
                return parse_cell(raw)
            except ValueError as exc:
                typer.echo(str(exc), err=True)
