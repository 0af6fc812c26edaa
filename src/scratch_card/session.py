"""Driving loop: select a cell, reveal it, stop on a win or a full board."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Tuple

from .core.game import OUTCOME_WON, GameState
from .errors import RevealError
from .strategy import Strategy

logger = logging.getLogger(__name__)

Cell = Tuple[int, int]
RevealCallback = Callable[[GameState, Cell, str], None]
RejectCallback = Callable[[GameState, RevealError], None]


@dataclass
class GameResult:
    outcome: str
    moves: int
    winning_symbol: Optional[str]
    matched_symbols: List[str]
    reveals: List[Tuple[Cell, str]] = field(default_factory=list)
    rejected: int = 0

    @property
    def won(self) -> bool:
        return self.outcome == OUTCOME_WON


def play_game(
    state: GameState,
    strategy: Strategy,
    *,
    on_reveal: Optional[RevealCallback] = None,
    on_reject: Optional[RejectCallback] = None,
    max_invalid: Optional[int] = 100,
) -> GameResult:
    """Run the game to completion and uncover the whole card.

    Invalid selections are reported through `on_reject` and retried; more than
    `max_invalid` in a row raises RuntimeError. `max_invalid=None` retries
    without limit.
    """
    reveals: List[Tuple[Cell, str]] = []
    rejected = 0
    invalid_streak = 0
    outcome: Optional[str] = state.outcome()

    while outcome is None:
        cell = strategy.select(state.rows, state.cols, state.revealed_cells)
        try:
            symbol = state.reveal(*cell)
        except RevealError as exc:
            rejected += 1
            invalid_streak += 1
            logger.info("Rejected selection: %s", exc)
            if on_reject is not None:
                on_reject(state, exc)
            if max_invalid is not None and invalid_streak > max_invalid:
                raise RuntimeError(
                    f"Strategy produced {invalid_streak} invalid selections in a row"
                ) from exc
            continue
        invalid_streak = 0
        reveals.append((cell, symbol))
        if on_reveal is not None:
            on_reveal(state, cell, symbol)
        outcome = state.outcome()

    result = GameResult(
        outcome=outcome,
        moves=state.moves,
        winning_symbol=state.card.winning_symbol,
        matched_symbols=state.matched_symbols(),
        reveals=reveals,
        rejected=rejected,
    )
    logger.info("Game over: %s after %d moves", result.outcome, result.moves)
    state.reveal_all()
    return result
