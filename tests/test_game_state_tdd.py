from __future__ import annotations

import pytest
from hypothesis import given, settings, strategies as st

from scratch_card.core.card import Card, generate_card
from scratch_card.core.game import OUTCOME_EXHAUSTED, OUTCOME_WON, GameState
from scratch_card.errors import AlreadyRevealed, OutOfBounds, RevealError

NO_TRIPLE = [["7", "BAR", "$"], ["@", "*", "&"], ["%", "+", "7"]]


def _state(matrix=NO_TRIPLE, winning_cells=()):
    return GameState(Card.from_symbols(matrix, winning_cells=winning_cells))


def test_reveal_flips_one_cell_and_one_tally_entry():
    state = _state()
    assert state.reveal(1, 1) == "*"
    assert state.revealed_cells == frozenset({(1, 1)})
    assert state.tally == {"*": 1}
    assert state.moves == 1
    assert state.is_revealed(1, 1)
    assert not state.is_revealed(0, 0)


def test_second_reveal_of_same_cell_fails_without_counting():
    state = _state()
    state.reveal(0, 0)
    with pytest.raises(AlreadyRevealed):
        state.reveal(0, 0)
    assert state.tally == {"7": 1}
    assert state.moves == 1


@pytest.mark.parametrize("row,col", [(-1, 0), (0, -1), (3, 0), (0, 3), (10, 10)])
def test_out_of_bounds_mutates_nothing(row, col):
    state = _state()
    with pytest.raises(OutOfBounds) as info:
        state.reveal(row, col)
    assert isinstance(info.value, RevealError)
    assert (info.value.row, info.value.col) == (row, col)
    assert state.revealed_cells == frozenset()
    assert state.tally == {}
    assert state.moves == 0


def test_tally_copy_cannot_mutate_state():
    state = _state()
    state.reveal(0, 0)
    tally = state.tally
    tally["7"] += 10
    assert state.tally["7"] == 1


def test_exhaustion_without_any_triple():
    state = _state()
    for r in range(3):
        for c in range(3):
            state.reveal(r, c)
            assert not state.has_won()
    assert state.is_complete()
    assert not state.has_won()
    assert state.outcome() == OUTCOME_EXHAUSTED


def test_win_after_triple_revealed_before_board_complete():
    card = generate_card(3, 3, seed=42)
    state = GameState(card)
    for r, c in sorted(card.winning_cells):
        assert not state.has_won()
        state.reveal(r, c)
    assert state.has_won()
    assert not state.is_complete()
    assert state.outcome() == OUTCOME_WON
    assert card.winning_symbol in state.matched_symbols()


def test_last_reveal_completing_board_and_triple_is_a_win():
    matrix = [["7", "BAR", "$"], ["@", "7", "&"], ["%", "+", "7"]]
    state = _state(matrix, winning_cells=[(0, 0), (1, 1), (2, 2)])
    cells = [(r, c) for r in range(3) for c in range(3) if (r, c) != (2, 2)]
    for r, c in cells:
        state.reveal(r, c)
    assert state.outcome() is None
    state.reveal(2, 2)
    assert state.is_complete()
    assert state.has_won()
    assert state.outcome() == OUTCOME_WON


def test_reveal_all_does_not_touch_tally():
    state = _state()
    state.reveal(0, 0)
    state.reveal(2, 2)
    state.reveal_all()
    assert state.is_complete()
    assert state.tally == {"7": 2}
    assert not state.has_won()
    with pytest.raises(AlreadyRevealed):
        state.reveal(1, 1)


@settings(max_examples=40)
@given(seed=st.integers(min_value=0, max_value=2**32), order_seed=st.randoms(use_true_random=False))
def test_tally_matches_revealed_cells_and_win_is_monotonic(seed, order_seed):
    card = generate_card(4, 4, seed=seed)
    state = GameState(card)
    cells = list(card.cells())
    order_seed.shuffle(cells)
    won = False
    for r, c in cells:
        state.reveal(r, c)
        expected = {}
        for rr, cc in state.revealed_cells:
            s = card.symbol_at(rr, cc)
            expected[s] = expected.get(s, 0) + 1
        assert dict(state.tally) == expected
        if won:
            assert state.has_won()
        won = state.has_won()
        assert won == (max(state.tally.values()) >= 3)
    assert state.is_complete()
    assert state.has_won()
