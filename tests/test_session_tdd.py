from __future__ import annotations

import pytest

from scratch_card.core.card import Card, generate_card
from scratch_card.core.game import GameState
from scratch_card.rng import create_rng
from scratch_card.session import play_game
from scratch_card.strategy import (
    RandomStrategy,
    ScriptedStrategy,
    StrategyExhausted,
    parse_cell,
)


def test_scripted_win_stops_before_board_is_complete():
    card = generate_card(3, 3, seed=11)
    moves = sorted(card.winning_cells)
    result = play_game(GameState(card), ScriptedStrategy(moves))
    assert result.won
    assert result.moves == 3
    assert result.matched_symbols == [card.winning_symbol]
    assert [cell for cell, _ in result.reveals] == moves


def test_game_state_is_fully_uncovered_after_play():
    card = generate_card(3, 3, seed=12)
    state = GameState(card)
    play_game(state, ScriptedStrategy(sorted(card.winning_cells)))
    assert state.is_complete()
    assert state.tally[card.winning_symbol] == 3
    assert sum(state.tally.values()) == 3


def test_invalid_selections_are_reported_and_retried():
    card = generate_card(3, 3, seed=13)
    triple = sorted(card.winning_cells)
    script = [triple[0], triple[0], (9, 9), triple[1], triple[2]]
    rejected = []
    result = play_game(
        GameState(card),
        ScriptedStrategy(script),
        on_reject=lambda st, exc: rejected.append(type(exc).__name__),
    )
    assert result.won
    assert result.moves == 3
    assert result.rejected == 2
    assert rejected == ["AlreadyRevealed", "OutOfBounds"]


def test_too_many_invalid_selections_abort():
    card = generate_card(3, 3, seed=14)
    with pytest.raises(RuntimeError):
        play_game(GameState(card), ScriptedStrategy([(5, 5)] * 10), max_invalid=3)


def test_exhausted_game_on_card_without_triple():
    card = Card.from_symbols([["7", "BAR", "$"], ["@", "*", "&"], ["%", "+", "7"]])
    seen = []
    result = play_game(
        GameState(card),
        RandomStrategy(create_rng("py_random", 3)),
        on_reveal=lambda st, cell, symbol: seen.append(cell),
    )
    assert result.outcome == "exhausted"
    assert not result.won
    assert result.moves == 9
    assert len(set(seen)) == 9


def test_random_play_on_generated_card_always_wins():
    for seed in range(25):
        card = generate_card(3, 4, seed=seed)
        result = play_game(GameState(card), RandomStrategy(create_rng("py_random", seed)))
        assert result.won
        assert 3 <= result.moves <= 12


def test_random_strategy_never_picks_revealed_cell():
    strategy = RandomStrategy(create_rng("py_random", 1))
    revealed = frozenset((r, c) for r in range(2) for c in range(2) if (r, c) != (1, 0))
    for _ in range(20):
        assert strategy.select(2, 2, revealed) == (1, 0)
    with pytest.raises(StrategyExhausted):
        strategy.select(1, 1, frozenset({(0, 0)}))


def test_scripted_strategy_exhaustion():
    strategy = ScriptedStrategy([(0, 0)])
    assert strategy.select(3, 3, frozenset()) == (0, 0)
    with pytest.raises(StrategyExhausted):
        strategy.select(3, 3, frozenset())


@pytest.mark.parametrize("text,expected", [("1 2", (1, 2)), ("0,0", (0, 0)), (" 3 , 4 ", (3, 4))])
def test_parse_cell(text, expected):
    assert parse_cell(text) == expected


@pytest.mark.parametrize("text", ["", "1", "1 2 3", "a b"])
def test_parse_cell_rejects_garbage(text):
    with pytest.raises(ValueError):
        parse_cell(text)


def test_unlimited_retries_when_max_invalid_is_none():
    card = generate_card(3, 3, seed=15)
    script = [(7, 7)] * 250 + sorted(card.winning_cells)
    result = play_game(GameState(card), ScriptedStrategy(script), max_invalid=None)
    assert result.won
    assert result.rejected == 250
