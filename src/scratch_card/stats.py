from __future__ import annotations

import math
from collections import Counter
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

from .core.card import Card, generate_card
from .core.game import OUTCOME_EXHAUSTED, OUTCOME_WON, GameState
from .feasibility import TRIPLE_SIZE
from .rng import create_rng, derive_seed
from .session import GameResult, play_game
from .strategy import RandomStrategy
from .symbols import SYMBOLS


@dataclass
class SimulationRun:
    cards: List[Card]
    results: List[GameResult]


def run_simulation(
    *,
    games: int,
    rows: int,
    cols: int,
    seed: int,
    rng_engine: str = "py_random",
) -> SimulationRun:
    """Play `games` random games; card and moves draw from separate seeds."""
    cards: List[Card] = []
    results: List[GameResult] = []
    for index in range(games):
        card_rng = create_rng(rng_engine, derive_seed(seed, index, "card"))
        move_rng = create_rng(rng_engine, derive_seed(seed, index, "moves"))
        card = generate_card(rows, cols, rng=card_rng)
        result = play_game(GameState(card), RandomStrategy(move_rng))
        cards.append(card)
        results.append(result)
    return SimulationRun(cards=cards, results=results)


def filler_frequencies(cards: Sequence[Card]) -> Dict[str, int]:
    """Symbol counts over cells outside each card's winning triple."""
    counts: Counter[str] = Counter()
    for card in cards:
        for cell in card.cells():
            if cell not in card.winning_cells:
                counts[card.symbol_at(*cell)] += 1
    for s in SYMBOLS:
        counts.setdefault(s, 0)
    return dict(counts)


def extra_winning_rate(cards: Sequence[Card]) -> float:
    """Share of cards carrying the winning symbol on more than three cells."""
    if not cards:
        return 0.0
    extra = sum(
        1
        for card in cards
        if card.symbol_counts().get(card.winning_symbol or "", 0) > TRIPLE_SIZE
    )
    return extra / len(cards)


def non_winning_filler_frequencies(cards: Sequence[Card]) -> Dict[str, int]:
    """Filler counts of symbols other than the card's own winning symbol."""
    counts: Counter[str] = Counter()
    for card in cards:
        for cell in card.cells():
            if cell in card.winning_cells:
                continue
            symbol = card.symbol_at(*cell)
            if symbol != card.winning_symbol:
                counts[symbol] += 1
    for s in SYMBOLS:
        counts.setdefault(s, 0)
    return dict(counts)


def chi2_wilson_hilferty_pvalue(stat: float, df: int) -> float:
    if df <= 0:
        return 1.0
    # Wilson-Hilferty approximation: transform chi-square to normal
    t = (stat / df) ** (1.0 / 3.0)
    mu = 1.0 - 2.0 / (9.0 * df)
    sigma = math.sqrt(2.0 / (9.0 * df))
    z = (t - mu) / sigma

    def phi(val: float) -> float:
        return 0.5 * (1.0 + math.erf(val / math.sqrt(2.0)))

    p_right = 1.0 - phi(z)
    return max(0.0, min(1.0, p_right))


def uniformity_test(freqs: Dict[str, int], alpha: float = 0.05) -> Dict[str, object]:
    k = len(freqs)
    total = sum(freqs.values())
    if total == 0 or k == 0:
        return {"chi2": {"stat": 0.0, "df": 0, "p_value": 1.0}, "alpha": alpha}
    expected = total / k
    stat = sum((count - expected) ** 2 / expected for count in freqs.values())
    df = max(k - 1, 1)
    p = chi2_wilson_hilferty_pvalue(stat, df)
    return {
        "chi2": {"stat": round(stat, 6), "df": df, "p_value": round(p, 6)},
        "alpha": alpha,
        "engine": "wilson_hilferty",
    }


def summarize(run: SimulationRun, *, alpha: float = 0.05) -> Dict[str, object]:
    results = run.results
    outcomes = Counter(r.outcome for r in results)
    won_moves = [r.moves for r in results if r.outcome == OUTCOME_WON]

    def mean(values: Sequence[int]) -> Optional[float]:
        return round(sum(values) / len(values), 6) if values else None

    return {
        "games": len(results),
        "outcomes": {
            OUTCOME_WON: outcomes.get(OUTCOME_WON, 0),
            OUTCOME_EXHAUSTED: outcomes.get(OUTCOME_EXHAUSTED, 0),
        },
        "mean_moves": mean([r.moves for r in results]),
        "mean_moves_to_win": mean(won_moves),
        "extra_winning_symbol_rate": round(extra_winning_rate(run.cards), 6),
        "filler_frequencies": filler_frequencies(run.cards),
        "tests": {
            "non_winning_filler_uniformity": uniformity_test(
                non_winning_filler_frequencies(run.cards), alpha=alpha
            ),
        },
    }
