"""Core module for scratch card generation and play state."""

from .card import Card, generate_card
from .game import OUTCOME_EXHAUSTED, OUTCOME_WON, GameState

__all__ = ["Card", "generate_card", "GameState", "OUTCOME_WON", "OUTCOME_EXHAUSTED"]
