from __future__ import annotations

from dataclasses import dataclass
from typing import List

TRIPLE_SIZE = 3


@dataclass
class Feasibility:
    feasible: bool
    reasons: List[str]


def check_card_size(*, rows: int, cols: int) -> Feasibility:
    """A card must have positive dimensions and room for the winning triple."""
    reasons: List[str] = []
    if rows <= 0:
        reasons.append(f"rows must be positive, got {rows}")
    if cols <= 0:
        reasons.append(f"cols must be positive, got {cols}")
    if not reasons and rows * cols < TRIPLE_SIZE:
        reasons.append(f"rows*cols < {TRIPLE_SIZE}: {rows}x{cols} card cannot hold a winning triple")
    return Feasibility(feasible=not reasons, reasons=reasons)
