from __future__ import annotations

from typing import Tuple

# Every symbol fits the 3-character cell width used by the renderer.
SYMBOLS: Tuple[str, ...] = ("7", "BAR", "$", "@", "*", "&", "%", "+")

CELL_WIDTH = 3
PLACEHOLDER = "#" * CELL_WIDTH
