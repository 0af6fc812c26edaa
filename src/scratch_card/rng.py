from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence, TypeVar


try:  # optional dependency
    import numpy as _np  # type: ignore
except ImportError:  # pragma: no cover - optional
    _np = None


T = TypeVar("T")


@dataclass
class RandomSource:
    engine: str

    def random(self) -> float:
        raise NotImplementedError

    def choice(self, seq: Sequence[T]) -> T:
        raise NotImplementedError

    def sample(self, seq: Sequence[T], k: int) -> List[T]:
        raise NotImplementedError


class PyRandomSource(RandomSource):
    def __init__(self, seed: Optional[int] = None):
        super().__init__(engine="py_random")
        self._rng = random.Random(seed)

    def random(self) -> float:
        return self._rng.random()

    def choice(self, seq: Sequence[T]) -> T:
        return self._rng.choice(list(seq))

    def sample(self, seq: Sequence[T], k: int) -> List[T]:
        return self._rng.sample(list(seq), k)


class NumpyPCG64Source(RandomSource):  # pragma: no cover - covered when numpy present
    def __init__(self, seed: Optional[int] = None):
        if _np is None:
            raise RuntimeError("numpy is not installed; install scratch-card[pcg]")
        super().__init__(engine="numpy_pcg64")
        self._rng = _np.random.Generator(_np.random.PCG64(seed))

    def random(self) -> float:
        return float(self._rng.random())

    def choice(self, seq: Sequence[T]) -> T:
        # index-based so tuples (cell coordinates) survive intact
        return seq[int(self._rng.integers(0, len(seq)))]

    def sample(self, seq: Sequence[T], k: int) -> List[T]:
        idxs = self._rng.choice(len(seq), size=k, replace=False)
        return [seq[int(i)] for i in idxs]


def create_rng(engine: str, seed: Optional[int] = None) -> RandomSource:
    engine = (engine or "py_random").strip().lower()
    if engine == "py_random":
        return PyRandomSource(seed)
    if engine == "numpy_pcg64":
        return NumpyPCG64Source(seed)
    raise ValueError(f"Unsupported RNG engine: {engine}")


def derive_seed(base_seed: int, index: int, purpose: str) -> int:
    """Derive a per-game, per-purpose seed from a base seed using sha256.

    Card layout and move selection get distinct purposes so their streams are
    independent. Returns a 63-bit positive integer.
    """
    s = f"{base_seed}|{index}|{purpose}".encode("utf-8")
    digest = hashlib.sha256(s).digest()
    val = int.from_bytes(digest[:8], byteorder="big") & ((1 << 63) - 1)
    return val
