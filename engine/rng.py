from typing import Sequence, TypeVar
import numpy as np

T = TypeVar("T")

class DRNG:
    """Deterministic Random Number Generator wrapper."""

    def __init__(self, seed: int):
        self.g = np.random.Generator(np.random.PCG64(seed))

    def integers(self, low: int, high: int) -> int:
        """Return a random int in [low, high)."""
        return int(self.g.integers(low, high))

    def choice(self, items: Sequence[T]) -> T:
        """Return one element of a non-empty sequence."""
        if not items:
            raise ValueError("choice from an empty sequence")
        return items[self.integers(0, len(items))]
