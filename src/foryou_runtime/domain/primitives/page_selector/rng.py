from __future__ import annotations

from foryou_runtime.domain.common.hashing import stable_hash
from foryou_runtime.domain.primitives.page_selector import rules


class SeededRandom:
    """Deterministic generator seeded from a string; identical seeds replay identical draws."""

    def __init__(self, seed: str) -> None:
        self.seed = seed
        self._state = stable_hash(seed) or 1

    def next_uint32(self) -> int:
        self._state = (self._state * rules.LCG_MULTIPLIER + rules.LCG_INCREMENT) % rules.LCG_MODULUS
        return self._state

    def random(self) -> float:
        """Float in [0, 1)."""
        return self.next_uint32() / rules.LCG_MODULUS

    def next_int(self, upper: int) -> int:
        """Integer in [0, upper)."""
        if upper <= 0:
            raise ValueError("upper must be positive")
        return int(self.random() * upper)
