"""Domain model for binary fingerprints."""

from dataclasses import dataclass
from typing import FrozenSet, Iterable

import numpy as np


@dataclass(frozen=True)
class Fingerprint:
    """Fixed-length bit vector stored as the set of its on-bit indices."""

    bits: FrozenSet[int]
    length: int
    kind: str = ""

    def __post_init__(self):
        if self.length <= 0:
            raise ValueError(f"Fingerprint length must be positive, got {self.length}")
        object.__setattr__(self, "bits", frozenset(self.bits))
        out_of_range = [b for b in self.bits if not 0 <= b < self.length]
        if out_of_range:
            raise ValueError(
                f"Bit indices {sorted(out_of_range)} outside [0, {self.length})"
            )

    @classmethod
    def from_indices(
        cls, indices: Iterable[int], length: int, kind: str = ""
    ) -> "Fingerprint":
        return cls(frozenset(int(i) for i in indices), length, kind)

    @classmethod
    def from_array(cls, array: np.ndarray, kind: str = "") -> "Fingerprint":
        """Build a fingerprint from a dense 0/1 vector."""
        array = np.asarray(array).ravel()
        return cls(frozenset(np.flatnonzero(array).tolist()), int(array.size), kind)

    @property
    def cardinality(self) -> int:
        return len(self.bits)

    def __contains__(self, bit: int) -> bool:
        return bit in self.bits

    def to_array(self) -> np.ndarray:
        """Dense uint8 vector of length ``length``."""
        array = np.zeros(self.length, dtype=np.uint8)
        if self.bits:
            array[sorted(self.bits)] = 1
        return array

    def on_bits(self):
        return sorted(self.bits)
