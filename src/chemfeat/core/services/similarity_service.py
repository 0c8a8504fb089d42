"""Service comparing fingerprints."""

from typing import Dict

from ..domain.models.fingerprint import Fingerprint
from ..errors import DimensionMismatch


class SimilarityService:
    """Tanimoto similarity between equal-length fingerprints."""

    def tanimoto(self, first: Fingerprint, second: Fingerprint) -> float:
        """
        Intersection over union of the on-bits.

        Args:
            first: Fingerprint A
            second: Fingerprint B

        Returns:
            Similarity in [0, 1]; 0.0 when both fingerprints are empty

        Raises:
            DimensionMismatch: If the fingerprints differ in length
        """
        if first.length != second.length:
            raise DimensionMismatch(
                f"Cannot compare fingerprints of length {first.length} "
                f"and {second.length}"
            )
        union = len(first.bits | second.bits)
        if union == 0:
            return 0.0
        return len(first.bits & second.bits) / union

    def compare(
        self, first: Dict[object, Fingerprint], second: Dict[object, Fingerprint]
    ) -> Dict[object, float]:
        """Tanimoto per fingerprint kind present in both mappings."""
        return {
            kind: self.tanimoto(fingerprint, second[kind])
            for kind, fingerprint in first.items()
            if kind in second
        }


def tanimoto(first: Fingerprint, second: Fingerprint) -> float:
    return SimilarityService().tanimoto(first, second)
