"""
Configuration for feature extraction runs.

Settings are validated on construction and are read-only afterwards so a
single instance can be handed to every worker.
"""

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, Optional, Tuple

from .services.descriptor_service import DescriptorKind
from .services.fingerprint_service import FingerprintKind


@dataclass(frozen=True)
class FeaturizationSettings:
    """Parameters of a featurization run."""

    # Circular fingerprint: 3 rounds is ECFP6
    circular_radius: int = 3
    circular_length: int = 1024

    # Input handling
    skip_on_error: bool = True
    workers: int = 1

    descriptors: Tuple[DescriptorKind, ...] = field(
        default_factory=lambda: tuple(DescriptorKind)
    )
    fingerprints: Tuple[FingerprintKind, ...] = field(
        default_factory=lambda: tuple(FingerprintKind)
    )

    # Reference structure every molecule is compared against
    query_smiles: Optional[str] = None

    def __post_init__(self):
        """Validate parameters after initialization."""
        self.validate()

    def validate(self) -> None:
        """Check that all parameters are within acceptable ranges."""
        if self.circular_radius < 0:
            raise ValueError(
                f"circular_radius must be non-negative, got {self.circular_radius}"
            )
        if self.circular_length <= 0:
            raise ValueError(
                f"circular_length must be positive, got {self.circular_length}"
            )
        if self.workers < 1:
            raise ValueError(f"workers must be at least 1, got {self.workers}")

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["descriptors"] = [kind.name for kind in self.descriptors]
        data["fingerprints"] = [kind.name for kind in self.fingerprints]
        return data
