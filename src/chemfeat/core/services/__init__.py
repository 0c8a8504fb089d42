"""Core business logic services."""

from .normalization_service import NormalizationService
from .descriptor_service import DescriptorKind, DescriptorService
from .fingerprint_service import FingerprintKind, FingerprintService
from .similarity_service import SimilarityService
from .featurization_service import FeatureRecord, FeaturizationService

__all__ = [
    "NormalizationService",
    "DescriptorKind",
    "DescriptorService",
    "FingerprintKind",
    "FingerprintService",
    "SimilarityService",
    "FeatureRecord",
    "FeaturizationService",
]
