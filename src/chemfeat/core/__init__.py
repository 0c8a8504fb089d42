"""Core domain models, services and configuration for molecular featurization."""

# Services first: the configuration module imports service enums.
from .services import (
    DescriptorKind,
    DescriptorService,
    FeatureRecord,
    FeaturizationService,
    FingerprintKind,
    FingerprintService,
    NormalizationService,
    SimilarityService,
)
from .config import FeaturizationSettings
from .domain.models import MolecularGraph, NormalizationStage

__all__ = [
    "DescriptorKind",
    "DescriptorService",
    "FeatureRecord",
    "FeaturizationService",
    "FeaturizationSettings",
    "FingerprintKind",
    "FingerprintService",
    "MolecularGraph",
    "NormalizationService",
    "NormalizationStage",
    "SimilarityService",
]
