"""Domain model classes."""

from .atom import Atom
from .bond import Bond, BondOrder
from .descriptor_result import DescriptorResult
from .fingerprint import Fingerprint
from .molecular_graph import MolecularGraph
from .normalization_stage import NormalizationStage

__all__ = [
    "Atom",
    "Bond",
    "BondOrder",
    "DescriptorResult",
    "Fingerprint",
    "MolecularGraph",
    "NormalizationStage",
]
