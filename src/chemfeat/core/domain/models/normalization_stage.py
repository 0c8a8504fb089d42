"""Normalization stages a molecular graph passes through."""

from enum import IntEnum


class NormalizationStage(IntEnum):
    """Ordered stages of the normalization pipeline.

    A graph at a given stage has also completed every earlier stage.
    """

    RAW = 0
    HYDROGENS_EXPLICIT = 1
    ATOM_TYPES_PERCEIVED = 2
    AROMATICITY_APPLIED = 3
