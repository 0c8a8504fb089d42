"""Command-line interface modules."""

from .featurize_structures import main as featurize_structures_main

__all__ = ["featurize_structures_main"]
