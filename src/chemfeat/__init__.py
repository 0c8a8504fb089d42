"""Molecular descriptor and fingerprint calculation."""

__version__ = "0.1.0"
