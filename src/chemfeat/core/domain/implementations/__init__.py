"""Normalization, descriptor and fingerprint algorithms."""
