"""Adapters to external cheminformatics toolkits."""
