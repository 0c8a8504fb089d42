"""Repositories reading molecules from files."""
