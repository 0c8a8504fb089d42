"""Core domain: molecular graph models and the algorithms that act on them."""
