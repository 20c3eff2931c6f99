"""Bag-of-visual-words image retrieval from stored descriptor matrices."""

__version__ = "0.1.0"