"""Retrieval-augmented question answering over a category-organised document corpus."""

__version__ = "0.1.0"
