"""Retrieval-augmented question answering over product manuals."""

__version__ = "0.1.0"
