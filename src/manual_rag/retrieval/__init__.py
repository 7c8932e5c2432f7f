"""
Retrieval — vector storage, similarity search, and source assembly.

This module wraps the vector store behind a clean interface so that
the orchestrators never need to know which DB is backing retrieval.

Public surface
--------------
- :class:`Retriever` — embeds a query and returns ranked sources.
- :class:`VectorStoreBase` — abstract backend.
- :class:`InMemoryVectorStore` — exact numpy backend for local use and tests.
- :class:`ChromaVectorStore` — Chroma server backend.
"""

from manual_rag.retrieval.base import VectorStoreBase
from manual_rag.retrieval.memory_store import InMemoryVectorStore
from manual_rag.retrieval.retriever import DISPLAY_SOURCES, Retriever, display_sources

__all__ = [
    "ChromaVectorStore",
    "DISPLAY_SOURCES",
    "InMemoryVectorStore",
    "Retriever",
    "VectorStoreBase",
    "display_sources",
]


def __getattr__(name: str):  # noqa: ANN001
    """Lazy-import ChromaVectorStore to avoid pulling in chromadb at import time."""
    if name == "ChromaVectorStore":
        from manual_rag.retrieval.chroma_store import ChromaVectorStore

        return ChromaVectorStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
