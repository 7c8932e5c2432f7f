"""Abstract base class for vector-store backends.

A store owns two kinds of records: manual documents and their embedded
chunks. Adding a new backend only requires subclassing
:class:`VectorStoreBase`; the orchestrators are backend-agnostic.

Each method is expected to be individually atomic. No multi-call
transactions are assumed, so a reader may observe a manual with zero or
partial chunks while it is being re-ingested.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Sequence

from manual_rag.models import Chunk, ManualDocument, SearchHit


class VectorStoreBase(ABC):
    """Backend-agnostic document and chunk store.

    Parameters
    ----------
    collection_name:
        Logical name of the collection / index / namespace.
    """

    def __init__(self, collection_name: str) -> None:
        self.collection_name = collection_name

    # -- search ---------------------------------------------------------------

    @abstractmethod
    async def search(self, query_embedding: list[float], k: int = 5) -> list[SearchHit]:
        """Return up to *k* chunks most similar to *query_embedding*.

        Results are sorted by descending cosine similarity; ties are
        broken deterministically by the backend.
        """
        ...

    # -- documents ------------------------------------------------------------

    @abstractmethod
    async def get_document_by_url(self, url: str) -> ManualDocument | None:
        """Return the manual stored for exactly *url*, if any."""
        ...

    @abstractmethod
    async def get_documents(self, document_ids: Sequence[str]) -> list[ManualDocument]:
        """Batch lookup; unknown ids are silently skipped."""
        ...

    @abstractmethod
    async def list_documents(self) -> list[ManualDocument]:
        """All manuals, newest first."""
        ...

    @abstractmethod
    async def upsert_document(self, document: ManualDocument) -> None:
        ...

    @abstractmethod
    async def delete_document(self, document_id: str) -> bool:
        """Delete a manual and all of its chunks.

        Returns ``False`` when no such manual exists.
        """
        ...

    # -- chunks ---------------------------------------------------------------

    @abstractmethod
    async def upsert_chunks(self, document_id: str, chunks: Sequence[Chunk]) -> None:
        ...

    @abstractmethod
    async def delete_chunks(self, document_id: str) -> None:
        ...

    @abstractmethod
    async def health_check(self) -> bool:
        """Return ``True`` when the backend is reachable and ready."""
        ...
