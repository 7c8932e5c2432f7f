"""In-process vector store with exact cosine search (numpy).

Suitable for local development and tests. Data lives only as long as
the process.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

import numpy as np

from manual_rag.models import Chunk, ManualDocument, SearchHit
from manual_rag.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)


def cosine_scores(query: np.ndarray, matrix: np.ndarray) -> np.ndarray:
    """Cosine similarity of *query* against every row of *matrix*.

    Zero vectors score 0 instead of producing NaN.
    """
    row_norms = np.linalg.norm(matrix, axis=1)
    query_norm = np.linalg.norm(query)
    denom = row_norms * query_norm
    dots = matrix @ query
    return np.divide(dots, denom, out=np.zeros_like(dots), where=denom > 0)


class InMemoryVectorStore(VectorStoreBase):
    """Dict-backed store; chunks keep insertion order for tie-breaking."""

    def __init__(self, collection_name: str = "memory") -> None:
        super().__init__(collection_name)
        self._documents: dict[str, ManualDocument] = {}
        self._chunks: dict[str, Chunk] = {}

    async def search(self, query_embedding: list[float], k: int = 5) -> list[SearchHit]:
        if k <= 0 or not self._chunks:
            return []

        chunks = list(self._chunks.values())
        matrix = np.asarray([c.embedding for c in chunks], dtype=float)
        query = np.asarray(query_embedding, dtype=float)
        if matrix.shape[1] != query.shape[0]:
            raise ValueError(
                f"Query has dimension {query.shape[0]}, store holds {matrix.shape[1]}"
            )

        scores = cosine_scores(query, matrix)
        order = np.argsort(-scores, kind="stable")[:k]
        return [
            SearchHit(
                chunk_id=chunks[i].id,
                document_id=chunks[i].document_id,
                content=chunks[i].content,
                score=float(scores[i]),
            )
            for i in order
        ]

    async def get_document_by_url(self, url: str) -> ManualDocument | None:
        for doc in self._documents.values():
            if doc.url == url:
                return doc.model_copy()
        return None

    async def get_documents(self, document_ids: Sequence[str]) -> list[ManualDocument]:
        return [self._documents[i].model_copy() for i in dict.fromkeys(document_ids) if i in self._documents]

    async def list_documents(self) -> list[ManualDocument]:
        docs = sorted(self._documents.values(), key=lambda d: d.created_at, reverse=True)
        return [d.model_copy() for d in docs]

    async def upsert_document(self, document: ManualDocument) -> None:
        self._documents[document.id] = document.model_copy()

    async def delete_document(self, document_id: str) -> bool:
        if self._documents.pop(document_id, None) is None:
            return False
        await self.delete_chunks(document_id)
        return True

    async def upsert_chunks(self, document_id: str, chunks: Sequence[Chunk]) -> None:
        for chunk in chunks:
            if chunk.document_id != document_id:
                raise ValueError(f"Chunk {chunk.id} belongs to {chunk.document_id}, not {document_id}")
            self._chunks[chunk.id] = chunk.model_copy()

    async def delete_chunks(self, document_id: str) -> None:
        stale = [cid for cid, c in self._chunks.items() if c.document_id == document_id]
        for cid in stale:
            del self._chunks[cid]
        logger.debug("Deleted %d chunks of %s", len(stale), document_id)

    async def health_check(self) -> bool:
        return True

    # -- test / introspection helpers -----------------------------------------

    def chunks_for(self, document_id: str) -> list[Chunk]:
        """Chunks of *document_id* in ``chunk_index`` order."""
        owned = [c for c in self._chunks.values() if c.document_id == document_id]
        return sorted(owned, key=lambda c: c.chunk_index)
