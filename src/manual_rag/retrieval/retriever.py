"""Semantic retriever — embed a question and pick the grounding chunks.

Usage::

    retriever = Retriever(store, embedder)
    sources   = await retriever.retrieve("How do I reset the filter?", k=5)
    for s in display_sources(sources):
        print(s.document_title, s.preview)
"""

from __future__ import annotations

import logging

from manual_rag.ingestion.embedder import Embedder
from manual_rag.models import RetrievedSource, SearchHit
from manual_rag.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)

DEFAULT_K = 5
DISPLAY_SOURCES = 3
PREVIEW_LENGTH = 200
UNKNOWN_TITLE = "Unknown"


def make_preview(content: str, length: int = PREVIEW_LENGTH) -> str:
    """First *length* characters of *content* followed by ``"..."``."""
    return content[:length] + "..."


def display_sources(sources: list[RetrievedSource], limit: int = DISPLAY_SOURCES) -> list[RetrievedSource]:
    """Narrow a retrieval result to the few sources shown to a user."""
    return sources[:limit]


class Retriever:
    """Top-*k* retrieval over any :class:`VectorStoreBase`.

    Parameters
    ----------
    store:
        Backend holding manuals and chunks.
    embedder:
        Used to embed the query.
    preview_length:
        Characters kept in each source preview.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: Embedder,
        *,
        preview_length: int = PREVIEW_LENGTH,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self.preview_length = preview_length

    async def retrieve(self, query: str, k: int = DEFAULT_K) -> list[RetrievedSource]:
        """Return at most *k* sources, most similar first.

        Store errors propagate; no partial result is returned.
        """
        embedding = await self._embedder.embed(query)
        hits = await self._store.search(embedding, k=k)
        logger.info("Retrieved %d chunks for query (k=%d)", len(hits), k)
        if not hits:
            return []
        return await self._to_sources(hits[:k])

    async def _to_sources(self, hits: list[SearchHit]) -> list[RetrievedSource]:
        doc_ids = list(dict.fromkeys(h.document_id for h in hits))
        titles = {d.id: d.title for d in await self._store.get_documents(doc_ids)}
        return [
            RetrievedSource(
                document_id=hit.document_id,
                document_title=titles.get(hit.document_id, UNKNOWN_TITLE),
                content=hit.content,
                preview=make_preview(hit.content, self.preview_length),
                score=hit.score,
            )
            for hit in hits
        ]
