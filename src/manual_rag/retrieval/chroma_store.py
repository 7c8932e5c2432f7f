"""Chroma implementation of the vector-store abstraction.

Chunks live in a cosine-space collection named after
``settings.chroma_collection``; manual records live in a sibling
``<collection>_manuals`` collection keyed by manual id. Chroma requires an
embedding for every record, so manual records carry a constant
one-dimensional placeholder vector and are only ever read with ``get``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from typing import Any, TypeVar

import chromadb
from fastapi.concurrency import run_in_threadpool

from manual_rag.config import settings
from manual_rag.errors import DependencyError
from manual_rag.models import Chunk, ManualDocument, SearchHit, SourceKind
from manual_rag.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)

T = TypeVar("T")

_PLACEHOLDER_EMBEDDING = [1.0]


def _document_to_metadata(document: ManualDocument) -> dict[str, Any]:
    # Chroma metadata values must be flat str/int/float/bool
    return {
        "url": document.url,
        "title": document.title,
        "kind": document.kind.value,
        "created_at": document.created_at.isoformat(),
        "chunk_count": document.chunk_count,
    }


def _document_from_record(doc_id: str, meta: dict[str, Any]) -> ManualDocument:
    return ManualDocument(
        id=doc_id,
        url=meta["url"],
        title=meta["title"],
        kind=SourceKind(meta["kind"]),
        created_at=datetime.fromisoformat(meta["created_at"]),
        chunk_count=int(meta.get("chunk_count", 0)),
    )


class ChromaVectorStore(VectorStoreBase):
    """Chroma-backed store.

    Parameters
    ----------
    collection_name:
        Name of the chunk collection.
    host:
        Chroma server hostname.
    port:
        Chroma server port.
    client:
        Pre-built Chroma client; overrides *host* / *port* when given.
    """

    def __init__(
        self,
        collection_name: str = settings.chroma_collection,
        *,
        host: str = settings.chroma_host,
        port: int = settings.chroma_port,
        client: Any | None = None,
    ) -> None:
        super().__init__(collection_name)
        self._client = client if client is not None else chromadb.HttpClient(host=host, port=port)
        self._chunks = self._client.get_or_create_collection(
            name=collection_name,
            metadata={"hnsw:space": "cosine"},
        )
        self._manuals = self._client.get_or_create_collection(name=f"{collection_name}_manuals")

    async def _call(self, fn: Callable[..., T], *args: Any, **kwargs: Any) -> T:
        try:
            return await run_in_threadpool(fn, *args, **kwargs)
        except Exception as exc:
            logger.warning("Chroma call %s failed", getattr(fn, "__name__", fn), exc_info=True)
            raise DependencyError(f"Vector store error: {exc}") from exc

    # -- VectorStoreBase overrides --------------------------------------------

    async def search(self, query_embedding: list[float], k: int = 5) -> list[SearchHit]:
        if k <= 0:
            return []
        results = await self._call(
            self._chunks.query,
            query_embeddings=[query_embedding],
            n_results=k,
            include=["documents", "metadatas", "distances"],
        )

        ids = (results.get("ids") or [[]])[0]
        docs = (results.get("documents") or [[]])[0]
        metas = (results.get("metadatas") or [[]])[0]
        distances = (results.get("distances") or [[]])[0]

        hits: list[SearchHit] = []
        for chunk_id, content, meta, dist in zip(ids, docs, metas, distances):
            # cosine space: distance = 1 - similarity
            hits.append(
                SearchHit(
                    chunk_id=chunk_id,
                    document_id=(meta or {}).get("document_id", ""),
                    content=content or "",
                    score=1.0 - dist,
                )
            )
        hits.sort(key=lambda h: h.score, reverse=True)
        return hits

    async def get_document_by_url(self, url: str) -> ManualDocument | None:
        found = await self._call(self._manuals.get, where={"url": url}, include=["metadatas"])
        if not found["ids"]:
            return None
        return _document_from_record(found["ids"][0], found["metadatas"][0])

    async def get_documents(self, document_ids: Sequence[str]) -> list[ManualDocument]:
        unique = list(dict.fromkeys(document_ids))
        if not unique:
            return []
        found = await self._call(self._manuals.get, ids=unique, include=["metadatas"])
        return [_document_from_record(i, m) for i, m in zip(found["ids"], found["metadatas"])]

    async def list_documents(self) -> list[ManualDocument]:
        found = await self._call(self._manuals.get, include=["metadatas"])
        docs = [_document_from_record(i, m) for i, m in zip(found["ids"], found["metadatas"])]
        return sorted(docs, key=lambda d: d.created_at, reverse=True)

    async def upsert_document(self, document: ManualDocument) -> None:
        await self._call(
            self._manuals.upsert,
            ids=[document.id],
            embeddings=[_PLACEHOLDER_EMBEDDING],
            metadatas=[_document_to_metadata(document)],
        )

    async def delete_document(self, document_id: str) -> bool:
        found = await self._call(self._manuals.get, ids=[document_id], include=["metadatas"])
        if not found["ids"]:
            return False
        await self.delete_chunks(document_id)
        await self._call(self._manuals.delete, ids=[document_id])
        return True

    async def upsert_chunks(self, document_id: str, chunks: Sequence[Chunk]) -> None:
        if not chunks:
            return
        await self._call(
            self._chunks.upsert,
            ids=[c.id for c in chunks],
            embeddings=[c.embedding for c in chunks],
            documents=[c.content for c in chunks],
            metadatas=[{"document_id": document_id, "chunk_index": c.chunk_index} for c in chunks],
        )

    async def delete_chunks(self, document_id: str) -> None:
        await self._call(self._chunks.delete, where={"document_id": document_id})

    async def health_check(self) -> bool:
        try:
            await run_in_threadpool(self._client.heartbeat)
            return True
        except Exception:
            logger.warning("Chroma health-check failed", exc_info=True)
            return False
