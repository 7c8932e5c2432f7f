"""Ingestion — fetch a manual, chunk it, embed the chunks, and store them.

Re-ingesting a URL replaces the manual's chunk set wholesale. The replace
is not transactional: old chunks are deleted before the new ones are
written, so a failure part-way through leaves the manual truncated and is
reported as :class:`~manual_rag.errors.PartialWriteError`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Sequence
from urllib.parse import urlparse

from manual_rag.config import Settings
from manual_rag.errors import ExtractionError, NotFoundError, PartialWriteError, ValidationError
from manual_rag.ingestion.embedder import Embedder
from manual_rag.ingestion.extractors import Extractor, get_extractor
from manual_rag.models import Chunk, IngestResult, ManualDocument, SourceKind
from manual_rag.retrieval.base import VectorStoreBase

logger = logging.getLogger(__name__)

EMBED_BATCH_SIZE = 5


def validate_url(url: str) -> str:
    """Return *url* stripped, or raise :class:`ValidationError` without any I/O."""
    if not url or not url.strip():
        raise ValidationError("URL is required")
    url = url.strip()
    try:
        parsed = urlparse(url)
    except ValueError as exc:
        raise ValidationError(f"Invalid URL: {url!r}") from exc
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValidationError(f"Invalid URL: {url!r}")
    return url


class IngestionOrchestrator:
    """Drive extraction → chunking → embedding → storage for one URL.

    Parameters
    ----------
    store:
        Destination for manuals and chunks.
    embedder:
        Embeds each chunk.
    settings:
        Chunking, batching, and fetch parameters.
    extractor_factory:
        Maps a :class:`SourceKind` to an extractor; defaults to
        :func:`~manual_rag.ingestion.extractors.get_extractor`.
    """

    def __init__(
        self,
        store: VectorStoreBase,
        embedder: Embedder,
        settings: Settings,
        *,
        extractor_factory: Callable[[SourceKind, Settings], Extractor] = get_extractor,
    ) -> None:
        self._store = store
        self._embedder = embedder
        self._settings = settings
        self._extractor_factory = extractor_factory
        self.batch_size = settings.embed_batch_size or EMBED_BATCH_SIZE

    async def ingest(self, url: str, title: str | None = None) -> IngestResult:
        """Ingest *url*, replacing any manual previously stored for it.

        Returns the stored manual together with whether it was newly created
        (``False`` when an existing manual for the same URL was replaced).

        Raises
        ------
        ValidationError
            *url* is malformed; nothing was fetched or written.
        ExtractionError
            The source could not be read or produced no chunks; nothing was written.
        PartialWriteError
            Storage was modified before a later step failed.
        DependencyError
            An embedder or store call failed before anything was written.
        """
        url = validate_url(url)
        kind = SourceKind.from_url(url)
        logger.info("Ingesting %s as %s", url, kind.value)

        extracted = await self._extractor_factory(kind, self._settings).extract(url, title)
        if not extracted.chunks:
            raise ExtractionError(f"No content could be extracted from {url}")
        chunks = extracted.chunks

        existing = await self._store.get_document_by_url(url)
        if existing is not None:
            document = existing.model_copy(
                update={"title": extracted.title, "chunk_count": len(chunks)}
            )
        else:
            document = ManualDocument(
                url=url,
                title=extracted.title,
                kind=kind,
                chunk_count=len(chunks),
            )

        mutated = False
        written = 0
        try:
            if existing is not None:
                await self._store.delete_chunks(existing.id)
                mutated = True
            await self._store.upsert_document(document)
            mutated = True

            for batch_start in range(0, len(chunks), self.batch_size):
                batch = chunks[batch_start : batch_start + self.batch_size]
                await self._write_batch(document.id, batch_start, batch)
                written += len(batch)
                logger.info("  stored %d / %d chunks", written, len(chunks))
        except Exception as exc:
            if not mutated:
                raise
            logger.error(
                "Ingestion of %s failed after %d/%d chunks were stored",
                url, written, len(chunks),
            )
            raise PartialWriteError(
                f"Ingestion of {url} partially applied ({written}/{len(chunks)} chunks stored): {exc}",
                document_id=document.id,
                chunks_written=written,
            ) from exc

        logger.info(
            "%s manual %s (%d chunks)",
            "Updated" if existing is not None else "Created", document.id, len(chunks),
        )
        return IngestResult(manual=document, created=existing is None)

    async def _write_batch(self, document_id: str, offset: int, batch: Sequence[str]) -> None:
        tasks = [asyncio.ensure_future(self._embedder.embed(text)) for text in batch]
        try:
            embeddings = await asyncio.gather(*tasks)
        except BaseException:
            # stop the rest of the batch before the failure propagates
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise
        records = [
            Chunk(
                document_id=document_id,
                chunk_index=offset + i,
                content=text,
                embedding=embedding,
            )
            for i, (text, embedding) in enumerate(zip(batch, embeddings))
        ]
        await self._store.upsert_chunks(document_id, records)

    async def list_documents(self) -> list[ManualDocument]:
        return await self._store.list_documents()

    async def delete(self, document_id: str) -> None:
        """Delete a manual and, with it, all of its chunks."""
        if not await self._store.delete_document(document_id):
            raise NotFoundError(f"Manual {document_id} not found")
        logger.info("Deleted manual %s", document_id)
