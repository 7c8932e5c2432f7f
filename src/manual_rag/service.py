"""Service wiring — build every collaborator once from settings.

Orchestrators receive their dependencies explicitly; nothing in the
package holds a module-level client.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass

from manual_rag.chat.llm import get_llm
from manual_rag.chat.orchestrator import AnsweringOrchestrator
from manual_rag.chat.responder import Responder
from manual_rag.config import Settings
from manual_rag.ingestion.embedder import Embedder, build_embeddings
from manual_rag.ingestion.extractors import Extractor, get_extractor
from manual_rag.ingestion.orchestrator import IngestionOrchestrator
from manual_rag.models import SourceKind
from manual_rag.retrieval.base import VectorStoreBase
from manual_rag.retrieval.memory_store import InMemoryVectorStore
from manual_rag.retrieval.retriever import Retriever

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Long-lived collaborators shared by all requests."""

    store: VectorStoreBase
    ingestion: IngestionOrchestrator
    answering: AnsweringOrchestrator


def build_store(settings: Settings) -> VectorStoreBase:
    if settings.vector_backend == "memory":
        return InMemoryVectorStore(settings.chroma_collection)

    from manual_rag.retrieval.chroma_store import ChromaVectorStore

    return ChromaVectorStore(
        settings.chroma_collection,
        host=settings.chroma_host,
        port=settings.chroma_port,
    )


def build_services(
    settings: Settings,
    *,
    store: VectorStoreBase | None = None,
    embedder: Embedder | None = None,
    responder: Responder | None = None,
    extractor_factory: Callable[[SourceKind, Settings], Extractor] = get_extractor,
) -> Services:
    """Construct the orchestrators; any collaborator may be injected."""
    store = store if store is not None else build_store(settings)
    embedder = embedder if embedder is not None else Embedder(build_embeddings(settings))
    responder = responder if responder is not None else Responder(get_llm(settings))
    logger.info(
        "Services ready (store=%s, embeddings=%s/%s, llm=%s)",
        type(store).__name__,
        settings.embedding_provider,
        settings.embedding_model,
        settings.llm_model_name,
    )

    retriever = Retriever(store, embedder, preview_length=settings.preview_length)
    return Services(
        store=store,
        ingestion=IngestionOrchestrator(
            store, embedder, settings, extractor_factory=extractor_factory
        ),
        answering=AnsweringOrchestrator(
            retriever,
            responder,
            k=settings.retrieval_k,
            display_limit=settings.display_sources,
        ),
    )
