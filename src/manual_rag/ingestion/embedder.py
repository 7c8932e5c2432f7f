"""Embedding — async text → vector over a LangChain ``Embeddings`` backend."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from manual_rag.errors import DependencyError

if TYPE_CHECKING:
    from langchain_core.embeddings import Embeddings

    from manual_rag.config import Settings

logger = logging.getLogger(__name__)


def build_embeddings(settings: Settings) -> Embeddings:
    """Return the configured embedding model.

    ``openai`` uses the hosted API (1536-dim vectors for
    ``text-embedding-3-small``); ``huggingface`` runs a local
    sentence-transformer.
    """
    if settings.embedding_provider == "huggingface":
        from langchain_huggingface import HuggingFaceEmbeddings

        return HuggingFaceEmbeddings(model_name=settings.embedding_model)

    from langchain_openai import OpenAIEmbeddings

    return OpenAIEmbeddings(model=settings.embedding_model, api_key=settings.openai_api_key)


class Embedder:
    """Thin async wrapper that normalises provider failures."""

    def __init__(self, embeddings: Embeddings) -> None:
        self._embeddings = embeddings

    async def embed(self, text: str) -> list[float]:
        try:
            return await self._embeddings.aembed_query(text)
        except Exception as exc:
            logger.warning("Embedding call failed", exc_info=True)
            raise DependencyError(f"Embedding failed: {exc}") from exc
