"""Shared pytest configuration and fixtures."""

from __future__ import annotations

import re
from collections.abc import Sequence

import pytest
from langchain_core.embeddings import Embeddings

from manual_rag.chat.responder import Responder
from manual_rag.config import Settings
from manual_rag.ingestion.embedder import Embedder
from manual_rag.models import ConversationTurn
from manual_rag.retrieval.memory_store import InMemoryVectorStore

VOCABULARY = ("filter", "battery", "reset", "water", "clean", "error", "wifi", "printer")


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "integration: marks tests requiring external services")


class KeywordEmbeddings(Embeddings):
    """Deterministic bag-of-words embeddings over a tiny vocabulary.

    The last component is a small constant so no text maps to a zero vector.
    """

    def __init__(self) -> None:
        self.calls: list[str] = []

    def _vector(self, text: str) -> list[float]:
        words = re.findall(r"[a-z]+", text.lower())
        return [float(words.count(term)) for term in VOCABULARY] + [0.01]

    def embed_documents(self, texts: list[str]) -> list[list[float]]:
        return [self.embed_query(t) for t in texts]

    def embed_query(self, text: str) -> list[float]:
        self.calls.append(text)
        return self._vector(text)


class RecordingResponder(Responder):
    """Responder that records its inputs instead of calling a model."""

    def __init__(self, reply: str = "Here is what the manual says.") -> None:
        self.reply = reply
        self.calls: list[tuple[str, str, list[ConversationTurn]]] = []

    async def complete(
        self,
        query: str,
        context: str,
        history: Sequence[ConversationTurn] = (),
    ) -> str:
        self.calls.append((query, context, list(history)))
        if not context:
            return "I could not find relevant information in the registered manuals."
        return self.reply


@pytest.fixture()
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key="test",
        vector_backend="memory",
        embed_batch_size=5,
    )


@pytest.fixture()
def keyword_embeddings() -> KeywordEmbeddings:
    return KeywordEmbeddings()


@pytest.fixture()
def embedder(keyword_embeddings: KeywordEmbeddings) -> Embedder:
    return Embedder(keyword_embeddings)


@pytest.fixture()
def memory_store() -> InMemoryVectorStore:
    return InMemoryVectorStore("test-collection")


@pytest.fixture()
def responder() -> RecordingResponder:
    return RecordingResponder()
