"""Unit tests for the Chroma backend, against a mocked client."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone
from unittest.mock import MagicMock

import pytest

from manual_rag.errors import DependencyError
from manual_rag.models import Chunk, ManualDocument, SourceKind

pytest.importorskip("chromadb")

from manual_rag.retrieval.chroma_store import ChromaVectorStore  # noqa: E402


@pytest.fixture()
def collections() -> tuple[MagicMock, MagicMock]:
    return MagicMock(name="chunks"), MagicMock(name="manuals")


@pytest.fixture()
def store(collections: tuple[MagicMock, MagicMock]) -> ChromaVectorStore:
    chunks, manuals = collections
    client = MagicMock()
    client.get_or_create_collection.side_effect = [chunks, manuals]
    return ChromaVectorStore("test", client=client)


def _manual_meta(title: str = "Kettle") -> dict:
    return {
        "url": "https://example.com/kettle.pdf",
        "title": title,
        "kind": "pdf",
        "created_at": "2026-01-10T00:00:00+00:00",
        "chunk_count": 3,
    }


def test_collections_created_with_cosine_space() -> None:
    client = MagicMock()
    ChromaVectorStore("manuals", client=client)
    first, second = client.get_or_create_collection.call_args_list
    assert first.kwargs == {"name": "manuals", "metadata": {"hnsw:space": "cosine"}}
    assert second.kwargs == {"name": "manuals_manuals"}


def test_search_converts_distance_to_similarity(
    store: ChromaVectorStore, collections: tuple[MagicMock, MagicMock]
) -> None:
    chunks, _ = collections
    chunks.query.return_value = {
        "ids": [["c1", "c2"]],
        "documents": [["first", "second"]],
        "metadatas": [[{"document_id": "d1", "chunk_index": 0}, {"document_id": "d2", "chunk_index": 4}]],
        "distances": [[0.1, 0.4]],
    }

    hits = asyncio.run(store.search([0.1, 0.2], k=2))

    assert [h.chunk_id for h in hits] == ["c1", "c2"]
    assert hits[0].score == pytest.approx(0.9)
    assert hits[1].document_id == "d2"
    assert chunks.query.call_args.kwargs["n_results"] == 2


def test_get_document_by_url(store: ChromaVectorStore, collections: tuple[MagicMock, MagicMock]) -> None:
    _, manuals = collections
    manuals.get.return_value = {"ids": ["d1"], "metadatas": [_manual_meta()]}

    doc = asyncio.run(store.get_document_by_url("https://example.com/kettle.pdf"))

    assert doc is not None
    assert doc.id == "d1"
    assert doc.kind is SourceKind.PDF
    assert doc.created_at == datetime(2026, 1, 10, tzinfo=timezone.utc)
    assert manuals.get.call_args.kwargs["where"] == {"url": "https://example.com/kettle.pdf"}


def test_upsert_chunks_records_owner(store: ChromaVectorStore, collections: tuple[MagicMock, MagicMock]) -> None:
    chunks, _ = collections
    chunk = Chunk(id="c1", document_id="d1", chunk_index=2, content="text", embedding=[0.5])

    asyncio.run(store.upsert_chunks("d1", [chunk]))

    kwargs = chunks.upsert.call_args.kwargs
    assert kwargs["ids"] == ["c1"]
    assert kwargs["metadatas"] == [{"document_id": "d1", "chunk_index": 2}]


def test_upsert_document_flattens_metadata(
    store: ChromaVectorStore, collections: tuple[MagicMock, MagicMock]
) -> None:
    _, manuals = collections
    doc = ManualDocument(id="d1", url="https://example.com/a", title="A", kind=SourceKind.WEB)

    asyncio.run(store.upsert_document(doc))

    meta = manuals.upsert.call_args.kwargs["metadatas"][0]
    assert meta["kind"] == "web"
    assert isinstance(meta["created_at"], str)


def test_delete_document_cascades(store: ChromaVectorStore, collections: tuple[MagicMock, MagicMock]) -> None:
    chunks, manuals = collections
    manuals.get.return_value = {"ids": ["d1"]}

    assert asyncio.run(store.delete_document("d1")) is True
    chunks.delete.assert_called_once_with(where={"document_id": "d1"})
    manuals.delete.assert_called_once_with(ids=["d1"])


def test_delete_unknown_document(store: ChromaVectorStore, collections: tuple[MagicMock, MagicMock]) -> None:
    chunks, manuals = collections
    manuals.get.return_value = {"ids": []}
    assert asyncio.run(store.delete_document("nope")) is False
    chunks.delete.assert_not_called()


def test_backend_errors_are_dependency_errors(
    store: ChromaVectorStore, collections: tuple[MagicMock, MagicMock]
) -> None:
    chunks, _ = collections
    chunks.query.side_effect = ConnectionError("refused")
    with pytest.raises(DependencyError, match="refused"):
        asyncio.run(store.search([0.1], k=5))
