"""Unit tests for the serving layer."""

from __future__ import annotations

from collections.abc import Iterator

import pytest
from fastapi.testclient import TestClient

from manual_rag.config import Settings
from manual_rag.errors import ExtractionError
from manual_rag.ingestion.embedder import Embedder
from manual_rag.ingestion.extractors import Extractor
from manual_rag.models import SourceKind
from manual_rag.retrieval.memory_store import InMemoryVectorStore
from manual_rag.service import build_services
from manual_rag.serving.app import app

from conftest import RecordingResponder

PAGE_TEXT = "".join(
    f"Section {i}: to reset the printer, hold the power button for ten seconds. " for i in range(30)
)


class CannedExtractor(Extractor):
    def _fetch(self, url: str) -> bytes:
        if "broken" in url:
            raise ExtractionError(f"Failed to fetch {url}: 404")
        return PAGE_TEXT.encode()

    def _parse(self, url: str, body: bytes) -> tuple[str, str]:
        return body.decode(), "Printer Guide"


def _canned(kind: SourceKind, settings: Settings) -> Extractor:
    extractor = CannedExtractor(settings)
    extractor.kind = kind
    return extractor


@pytest.fixture()
def client(test_settings: Settings, embedder: Embedder) -> Iterator[TestClient]:
    services = build_services(
        test_settings,
        store=InMemoryVectorStore(),
        embedder=embedder,
        responder=RecordingResponder(),
        extractor_factory=_canned,
    )
    app.state.services = services
    yield TestClient(app)
    app.state.services = None


def test_health_endpoint() -> None:
    """GET /health should return 200 with status ok."""
    client = TestClient(app)
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_ingest_then_update(client: TestClient) -> None:
    first = client.post("/ingest", json={"url": "https://example.com/printer"})
    assert first.status_code == 200
    body = first.json()
    assert body["success"] is True
    assert body["message"] == "Manual ingested"
    assert body["manual"]["type"] == "web"
    assert set(body["manual"]) == {"id", "title", "url", "type", "created_at", "chunk_count"}
    assert body["manual"]["title"] == "Printer Guide"

    second = client.post("/ingest", json={"url": "https://example.com/printer", "title": "Printer"})
    assert second.json()["message"] == "Manual updated"
    assert second.json()["manual"]["id"] == body["manual"]["id"]


def test_ingest_invalid_url(client: TestClient) -> None:
    response = client.post("/ingest", json={"url": "not a url"})
    assert response.status_code == 400
    assert response.json() == {"success": False, "error": "Invalid URL: 'not a url'", "partial": False}


def test_ingest_extraction_failure(client: TestClient) -> None:
    response = client.post("/ingest", json={"url": "https://example.com/broken"})
    assert response.status_code == 422
    assert response.json()["partial"] is False


def test_chat_returns_capped_sources(client: TestClient) -> None:
    client.post("/ingest", json={"url": "https://example.com/printer"})

    response = client.post(
        "/chat",
        json={
            "message": "How do I reset the printer?",
            "history": [{"role": "user", "content": "hello"}],
        },
    )

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "Here is what the manual says."
    assert 1 <= len(body["sources"]) <= 3
    source = body["sources"][0]
    assert set(source) == {"manual_id", "manual_title", "chunk_content", "similarity"}
    assert source["manual_title"] == "Printer Guide"
    assert source["chunk_content"].endswith("...")


def test_chat_without_manuals(client: TestClient) -> None:
    response = client.post("/chat", json={"message": "anything?"})
    assert response.status_code == 200
    assert response.json()["sources"] == []
    assert "could not find" in response.json()["message"]


def test_chat_empty_message(client: TestClient) -> None:
    response = client.post("/chat", json={"message": "  "})
    assert response.status_code == 400


def test_list_and_delete(client: TestClient) -> None:
    manual_id = client.post("/ingest", json={"url": "https://example.com/printer"}).json()["manual"]["id"]

    listed = client.get("/manuals").json()["manuals"]
    assert [m["id"] for m in listed] == [manual_id]

    assert client.delete(f"/manuals/{manual_id}").json() == {"success": True}
    assert client.get("/manuals").json() == {"manuals": []}
    assert client.delete(f"/manuals/{manual_id}").status_code == 404


def test_chat_accepts_returned_sources_in_history(client: TestClient) -> None:
    client.post("/ingest", json={"url": "https://example.com/printer"})
    question = "How do I reset the printer?"
    first = client.post("/chat", json={"message": question}).json()

    response = client.post(
        "/chat",
        json={
            "message": "And after that?",
            "history": [
                {"role": "user", "content": question},
                {"role": "assistant", "content": first["message"], "sources": first["sources"]},
            ],
        },
    )

    assert response.status_code == 200
    assert response.json()["message"] == "Here is what the manual says."


def test_ingest_looks_up_url_once(test_settings: Settings, embedder: Embedder) -> None:
    class CountingStore(InMemoryVectorStore):
        lookups = 0

        async def get_document_by_url(self, url: str):  # noqa: ANN201
            CountingStore.lookups += 1
            return await super().get_document_by_url(url)

    app.state.services = build_services(
        test_settings,
        store=CountingStore(),
        embedder=embedder,
        responder=RecordingResponder(),
        extractor_factory=_canned,
    )
    try:
        client = TestClient(app)
        client.post("/ingest", json={"url": "https://example.com/printer"})
        second = client.post("/ingest", json={"url": "https://example.com/printer"})
    finally:
        app.state.services = None

    assert second.json()["message"] == "Manual updated"
    assert CountingStore.lookups == 2
