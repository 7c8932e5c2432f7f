"""FastAPI application exposing manual ingestion and chat as a REST API."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from typing import Any, Literal

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from manual_rag.config import settings
from manual_rag.errors import (
    DependencyError,
    ExtractionError,
    ManualRagError,
    NotFoundError,
    ValidationError,
)
from manual_rag.models import ConversationTurn
from manual_rag.service import Services, build_services

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: dict[type[ManualRagError], int] = {
    ValidationError: 400,
    NotFoundError: 404,
    ExtractionError: 422,
    DependencyError: 502,
}


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    logging.basicConfig(level=settings.log_level)
    # tests (or an embedding process) may install services beforehand
    if getattr(app.state, "services", None) is None:
        app.state.services = build_services(settings)
    yield


app = FastAPI(
    title="Manual RAG API",
    version="0.1.0",
    description="Ingest product manuals and ask questions about them.",
    lifespan=lifespan,
)


def _services(request: Request) -> Services:
    return request.app.state.services


@app.exception_handler(ManualRagError)
async def handle_manual_rag_error(request: Request, exc: ManualRagError) -> JSONResponse:
    status = next(
        (code for cls, code in _STATUS_BY_ERROR.items() if isinstance(exc, cls)),
        500,
    )
    if status >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc, exc_info=exc)
    return JSONResponse(
        status_code=status,
        content={"success": False, "error": str(exc), "partial": exc.changed},
    )


# ── Request / Response schemas ────────────────────────────────────────
class IngestRequest(BaseModel):
    """Manual to ingest."""

    url: str
    title: str | None = None


class IngestResponse(BaseModel):
    success: bool
    manual: dict[str, Any]
    message: str


class HistoryTurn(BaseModel):
    """One turn of caller-held history, as previously returned by ``/chat``.

    Sources echoed back by the client are accepted in their public shape
    and ignored; only role and content reach the model.
    """

    role: Literal["user", "assistant"]
    content: str
    sources: list[dict[str, Any]] = []
    timestamp: str | None = None

    def to_turn(self) -> ConversationTurn:
        return ConversationTurn(role=self.role, content=self.content)


class ChatRequest(BaseModel):
    """Incoming question plus the caller-held history."""

    message: str
    history: list[HistoryTurn] = []


class ChatResponse(BaseModel):
    message: str
    sources: list[dict[str, Any]] = []


# ── Routes ────────────────────────────────────────────────────────────
@app.get("/health")
async def health() -> dict[str, str]:
    """Liveness probe."""
    return {"status": "ok"}


@app.post("/ingest", response_model=IngestResponse)
async def ingest(body: IngestRequest, request: Request) -> IngestResponse:
    """Ingest (or re-ingest) a manual by URL."""
    result = await _services(request).ingestion.ingest(body.url, body.title)
    message = "Manual ingested" if result.created else "Manual updated"
    return IngestResponse(success=True, manual=result.manual.to_public(), message=message)


@app.post("/chat", response_model=ChatResponse)
async def chat(body: ChatRequest, request: Request) -> ChatResponse:
    """Answer a question grounded on the ingested manuals."""
    history = [turn.to_turn() for turn in body.history]
    answer = await _services(request).answering.answer(body.message, history)
    return ChatResponse(message=answer.text, sources=[s.to_public() for s in answer.sources])


@app.get("/manuals")
async def list_manuals(request: Request) -> dict[str, list[dict[str, Any]]]:
    """All manuals, newest first."""
    manuals = await _services(request).ingestion.list_documents()
    return {"manuals": [m.to_public() for m in manuals]}


@app.delete("/manuals/{manual_id}")
async def delete_manual(manual_id: str, request: Request) -> dict[str, bool]:
    """Delete a manual and all of its chunks."""
    await _services(request).ingestion.delete(manual_id)
    return {"success": True}
