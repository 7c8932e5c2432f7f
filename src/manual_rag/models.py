"""Domain models for manuals, chunks, retrieved sources, and conversations."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Literal
from uuid import uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _new_id() -> str:
    return uuid4().hex


class SourceKind(str, Enum):
    """Kind of source a manual was ingested from."""

    PDF = "pdf"
    WEB = "web"

    @classmethod
    def from_url(cls, url: str) -> SourceKind:
        """Classify *url* once: ``.pdf`` suffix means PDF, anything else is a web page."""
        if url.lower().endswith(".pdf"):
            return cls.PDF
        return cls.WEB


class ManualDocument(BaseModel):
    """A single ingested manual.

    Attributes
    ----------
    id:
        Opaque identifier.
    url:
        Source URL; unique across all manuals.
    title:
        Display title.
    kind:
        Whether the manual came from a PDF or a web page.
    created_at:
        UTC timestamp of the first successful ingestion.
    chunk_count:
        Number of chunks stored for the manual.
    """

    id: str = Field(default_factory=_new_id)
    url: str
    title: str
    kind: SourceKind
    created_at: datetime = Field(default_factory=_utcnow)
    chunk_count: int = 0

    def to_public(self) -> dict[str, object]:
        """Shape used by the HTTP API (``kind`` is exposed as ``type``)."""
        return {
            "id": self.id,
            "title": self.title,
            "url": self.url,
            "type": self.kind.value,
            "created_at": self.created_at.isoformat(),
            "chunk_count": self.chunk_count,
        }


class IngestResult(BaseModel):
    """Outcome of one ingestion: the stored manual and whether it is new."""

    manual: ManualDocument
    created: bool


class Chunk(BaseModel):
    """An embedded slice of a manual's text."""

    id: str = Field(default_factory=_new_id)
    document_id: str
    chunk_index: int
    content: str
    embedding: list[float]


class SearchHit(BaseModel):
    """Raw result of a vector-store similarity search."""

    chunk_id: str
    document_id: str
    content: str
    score: float


class RetrievedSource(BaseModel):
    """A chunk selected to ground an answer, with display metadata.

    ``content`` holds the full chunk text used for context assembly;
    ``preview`` is the truncated form shown to users.
    """

    document_id: str
    document_title: str
    content: str
    preview: str
    score: float

    def to_public(self) -> dict[str, object]:
        """Shape used by the HTTP API."""
        return {
            "manual_id": self.document_id,
            "manual_title": self.document_title,
            "chunk_content": self.preview,
            "similarity": self.score,
        }


class ConversationTurn(BaseModel):
    """One message of the caller-held chat history."""

    role: Literal["user", "assistant"]
    content: str
    sources: list[RetrievedSource] = Field(default_factory=list)
    timestamp: datetime = Field(default_factory=_utcnow)


class Answer(BaseModel):
    """Generated answer together with the sources shown to the user."""

    text: str
    sources: list[RetrievedSource] = Field(default_factory=list)
