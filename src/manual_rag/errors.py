"""Exception hierarchy shared by the ingestion and answering flows.

Every error carries a ``changed`` flag so that callers can tell
"nothing was modified" apart from "storage was partially updated".
"""

from __future__ import annotations


class ManualRagError(Exception):
    """Base class for all errors raised by :mod:`manual_rag`."""

    changed: bool = False


class ValidationError(ManualRagError):
    """Malformed input (bad URL, empty message), rejected before any I/O."""


class NotFoundError(ManualRagError):
    """The requested manual does not exist."""


class ExtractionError(ManualRagError):
    """The source could not be fetched or yielded no usable text."""


class DependencyError(ManualRagError):
    """An external collaborator (embedder, chat model, vector store) failed."""


class PartialWriteError(DependencyError):
    """Ingestion failed after storage had already been modified.

    The manual is left with a truncated (possibly empty) chunk set.
    Nothing is rolled back.
    """

    changed = True

    def __init__(self, message: str, *, document_id: str, chunks_written: int) -> None:
        super().__init__(message)
        self.document_id = document_id
        self.chunks_written = chunks_written
