"""
Chat — grounded question answering over ingested manuals.

Public API
----------
- :class:`AnsweringOrchestrator` — retrieve, assemble context, respond.
- :class:`Responder` — chat-model wrapper.
"""

from manual_rag.chat.orchestrator import AnsweringOrchestrator
from manual_rag.chat.responder import Responder

__all__ = ["AnsweringOrchestrator", "Responder"]
