"""Answering — retrieve grounding chunks, then ask the chat model."""

from __future__ import annotations

import logging
from collections.abc import Sequence

from manual_rag.chat.prompts import build_context
from manual_rag.chat.responder import Responder
from manual_rag.errors import ValidationError
from manual_rag.models import Answer, ConversationTurn
from manual_rag.retrieval.retriever import DEFAULT_K, DISPLAY_SOURCES, Retriever, display_sources

logger = logging.getLogger(__name__)


class AnsweringOrchestrator:
    """Answer questions grounded on stored manuals.

    Retrieval is deliberately broader (*k*) than what is shown to the
    user (*display_limit*). Context size is bounded only by *k*.
    """

    def __init__(
        self,
        retriever: Retriever,
        responder: Responder,
        *,
        k: int = DEFAULT_K,
        display_limit: int = DISPLAY_SOURCES,
    ) -> None:
        self._retriever = retriever
        self._responder = responder
        self.k = k
        self.display_limit = display_limit

    async def answer(self, query: str, history: Sequence[ConversationTurn] = ()) -> Answer:
        if not query or not query.strip():
            raise ValidationError("Message is required")

        sources = await self._retriever.retrieve(query, k=self.k)
        context = build_context(sources)
        if not sources:
            logger.info("No relevant chunks found; answering without context")

        # the responder is always called, even with an empty context
        text = await self._responder.complete(query, context, history)
        return Answer(text=text, sources=display_sources(sources, self.display_limit))
