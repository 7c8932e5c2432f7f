"""Answer generation over a LangChain chat model."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from manual_rag.chat.prompts import build_answer_prompt
from manual_rag.errors import DependencyError

if TYPE_CHECKING:
    from langchain_core.language_models.chat_models import BaseChatModel

    from manual_rag.models import ConversationTurn

logger = logging.getLogger(__name__)

NO_ANSWER = "Could not generate an answer."


class Responder:
    """Turn ``(query, context, history)`` into answer text."""

    def __init__(self, llm: BaseChatModel) -> None:
        self._llm = llm

    async def complete(
        self,
        query: str,
        context: str,
        history: Sequence[ConversationTurn] = (),
    ) -> str:
        messages = build_answer_prompt(query, context, history)
        try:
            response = await self._llm.ainvoke(messages)
        except Exception as exc:
            logger.warning("Chat completion failed", exc_info=True)
            raise DependencyError(f"Answer generation failed: {exc}") from exc

        content = response.content if isinstance(response.content, str) else ""
        return content or NO_ANSWER
