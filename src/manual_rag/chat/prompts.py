"""Prompt templates for manual question answering."""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING

from langchain_core.messages import AIMessage, HumanMessage, SystemMessage

if TYPE_CHECKING:
    from langchain_core.messages import BaseMessage

    from manual_rag.models import ConversationTurn, RetrievedSource

CONTEXT_SEPARATOR = "\n\n---\n\n"

SYSTEM_PROMPT = """\
You are an assistant that answers questions about product manuals.
Use the context below to answer the user's question accurately and politely.

Context:
{context}

Guidelines:
- Base your answer on the context.
- If the context does not contain the information, say that you could not
  find relevant information in the registered manuals.
- Explain technical content in plain language.
- Use bullet points where they help.
"""


def build_context(sources: Sequence[RetrievedSource]) -> str:
    """Join the full text of *sources* into one context blob."""
    return CONTEXT_SEPARATOR.join(s.content for s in sources)


def build_answer_prompt(
    query: str,
    context: str,
    history: Sequence[ConversationTurn] = (),
) -> list[BaseMessage]:
    """Assemble system prompt, prior turns, and the new question.

    Parameters
    ----------
    query:
        The user's question.
    context:
        Retrieved manual text; may be empty.
    history:
        Earlier turns, oldest first.
    """
    messages: list[BaseMessage] = [SystemMessage(content=SYSTEM_PROMPT.format(context=context))]
    for turn in history:
        if turn.role == "user":
            messages.append(HumanMessage(content=turn.content))
        else:
            messages.append(AIMessage(content=turn.content))
    messages.append(HumanMessage(content=query))
    return messages
