"""Grounding prompt construction for lesson chat."""

from lesson_rag.core.grounding.prompt import (
    LESSON_CHAT_PROMPT,
    build_context_block,
    build_grounded_messages,
)

__all__ = ["LESSON_CHAT_PROMPT", "build_context_block", "build_grounded_messages"]
