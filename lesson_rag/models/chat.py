"""
Chat domain models and schemas.

Request schema for grounded lesson chat and per-turn state.

Dependencies: pydantic
System role: Chat API contracts
"""

from enum import Enum
from typing import Literal

from pydantic import AliasChoices, BaseModel, ConfigDict, Field


class MessagePart(BaseModel):
    """One part of a UI message; only text parts carry content."""

    model_config = ConfigDict(extra="allow")

    type: str
    text: str | None = None


class ChatMessage(BaseModel):
    """Single message of the conversation as sent by the chat UI."""

    model_config = ConfigDict(extra="allow")

    role: Literal["user", "assistant", "system"]
    content: str | None = None
    parts: list[MessagePart] | None = None

    @property
    def text(self) -> str:
        """Message text: explicit content, else the first text part."""
        if self.content:
            return self.content
        for part in self.parts or []:
            if part.type == "text" and part.text:
                return part.text
        return ""


class ChatRequest(BaseModel):
    """Request schema for a grounded chat turn."""

    model_config = ConfigDict(populate_by_name=True)

    messages: list[ChatMessage] = Field(default_factory=list, description="Conversation so far")
    lesson_id: str | None = Field(
        default=None,
        validation_alias=AliasChoices("lesson_id", "lessonId", "documentId", "document_id"),
        description="Lesson the answer must be grounded in",
    )


class TurnState(str, Enum):
    """Lifecycle of a single chat turn."""

    RECEIVED = "received"
    RETRIEVING = "retrieving"
    CONTEXT_ASSEMBLED = "context_assembled"
    GENERATING = "generating"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
