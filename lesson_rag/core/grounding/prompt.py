"""
Lesson chat system prompt.

Defines the prompt template that binds the assistant to one lesson's title
and retrieved context, and converts the chat UI's message history into
LangChain messages.

Dependencies: langchain_core.prompts, langchain_core.messages
System role: Prompt template for grounded lesson chat
"""

from collections.abc import Sequence

from langchain_core.messages import AIMessage, BaseMessage, HumanMessage
from langchain_core.prompts import ChatPromptTemplate, MessagesPlaceholder

from lesson_rag.models.chat import ChatMessage
from lesson_rag.models.chunk import SearchHit

CONTEXT_SEPARATOR = "\n\n"

SYSTEM_PROMPT = """You are a helpful assistant helping beneficiaries understand lessons.
You are currently helping with the lesson: "{lesson_title}"

Use the following context from the lesson to answer questions:
{context}

Answer questions in a clear, simple, and helpful way. Answer ONLY from the context above.
If the answer isn't in the context, say so politely.
Always identify and respond in the same language as the question. Also reason in the same language as the question."""

LESSON_CHAT_PROMPT = ChatPromptTemplate.from_messages([
    ("system", SYSTEM_PROMPT),
    MessagesPlaceholder("history"),
])


def build_context_block(hits: Sequence[SearchHit]) -> str:
    """
    Concatenate retrieved chunk texts in ranked order.

    Args:
        hits: Search hits, most similar first

    Returns:
        str: Context block for the system prompt
    """
    return CONTEXT_SEPARATOR.join(hit.text for hit in hits)


def to_langchain_messages(messages: Sequence[ChatMessage]) -> list[BaseMessage]:
    """
    Convert chat UI messages into LangChain messages.

    System messages from the client are dropped; the grounding prompt is
    the only system instruction. Empty messages are skipped.
    """
    converted: list[BaseMessage] = []
    for message in messages:
        text = message.text
        if not text:
            continue
        if message.role == "user":
            converted.append(HumanMessage(content=text))
        elif message.role == "assistant":
            converted.append(AIMessage(content=text))
    return converted


def build_grounded_messages(
    lesson_title: str,
    hits: Sequence[SearchHit],
    messages: Sequence[ChatMessage],
) -> list[BaseMessage]:
    """
    Render the full message list sent to the generation model.

    Args:
        lesson_title: Title of the lesson being discussed
        hits: Retrieved chunks, most similar first
        messages: Conversation so far, ending with the user's question

    Returns:
        list[BaseMessage]: System prompt followed by the conversation
    """
    return LESSON_CHAT_PROMPT.invoke({
        "lesson_title": lesson_title,
        "context": build_context_block(hits),
        "history": to_langchain_messages(messages),
    }).to_messages()
