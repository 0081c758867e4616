"""LLM provider abstraction using LangChain."""

from __future__ import annotations

import enum

from langchain_core.messages import AIMessage, BaseMessage


class ProviderType(enum.Enum):
    """Supported LLM providers."""

    OpenAI = "openai"
    Anthropic = "anthropic"
    Google = "google"


def message_text(message: BaseMessage | str) -> str:
    """Flatten a chat model reply into plain text.

    Providers return either a string or a list of content blocks; text
    blocks are concatenated in order and anything else is ignored.
    """
    if isinstance(message, str):
        return message
    content = message.content
    if isinstance(content, str):
        return content
    parts: list[str] = []
    for block in content:
        if isinstance(block, str):
            parts.append(block)
        elif isinstance(block, dict) and block.get("type") == "text":
            parts.append(str(block.get("text", "")))
    return "".join(parts)


__all__ = ["AIMessage", "ProviderType", "message_text"]
