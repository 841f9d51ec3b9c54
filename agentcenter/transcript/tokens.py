"""Token estimation helpers."""

from __future__ import annotations

from ..types import Message, Transcript


def estimate_tokens(text: str) -> int:
    """Rough token estimate (~4 chars per token)."""
    return len(text) // 4 + 1


def message_text(message: Message) -> str:
    parts = [message.content]
    parts.extend(f"{c.name}({c.arguments})" for c in message.tool_calls)
    return "\n".join(p for p in parts if p)


def estimate_message_tokens(messages: list[Message]) -> int:
    return sum(estimate_tokens(message_text(m)) for m in messages)


def estimate_transcript_tokens(transcript: Transcript) -> int:
    return sum(estimate_tokens(e.text) for e in transcript)
