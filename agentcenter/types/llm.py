"""Language model types."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable

from .messages import ToolCall
from .transcript import TranscriptEntry


@dataclass
class TokenUsage:
    input_tokens: int = 0
    output_tokens: int = 0
    cached_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def __add__(self, other: TokenUsage) -> TokenUsage:
        return TokenUsage(
            input_tokens=self.input_tokens + other.input_tokens,
            output_tokens=self.output_tokens + other.output_tokens,
            cached_tokens=self.cached_tokens + other.cached_tokens,
        )


@dataclass
class Completion:
    """One raw model round: text and/or tool calls."""

    content: str = ""
    tool_calls: list[ToolCall] = field(default_factory=list)
    usage: TokenUsage = field(default_factory=TokenUsage)


@dataclass
class CompletionChunk:
    text: str | None = None
    tool_call: ToolCall | None = None
    usage: TokenUsage | None = None


@dataclass
class ModelResponse:
    """Result of a full model interaction, tool rounds included."""

    content: str
    entries: list[TranscriptEntry] = field(default_factory=list)
    usage: TokenUsage = field(default_factory=TokenUsage)


@dataclass
class StreamChunk:
    text: str | None = None
    response: ModelResponse | None = None


# -- Events reported by a model while it works --


@dataclass
class RequestStarted:
    request_id: str
    entries: list[TranscriptEntry]
    prompt: str
    tool_names: list[str]
    type: str = "request_started"


@dataclass
class RequestCompleted:
    request_id: str
    content: str
    duration: float
    usage: TokenUsage = field(default_factory=TokenUsage)
    type: str = "request_completed"


@dataclass
class ToolCallStarted:
    call_index: int
    tool_name: str
    arguments: str
    type: str = "tool_call_started"


@dataclass
class ToolCallCompleted:
    call_index: int
    tool_name: str
    result: str
    duration: float
    type: str = "tool_call_completed"


@dataclass
class ToolCallFailed:
    call_index: int
    tool_name: str
    error: Exception
    duration: float
    type: str = "tool_call_failed"


ModelEvent = RequestStarted | RequestCompleted | ToolCallStarted | ToolCallCompleted | ToolCallFailed

ModelEventHandler = Callable[[ModelEvent], Any]
