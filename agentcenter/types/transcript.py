"""Transcript entries: the structured input handed to a language model."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Iterator

from .messages import ToolCall
from .tools import ToolDefinition


@dataclass
class Instructions:
    segments: list[str] = field(default_factory=list)
    tools: list[ToolDefinition] = field(default_factory=list)
    kind: str = "instructions"

    @property
    def text(self) -> str:
        return "\n\n".join(s for s in self.segments if s)


@dataclass
class Prompt:
    text: str
    kind: str = "prompt"


@dataclass
class ToolCalls:
    calls: list[ToolCall] = field(default_factory=list)
    kind: str = "tool_calls"

    @property
    def text(self) -> str:
        return "\n".join(f"{c.name}({c.arguments})" for c in self.calls)


@dataclass
class ToolOutput:
    tool_call_id: str
    tool_name: str
    text: str
    kind: str = "tool_output"


@dataclass
class Response:
    text: str
    kind: str = "response"


TranscriptEntry = Instructions | Prompt | ToolCalls | ToolOutput | Response


class Transcript:
    """Ordered, append-only sequence of transcript entries."""

    def __init__(self, entries: Iterable[TranscriptEntry] = ()) -> None:
        self._entries: list[TranscriptEntry] = list(entries)

    def append(self, entry: TranscriptEntry) -> None:
        self._entries.append(entry)

    def extend(self, entries: Iterable[TranscriptEntry]) -> None:
        self._entries.extend(entries)

    def copy(self) -> Transcript:
        return Transcript(self._entries)

    @property
    def entries(self) -> list[TranscriptEntry]:
        return list(self._entries)

    @property
    def instructions(self) -> Instructions | None:
        for e in self._entries:
            if isinstance(e, Instructions):
                return e
        return None

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TranscriptEntry]:
        return iter(self._entries)

    def __getitem__(self, index: int) -> TranscriptEntry:
        return self._entries[index]

    def __add__(self, other: Iterable[TranscriptEntry]) -> Transcript:
        return Transcript([*self._entries, *other])

    def __repr__(self) -> str:
        kinds = ", ".join(e.kind for e in self._entries)
        return f"Transcript([{kinds}])"
