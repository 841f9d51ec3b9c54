"""Turns persisted history into a bounded model transcript."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable

from ..types import (
    Agent,
    ExecutionPolicy,
    Instructions,
    Message,
    Prompt,
    Response,
    Role,
    Run,
    Tool,
    ToolCalls,
    ToolDefinition,
    ToolOutput,
    Transcript,
    TranscriptEntry,
)
from .tokens import estimate_message_tokens

logger = logging.getLogger(__name__)

SUMMARY_PREFIX = "Conversation summary: "


@dataclass
class HistoryWindow:
    kept: list[Message] = field(default_factory=list)
    dropped: list[Message] = field(default_factory=list)
    notes: list[str] = field(default_factory=list)


def flatten(runs: list[Run]) -> list[Message]:
    return [m for run in runs for m in run.messages]


class TranscriptBuilder:
    """Sliding window over replayable history.

    Only user messages and assistant messages with text or tool calls count
    towards the window; tool results are never replayed and system messages
    are folded into the instructions. The message cap is applied first, then
    the token cap, which drops the oldest messages but always keeps the most
    recent one.
    """

    def __init__(self, estimate: Callable[[list[Message]], int] = estimate_message_tokens) -> None:
        self._estimate = estimate

    def window(self, messages: list[Message], policy: ExecutionPolicy) -> HistoryWindow:
        notes: list[str] = []
        for m in messages:
            if m.role == Role.SYSTEM and m.content and m.content not in notes:
                notes.append(m.content)
        kept = [m for m in messages if m.is_replayable]
        dropped: list[Message] = []

        limit = policy.max_history_messages
        if limit is not None and len(kept) > limit:
            cut = len(kept) - limit
            dropped, kept = kept[:cut], kept[cut:]

        budget = policy.max_history_tokens
        if budget is not None:
            while len(kept) > 1 and self._estimate(kept) > budget:
                dropped.append(kept.pop(0))

        if dropped:
            logger.debug("History window dropped %d of %d messages", len(dropped), len(dropped) + len(kept))
        return HistoryWindow(kept=kept, dropped=dropped, notes=notes)

    def build(
        self,
        agent: Agent,
        history: HistoryWindow,
        tools: list[Tool],
        summary: str | None = None,
    ) -> Transcript:
        segments = [agent.instructions]
        segments.extend(n for n in history.notes if n != agent.instructions)
        if summary:
            segments.append(SUMMARY_PREFIX + summary)
        entries: list[TranscriptEntry] = [
            Instructions(segments=segments, tools=[ToolDefinition.of(t) for t in tools])
        ]
        for m in history.kept:
            if m.role == Role.USER:
                entries.append(Prompt(m.content))
            elif m.tool_calls:
                entries.append(ToolCalls(list(m.tool_calls)))
            else:
                entries.append(Response(m.content))
        return Transcript(entries)


def entries_to_messages(entries: list[TranscriptEntry]) -> list[Message]:
    """Convert the entries a model produced during one turn into run messages."""
    messages: list[Message] = []
    for entry in entries:
        if isinstance(entry, Instructions):
            messages.append(Message.system(entry.text))
        elif isinstance(entry, Prompt):
            messages.append(Message.user(entry.text))
        elif isinstance(entry, ToolCalls):
            messages.append(Message.assistant(tool_calls=list(entry.calls)))
        elif isinstance(entry, ToolOutput):
            messages.append(Message.tool(entry.text, entry.tool_call_id, entry.tool_name))
        elif isinstance(entry, Response):
            messages.append(Message.assistant(entry.text))
    return messages
