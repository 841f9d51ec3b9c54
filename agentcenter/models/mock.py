"""
Scripted model for tests and demos.

Each model round consumes the next step of the script:

* ``str``: a final text response
* ``list[str]``: a final text response streamed as these deltas
* ``Completion``: returned as-is (use it for tool calls)
* ``Exception``: raised from the round
* a callable ``(transcript, tools, options) -> step``: evaluated, sync or async

When the script runs out the model answers ``"Mock response to: <prompt>"``.
"""

from __future__ import annotations

import asyncio
import inspect
from collections import deque
from collections.abc import AsyncGenerator
from typing import Any, Callable, Iterable, Union

from ..types import (
    Completion,
    CompletionChunk,
    GenerationOptions,
    Prompt,
    TokenUsage,
    Tool,
    Transcript,
)
from ..transcript.tokens import estimate_tokens, estimate_transcript_tokens
from .base import ToolLoopModel

Step = Union[str, list, Completion, Exception, Callable[..., Any]]


class ScriptedModel(ToolLoopModel):
    def __init__(
        self,
        name: str = "mock",
        script: Iterable[Step] = (),
        delay: float = 0.0,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, **kwargs)
        self.script: deque[Step] = deque(script)
        self.delay = delay
        self.requests: list[Transcript] = []
        self.options: list[GenerationOptions] = []
        self.offered_tools: list[list[str]] = []

    @property
    def call_count(self) -> int:
        return len(self.requests)

    def add(self, *steps: Step) -> None:
        self.script.extend(steps)

    async def _next(
        self, transcript: Transcript, tools: list[Tool], options: GenerationOptions
    ) -> tuple[Completion, list[str]]:
        self.requests.append(transcript)
        self.options.append(options)
        self.offered_tools.append([t.name for t in tools])
        if self.delay:
            await asyncio.sleep(self.delay)

        step: Any = self.script.popleft() if self.script else None
        if callable(step) and not isinstance(step, Exception):
            step = step(transcript, tools, options)
            if inspect.isawaitable(step):
                step = await step
        if step is None:
            last = next((e for e in reversed(list(transcript)) if isinstance(e, Prompt)), None)
            step = f"Mock response to: {last.text if last else ''}"
        if isinstance(step, Exception):
            raise step

        chunks: list[str] = []
        if isinstance(step, list):
            chunks = [str(s) for s in step]
            step = Completion(content="".join(chunks))
        elif isinstance(step, str):
            chunks = [step] if step else []
            step = Completion(content=step)
        elif step.content:
            chunks = [step.content]
        if step.usage == TokenUsage():
            step.usage = TokenUsage(
                input_tokens=estimate_transcript_tokens(transcript),
                output_tokens=estimate_tokens(step.content),
            )
        return step, chunks

    async def _complete(
        self, transcript: Transcript, tools: list[Tool], options: GenerationOptions
    ) -> Completion:
        completion, _ = await self._next(transcript, tools, options)
        return completion

    async def _stream_completion(
        self, transcript: Transcript, tools: list[Tool], options: GenerationOptions
    ) -> AsyncGenerator[CompletionChunk, None]:
        completion, chunks = await self._next(transcript, tools, options)
        for text in chunks:
            if self.delay:
                await asyncio.sleep(self.delay)
            yield CompletionChunk(text=text)
        for call in completion.tool_calls:
            yield CompletionChunk(tool_call=call)
        yield CompletionChunk(usage=completion.usage)
