"""Language model contract and the shared tool-calling loop."""

from __future__ import annotations

import json
import logging
import time
import uuid
from collections.abc import AsyncGenerator, AsyncIterator
from typing import Protocol, runtime_checkable

from ..errors import ModelError, ToolExecutionError
from ..types import (
    Completion,
    CompletionChunk,
    GenerationOptions,
    ModelEvent,
    ModelEventHandler,
    ModelResponse,
    Prompt,
    RequestCompleted,
    RequestStarted,
    Response,
    StreamChunk,
    TokenUsage,
    Tool,
    ToolCall,
    ToolCallCompleted,
    ToolCallFailed,
    ToolCalls,
    ToolCallStarted,
    ToolOutput,
    Transcript,
    TranscriptEntry,
)

logger = logging.getLogger(__name__)


@runtime_checkable
class LanguageModel(Protocol):
    name: str

    async def respond(
        self,
        transcript: Transcript,
        prompt: str,
        tools: list[Tool],
        options: GenerationOptions,
        on_event: ModelEventHandler | None = None,
    ) -> ModelResponse: ...

    def stream(
        self,
        transcript: Transcript,
        prompt: str,
        tools: list[Tool],
        options: GenerationOptions,
        on_event: ModelEventHandler | None = None,
    ) -> AsyncIterator[StreamChunk]: ...


class ToolLoopModel:
    """Abstract base: drives the tool-calling loop. Subclass and implement _complete/_stream_completion.

    Each round sends the transcript plus everything produced so far in this
    turn. Tool calls are executed in order and their outputs appended; the
    loop ends at the first round without tool calls. Once ``max_tool_calls``
    is spent, tools are no longer offered and any further calls receive an
    error output instead of running.
    """

    def __init__(self, name: str, max_rounds: int = 16) -> None:
        self.name = name
        self.max_rounds = max_rounds

    async def respond(
        self,
        transcript: Transcript,
        prompt: str,
        tools: list[Tool],
        options: GenerationOptions,
        on_event: ModelEventHandler | None = None,
    ) -> ModelResponse:
        response: ModelResponse | None = None
        async for chunk in self._loop(transcript, prompt, tools, options, on_event, streaming=False):
            if chunk.response is not None:
                response = chunk.response
        assert response is not None
        return response

    def stream(
        self,
        transcript: Transcript,
        prompt: str,
        tools: list[Tool],
        options: GenerationOptions,
        on_event: ModelEventHandler | None = None,
    ) -> AsyncIterator[StreamChunk]:
        return self._loop(transcript, prompt, tools, options, on_event, streaming=True)

    # -- Override these --

    async def _complete(
        self, transcript: Transcript, tools: list[Tool], options: GenerationOptions
    ) -> Completion:
        raise NotImplementedError

    async def _stream_completion(
        self, transcript: Transcript, tools: list[Tool], options: GenerationOptions
    ) -> AsyncGenerator[CompletionChunk, None]:
        completion = await self._complete(transcript, tools, options)
        if completion.content:
            yield CompletionChunk(text=completion.content)
        for call in completion.tool_calls:
            yield CompletionChunk(tool_call=call)
        yield CompletionChunk(usage=completion.usage)

    # -- Internals --

    async def _loop(
        self,
        transcript: Transcript,
        prompt: str,
        tools: list[Tool],
        options: GenerationOptions,
        on_event: ModelEventHandler | None,
        streaming: bool,
    ) -> AsyncGenerator[StreamChunk, None]:
        entries: list[TranscriptEntry] = [Prompt(prompt)]
        by_name = {t.name: t for t in tools}
        usage = TokenUsage()
        calls_made = 0

        for _ in range(self.max_rounds):
            limit = options.max_tool_calls
            offered = tools if limit is None or calls_made < limit else []
            working = transcript + entries
            request_id = uuid.uuid4().hex
            _emit(on_event, RequestStarted(
                request_id=request_id,
                entries=working.entries,
                prompt=prompt,
                tool_names=[t.name for t in offered],
            ))
            started = time.monotonic()

            text_parts: list[str] = []
            calls: list[ToolCall] = []
            round_usage = TokenUsage()
            if streaming:
                async for piece in self._stream_completion(working, offered, options):
                    if piece.text:
                        text_parts.append(piece.text)
                        yield StreamChunk(text=piece.text)
                    if piece.tool_call is not None:
                        calls.append(piece.tool_call)
                    if piece.usage is not None:
                        round_usage = piece.usage
            else:
                completion = await self._complete(working, offered, options)
                text_parts.append(completion.content)
                calls.extend(completion.tool_calls)
                round_usage = completion.usage

            text = "".join(text_parts)
            usage = usage + round_usage
            _emit(on_event, RequestCompleted(
                request_id=request_id,
                content=text,
                duration=time.monotonic() - started,
                usage=round_usage,
            ))

            if not calls:
                entries.append(Response(text))
                yield StreamChunk(response=ModelResponse(content=text, entries=entries, usage=usage))
                return

            entries.append(ToolCalls(calls))
            for call in calls:
                if limit is not None and calls_made >= limit:
                    output = json.dumps({"error": f"Tool call limit of {limit} reached"})
                else:
                    output = await self._invoke(call, calls_made, by_name, on_event)
                    calls_made += 1
                entries.append(ToolOutput(tool_call_id=call.id, tool_name=call.name, text=output))

        raise ModelError(self.name, f"No final response after {self.max_rounds} rounds")

    async def _invoke(
        self,
        call: ToolCall,
        index: int,
        tools: dict[str, Tool],
        on_event: ModelEventHandler | None,
    ) -> str:
        _emit(on_event, ToolCallStarted(call_index=index, tool_name=call.name, arguments=call.arguments))
        started = time.monotonic()
        tool = tools.get(call.name)
        try:
            if tool is None:
                raise ToolExecutionError(call.name, f"Tool '{call.name}' not found")
            result = await tool.call(call.arguments)
        except Exception as e:
            logger.warning("Tool %s failed: %s", call.name, e)
            _emit(on_event, ToolCallFailed(
                call_index=index, tool_name=call.name, error=e, duration=time.monotonic() - started
            ))
            return json.dumps({"error": str(e)})
        _emit(on_event, ToolCallCompleted(
            call_index=index, tool_name=call.name, result=result, duration=time.monotonic() - started
        ))
        return result


def _emit(handler: ModelEventHandler | None, event: ModelEvent) -> None:
    if handler is not None:
        handler(event)
