"""OpenAI-compatible chat completions model."""

from __future__ import annotations

from collections.abc import AsyncGenerator
from typing import Any

import openai
from openai import AsyncOpenAI

from ..errors import ModelError
from ..types import (
    Completion,
    CompletionChunk,
    GenerationOptions,
    Instructions,
    Prompt,
    Response,
    TokenUsage,
    Tool,
    ToolCall,
    ToolCalls,
    ToolOutput,
    Transcript,
)
from .base import ToolLoopModel


def transcript_to_messages(transcript: Transcript) -> list[dict[str, Any]]:
    entries = list(transcript)
    messages: list[dict[str, Any]] = []
    for i, entry in enumerate(entries):
        if isinstance(entry, Instructions):
            if entry.text:
                messages.append({"role": "system", "content": entry.text})
        elif isinstance(entry, Prompt):
            messages.append({"role": "user", "content": entry.text})
        elif isinstance(entry, ToolCalls) and not (
            i + 1 < len(entries) and isinstance(entries[i + 1], ToolOutput)
        ):
            # Replayed history carries no tool results; the API rejects unanswered calls.
            messages.append({"role": "assistant", "content": f"Called tools: {entry.text}"})
        elif isinstance(entry, ToolCalls):
            messages.append({
                "role": "assistant",
                "content": None,
                "tool_calls": [
                    {
                        "id": c.id,
                        "type": "function",
                        "function": {"name": c.name, "arguments": c.arguments},
                    }
                    for c in entry.calls
                ],
            })
        elif isinstance(entry, ToolOutput):
            messages.append({"role": "tool", "tool_call_id": entry.tool_call_id, "content": entry.text})
        elif isinstance(entry, Response):
            messages.append({"role": "assistant", "content": entry.text})
    return messages


def tools_to_dicts(tools: list[Tool]) -> list[dict[str, Any]]:
    return [
        {
            "type": "function",
            "function": {
                "name": t.name,
                "description": t.description,
                "parameters": t.parameters_schema(),
            },
        }
        for t in tools
    ]


def _usage(raw: Any) -> TokenUsage:
    if raw is None:
        return TokenUsage()
    details = getattr(raw, "prompt_tokens_details", None)
    return TokenUsage(
        input_tokens=raw.prompt_tokens or 0,
        output_tokens=raw.completion_tokens or 0,
        cached_tokens=(getattr(details, "cached_tokens", 0) or 0) if details else 0,
    )


class OpenAIChatModel(ToolLoopModel):
    def __init__(
        self,
        name: str,
        model: str,
        api_key: str | None = None,
        base_url: str | None = None,
        client: AsyncOpenAI | None = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(name, **kwargs)
        self.model = model
        self._client = client or AsyncOpenAI(api_key=api_key, base_url=base_url)

    def _request(
        self, transcript: Transcript, tools: list[Tool], options: GenerationOptions
    ) -> dict[str, Any]:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": transcript_to_messages(transcript),
        }
        if options.temperature is not None:
            kwargs["temperature"] = options.temperature
        if options.max_tokens is not None:
            kwargs["max_tokens"] = options.max_tokens
        if tools:
            kwargs["tools"] = tools_to_dicts(tools)
        if options.response_schema is not None:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {"name": "response", "schema": options.response_schema},
            }
        return kwargs

    async def _complete(
        self, transcript: Transcript, tools: list[Tool], options: GenerationOptions
    ) -> Completion:
        try:
            resp = await self._client.chat.completions.create(**self._request(transcript, tools, options))
        except openai.APIError as e:
            raise ModelError(self.name, str(e), getattr(e, "status_code", None), e) from e
        choice = resp.choices[0]
        calls = [
            ToolCall(id=tc.id, name=tc.function.name, arguments=tc.function.arguments or "{}")
            for tc in choice.message.tool_calls or []
        ]
        return Completion(content=choice.message.content or "", tool_calls=calls, usage=_usage(resp.usage))

    async def _stream_completion(
        self, transcript: Transcript, tools: list[Tool], options: GenerationOptions
    ) -> AsyncGenerator[CompletionChunk, None]:
        kwargs = self._request(transcript, tools, options)
        kwargs["stream"] = True
        kwargs["stream_options"] = {"include_usage": True}
        buffers: dict[int, dict[str, str]] = {}
        try:
            resp = await self._client.chat.completions.create(**kwargs)
            async for chunk in resp:
                if chunk.usage is not None:
                    yield CompletionChunk(usage=_usage(chunk.usage))
                if not chunk.choices:
                    continue
                delta = chunk.choices[0].delta
                if delta and delta.content:
                    yield CompletionChunk(text=delta.content)
                for tc in (delta.tool_calls if delta else None) or []:
                    buf = buffers.setdefault(tc.index, {"id": "", "name": "", "args": ""})
                    if tc.id:
                        buf["id"] = tc.id
                    if tc.function and tc.function.name:
                        buf["name"] = tc.function.name
                    if tc.function and tc.function.arguments:
                        buf["args"] += tc.function.arguments
        except openai.APIError as e:
            raise ModelError(self.name, str(e), getattr(e, "status_code", None), e) from e
        for index in sorted(buffers):
            buf = buffers[index]
            yield CompletionChunk(tool_call=ToolCall(id=buf["id"], name=buf["name"], arguments=buf["args"] or "{}"))
