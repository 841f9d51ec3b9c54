"""Per-turn bridge from model events to center events."""

from __future__ import annotations

import uuid
from typing import Any

from ..events import ObserverBus
from ..types import (
    ModelEvent,
    ModelRequestSending,
    ModelResponseReceived,
    RequestCompleted,
    RequestStarted,
    ToolCallCompleted,
    ToolCallFailed,
    ToolCallStarted,
    ToolExecutionCompleted,
    ToolExecutionStarted,
    Transcript,
)


class RunContext:
    """Correlates request/response and tool start/finish pairs for one turn.

    Tool calls are keyed by their index within the turn; each gets a fresh
    execution id shared by its started and completed events.
    """

    def __init__(
        self,
        bus: ObserverBus,
        agent_id: str,
        session_id: uuid.UUID,
        model_name: str,
    ) -> None:
        self.bus = bus
        self.agent_id = agent_id
        self.session_id = session_id
        self.model_name = model_name
        self._executions: dict[int, str] = {}

    def __call__(self, event: ModelEvent) -> None:
        self.handle(event)

    def handle(self, event: ModelEvent) -> None:
        if isinstance(event, RequestStarted):
            self._emit(ModelRequestSending(
                request_id=event.request_id,
                transcript=Transcript(event.entries),
                message=event.prompt,
                agent_id=self.agent_id,
                model_name=self.model_name,
                tool_count=len(event.tool_names),
                session_id=self.session_id,
            ))
        elif isinstance(event, RequestCompleted):
            self._emit(ModelResponseReceived(
                request_id=event.request_id,
                content=event.content,
                agent_id=self.agent_id,
                session_id=self.session_id,
                duration=event.duration,
                input_tokens=event.usage.input_tokens,
                output_tokens=event.usage.output_tokens,
            ))
        elif isinstance(event, ToolCallStarted):
            execution_id = uuid.uuid4().hex
            self._executions[event.call_index] = execution_id
            self._emit(ToolExecutionStarted(
                tool_name=event.tool_name,
                arguments=event.arguments,
                execution_id=execution_id,
                session_id=self.session_id,
            ))
        elif isinstance(event, (ToolCallCompleted, ToolCallFailed)):
            execution_id = self._executions.pop(event.call_index, None) or uuid.uuid4().hex
            success = isinstance(event, ToolCallCompleted)
            self._emit(ToolExecutionCompleted(
                execution_id=execution_id,
                tool_name=event.tool_name,
                result=event.result if success else str(event.error),
                duration=event.duration,
                success=success,
                session_id=self.session_id,
            ))

    def _emit(self, event: Any) -> None:
        self.bus.emit(event)
