"""Center events: the observable record of everything the engine does."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .agent import Agent
from .messages import utcnow
from .run import Run
from .session import AgentSessionContext
from .transcript import Transcript


@dataclass
class _Event:
    timestamp: datetime = field(default_factory=utcnow, kw_only=True)

    @property
    def description(self) -> str:
        raise NotImplementedError


@dataclass
class ExecutionStarted(_Event):
    agent: Agent
    session: AgentSessionContext
    type: str = "execution_started"

    @property
    def description(self) -> str:
        return f"Agent '{self.agent.name}' started in session {self.session.session_id}"


@dataclass
class ExecutionCompleted(_Event):
    run: Run
    type: str = "execution_completed"

    @property
    def description(self) -> str:
        return f"Run {self.run.id} completed for agent '{self.run.agent_id}'"


@dataclass
class ExecutionFailed(_Event):
    session: AgentSessionContext
    error: Exception
    type: str = "execution_failed"

    @property
    def description(self) -> str:
        return f"Execution failed in session {self.session.session_id}: {self.error}"


@dataclass
class McpServerDiscoveryStarted(_Event):
    server_names: list[str]
    type: str = "mcp_server_discovery_started"

    @property
    def description(self) -> str:
        return f"Discovering MCP servers: {', '.join(self.server_names)}"


@dataclass
class McpServerDiscovered(_Event):
    server_name: str
    tool_names: list[str]
    type: str = "mcp_server_discovered"

    @property
    def description(self) -> str:
        return f"MCP server '{self.server_name}' provides {len(self.tool_names)} tools"


@dataclass
class McpServerDiscoveryFailed(_Event):
    server_name: str
    error: Exception
    type: str = "mcp_server_discovery_failed"

    @property
    def description(self) -> str:
        return f"MCP server '{self.server_name}' discovery failed: {self.error}"


@dataclass
class TranscriptBuildStarted(_Event):
    agent_id: str
    previous_run_count: int
    type: str = "transcript_build_started"

    @property
    def description(self) -> str:
        return f"Building transcript for '{self.agent_id}' from {self.previous_run_count} runs"


@dataclass
class TranscriptBuilt(_Event):
    transcript: Transcript
    agent_id: str
    tool_count: int
    type: str = "transcript_built"

    @property
    def description(self) -> str:
        return f"Transcript built with {len(self.transcript)} entries and {self.tool_count} tools"


@dataclass
class ModelRequestSending(_Event):
    request_id: str
    transcript: Transcript
    message: str
    agent_id: str
    model_name: str
    tool_count: int
    session_id: Any = None
    type: str = "model_request_sending"

    @property
    def description(self) -> str:
        return f"Sending request {self.request_id[:8]} to '{self.model_name}'"


@dataclass
class ModelResponseReceived(_Event):
    request_id: str
    content: str
    agent_id: str
    session_id: Any
    duration: float
    input_tokens: int = 0
    output_tokens: int = 0
    type: str = "model_response_received"

    @property
    def description(self) -> str:
        return (
            f"Response {self.request_id[:8]} received in {self.duration:.2f}s "
            f"({self.input_tokens} in / {self.output_tokens} out)"
        )


@dataclass
class ToolExecutionStarted(_Event):
    tool_name: str
    arguments: str
    execution_id: str
    session_id: Any = None
    type: str = "tool_execution_started"

    @property
    def description(self) -> str:
        return f"Calling tool '{self.tool_name}'"


@dataclass
class ToolExecutionCompleted(_Event):
    execution_id: str
    tool_name: str
    result: str
    duration: float
    success: bool
    session_id: Any = None
    type: str = "tool_execution_completed"

    @property
    def description(self) -> str:
        status = "succeeded" if self.success else "failed"
        return f"Tool '{self.tool_name}' {status} in {self.duration:.2f}s"


@dataclass
class SessionCreated(_Event):
    session: AgentSessionContext
    model_name: str
    tool_count: int
    type: str = "session_created"

    @property
    def description(self) -> str:
        return f"Session {self.session.session_id} created for agent '{self.session.agent_id}'"


@dataclass
class RunSaved(_Event):
    run_id: Any
    agent_id: str
    message_count: int
    type: str = "run_saved"

    @property
    def description(self) -> str:
        return f"Run {self.run_id} saved with {self.message_count} messages"


CenterEvent = (
    ExecutionStarted
    | ExecutionCompleted
    | ExecutionFailed
    | McpServerDiscoveryStarted
    | McpServerDiscovered
    | McpServerDiscoveryFailed
    | TranscriptBuildStarted
    | TranscriptBuilt
    | ModelRequestSending
    | ModelResponseReceived
    | ToolExecutionStarted
    | ToolExecutionCompleted
    | SessionCreated
    | RunSaved
)
