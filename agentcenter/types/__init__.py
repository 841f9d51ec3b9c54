"""Core type definitions, re-exported from sub-modules."""

from .messages import Message, Role, ToolCall
from .run import Run, RunMetrics, RunStatus
from .session import AgentSession, AgentSessionContext, SessionSort, StorageStats
from .agent import Agent, ExecutionPolicy, GenerationOptions, RunOptions
from .tools import Tool, ToolDefinition, ToolSchema
from .transcript import (
    Instructions, Prompt, ToolCalls, ToolOutput, Response, Transcript, TranscriptEntry,
)
from .llm import (
    TokenUsage, Completion, CompletionChunk, ModelResponse, StreamChunk,
    ModelEvent, ModelEventHandler, RequestStarted, RequestCompleted,
    ToolCallStarted, ToolCallCompleted, ToolCallFailed,
)
from .events import (
    CenterEvent, ExecutionStarted, ExecutionCompleted, ExecutionFailed,
    McpServerDiscoveryStarted, McpServerDiscovered, McpServerDiscoveryFailed,
    TranscriptBuildStarted, TranscriptBuilt, ModelRequestSending, ModelResponseReceived,
    ToolExecutionStarted, ToolExecutionCompleted, SessionCreated, RunSaved,
)

__all__ = [
    "Message", "Role", "ToolCall",
    "Run", "RunMetrics", "RunStatus",
    "AgentSession", "AgentSessionContext", "SessionSort", "StorageStats",
    "Agent", "ExecutionPolicy", "GenerationOptions", "RunOptions",
    "Tool", "ToolDefinition", "ToolSchema",
    "Instructions", "Prompt", "ToolCalls", "ToolOutput", "Response", "Transcript", "TranscriptEntry",
    "TokenUsage", "Completion", "CompletionChunk", "ModelResponse", "StreamChunk",
    "ModelEvent", "ModelEventHandler", "RequestStarted", "RequestCompleted",
    "ToolCallStarted", "ToolCallCompleted", "ToolCallFailed",
    "CenterEvent", "ExecutionStarted", "ExecutionCompleted", "ExecutionFailed",
    "McpServerDiscoveryStarted", "McpServerDiscovered", "McpServerDiscoveryFailed",
    "TranscriptBuildStarted", "TranscriptBuilt", "ModelRequestSending", "ModelResponseReceived",
    "ToolExecutionStarted", "ToolExecutionCompleted", "SessionCreated", "RunSaved",
]
