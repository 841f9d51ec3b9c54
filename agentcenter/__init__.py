"""agentcenter — agent orchestration runtime: registries, execution engine, sessions and events."""

from .center import AgentCenter
from .config import AgentConfiguration, ModelConfig, load_configuration
from .errors import (
    AgentCenterError,
    AgentNotFoundError,
    ExecutionCancelledError,
    ExecutionTimedOutError,
    InvalidConfigurationError,
    InvalidResponseError,
    McpError,
    ModelError,
    ModelNotFoundError,
    RunContentError,
    SessionNotFoundError,
    ToolExecutionError,
)
from .events import ObserverBus
from .hooks import HookContext, PostHook, PreHook, SummaryContext, SummaryHook
from .models import LanguageModel, OpenAIChatModel, ScriptedModel, ToolLoopModel
from .observers import ConsoleObserver, FileDebugObserver
from .storage import FileSessionStore, InMemorySessionStore, SessionStore
from .tools import define_tool
from .tools.mcp import HttpTransportConfig, McpServerConfig, StdioTransportConfig
from .types import (
    Agent,
    AgentSession,
    AgentSessionContext,
    ExecutionPolicy,
    GenerationOptions,
    Message,
    Run,
    RunOptions,
)

__version__ = "0.1.0"

__all__ = [
    "AgentCenter", "AgentConfiguration", "ModelConfig", "load_configuration",
    "AgentCenterError", "AgentNotFoundError", "ExecutionCancelledError", "ExecutionTimedOutError",
    "InvalidConfigurationError", "InvalidResponseError", "McpError", "ModelError",
    "ModelNotFoundError", "RunContentError", "SessionNotFoundError", "ToolExecutionError",
    "ObserverBus", "HookContext", "PreHook", "PostHook", "SummaryHook", "SummaryContext",
    "LanguageModel", "OpenAIChatModel", "ScriptedModel", "ToolLoopModel",
    "ConsoleObserver", "FileDebugObserver",
    "FileSessionStore", "InMemorySessionStore", "SessionStore",
    "define_tool", "HttpTransportConfig", "McpServerConfig", "StdioTransportConfig",
    "Agent", "AgentSession", "AgentSessionContext", "ExecutionPolicy", "GenerationOptions",
    "Message", "Run", "RunOptions",
]
