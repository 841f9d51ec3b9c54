"""Structured error hierarchy for the agent center."""

from __future__ import annotations


class AgentCenterError(Exception):
    def __init__(self, code: str, message: str, cause: Exception | None = None) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.cause = cause

    @classmethod
    def wrap(cls, err: Exception) -> AgentCenterError:
        if isinstance(err, AgentCenterError):
            return err
        return AgentCenterError("UNKNOWN", str(err), err)


class AgentNotFoundError(AgentCenterError):
    def __init__(self, agent_id: str) -> None:
        super().__init__("AGENT_NOT_FOUND", f"Agent '{agent_id}' is not registered")
        self.agent_id = agent_id


class SessionNotFoundError(AgentCenterError):
    def __init__(self, session_id: object) -> None:
        super().__init__("SESSION_NOT_FOUND", f"Session {session_id} does not exist")
        self.session_id = session_id


class InvalidConfigurationError(AgentCenterError):
    def __init__(self, message: str, cause: Exception | None = None) -> None:
        super().__init__("INVALID_CONFIGURATION", message, cause)


class ModelNotFoundError(InvalidConfigurationError):
    def __init__(self, model_name: str) -> None:
        super().__init__(f"Model '{model_name}' is not registered")
        self.code = "MODEL_NOT_FOUND"
        self.model_name = model_name


class ExecutionTimedOutError(AgentCenterError):
    def __init__(self, timeout: float) -> None:
        super().__init__("EXECUTION_TIMED_OUT", f"Execution timed out after {timeout}s")
        self.timeout = timeout


class ExecutionCancelledError(AgentCenterError):
    def __init__(self) -> None:
        super().__init__("EXECUTION_CANCELLED", "Execution was cancelled before completion")


class ModelError(AgentCenterError):
    def __init__(
        self,
        model_name: str,
        message: str,
        status_code: int | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__("MODEL_ERROR", message, cause)
        self.model_name = model_name
        self.status_code = status_code


class InvalidResponseError(AgentCenterError):
    def __init__(self, message: str, content: str = "", cause: Exception | None = None) -> None:
        super().__init__("INVALID_RESPONSE", message, cause)
        self.content = content


class ToolExecutionError(AgentCenterError):
    def __init__(self, tool_name: str, message: str, cause: Exception | None = None) -> None:
        super().__init__("TOOL_EXECUTION_FAILED", message, cause)
        self.tool_name = tool_name


class McpError(AgentCenterError):
    def __init__(self, server_name: str, message: str, cause: Exception | None = None) -> None:
        super().__init__("MCP_ERROR", message, cause)
        self.server_name = server_name


class RunContentError(AgentCenterError):
    """Raised when a run's raw content is missing or cannot be decoded."""

    def __init__(self, code: str, message: str, cause: Exception | None = None) -> None:
        super().__init__(code, message, cause)

    @classmethod
    def no_data(cls) -> RunContentError:
        return cls("NO_DATA", "Run has no content")

    @classmethod
    def invalid_utf8(cls, cause: Exception | None = None) -> RunContentError:
        return cls("INVALID_UTF8_DATA", "Run content is not valid UTF-8", cause)
