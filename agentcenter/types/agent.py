"""Agent definition and execution policy types."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Agent(BaseModel):
    """Immutable description of an agent: its model, instructions, tools and hooks."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: str(uuid.uuid4()))
    name: str
    description: str = ""
    model_name: str
    instructions: str = ""
    tool_names: list[str] = Field(default_factory=list)
    mcp_server_names: list[str] = Field(default_factory=list)
    pre_hook_names: list[str] = Field(default_factory=list)
    post_hook_names: list[str] = Field(default_factory=list)


class ExecutionPolicy(BaseModel):
    model_config = ConfigDict(frozen=True)

    retries: int = Field(default=0, ge=0)
    timeout: float | None = Field(default=None, gt=0)
    max_tool_calls: int | None = Field(default=None, ge=0)
    max_history_messages: int | None = Field(default=None, ge=0)
    max_history_tokens: int | None = Field(default=None, ge=0)
    summary_hook_name: str | None = None


class GenerationOptions(BaseModel):
    temperature: float | None = None
    max_tokens: int | None = None
    max_tool_calls: int | None = None
    response_schema: dict | None = None


class RunOptions(BaseModel):
    """Per-call generation settings and tool filtering."""

    generation: GenerationOptions = Field(default_factory=GenerationOptions)
    allowed_tool_names: list[str] | None = None
    blocked_tool_names: list[str] = Field(default_factory=list)

    @field_validator("blocked_tool_names")
    @classmethod
    def _dedupe(cls, v: list[str]) -> list[str]:
        return list(dict.fromkeys(v))
