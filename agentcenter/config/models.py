"""Configuration bundle models."""

from __future__ import annotations

import os
from collections import Counter

from pydantic import BaseModel, Field, model_validator

from ..errors import InvalidConfigurationError
from ..tools.mcp import McpServerConfig
from ..types import Agent


class ModelConfig(BaseModel):
    """An OpenAI-compatible chat model endpoint."""

    name: str
    model: str
    base_url: str | None = None
    api_key: str | None = None
    api_key_env: str | None = None

    def resolve_api_key(self) -> str | None:
        if self.api_key:
            return self.api_key
        if self.api_key_env:
            return os.getenv(self.api_key_env)
        return None


class AgentConfiguration(BaseModel):
    models: list[ModelConfig] = Field(default_factory=list)
    mcp_servers: list[McpServerConfig] = Field(default_factory=list)
    agents: list[Agent] = Field(default_factory=list)

    @model_validator(mode="after")
    def _unique_names(self) -> AgentConfiguration:
        for kind, names in (
            ("model", [m.name for m in self.models]),
            ("MCP server", [s.name for s in self.mcp_servers]),
            ("agent", [a.id for a in self.agents]),
        ):
            duplicates = sorted(n for n, count in Counter(names).items() if count > 1)
            if duplicates:
                raise ValueError(f"Duplicate {kind} names in configuration: {', '.join(duplicates)}")
        return self

    @classmethod
    def parse(cls, data: dict) -> AgentConfiguration:
        try:
            return cls.model_validate(data)
        except ValueError as e:
            raise InvalidConfigurationError(f"Invalid configuration: {e}", e) from e
