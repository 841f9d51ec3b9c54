"""MCP server configuration."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field


class HttpTransportConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["http"] = "http"
    url: str
    headers: dict[str, str] = Field(default_factory=dict)
    timeout: float = 30.0


class StdioTransportConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    type: Literal["stdio"] = "stdio"
    command: str
    args: list[str] = Field(default_factory=list)
    env: dict[str, str] | None = None
    timeout: float = 30.0


TransportConfig = Annotated[
    HttpTransportConfig | StdioTransportConfig, Field(discriminator="type")
]


class McpServerConfig(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    transport: TransportConfig
