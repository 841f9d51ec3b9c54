"""Tool types."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class ToolSchema(Protocol):
    def parse(self, raw: Any) -> Any: ...
    def to_json_schema(self) -> dict: ...


@runtime_checkable
class Tool(Protocol):
    """Anything the model can call: takes serialized arguments, returns a serialized result."""

    name: str
    description: str

    def parameters_schema(self) -> dict: ...
    async def call(self, arguments: str) -> str: ...


@dataclass
class ToolDefinition:
    """Provider-neutral view of a tool handed to a model."""

    name: str
    description: str
    parameters: dict[str, Any]

    @classmethod
    def of(cls, tool: Tool) -> ToolDefinition:
        return cls(name=tool.name, description=tool.description, parameters=tool.parameters_schema())
