"""Tool registry and define_tool helper."""

from __future__ import annotations

import inspect
import json
from typing import Any, Awaitable, Callable, Type

from pydantic import BaseModel

from ..errors import InvalidConfigurationError
from ..registry import Registry
from ..types import Tool, ToolSchema
from .schema import JsonArguments, ModelArguments, schema_for


class FunctionTool:
    """Tool backed by a Python callable; arguments are validated by its schema."""

    def __init__(
        self,
        name: str,
        description: str,
        parameters: ToolSchema,
        execute: Callable[[Any], Any],
    ) -> None:
        self.name = name
        self.description = description
        self.parameters = parameters
        self._execute = execute

    def parameters_schema(self) -> dict:
        return self.parameters.to_json_schema()

    async def call(self, arguments: str) -> str:
        parsed = self.parameters.parse(arguments)
        result = self._execute(parsed)
        if inspect.isawaitable(result):
            result = await result
        if isinstance(result, str):
            return result
        if isinstance(result, BaseModel):
            return result.model_dump_json()
        return json.dumps(result)

    def __repr__(self) -> str:
        return f"FunctionTool({self.name!r})"


def define_tool(
    name: str,
    description: str,
    parameters: Type[BaseModel] | ToolSchema | dict[str, Any] | None,
    execute: Callable[[Any], Awaitable[Any] | Any],
) -> FunctionTool:
    return FunctionTool(
        name=name, description=description, parameters=schema_for(parameters), execute=execute
    )


class ToolRegistry(Registry[Tool]):
    def __init__(self) -> None:
        super().__init__("Tool")

    async def add(self, tool: Tool, *, replace: bool = False) -> None:
        await self.register(tool.name, tool, replace=replace)

    async def resolve(self, names: list[str]) -> list[Tool]:
        """Return the tools for ``names`` in order; unknown names are an error."""
        tools = await self.snapshot()
        missing = [n for n in names if n not in tools]
        if missing:
            raise InvalidConfigurationError(f"Unknown tools: {', '.join(missing)}")
        return [tools[n] for n in names]


__all__ = [
    "FunctionTool", "ToolRegistry", "define_tool", "JsonArguments", "ModelArguments", "schema_for",
]
