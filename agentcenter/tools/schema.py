"""Argument schemas for tools: parse the model's JSON arguments, export JSON Schema."""

from __future__ import annotations

import json
from typing import Any

from pydantic import BaseModel

from ..types import ToolSchema


def _load_arguments(raw: Any) -> dict[str, Any]:
    if raw is None or (isinstance(raw, str) and not raw.strip()):
        return {}
    if isinstance(raw, str):
        raw = json.loads(raw)
    if not isinstance(raw, dict):
        raise ValueError(f"Tool arguments must be a JSON object, got {type(raw).__name__}")
    return raw


class ModelArguments:
    """Arguments validated into an instance of a pydantic model."""

    def __init__(self, model: type[BaseModel]) -> None:
        self.model = model

    def parse(self, raw: Any) -> BaseModel:
        return self.model.model_validate(_load_arguments(raw))

    def to_json_schema(self) -> dict:
        return self.model.model_json_schema()


class JsonArguments:
    """Arguments described by a plain JSON Schema; parsed to a dict.

    Only the top-level ``required`` list is enforced, the server or
    callable owning the schema does the rest.
    """

    def __init__(self, schema: dict[str, Any] | None = None) -> None:
        self.schema = schema or {"type": "object", "properties": {}}

    def parse(self, raw: Any) -> dict[str, Any]:
        arguments = _load_arguments(raw)
        missing = [k for k in self.schema.get("required", []) if k not in arguments]
        if missing:
            raise ValueError(f"Missing required arguments: {', '.join(missing)}")
        return arguments

    def to_json_schema(self) -> dict:
        return self.schema


def schema_for(parameters: type[BaseModel] | ToolSchema | dict[str, Any] | None) -> ToolSchema:
    if parameters is None or isinstance(parameters, dict):
        return JsonArguments(parameters)
    if isinstance(parameters, type) and issubclass(parameters, BaseModel):
        return ModelArguments(parameters)
    return parameters
