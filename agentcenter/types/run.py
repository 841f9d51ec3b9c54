"""Run record: one completed turn of an agent inside a session."""

from __future__ import annotations

import uuid
from datetime import datetime
from enum import StrEnum
from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from ..errors import InvalidResponseError, RunContentError
from .messages import Message, utcnow

M = TypeVar("M", bound=BaseModel)


class RunStatus(StrEnum):
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class RunMetrics(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0
    total_tokens: int = 0
    cached_tokens: int = 0
    duration_ms: int = 0


class Run(BaseModel):
    model_config = ConfigDict(ser_json_bytes="base64", val_json_bytes="base64")

    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    agent_id: str
    session_id: uuid.UUID
    user_id: uuid.UUID
    messages: list[Message] = Field(default_factory=list)
    raw_content: bytes | None = None
    status: RunStatus = RunStatus.COMPLETED
    model_name: str | None = None
    metrics: RunMetrics | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)

    def as_string(self) -> str:
        if self.raw_content is None:
            raise RunContentError.no_data()
        try:
            return self.raw_content.decode("utf-8")
        except UnicodeDecodeError as e:
            raise RunContentError.invalid_utf8(e) from e

    def decoded(self, model_type: type[M]) -> M:
        text = self.as_string()
        try:
            return model_type.model_validate_json(text)
        except ValidationError as e:
            raise InvalidResponseError(
                f"Run content does not match {model_type.__name__}", text, e
            ) from e
