"""Session types."""

from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import datetime
from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field

from .messages import utcnow
from .run import Run


class AgentSessionContext(BaseModel):
    """Addresses one conversation: which agent, which user, which session."""

    agent_id: str
    user_id: uuid.UUID
    session_id: uuid.UUID


class AgentSession(BaseModel):
    id: uuid.UUID = Field(default_factory=uuid.uuid4)
    agent_id: str
    user_id: uuid.UUID
    name: str | None = None
    runs: list[Run] = Field(default_factory=list)
    session_data: dict[str, Any] = Field(default_factory=dict)
    summary: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)

    @property
    def context(self) -> AgentSessionContext:
        return AgentSessionContext(agent_id=self.agent_id, user_id=self.user_id, session_id=self.id)

    @property
    def latest_run(self) -> Run | None:
        return self.runs[-1] if self.runs else None

    @property
    def run_count(self) -> int:
        return len(self.runs)

    @property
    def message_count(self) -> int:
        return sum(len(r.messages) for r in self.runs)

    def get_run(self, run_id: uuid.UUID) -> Run | None:
        for run in self.runs:
            if run.id == run_id:
                return run
        return None


class SessionSort(StrEnum):
    CREATED_AT_ASC = "created_at_asc"
    CREATED_AT_DESC = "created_at_desc"
    UPDATED_AT_ASC = "updated_at_asc"
    UPDATED_AT_DESC = "updated_at_desc"
    NAME_ASC = "name_asc"
    NAME_DESC = "name_desc"

    def sort(self, sessions: list[AgentSession]) -> list[AgentSession]:
        field, _, direction = self.value.rpartition("_")
        if field == "name":
            key = lambda s: (s.name or "").lower()  # noqa: E731
        else:
            key = lambda s: getattr(s, field)  # noqa: E731
        return sorted(sessions, key=key, reverse=direction == "desc")


@dataclass
class StorageStats:
    total_sessions: int = 0
    total_runs: int = 0
    total_messages: int = 0
    oldest_session: datetime | None = None
    newest_session: datetime | None = None
