"""Session store contract."""

from __future__ import annotations

import uuid
from typing import Any, Protocol, runtime_checkable

from ..types import AgentSession, Run, SessionSort, StorageStats


@runtime_checkable
class SessionStore(Protocol):
    """Persistence for sessions and their runs.

    Implementations must be safe under concurrent access and must return
    copies, so callers mutating a returned session never change stored state.
    ``append_run`` on a missing session raises ``SessionNotFoundError`` and
    never creates the session. A non-None ``summary`` replaces the session
    summary in the same write as the run.
    """

    async def get_session(
        self,
        session_id: uuid.UUID,
        agent_id: str | None = None,
        user_id: uuid.UUID | None = None,
    ) -> AgentSession | None: ...

    async def get_sessions(
        self,
        agent_id: str | None = None,
        user_id: uuid.UUID | None = None,
        limit: int | None = None,
        offset: int = 0,
        sort_by: SessionSort = SessionSort.UPDATED_AT_DESC,
    ) -> list[AgentSession]: ...

    async def upsert_session(self, session: AgentSession) -> AgentSession: ...

    async def delete_session(self, session_id: uuid.UUID) -> bool: ...

    async def rename_session(self, session_id: uuid.UUID, name: str) -> AgentSession: ...

    async def get_run(self, run_id: uuid.UUID, session_id: uuid.UUID) -> Run | None: ...

    async def append_run(
        self, run: Run, session_id: uuid.UUID, summary: str | None = None
    ) -> AgentSession: ...

    async def remove_run(self, run_id: uuid.UUID, session_id: uuid.UUID) -> bool: ...

    async def update_session_data(
        self, data: dict[str, Any], session_id: uuid.UUID, merge: bool = True
    ) -> AgentSession: ...

    async def get_session_data(self, session_id: uuid.UUID) -> dict[str, Any]: ...

    async def get_stats(self) -> StorageStats: ...


def matches(session: AgentSession, agent_id: str | None, user_id: uuid.UUID | None) -> bool:
    if agent_id is not None and session.agent_id != agent_id:
        return False
    if user_id is not None and session.user_id != user_id:
        return False
    return True


def page(sessions: list[AgentSession], limit: int | None, offset: int) -> list[AgentSession]:
    end = None if limit is None else offset + limit
    return sessions[offset:end]


def compute_stats(sessions: list[AgentSession]) -> StorageStats:
    if not sessions:
        return StorageStats()
    created = [s.created_at for s in sessions]
    return StorageStats(
        total_sessions=len(sessions),
        total_runs=sum(s.run_count for s in sessions),
        total_messages=sum(s.message_count for s in sessions),
        oldest_session=min(created),
        newest_session=max(created),
    )
