"""In-memory session store."""

from __future__ import annotations

import asyncio
import uuid
from datetime import timedelta
from typing import Any

from ..errors import SessionNotFoundError
from ..types import AgentSession, Run, SessionSort, StorageStats
from ..types.messages import utcnow
from .base import compute_stats, matches, page


def touch(session: AgentSession) -> None:
    """Advance ``updated_at``, never moving it backwards."""
    now = utcnow()
    if now <= session.updated_at:
        now = session.updated_at + timedelta(microseconds=1)
    session.updated_at = now


def apply_session_data(session: AgentSession, data: dict[str, Any], merge: bool) -> None:
    if merge:
        session.session_data.update(data)
    else:
        session.session_data = dict(data)


class InMemorySessionStore:
    def __init__(self) -> None:
        self._sessions: dict[uuid.UUID, AgentSession] = {}
        self._lock = asyncio.Lock()

    async def get_session(
        self,
        session_id: uuid.UUID,
        agent_id: str | None = None,
        user_id: uuid.UUID | None = None,
    ) -> AgentSession | None:
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None or not matches(session, agent_id, user_id):
                return None
            return session.model_copy(deep=True)

    async def get_sessions(
        self,
        agent_id: str | None = None,
        user_id: uuid.UUID | None = None,
        limit: int | None = None,
        offset: int = 0,
        sort_by: SessionSort = SessionSort.UPDATED_AT_DESC,
    ) -> list[AgentSession]:
        async with self._lock:
            found = [s for s in self._sessions.values() if matches(s, agent_id, user_id)]
            return [s.model_copy(deep=True) for s in page(sort_by.sort(found), limit, offset)]

    async def upsert_session(self, session: AgentSession) -> AgentSession:
        async with self._lock:
            stored = session.model_copy(deep=True)
            previous = self._sessions.get(session.id)
            if previous is not None and previous.updated_at > stored.updated_at:
                stored.updated_at = previous.updated_at
            touch(stored)
            self._sessions[stored.id] = stored
            return stored.model_copy(deep=True)

    async def delete_session(self, session_id: uuid.UUID) -> bool:
        async with self._lock:
            return self._sessions.pop(session_id, None) is not None

    async def rename_session(self, session_id: uuid.UUID, name: str) -> AgentSession:
        async with self._lock:
            session = self._require(session_id)
            session.name = name
            touch(session)
            return session.model_copy(deep=True)

    async def get_run(self, run_id: uuid.UUID, session_id: uuid.UUID) -> Run | None:
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            run = session.get_run(run_id)
            return run.model_copy(deep=True) if run else None

    async def append_run(
        self, run: Run, session_id: uuid.UUID, summary: str | None = None
    ) -> AgentSession:
        async with self._lock:
            session = self._require(session_id)
            session.runs.append(run.model_copy(deep=True))
            if summary is not None:
                session.summary = summary
            touch(session)
            return session.model_copy(deep=True)

    async def remove_run(self, run_id: uuid.UUID, session_id: uuid.UUID) -> bool:
        async with self._lock:
            session = self._require(session_id)
            kept = [r for r in session.runs if r.id != run_id]
            if len(kept) == len(session.runs):
                return False
            session.runs = kept
            touch(session)
            return True

    async def update_session_data(
        self, data: dict[str, Any], session_id: uuid.UUID, merge: bool = True
    ) -> AgentSession:
        async with self._lock:
            session = self._require(session_id)
            apply_session_data(session, data, merge)
            touch(session)
            return session.model_copy(deep=True)

    async def get_session_data(self, session_id: uuid.UUID) -> dict[str, Any]:
        async with self._lock:
            return dict(self._require(session_id).session_data)

    async def get_stats(self) -> StorageStats:
        async with self._lock:
            return compute_stats(list(self._sessions.values()))

    def _require(self, session_id: uuid.UUID) -> AgentSession:
        session = self._sessions.get(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session
