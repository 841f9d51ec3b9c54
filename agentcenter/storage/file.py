"""File-backed session store.

One pretty-printed JSON document per session::

    <root>/agents/<agent>/sessions/<session-id>/session.json
"""

from __future__ import annotations

import asyncio
import json
import logging
import os
import re
import uuid
from pathlib import Path
from typing import Any

from ..errors import SessionNotFoundError
from ..types import AgentSession, Run, SessionSort, StorageStats
from .base import compute_stats, matches, page
from .memory import apply_session_data, touch

logger = logging.getLogger(__name__)

SESSION_FILE = "session.json"

_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


def sanitize(name: str) -> str:
    """Make `name` safe to use as a single path component."""
    return _UNSAFE.sub("_", name).strip("._") or "unnamed"


class FileSessionStore:
    def __init__(self, root: str | Path | None = None) -> None:
        if root is None:
            from ..config import get_settings

            root = get_settings().storage_dir
        self.root = Path(root).expanduser()
        self._lock = asyncio.Lock()

    # -- paths --

    def session_path(self, session: AgentSession) -> Path:
        agent_dir = self.root / "agents" / sanitize(session.agent_id)
        return agent_dir / "sessions" / str(session.id) / SESSION_FILE

    def _find(self, session_id: uuid.UUID) -> Path | None:
        matches_ = list(self.root.glob(f"agents/*/sessions/{session_id}/{SESSION_FILE}"))
        return matches_[0] if matches_ else None

    # -- sync I/O, run in a worker thread --

    def _read(self, path: Path) -> AgentSession:
        return AgentSession.model_validate_json(path.read_text(encoding="utf-8"))

    def _write(self, session: AgentSession) -> None:
        path = self.session_path(session)
        path.parent.mkdir(parents=True, exist_ok=True)
        tmp = path.with_suffix(".json.tmp")
        tmp.write_text(
            json.dumps(session.model_dump(mode="json"), indent=2, sort_keys=True),
            encoding="utf-8",
        )
        os.replace(tmp, path)

    def _load(self, session_id: uuid.UUID) -> AgentSession | None:
        path = self._find(session_id)
        return self._read(path) if path else None

    def _load_all(self) -> list[AgentSession]:
        sessions = []
        for path in self.root.glob(f"agents/*/sessions/*/{SESSION_FILE}"):
            try:
                sessions.append(self._read(path))
            except (OSError, ValueError):
                logger.warning("Skipping unreadable session file %s", path, exc_info=True)
        return sessions

    def _require(self, session_id: uuid.UUID) -> AgentSession:
        session = self._load(session_id)
        if session is None:
            raise SessionNotFoundError(session_id)
        return session

    def _delete(self, session_id: uuid.UUID) -> bool:
        path = self._find(session_id)
        if path is None:
            return False
        path.unlink()
        try:
            path.parent.rmdir()
        except OSError:
            pass
        return True

    # -- SessionStore --

    async def get_session(
        self,
        session_id: uuid.UUID,
        agent_id: str | None = None,
        user_id: uuid.UUID | None = None,
    ) -> AgentSession | None:
        async with self._lock:
            session = await asyncio.to_thread(self._load, session_id)
        if session is None or not matches(session, agent_id, user_id):
            return None
        return session

    async def get_sessions(
        self,
        agent_id: str | None = None,
        user_id: uuid.UUID | None = None,
        limit: int | None = None,
        offset: int = 0,
        sort_by: SessionSort = SessionSort.UPDATED_AT_DESC,
    ) -> list[AgentSession]:
        async with self._lock:
            sessions = await asyncio.to_thread(self._load_all)
        found = [s for s in sessions if matches(s, agent_id, user_id)]
        return page(sort_by.sort(found), limit, offset)

    async def upsert_session(self, session: AgentSession) -> AgentSession:
        async with self._lock:
            stored = session.model_copy(deep=True)
            previous = await asyncio.to_thread(self._load, session.id)
            if previous is not None and previous.updated_at > stored.updated_at:
                stored.updated_at = previous.updated_at
            touch(stored)
            await asyncio.to_thread(self._write, stored)
            return stored

    async def delete_session(self, session_id: uuid.UUID) -> bool:
        async with self._lock:
            return await asyncio.to_thread(self._delete, session_id)

    async def rename_session(self, session_id: uuid.UUID, name: str) -> AgentSession:
        async with self._lock:
            session = await asyncio.to_thread(self._require, session_id)
            session.name = name
            touch(session)
            await asyncio.to_thread(self._write, session)
            return session

    async def get_run(self, run_id: uuid.UUID, session_id: uuid.UUID) -> Run | None:
        async with self._lock:
            session = await asyncio.to_thread(self._load, session_id)
        return session.get_run(run_id) if session else None

    async def append_run(
        self, run: Run, session_id: uuid.UUID, summary: str | None = None
    ) -> AgentSession:
        async with self._lock:
            session = await asyncio.to_thread(self._require, session_id)
            session.runs.append(run)
            if summary is not None:
                session.summary = summary
            touch(session)
            await asyncio.to_thread(self._write, session)
            return session

    async def remove_run(self, run_id: uuid.UUID, session_id: uuid.UUID) -> bool:
        async with self._lock:
            session = await asyncio.to_thread(self._require, session_id)
            kept = [r for r in session.runs if r.id != run_id]
            if len(kept) == len(session.runs):
                return False
            session.runs = kept
            touch(session)
            await asyncio.to_thread(self._write, session)
            return True

    async def update_session_data(
        self, data: dict[str, Any], session_id: uuid.UUID, merge: bool = True
    ) -> AgentSession:
        async with self._lock:
            session = await asyncio.to_thread(self._require, session_id)
            apply_session_data(session, data, merge)
            touch(session)
            await asyncio.to_thread(self._write, session)
            return session

    async def get_session_data(self, session_id: uuid.UUID) -> dict[str, Any]:
        async with self._lock:
            session = await asyncio.to_thread(self._require, session_id)
        return session.session_data

    async def get_stats(self) -> StorageStats:
        async with self._lock:
            sessions = await asyncio.to_thread(self._load_all)
        return compute_stats(sessions)
