"""Unit tests for the session stores."""

import asyncio
import uuid

import pytest

from agentcenter import FileSessionStore, InMemorySessionStore, SessionNotFoundError
from agentcenter.types import AgentSession, Message, Run, SessionSort


@pytest.fixture(params=["memory", "file"])
def store(request, tmp_path):
    if request.param == "memory":
        return InMemorySessionStore()
    return FileSessionStore(tmp_path)


def _session(agent_id: str = "agent", user_id: uuid.UUID | None = None, **fields) -> AgentSession:
    return AgentSession(agent_id=agent_id, user_id=user_id or uuid.uuid4(), **fields)


def _run(session: AgentSession, content: bytes = b"answer") -> Run:
    return Run(
        agent_id=session.agent_id,
        session_id=session.id,
        user_id=session.user_id,
        messages=[Message.user("question"), Message.assistant("answer")],
        raw_content=content,
    )


class TestSessionStore:
    async def test_upsert_and_get(self, store):
        session = await store.upsert_session(_session(name="first"))
        loaded = await store.get_session(session.id)
        assert loaded.name == "first"
        assert loaded.id == session.id

    async def test_get_filters_by_owner(self, store):
        session = await store.upsert_session(_session())
        assert await store.get_session(session.id, agent_id="other") is None
        assert await store.get_session(session.id, user_id=uuid.uuid4()) is None
        assert await store.get_session(session.id, agent_id="agent", user_id=session.user_id)

    async def test_returned_sessions_are_copies(self, store):
        session = await store.upsert_session(_session())
        loaded = await store.get_session(session.id)
        loaded.name = "changed"
        loaded.session_data["x"] = 1
        again = await store.get_session(session.id)
        assert again.name is None
        assert again.session_data == {}

    async def test_append_run(self, store):
        session = await store.upsert_session(_session())
        run = _run(session, b"\x00\xffbinary")

        updated = await store.append_run(run, session.id)

        assert updated.run_count == 1
        assert updated.updated_at > session.updated_at
        stored = await store.get_run(run.id, session.id)
        assert stored.raw_content == b"\x00\xffbinary"
        assert [m.content for m in stored.messages] == ["question", "answer"]

    async def test_append_run_with_summary(self, store):
        session = await store.upsert_session(_session(summary="old"))

        await store.append_run(_run(session), session.id)
        assert (await store.get_session(session.id)).summary == "old"

        await store.append_run(_run(session), session.id, summary="new")
        stored = await store.get_session(session.id)
        assert stored.summary == "new"
        assert stored.run_count == 2

    async def test_append_run_to_missing_session(self, store):
        session = _session()
        with pytest.raises(SessionNotFoundError):
            await store.append_run(_run(session), session.id)
        assert await store.get_session(session.id) is None

    async def test_remove_run(self, store):
        session = await store.upsert_session(_session())
        run = _run(session)
        await store.append_run(run, session.id)

        assert await store.remove_run(run.id, session.id)
        assert not await store.remove_run(run.id, session.id)
        assert await store.get_run(run.id, session.id) is None

    async def test_concurrent_appends(self, store):
        session = await store.upsert_session(_session())
        runs = [_run(session) for _ in range(10)]

        await asyncio.gather(*(store.append_run(r, session.id) for r in runs))

        stored = await store.get_session(session.id)
        assert {r.id for r in stored.runs} == {r.id for r in runs}

    async def test_session_data_merge_and_replace(self, store):
        session = await store.upsert_session(_session(session_data={"a": 1}))

        await store.update_session_data({"b": 2}, session.id)
        assert await store.get_session_data(session.id) == {"a": 1, "b": 2}

        await store.update_session_data({"c": 3}, session.id, merge=False)
        assert await store.get_session_data(session.id) == {"c": 3}

    async def test_session_data_on_missing_session(self, store):
        with pytest.raises(SessionNotFoundError):
            await store.get_session_data(uuid.uuid4())

    async def test_rename_and_delete(self, store):
        session = await store.upsert_session(_session())

        renamed = await store.rename_session(session.id, "renamed")
        assert renamed.name == "renamed"
        assert (await store.get_session(session.id)).name == "renamed"

        assert await store.delete_session(session.id)
        assert not await store.delete_session(session.id)
        with pytest.raises(SessionNotFoundError):
            await store.rename_session(session.id, "again")

    async def test_listing_sort_and_page(self, store):
        user = uuid.uuid4()
        names = ["charlie", "alpha", "bravo"]
        created = [await store.upsert_session(_session(user_id=user, name=n)) for n in names]
        await store.upsert_session(_session(agent_id="other", user_id=user, name="zulu"))

        newest_first = await store.get_sessions(agent_id="agent")
        assert [s.id for s in newest_first] == [s.id for s in reversed(created)]

        by_name = await store.get_sessions(user_id=user, sort_by=SessionSort.NAME_ASC)
        assert [s.name for s in by_name] == ["alpha", "bravo", "charlie", "zulu"]

        paged = await store.get_sessions(user_id=user, sort_by=SessionSort.NAME_DESC, limit=2, offset=1)
        assert [s.name for s in paged] == ["charlie", "bravo"]

    async def test_stats(self, store):
        empty = await store.get_stats()
        assert empty.total_sessions == 0
        assert empty.oldest_session is None

        first = await store.upsert_session(_session())
        second = await store.upsert_session(_session())
        await store.append_run(_run(first), first.id)
        await store.append_run(_run(second), second.id)
        await store.append_run(_run(second), second.id)

        stats = await store.get_stats()
        assert stats.total_sessions == 2
        assert stats.total_runs == 3
        assert stats.total_messages == 6
        assert stats.oldest_session <= stats.newest_session


class TestFileSessionStore:
    async def test_layout(self, tmp_path):
        store = FileSessionStore(tmp_path)
        session = await store.upsert_session(_session(agent_id="my agent/1"))
        path = tmp_path / "agents" / "my_agent_1" / "sessions" / str(session.id) / "session.json"
        assert path.exists()
        assert '"agent_id": "my agent/1"' in path.read_text()

    async def test_survives_reopen(self, tmp_path):
        session = await FileSessionStore(tmp_path).upsert_session(_session(summary="hello"))
        reopened = FileSessionStore(tmp_path)
        assert (await reopened.get_session(session.id)).summary == "hello"

    async def test_unreadable_files_are_skipped(self, tmp_path, caplog):
        store = FileSessionStore(tmp_path)
        await store.upsert_session(_session())
        broken = tmp_path / "agents" / "agent" / "sessions" / str(uuid.uuid4()) / "session.json"
        broken.parent.mkdir(parents=True)
        broken.write_text("{not json")

        sessions = await store.get_sessions()

        assert len(sessions) == 1
        assert "Skipping unreadable session file" in caplog.text
