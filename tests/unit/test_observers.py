"""Unit tests for the observer bus and the bundled observers."""

import io
import json

from rich.console import Console

from agentcenter import ConsoleObserver, FileDebugObserver, ObserverBus, define_tool
from agentcenter.types import Completion, RunSaved, ToolCall
from tests.conftest import make_session


class TestObserverBus:
    def test_delivery_order_and_callables(self):
        bus = ObserverBus()
        seen = []

        class First:
            def observe(self, event):
                seen.append(("first", event.type))

        bus.add(First())
        bus.add(lambda event: seen.append(("second", event.type)))
        bus.emit(RunSaved(run_id="r", agent_id="a", message_count=2))

        assert seen == [("first", "run_saved"), ("second", "run_saved")]

    def test_failing_observer_is_isolated(self, caplog):
        bus = ObserverBus()
        seen = []

        def broken(event):
            raise RuntimeError("observer down")

        bus.add(broken)
        bus.add(seen.append)
        bus.emit(RunSaved(run_id="r", agent_id="a", message_count=0))

        assert len(seen) == 1
        assert "observer down" in caplog.text

    def test_remove(self):
        bus = ObserverBus()
        seen = []
        observer = bus.add(seen.append)
        bus.remove(observer)
        bus.emit(RunSaved(run_id="r", agent_id="a", message_count=0))
        assert seen == []
        assert bus.observers == []


class TestObserversInTurn:
    async def test_failing_observer_does_not_fail_turn(self, center, user_id):
        def broken(event):
            raise RuntimeError("observer down")

        center.add_observer(broken)
        _, session = await make_session(center, user_id)

        run = await center.run_agent(session.context, "hi")
        assert run.as_string() == "Mock response to: hi"

    async def test_console_observer(self, center, user_id):
        buffer = io.StringIO()
        center.add_observer(ConsoleObserver(verbose=True, console=Console(file=buffer, width=200)))
        _, session = await make_session(center, user_id)

        await center.run_agent(session.context, "hello console")

        output = buffer.getvalue()
        assert "hello console" in output
        assert "messages: 2" in output

    async def test_file_debug_observer(self, center, model, user_id, tmp_path):
        center.add_observer(FileDebugObserver(tmp_path))
        await center.register_tool(define_tool("echo", "", {"type": "object"}, lambda args: args))
        model.add(Completion(tool_calls=[ToolCall(id="1", name="echo", arguments='{"a": 1}')]), "done")
        agent, session = await make_session(center, user_id, tool_names=["echo"])

        await center.run_agent(session.context, "hi")

        directory = tmp_path / agent.id / str(session.id)
        files = sorted(p.name for p in directory.glob("*.json"))
        assert files == [
            "0001-model-call.json",
            "0002-tool-echo.json",
            "0003-model-call.json",
            "0004-turn-summary.json",
        ]
        call = json.loads((directory / "0001-model-call.json").read_text())
        assert call["request"]["message"] == "hi"
        assert call["response"]["request_id"] == call["request"]["request_id"]
        tool = json.loads((directory / "0002-tool-echo.json").read_text())
        assert tool["completed"]["result"] == '{"a": 1}'
        events = (directory / "events.jsonl").read_text().splitlines()
        assert json.loads(events[0])["type"] == "execution_started"
        assert (tmp_path / "center.jsonl").exists()
