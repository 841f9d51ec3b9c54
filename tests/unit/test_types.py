"""Unit tests for records, options and the transcript builder."""

import uuid

import pytest
from pydantic import BaseModel, ValidationError

from agentcenter import (
    Agent,
    ExecutionPolicy,
    InvalidResponseError,
    Message,
    Run,
    RunContentError,
    RunOptions,
    define_tool,
)
from agentcenter.transcript import TranscriptBuilder, entries_to_messages, estimate_tokens, flatten
from agentcenter.types import (
    Instructions,
    Prompt,
    Response,
    ToolCall,
    ToolCalls,
    ToolOutput,
    Transcript,
)


class Point(BaseModel):
    x: int
    y: int


def _run(content: bytes | None) -> Run:
    return Run(agent_id="a", session_id=uuid.uuid4(), user_id=uuid.uuid4(), raw_content=content)


class TestRun:
    def test_as_string(self):
        assert _run("héllo".encode()).as_string() == "héllo"

    def test_no_data(self):
        with pytest.raises(RunContentError) as exc:
            _run(None).as_string()
        assert exc.value.code == "NO_DATA"

    def test_invalid_utf8(self):
        with pytest.raises(RunContentError) as exc:
            _run(b"\xff\xfe").as_string()
        assert exc.value.code == "INVALID_UTF8_DATA"

    def test_decoded(self):
        assert _run(b'{"x": 1, "y": 2}').decoded(Point) == Point(x=1, y=2)
        with pytest.raises(InvalidResponseError):
            _run(b'{"x": 1}').decoded(Point)

    def test_json_keeps_binary_content(self):
        run = _run(b"\x00\xff")
        restored = Run.model_validate_json(run.model_dump_json())
        assert restored.raw_content == b"\x00\xff"
        assert restored.id == run.id


class TestOptions:
    def test_blocked_names_deduplicated(self):
        options = RunOptions(blocked_tool_names=["a", "b", "a"])
        assert options.blocked_tool_names == ["a", "b"]

    def test_policy_bounds(self):
        with pytest.raises(ValidationError):
            ExecutionPolicy(retries=-1)
        with pytest.raises(ValidationError):
            ExecutionPolicy(timeout=0)

    def test_agent_is_frozen(self):
        agent = Agent(name="a", model_name="m")
        with pytest.raises(ValidationError):
            agent.name = "b"
        assert uuid.UUID(agent.id)


class TestTranscriptBuilder:
    def _history(self):
        return [
            Message.system("Old instructions"),
            Message.user("u1"),
            Message.assistant(tool_calls=[ToolCall(id="1", name="search")]),
            Message.tool("result", "1", "search"),
            Message.assistant("a1"),
            Message.user("u2"),
            Message.assistant(""),
        ]

    def test_window_skips_tool_results_and_folds_system(self):
        window = TranscriptBuilder().window(self._history(), ExecutionPolicy())
        assert [m.content for m in window.kept] == ["u1", "", "a1", "u2"]
        assert window.notes == ["Old instructions"]
        assert window.dropped == []

    def test_message_cap_then_token_cap(self):
        builder = TranscriptBuilder(estimate=len)
        window = builder.window(
            self._history(), ExecutionPolicy(max_history_messages=3, max_history_tokens=2)
        )
        assert [m.content for m in window.kept] == ["a1", "u2"]
        assert [m.content for m in window.dropped] == ["u1", ""]

    def test_token_cap_keeps_one_message(self):
        window = TranscriptBuilder().window(self._history(), ExecutionPolicy(max_history_tokens=0))
        assert [m.content for m in window.kept] == ["u2"]

    def test_build(self):
        builder = TranscriptBuilder()
        agent = Agent(name="a", model_name="m", instructions="Be brief.")
        tool = define_tool("search", "Search", {"type": "object"}, lambda args: "")
        window = builder.window(self._history(), ExecutionPolicy())

        transcript = builder.build(agent, window, [tool], summary="earlier talk")

        instructions = transcript.instructions
        assert instructions.segments == ["Be brief.", "Old instructions", "Conversation summary: earlier talk"]
        assert instructions.tools[0].name == "search"
        assert [type(e) for e in transcript] == [Instructions, Prompt, ToolCalls, Response, Prompt]

    def test_entries_to_messages(self):
        messages = entries_to_messages([
            Prompt("q"),
            ToolCalls([ToolCall(id="1", name="t")]),
            ToolOutput(tool_call_id="1", tool_name="t", text="out"),
            Response("a"),
        ])
        assert [m.role for m in messages] == ["user", "assistant", "tool", "assistant"]
        assert messages[2].tool_call_id == "1"

    def test_flatten(self):
        first, second = _run(b""), _run(b"")
        first.messages = [Message.user("a")]
        second.messages = [Message.user("b"), Message.assistant("c")]
        assert [m.content for m in flatten([first, second])] == ["a", "b", "c"]

    def test_estimate_tokens(self):
        assert estimate_tokens("") == 1
        assert estimate_tokens("abcdefgh") == 3


class TestTranscript:
    def test_concatenation_leaves_original(self):
        base = Transcript([Prompt("a")])
        combined = base + [Response("b")]
        assert len(base) == 1
        assert len(combined) == 2
        assert combined[-1].text == "b"
