"""File debug observer — dumps every turn into a browsable directory of JSON files.

Layout::

    <root>/<agent>/<session-id>/events.jsonl
    <root>/<agent>/<session-id>/0001-model-call.json
    <root>/<agent>/<session-id>/0002-tool-search.json
    <root>/center.jsonl            (events not tied to a session)
"""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any

from pydantic import BaseModel

from ..storage.file import sanitize
from ..types import (
    CenterEvent,
    ExecutionCompleted,
    ExecutionFailed,
    ExecutionStarted,
    ModelRequestSending,
    ModelResponseReceived,
    ToolExecutionCompleted,
    ToolExecutionStarted,
    Transcript,
)


def to_jsonable(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json")
    if isinstance(value, Transcript):
        return [to_jsonable(e) for e in value]
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {f.name: to_jsonable(getattr(value, f.name)) for f in dataclasses.fields(value)}
    if isinstance(value, BaseException):
        return {"error": type(value).__name__, "message": str(value)}
    if isinstance(value, dict):
        return {str(k): to_jsonable(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_jsonable(v) for v in value]
    if isinstance(value, (str, int, float, bool)) or value is None:
        return value
    return str(value)


class FileDebugObserver:
    def __init__(self, root: str | Path) -> None:
        self.root = Path(root)
        self._session_dirs: dict[str, Path] = {}
        self._counters: dict[Path, int] = {}
        self._requests: dict[str, dict[str, Any]] = {}
        self._tools: dict[str, dict[str, Any]] = {}

    def observe(self, event: CenterEvent) -> None:
        if isinstance(event, ExecutionStarted):
            self._session_dirs[str(event.session.session_id)] = (
                self.root / sanitize(event.agent.id) / str(event.session.session_id)
            )
        directory = self._directory_for(event)
        record = {"description": event.description, **to_jsonable(event)}
        if directory is None:
            self._append(self.root / "center.jsonl", record)
            return
        self._append(directory / "events.jsonl", record)

        if isinstance(event, ModelRequestSending):
            self._requests[event.request_id] = {"request": to_jsonable(event)}
        elif isinstance(event, ModelResponseReceived):
            call = self._requests.pop(event.request_id, {})
            call["response"] = to_jsonable(event)
            self._write(directory, "model-call", call)
        elif isinstance(event, ToolExecutionStarted):
            self._tools[event.execution_id] = {"started": to_jsonable(event)}
        elif isinstance(event, ToolExecutionCompleted):
            call = self._tools.pop(event.execution_id, {})
            call["completed"] = to_jsonable(event)
            self._write(directory, f"tool-{sanitize(event.tool_name)}", call)
        elif isinstance(event, (ExecutionCompleted, ExecutionFailed)):
            self._write(directory, "turn-summary", record)

    def _directory_for(self, event: CenterEvent) -> Path | None:
        if isinstance(event, ExecutionCompleted):
            session_id = event.run.session_id
        elif isinstance(event, (ExecutionStarted, ExecutionFailed)):
            session_id = event.session.session_id
        else:
            session_id = getattr(event, "session_id", None)
        if session_id is None:
            return None
        return self._session_dirs.get(str(session_id))

    def _write(self, directory: Path, label: str, payload: dict[str, Any]) -> None:
        n = self._counters.get(directory, 0) + 1
        self._counters[directory] = n
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / f"{n:04d}-{label}.json"
        path.write_text(json.dumps(payload, indent=2, sort_keys=True, default=str))

    def _append(self, path: Path, record: dict[str, Any]) -> None:
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as f:
            f.write(json.dumps(record, default=str) + "\n")
