"""Rich console observer — prints one line per center event."""

from __future__ import annotations

import json

from rich.console import Console
from rich.text import Text

from ..types import (
    CenterEvent,
    ExecutionCompleted,
    ExecutionFailed,
    McpServerDiscoveryFailed,
    ModelRequestSending,
    ModelResponseReceived,
    ToolExecutionCompleted,
    ToolExecutionStarted,
)

_STYLES = {
    "execution_started": "bold blue",
    "execution_completed": "bold green",
    "execution_failed": "bold red",
    "mcp_server_discovery_failed": "red",
    "tool_execution_started": "yellow",
    "tool_execution_completed": "yellow",
    "model_request_sending": "cyan",
    "model_response_received": "cyan",
}


def _preview(text: str, limit: int = 200) -> str:
    text = text.replace("\n", " ")
    return text if len(text) <= limit else text[:limit] + "…"


class ConsoleObserver:
    """Prints ``[time] description`` for each event; ``verbose`` adds payload details."""

    def __init__(self, verbose: bool = False, console: Console | None = None) -> None:
        self.verbose = verbose
        self.console = console or Console()

    def observe(self, event: CenterEvent) -> None:
        line = Text()
        line.append(f"[{event.timestamp:%H:%M:%S}] ", style="dim")
        line.append(event.description, style=_STYLES.get(event.type, ""))
        self.console.print(line)
        if self.verbose:
            for detail in self._details(event):
                self.console.print(Text("    " + detail, style="dim"))

    def _details(self, event: CenterEvent) -> list[str]:
        if isinstance(event, ModelRequestSending):
            return [
                f"message: {_preview(event.message)}",
                f"transcript entries: {len(event.transcript)}, tools: {event.tool_count}",
            ]
        if isinstance(event, ModelResponseReceived):
            return [f"content: {_preview(event.content)}"]
        if isinstance(event, ToolExecutionStarted):
            return [f"arguments: {_preview(event.arguments)}"]
        if isinstance(event, ToolExecutionCompleted):
            return [f"result: {_preview(event.result)}"]
        if isinstance(event, ExecutionCompleted):
            details = [f"messages: {len(event.run.messages)}"]
            if event.run.metrics:
                details.append(json.dumps(event.run.metrics.model_dump()))
            return details
        if isinstance(event, (ExecutionFailed, McpServerDiscoveryFailed)):
            return [f"error: {type(event.error).__name__}: {event.error}"]
        return []
