"""JSON-RPC transport over an MCP server subprocess's stdin/stdout."""

from __future__ import annotations

import asyncio
import itertools
import json
import logging
import os
from typing import Any, Protocol

from ...errors import McpError
from .config import StdioTransportConfig

logger = logging.getLogger(__name__)


class Transport(Protocol):
    async def start(self) -> None: ...
    async def request(self, method: str, params: Any) -> Any: ...
    async def notify(self, method: str, params: Any | None = None) -> None: ...
    async def close(self) -> None: ...


def _rpc_error(server: str, msg: dict[str, Any]) -> McpError:
    err = msg.get("error") or {}
    return McpError(server, err.get("message", "RPC error"))


class StdioTransport:
    def __init__(self, server_name: str, config: StdioTransportConfig) -> None:
        self.server_name = server_name
        self.config = config
        self._proc: asyncio.subprocess.Process | None = None
        self._pending: dict[int, asyncio.Future] = {}
        self._ids = itertools.count(1)
        self._reader_task: asyncio.Task | None = None

    async def start(self) -> None:
        env = {**os.environ, **self.config.env} if self.config.env else None
        try:
            self._proc = await asyncio.create_subprocess_exec(
                self.config.command, *self.config.args,
                stdin=asyncio.subprocess.PIPE,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
                env=env,
            )
        except OSError as e:
            raise McpError(self.server_name, f"Cannot start '{self.config.command}': {e}", e) from e
        self._reader_task = asyncio.create_task(self._read_loop())

    async def request(self, method: str, params: Any) -> Any:
        rid = next(self._ids)
        fut: asyncio.Future = asyncio.get_running_loop().create_future()
        self._pending[rid] = fut
        try:
            await self._send({"jsonrpc": "2.0", "id": rid, "method": method, "params": params})
            return await asyncio.wait_for(fut, timeout=self.config.timeout)
        except asyncio.TimeoutError as e:
            raise McpError(self.server_name, f"'{method}' timed out", e) from e
        finally:
            self._pending.pop(rid, None)

    async def notify(self, method: str, params: Any | None = None) -> None:
        msg: dict[str, Any] = {"jsonrpc": "2.0", "method": method}
        if params is not None:
            msg["params"] = params
        await self._send(msg)

    async def close(self) -> None:
        if self._reader_task:
            self._reader_task.cancel()
        if self._proc and self._proc.returncode is None:
            self._proc.kill()
            await self._proc.wait()
        self._proc = None

    async def _send(self, msg: dict[str, Any]) -> None:
        if not self._proc or not self._proc.stdin:
            raise McpError(self.server_name, "MCP client not connected")
        self._proc.stdin.write((json.dumps(msg) + "\n").encode())
        await self._proc.stdin.drain()

    async def _read_loop(self) -> None:
        assert self._proc and self._proc.stdout
        while True:
            line = await self._proc.stdout.readline()
            if not line:
                break
            try:
                msg = json.loads(line)
            except json.JSONDecodeError:
                logger.debug("Ignoring non-JSON output from %s: %r", self.server_name, line[:200])
                continue
            fut = self._pending.get(msg.get("id"))
            if fut is None or fut.done():
                continue
            if msg.get("error"):
                fut.set_exception(_rpc_error(self.server_name, msg))
            else:
                fut.set_result(msg.get("result", {}))
        for fut in self._pending.values():
            if not fut.done():
                fut.set_exception(McpError(self.server_name, "MCP server closed the connection"))
