"""MCP clients: handshake, tool listing and tool calls.

``McpClient`` speaks JSON-RPC over a subprocess transport. ``HttpMcpClient``
talks to streamable-HTTP servers through the ``mcp`` SDK session.
"""

from __future__ import annotations

import asyncio
import json
import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Protocol, TypeVar

import httpx
from mcp import ClientSession
from mcp.client.streamable_http import streamablehttp_client

from ...errors import McpError
from ..schema import JsonArguments
from .config import HttpTransportConfig, McpServerConfig, StdioTransportConfig
from .transport import StdioTransport, Transport

logger = logging.getLogger(__name__)

PROTOCOL_VERSION = "2024-11-05"
CLIENT_INFO = {"name": "agentcenter", "version": "0.1.0"}

T = TypeVar("T")
HttpClientFactory = Callable[..., httpx.AsyncClient]


@dataclass
class McpToolInfo:
    name: str
    description: str = ""
    input_schema: dict[str, Any] | None = None


class McpConnection(Protocol):
    config: McpServerConfig

    @property
    def connected(self) -> bool: ...
    async def connect(self) -> None: ...
    async def list_tools(self) -> list[McpToolInfo]: ...
    async def call_tool(self, name: str, arguments: dict[str, Any]) -> str: ...
    async def close(self) -> None: ...


def tool_infos(page: dict[str, Any]) -> list[McpToolInfo]:
    return [
        McpToolInfo(
            name=t["name"],
            description=t.get("description") or "",
            input_schema=t.get("inputSchema"),
        )
        for t in page.get("tools", [])
    ]


def tool_output(server_name: str, tool_name: str, result: dict[str, Any]) -> str:
    """Text of a ``tools/call`` result; error results raise ``McpError``."""
    text = "".join(
        c.get("text", "") for c in result.get("content", []) if c.get("type", "text") == "text"
    )
    if result.get("isError"):
        raise McpError(server_name, text or f"MCP tool '{tool_name}' failed")
    if not text and result.get("structuredContent") is not None:
        return json.dumps(result["structuredContent"])
    return text


class McpClient:
    """Client for stdio servers, or any JSON-RPC ``Transport`` passed in."""

    def __init__(self, config: McpServerConfig, transport: Transport | None = None) -> None:
        self.config = config
        if transport is None:
            if not isinstance(config.transport, StdioTransportConfig):
                raise McpError(config.name, "McpClient needs a stdio transport; use HttpMcpClient")
            transport = StdioTransport(config.name, config.transport)
        self._transport = transport
        self._connected = False

    @property
    def connected(self) -> bool:
        return self._connected

    async def connect(self) -> None:
        if self._connected:
            return
        await self._transport.start()
        await self._transport.request("initialize", {
            "protocolVersion": PROTOCOL_VERSION,
            "capabilities": {},
            "clientInfo": CLIENT_INFO,
        })
        await self._transport.notify("notifications/initialized")
        self._connected = True

    async def list_tools(self) -> list[McpToolInfo]:
        tools: list[McpToolInfo] = []
        cursor: str | None = None
        while True:
            page = await self._transport.request("tools/list", {"cursor": cursor} if cursor else {})
            tools.extend(tool_infos(page))
            cursor = page.get("nextCursor")
            if not cursor:
                return tools

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> str:
        res = await self._transport.request("tools/call", {"name": name, "arguments": arguments})
        return tool_output(self.config.name, name, res)

    async def close(self) -> None:
        await self._transport.close()
        self._connected = False


class HttpMcpClient:
    """Client for streamable-HTTP servers.

    The SDK's transport and session are context managers tied to the task
    that enters them, so a runner task holds both open from ``connect`` until
    ``close``. Requests from any task go through the shared session.
    """

    def __init__(
        self,
        config: McpServerConfig,
        http_client_factory: HttpClientFactory | None = None,
    ) -> None:
        if not isinstance(config.transport, HttpTransportConfig):
            raise McpError(config.name, "HttpMcpClient needs an http transport")
        self.config = config
        self.transport: HttpTransportConfig = config.transport
        self._http_client_factory = http_client_factory
        self._session: ClientSession | None = None
        self._runner: asyncio.Task | None = None
        self._stop = asyncio.Event()

    @property
    def connected(self) -> bool:
        return self._session is not None

    async def connect(self) -> None:
        if self._session is not None:
            return
        ready: asyncio.Future[ClientSession] = asyncio.get_running_loop().create_future()
        self._stop = asyncio.Event()
        self._runner = asyncio.create_task(self._run(ready))
        try:
            self._session = await asyncio.wait_for(ready, timeout=self.transport.timeout)
        except BaseException as e:
            runner, self._runner = self._runner, None
            runner.cancel()
            await asyncio.gather(runner, return_exceptions=True)
            if not isinstance(e, Exception):
                raise
            raise McpError(
                self.config.name, f"Cannot connect to {self.transport.url}: {str(e) or type(e).__name__}", e
            ) from e

    async def list_tools(self) -> list[McpToolInfo]:
        tools: list[McpToolInfo] = []
        cursor: str | None = None
        while True:
            result = await self._call("tools/list", lambda s: s.list_tools(cursor=cursor))
            page = result.model_dump(mode="json", by_alias=True, exclude_none=True)
            tools.extend(tool_infos(page))
            cursor = page.get("nextCursor")
            if not cursor:
                return tools

    async def call_tool(self, name: str, arguments: dict[str, Any]) -> str:
        result = await self._call("tools/call", lambda s: s.call_tool(name, arguments))
        return tool_output(
            self.config.name, name, result.model_dump(mode="json", by_alias=True, exclude_none=True)
        )

    async def close(self) -> None:
        self._session = None
        runner, self._runner = self._runner, None
        if runner is None or runner.done():
            return
        self._stop.set()
        try:
            await asyncio.wait_for(runner, timeout=self.transport.timeout)
        except asyncio.TimeoutError:
            logger.warning("MCP server %s did not shut down in time", self.config.name)

    async def _call(self, method: str, send: Callable[[ClientSession], Awaitable[T]]) -> T:
        if self._session is None:
            raise McpError(self.config.name, "MCP client not connected")
        try:
            return await send(self._session)
        except McpError:
            raise
        except Exception as e:
            raise McpError(self.config.name, f"'{method}' failed: {str(e) or type(e).__name__}", e) from e

    async def _run(self, ready: asyncio.Future[ClientSession]) -> None:
        options: dict[str, Any] = {
            "headers": dict(self.transport.headers) or None,
            "timeout": self.transport.timeout,
        }
        if self._http_client_factory is not None:
            options["httpx_client_factory"] = self._http_client_factory
        try:
            async with streamablehttp_client(self.transport.url, **options) as (read, write, _):
                async with ClientSession(read, write) as session:
                    await session.initialize()
                    if ready.done():
                        return
                    ready.set_result(session)
                    await self._stop.wait()
        except Exception as e:
            if not ready.done():
                ready.set_exception(e)
            else:
                logger.warning("Connection to MCP server %s ended: %s", self.config.name, e)


def create_client(config: McpServerConfig) -> McpConnection:
    if isinstance(config.transport, HttpTransportConfig):
        return HttpMcpClient(config)
    return McpClient(config)


class McpTool:
    """A tool exposed by an MCP server, callable through its client."""

    def __init__(self, client: McpConnection, info: McpToolInfo) -> None:
        self.name = info.name
        self.description = info.description
        self.server_name = client.config.name
        self._client = client
        self._schema = JsonArguments(info.input_schema)

    def parameters_schema(self) -> dict:
        return self._schema.to_json_schema()

    async def call(self, arguments: str) -> str:
        return await self._client.call_tool(self.name, self._schema.parse(arguments))

    def __repr__(self) -> str:
        return f"McpTool({self.server_name}:{self.name})"
