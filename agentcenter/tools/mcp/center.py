"""MCP server center — connects to servers once and caches their tools."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from ...errors import McpError
from .client import McpConnection, McpTool, create_client
from .config import McpServerConfig

logger = logging.getLogger(__name__)

ClientFactory = Callable[[McpServerConfig], McpConnection]


class McpServerCenter:
    """Discovery is memoized per server name and single-flight: concurrent
    callers asking for the same server share one connection attempt. Only
    successful discoveries are cached, so a failed server is retried on the
    next call.
    """

    def __init__(self, client_factory: ClientFactory = create_client) -> None:
        self._client_factory = client_factory
        self._clients: dict[str, McpConnection] = {}
        self._tools: dict[str, list[McpTool]] = {}
        self._inflight: dict[str, asyncio.Task[list[McpTool]]] = {}
        self._lock = asyncio.Lock()

    async def is_discovered(self, name: str) -> bool:
        async with self._lock:
            return name in self._tools

    async def discover(self, config: McpServerConfig) -> list[McpTool]:
        async with self._lock:
            cached = self._tools.get(config.name)
            if cached is not None:
                return list(cached)
            task = self._inflight.get(config.name)
            if task is None:
                task = asyncio.create_task(self._discover(config))
                self._inflight[config.name] = task
                task.add_done_callback(lambda t, n=config.name: self._inflight.pop(n, None))
        return list(await asyncio.shield(task))

    async def tools(self, names: list[str]) -> list[McpTool]:
        """Tools of the already-discovered servers among ``names``, in order."""
        async with self._lock:
            return [t for n in names for t in self._tools.get(n, [])]

    async def aclose(self) -> None:
        async with self._lock:
            clients = list(self._clients.values())
            self._clients.clear()
            self._tools.clear()
        for client in clients:
            try:
                await client.close()
            except Exception:
                logger.warning("Error closing MCP client %s", client.config.name, exc_info=True)

    async def _discover(self, config: McpServerConfig) -> list[McpTool]:
        logger.info("Connecting to MCP server %s", config.name)
        client = self._client_factory(config)
        try:
            await client.connect()
            infos = await client.list_tools()
        except Exception as e:
            try:
                await client.close()
            except Exception:
                logger.debug("Cleanup after failed discovery of %s failed", config.name, exc_info=True)
            if isinstance(e, McpError):
                raise
            raise McpError(config.name, f"Discovery of '{config.name}' failed: {e}", e) from e
        tools = [McpTool(client, info) for info in infos]
        self._clients[config.name] = client
        self._tools[config.name] = tools
        logger.info("MCP server %s provides %d tools", config.name, len(tools))
        return tools
