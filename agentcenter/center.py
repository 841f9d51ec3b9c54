"""Owns the registries, the store and the observers, and runs agents."""

from __future__ import annotations

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any, Callable

from .config import AgentConfiguration, ModelConfig, Settings, get_settings, load_configuration
from .engine import ExecutionEngine
from .errors import AgentNotFoundError, InvalidConfigurationError
from .events import Observer, ObserverBus
from .hooks import HookRegistry, HookRunner, PostHook, PreHook, SummaryHook
from .models import LanguageModel, OpenAIChatModel
from .observers import FileDebugObserver
from .registry import Registry
from .storage import FileSessionStore, InMemorySessionStore, SessionStore
from .tools import ToolRegistry
from .tools.mcp import McpServerCenter, McpServerConfig
from .transcript import TranscriptBuilder
from .types import (
    Agent,
    AgentSession,
    AgentSessionContext,
    CenterEvent,
    ExecutionPolicy,
    Run,
    RunOptions,
    SessionCreated,
    SessionSort,
    Tool,
)

logger = logging.getLogger(__name__)

ModelFactory = Callable[[ModelConfig], LanguageModel]


def openai_model_factory(config: ModelConfig) -> LanguageModel:
    return OpenAIChatModel(
        name=config.name,
        model=config.model,
        api_key=config.resolve_api_key(),
        base_url=config.base_url,
    )


class AgentCenter:
    """
    Composition root of the runtime.

    Registration of models, tools, hooks, MCP servers and agents is
    serialized by a single write lock, so a bulk :meth:`load` is applied
    all-or-nothing. Turns run concurrently.

    Usage::

        center = AgentCenter()
        await center.register_model(model)
        agent = await center.register_agent(Agent(name="helper", model_name=model.name))
        session = await center.create_session(agent.id, user_id)
        run = await center.run_agent(session.context, "hello")
    """

    def __init__(
        self,
        store: SessionStore | None = None,
        observers: list[Observer | Callable[[CenterEvent], None]] | None = None,
        mcp: McpServerCenter | None = None,
        model_factory: ModelFactory = openai_model_factory,
        builder: TranscriptBuilder | None = None,
    ) -> None:
        self.store: SessionStore = store or InMemorySessionStore()
        self.bus = ObserverBus()
        for observer in observers or []:
            self.bus.add(observer)
        self.mcp = mcp or McpServerCenter()
        self.model_factory = model_factory

        self.agents = Registry[Agent]("Agent")
        self.models = Registry[LanguageModel]("Model")
        self.tools = ToolRegistry()
        self.mcp_servers = Registry[McpServerConfig]("MCP server")
        self.hook_registry = HookRegistry()
        self.hooks = HookRunner(self.hook_registry)
        self._write_lock = asyncio.Lock()

        self.engine = ExecutionEngine(
            agents=self.agents,
            models=self.models,
            tools=self.tools,
            mcp_servers=self.mcp_servers,
            mcp=self.mcp,
            hooks=self.hooks,
            store=self.store,
            bus=self.bus,
            builder=builder,
        )

    @classmethod
    async def from_settings(cls, settings: Settings | None = None, **kwargs: Any) -> AgentCenter:
        """Build a center backed by the file store, configured from ``AGENTCENTER_*`` variables."""
        settings = settings or get_settings()
        logging.getLogger("agentcenter").setLevel(settings.log_level)
        center = cls(store=FileSessionStore(settings.storage_dir), **kwargs)
        if settings.debug_dir is not None:
            center.add_observer(FileDebugObserver(settings.debug_dir))
        if settings.config_path is not None:
            await center.load_file(settings.config_path)
        return center

    # -- observers --

    def add_observer(self, observer: Observer | Callable[[CenterEvent], None]) -> Observer:
        return self.bus.add(observer)

    def remove_observer(self, observer: Observer) -> None:
        self.bus.remove(observer)

    # -- registration --

    async def register_model(self, model: LanguageModel, *, replace: bool = False) -> None:
        async with self._write_lock:
            await self.models.register(model.name, model, replace=replace)

    async def register_tool(self, tool: Tool, *, replace: bool = False) -> None:
        async with self._write_lock:
            await self.tools.add(tool, replace=replace)

    async def register_tools(self, tools: list[Tool]) -> None:
        async with self._write_lock:
            await self.tools.register_many(_by_name(tools))

    async def register_mcp_server(self, config: McpServerConfig, *, replace: bool = False) -> None:
        async with self._write_lock:
            await self.mcp_servers.register(config.name, config, replace=replace)

    async def register_pre_hook(self, hook: PreHook, *, replace: bool = False) -> None:
        async with self._write_lock:
            await self.hook_registry.add_pre(hook, replace=replace)

    async def register_post_hook(self, hook: PostHook, *, replace: bool = False) -> None:
        async with self._write_lock:
            await self.hook_registry.add_post(hook, replace=replace)

    async def register_summary_hook(self, hook: SummaryHook, *, replace: bool = False) -> None:
        async with self._write_lock:
            await self.hook_registry.add_summary(hook, replace=replace)

    async def register_agent(self, agent: Agent, *, replace: bool = False) -> Agent:
        async with self._write_lock:
            await self.agents.register(agent.id, agent, replace=replace)
        return agent

    async def get_agent(self, agent_id: str) -> Agent | None:
        return await self.agents.get(agent_id)

    async def list_agents(self) -> list[Agent]:
        return list((await self.agents.snapshot()).values())

    async def get_model(self, name: str) -> LanguageModel | None:
        return await self.models.get(name)

    async def get_tool(self, name: str) -> Tool | None:
        return await self.tools.get(name)

    async def get_mcp_server(self, name: str) -> McpServerConfig | None:
        return await self.mcp_servers.get(name)

    # -- bulk configuration --

    async def load(self, configuration: AgentConfiguration) -> None:
        """Validate the whole bundle, then register everything in it.

        Nothing is registered when any part is invalid: duplicate or already
        registered names, agents referring to unknown models or MCP servers,
        or to tools that are not registered yet.
        """
        async with self._write_lock:
            models = await self.models.snapshot()
            servers = await self.mcp_servers.snapshot()
            agents = await self.agents.snapshot()
            tools = await self.tools.snapshot()

            errors: list[str] = []
            errors += [
                f"model '{m.name}' is already registered"
                for m in configuration.models if m.name in models
            ]
            errors += [
                f"MCP server '{s.name}' is already registered"
                for s in configuration.mcp_servers if s.name in servers
            ]
            errors += [
                f"agent '{a.id}' is already registered"
                for a in configuration.agents if a.id in agents
            ]

            model_names = set(models) | {m.name for m in configuration.models}
            server_names = set(servers) | {s.name for s in configuration.mcp_servers}
            for agent in configuration.agents:
                if agent.model_name not in model_names:
                    errors.append(f"agent '{agent.id}' uses unknown model '{agent.model_name}'")
                errors += [
                    f"agent '{agent.id}' uses unknown tool '{t}'"
                    for t in agent.tool_names if t not in tools
                ]
                errors += [
                    f"agent '{agent.id}' uses unknown MCP server '{s}'"
                    for s in agent.mcp_server_names if s not in server_names
                ]
            if errors:
                raise InvalidConfigurationError("Invalid configuration: " + "; ".join(errors))

            built: dict[str, LanguageModel] = {}
            for config in configuration.models:
                try:
                    built[config.name] = self.model_factory(config)
                except Exception as e:
                    raise InvalidConfigurationError(f"Cannot create model '{config.name}': {e}", e) from e
            await self.models.register_many(built)
            await self.mcp_servers.register_many({s.name: s for s in configuration.mcp_servers})
            await self.agents.register_many({a.id: a for a in configuration.agents})
        logger.info(
            "Loaded %d models, %d MCP servers, %d agents",
            len(configuration.models), len(configuration.mcp_servers), len(configuration.agents),
        )

    async def load_file(self, path: str | Path) -> None:
        await self.load(load_configuration(path))

    # -- sessions --

    async def create_session(
        self,
        agent_id: str,
        user_id: uuid.UUID,
        name: str | None = None,
        session_data: dict[str, Any] | None = None,
    ) -> AgentSession:
        agent = await self.agents.get(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        session = AgentSession(
            agent_id=agent_id,
            user_id=user_id,
            name=name,
            session_data=dict(session_data or {}),
        )
        session = await self.store.upsert_session(session)
        self.bus.emit(SessionCreated(
            session=session.context,
            model_name=agent.model_name,
            tool_count=len(agent.tool_names),
        ))
        return session

    async def get_session(self, session_id: uuid.UUID) -> AgentSession | None:
        return await self.store.get_session(session_id)

    async def list_sessions(
        self,
        agent_id: str | None = None,
        user_id: uuid.UUID | None = None,
        limit: int | None = None,
        offset: int = 0,
        sort_by: SessionSort = SessionSort.UPDATED_AT_DESC,
    ) -> list[AgentSession]:
        return await self.store.get_sessions(agent_id, user_id, limit, offset, sort_by)

    async def rename_session(self, session_id: uuid.UUID, name: str) -> AgentSession:
        return await self.store.rename_session(session_id, name)

    async def delete_session(self, session_id: uuid.UUID) -> bool:
        return await self.store.delete_session(session_id)

    # -- execution --

    async def prepare_agent(self, agent_id: str) -> list[Tool]:
        return await self.engine.prepare_agent(agent_id)

    async def run_agent(
        self,
        session: AgentSessionContext,
        message: str,
        *,
        as_type: type = str,
        policy: ExecutionPolicy | None = None,
        options: RunOptions | None = None,
        load_history: bool = True,
    ) -> Run:
        return await self.engine.run_turn(
            session, message, as_type=as_type, policy=policy, options=options, load_history=load_history
        )

    def stream_agent(
        self,
        session: AgentSessionContext,
        message: str,
        *,
        policy: ExecutionPolicy | None = None,
        options: RunOptions | None = None,
        load_history: bool = True,
    ) -> AsyncIterator[str]:
        return self.engine.stream_turn(
            session, message, policy=policy, options=options, load_history=load_history
        )

    async def wait_for_background_hooks(self) -> None:
        await self.hooks.wait_all()

    async def cancel_background_hooks(self) -> None:
        await self.hooks.cancel_all()

    async def aclose(self) -> None:
        await self.hooks.cancel_all()
        await self.mcp.aclose()


def _by_name(tools: list[Tool]) -> dict[str, Tool]:
    named: dict[str, Tool] = {}
    for tool in tools:
        if tool.name in named:
            raise InvalidConfigurationError(f"Duplicate tool name '{tool.name}'")
        named[tool.name] = tool
    return named
