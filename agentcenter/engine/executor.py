"""Runs one conversational turn of an agent in a session."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from dataclasses import dataclass

from pydantic import BaseModel, ValidationError

from ..errors import (
    AgentNotFoundError,
    ExecutionCancelledError,
    InvalidConfigurationError,
    InvalidResponseError,
    ModelError,
    ModelNotFoundError,
    SessionNotFoundError,
)
from ..events import ObserverBus
from ..hooks import HookContext, HookRunner, SummaryContext
from ..models import LanguageModel
from ..registry import Registry
from ..storage import SessionStore
from ..tools import ToolRegistry
from ..tools.mcp import McpServerCenter, McpServerConfig
from ..transcript import HistoryWindow, TranscriptBuilder, entries_to_messages, flatten
from ..types import (
    Agent,
    AgentSession,
    AgentSessionContext,
    ExecutionCompleted,
    ExecutionFailed,
    ExecutionPolicy,
    ExecutionStarted,
    GenerationOptions,
    McpServerDiscovered,
    McpServerDiscoveryFailed,
    McpServerDiscoveryStarted,
    ModelResponse,
    Run,
    RunMetrics,
    RunOptions,
    RunSaved,
    RunStatus,
    Tool,
    Transcript,
    TranscriptBuildStarted,
    TranscriptBuilt,
)
from .policy import run_with_policy, stream_with_policy
from .run_context import RunContext

logger = logging.getLogger(__name__)


@dataclass
class PreparedTurn:
    agent: Agent
    session: AgentSession
    hook_ctx: HookContext
    model: LanguageModel
    tools: list[Tool]
    transcript: Transcript
    options: GenerationOptions
    run_context: RunContext
    pending_summary: str | None
    started: float


class ExecutionEngine:
    def __init__(
        self,
        *,
        agents: Registry[Agent],
        models: Registry[LanguageModel],
        tools: ToolRegistry,
        mcp_servers: Registry[McpServerConfig],
        mcp: McpServerCenter,
        hooks: HookRunner,
        store: SessionStore,
        bus: ObserverBus,
        builder: TranscriptBuilder | None = None,
    ) -> None:
        self.agents = agents
        self.models = models
        self.tools = tools
        self.mcp_servers = mcp_servers
        self.mcp = mcp
        self.hooks = hooks
        self.store = store
        self.bus = bus
        self.builder = builder or TranscriptBuilder()

    # -- public --

    async def run_turn(
        self,
        session: AgentSessionContext,
        message: str,
        *,
        as_type: type = str,
        policy: ExecutionPolicy | None = None,
        options: RunOptions | None = None,
        load_history: bool = True,
    ) -> Run:
        policy = policy or ExecutionPolicy()
        options = options or RunOptions()
        try:
            turn = await self._prepare(session, message, policy, options, load_history, as_type)
            response = await run_with_policy(
                policy,
                lambda: turn.model.respond(
                    turn.transcript,
                    turn.hook_ctx.user_message,
                    turn.tools,
                    turn.options,
                    turn.run_context,
                ),
            )
            content = encode_content(response.content, as_type)
            run = await self._persist(turn, response, content)
        except asyncio.CancelledError:
            self.bus.emit(ExecutionFailed(session=session, error=ExecutionCancelledError()))
            raise
        except Exception as e:
            self.bus.emit(ExecutionFailed(session=session, error=e))
            raise
        self.bus.emit(ExecutionCompleted(run=run))
        await self.hooks.run_post_hooks(turn.agent.post_hook_names, turn.hook_ctx, run)
        return run

    async def stream_turn(
        self,
        session: AgentSessionContext,
        message: str,
        *,
        policy: ExecutionPolicy | None = None,
        options: RunOptions | None = None,
        load_history: bool = True,
    ) -> AsyncIterator[str]:
        """Yield text deltas as the model produces them.

        The run is persisted only once the stream is exhausted; closing the
        iterator early cancels the model call and persists nothing.
        """
        policy = policy or ExecutionPolicy()
        options = options or RunOptions()
        chunks = None
        try:
            turn = await self._prepare(session, message, policy, options, load_history, str)
            chunks = stream_with_policy(
                policy,
                lambda: turn.model.stream(
                    turn.transcript,
                    turn.hook_ctx.user_message,
                    turn.tools,
                    turn.options,
                    turn.run_context,
                ),
            )
            response: ModelResponse | None = None
            async for chunk in chunks:
                if chunk.response is not None:
                    response = chunk.response
                if chunk.text:
                    yield chunk.text
            if response is None:
                raise ModelError(turn.model.name, "Stream ended without a final response")
            run = await self._persist(turn, response, response.content.encode("utf-8"))
        except (GeneratorExit, asyncio.CancelledError):
            self.bus.emit(ExecutionFailed(session=session, error=ExecutionCancelledError()))
            raise
        except Exception as e:
            self.bus.emit(ExecutionFailed(session=session, error=e))
            raise
        finally:
            if chunks is not None:
                await chunks.aclose()
        self.bus.emit(ExecutionCompleted(run=run))
        await self.hooks.run_post_hooks(turn.agent.post_hook_names, turn.hook_ctx, run)

    async def prepare_agent(self, agent_id: str) -> list[Tool]:
        """Discover the agent's MCP servers ahead of its first turn; returns its tools."""
        agent = await self.agents.get(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        await self._discover(agent)
        return await self._agent_tools(agent)

    # -- steps --

    async def _prepare(
        self,
        context: AgentSessionContext,
        message: str,
        policy: ExecutionPolicy,
        options: RunOptions,
        load_history: bool,
        as_type: type,
    ) -> PreparedTurn:
        started = time.monotonic()
        agent = await self.agents.get(context.agent_id)
        if agent is None:
            raise AgentNotFoundError(context.agent_id)
        self.bus.emit(ExecutionStarted(agent=agent, session=context))
        session = await self.store.get_session(
            context.session_id, agent_id=context.agent_id, user_id=context.user_id
        )
        if session is None:
            raise SessionNotFoundError(context.session_id)

        hook_ctx = HookContext(agent=agent, session=context, user_message=message)
        await self.hooks.run_pre_hooks(agent.pre_hook_names, hook_ctx)

        await self._discover(agent)
        tools = filter_tools(await self._agent_tools(agent), options)

        runs = session.runs if load_history else []
        self.bus.emit(TranscriptBuildStarted(agent_id=agent.id, previous_run_count=len(runs)))
        window = self.builder.window(flatten(runs), policy) if runs else HistoryWindow()
        summary = session.summary if load_history else None
        pending_summary = None
        if window.dropped and policy.summary_hook_name:
            produced = await self.hooks.summarize(
                policy.summary_hook_name,
                SummaryContext(
                    agent=agent,
                    session=session,
                    dropped_messages=list(window.dropped),
                    previous_summary=session.summary,
                ),
            )
            if produced:
                summary = pending_summary = produced
        transcript = self.builder.build(agent, window, tools, summary)
        self.bus.emit(TranscriptBuilt(transcript=transcript, agent_id=agent.id, tool_count=len(tools)))

        model = await self.models.get(agent.model_name)
        if model is None:
            raise ModelNotFoundError(agent.model_name)
        generation = options.generation.model_copy(update={
            "max_tool_calls": policy.max_tool_calls,
            "response_schema": None if as_type is str else response_schema(as_type),
        })
        return PreparedTurn(
            agent=agent,
            session=session,
            hook_ctx=hook_ctx,
            model=model,
            tools=tools,
            transcript=transcript,
            options=generation,
            run_context=RunContext(self.bus, agent.id, context.session_id, agent.model_name),
            pending_summary=pending_summary,
            started=started,
        )

    async def _discover(self, agent: Agent) -> None:
        configs: list[McpServerConfig] = []
        for name in agent.mcp_server_names:
            config = await self.mcp_servers.get(name)
            if config is None:
                raise InvalidConfigurationError(f"MCP server '{name}' is not registered")
            if not await self.mcp.is_discovered(name):
                configs.append(config)
        if not configs:
            return

        self.bus.emit(McpServerDiscoveryStarted(server_names=[c.name for c in configs]))
        results = await asyncio.gather(
            *(self.mcp.discover(c) for c in configs), return_exceptions=True
        )
        failure: BaseException | None = None
        for config, result in zip(configs, results):
            if isinstance(result, BaseException):
                self.bus.emit(McpServerDiscoveryFailed(server_name=config.name, error=result))
                failure = failure or result
            else:
                self.bus.emit(McpServerDiscovered(
                    server_name=config.name, tool_names=[t.name for t in result]
                ))
        if failure is not None:
            raise failure

    async def _agent_tools(self, agent: Agent) -> list[Tool]:
        tools: list[Tool] = await self.tools.resolve(agent.tool_names)
        names = {t.name for t in tools}
        for tool in await self.mcp.tools(agent.mcp_server_names):
            if tool.name in names:
                logger.warning("MCP tool %s shadowed by a registered tool for agent %s", tool.name, agent.id)
                continue
            names.add(tool.name)
            tools.append(tool)
        return tools

    async def _persist(self, turn: PreparedTurn, response: ModelResponse, content: bytes) -> Run:
        agent, context = turn.agent, turn.hook_ctx.session
        run = Run(
            agent_id=agent.id,
            session_id=context.session_id,
            user_id=context.user_id,
            messages=entries_to_messages(response.entries),
            raw_content=content,
            status=RunStatus.COMPLETED,
            model_name=agent.model_name,
            metrics=RunMetrics(
                input_tokens=response.usage.input_tokens,
                output_tokens=response.usage.output_tokens,
                total_tokens=response.usage.total_tokens,
                cached_tokens=response.usage.cached_tokens,
                duration_ms=int((time.monotonic() - turn.started) * 1000),
            ),
            metadata=dict(turn.hook_ctx.metadata),
        )
        await self.store.append_run(run, context.session_id, summary=turn.pending_summary)
        self.bus.emit(RunSaved(run_id=run.id, agent_id=agent.id, message_count=len(run.messages)))
        return run


def filter_tools(tools: list[Tool], options: RunOptions) -> list[Tool]:
    """Apply the allow list, then the block list."""
    if options.allowed_tool_names is not None:
        available = {t.name for t in tools}
        unknown = [n for n in options.allowed_tool_names if n not in available]
        if unknown:
            raise InvalidConfigurationError(f"Allowed tools not available to agent: {', '.join(unknown)}")
        allowed = set(options.allowed_tool_names)
        tools = [t for t in tools if t.name in allowed]
    blocked = set(options.blocked_tool_names)
    return [t for t in tools if t.name not in blocked]


def response_schema(as_type: type) -> dict:
    if isinstance(as_type, type) and issubclass(as_type, BaseModel):
        return as_type.model_json_schema()
    raise InvalidConfigurationError(f"Unsupported output type {as_type!r}")


def encode_content(content: str, as_type: type) -> bytes:
    if as_type is str:
        return content.encode("utf-8")
    try:
        value = as_type.model_validate_json(content)
    except ValidationError as e:
        raise InvalidResponseError(f"Model output does not match {as_type.__name__}", content, e) from e
    return value.model_dump_json().encode("utf-8")
