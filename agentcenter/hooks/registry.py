"""Hook types and registry."""

from __future__ import annotations

import copy
import dataclasses
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable

from ..registry import Registry
from ..types import Agent, AgentSession, AgentSessionContext, Message, Run


@dataclass
class HookContext:
    """Mutable per-turn context. Blocking pre-hooks may rewrite ``user_message``."""

    agent: Agent
    session: AgentSessionContext
    user_message: str
    metadata: dict[str, Any] = field(default_factory=dict)

    def snapshot(self) -> HookContext:
        return dataclasses.replace(self, metadata=copy.deepcopy(self.metadata))


@dataclass
class SummaryContext:
    agent: Agent
    session: AgentSession
    dropped_messages: list[Message]
    previous_summary: str | None = None


PreHookFn = Callable[[HookContext], Awaitable[None]]
PostHookFn = Callable[[HookContext, Run], Awaitable[None]]
SummaryHookFn = Callable[[SummaryContext], Awaitable[str]]


@dataclass
class PreHook:
    name: str
    execute: PreHookFn
    blocking: bool = True


@dataclass
class PostHook:
    name: str
    execute: PostHookFn
    blocking: bool = True


@dataclass
class SummaryHook:
    name: str
    execute: SummaryHookFn


class HookRegistry:
    def __init__(self) -> None:
        self.pre = Registry[PreHook]("Pre-hook")
        self.post = Registry[PostHook]("Post-hook")
        self.summary = Registry[SummaryHook]("Summary hook")

    async def add_pre(self, hook: PreHook, *, replace: bool = False) -> None:
        await self.pre.register(hook.name, hook, replace=replace)

    async def add_post(self, hook: PostHook, *, replace: bool = False) -> None:
        await self.post.register(hook.name, hook, replace=replace)

    async def add_summary(self, hook: SummaryHook, *, replace: bool = False) -> None:
        await self.summary.register(hook.name, hook, replace=replace)
