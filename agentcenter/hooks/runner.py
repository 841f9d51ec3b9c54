"""Hook orchestration — ordered blocking hooks, tracked background hooks."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Coroutine

from ..types import Run
from .registry import HookContext, HookRegistry, SummaryContext

logger = logging.getLogger(__name__)


class HookRunner:
    def __init__(self, registry: HookRegistry) -> None:
        self.registry = registry
        self._background_tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending_count(self) -> int:
        return len(self._background_tasks)

    async def run_pre_hooks(self, names: list[str], ctx: HookContext) -> None:
        """Run pre-hooks in order. Blocking hooks see and may rewrite ``ctx``;
        their errors propagate. Non-blocking hooks get a snapshot and run in
        the background.
        """
        for name in names:
            hook = await self.registry.pre.get(name)
            if hook is None:
                logger.debug("Skipping unknown pre-hook %s", name)
                continue
            if hook.blocking:
                await hook.execute(ctx)
            else:
                self._spawn(name, hook.execute(ctx.snapshot()))

    async def run_post_hooks(self, names: list[str], ctx: HookContext, run: Run) -> None:
        """Run post-hooks in order. Failures are logged and never reach the caller."""
        for name in names:
            hook = await self.registry.post.get(name)
            if hook is None:
                logger.debug("Skipping unknown post-hook %s", name)
                continue
            if hook.blocking:
                try:
                    await hook.execute(ctx, run)
                except Exception:
                    logger.exception("Post-hook %s failed for run %s", name, run.id)
            else:
                self._spawn(name, hook.execute(ctx.snapshot(), run.model_copy(deep=True)))

    async def summarize(self, name: str, ctx: SummaryContext) -> str | None:
        hook = await self.registry.summary.get(name)
        if hook is None:
            logger.debug("Summary hook %s is not registered", name)
            return None
        return await hook.execute(ctx)

    async def wait_all(self) -> None:
        """Wait until every background hook task, including ones spawned meanwhile, has finished."""
        while self._background_tasks:
            await asyncio.gather(*list(self._background_tasks), return_exceptions=True)

    async def cancel_all(self) -> None:
        tasks = list(self._background_tasks)
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)

    def _spawn(self, name: str, coro: Coroutine[Any, Any, None]) -> None:
        task = asyncio.create_task(self._guarded(name, coro))
        self._background_tasks.add(task)
        task.add_done_callback(self._background_tasks.discard)

    async def _guarded(self, name: str, coro: Coroutine[Any, Any, None]) -> None:
        try:
            await coro
        except Exception:
            logger.exception("Background hook %s failed", name)
