"""Unit tests for hook orchestration."""

import asyncio
import uuid

import pytest

from agentcenter import Agent, PostHook, PreHook
from agentcenter.hooks import HookContext, HookRegistry, HookRunner
from agentcenter.types import AgentSessionContext, Run
from tests.conftest import make_session


def _ctx(message: str = "hello") -> HookContext:
    return HookContext(
        agent=Agent(name="a", model_name="mock"),
        session=AgentSessionContext(agent_id="a", user_id=uuid.uuid4(), session_id=uuid.uuid4()),
        user_message=message,
    )


def _run() -> Run:
    return Run(agent_id="a", session_id=uuid.uuid4(), user_id=uuid.uuid4(), raw_content=b"ok")


class TestHookRunner:
    async def test_pre_hooks_run_in_order(self):
        registry = HookRegistry()
        order = []

        def make(tag):
            async def hook(ctx):
                order.append(tag)
                ctx.user_message += tag
            return hook

        await registry.add_pre(PreHook("a", make("a")))
        await registry.add_pre(PreHook("b", make("b")))
        runner = HookRunner(registry)
        ctx = _ctx("x")

        await runner.run_pre_hooks(["b", "a"], ctx)

        assert order == ["b", "a"]
        assert ctx.user_message == "xba"

    async def test_non_blocking_hook_gets_snapshot(self):
        registry = HookRegistry()
        released = asyncio.Event()
        seen = []

        async def background(ctx):
            await released.wait()
            ctx.user_message = "rewritten"
            ctx.metadata["bg"] = True
            seen.append(ctx.user_message)

        await registry.add_pre(PreHook("bg", background, blocking=False))
        runner = HookRunner(registry)
        ctx = _ctx()

        await runner.run_pre_hooks(["bg"], ctx)
        assert runner.pending_count == 1
        released.set()
        await runner.wait_all()

        assert seen == ["rewritten"]
        assert ctx.user_message == "hello"
        assert ctx.metadata == {}
        assert runner.pending_count == 0

    async def test_blocking_post_hook_errors_are_swallowed(self, caplog):
        registry = HookRegistry()
        ran = []

        async def fail(ctx, run):
            raise RuntimeError("post failed")

        async def after(ctx, run):
            ran.append(run.id)

        await registry.add_post(PostHook("fail", fail))
        await registry.add_post(PostHook("after", after))
        runner = HookRunner(registry)
        run = _run()

        await runner.run_post_hooks(["fail", "after"], _ctx(), run)

        assert ran == [run.id]
        assert "Post-hook fail failed" in caplog.text

    async def test_background_post_hook_gets_copy_of_run(self):
        registry = HookRegistry()
        copies = []

        async def mutate(ctx, run):
            run.metadata["touched"] = True
            copies.append(run)

        await registry.add_post(PostHook("mutate", mutate, blocking=False))
        runner = HookRunner(registry)
        run = _run()

        await runner.run_post_hooks(["mutate"], _ctx(), run)
        await runner.wait_all()

        assert copies[0].id == run.id
        assert copies[0] is not run
        assert run.metadata == {}

    async def test_background_failure_is_logged(self, caplog):
        registry = HookRegistry()

        async def fail(ctx):
            raise RuntimeError("background boom")

        await registry.add_pre(PreHook("fail", fail, blocking=False))
        runner = HookRunner(registry)

        await runner.run_pre_hooks(["fail"], _ctx())
        await runner.wait_all()

        assert "Background hook fail failed" in caplog.text

    async def test_cancel_all(self):
        registry = HookRegistry()
        finished = []

        async def forever(ctx):
            await asyncio.sleep(10)
            finished.append(True)

        await registry.add_pre(PreHook("forever", forever, blocking=False))
        runner = HookRunner(registry)
        await runner.run_pre_hooks(["forever"], _ctx())

        await runner.cancel_all()

        assert finished == []
        assert runner.pending_count == 0

    async def test_duplicate_names_rejected(self):
        registry = HookRegistry()

        async def noop(ctx):
            pass

        await registry.add_pre(PreHook("x", noop))
        with pytest.raises(Exception, match="already registered"):
            await registry.add_pre(PreHook("x", noop))
        await registry.add_pre(PreHook("x", noop), replace=True)


class TestBackgroundHooksInCenter:
    async def test_background_post_hook_outlives_turn(self, center, user_id):
        released = asyncio.Event()
        done = []

        async def slow(ctx, run):
            await released.wait()
            done.append(run.id)

        await center.register_post_hook(PostHook("slow", slow, blocking=False))
        _, session = await make_session(center, user_id, post_hook_names=["slow"])

        run = await center.run_agent(session.context, "hi")
        assert done == []

        released.set()
        await center.wait_for_background_hooks()
        assert done == [run.id]
