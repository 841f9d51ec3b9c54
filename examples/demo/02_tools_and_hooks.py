"""02 — Tools, a pre-hook that tags the message and a background post-hook."""

import asyncio
import uuid

from _provider import create_model
from pydantic import BaseModel

from agentcenter import Agent, AgentCenter, ExecutionPolicy, PostHook, PreHook, define_tool


class CityArgs(BaseModel):
    city: str


async def get_weather(args: CityArgs) -> dict:
    return {"city": args.city, "celsius": 21, "sky": "clear"}


async def add_date(ctx):
    ctx.user_message = f"(today is Monday) {ctx.user_message}"


async def audit(ctx, run):
    print(f"  [audit] run {run.id} used {run.metrics.total_tokens} tokens")


async def main():
    center = AgentCenter()
    model = create_model()
    await center.register_model(model)
    await center.register_tool(define_tool("get_weather", "Current weather for a city", CityArgs, get_weather))
    await center.register_pre_hook(PreHook("add_date", add_date))
    await center.register_post_hook(PostHook("audit", audit, blocking=False))

    agent = await center.register_agent(Agent(
        name="weather",
        model_name=model.name,
        instructions="Answer weather questions using the tool.",
        tool_names=["get_weather"],
        pre_hook_names=["add_date"],
        post_hook_names=["audit"],
    ))
    session = await center.create_session(agent.id, uuid.uuid4())

    run = await center.run_agent(
        session.context, "What's the weather in Oslo?", policy=ExecutionPolicy(retries=1, timeout=60)
    )
    print(run.as_string())

    await center.wait_for_background_hooks()
    await center.aclose()


if __name__ == "__main__":
    asyncio.run(main())
