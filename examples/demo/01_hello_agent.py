"""01 — Register a model and an agent, run a turn, then stream one."""

import asyncio
import uuid

from _provider import create_model

from agentcenter import Agent, AgentCenter, ConsoleObserver


async def main():
    center = AgentCenter(observers=[ConsoleObserver()])
    model = create_model()
    await center.register_model(model)
    agent = await center.register_agent(
        Agent(name="demo-agent", model_name=model.name, instructions="You are a helpful assistant.")
    )
    session = await center.create_session(agent.id, uuid.uuid4(), name="hello")

    print("[run]")
    run = await center.run_agent(session.context, "Introduce Python in one sentence.")
    print(f"  result: {run.as_string()}")
    print(f"  tokens: {run.metrics.total_tokens}")

    print("\n[stream]")
    async for delta in center.stream_agent(session.context, "And Rust?"):
        print(delta, end="", flush=True)
    print()

    await center.aclose()


if __name__ == "__main__":
    asyncio.run(main())
