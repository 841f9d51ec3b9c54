"""Shared fixtures: an in-memory center wired to a scripted model."""

from __future__ import annotations

import uuid

import pytest

from agentcenter import Agent, AgentCenter, ScriptedModel
from agentcenter.types import AgentSession, CenterEvent


class EventRecorder:
    """Observer that keeps every event it sees."""

    def __init__(self) -> None:
        self.events: list[CenterEvent] = []

    def observe(self, event: CenterEvent) -> None:
        self.events.append(event)

    def types(self) -> list[str]:
        return [e.type for e in self.events]

    def of(self, cls: type) -> list:
        return [e for e in self.events if isinstance(e, cls)]

    def clear(self) -> None:
        self.events.clear()


@pytest.fixture
def user_id() -> uuid.UUID:
    return uuid.uuid4()


@pytest.fixture
def model() -> ScriptedModel:
    return ScriptedModel()


@pytest.fixture
def recorder() -> EventRecorder:
    return EventRecorder()


@pytest.fixture
async def center(model: ScriptedModel, recorder: EventRecorder) -> AgentCenter:
    center = AgentCenter(observers=[recorder])
    await center.register_model(model)
    yield center
    await center.aclose()


async def make_session(
    center: AgentCenter,
    user_id: uuid.UUID,
    *,
    model_name: str = "mock",
    **agent_fields,
) -> tuple[Agent, AgentSession]:
    agent = await center.register_agent(
        Agent(name=agent_fields.pop("name", "helper"), model_name=model_name, **agent_fields)
    )
    session = await center.create_session(agent.id, user_id)
    return agent, session
