"""Shared real model — loads .env and creates an OpenAI-compatible chat model."""

import os
from pathlib import Path

from dotenv import load_dotenv

from agentcenter import OpenAIChatModel

load_dotenv(Path(__file__).resolve().parents[2] / ".env")

_KEY = os.getenv("OPENAI_API_KEY")
_BASE = os.getenv("OPENAI_BASE_URL")
_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")


def create_model(name: str = "default") -> OpenAIChatModel:
    return OpenAIChatModel(name, _MODEL, api_key=_KEY, base_url=_BASE)
