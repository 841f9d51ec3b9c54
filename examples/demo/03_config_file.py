"""03 — Load models and agents from YAML and keep sessions on disk."""

import asyncio
import tempfile
import uuid
from pathlib import Path

from agentcenter import AgentCenter
from agentcenter.config import Settings

CONFIG = """
models:
  - name: default
    model: gpt-4o-mini
    api_key_env: OPENAI_API_KEY
agents:
  - id: poet
    name: Poet
    model_name: default
    instructions: Answer in a haiku.
"""


async def main():
    root = Path(tempfile.mkdtemp())
    (root / "center.yaml").write_text(CONFIG)
    settings = Settings(storage_dir=root / "sessions", debug_dir=root / "debug", config_path=root / "center.yaml")

    center = await AgentCenter.from_settings(settings)
    session = await center.create_session("poet", uuid.uuid4())
    run = await center.run_agent(session.context, "Describe the sea.")
    print(run.as_string())
    print(f"\nsessions: {root / 'sessions'}\ndebug:    {root / 'debug'}")
    await center.aclose()


if __name__ == "__main__":
    asyncio.run(main())
