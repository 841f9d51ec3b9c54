"""Unit tests for configuration bundles and settings."""

import json
import uuid

import pytest

from agentcenter import AgentCenter, AgentConfiguration, InvalidConfigurationError, ScriptedModel
from agentcenter.config import ModelConfig, Settings, get_settings, load_configuration
from agentcenter.storage import FileSessionStore
from agentcenter.tools.mcp import HttpTransportConfig


class TestAgentConfiguration:
    def test_transport_discriminator(self):
        configuration = AgentConfiguration.parse({
            "mcp_servers": [
                {"name": "web", "transport": {"type": "http", "url": "http://localhost:8000/mcp"}},
            ],
        })
        assert isinstance(configuration.mcp_servers[0].transport, HttpTransportConfig)

    def test_duplicate_names(self):
        with pytest.raises(InvalidConfigurationError, match="Duplicate model names"):
            AgentConfiguration.parse({
                "models": [{"name": "m", "model": "a"}, {"name": "m", "model": "b"}],
            })

    def test_invalid_shape(self):
        with pytest.raises(InvalidConfigurationError):
            AgentConfiguration.parse({"agents": [{"name": "no model"}]})

    def test_api_key_resolution(self, monkeypatch):
        monkeypatch.setenv("MY_KEY", "secret")
        assert ModelConfig(name="m", model="x", api_key_env="MY_KEY").resolve_api_key() == "secret"
        assert ModelConfig(name="m", model="x", api_key="inline").resolve_api_key() == "inline"
        assert ModelConfig(name="m", model="x").resolve_api_key() is None


class TestLoadConfiguration:
    def test_json(self, tmp_path):
        path = tmp_path / "center.json"
        path.write_text(json.dumps({"models": [{"name": "m", "model": "gpt-4o-mini"}]}))
        assert load_configuration(path).models[0].model == "gpt-4o-mini"

    def test_empty_yaml(self, tmp_path):
        path = tmp_path / "center.yaml"
        path.write_text("")
        assert load_configuration(path) == AgentConfiguration()

    def test_missing_file(self, tmp_path):
        with pytest.raises(InvalidConfigurationError, match="not found"):
            load_configuration(tmp_path / "nope.yaml")

    def test_unsupported_format(self, tmp_path):
        path = tmp_path / "center.toml"
        path.write_text("")
        with pytest.raises(InvalidConfigurationError, match="Unsupported"):
            load_configuration(path)

    def test_bad_yaml(self, tmp_path):
        path = tmp_path / "center.yaml"
        path.write_text("models: [unclosed")
        with pytest.raises(InvalidConfigurationError, match="Cannot parse"):
            load_configuration(path)

    def test_top_level_list(self, tmp_path):
        path = tmp_path / "center.yaml"
        path.write_text("- a\n- b\n")
        with pytest.raises(InvalidConfigurationError, match="mapping"):
            load_configuration(path)


class TestSettings:
    def test_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("AGENTCENTER_STORAGE_DIR", str(tmp_path / "store"))
        monkeypatch.setenv("AGENTCENTER_DEBUG_DIR", str(tmp_path / "debug"))
        monkeypatch.setenv("AGENTCENTER_LOG_LEVEL", "debug")
        monkeypatch.delenv("AGENTCENTER_CONFIG", raising=False)

        settings = get_settings()

        assert settings.storage_dir == tmp_path / "store"
        assert settings.debug_dir == tmp_path / "debug"
        assert settings.log_level == "DEBUG"
        assert settings.config_path is None

    async def test_from_settings(self, tmp_path):
        config = tmp_path / "center.yaml"
        config.write_text(
            "models:\n"
            "  - name: m\n"
            "    model: gpt-4o-mini\n"
            "agents:\n"
            "  - id: helper\n"
            "    name: Helper\n"
            "    model_name: m\n"
        )
        settings = Settings(storage_dir=tmp_path / "store", debug_dir=tmp_path / "debug", config_path=config)

        center = await AgentCenter.from_settings(
            settings, model_factory=lambda c: ScriptedModel(c.name)
        )
        session = await center.create_session("helper", uuid.uuid4())
        await center.run_agent(session.context, "hi")

        assert isinstance(center.store, FileSessionStore)
        assert list((tmp_path / "store").glob("agents/helper/sessions/*/session.json"))
        assert list((tmp_path / "debug" / "helper").glob("*/events.jsonl"))
        await center.aclose()
