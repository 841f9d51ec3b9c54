"""Load a configuration bundle from YAML or JSON."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import yaml

from ..errors import InvalidConfigurationError
from .models import AgentConfiguration


def load_configuration(path: str | Path) -> AgentConfiguration:
    path = Path(path)
    if not path.exists():
        raise InvalidConfigurationError(f"Configuration file not found: {path}")
    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")
    try:
        if suffix in (".yaml", ".yml"):
            data: Any = yaml.safe_load(text)
        elif suffix == ".json":
            data = json.loads(text)
        else:
            raise InvalidConfigurationError(f"Unsupported configuration format: {suffix}")
    except (yaml.YAMLError, json.JSONDecodeError) as e:
        raise InvalidConfigurationError(f"Cannot parse {path}: {e}", e) from e
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise InvalidConfigurationError(f"{path} must contain a mapping at the top level")
    return AgentConfiguration.parse(data)
