from .loader import load_configuration
from .models import AgentConfiguration, ModelConfig
from .settings import Settings, get_settings

__all__ = ["AgentConfiguration", "ModelConfig", "Settings", "get_settings", "load_configuration"]
