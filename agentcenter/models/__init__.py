from .base import LanguageModel, ToolLoopModel
from .mock import ScriptedModel
from .openai import OpenAIChatModel

__all__ = ["LanguageModel", "ToolLoopModel", "ScriptedModel", "OpenAIChatModel"]
