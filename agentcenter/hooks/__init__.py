from .registry import (
    HookContext, HookRegistry, PostHook, PreHook, SummaryContext, SummaryHook,
)
from .runner import HookRunner

__all__ = [
    "HookContext", "HookRegistry", "HookRunner",
    "PreHook", "PostHook", "SummaryHook", "SummaryContext",
]
