from .executor import ExecutionEngine, PreparedTurn, encode_content, filter_tools
from .policy import is_retryable, run_with_policy, stream_with_policy
from .run_context import RunContext

__all__ = [
    "ExecutionEngine", "PreparedTurn", "encode_content", "filter_tools",
    "is_retryable", "run_with_policy", "stream_with_policy", "RunContext",
]
