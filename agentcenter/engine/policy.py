"""Timeout and retry around a model interaction."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Awaitable, Callable, TypeVar

from ..errors import (
    AgentCenterError,
    ExecutionTimedOutError,
    McpError,
    ModelError,
)
from ..types import ExecutionPolicy, StreamChunk

logger = logging.getLogger(__name__)

T = TypeVar("T")


def is_retryable(err: BaseException) -> bool:
    """Model and transport failures are retried; configuration and lookup errors are not."""
    if isinstance(err, (ModelError, McpError)):
        return True
    return isinstance(err, Exception) and not isinstance(err, AgentCenterError)


async def _attempts(policy: ExecutionPolicy, attempt: Callable[[], Awaitable[T]]) -> T:
    for i in range(policy.retries + 1):
        try:
            return await attempt()
        except TimeoutError as e:
            # Keep inner timeouts distinct from the turn deadline.
            err: Exception = ModelError("", f"Attempt timed out: {e}", cause=e)
            if i >= policy.retries:
                raise err from e
        except Exception as e:
            if not is_retryable(e) or i >= policy.retries:
                raise
            err = e
        logger.warning("Attempt %d/%d failed, retrying: %s", i + 1, policy.retries + 1, err)
    raise AssertionError("unreachable")


async def run_with_policy(policy: ExecutionPolicy, attempt: Callable[[], Awaitable[T]]) -> T:
    """Run ``attempt`` up to ``retries + 1`` times, all within ``timeout`` seconds."""
    if policy.timeout is None:
        return await _attempts(policy, attempt)
    try:
        return await asyncio.wait_for(_attempts(policy, attempt), timeout=policy.timeout)
    except TimeoutError as e:
        raise ExecutionTimedOutError(policy.timeout) from e


async def stream_with_policy(
    policy: ExecutionPolicy,
    open_stream: Callable[[], AsyncIterator[StreamChunk]],
) -> AsyncIterator[StreamChunk]:
    """Streaming counterpart of :func:`run_with_policy`.

    A failed attempt is retried only while nothing has been yielded; once a
    delta reached the consumer the error surfaces as-is.
    """
    loop = asyncio.get_running_loop()
    deadline = None if policy.timeout is None else loop.time() + policy.timeout
    attempt = 0
    while True:
        stream = open_stream()
        yielded = False
        try:
            while True:
                try:
                    if deadline is None:
                        chunk = await anext(stream)
                    else:
                        remaining = max(deadline - loop.time(), 0)
                        chunk = await asyncio.wait_for(anext(stream), timeout=remaining)
                except StopAsyncIteration:
                    return
                except TimeoutError as e:
                    if deadline is not None and loop.time() >= deadline:
                        raise ExecutionTimedOutError(policy.timeout) from e
                    raise ModelError("", f"Attempt timed out: {e}", cause=e) from e
                if chunk.text:
                    yielded = True
                yield chunk
        except Exception as e:
            if yielded or not is_retryable(e) or attempt >= policy.retries:
                raise
            attempt += 1
            logger.warning("Stream attempt %d/%d failed, retrying: %s", attempt, policy.retries + 1, e)
        finally:
            aclose = getattr(stream, "aclose", None)
            if aclose is not None:
                await aclose()
