"""Named registry guarded by an asyncio lock."""

from __future__ import annotations

import asyncio
from typing import Generic, TypeVar

from .errors import InvalidConfigurationError

T = TypeVar("T")


class Registry(Generic[T]):
    def __init__(self, kind: str) -> None:
        self.kind = kind
        self._items: dict[str, T] = {}
        self._lock = asyncio.Lock()

    async def register(self, name: str, item: T, *, replace: bool = False) -> None:
        async with self._lock:
            if name in self._items and not replace:
                raise InvalidConfigurationError(f"{self.kind} '{name}' is already registered")
            self._items[name] = item

    async def register_many(self, items: dict[str, T]) -> None:
        """Register all items or none of them."""
        async with self._lock:
            taken = sorted(n for n in items if n in self._items)
            if taken:
                raise InvalidConfigurationError(
                    f"{self.kind} already registered: {', '.join(taken)}"
                )
            self._items.update(items)

    async def unregister(self, name: str) -> T | None:
        async with self._lock:
            return self._items.pop(name, None)

    async def get(self, name: str) -> T | None:
        async with self._lock:
            return self._items.get(name)

    async def contains(self, name: str) -> bool:
        async with self._lock:
            return name in self._items

    async def names(self) -> list[str]:
        async with self._lock:
            return list(self._items)

    async def snapshot(self) -> dict[str, T]:
        async with self._lock:
            return dict(self._items)
