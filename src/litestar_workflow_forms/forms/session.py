"""Session store implementations.

The token registry keeps its records in a store scoped to the browser session.
Two implementations are provided: a plain in-memory store, mostly for tests and
single process setups, and an adapter over any Litestar
:class:`~litestar.stores.base.Store`, which namespaces keys by session.
"""

from __future__ import annotations

import asyncio
import json
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from litestar.stores.base import Store

__all__ = ["LitestarSessionStore", "MemorySessionStore"]


class MemorySessionStore:
    """Dict backed session store.

    Attributes:
        _data: The stored values.
        _lock: Serializes read-and-delete.
    """

    def __init__(self, data: dict[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = data if data is not None else {}
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        return len(self._data)

    def __contains__(self, key: object) -> bool:
        return key in self._data

    async def get(self, key: str) -> Any | None:
        return self._data.get(key)

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = value

    async def delete(self, key: str) -> None:
        self._data.pop(key, None)

    async def pop(self, key: str) -> Any | None:
        async with self._lock:
            return self._data.pop(key, None)


class LitestarSessionStore:
    """Session scoped view over a shared Litestar store.

    Values are JSON encoded. Read-and-delete is serialized through a lock
    shared by all views of the same store, which makes ``pop`` atomic within
    one process.

    Attributes:
        store: The backing Litestar store.
        scope: Session identifier prefixed to every key.
        expires_in: Expiry in seconds applied on ``set``.
    """

    __slots__ = ("_lock", "expires_in", "scope", "store")

    def __init__(
        self,
        store: Store,
        scope: str,
        lock: asyncio.Lock,
        expires_in: int | None = None,
    ) -> None:
        """Initialize the view.

        Args:
            store: The backing Litestar store.
            scope: Session identifier prefixed to every key.
            lock: Lock shared by all views of ``store``.
            expires_in: Expiry in seconds applied on ``set``.
        """
        self.store = store
        self.scope = scope
        self.expires_in = expires_in
        self._lock = lock

    def _key(self, key: str) -> str:
        return f"{self.scope}:{key}"

    async def get(self, key: str) -> Any | None:
        raw = await self.store.get(self._key(key))
        return json.loads(raw) if raw is not None else None

    async def set(self, key: str, value: Any) -> None:
        await self.store.set(self._key(key), json.dumps(value), expires_in=self.expires_in)

    async def delete(self, key: str) -> None:
        await self.store.delete(self._key(key))

    async def pop(self, key: str) -> Any | None:
        async with self._lock:
            raw = await self.store.get(self._key(key))
            if raw is None:
                return None
            await self.store.delete(self._key(key))
        return json.loads(raw)
