"""Best-effort response cache.

Entries hold the *pending* `asyncio.Task`, not only its result, so
concurrent callers asking for the same key converge onto one network
transaction. A task that fails or is cancelled is dropped, so the next
caller starts a fresh one.

Eviction is pluggable: `NeverEvict` (default, unbounded for the cache's
lifetime) or `LRUEviction(max_entries)`.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections import OrderedDict
from functools import partial
from typing import Any, Awaitable, Callable, Hashable, Protocol, TypeVar

T = TypeVar("T")

logger = logging.getLogger(__name__)


class EvictionPolicy(Protocol):
    """Decides which keys leave the cache."""

    def record_insert(self, key: Hashable) -> list[Hashable]:
        """Register a new key; return the keys to evict."""

        ...

    def record_hit(self, key: Hashable) -> None: ...

    def forget(self, key: Hashable) -> None: ...


class NeverEvict:
    def record_insert(self, key: Hashable) -> list[Hashable]:
        return []

    def record_hit(self, key: Hashable) -> None:
        return None

    def forget(self, key: Hashable) -> None:
        return None


class LRUEviction:
    """Keep at most `max_entries` keys, evicting the least recently used."""

    def __init__(self, max_entries: int) -> None:
        if max_entries < 1:
            raise ValueError("max_entries must be >= 1")
        self.max_entries = max_entries
        self._order: OrderedDict[Hashable, None] = OrderedDict()

    def record_insert(self, key: Hashable) -> list[Hashable]:
        self._order[key] = None
        self._order.move_to_end(key)
        evicted: list[Hashable] = []
        while len(self._order) > self.max_entries:
            old, _ = self._order.popitem(last=False)
            evicted.append(old)
        return evicted

    def record_hit(self, key: Hashable) -> None:
        if key in self._order:
            self._order.move_to_end(key)

    def forget(self, key: Hashable) -> None:
        self._order.pop(key, None)


def make_cache_key(*parts: Any) -> str:
    """Stable key from call arguments (JSON, sorted keys)."""

    return json.dumps(parts, sort_keys=True, default=str, separators=(",", ":"))


class AsyncCache:
    """Memoizes coroutine results by key, de-duplicating in-flight calls."""

    def __init__(self, policy: EvictionPolicy | None = None, *, enabled: bool = True) -> None:
        self.enabled = enabled
        self._policy: EvictionPolicy = policy or NeverEvict()
        self._entries: dict[Hashable, asyncio.Future[Any]] = {}

    @classmethod
    def from_limits(cls, *, enabled: bool, max_entries: int | None) -> "AsyncCache":
        policy: EvictionPolicy = LRUEviction(max_entries) if max_entries else NeverEvict()
        return cls(policy, enabled=enabled)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return key in self._entries

    async def get_or_create(self, key: Hashable, factory: Callable[[], Awaitable[T]]) -> T:
        if not self.enabled:
            return await factory()

        entry = self._entries.get(key)
        if entry is None:
            entry = asyncio.ensure_future(factory())
            self._entries[key] = entry
            for old in self._policy.record_insert(key):
                self._entries.pop(old, None)
            entry.add_done_callback(partial(self._drop_failed, key))
        else:
            self._policy.record_hit(key)

        # One caller giving up must not cancel the shared request.
        return await asyncio.shield(entry)

    def _drop_failed(self, key: Hashable, entry: asyncio.Future[Any]) -> None:
        if not entry.cancelled() and entry.exception() is None:
            return
        if self._entries.get(key) is entry:
            logger.debug("Dropping failed cache entry %s", key)
            self._entries.pop(key, None)
            self._policy.forget(key)

    def invalidate(self, key: Hashable) -> None:
        if self._entries.pop(key, None) is not None:
            self._policy.forget(key)

    def clear(self) -> None:
        for key in list(self._entries):
            self.invalidate(key)
