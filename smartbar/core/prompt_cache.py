"""PromptCache: TTL memoization of suggestion-generation futures.

Concurrent callers for the same key share one in-flight future, so at most
one generation runs per key. Each write takes a ticket from a monotonic
counter; a settling future only touches the map if its ticket is still the
one stored for its key, so a slow, superseded generation cannot clobber a
fresher entry. Failed generations are evicted rather than cached.
"""

from __future__ import annotations

import asyncio
import inspect
import itertools
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from ..types import Suggestion

logger = logging.getLogger(__name__)

DEFAULT_TTL_SECONDS = 300.0


@dataclass
class CacheEntry:
    future: asyncio.Future
    timestamp: float
    ticket: int


class PromptCache:
    """Key -> future of suggestion list, expiring after ``ttl`` seconds.

    Must be used from a running event loop. Share one instance between every
    component that should deduplicate against the others.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._entries: dict[str, CacheEntry] = {}
        self._tickets = itertools.count(1)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def get(self, key: str) -> asyncio.Future | None:
        """The cached future for ``key`` if younger than the TTL, else None."""
        entry = self._entries.get(key)
        if entry is None:
            logger.debug("Prompt cache miss: %s", key[:12])
            return None
        if self._clock() - entry.timestamp >= self.ttl:
            logger.debug("Prompt cache expired: %s", key[:12])
            return None
        logger.debug("Prompt cache hit: %s", key[:12])
        return entry.future

    def set(self, key: str, value: Awaitable[list[Suggestion]] | list[Suggestion]) -> asyncio.Future:
        """Store a pending awaitable or a computed value. Returns the stored future."""
        self.sweep()
        ticket = next(self._tickets)
        now = self._clock()

        if inspect.isawaitable(value):
            future = asyncio.ensure_future(value)
            self._entries[key] = CacheEntry(future, now, ticket)
            future.add_done_callback(lambda f: self._on_settled(key, ticket, f))
        else:
            future = self._resolved(value)
            self._entries[key] = CacheEntry(future, now, ticket)
        return future

    async def get_or_create(
        self,
        key: str,
        factory: Callable[[], Awaitable[list[Suggestion]]],
    ) -> list[Suggestion]:
        """Await the cached value for ``key``, starting ``factory()`` on a miss.

        Cancelling one caller leaves the shared generation running for the others.
        """
        cached = self.get(key)
        if cached is None:
            cached = self.set(key, factory())
        return await asyncio.shield(cached)

    def sweep(self) -> int:
        """Drop every entry older than the TTL. Returns the number removed."""
        now = self._clock()
        expired = [k for k, e in self._entries.items() if now - e.timestamp >= self.ttl]
        for k in expired:
            del self._entries[k]
        if expired:
            logger.debug("Prompt cache swept %d expired entries", len(expired))
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def _resolved(self, value: Any) -> asyncio.Future:
        future = asyncio.get_running_loop().create_future()
        future.set_result(value)
        return future

    def _on_settled(self, key: str, ticket: int, future: asyncio.Future) -> None:
        current = self._entries.get(key)
        superseded = current is None or current.ticket != ticket

        if future.cancelled():
            if not superseded:
                del self._entries[key]
            return

        error = future.exception()
        if superseded:
            logger.debug("Ignoring superseded generation for %s", key[:12])
            return
        if error is not None:
            logger.warning("Prompt generation failed for %s: %s", key[:12], error)
            del self._entries[key]
            return

        self._entries[key] = CacheEntry(self._resolved(future.result()), self._clock(), ticket)
