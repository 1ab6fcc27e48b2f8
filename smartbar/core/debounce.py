"""Debouncer: one pending timer per logical trigger."""

from __future__ import annotations

import asyncio
from typing import Any, Callable


class Debouncer:
    """Run a callback after a quiet period; every new schedule replaces the last.

    Only the timer is cancelled. Once the callback has run, whatever work it
    started is left alone; callers drop stale results themselves.
    """

    def __init__(self, delay: float) -> None:
        self.delay = delay
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        return self._handle is not None

    def schedule(self, callback: Callable[..., Any], *args: Any) -> None:
        self.cancel()
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(self.delay, self._fire, callback, args)

    def cancel(self) -> None:
        if self._handle is not None:
            self._handle.cancel()
            self._handle = None

    def _fire(self, callback: Callable[..., Any], args: tuple) -> None:
        self._handle = None
        callback(*args)
