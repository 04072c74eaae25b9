"""Concurrency limiting for outbound provider calls.

Throttle caps how many completions run at once and, optionally, how
closely consecutive calls may start. One instance is shared by every
request an executor serves.

Example:
    throttle = Throttle(max_concurrent=3, min_interval=0.5)

    async def call() -> str:
        async with throttle:
            return await provider.complete(config, text)
"""

import asyncio
import time
from types import TracebackType


class _LoopState:
    """Primitives bound to a single event loop."""

    __slots__ = ("semaphore", "spacing_lock", "last_start")

    def __init__(self, max_concurrent: int) -> None:
        self.semaphore = asyncio.Semaphore(max_concurrent)
        self.spacing_lock = asyncio.Lock()
        self.last_start: float | None = None


class Throttle:
    """Async context manager limiting concurrency and start spacing.

    asyncio primitives are created lazily per running loop, so one
    instance can be reused across ``asyncio.run`` calls.

    Args:
        max_concurrent: Maximum calls inside the context at once (>= 1).
        min_interval: Minimum seconds between consecutive starts.
            0.0 disables spacing.
    """

    def __init__(self, max_concurrent: int, min_interval: float = 0.0) -> None:
        if max_concurrent < 1:
            raise ValueError(f"max_concurrent must be >= 1, got {max_concurrent}")
        if min_interval < 0:
            raise ValueError(f"min_interval must be >= 0, got {min_interval}")
        self.max_concurrent = max_concurrent
        self.min_interval = min_interval
        self._loops: dict[int, _LoopState] = {}
        self._active = 0

    @property
    def active(self) -> int:
        """Calls currently inside the context (across all loops)."""
        return self._active

    def _state(self) -> _LoopState:
        key = id(asyncio.get_running_loop())
        state = self._loops.get(key)
        if state is None:
            state = self._loops[key] = _LoopState(self.max_concurrent)
        return state

    async def _wait_for_spacing(self, state: _LoopState) -> None:
        async with state.spacing_lock:
            if state.last_start is not None:
                wait = self.min_interval - (time.monotonic() - state.last_start)
                if wait > 0:
                    await asyncio.sleep(wait)
            state.last_start = time.monotonic()

    async def __aenter__(self) -> None:
        state = self._state()
        await state.semaphore.acquire()
        try:
            if self.min_interval > 0:
                await self._wait_for_spacing(state)
        except BaseException:
            state.semaphore.release()
            raise
        self._active += 1

    async def __aexit__(
        self,
        _exc_type: type[BaseException] | None,
        _exc_val: BaseException | None,
        _exc_tb: TracebackType | None,
    ) -> None:
        self._active -= 1
        self._state().semaphore.release()
