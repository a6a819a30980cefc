"""Process-wide admission gate for outbound Onfleet requests."""
from __future__ import annotations

import asyncio
import logging
import math
import time
from dataclasses import dataclass
from functools import lru_cache
from typing import Any, Awaitable, Callable, Mapping, Optional, Set, Tuple, TypeVar, Union

from .config import (
    LIMITER_DEFAULT_MAX_CONCURRENT,
    LIMITER_DEFAULT_MIN_TIME_MS,
    LIMITER_HIGHEST_MAX_CONCURRENT,
    LIMITER_LOWEST_MIN_TIME_MS,
    LimiterOptions,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class LimiterSettings:
    max_concurrent: int
    min_time_ms: float


def _as_number(value: Any) -> Optional[float]:
    if value is None or isinstance(value, bool):
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


class RateLimiter:
    """Bounds in-flight requests and spaces out request starts.

    Callers are admitted in submission order. A call holds one of
    ``max_concurrent`` slots from admission until it returns or raises, and no
    two admissions happen less than ``min_time_ms`` apart.
    """

    def __init__(
        self,
        max_concurrent: int = LIMITER_DEFAULT_MAX_CONCURRENT,
        min_time_ms: float = LIMITER_DEFAULT_MIN_TIME_MS,
    ) -> None:
        self._settings = LimiterSettings(max_concurrent=max_concurrent, min_time_ms=min_time_ms)
        self._running = 0
        self._last_start = 0.0
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._admission: Optional[asyncio.Lock] = None
        self._slots: Optional[asyncio.Condition] = None
        self._wakeups: Set["asyncio.Future[None]"] = set()

    @property
    def settings(self) -> LimiterSettings:
        return LimiterSettings(self._settings.max_concurrent, self._settings.min_time_ms)

    @property
    def running(self) -> int:
        return self._running

    def configure(self, options: Union[LimiterOptions, Mapping[str, Any], None]) -> LimiterSettings:
        """Apply tuning within the safe range; out-of-range values are ignored."""

        if options is None:
            return self.settings
        if not isinstance(options, LimiterOptions):
            options = LimiterOptions.model_validate(dict(options))

        changed = False
        max_concurrent = _as_number(options.max_concurrent)
        if max_concurrent is not None:
            if 0 < max_concurrent < LIMITER_HIGHEST_MAX_CONCURRENT and max_concurrent.is_integer():
                self._settings.max_concurrent = int(max_concurrent)
                changed = True
            else:
                logger.debug(f"ignoring maxConcurrent={options.max_concurrent!r}")

        min_time = _as_number(options.min_time)
        if min_time is not None:
            if min_time > LIMITER_LOWEST_MIN_TIME_MS:
                self._settings.min_time_ms = min_time
                changed = True
            else:
                logger.debug(f"ignoring minTime={options.min_time!r}")
        if changed:
            self._wake_waiters()
        return self.settings

    def _bind(self) -> Tuple[asyncio.Lock, asyncio.Condition]:
        loop = asyncio.get_running_loop()
        if loop is not self._loop or self._admission is None or self._slots is None:
            # asyncio primitives belong to one loop; a new loop starts with empty bookkeeping
            self._loop = loop
            self._admission = asyncio.Lock()
            self._slots = asyncio.Condition()
            self._running = 0
        return self._admission, self._slots

    def _wake_waiters(self) -> None:
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._start_notify)

    def _start_notify(self) -> None:
        task = asyncio.ensure_future(self._notify())
        self._wakeups.add(task)
        task.add_done_callback(self._wakeups.discard)

    async def _notify(self) -> None:
        slots = self._slots
        if slots is None:
            return
        async with slots:
            slots.notify_all()

    async def _acquire(self, admission: asyncio.Lock, slots: asyncio.Condition) -> None:
        async with admission:
            async with slots:
                await slots.wait_for(lambda: self._running < self._settings.max_concurrent)
                self._running += 1
                try:
                    # re-evaluated on every wake-up so a new minTime applies to the queued call
                    while True:
                        delay = self._last_start + self._settings.min_time_ms / 1000.0 - time.monotonic()
                        if delay <= 0:
                            break
                        try:
                            await asyncio.wait_for(slots.wait(), delay)
                        except asyncio.TimeoutError:
                            pass
                except BaseException:
                    self._running -= 1
                    slots.notify_all()
                    raise
                self._last_start = time.monotonic()

    async def _release(self, slots: asyncio.Condition) -> None:
        async with slots:
            self._running -= 1
            slots.notify_all()

    async def schedule(self, fn: Callable[..., Awaitable[T]], *args: Any, **kwargs: Any) -> T:
        """Wait for admission, then run ``fn`` and return its result."""

        admission, slots = self._bind()
        await self._acquire(admission, slots)
        try:
            return await fn(*args, **kwargs)
        finally:
            await self._release(slots)


@lru_cache(maxsize=1)
def get_limiter() -> RateLimiter:
    """Return the limiter shared by every client in the process."""

    return RateLimiter()
