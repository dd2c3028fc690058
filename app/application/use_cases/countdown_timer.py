from __future__ import annotations

import asyncio
import logging
import math
from collections.abc import Callable
from datetime import datetime

from app.application.ports.clock import ClockPort
from app.application.ports.form_view import FormViewPort
from app.domain.entities.messages import TIMER_EXPIRED
from app.domain.entities.session_state import TimerState


def format_remaining(seconds: int) -> str:
    minutes, secs = divmod(max(0, seconds), 60)
    return f"{minutes:02d}:{secs:02d}"


class CountdownTimer:
    """
    Live mm:ss display of a hold's remaining time.

    Remaining time is recomputed from the clock on every tick, so a suspended
    loop catches up on the next tick instead of drifting. Starting again
    supersedes the running countdown. Expiry fires on_expire exactly once.
    """

    def __init__(
        self,
        clock: ClockPort,
        view: FormViewPort,
        on_expire: Callable[[], None] | None = None,
        tick_seconds: float = 1.0,
    ) -> None:
        self._clock = clock
        self._view = view
        self._on_expire = on_expire
        self._tick_seconds = tick_seconds
        self._state = TimerState.idle
        self._expires_at: datetime | None = None
        self._task: asyncio.Task | None = None
        self._generation = 0
        self._logger = logging.getLogger(__name__)

    @property
    def state(self) -> TimerState:
        return self._state

    @property
    def expires_at(self) -> datetime | None:
        return self._expires_at

    def set_on_expire(self, on_expire: Callable[[], None]) -> None:
        self._on_expire = on_expire

    def remaining_seconds(self) -> int:
        if self._expires_at is None:
            return 0
        delta = (self._expires_at - self._clock.now()).total_seconds()
        return max(0, math.floor(delta))

    def start(self, expires_at: datetime) -> None:
        """Begin ticking towards expires_at; must be called from a running event loop."""
        self._cancel_task()
        self._generation += 1
        self._expires_at = expires_at
        self._state = TimerState.running
        if self.tick() == 0:
            return
        self._task = asyncio.get_running_loop().create_task(self._run(self._generation))

    def tick(self) -> int:
        if self._state is not TimerState.running:
            return 0
        remaining = self.remaining_seconds()
        if remaining <= 0:
            self._view.set_timer_text(TIMER_EXPIRED)
            self._state = TimerState.expired
            self._logger.info("Hold countdown expired")
            if self._on_expire is not None:
                self._on_expire()
            return 0
        self._view.set_timer_text(format_remaining(remaining))
        return remaining

    def stop(self) -> None:
        """Cancel ticking without firing expiry (event loop shutdown)."""
        self._cancel_task()
        self._generation += 1
        if self._state is TimerState.running:
            self._state = TimerState.idle

    async def _run(self, generation: int) -> None:
        while self._state is TimerState.running and generation == self._generation:
            await self._clock.sleep(self._tick_seconds)
            if generation != self._generation or self.tick() == 0:
                break

    def _cancel_task(self) -> None:
        task = self._task
        self._task = None
        if task is not None and not task.done() and task is not _current_task():
            task.cancel()


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None
