"""Periodic tick source driving an :class:`IntervalEngine` on asyncio."""

from __future__ import annotations

import asyncio
from typing import Callable, Optional

from interval_split.core.engine import IntervalEngine
from interval_split.core.state import EngineState, RunStatus
from interval_split.workout.model import WorkoutRecord


TickCallback = Callable[[EngineState], None]


class TickScheduler:
    """Arms one tick task while the engine runs; disarms it on any other state."""

    def __init__(
        self,
        engine: IntervalEngine,
        interval_sec: float = 1.0,
        on_tick: TickCallback | None = None,
    ) -> None:
        self._engine = engine
        self._interval_sec = interval_sec
        self._on_tick = on_tick
        self._task: Optional[asyncio.Task[None]] = None
        self._stop_event = asyncio.Event()

    @property
    def armed(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(self) -> None:
        self._engine.start()
        if self._engine.status is RunStatus.RUNNING:
            self._arm()

    async def pause(self) -> None:
        await self._disarm()
        self._engine.pause()

    async def reset(self) -> None:
        await self._disarm()
        self._engine.reset()

    async def abandon(self) -> WorkoutRecord | None:
        await self._disarm()
        return self._engine.abandon()

    async def wait(self) -> None:
        """Block until the tick task stops (completion, pause or reset).

        Cancelling the waiter leaves the tick task alone so the caller can
        still pause, reset or abandon the run.
        """
        if self._task is not None:
            await asyncio.shield(self._task)

    def _arm(self) -> None:
        if self.armed:
            return
        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run())

    async def _disarm(self) -> None:
        if self._task is None:
            return
        self._stop_event.set()
        task = self._task
        self._task = None
        await asyncio.wait({task})
        if not task.cancelled():
            task.result()

    async def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                await asyncio.wait_for(self._stop_event.wait(), timeout=self._interval_sec)
                return
            except TimeoutError:
                pass
            if self._stop_event.is_set() or self._engine.status is not RunStatus.RUNNING:
                return

            self._engine.tick()
            if self._on_tick is not None:
                self._on_tick(self._engine.snapshot())
            if self._engine.status is not RunStatus.RUNNING:
                return
