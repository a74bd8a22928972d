from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta
from enum import Enum
from typing import Any, Protocol

logger = logging.getLogger(__name__)


class PassRunner(Protocol):
    async def run_once(self) -> Any: ...


class SchedulerState(str, Enum):
    STARTING = "starting"
    TICKING = "ticking"
    STOPPED = "stopped"


class DaemonScheduler:
    """Runs a pass immediately, then again on every tick of a fixed-rate timer.

    Ticks are aligned to the start time, so a pass that overruns the interval
    skips the ticks it missed instead of queueing them. ``stop()`` prevents the
    next tick from starting but never interrupts a pass already underway.
    """

    def __init__(
        self,
        runner: PassRunner,
        interval: timedelta | float,
        *,
        stop_event: asyncio.Event | None = None,
        reporter: logging.Logger | None = None,
    ) -> None:
        seconds = interval.total_seconds() if isinstance(interval, timedelta) else float(interval)
        if seconds <= 0:
            raise ValueError("interval must be greater than zero")
        self._runner = runner
        self._interval = seconds
        self._stop_event = stop_event
        self._reporter = reporter or logger
        self._state = SchedulerState.STARTING
        self._ticks = 0

    @property
    def state(self) -> SchedulerState:
        return self._state

    @property
    def ticks(self) -> int:
        return self._ticks

    @property
    def interval(self) -> float:
        return self._interval

    def stop(self) -> None:
        self._stop_token().set()

    async def run(self) -> None:
        stop_event = self._stop_token()
        loop = asyncio.get_running_loop()

        self._reporter.info(
            f"Starting daemon mode with interval: {timedelta(seconds=self._interval)}"
        )
        started = loop.time()
        await self._run_pass()
        self._state = SchedulerState.TICKING

        tick = 1
        while not stop_event.is_set():
            deadline = started + tick * self._interval
            now = loop.time()
            if now > deadline:
                missed = int((now - deadline) // self._interval) + 1
                tick += missed
                deadline = started + tick * self._interval

            try:
                await asyncio.wait_for(stop_event.wait(), timeout=max(deadline - now, 0))
            except asyncio.TimeoutError:
                pass
            if stop_event.is_set():
                break

            tick += 1
            self._reporter.info(
                f"=== Scheduled run at {datetime.now().strftime('%Y-%m-%d %H:%M:%S')} ==="
            )
            await self._run_pass()

        self._state = SchedulerState.STOPPED
        self._reporter.info("Daemon stopped")

    async def _run_pass(self) -> None:
        try:
            await self._runner.run_once()
        except Exception:
            self._reporter.exception("Scheduled run failed; waiting for the next tick")
        self._ticks += 1

    def _stop_token(self) -> asyncio.Event:
        if self._stop_event is None:
            self._stop_event = asyncio.Event()
        return self._stop_event


__all__ = ["DaemonScheduler", "PassRunner", "SchedulerState"]
