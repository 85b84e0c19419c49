"""Scheduler: periodic recommendation analysis with trigger/timeout wake-up."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable

import structlog
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from workflowlens.core.config import analyze_cutoff_minutes, analyze_interval
from workflowlens.engines.recommendation_engine.runner import RecommendationRunner

logger = structlog.get_logger(__name__)


class EngineLoop:
    """Single engine scheduling loop with trigger/timeout wake mechanism."""

    def __init__(
        self,
        name: str,
        run_fn: Callable[[], Awaitable[int]],
        interval: float,
    ) -> None:
        self.name = name
        self.run_fn = run_fn
        self.interval = interval
        self.trigger = asyncio.Event()

    async def loop(self) -> None:
        """Run the engine forever, waking on trigger or timeout."""
        while True:
            try:
                await asyncio.wait_for(self.trigger.wait(), timeout=self.interval)
                self.trigger.clear()
            except asyncio.TimeoutError:
                pass

            try:
                processed = await self.run_fn()
                logger.info("engine.cycle", engine=self.name, processed=processed)
            except Exception:
                logger.exception("engine.error", engine=self.name)


class Scheduler:
    """Manages lifecycle of all EngineLoop tasks."""

    def __init__(self, loops: list[EngineLoop]) -> None:
        self._loops = loops
        self._tasks: list[asyncio.Task[None]] = []

    async def start(self) -> None:
        """Start all engine loops as asyncio tasks and fire each once."""
        self._tasks = [
            asyncio.create_task(loop.loop(), name=f"engine-{loop.name}") for loop in self._loops
        ]
        for loop in self._loops:
            loop.trigger.set()
        logger.info("scheduler.started", engines=[loop.name for loop in self._loops])

    async def stop(self) -> None:
        """Cancel all engine loops and wait for them to exit."""
        for task in self._tasks:
            task.cancel()
        await asyncio.gather(*self._tasks, return_exceptions=True)
        self._tasks.clear()
        logger.info("scheduler.stopped")


def create_scheduler(
    session_factory: async_sessionmaker[AsyncSession],
    *,
    recommendation_runner: RecommendationRunner,
    interval: float | None = None,
    cutoff_minutes: int | None = None,
) -> Scheduler:
    """Build a Scheduler running the recommendation engine periodically.

    A single loop analyzes due projects one at a time, which keeps runs for
    the same project serialized within this process.
    """
    interval = analyze_interval() if interval is None else interval
    cutoff = analyze_cutoff_minutes() if cutoff_minutes is None else cutoff_minutes

    async def _run_analysis() -> int:
        return await recommendation_runner.run_batch(session_factory, cutoff_minutes=cutoff)

    return Scheduler([EngineLoop("recommendations", _run_analysis, interval)])
