"""
Sampling scheduler.

Drives the periodic loop: every interval, sample each active metric and
publish the reading to the gauge store. A failing sampler only costs its
own metrics that cycle; the slot keeps its previous value.

State machine: IDLE -> RUNNING -> STOPPED. stop() is observed during the
wait between cycles; a cycle that has started always completes.
"""

import asyncio
import math
import time
from dataclasses import dataclass, field
from enum import Enum

from .catalog import CatalogEntry
from .logging import get_logger
from .registry import Registry
from .samplers.base import Sampler

logger = get_logger("scheduler")


class SchedulerState(Enum):
    """Lifecycle of a Scheduler."""

    IDLE = "idle"
    RUNNING = "running"
    STOPPED = "stopped"


@dataclass
class CycleReport:
    """Outcome of one sampling cycle."""

    cycle: int
    updated: list[str] = field(default_factory=list)
    failed: list[str] = field(default_factory=list)
    duration: float = 0.0

    @property
    def ok(self) -> bool:
        return not self.failed

    def __repr__(self) -> str:
        return (
            f"CycleReport(#{self.cycle}, {len(self.updated)} updated, "
            f"{len(self.failed)} failed, {self.duration * 1000:.1f}ms)"
        )


class Scheduler:
    """
    Periodic sample-and-publish loop over a registry's active set.

    Samplers shared by several active metrics are invoked once per cycle
    and their readings fanned out; each slot write is still a separate
    critical section.
    """

    def __init__(self, registry: Registry, interval: float = 1.0):
        """
        Initialize scheduler.

        Args:
            registry: Activated registry whose metrics are sampled
            interval: Seconds between cycle starts
        """
        if interval <= 0:
            raise ValueError(f"Interval must be positive, got {interval}")

        self.registry = registry
        self.interval = interval
        self.cycles = 0
        self.last_report: CycleReport | None = None

        self._state = SchedulerState.IDLE
        self._stop_event: asyncio.Event | None = None
        self._stop_requested = False

    @property
    def state(self) -> SchedulerState:
        return self._state

    def _sample_once(self, sampler: Sampler, cache: dict[int, dict[str, float] | None]) -> dict[str, float] | None:
        """Invoke a sampler at most once per cycle; None records a failure."""
        key = id(sampler)
        if key not in cache:
            try:
                cache[key] = sampler.sample()
            except Exception as e:
                cache[key] = None
                affected = [entry.name for entry in self.registry.active if entry.sampler is sampler]
                logger.warning(f"Sampler {sampler.name} failed ({', '.join(affected)}): {e}")
        return cache[key]

    def _publish(self, entry: CatalogEntry, readings: dict[str, float]) -> bool:
        value = readings.get(entry.key)
        if value is None:
            logger.warning(f"Sampler {entry.sampler.name} returned no '{entry.key}' reading for {entry.name}")
            return False

        try:
            value = float(value)
        except (TypeError, ValueError):
            logger.warning(f"Non-numeric reading for {entry.name}: {value!r}")
            return False

        if not math.isfinite(value):
            logger.warning(f"Non-finite reading for {entry.name}: {value}")
            return False

        self.registry.store.set(entry.name, value)
        logger.debug(f"{entry.name} = {value}")
        return True

    def run_cycle(self) -> CycleReport:
        """
        Sample every active metric once and publish the results.

        Returns:
            CycleReport listing updated and failed metric names
        """
        started = time.monotonic()
        self.cycles += 1
        report = CycleReport(cycle=self.cycles)
        cache: dict[int, dict[str, float] | None] = {}

        for entry in self.registry.active:
            readings = self._sample_once(entry.sampler, cache)
            if readings is not None and self._publish(entry, readings):
                report.updated.append(entry.name)
            else:
                report.failed.append(entry.name)

        report.duration = time.monotonic() - started
        self.last_report = report
        return report

    async def run(self) -> None:
        """
        Run cycles until stop() is called.

        Raises:
            RuntimeError: If the scheduler already ran, or the registry is
                not active
        """
        if self._state != SchedulerState.IDLE:
            raise RuntimeError(f"Scheduler cannot start from state {self._state.value}")
        if not self.registry.is_active:
            raise RuntimeError("Scheduler needs an activated registry")

        self._stop_event = asyncio.Event()
        if self._stop_requested:
            self._stop_event.set()

        self._state = SchedulerState.RUNNING
        logger.info(f"Sampling {len(self.registry.active)} metrics every {self.interval}s")

        try:
            while not self._stop_event.is_set():
                report = self.run_cycle()

                if report.failed:
                    logger.debug(f"Cycle {report.cycle}: {len(report.failed)} metrics not updated")

                delay = self.interval - report.duration
                if delay <= 0:
                    logger.warning(
                        f"Cycle {report.cycle} took {report.duration:.2f}s, longer than the "
                        f"{self.interval}s interval (sampler latency)"
                    )
                    delay = 0

                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
                except asyncio.TimeoutError:
                    pass
        finally:
            self._state = SchedulerState.STOPPED
            logger.info(f"Scheduler stopped after {self.cycles} cycles")

    def stop(self) -> None:
        """
        Request the loop to stop. One-shot; safe to call from any state.

        Must be called from the event loop thread; use
        loop.call_soon_threadsafe(scheduler.stop) from other threads.
        """
        self._stop_requested = True
        if self._stop_event is not None:
            self._stop_event.set()
        elif self._state == SchedulerState.IDLE:
            logger.debug("Stop requested before start")
