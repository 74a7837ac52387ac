"""
Tests for the sampling scheduler.
"""

import asyncio
import math

import pytest

from hostgauge.catalog import CatalogEntry, MetricCatalog
from hostgauge.registry import Registry
from hostgauge.samplers import FunctionSampler
from hostgauge.scheduler import Scheduler, SchedulerState


def test_failing_sampler_is_isolated(registry, counter, broken) -> None:
    """A failing metric keeps its slot unset while the others update."""
    registry.activate(["ticks", "broken_metric"])
    scheduler = Scheduler(registry)

    report = scheduler.run_cycle()

    assert report.updated == ["ticks"]
    assert report.failed == ["broken_metric"]
    assert not report.ok
    assert registry.read_all() == {"ticks": 1.0, "broken_metric": None}
    assert broken.calls == 1


def test_values_advance_each_cycle(registry, counter) -> None:
    registry.activate(["ticks", "broken_metric"])
    scheduler = Scheduler(registry)

    seen = []
    for _ in range(5):
        scheduler.run_cycle()
        values = registry.read_all()
        seen.append(values["ticks"])
        assert values["broken_metric"] is None

    assert seen == [1.0, 2.0, 3.0, 4.0, 5.0]
    assert scheduler.cycles == 5
    assert counter.calls == 5
    assert registry.read_all() == {"ticks": 5.0, "broken_metric": None}


def test_failure_keeps_previous_value() -> None:
    state = {"fail": False}

    def read() -> float:
        if state["fail"]:
            raise OSError("source went away")
        return 12.5

    catalog = MetricCatalog([CatalogEntry("flaky", "Sometimes fails", FunctionSampler("flaky", read))])
    registry = Registry(catalog)
    registry.activate(["flaky"])
    scheduler = Scheduler(registry)

    scheduler.run_cycle()
    state["fail"] = True
    report = scheduler.run_cycle()

    assert report.failed == ["flaky"]
    assert registry.read_all() == {"flaky": 12.5}
    registry.teardown()


def test_shared_sampler_invoked_once_per_cycle(registry, pair) -> None:
    registry.activate(["pair_a", "pair_b"])
    scheduler = Scheduler(registry)

    scheduler.run_cycle()
    scheduler.run_cycle()

    assert pair.calls == 2
    assert registry.read_all() == {"pair_a": 2.0, "pair_b": 2.0}


def test_non_finite_reading_not_published() -> None:
    catalog = MetricCatalog([
        CatalogEntry("nan", "Not a number", FunctionSampler("nan", lambda: math.nan)),
        CatalogEntry("text", "Not numeric", FunctionSampler("text", lambda: 1.0), "missing"),
    ])
    registry = Registry(catalog)
    registry.activate(["nan", "text"])

    report = Scheduler(registry).run_cycle()

    assert report.failed == ["nan", "text"]
    assert registry.read_all() == {"nan": None, "text": None}
    registry.teardown()


def test_invalid_interval(registry) -> None:
    with pytest.raises(ValueError):
        Scheduler(registry, interval=0)


def test_run_until_stopped(registry, counter) -> None:
    registry.activate(["ticks"])
    scheduler = Scheduler(registry, interval=0.01)

    async def run() -> None:
        asyncio.get_running_loop().call_later(0.1, scheduler.stop)
        await asyncio.wait_for(scheduler.run(), timeout=5)

    asyncio.run(run())

    assert scheduler.state == SchedulerState.STOPPED
    assert scheduler.cycles >= 2
    assert registry.read_all()["ticks"] == float(counter.calls)


def test_stop_wakes_sleeping_loop(registry) -> None:
    """stop() cancels the wait instead of sleeping out the interval."""
    registry.activate(["ticks"])
    scheduler = Scheduler(registry, interval=60)

    async def run() -> None:
        asyncio.get_running_loop().call_later(0.05, scheduler.stop)
        await asyncio.wait_for(scheduler.run(), timeout=5)

    asyncio.run(run())

    assert scheduler.cycles == 1


def test_stop_before_start(registry) -> None:
    registry.activate(["ticks"])
    scheduler = Scheduler(registry, interval=0.01)
    scheduler.stop()

    asyncio.run(scheduler.run())

    assert scheduler.cycles == 0
    assert scheduler.state == SchedulerState.STOPPED


def test_cannot_restart(registry) -> None:
    registry.activate(["ticks"])
    scheduler = Scheduler(registry, interval=0.01)
    scheduler.stop()
    asyncio.run(scheduler.run())

    with pytest.raises(RuntimeError):
        asyncio.run(scheduler.run())


def test_run_requires_active_registry(registry) -> None:
    scheduler = Scheduler(registry, interval=0.01)

    with pytest.raises(RuntimeError):
        asyncio.run(scheduler.run())

    assert scheduler.state == SchedulerState.IDLE
