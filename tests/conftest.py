"""
Pytest configuration and fixtures.
"""

from pathlib import Path

import pytest

from hostgauge.catalog import CatalogEntry, MetricCatalog
from hostgauge.config.schema import Config, ControlConfig, ExporterConfig, SchedulerConfig
from hostgauge.registry import Registry
from hostgauge.samplers.base import SampleError, Sampler


class CountingSampler(Sampler):
    """Returns its call count for every key, so each cycle yields a new value."""

    def __init__(self, name: str = "counter", keys: tuple[str, ...] = ("value",)):
        self._name = name
        self._keys = keys
        self.calls = 0

    @property
    def name(self) -> str:
        return self._name

    @property
    def keys(self) -> tuple[str, ...]:
        return self._keys

    def sample(self) -> dict[str, float]:
        self.calls += 1
        return {key: float(self.calls) for key in self._keys}


class FailingSampler(Sampler):
    """Always raises SampleError."""

    NAME = "broken"

    def __init__(self):
        self.calls = 0

    def sample(self) -> dict[str, float]:
        self.calls += 1
        raise SampleError(self.name, "always fails")


@pytest.fixture
def counter() -> CountingSampler:
    return CountingSampler()


@pytest.fixture
def broken() -> FailingSampler:
    return FailingSampler()


@pytest.fixture
def pair() -> CountingSampler:
    return CountingSampler("pair", keys=("a", "b"))


@pytest.fixture
def fake_catalog(counter: CountingSampler, broken: FailingSampler, pair: CountingSampler) -> MetricCatalog:
    """Small catalog with a healthy, a failing and a shared sampler."""
    return MetricCatalog([
        CatalogEntry("ticks", "Cycle counter", counter),
        CatalogEntry("broken_metric", "Never works", broken),
        CatalogEntry("pair_a", "First reading of a shared probe", pair, "a"),
        CatalogEntry("pair_b", "Second reading of a shared probe", pair, "b"),
    ])


@pytest.fixture
def registry(fake_catalog: MetricCatalog):
    registry = Registry(fake_catalog)
    yield registry
    registry.teardown()


@pytest.fixture
def config(tmp_path: Path) -> Config:
    """Configuration pointing every side file into tmp_path."""
    return Config(
        exporter=ExporterConfig(address="127.0.0.1", port=0),
        scheduler=SchedulerConfig(interval=0.01),
        control=ControlConfig(
            fifo=str(tmp_path / "monitor_fifo"),
            status_file=str(tmp_path / "monitor_status"),
            metrics_file=str(tmp_path / "monitor_metrics"),
        ),
    )
