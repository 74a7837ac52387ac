"""
Gauge storage shared between the scheduler and scrape handlers.

GaugeStore holds the last good reading for each active metric behind one
lock. The scheduler is the only writer; readers are the exposition
collector (on the HTTP server thread) and Registry.read_all().

Each set() and each read is its own critical section. A read that
interleaves with a sampling cycle may see some metrics from the new cycle
and some from the previous one; individual values are never partial.
"""

import math
import threading
from collections.abc import Iterable, Iterator

from prometheus_client.core import GaugeMetricFamily
from prometheus_client.registry import Collector


class GaugeStore:
    """
    Last-known value per metric name; None means activated but never sampled.
    """

    def __init__(self):
        self._lock = threading.Lock()
        self._slots: dict[str, float | None] = {}
        self._help: dict[str, str] = {}

    def allocate(self, slots: Iterable[tuple[str, str]]) -> None:
        """
        Create unset slots.

        Args:
            slots: (name, description) pairs, in exposition order
        """
        with self._lock:
            for name, description in slots:
                if name in self._slots:
                    raise ValueError(f"Slot already allocated: {name}")
                self._slots[name] = None
                self._help[name] = description

    def clear(self) -> None:
        """Drop every slot."""
        with self._lock:
            self._slots.clear()
            self._help.clear()

    def set(self, name: str, value: float) -> None:
        """
        Store a reading.

        Raises:
            KeyError: If no slot was allocated for name
            ValueError: If value is not a finite number
        """
        value = float(value)
        if not math.isfinite(value):
            raise ValueError(f"Refusing non-finite value for {name}: {value}")

        with self._lock:
            if name not in self._slots:
                raise KeyError(name)
            self._slots[name] = value

    def get(self, name: str) -> float | None:
        with self._lock:
            return self._slots[name]

    def read_all(self) -> dict[str, float | None]:
        """Copy of every slot, in allocation order."""
        with self._lock:
            return dict(self._slots)

    def describe_all(self) -> list[tuple[str, str, float | None]]:
        """(name, description, value) for every slot, in allocation order."""
        with self._lock:
            return [(name, self._help[name], value) for name, value in self._slots.items()]

    def __len__(self) -> int:
        with self._lock:
            return len(self._slots)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._slots


class GaugeCollector(Collector):
    """
    prometheus_client collector that renders a GaugeStore at scrape time.

    Unset slots are exported as a gauge family with HELP/TYPE lines but no
    sample, so the metric is visible as soon as it is activated.
    """

    def __init__(self, store: GaugeStore):
        self.store = store

    def collect(self) -> Iterator[GaugeMetricFamily]:
        for name, description, value in self.store.describe_all():
            yield GaugeMetricFamily(name, description, value=value)

    def describe(self) -> Iterator[GaugeMetricFamily]:
        for name, description, _ in self.store.describe_all():
            yield GaugeMetricFamily(name, description)
