"""
Metric registry.

Activates a runtime-selected subset of the catalog: validates the whole
selection, allocates gauge slots for exactly those metrics and registers
them with a per-registry prometheus CollectorRegistry. Activation is all
or nothing; an unknown name leaves the registry empty.
"""

from collections.abc import Sequence

from prometheus_client import CollectorRegistry

from .catalog import CatalogEntry, MetricCatalog
from .config.loader import ConfigError
from .logging import get_logger
from .store import GaugeCollector, GaugeStore

logger = get_logger("registry")


class UnknownMetricError(ConfigError):
    """The selection names a metric the catalog does not have."""

    def __init__(self, name: str):
        self.name = name
        super().__init__(f"unknown metric '{name}'")


class EmptySelectionError(ConfigError):
    """The selection contains no metric names."""

    def __init__(self):
        super().__init__("no metrics selected")


class Registry:
    """
    Owns the active set and its gauge storage for one run.

    Usage:
        registry = Registry(catalog)
        registry.activate(["cpu_usage_percentage"])
        ...
        registry.teardown()
    """

    def __init__(self, catalog: MetricCatalog):
        self.catalog = catalog
        self.store = GaugeStore()
        self.prometheus = CollectorRegistry(auto_describe=True)
        self._collector: GaugeCollector | None = None
        self._active: tuple[CatalogEntry, ...] = ()

    @property
    def active(self) -> tuple[CatalogEntry, ...]:
        """Active entries in selection order (empty before activation)."""
        return self._active

    @property
    def is_active(self) -> bool:
        return self._collector is not None

    def resolve(self, names: Sequence[str]) -> list[CatalogEntry]:
        """
        Look up every selected name without changing any state.

        Duplicate names are collapsed, keeping the first occurrence.

        Raises:
            EmptySelectionError: If names is empty
            UnknownMetricError: For the first name not in the catalog
        """
        if not names:
            raise EmptySelectionError()

        entries: list[CatalogEntry] = []
        seen: set[str] = set()
        for name in names:
            entry = self.catalog.lookup(name)
            if entry is None:
                raise UnknownMetricError(name)
            if name in seen:
                logger.warning(f"Metric '{name}' selected more than once, ignoring repeat")
                continue
            seen.add(name)
            entries.append(entry)

        return entries

    def activate(self, names: Sequence[str]) -> tuple[CatalogEntry, ...]:
        """
        Activate the selected metrics.

        Every name is validated before anything is allocated, so a failed
        activation leaves no slots behind.

        Args:
            names: Metric names, in the order they should be sampled

        Returns:
            The active entries

        Raises:
            EmptySelectionError: If names is empty
            UnknownMetricError: If any name is not in the catalog
            RuntimeError: If the registry is already active
        """
        if self.is_active:
            raise RuntimeError("Registry already active; call teardown() first")

        entries = self.resolve(names)

        self.store.allocate((entry.name, entry.description) for entry in entries)
        collector = GaugeCollector(self.store)
        self.prometheus.register(collector)
        self._collector = collector
        self._active = tuple(entries)

        logger.info(f"Activated {len(entries)} metrics: {', '.join(e.name for e in entries)}")
        return self._active

    def read_all(self) -> dict[str, float | None]:
        """
        Current value of every active metric; None for never-sampled ones.

        Not a snapshot across metrics: values may come from different
        sampling cycles if a cycle is in progress.
        """
        return self.store.read_all()

    def teardown(self) -> None:
        """Release gauge storage and unregister from exposition. Idempotent."""
        if self._collector is None:
            return

        self.prometheus.unregister(self._collector)
        self._collector = None
        self.store.clear()
        logger.debug(f"Released {len(self._active)} metrics")
        self._active = ()
