"""
Metric catalog.

The catalog is the fixed list of every metric hostgauge knows how to
collect: name, description, and the sampler reading that feeds it. It is
built once at startup and never modified, so it is shared without locking.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from .config.schema import SourcesConfig
from .samplers import (
    BatterySampler,
    ContextSwitchSampler,
    CpuFrequencySampler,
    CpuUsageSampler,
    DiskIOSampler,
    DiskUsageSampler,
    FanSampler,
    MemorySampler,
    NetworkSampler,
    ProcessStateSampler,
    RunningProcessesSampler,
    Sampler,
    TemperatureSampler,
)


@dataclass(frozen=True)
class CatalogEntry:
    """
    One metric the system can collect.

    Attributes:
        name: Unique metric name, also the exposed gauge name
        description: Human-readable help text
        sampler: Sampler producing the reading
        key: Which of the sampler's readings this metric publishes
    """

    name: str
    description: str
    sampler: Sampler
    key: str = "value"

    def sample(self) -> float:
        """
        Run the sampler and return this metric's reading.

        Raises:
            SampleError: If the sampler fails
            KeyError: If the sampler did not return this entry's key
        """
        return self.sampler.sample()[self.key]


class MetricCatalog:
    """
    Immutable, ordered mapping of metric name to CatalogEntry.

    Iteration follows declaration order.
    """

    def __init__(self, entries: Iterable[CatalogEntry]):
        self._entries: dict[str, CatalogEntry] = {}
        for entry in entries:
            if entry.name in self._entries:
                raise ValueError(f"Duplicate metric name in catalog: {entry.name}")
            self._entries[entry.name] = entry

    def lookup(self, name: str) -> CatalogEntry | None:
        """Get an entry by name, or None if the catalog has no such metric."""
        return self._entries.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._entries)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[CatalogEntry]:
        return iter(self._entries.values())

    def __len__(self) -> int:
        return len(self._entries)

    def __repr__(self) -> str:
        return f"MetricCatalog({len(self)} metrics)"


def build_default_catalog(sources: SourcesConfig | None = None) -> MetricCatalog:
    """
    Build the catalog of host metrics.

    Metrics that come from the same probe share one sampler instance, so
    the scheduler reads that probe once per cycle.

    Args:
        sources: Where samplers read from (defaults if None)

    Returns:
        The default MetricCatalog
    """
    sources = sources or SourcesConfig()

    network = NetworkSampler(sources.network_interface)
    disk_io = DiskIOSampler()
    memory = MemorySampler()
    processes = ProcessStateSampler()

    return MetricCatalog([
        CatalogEntry("rx_bytes_total", "Total received bytes", network, "rx_bytes"),
        CatalogEntry("tx_bytes_total", "Total transmitted bytes", network, "tx_bytes"),
        CatalogEntry("rx_errors_total", "Total receive errors", network, "rx_errors"),
        CatalogEntry("tx_errors_total", "Total transmit errors", network, "tx_errors"),
        CatalogEntry("dropped_packets_total", "Total dropped packets", network, "dropped"),
        CatalogEntry("io_time_ms", "Time spent on I/O in milliseconds", disk_io, "io_time_ms"),
        CatalogEntry("writes_completed_total", "Total writes completed", disk_io, "writes_completed"),
        CatalogEntry("reads_completed_total", "Total reads completed", disk_io, "reads_completed"),
        CatalogEntry("total_memory_mb", "Total memory in MB", memory, "total_mb"),
        CatalogEntry("used_memory_mb", "Used memory in MB", memory, "used_mb"),
        CatalogEntry("available_memory_mb", "Available memory in MB", memory, "available_mb"),
        CatalogEntry("context_switches", "Context switches", ContextSwitchSampler(), "count"),
        CatalogEntry("cpu_usage_percentage", "CPU usage in percentage", CpuUsageSampler(), "percent"),
        CatalogEntry("memory_usage_percentage", "Memory usage in percentage", memory, "percent"),
        CatalogEntry(
            "disk_usage_percentage", "Disk usage in percentage", DiskUsageSampler(sources.disk_path), "percent"
        ),
        CatalogEntry(
            "running_processes_total",
            "Total running processes",
            RunningProcessesSampler(sources.proc_root),
            "count",
        ),
        CatalogEntry(
            "cpu_temperature_celsius",
            "CPU temperature in Celsius",
            TemperatureSampler(sources.cpu_temperature),
            "celsius",
        ),
        CatalogEntry(
            "battery_voltage_volts",
            "Battery voltage in volts",
            BatterySampler("voltage", sources.battery_voltage),
            "volts",
        ),
        CatalogEntry(
            "battery_current_amperes",
            "Battery current in amperes",
            BatterySampler("current", sources.battery_current),
            "amperes",
        ),
        CatalogEntry(
            "cpu_frequency_megahertz", "CPU frequency in MHz", CpuFrequencySampler(sources.cpu_frequency), "mhz"
        ),
        CatalogEntry(
            "cpu_fan_speed_rpm", "CPU fan speed in RPM", FanSampler("cpu_fan", sources.cpu_fan, index=0), "rpm"
        ),
        CatalogEntry(
            "gpu_fan_speed_rpm", "GPU fan speed in RPM", FanSampler("gpu_fan", sources.gpu_fan, index=1), "rpm"
        ),
        CatalogEntry("total_processes", "Total number of processes", processes, "total"),
        CatalogEntry("suspended_processes", "Suspended processes", processes, "suspended"),
        CatalogEntry("ready_processes", "Ready processes", processes, "ready"),
        CatalogEntry("blocked_processes", "Blocked processes", processes, "blocked"),
    ])
