"""
Configuration schema.

Each section is a dataclass with a ``from_block`` constructor that reads a
parsed block and falls back to the defaults in ``const`` for anything that
is not set.
"""

from dataclasses import dataclass, field
from typing import Any

from ..const import (
    DEFAULT_DISK_PATH,
    DEFAULT_EXPORTER_ADDRESS,
    DEFAULT_EXPORTER_PORT,
    DEFAULT_FIFO_PATH,
    DEFAULT_METRICS_FILE,
    DEFAULT_PROC_ROOT,
    DEFAULT_SAMPLE_INTERVAL,
    DEFAULT_STATUS_FILE,
)
from .parser import Block, ConfigDocument


class SchemaError(ValueError):
    """A directive has a value of the wrong kind or out of range."""


def _get_str(block: Block, name: str, default: str | None = None) -> str | None:
    value = block.get_value(name)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, str):
        raise SchemaError(f"'{block.type}.{name}' must be a string, got {value!r}")
    return value


def _get_bool(block: Block, name: str, default: bool) -> bool:
    value = block.get_value(name)
    if value is None:
        return default
    if not isinstance(value, bool):
        raise SchemaError(f"'{block.type}.{name}' must be on or off, got {value!r}")
    return value


def _get_int(block: Block, name: str, default: int) -> int:
    value = block.get_value(name)
    if value is None:
        return default
    if isinstance(value, bool) or not isinstance(value, int):
        raise SchemaError(f"'{block.type}.{name}' must be an integer, got {value!r}")
    return value


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: str = "info"
    file: str | None = None
    file_level: str = "debug"
    file_max_size: int = 10  # MB
    file_keep: int = 5
    colors: bool = True
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

    @classmethod
    def from_block(cls, block: Block | None) -> "LoggingConfig":
        if block is None:
            return cls()
        defaults = cls()
        return cls(
            level=_get_str(block, "level", defaults.level),
            file=_get_str(block, "file"),
            file_level=_get_str(block, "file_level", defaults.file_level),
            file_max_size=_get_int(block, "file_max_size", defaults.file_max_size),
            file_keep=_get_int(block, "file_keep", defaults.file_keep),
            colors=_get_bool(block, "colors", defaults.colors),
            format=_get_str(block, "format", defaults.format),
        )


@dataclass
class ExporterConfig:
    """HTTP pull endpoint configuration."""

    address: str = DEFAULT_EXPORTER_ADDRESS
    port: int = DEFAULT_EXPORTER_PORT
    # When on, failing to bind the endpoint aborts the run instead of
    # continuing with collection only.
    required: bool = False

    @classmethod
    def from_block(cls, block: Block | None) -> "ExporterConfig":
        if block is None:
            return cls()
        port = _get_int(block, "port", DEFAULT_EXPORTER_PORT)
        if not 0 <= port <= 65535:
            raise SchemaError(f"'exporter.port' out of range: {port}")
        return cls(
            address=_get_str(block, "address", DEFAULT_EXPORTER_ADDRESS),
            port=port,
            required=_get_bool(block, "required", False),
        )


@dataclass
class SchedulerConfig:
    """Sampling loop configuration."""

    interval: float = DEFAULT_SAMPLE_INTERVAL  # seconds

    @classmethod
    def from_block(cls, block: Block | None) -> "SchedulerConfig":
        if block is None:
            return cls()
        interval = block.get_value("interval", DEFAULT_SAMPLE_INTERVAL)
        if isinstance(interval, bool) or not isinstance(interval, (int, float)):
            raise SchemaError(f"'scheduler.interval' must be a duration, got {interval!r}")
        if interval <= 0:
            raise SchemaError(f"'scheduler.interval' must be positive, got {interval}")
        return cls(interval=float(interval))


@dataclass
class ControlConfig:
    """Paths of the control FIFO and the status/listing files."""

    fifo: str = DEFAULT_FIFO_PATH
    status_file: str = DEFAULT_STATUS_FILE
    metrics_file: str = DEFAULT_METRICS_FILE

    @classmethod
    def from_block(cls, block: Block | None) -> "ControlConfig":
        if block is None:
            return cls()
        return cls(
            fifo=_get_str(block, "fifo", DEFAULT_FIFO_PATH),
            status_file=_get_str(block, "status_file", DEFAULT_STATUS_FILE),
            metrics_file=_get_str(block, "metrics_file", DEFAULT_METRICS_FILE),
        )


@dataclass
class SourcesConfig:
    """
    Where samplers read from.

    Sensor paths left unset are auto-discovered at sampling time.
    """

    proc_root: str = DEFAULT_PROC_ROOT
    disk_path: str = DEFAULT_DISK_PATH
    network_interface: str | None = None
    cpu_temperature: str | None = None
    battery_voltage: str | None = None
    battery_current: str | None = None
    cpu_frequency: str | None = None
    cpu_fan: str | None = None
    gpu_fan: str | None = None

    @classmethod
    def from_block(cls, block: Block | None) -> "SourcesConfig":
        if block is None:
            return cls()
        return cls(
            proc_root=_get_str(block, "proc_root", DEFAULT_PROC_ROOT),
            disk_path=_get_str(block, "disk_path", DEFAULT_DISK_PATH),
            network_interface=_get_str(block, "network_interface"),
            cpu_temperature=_get_str(block, "cpu_temperature"),
            battery_voltage=_get_str(block, "battery_voltage"),
            battery_current=_get_str(block, "battery_current"),
            cpu_frequency=_get_str(block, "cpu_frequency"),
            cpu_fan=_get_str(block, "cpu_fan"),
            gpu_fan=_get_str(block, "gpu_fan"),
        )


@dataclass
class Config:
    """Root configuration."""

    logging: LoggingConfig = field(default_factory=LoggingConfig)
    exporter: ExporterConfig = field(default_factory=ExporterConfig)
    scheduler: SchedulerConfig = field(default_factory=SchedulerConfig)
    control: ControlConfig = field(default_factory=ControlConfig)
    sources: SourcesConfig = field(default_factory=SourcesConfig)

    @classmethod
    def from_document(cls, document: ConfigDocument) -> "Config":
        """Build the configuration from a parsed document."""
        return cls(
            logging=LoggingConfig.from_block(document.get_block("logging")),
            exporter=ExporterConfig.from_block(document.get_block("exporter")),
            scheduler=SchedulerConfig.from_block(document.get_block("scheduler")),
            control=ControlConfig.from_block(document.get_block("control")),
            sources=SourcesConfig.from_block(document.get_block("sources")),
        )

    def summary(self) -> dict[str, Any]:
        """Short key/value overview for --validate output."""
        return {
            "Exporter": f"{self.exporter.address}:{self.exporter.port}"
            + (" (required)" if self.exporter.required else ""),
            "Sample interval": f"{self.scheduler.interval}s",
            "Control FIFO": self.control.fifo,
            "Status file": self.control.status_file,
            "Logging level": self.logging.level,
        }
