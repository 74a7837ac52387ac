"""
Main application orchestrator.

Handles one run attempt:
- Reading the metric selection (control FIFO or CLI)
- Catalog listing requests
- Registry activation
- Exposition endpoint lifecycle
- The sampling loop and graceful shutdown
"""

import asyncio
import signal
from pathlib import Path
from typing import TextIO

from .catalog import MetricCatalog, build_default_catalog
from .config.loader import ConfigError, ConfigLoader
from .config.schema import Config
from .control import ChannelError, Selection, StatusFile, parse_selection, read_fifo_message, write_catalog_listing
from .exposition import ExpositionServer, TransportError
from .logging import LogConfig, get_logger, setup_logging
from .registry import Registry
from .scheduler import Scheduler

logger = get_logger("app")


class Application:
    """
    Main application class.

    Wires the catalog, registry, scheduler and exposition server together
    for a single selection.
    """

    def __init__(
        self,
        config: Config,
        catalog: MetricCatalog | None = None,
        listing_sink: TextIO | None = None,
    ):
        """
        Initialize application.

        Args:
            config: Application configuration
            catalog: Metric catalog (built from config.sources if None)
            listing_sink: Stream for catalog listings instead of the
                configured metrics file
        """
        self.config = config
        self.catalog = catalog or build_default_catalog(config.sources)
        self.listing_sink = listing_sink

        self.status = StatusFile(config.control.status_file)
        self.registry = Registry(self.catalog)
        self.scheduler = Scheduler(self.registry, interval=config.scheduler.interval)
        self.server: ExpositionServer | None = None

        self._signals_installed: list[signal.Signals] = []
        self._shutdown_event = asyncio.Event()
        self._monitoring = False

    async def _wait_for_message(self) -> str | None:
        """Read the control FIFO; None if shutdown is requested first."""
        read = asyncio.ensure_future(read_fifo_message(self.config.control.fifo))
        shutdown = asyncio.ensure_future(self._shutdown_event.wait())

        done, pending = await asyncio.wait({read, shutdown}, return_when=asyncio.FIRST_COMPLETED)
        for task in pending:
            task.cancel()
        await asyncio.gather(*pending, return_exceptions=True)

        if read in done:
            return read.result()
        return None

    async def read_selection(self, message: str | None = None) -> Selection | None:
        """
        Obtain and decode the selection.

        Args:
            message: Selection text; read from the control FIFO if None

        Returns:
            The selection, or None if shutdown was requested while waiting

        Raises:
            ChannelError: If the FIFO fails or the message is empty
        """
        try:
            if message is None:
                self.status.update("Starting monitoring from FIFO")
                message = await self._wait_for_message()
                if message is None:
                    logger.info("Shutdown requested while waiting for a selection")
                    return None
            return parse_selection(message)
        except ChannelError as e:
            self.status.update(f"Error: {e}")
            logger.error(f"Selection channel error: {e}")
            raise

    def list_metrics(self) -> int:
        """Write the catalog listing; returns the number of metrics listed."""
        sink = self.listing_sink or self.config.control.metrics_file
        count = write_catalog_listing(self.catalog, sink)
        logger.info(f"Listed {count} available metrics")
        return count

    def activate(self, names: tuple[str, ...]) -> None:
        """
        Activate the selected metrics.

        Raises:
            ConfigError: If the selection is empty or names an unknown metric
        """
        try:
            self.registry.activate(names)
        except ConfigError as e:
            self.status.update(f"Error: {e}")
            logger.error(f"Activation failed: {e}")
            raise

    def start_exposition(self) -> None:
        """
        Start the HTTP endpoint.

        Raises:
            TransportError: Only when the exporter is configured as required
        """
        exporter = self.config.exporter
        server = ExpositionServer(self.registry.prometheus, port=exporter.port, address=exporter.address)

        try:
            server.start()
        except TransportError as e:
            self.status.update(f"Error: exposition server failed: {e}")
            if exporter.required:
                logger.error(f"Exposition server failed: {e}")
                raise
            logger.error(f"Exposition server failed, collecting without exposition: {e}")
            return

        self.server = server

    def _setup_signal_handlers(self) -> None:
        """Setup signal handlers for graceful shutdown."""
        loop = asyncio.get_running_loop()

        for sig in (signal.SIGTERM, signal.SIGINT):
            try:
                loop.add_signal_handler(sig, self._signal_handler)
                self._signals_installed.append(sig)
            except (NotImplementedError, RuntimeError):
                # Not the main thread, or not supported on this platform
                logger.debug(f"Cannot install handler for {sig.name}")

    def _remove_signal_handlers(self) -> None:
        loop = asyncio.get_running_loop()
        for sig in self._signals_installed:
            loop.remove_signal_handler(sig)
        self._signals_installed.clear()

    def _signal_handler(self) -> None:
        """Handle shutdown signals."""
        logger.info("Received shutdown signal")
        self.request_shutdown()

    def request_shutdown(self) -> None:
        """
        Stop waiting for a selection, or stop sampling after the current
        cycle. Call from the event loop thread.
        """
        self._shutdown_event.set()
        self.scheduler.stop()

    async def run(self, message: str | None = None) -> None:
        """
        Run one monitoring attempt until shutdown.

        Signal handlers are installed first, so SIGINT/SIGTERM also end the
        wait for a selection on the control FIFO.

        Args:
            message: Selection text; read from the control FIFO if None

        Raises:
            ChannelError: If no usable selection was received
            ConfigError: If activation fails
            TransportError: If a required exposition endpoint fails
        """
        self._setup_signal_handlers()

        try:
            selection = await self.read_selection(message)
            if selection is None:
                return

            if selection.list_catalog:
                self.list_metrics()
                return

            self.activate(selection.names)
            self.start_exposition()

            if self.server is None:
                self.status.update("Metrics monitoring started (exposition unavailable)")
            else:
                self.status.update("Metrics monitoring started")
            self._monitoring = True
            logger.info("hostgauge started successfully")

            await self.scheduler.run()
        finally:
            await self.stop()

    async def stop(self) -> None:
        """
        Stop the endpoint and release the registry. Idempotent.

        The "stopped" status is only written after monitoring started, so
        a setup error stays on the status line.
        """
        self.request_shutdown()
        self._remove_signal_handlers()

        if self.server is not None:
            # Joining the server thread blocks; keep the loop free
            await asyncio.to_thread(self.server.stop)
            self.server = None

        if self.registry.is_active:
            self.registry.teardown()
            logger.info("hostgauge stopped")

        if self._monitoring:
            self._monitoring = False
            self.status.update("Metrics monitoring stopped")


def load_run_config(config_path: str | None, cli_log_config: LogConfig | None = None) -> Config:
    """
    Load configuration and apply its logging section.

    Args:
        config_path: Path to configuration file, or None for defaults
        cli_log_config: Logging config from CLI args (overrides file config)
    """
    loader = ConfigLoader()
    config = loader.load_file(config_path) if config_path else Config()

    if cli_log_config is None:
        setup_logging(
            LogConfig(
                console_level=config.logging.level,
                console_colors=config.logging.colors,
                file_enabled=config.logging.file is not None,
                file_path=config.logging.file or LogConfig.file_path,
                file_level=config.logging.file_level,
                file_max_bytes=config.logging.file_max_size * 1024 * 1024,
                file_backup_count=config.logging.file_keep,
                format=config.logging.format,
            )
        )
    else:
        # CLI args win, but a log file from the config file is still honored
        if not cli_log_config.file_enabled and config.logging.file:
            cli_log_config.file_enabled = True
            cli_log_config.file_path = config.logging.file
            cli_log_config.file_level = config.logging.file_level
            cli_log_config.file_max_bytes = config.logging.file_max_size * 1024 * 1024
            cli_log_config.file_backup_count = config.logging.file_keep
        setup_logging(cli_log_config)

    if config_path:
        logger.info(f"Loaded configuration from {Path(config_path)}")
        for warning in loader.validate(config):
            logger.warning(f"Config warning: {warning}")

    return config


async def run_app(
    config_path: str | None,
    cli_log_config: LogConfig | None = None,
    message: str | None = None,
) -> None:
    """
    Load configuration and run the application.

    Args:
        config_path: Path to configuration file, or None for defaults
        cli_log_config: Logging config from CLI args (overrides file config)
        message: Selection text; read from the control FIFO if None
    """
    config = load_run_config(config_path, cli_log_config)
    app = Application(config)
    await app.run(message)
