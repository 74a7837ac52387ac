"""
Entry point for hostgauge.

Usage:
    python -m hostgauge                       # wait for a selection on the control FIFO
    python -m hostgauge -c /etc/hostgauge/config.conf
    python -m hostgauge --metrics "cpu_usage_percentage, memory_usage_percentage"
    python -m hostgauge --list-metrics
"""

import argparse
import asyncio
import sys
from pathlib import Path

from . import __version__
from .app import run_app
from .catalog import build_default_catalog
from .config.loader import ConfigError, ConfigLoader
from .const import DEFAULT_CONFIG_PATH
from .control import ChannelError, format_catalog_listing
from .exposition import TransportError
from .logging import LogConfig, get_logger, setup_logging

logger = get_logger("main")


def validate_config(config_path: str) -> int:
    """Validate configuration file and print warnings."""
    try:
        loader = ConfigLoader()
        config = loader.load_file(config_path)
    except ConfigError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        return 1

    warnings = loader.validate(config)
    if warnings:
        print(f"Configuration warnings ({len(warnings)}):")
        for warning in warnings:
            print(f"  - {warning}")

    print("\nConfiguration summary:")
    for key, value in config.summary().items():
        print(f"  {key}: {value}")

    print("\nConfiguration is valid!")
    return 0


def list_metrics() -> int:
    """Print the metric catalog to stdout."""
    for line in format_catalog_listing(build_default_catalog()):
        print(line)
    return 0


def resolve_config_path(arg: str | None) -> str | None:
    """
    Pick the configuration file to load.

    An explicit path must exist. The default path is optional; without it
    built-in defaults apply.
    """
    if arg is not None:
        return arg
    if Path(DEFAULT_CONFIG_PATH).is_file():
        return DEFAULT_CONFIG_PATH
    return None


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        prog="hostgauge",
        description="Host metrics collector with a Prometheus pull endpoint",
    )

    parser.add_argument(
        "-c", "--config",
        metavar="PATH",
        help=f"Path to configuration file (default: {DEFAULT_CONFIG_PATH} if present)",
    )

    parser.add_argument(
        "-m", "--metrics",
        metavar="LIST",
        help='Comma-separated metric selection; skips the control FIFO ("1" lists metrics)',
    )

    parser.add_argument(
        "-l", "--list-metrics",
        action="store_true",
        help="Print available metrics and exit",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable verbose logging (INFO level)",
    )

    parser.add_argument(
        "-d", "--debug",
        action="store_true",
        help="Enable debug logging (DEBUG level)",
    )

    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Quiet mode (only errors)",
    )

    parser.add_argument(
        "--log-file",
        metavar="PATH",
        help="Write logs to file",
    )

    parser.add_argument(
        "--no-color",
        action="store_true",
        help="Disable colored output",
    )

    parser.add_argument(
        "--validate",
        action="store_true",
        help="Validate configuration and exit",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    args = parser.parse_args()

    if args.list_metrics:
        return list_metrics()

    config_path = resolve_config_path(args.config)
    if args.config is not None and not Path(args.config).exists():
        print(f"Configuration file not found: {args.config}", file=sys.stderr)
        return 1

    if args.validate:
        if config_path is None:
            print("No configuration file to validate", file=sys.stderr)
            return 1
        return validate_config(config_path)

    # Only build a CLI logging config when a flag asks for it, so the
    # configuration file's logging block applies otherwise
    cli_log_config: LogConfig | None = None
    if args.debug or args.verbose or args.quiet or args.log_file or args.no_color:
        cli_log_config = LogConfig()
        if args.debug:
            cli_log_config.console_level = "debug"
        elif args.verbose:
            cli_log_config.console_level = "info"
        elif args.quiet:
            cli_log_config.console_level = "error"
        if args.no_color:
            cli_log_config.console_colors = False
        if args.log_file:
            cli_log_config.file_enabled = True
            cli_log_config.file_path = args.log_file

    # Early logging until the configuration file is read
    setup_logging(cli_log_config)

    try:
        asyncio.run(run_app(config_path, cli_log_config=cli_log_config, message=args.metrics))
        return 0
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1
    except ChannelError as e:
        logger.error(f"Control channel error: {e}")
        return 1
    except TransportError as e:
        logger.error(f"Exposition error: {e}")
        return 1
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 0
    except Exception as e:
        logger.exception(f"Fatal error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
