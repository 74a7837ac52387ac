"""
Network interface sampler.

Uses psutil.net_io_counters(pernic=True) for one interface.
"""

import psutil

from .base import Sampler


def discover_network_interfaces() -> list[str]:
    """
    List interface names known to the kernel, loopback last.

    Returns:
        Sorted interface names (e.g. eth0, wlan0, lo)
    """
    try:
        names = sorted(psutil.net_io_counters(pernic=True))
    except OSError:
        return []
    return sorted(names, key=lambda name: name == "lo")


class NetworkSampler(Sampler):
    """
    Byte, error and drop counters for one interface.

    The interface is resolved on every sample when not configured, so an
    interface that appears after startup is picked up.
    """

    NAME = "network"
    KEYS = ("rx_bytes", "tx_bytes", "rx_errors", "tx_errors", "dropped")

    def __init__(self, interface: str | None = None):
        self.interface = interface

    def _resolve_interface(self) -> str:
        if self.interface:
            return self.interface
        interfaces = discover_network_interfaces()
        if not interfaces:
            raise self.fail("no network interfaces found")
        return interfaces[0]

    def sample(self) -> dict[str, float]:
        interface = self._resolve_interface()
        counters = psutil.net_io_counters(pernic=True).get(interface)
        if counters is None:
            raise self.fail(f"interface {interface!r} not found")

        return {
            "rx_bytes": float(counters.bytes_recv),
            "tx_bytes": float(counters.bytes_sent),
            "rx_errors": float(counters.errin),
            "tx_errors": float(counters.errout),
            "dropped": float(counters.dropin),
        }
