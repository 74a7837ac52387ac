"""
hostgauge - host metrics collector with a Prometheus pull endpoint.
"""

from .const import APP_VERSION

__version__ = APP_VERSION
