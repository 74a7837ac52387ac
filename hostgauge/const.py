"""
Application constants and metadata.
"""

# Application info
APP_NAME = "hostgauge"
APP_VERSION = "0.1.0"

# Exposition
DEFAULT_EXPORTER_ADDRESS = "0.0.0.0"
DEFAULT_EXPORTER_PORT = 8000

# Scheduler
DEFAULT_SAMPLE_INTERVAL = 1.0

# Control channel
DEFAULT_FIFO_PATH = "/tmp/monitor_fifo"
DEFAULT_STATUS_FILE = "/tmp/monitor_status"
DEFAULT_METRICS_FILE = "/tmp/monitor_metrics"
LIST_METRICS_SENTINEL = "1"
MAX_SELECTED_METRICS = 64
MAX_MESSAGE_BYTES = 4096

# Kernel interfaces
DEFAULT_PROC_ROOT = "/proc"
DEFAULT_DISK_PATH = "/"
DEFAULT_CONFIG_PATH = "/etc/hostgauge/config.conf"
