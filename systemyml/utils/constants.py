"""Application constants and configuration."""

from pathlib import Path

# Application metadata
APP_NAME = "systemyml"
APP_VERSION = "0.1.0"

# Paths
CONFIG_DIR = Path.home() / ".config" / "systemyml"
CONFIG_FILE = CONFIG_DIR / "config.yaml"

# Default settings
DEFAULT_CONFIG_PATH = "services"
DEFAULT_TARGET_DIR = "/etc/systemd/system"
DEFAULT_USER_TARGET_DIR = str(Path.home() / ".config" / "systemd" / "user")
DEFAULT_SYSTEMCTL_TIMEOUT = 10  # seconds

# Descriptor files
DESCRIPTOR_EXTENSIONS = (".yaml", ".yml")  # matched case-sensitively
DESCRIPTOR_SECTIONS = ("install", "unit", "service", "environment")

# Rendered units
UNIT_EXTENSION = "service"
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
