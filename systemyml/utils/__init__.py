"""Utility constants."""

from .constants import *

__all__ = ["APP_NAME", "APP_VERSION", "CONFIG_DIR", "CONFIG_FILE", "UNIT_EXTENSION"]
