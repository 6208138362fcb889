"""systemyml - Create systemd service units from YAML descriptions."""

from .utils.constants import APP_VERSION

__version__ = APP_VERSION
