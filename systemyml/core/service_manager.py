"""Service manager for activating units via systemctl."""

import subprocess
import logging
from typing import List, Tuple, Optional

from ..utils.constants import DEFAULT_SYSTEMCTL_TIMEOUT

logger = logging.getLogger(__name__)


class ServiceManager:
    """Manages systemd units via systemctl commands."""

    def __init__(self, user_mode: bool = False, timeout: int = DEFAULT_SYSTEMCTL_TIMEOUT):
        """Initialize the service manager.

        Args:
            user_mode: True to talk to the user manager (systemctl --user)
            timeout: Seconds to wait for each systemctl call
        """
        self.user_mode = user_mode
        self.timeout = timeout

    def enable_and_start(self, service_name: str) -> Tuple[bool, Optional[str]]:
        """Reload unit files, then enable and start a service.

        Stops at the first step that fails.

        Args:
            service_name: Unit name (e.g., 'web.service')

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        success, error = self.daemon_reload()
        if not success:
            return False, error

        success, error = self.enable_service(service_name)
        if not success:
            return False, error

        return self.start_service(service_name)

    def daemon_reload(self) -> Tuple[bool, Optional[str]]:
        """Make systemd pick up new or changed unit files.

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        return self._run(["daemon-reload"], "reload unit files")

    def enable_service(self, service_name: str) -> Tuple[bool, Optional[str]]:
        """Enable a systemd service to start on boot.

        Args:
            service_name: Name of the systemd service

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        return self._run(["enable", service_name], f"enable {service_name}")

    def start_service(self, service_name: str) -> Tuple[bool, Optional[str]]:
        """Start a systemd service.

        Args:
            service_name: Name of the systemd service

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        return self._run(["start", service_name], f"start {service_name}")

    def _command(self, args: List[str]) -> List[str]:
        cmd = ["systemctl"]
        if self.user_mode:
            cmd.append("--user")
        cmd.extend(args)
        return cmd

    def _run(self, args: List[str], description: str) -> Tuple[bool, Optional[str]]:
        """Execute a systemctl command.

        Args:
            args: systemctl arguments (e.g., ['enable', 'web.service'])
            description: What the command does, for log and error messages

        Returns:
            Tuple of (success: bool, error_message: Optional[str])
        """
        cmd = self._command(args)
        logger.debug(f"Running {' '.join(cmd)}")

        try:
            subprocess.run(
                cmd,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=True
            )
            logger.info(f"Successfully ran: {description}")
            return True, None

        except subprocess.TimeoutExpired:
            error_msg = f"Timeout while trying to {description}"
            logger.error(error_msg)
            return False, error_msg

        except subprocess.CalledProcessError as e:
            error_msg = e.stderr.strip() if e.stderr else f"Failed to {description}"
            logger.error(f"Failed to {description}: {error_msg}")
            return False, error_msg

        except OSError as e:
            error_msg = str(e)
            logger.error(f"Could not run systemctl to {description}: {error_msg}")
            return False, error_msg
