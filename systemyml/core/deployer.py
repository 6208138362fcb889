"""Deployment of rendered units: dry-run report, safe install or full install."""

import logging
import sys
from enum import Enum
from pathlib import Path
from typing import Optional, TextIO, Union

from ..exceptions import ActivationError, UnitWriteError
from ..models.service import DeployOutcome, DeployState
from .unit_renderer import RenderedUnit

logger = logging.getLogger(__name__)


class DeployMode(Enum):
    """Mutually exclusive ways of applying a rendered unit."""

    DRY_RUN = "dry-run"
    SAFE = "safe"
    FULL = "full"


class Deployer:
    """Writes rendered units to a target directory and activates them.

    Only one unit is handled per call; callers process batches one unit at a
    time. Failures are returned in the DeployOutcome and never raised.
    """

    def __init__(
        self,
        target_dir: Union[str, Path],
        service_manager=None,
        dry_run: bool = False,
        safe: bool = False,
        print_units: bool = False,
        stream: Optional[TextIO] = None
    ):
        """Initialize the deployer.

        Args:
            target_dir: Directory unit files are written to
            service_manager: Object with enable_and_start(name) -> (bool, Optional[str]);
                required unless running in dry-run or safe mode
            dry_run: Report what would happen without side effects
            safe: Write unit files but never enable or start them
            print_units: Also print rendered unit text outside dry-run
            stream: Where reports are printed (defaults to stdout)
        """
        self.target_dir = Path(target_dir)
        self.service_manager = service_manager
        self.dry_run = dry_run
        self.safe = safe
        self.print_units = print_units
        self.stream = stream

        if self.mode == DeployMode.FULL and service_manager is None:
            raise ValueError("A service manager is required for full installs")

    @property
    def mode(self) -> DeployMode:
        if self.dry_run:
            return DeployMode.DRY_RUN
        if self.safe:
            return DeployMode.SAFE
        return DeployMode.FULL

    def deploy(self, unit: RenderedUnit) -> DeployOutcome:
        """Apply one rendered unit according to the configured mode.

        Args:
            unit: Rendered unit to apply

        Returns:
            DeployOutcome with the final state and any error
        """
        unit_path = self.target_dir / unit.filename
        logger.debug(f"unit_path: {unit_path}")

        if self.mode == DeployMode.DRY_RUN:
            self._report_dry_run(unit, unit_path)
            return DeployOutcome(unit.name, DeployState.DRY_REPORTED, unit_path)

        if self.print_units:
            self._print(f"Generated unit for '{unit.name}':\n\n{unit.text}")

        try:
            self._write(unit, unit_path)
        except UnitWriteError as e:
            logger.error(f"Failed to install unit '{unit.name}': {e}")
            return DeployOutcome(unit.name, DeployState.RENDERED, unit_path, error=e)

        if self.mode == DeployMode.SAFE:
            logger.info(f"Copied systemd unit to target directory: {unit_path}")
            return DeployOutcome(unit.name, DeployState.WRITTEN, unit_path)

        success, error_msg = self.service_manager.enable_and_start(unit.filename)
        if not success:
            error = ActivationError(unit.filename, error_msg or "unknown error")
            # The written unit is left in place
            logger.error(f"Failed to enable and start service '{unit.name}': {error_msg}")
            return DeployOutcome(unit.name, DeployState.WRITTEN, unit_path, error=error)

        logger.info(f"Enabled and started service: {unit.name}")
        return DeployOutcome(unit.name, DeployState.WRITTEN_AND_ACTIVATED, unit_path)

    def _write(self, unit: RenderedUnit, unit_path: Path):
        """Write a unit file atomically, creating the target directory if needed."""
        try:
            self.target_dir.mkdir(parents=True, exist_ok=True)
        except OSError as e:
            raise UnitWriteError(self.target_dir, str(e)) from e

        # Write to temp file first (atomic write)
        temp_file = unit_path.with_name(unit_path.name + ".tmp")
        try:
            with open(temp_file, 'w', encoding='utf-8') as f:
                f.write(unit.text)
            temp_file.replace(unit_path)
        except (OSError, UnicodeError) as e:
            temp_file.unlink(missing_ok=True)
            raise UnitWriteError(unit_path, str(e)) from e

        logger.info(f"Wrote {unit_path}")

    def _report_dry_run(self, unit: RenderedUnit, unit_path: Path):
        self._print(f"Generated unit for '{unit.name}':\n\n{unit.text}")
        self._print(f"Dry run: would create unit {unit_path}")

        if self.safe:
            self._print(f"Dry run: would enable service {unit.filename}")
            self._print(f"Dry run: would start service {unit.filename}")

    def _print(self, message: str):
        print(message, file=self.stream or sys.stdout)
