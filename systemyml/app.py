"""Main application coordinator for systemyml."""

import logging
from pathlib import Path
from typing import Optional, Union

from .core.deployer import Deployer
from .core.descriptor_loader import DescriptorLoader
from .core.unit_renderer import UnitRenderer
from .exceptions import InvalidFieldValue
from .models.service import DeployOutcome, DeployState, RunReport, ServiceDescriptor

logger = logging.getLogger(__name__)


class SystemYml:
    """Main application coordinator.

    Loads descriptors, renders each into a unit and hands it to the deployer.
    Descriptors are processed one at a time, in load order.
    """

    def __init__(
        self,
        deployer: Deployer,
        loader: Optional[DescriptorLoader] = None,
        renderer: Optional[UnitRenderer] = None
    ):
        """Initialize the application.

        Args:
            deployer: Deployer configured with target directory and mode
            loader: Descriptor loader (default: DescriptorLoader())
            renderer: Unit renderer (default: UnitRenderer())
        """
        self.deployer = deployer
        self.loader = loader or DescriptorLoader()
        self.renderer = renderer or UnitRenderer()

    def run(self, config_path: Union[str, Path]) -> RunReport:
        """Process every descriptor found at config_path.

        Files that fail to parse in directory mode and descriptors that fail
        to render, write or activate are collected in the report; the rest
        of the batch still runs.

        Args:
            config_path: Descriptor file or directory

        Returns:
            RunReport with one outcome per loaded descriptor

        Raises:
            InvalidInputPath: If config_path is neither a file nor a directory
            ParseError: If config_path is a single file that cannot be parsed
        """
        logger.info(f"Processing descriptors from {config_path} ({self.deployer.mode.value} mode)")

        result = self.loader.load(config_path)
        report = RunReport()

        for path, error in result.failures:
            report.add_failure(str(path), error)

        for descriptor in result.descriptors:
            report.record(self.process(descriptor))

        logger.info(f"Run finished: {report.summary()}")
        return report

    def process(self, descriptor: ServiceDescriptor) -> DeployOutcome:
        """Render and deploy a single descriptor.

        Args:
            descriptor: Descriptor to process

        Returns:
            DeployOutcome for the descriptor
        """
        try:
            unit = self.renderer.render(descriptor)
        except InvalidFieldValue as e:
            logger.error(f"Failed to render '{descriptor.name}': {e}")
            return DeployOutcome(descriptor.name, DeployState.LOADED, error=e)

        return self.deployer.deploy(unit)
