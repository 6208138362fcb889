"""Core functionality for turning descriptors into installed units."""

from .config_manager import ConfigManager
from .deployer import Deployer, DeployMode
from .descriptor_loader import DescriptorLoader, LoadResult
from .service_manager import ServiceManager
from .unit_renderer import RenderedUnit, UnitRenderer

__all__ = [
    "ConfigManager",
    "Deployer",
    "DeployMode",
    "DescriptorLoader",
    "LoadResult",
    "RenderedUnit",
    "ServiceManager",
    "UnitRenderer",
]
