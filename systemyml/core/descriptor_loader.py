"""Descriptor loader for reading service descriptions from YAML files."""

import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, List, Optional, Set, Tuple, Union
import yaml

from ..exceptions import InvalidInputPath, ParseError
from ..models.service import ServiceDescriptor
from ..utils.constants import DESCRIPTOR_EXTENSIONS

logger = logging.getLogger(__name__)

MERGE_TAG = "tag:yaml.org,2002:merge"


class UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader that rejects duplicate keys instead of keeping the last one."""

    def construct_mapping(self, node, deep=False):
        seen = set()
        for key_node, _ in node.value:
            if key_node.tag == MERGE_TAG:
                continue
            key = self.construct_object(key_node, deep=deep)
            try:
                duplicate = key in seen
            except TypeError:
                # Unhashable keys are reported by SafeLoader itself
                continue
            if duplicate:
                raise yaml.constructor.ConstructorError(
                    "while constructing a mapping", node.start_mark,
                    f"found duplicate key {key!r}", key_node.start_mark
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


@dataclass
class LoadResult:
    """Descriptors loaded from a path and the files that failed to load.

    Attributes:
        descriptors: Loaded descriptors in load order
        failures: (path, error) for every skipped file
    """

    descriptors: List[ServiceDescriptor] = field(default_factory=list)
    failures: List[Tuple[Path, ParseError]] = field(default_factory=list)


class DescriptorLoader:
    """Loads service descriptors from a YAML file or a directory of YAML files."""

    def __init__(self, extensions: Iterable[str] = DESCRIPTOR_EXTENSIONS):
        """Initialize the descriptor loader.

        Args:
            extensions: File suffixes recognized as descriptor files (case-sensitive)
        """
        self.extensions = tuple(extensions)

    def load(self, path: Union[str, Path]) -> LoadResult:
        """Load descriptors from a file or directory.

        A parse failure in directory mode skips that file and is recorded in
        the result. A parse failure of a single named file is raised.

        Args:
            path: Descriptor file or directory

        Returns:
            LoadResult with descriptors and skipped files

        Raises:
            InvalidInputPath: If path is neither a file nor a directory
            ParseError: If path is a file that cannot be parsed
        """
        path = Path(path)

        if path.is_dir():
            return self.load_directory(path)

        if path.is_file():
            return LoadResult(descriptors=self.load_file(path))

        raise InvalidInputPath(path)

    def discover(self, directory: Path) -> List[Path]:
        """List descriptor files directly inside a directory, sorted by name.

        Args:
            directory: Directory to scan

        Returns:
            Paths of regular files with a recognized extension
        """
        try:
            entries = sorted(directory.iterdir(), key=lambda entry: entry.name)
        except OSError as e:
            raise InvalidInputPath(directory, str(e)) from e

        return [
            entry for entry in entries
            if entry.suffix in self.extensions and entry.is_file()
        ]

    def load_directory(self, directory: Path) -> LoadResult:
        """Load every descriptor file in a directory, skipping files that fail.

        Args:
            directory: Directory containing descriptor files

        Returns:
            LoadResult with descriptors from all good files
        """
        result = LoadResult()
        seen: Set[str] = set()

        files = self.discover(directory)
        logger.debug(f"Found {len(files)} descriptor files in {directory}")

        for file_path in files:
            try:
                descriptors = self.load_file(file_path, seen)
            except ParseError as e:
                logger.error(f"Skipping descriptor file: {e}")
                result.failures.append((file_path, e))
                continue

            seen.update(descriptor.name for descriptor in descriptors)
            result.descriptors.extend(descriptors)

        logger.info(
            f"Loaded {len(result.descriptors)} descriptors from {directory} "
            f"({len(result.failures)} files skipped)"
        )
        return result

    def load_file(self, path: Path, seen: Optional[Set[str]] = None) -> List[ServiceDescriptor]:
        """Parse one descriptor file.

        Args:
            path: YAML file mapping service names to descriptors
            seen: Names already loaded earlier in the same load operation

        Returns:
            Descriptors in document order

        Raises:
            ParseError: If the file cannot be read, is not valid YAML, or
                does not describe services
        """
        seen = seen if seen is not None else set()

        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = yaml.load(f, Loader=UniqueKeyLoader)
        except yaml.YAMLError as e:
            raise ParseError(path, f"YAML parsing error: {e}") from e
        except (OSError, UnicodeDecodeError) as e:
            raise ParseError(path, str(e)) from e

        if data is None:
            logger.warning(f"Empty descriptor file: {path}")
            return []

        if not isinstance(data, dict):
            raise ParseError(path, "top level must map service names to descriptors")

        descriptors = []
        for name, body in data.items():
            if not isinstance(name, str):
                raise ParseError(path, f"service name must be a string, got {name!r}")

            if name in seen:
                raise ParseError(path, f"service '{name}' is already defined in another file")

            try:
                descriptors.append(ServiceDescriptor.from_dict(name, body, source=path))
            except ValueError as e:
                raise ParseError(path, str(e)) from e

        logger.debug(f"Parsed {len(descriptors)} descriptors from {path}")
        return descriptors
