"""Data models for service descriptors and deployment results."""

import re
from dataclasses import dataclass, field, fields
from enum import Enum
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Optional, Tuple

from ..utils.constants import DESCRIPTOR_SECTIONS

# Unit name stems accepted by systemd (without the ".service" suffix)
UNIT_NAME_PATTERN = re.compile(r"^[A-Za-z0-9:_.@\\-]+$")

Pairs = Tuple[Tuple[Any, Any], ...]


class _Unset:
    """Marker for a directive that is absent from the descriptor."""

    def __repr__(self):
        return "UNSET"

    def __bool__(self):
        return False


UNSET = _Unset()


def freeze(value: Any) -> Any:
    """Return an immutable copy of a parsed YAML value.

    Lists become tuples and mappings become read-only mappings. Scalars are
    returned unchanged; no type conversion happens here.
    """
    if isinstance(value, list):
        return tuple(freeze(item) for item in value)
    if isinstance(value, dict):
        return MappingProxyType({key: freeze(item) for key, item in value.items()})
    return value


def _freeze_section(name: str, data: Any) -> Pairs:
    if data is None:
        return ()
    if not isinstance(data, dict):
        raise ValueError(f"Section '{name}' must be a mapping, got {type(data).__name__}")
    return tuple((key, freeze(value)) for key, value in data.items())


class FieldKind(Enum):
    """Value types of known [Service] directives."""

    STRING = "string"
    INTEGER = "integer"
    STRING_LIST = "list of strings"
    INTEGER_LIST = "list of integers"

    @property
    def is_list(self) -> bool:
        return self in (FieldKind.STRING_LIST, FieldKind.INTEGER_LIST)


def _directive(name: str, kind: FieldKind = FieldKind.STRING):
    return field(default=UNSET, metadata={"directive": name, "kind": kind})


@dataclass(frozen=True)
class ServiceProperties:
    """Known [Service] directives of a descriptor.

    Every directive is optional and defaults to UNSET. Values are stored as
    parsed; the renderer checks them against each directive's FieldKind.
    Field declaration order is the order directives are rendered in.
    Directives outside this schema are kept in ``extra`` in document order.
    """

    type: Any = _directive("Type")
    exec_start_pre: Any = _directive("ExecStartPre", FieldKind.STRING_LIST)
    exec_start: Any = _directive("ExecStart")
    exec_start_post: Any = _directive("ExecStartPost", FieldKind.STRING_LIST)
    exec_reload: Any = _directive("ExecReload")
    exec_stop: Any = _directive("ExecStop")
    restart: Any = _directive("Restart")
    restart_sec: Any = _directive("RestartSec")
    timeout_start_sec: Any = _directive("TimeoutStartSec")
    timeout_stop_sec: Any = _directive("TimeoutStopSec")
    success_exit_status: Any = _directive("SuccessExitStatus")
    user: Any = _directive("User")
    group: Any = _directive("Group")
    working_directory: Any = _directive("WorkingDirectory")
    umask: Any = _directive("UMask")
    pid_file: Any = _directive("PIDFile")
    environment_file: Any = _directive("EnvironmentFile")
    kill_mode: Any = _directive("KillMode")
    standard_output: Any = _directive("StandardOutput")
    standard_error: Any = _directive("StandardError")
    nice: Any = _directive("Nice", FieldKind.INTEGER)

    # Resource limits
    limit_cpu: Any = _directive("LimitCPU")
    limit_as: Any = _directive("LimitAS")
    limit_fsize: Any = _directive("LimitFSIZE")
    limit_nofile: Any = _directive("LimitNOFILE", FieldKind.INTEGER)
    limit_nproc: Any = _directive("LimitNPROC", FieldKind.INTEGER)
    limit_stack: Any = _directive("LimitSTACK")
    limit_core: Any = _directive("LimitCORE")
    limit_rtprio: Any = _directive("LimitRTPRIO", FieldKind.INTEGER)
    memory_max: Any = _directive("MemoryMax")
    cpu_quota: Any = _directive("CPUQuota")
    tasks_max: Any = _directive("TasksMax", FieldKind.INTEGER)
    cpu_set: Any = _directive("CPUSet")
    delegate: Any = _directive("Delegate")

    # Sandboxing flags, passed through verbatim
    no_new_privileges: Any = _directive("NoNewPrivileges")
    protect_home: Any = _directive("ProtectHome")
    protect_system: Any = _directive("ProtectSystem")
    private_tmp: Any = _directive("PrivateTmp")
    private_devices: Any = _directive("PrivateDevices")
    protect_kernel_modules: Any = _directive("ProtectKernelModules")
    protect_kernel_tunables: Any = _directive("ProtectKernelTunables")
    protect_control_groups: Any = _directive("ProtectControlGroups")
    memory_deny_write_execute: Any = _directive("MemoryDenyWriteExecute")

    # Scheduling and placement
    cpu_weight: Any = _directive("CPUWeight", FieldKind.INTEGER)
    io_weight: Any = _directive("IOWeight", FieldKind.INTEGER)
    io_weight_device: Any = _directive("IOWeightDevice", FieldKind.STRING_LIST)
    block_io_weight: Any = _directive("BlockIOWeight", FieldKind.INTEGER)
    block_io_weight_device: Any = _directive("BlockIOWeightDevice", FieldKind.STRING_LIST)
    slice: Any = _directive("Slice")
    numa_node: Any = _directive("NUMANode", FieldKind.INTEGER)
    numa_affinity: Any = _directive("NUMAAffinity", FieldKind.INTEGER_LIST)

    extra: Pairs = ()

    @classmethod
    def schema(cls) -> List[Tuple[str, str, FieldKind]]:
        """Return (attribute, directive, kind) for every known directive, in render order."""
        return [
            (f.name, f.metadata["directive"], f.metadata["kind"])
            for f in fields(cls)
            if "directive" in f.metadata
        ]

    def present(self) -> List[Tuple[str, FieldKind, Any]]:
        """Return (directive, kind, value) for the known directives that are set."""
        result = []
        for attribute, directive, kind in self.schema():
            value = getattr(self, attribute)
            if value is not UNSET:
                result.append((directive, kind, value))
        return result

    def to_dict(self) -> dict:
        """Convert to a directive-keyed dictionary, omitting absent directives.

        Returns:
            Dictionary of directive name to value
        """
        result = {directive: value for directive, _, value in self.present()}
        result.update(self.extra)
        return result

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> 'ServiceProperties':
        """Create ServiceProperties from a directive-keyed dictionary.

        Args:
            data: Mapping of directive name to parsed value, or None

        Returns:
            ServiceProperties instance
        """
        if data is None:
            return cls()
        if not isinstance(data, dict):
            raise ValueError(f"Section 'service' must be a mapping, got {type(data).__name__}")

        attributes = {directive: attribute for attribute, directive, _ in cls.schema()}
        known = {}
        extra = []
        for key, value in data.items():
            attribute = attributes.get(key)
            if attribute is None:
                extra.append((key, freeze(value)))
            else:
                known[attribute] = freeze(value)
        return cls(extra=tuple(extra), **known)


@dataclass(frozen=True)
class ServiceDescriptor:
    """Declarative description of one systemd service.

    Attributes:
        name: Service name, also the unit's base filename
        install: [Install] keys in document order
        unit: [Unit] keys in document order
        service: Known and extra [Service] directives
        environment: Environment variables in document order
        source: File the descriptor was loaded from
    """

    name: str
    install: Pairs = ()
    unit: Pairs = ()
    service: ServiceProperties = field(default_factory=ServiceProperties)
    environment: Pairs = ()
    source: Optional[Path] = field(default=None, compare=False)

    def __post_init__(self):
        """Validate the descriptor name after initialization."""
        if not isinstance(self.name, str) or not self.name:
            raise ValueError(f"Service name must be a non-empty string, got {self.name!r}")

        if not UNIT_NAME_PATTERN.match(self.name):
            raise ValueError(f"Invalid service name: {self.name!r}")

    def to_dict(self) -> dict:
        """Convert to dictionary, omitting absent sections.

        Returns:
            Dictionary representation of the descriptor body
        """
        result = {}
        if self.install:
            result["install"] = dict(self.install)
        if self.unit:
            result["unit"] = dict(self.unit)
        service = self.service.to_dict()
        if service:
            result["service"] = service
        if self.environment:
            result["environment"] = dict(self.environment)
        return result

    @classmethod
    def from_dict(cls, name: str, data: dict, source: Optional[Path] = None) -> 'ServiceDescriptor':
        """Create ServiceDescriptor from a parsed descriptor body.

        Args:
            name: Declared service name
            data: Mapping with optional install, unit, service and environment sections
            source: File the body was read from

        Returns:
            ServiceDescriptor instance

        Raises:
            ValueError: If the body or one of its sections is malformed
        """
        if not isinstance(data, dict):
            raise ValueError(f"Descriptor '{name}' must be a mapping, got {type(data).__name__}")

        unknown = [key for key in data if key not in DESCRIPTOR_SECTIONS]
        if unknown:
            raise ValueError(f"Descriptor '{name}' has unknown sections: {', '.join(map(str, unknown))}")

        return cls(
            name=name,
            install=_freeze_section("install", data.get("install")),
            unit=_freeze_section("unit", data.get("unit")),
            service=ServiceProperties.from_dict(data.get("service")),
            environment=_freeze_section("environment", data.get("environment")),
            source=source,
        )


class DeployState(Enum):
    """Stages a descriptor passes through during a run."""

    LOADED = "loaded"
    RENDERED = "rendered"
    DRY_REPORTED = "dry-reported"
    WRITTEN = "written"
    WRITTEN_AND_ACTIVATED = "written-and-activated"


@dataclass
class DeployOutcome:
    """Result of processing one descriptor.

    Attributes:
        name: Descriptor name
        state: Last state reached
        unit_path: Path the unit was (or would be) written to
        error: Error that stopped processing, if any
    """

    name: str
    state: DeployState
    unit_path: Optional[Path] = None
    error: Optional[Exception] = None

    @property
    def failed(self) -> bool:
        return self.error is not None


@dataclass
class RunReport:
    """Outcomes and collected failures of one run.

    ``failures`` holds (name, error) pairs, where name is a descriptor name
    or, for files that failed to load, the file path.
    """

    outcomes: List[DeployOutcome] = field(default_factory=list)
    failures: List[Tuple[str, Exception]] = field(default_factory=list)

    def record(self, outcome: DeployOutcome):
        self.outcomes.append(outcome)
        if outcome.error is not None:
            self.failures.append((outcome.name, outcome.error))

    def add_failure(self, name: str, error: Exception):
        self.failures.append((name, error))

    @property
    def ok(self) -> bool:
        return not self.failures

    def count(self, state: DeployState) -> int:
        return sum(1 for o in self.outcomes if o.state == state and not o.failed)

    def summary(self) -> str:
        """Get a one-line summary of the run.

        Returns:
            Summary string (e.g., '3 processed, 2 written, 1 failed')
        """
        counts: Dict[str, int] = {"processed": len(self.outcomes)}
        for state in (DeployState.DRY_REPORTED, DeployState.WRITTEN, DeployState.WRITTEN_AND_ACTIVATED):
            counts[state.value] = self.count(state)
        counts["failed"] = len(self.failures)
        return ", ".join(f"{value} {key}" for key, value in counts.items())
