"""Data models for service descriptors and deployment results."""

from .service import (
    UNSET,
    DeployOutcome,
    DeployState,
    FieldKind,
    RunReport,
    ServiceDescriptor,
    ServiceProperties,
)

__all__ = [
    "UNSET",
    "DeployOutcome",
    "DeployState",
    "FieldKind",
    "RunReport",
    "ServiceDescriptor",
    "ServiceProperties",
]
