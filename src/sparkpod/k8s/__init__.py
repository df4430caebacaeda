"""Kubernetes pod model and quantity rendering for sparkpod."""

from .model import (
    Container,
    ContainerPort,
    EnvVar,
    EnvVarSource,
    FieldReference,
    LiteralValue,
    ObjectMeta,
    Pod,
    ResourceRequirements,
)
from .quantity import Quantity, format_cpu, format_memory_mib

__all__ = [
    # Model
    "Pod",
    "ObjectMeta",
    "Container",
    "ContainerPort",
    "EnvVar",
    "EnvVarSource",
    "LiteralValue",
    "FieldReference",
    "ResourceRequirements",
    # Quantities
    "Quantity",
    "format_cpu",
    "format_memory_mib",
]
