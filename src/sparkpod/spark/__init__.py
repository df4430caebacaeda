"""Spark driver pod building for sparkpod.

Memory overhead policy, naming and label policy, the pod builder and the
property delta it produces.
"""

from .driver import DriverPodBuilder, DriverSpec, build_driver_spec, split_pull_secrets
from .memory import MemoryOverhead, compute_memory_overhead, default_overhead_factor
from .naming import (
    ResolvedIdentity,
    default_driver_pod_name,
    merge_with_reserved,
    reserved_driver_labels,
    resolve_driver_pod_name,
)
from .properties import (
    escape_property,
    merge_properties,
    render_properties_file,
    resolve_file_uri,
    system_properties,
)

__all__ = [
    # Builder
    "DriverPodBuilder",
    "DriverSpec",
    "build_driver_spec",
    "split_pull_secrets",
    # Memory
    "MemoryOverhead",
    "compute_memory_overhead",
    "default_overhead_factor",
    # Naming
    "ResolvedIdentity",
    "default_driver_pod_name",
    "resolve_driver_pod_name",
    "reserved_driver_labels",
    "merge_with_reserved",
    # Properties
    "system_properties",
    "resolve_file_uri",
    "merge_properties",
    "render_properties_file",
    "escape_property",
]
