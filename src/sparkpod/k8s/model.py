"""Pod and container specification model.

These dataclasses hold the semantic fields of a driver pod. ``to_k8s``
renders them into ``kubernetes.client`` models; wire serialization is left
to the client library.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Union

from kubernetes import client


def _frozen_map(value: Mapping[str, str]) -> Mapping[str, str]:
    return MappingProxyType(dict(value))


def _map_hash(value: Mapping[str, str]) -> int:
    return hash(frozenset(value.items()))


@dataclass(frozen=True)
class LiteralValue:
    """Environment value known at build time."""

    value: str


@dataclass(frozen=True)
class FieldReference:
    """Environment value Kubernetes fills in from the pod's own fields."""

    field_path: str
    api_version: str = "v1"


EnvVarSource = Union[LiteralValue, FieldReference]


@dataclass(frozen=True)
class EnvVar:
    """Container environment variable."""

    name: str
    source: EnvVarSource

    @property
    def value(self) -> str | None:
        """Literal value, or None for field references."""
        return self.source.value if isinstance(self.source, LiteralValue) else None

    def to_k8s(self) -> client.V1EnvVar:
        if isinstance(self.source, FieldReference):
            return client.V1EnvVar(
                name=self.name,
                value_from=client.V1EnvVarSource(
                    field_ref=client.V1ObjectFieldSelector(
                        api_version=self.source.api_version,
                        field_path=self.source.field_path,
                    )
                ),
            )
        return client.V1EnvVar(name=self.name, value=self.source.value)


@dataclass(frozen=True)
class ContainerPort:
    """Named container port."""

    name: str
    container_port: int
    protocol: str = "TCP"

    def to_k8s(self) -> client.V1ContainerPort:
        return client.V1ContainerPort(
            name=self.name,
            container_port=self.container_port,
            protocol=self.protocol,
        )


@dataclass(frozen=True)
class ResourceRequirements:
    """Rendered resource requests and limits (quantity strings)."""

    requests: Mapping[str, str] = field(default_factory=dict)
    limits: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "requests", _frozen_map(self.requests))
        object.__setattr__(self, "limits", _frozen_map(self.limits))

    def __hash__(self) -> int:
        return hash((_map_hash(self.requests), _map_hash(self.limits)))

    def to_k8s(self) -> client.V1ResourceRequirements:
        return client.V1ResourceRequirements(
            requests=dict(self.requests),
            limits=dict(self.limits),
        )


@dataclass(frozen=True)
class Container:
    """Single container specification.

    ``env`` keeps insertion order and has unique names. ``ports`` is a set:
    two containers with the same ports in a different order are equal.
    """

    name: str
    image: str
    image_pull_policy: str
    args: tuple[str, ...] = ()
    env: tuple[EnvVar, ...] = ()
    ports: frozenset[ContainerPort] = frozenset()
    resources: ResourceRequirements = field(default_factory=ResourceRequirements)

    def __post_init__(self) -> None:
        names = [e.name for e in self.env]
        if len(names) != len(set(names)):
            raise ValueError(f"Duplicate environment variable names in {names}")
        port_names = [p.name for p in self.ports]
        if len(port_names) != len(set(port_names)):
            raise ValueError(f"Duplicate port names in {sorted(port_names)}")

    def env_var(self, name: str) -> EnvVar | None:
        """Look up an environment variable by name."""
        return next((e for e in self.env if e.name == name), None)

    def to_k8s(self) -> client.V1Container:
        return client.V1Container(
            name=self.name,
            image=self.image,
            image_pull_policy=self.image_pull_policy,
            args=list(self.args),
            env=[e.to_k8s() for e in self.env],
            ports=[p.to_k8s() for p in sorted(self.ports, key=lambda p: p.container_port)],
            resources=self.resources.to_k8s(),
        )


@dataclass(frozen=True)
class ObjectMeta:
    """Pod metadata."""

    name: str
    labels: Mapping[str, str] = field(default_factory=dict)
    annotations: Mapping[str, str] = field(default_factory=dict)

    def __post_init__(self) -> None:
        object.__setattr__(self, "labels", _frozen_map(self.labels))
        object.__setattr__(self, "annotations", _frozen_map(self.annotations))

    def __hash__(self) -> int:
        return hash((self.name, _map_hash(self.labels), _map_hash(self.annotations)))

    def to_k8s(self) -> client.V1ObjectMeta:
        return client.V1ObjectMeta(
            name=self.name,
            labels=dict(self.labels),
            annotations=dict(self.annotations),
        )


@dataclass(frozen=True)
class Pod:
    """Driver pod: metadata, one container, restart policy and pull secrets."""

    metadata: ObjectMeta
    container: Container
    restart_policy: str
    image_pull_secrets: tuple[str, ...] = ()

    def to_k8s(self) -> client.V1Pod:
        return client.V1Pod(
            api_version="v1",
            kind="Pod",
            metadata=self.metadata.to_k8s(),
            spec=client.V1PodSpec(
                containers=[self.container.to_k8s()],
                restart_policy=self.restart_policy,
                image_pull_secrets=[
                    client.V1LocalObjectReference(name=name) for name in self.image_pull_secrets
                ],
            ),
        )

    def to_dict(self) -> dict[str, Any]:
        """Render to the camelCase dict the Kubernetes API accepts."""
        return client.ApiClient().sanitize_for_serialization(self.to_k8s())
