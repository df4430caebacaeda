"""Pydantic models for sparkpod job configuration.

A ``JobConfig`` is the immutable, validated view of everything the driver
pod builder reads. It can be constructed directly, loaded from YAML (see
``loader.py``) or translated from a flat Spark property map with
``JobConfig.from_spark_conf``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from enum import Enum
from typing import Annotated, Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from sparkpod._constants import (
    DEFAULT_BLOCK_MANAGER_PORT,
    DEFAULT_DRIVER_PORT,
    DEFAULT_UI_PORT,
    KEY_APP_NAME,
    KEY_BLOCK_MANAGER_PORT,
    KEY_CONTAINER_IMAGE,
    KEY_DRIVER_CONTAINER_IMAGE,
    KEY_DRIVER_CORES,
    KEY_DRIVER_LIMIT_CORES,
    KEY_DRIVER_MEMORY,
    KEY_DRIVER_MEMORY_OVERHEAD,
    KEY_DRIVER_POD_NAME,
    KEY_DRIVER_PORT,
    KEY_FILES,
    KEY_IMAGE_PULL_POLICY,
    KEY_IMAGE_PULL_SECRETS,
    KEY_JARS,
    KEY_MEMORY_OVERHEAD_FACTOR,
    KEY_UI_PORT,
    PREFIX_DRIVER_ANNOTATION,
    PREFIX_DRIVER_ENV,
    PREFIX_DRIVER_LABEL,
)

# =============================================================================
# Enums
# =============================================================================


class ImagePullPolicy(str, Enum):
    """Kubernetes image pull policy."""

    ALWAYS = "Always"
    IF_NOT_PRESENT = "IfNotPresent"
    NEVER = "Never"


# =============================================================================
# Main Application Resource
# =============================================================================


class JavaMainAppResource(BaseModel):
    """A JVM application (jar or classes already on the image classpath)."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["java"] = "java"
    resource: str | None = None

    @property
    def is_jvm(self) -> bool:
        return True


class PythonMainAppResource(BaseModel):
    """A PySpark application script."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["python"] = "python"
    resource: str = Field(min_length=1, description="Path or URI of the script")

    @property
    def is_jvm(self) -> bool:
        return False


class RMainAppResource(BaseModel):
    """A SparkR application script."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    type: Literal["r"] = "r"
    resource: str = Field(min_length=1, description="Path or URI of the script")

    @property
    def is_jvm(self) -> bool:
        return False


MainAppResource = Annotated[
    Union[JavaMainAppResource, PythonMainAppResource, RMainAppResource],
    Field(discriminator="type"),
]


# =============================================================================
# Job Configuration
# =============================================================================


class JobConfig(BaseModel):
    """Driver-side job configuration.

    Every key the builder understands is an explicit field. Instances are
    frozen; the builder never writes to them. Invalid input raises
    ConfigValidationError.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    # Application
    app_name: str = "spark"
    main_app_resource: MainAppResource = Field(default_factory=JavaMainAppResource)
    main_class: str = ""
    app_args: tuple[str, ...] = ()

    # Image
    image: str | None = None
    image_pull_policy: ImagePullPolicy = ImagePullPolicy.IF_NOT_PRESENT
    image_pull_secrets: str = Field(
        default="",
        description="Comma-separated list of imagePullSecret names",
    )

    # Driver pod
    driver_pod_name: str | None = Field(
        default=None,
        description="Explicit driver pod name. None = derived from the resource name prefix.",
    )
    driver_cores: int = Field(default=1, gt=0)
    driver_limit_cores: int | None = Field(
        default=None,
        gt=0,
        description="CPU limit in cores. None = same as driver_cores.",
    )
    driver_memory: str = "1g"
    driver_memory_overhead: str | None = Field(
        default=None,
        description="Explicit memory overhead (bare numbers are MiB). Bypasses the factor.",
    )
    memory_overhead_factor: float | None = Field(
        default=None,
        gt=0,
        lt=1,
        description="Override for the overhead factor. None = 0.1 (JVM) or 0.4 (Python/R).",
    )

    # Metadata and environment (insertion order is preserved)
    labels: dict[str, str] = Field(default_factory=dict)
    annotations: dict[str, str] = Field(default_factory=dict)
    environment: dict[str, str] = Field(default_factory=dict)

    # Dependencies
    jars: tuple[str, ...] = ()
    files: tuple[str, ...] = ()

    # Ports
    driver_port: int = Field(default=DEFAULT_DRIVER_PORT, gt=0, lt=65536)
    block_manager_port: int = Field(default=DEFAULT_BLOCK_MANAGER_PORT, gt=0, lt=65536)
    ui_port: int = Field(default=DEFAULT_UI_PORT, gt=0, lt=65536)

    def __init__(self, **data: Any) -> None:
        """Validate fields, raising ConfigValidationError on invalid input."""
        from sparkpod.config.loader import validation_error

        try:
            super().__init__(**data)
        except ValidationError as e:
            raise validation_error(e)  # noqa: B904

    @field_validator("image_pull_secrets", mode="before")
    @classmethod
    def join_pull_secrets(cls, v: Any) -> Any:
        """Accept a YAML list as well as the comma-separated form."""
        if isinstance(v, (list, tuple)):
            return ",".join(str(s) for s in v)
        return v

    @field_validator("jars", "files", mode="before")
    @classmethod
    def split_uri_list(cls, v: Any) -> Any:
        if isinstance(v, str):
            return _split_list(v)
        return v

    @field_validator("driver_memory")
    @classmethod
    def validate_driver_memory(cls, v: str) -> str:
        if parse_spark_memory_mib(v) <= 0:
            raise ValueError(f"Driver memory must be positive: {v}")
        return v

    @field_validator("driver_memory_overhead")
    @classmethod
    def validate_memory_overhead(cls, v: str | None) -> str | None:
        if v is not None and parse_spark_memory_mib(v) <= 0:
            raise ValueError(f"Driver memory overhead must be positive: {v}")
        return v

    @classmethod
    def from_spark_conf(cls, conf: Mapping[str, str], **fields: Any) -> JobConfig:
        """Build a JobConfig from flat Spark properties.

        Keyword ``fields`` take precedence over values found in ``conf``.
        Keys the builder does not use are ignored.

        Raises:
            ConfigValidationError: If the resulting configuration is invalid
        """
        from sparkpod.config.loader import validation_error

        data: dict[str, Any] = {}
        labels: dict[str, str] = {}
        annotations: dict[str, str] = {}
        environment: dict[str, str] = {}

        for key, value in conf.items():
            if key in _SPARK_KEY_FIELDS:
                data[_SPARK_KEY_FIELDS[key]] = value
            elif key.startswith(PREFIX_DRIVER_LABEL):
                labels[key[len(PREFIX_DRIVER_LABEL) :]] = value
            elif key.startswith(PREFIX_DRIVER_ANNOTATION):
                annotations[key[len(PREFIX_DRIVER_ANNOTATION) :]] = value
            elif key.startswith(PREFIX_DRIVER_ENV):
                environment[key[len(PREFIX_DRIVER_ENV) :]] = value

        # Driver-specific image wins over the shared container image
        image = conf.get(KEY_DRIVER_CONTAINER_IMAGE) or conf.get(KEY_CONTAINER_IMAGE)
        if image:
            data["image"] = image
        if labels:
            data["labels"] = labels
        if annotations:
            data["annotations"] = annotations
        if environment:
            data["environment"] = environment

        data.update(fields)

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise validation_error(e)  # noqa: B904

    def to_spark_conf(self) -> dict[str, str]:
        """Render the configuration back to flat Spark properties."""
        conf = {
            KEY_APP_NAME: self.app_name,
            KEY_DRIVER_CORES: str(self.driver_cores),
            KEY_DRIVER_MEMORY: self.driver_memory,
            KEY_IMAGE_PULL_POLICY: self.image_pull_policy.value,
            KEY_DRIVER_PORT: str(self.driver_port),
            KEY_BLOCK_MANAGER_PORT: str(self.block_manager_port),
            KEY_UI_PORT: str(self.ui_port),
        }
        optional = {
            KEY_CONTAINER_IMAGE: self.image,
            KEY_IMAGE_PULL_SECRETS: self.image_pull_secrets or None,
            KEY_DRIVER_POD_NAME: self.driver_pod_name,
            KEY_DRIVER_LIMIT_CORES: self.driver_limit_cores,
            KEY_DRIVER_MEMORY_OVERHEAD: self.driver_memory_overhead,
            KEY_MEMORY_OVERHEAD_FACTOR: self.memory_overhead_factor,
            KEY_JARS: ",".join(self.jars) or None,
            KEY_FILES: ",".join(self.files) or None,
        }
        conf.update({key: str(value) for key, value in optional.items() if value is not None})
        conf.update({PREFIX_DRIVER_LABEL + k: v for k, v in self.labels.items()})
        conf.update({PREFIX_DRIVER_ANNOTATION + k: v for k, v in self.annotations.items()})
        conf.update({PREFIX_DRIVER_ENV + k: v for k, v in self.environment.items()})
        return conf


# Flat Spark keys that map one-to-one onto JobConfig fields
_SPARK_KEY_FIELDS: dict[str, str] = {
    KEY_APP_NAME: "app_name",
    KEY_DRIVER_POD_NAME: "driver_pod_name",
    KEY_DRIVER_CORES: "driver_cores",
    KEY_DRIVER_LIMIT_CORES: "driver_limit_cores",
    KEY_DRIVER_MEMORY: "driver_memory",
    KEY_DRIVER_MEMORY_OVERHEAD: "driver_memory_overhead",
    KEY_MEMORY_OVERHEAD_FACTOR: "memory_overhead_factor",
    KEY_IMAGE_PULL_POLICY: "image_pull_policy",
    KEY_IMAGE_PULL_SECRETS: "image_pull_secrets",
    KEY_JARS: "jars",
    KEY_FILES: "files",
    KEY_DRIVER_PORT: "driver_port",
    KEY_BLOCK_MANAGER_PORT: "block_manager_port",
    KEY_UI_PORT: "ui_port",
}


# =============================================================================
# Config Validation Helpers
# =============================================================================


def _split_list(value: str) -> tuple[str, ...]:
    """Split a comma-separated Spark list, dropping blank entries."""
    return tuple(item.strip() for item in value.split(",") if item.strip())


_SPARK_MEMORY_RE = re.compile(r"^(\d+)\s*(?:([kmgtp])(?:ib|i|b)?)?$")

# Size of one unit in KiB
_SPARK_MEMORY_KIB = {
    "k": 1,
    "m": 1024,
    "g": 1024**2,
    "t": 1024**3,
    "p": 1024**4,
}


def parse_spark_memory_mib(memory_str: str) -> int:
    """Parse a Spark memory string to whole MiB.

    Supports k, m, g, t, p with an optional ``b``, ``i`` or ``ib`` suffix
    (case-insensitive), so ``456Mi`` parses as well as ``456m``.
    A bare number is MiB, as it is for ``spark.driver.memory``.
    Kibibyte values are truncated to whole MiB.

    Examples:
        >>> parse_spark_memory_mib("4g")
        4096
        >>> parse_spark_memory_mib("256M")
        256
        >>> parse_spark_memory_mib("200")
        200
    """
    match = _SPARK_MEMORY_RE.match(memory_str.lower().strip())
    if not match:
        raise ValueError(f"Invalid memory format: {memory_str}")

    value = int(match.group(1))
    unit = match.group(2) or "m"
    return value * _SPARK_MEMORY_KIB[unit] // 1024
