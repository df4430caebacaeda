"""Driver pod specification builder.

Turns a ``JobConfig`` plus the submission's ``ResolvedIdentity`` into the
driver ``Pod`` and the Spark properties that have to be merged back into the
job configuration. Building is pure: no I/O, no cluster access, and the same
input always yields an equal result.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from sparkpod._constants import (
    BLOCK_MANAGER_PORT_NAME,
    DRIVER_PORT_NAME,
    DRIVER_RESTART_POLICY,
    ENV_DRIVER_BIND_ADDRESS,
    POD_IP_FIELD_PATH,
    PYTHON_RUNNER_CLASS,
    R_RUNNER_CLASS,
    SPARK_CONF_PATH,
    SPARK_INTERNAL_RESOURCE,
    UI_PORT_NAME,
)
from sparkpod.config import (
    ConfigError,
    JobConfig,
    PythonMainAppResource,
    RMainAppResource,
    parse_spark_memory_mib,
)
from sparkpod.k8s import (
    Container,
    ContainerPort,
    EnvVar,
    FieldReference,
    LiteralValue,
    ObjectMeta,
    Pod,
    ResourceRequirements,
    format_cpu,
    format_memory_mib,
)

from .memory import MemoryOverhead, compute_memory_overhead
from .naming import (
    ResolvedIdentity,
    driver_container_name,
    merge_with_reserved,
    reserved_driver_labels,
    resolve_driver_pod_name,
)
from .properties import system_properties

logger = logging.getLogger(__name__)


class DriverSpec(NamedTuple):
    """A built driver pod and its property delta."""

    pod: Pod
    properties: dict[str, str]


def split_pull_secrets(value: str) -> tuple[str, ...]:
    """Split the comma-separated pull secret setting, keeping order and duplicates."""
    return tuple(name.strip() for name in value.split(",") if name.strip())


class DriverPodBuilder:
    """Builds the driver pod for one submission."""

    def __init__(self, config: JobConfig, identity: ResolvedIdentity):
        """Initialize driver pod builder.

        Args:
            config: Validated job configuration
            identity: Resource prefix, app id and optional pod name override
        """
        self.config = config
        self.identity = identity

    def build(self) -> DriverSpec:
        """Build the driver pod and property delta.

        Every value is resolved before any output object is created, so a
        ConfigError leaves nothing half-built.

        Raises:
            ConfigError: On missing image, invalid pod name, CPU limit below
                the request, or invalid memory settings
        """
        cfg = self.config

        image = self._resolve_image()
        pod_name = resolve_driver_pod_name(
            self.identity.driver_pod_name or cfg.driver_pod_name,
            self.identity.resource_name_prefix,
        )
        memory = self._memory_overhead()
        cpu_request, cpu_limit = self._cpu_cores()
        resources = ResourceRequirements(
            requests={
                "cpu": format_cpu(cpu_request),
                "memory": format_memory_mib(memory.total_mib),
            },
            limits={
                "cpu": format_cpu(cpu_limit),
                "memory": format_memory_mib(memory.total_mib),
            },
        )

        container = Container(
            name=driver_container_name(),
            image=image,
            image_pull_policy=cfg.image_pull_policy.value,
            args=self._driver_args(),
            env=self._env_vars(),
            ports=self._ports(),
            resources=resources,
        )

        pod = Pod(
            metadata=ObjectMeta(
                name=pod_name,
                labels=merge_with_reserved(
                    cfg.labels, reserved_driver_labels(self.identity.app_id)
                ),
                annotations=dict(cfg.annotations),
            ),
            container=container,
            restart_policy=DRIVER_RESTART_POLICY,
            image_pull_secrets=split_pull_secrets(cfg.image_pull_secrets),
        )

        properties = system_properties(
            pod_name=pod_name,
            app_id=self.identity.app_id,
            resource_name_prefix=self.identity.resource_name_prefix,
            overhead_factor=memory.factor_property,
            jars=cfg.jars,
            files=cfg.files,
        )

        logger.debug("Built driver pod %s with image %s", pod_name, image)
        return DriverSpec(pod=pod, properties=properties)

    def _resolve_image(self) -> str:
        image = (self.config.image or "").strip()
        if not image:
            raise ConfigError(
                "Driver container image must be set (spark.kubernetes.container.image)"
            )
        return image

    def _memory_overhead(self) -> MemoryOverhead:
        cfg = self.config
        try:
            requested = parse_spark_memory_mib(cfg.driver_memory)
            explicit = (
                parse_spark_memory_mib(cfg.driver_memory_overhead)
                if cfg.driver_memory_overhead is not None
                else None
            )
        except ValueError as e:
            raise ConfigError(str(e))  # noqa: B904
        return compute_memory_overhead(
            requested,
            cfg.main_app_resource,
            factor_override=cfg.memory_overhead_factor,
            explicit_overhead_mib=explicit,
        )

    def _cpu_cores(self) -> tuple[int, int]:
        request = self.config.driver_cores
        limit = self.config.driver_limit_cores
        if limit is None:
            return request, request
        if limit < request:
            raise ConfigError(f"Driver CPU limit ({limit}) is lower than the request ({request})")
        return request, limit

    def _ports(self) -> frozenset[ContainerPort]:
        cfg = self.config
        return frozenset(
            {
                ContainerPort(DRIVER_PORT_NAME, cfg.driver_port),
                ContainerPort(BLOCK_MANAGER_PORT_NAME, cfg.block_manager_port),
                ContainerPort(UI_PORT_NAME, cfg.ui_port),
            }
        )

    def _env_vars(self) -> tuple[EnvVar, ...]:
        env = []
        for name, value in self.config.environment.items():
            if name == ENV_DRIVER_BIND_ADDRESS:
                logger.warning(
                    "Driver environment variable %s is set by sparkpod; ignoring user value",
                    name,
                )
                continue
            env.append(EnvVar(name, LiteralValue(value)))
        env.append(EnvVar(ENV_DRIVER_BIND_ADDRESS, FieldReference(POD_IP_FIELD_PATH)))
        return tuple(env)

    def effective_main_class(self) -> str:
        """Main class the container entrypoint launches.

        Python and R applications run through Spark's runner classes; the
        configured main class is ignored for them.
        """
        resource = self.config.main_app_resource
        if isinstance(resource, PythonMainAppResource):
            return PYTHON_RUNNER_CLASS
        if isinstance(resource, RMainAppResource):
            return R_RUNNER_CLASS
        return self.config.main_class

    def _driver_args(self) -> tuple[str, ...]:
        resource = self.config.main_app_resource
        main_class = self.effective_main_class()

        args = ["driver", "--properties-file", SPARK_CONF_PATH]
        if main_class:
            args += ["--class", main_class]
        if resource.resource:
            args.append(resource.resource)
        elif resource.is_jvm:
            args.append(SPARK_INTERNAL_RESOURCE)
        args.extend(self.config.app_args)
        return tuple(args)


def build_driver_spec(config: JobConfig, identity: ResolvedIdentity) -> DriverSpec:
    """Build the driver pod and property delta for ``config``."""
    return DriverPodBuilder(config, identity).build()
