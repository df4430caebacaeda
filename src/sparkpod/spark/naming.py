"""Resource naming and label policy for driver pods."""

from __future__ import annotations

import logging
import re
import uuid
from collections.abc import Mapping
from dataclasses import dataclass

from sparkpod._constants import (
    DRIVER_CONTAINER_NAME,
    DRIVER_POD_NAME_SUFFIX,
    MAX_POD_NAME_LENGTH,
    SPARK_APP_ID_LABEL,
    SPARK_DRIVER_ROLE,
    SPARK_ROLE_LABEL,
)
from sparkpod.config import ConfigError

logger = logging.getLogger(__name__)

# DNS-1123 subdomain, which is what Kubernetes accepts for pod names
_DNS_SUBDOMAIN_RE = re.compile(r"^[a-z0-9]([-a-z0-9]*[a-z0-9])?(\.[a-z0-9]([-a-z0-9]*[a-z0-9])?)*$")
_MAX_SUBDOMAIN_LENGTH = 253
_INVALID_NAME_CHARS_RE = re.compile(r"[^a-z0-9-]+")


@dataclass(frozen=True)
class ResolvedIdentity:
    """Identifiers resolved once per submission.

    Attributes:
        resource_name_prefix: Prefix shared by every resource of the app
        app_id: Spark application id
        driver_pod_name: Explicit pod name, if the submitter fixed one
    """

    resource_name_prefix: str
    app_id: str
    driver_pod_name: str | None = None

    @classmethod
    def for_app(
        cls,
        app_name: str,
        launch_time_ms: int,
        app_id: str | None = None,
        driver_pod_name: str | None = None,
    ) -> ResolvedIdentity:
        """Derive identifiers the way spark-submit does.

        The prefix is ``<app name>-<launch time>`` with whitespace and dots
        replaced by hyphens. A random ``spark-<hex>`` id is generated when
        ``app_id`` is not given.
        """
        prefix = f"{app_name}-{launch_time_ms}".strip().lower()
        prefix = re.sub(r"\s+", "-", prefix).replace(".", "-")
        return cls(
            resource_name_prefix=prefix,
            app_id=app_id or f"spark-{uuid.uuid4().hex}",
            driver_pod_name=driver_pod_name,
        )


def driver_container_name() -> str:
    return DRIVER_CONTAINER_NAME


def default_driver_pod_name(resource_name_prefix: str) -> str:
    """Derive ``<prefix>-driver`` as a legal pod name.

    The prefix is lower-cased, characters outside ``[a-z0-9-]`` become
    hyphens, and it is shortened so the full name fits 63 characters with
    the ``-driver`` suffix intact.
    """
    prefix = _INVALID_NAME_CHARS_RE.sub("-", resource_name_prefix.lower())
    prefix = re.sub(r"-{2,}", "-", prefix).strip("-")
    prefix = prefix[: MAX_POD_NAME_LENGTH - len(DRIVER_POD_NAME_SUFFIX)].rstrip("-")
    if not prefix:
        raise ConfigError(
            f"Cannot derive a driver pod name from resource prefix {resource_name_prefix!r}"
        )
    return f"{prefix}{DRIVER_POD_NAME_SUFFIX}"


def resolve_driver_pod_name(override: str | None, resource_name_prefix: str) -> str:
    """Return the explicit pod name if set, otherwise the derived one.

    Raises:
        ConfigError: If the explicit name is not a valid Kubernetes pod name
    """
    if override:
        if len(override) > _MAX_SUBDOMAIN_LENGTH or not _DNS_SUBDOMAIN_RE.match(override):
            raise ConfigError(f"Invalid driver pod name: {override!r}")
        logger.info("Using driver pod name override: %s", override)
        return override
    return default_driver_pod_name(resource_name_prefix)


def reserved_driver_labels(app_id: str) -> dict[str, str]:
    """Labels the driver pod owns; user values for these keys are replaced."""
    return {
        SPARK_APP_ID_LABEL: app_id,
        SPARK_ROLE_LABEL: SPARK_DRIVER_ROLE,
    }


def merge_with_reserved(
    user: Mapping[str, str],
    reserved: Mapping[str, str],
    kind: str = "label",
) -> dict[str, str]:
    """Copy ``user`` verbatim, replacing values of colliding reserved keys.

    Reserved keys the user did not set are not added. A collision is not an
    error; the reserved value wins and a warning is logged.
    """
    merged = dict(user)
    for key, value in user.items():
        if key in reserved and reserved[key] != value:
            logger.warning(
                "Driver %s '%s' is reserved; replacing '%s' with '%s'",
                kind,
                key,
                value,
                reserved[key],
            )
            merged[key] = reserved[key]
    return merged
