"""Configuration loader for sparkpod."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from .schema import JobConfig


class ConfigError(Exception):
    """Base exception for configuration errors."""

    pass


class ConfigFileNotFoundError(ConfigError):
    """Raised when configuration file is not found."""

    pass


class ConfigParseError(ConfigError):
    """Raised when configuration file cannot be parsed."""

    pass


class ConfigValidationError(ConfigError):
    """Raised when configuration validation fails."""

    def __init__(self, message: str, errors: list[dict[str, Any]] | None = None):
        super().__init__(message)
        self.errors = errors or []


def validation_error(e: ValidationError) -> ConfigValidationError:
    """Convert a pydantic ValidationError into a ConfigValidationError."""
    errors = e.errors()
    error_messages = []
    for err in errors:
        loc = ".".join(str(x) for x in err["loc"])
        msg = err["msg"]
        error_messages.append(f"  - {loc}: {msg}")

    return ConfigValidationError(
        "Configuration validation failed:\n" + "\n".join(error_messages),
        errors=[dict(err) for err in errors],  # type: ignore[call-overload]
    )


def load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file and return as dictionary.

    Args:
        path: Path to YAML file

    Returns:
        Dictionary containing parsed YAML

    Raises:
        ConfigFileNotFoundError: If file doesn't exist
        ConfigParseError: If YAML parsing fails or the document is not a mapping
    """
    if not path.exists():
        raise ConfigFileNotFoundError(f"Configuration file not found: {path}")

    try:
        with open(path) as f:
            content = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise ConfigParseError(f"Failed to parse YAML: {e}")  # noqa: B904

    if not content:
        return {}
    if not isinstance(content, dict):
        raise ConfigParseError(f"Expected a mapping at the top of {path}")
    return content


def load_job_config(path: str | Path) -> JobConfig:
    """Load and validate a job configuration from file.

    The document holds ``JobConfig`` fields at the top level and an optional
    ``conf`` mapping of flat Spark properties. Top-level fields win over
    ``conf`` entries.

    Args:
        path: Path to configuration YAML file

    Returns:
        Validated JobConfig object

    Raises:
        ConfigFileNotFoundError: If file doesn't exist
        ConfigParseError: If YAML parsing fails or a top-level key is not a string
        ConfigValidationError: If validation fails
    """
    path = Path(path)
    data = load_yaml(path)
    bad_keys = [k for k in data if not isinstance(k, str)]
    if bad_keys:
        raise ConfigParseError(f"Top-level keys must be strings, got: {bad_keys}")

    conf = data.pop("conf", None) or {}
    if not isinstance(conf, dict):
        raise ConfigParseError("'conf' must be a mapping of Spark properties")
    # YAML turns unquoted numbers and booleans into native types
    conf = {str(k): str(v) for k, v in conf.items()}

    return JobConfig.from_spark_conf(conf, **data)


def save_job_config(config: JobConfig, path: str | Path) -> None:
    """Save configuration to YAML file.

    Args:
        config: JobConfig object
        path: Path to save YAML file
    """
    path = Path(path)
    data = config.model_dump(mode="json", exclude_defaults=False)

    with open(path, "w") as f:
        yaml.safe_dump(data, f, default_flow_style=False, sort_keys=False, indent=2)


def generate_example_config_yaml() -> str:
    """Generate example job configuration YAML with comments.

    Returns:
        String containing commented YAML configuration
    """
    return """# sparkpod job configuration
# ==========================
# Top-level keys are typed job settings. Anything under 'conf' is read as
# flat Spark properties; top-level keys win when both are set.

app_name: spark-pi

# REQUIRED: driver container image
image: apache/spark:3.5.4
# image_pull_policy: IfNotPresent   # Always | IfNotPresent | Never
# image_pull_secrets: my-secret-1,my-secret-2

main_app_resource:
  type: java                        # java | python | r
  resource: local:///opt/spark/examples/jars/spark-examples.jar
main_class: org.apache.spark.examples.SparkPi
app_args: ["1000"]

# driver_pod_name: spark-pi-driver  # Default: <resource prefix>-driver
# driver_cores: 1
# driver_limit_cores: 2             # Default: same as driver_cores
# driver_memory: 1g
# driver_memory_overhead: 512m      # Explicit overhead, skips the factor
# memory_overhead_factor: 0.2       # Default: 0.1 (java) / 0.4 (python, r)

# labels:
#   team: data
# annotations:
#   owner: data-eng
# environment:
#   LOG_LEVEL: INFO

# jars:
#   - local:///opt/spark/jars/extra.jar
# files:
#   - https://example.com/lookup.csv

# conf:
#   spark.kubernetes.driverEnv.TZ: UTC
#   spark.kubernetes.driver.label.tier: batch
"""
