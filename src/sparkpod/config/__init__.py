"""sparkpod configuration module."""

from .loader import (
    ConfigError,
    ConfigFileNotFoundError,
    ConfigParseError,
    ConfigValidationError,
    generate_example_config_yaml,
    load_job_config,
    save_job_config,
)
from .schema import (
    ImagePullPolicy,
    JavaMainAppResource,
    JobConfig,
    MainAppResource,
    PythonMainAppResource,
    RMainAppResource,
    parse_spark_memory_mib,
)

__all__ = [
    # Config classes
    "JobConfig",
    "MainAppResource",
    "JavaMainAppResource",
    "PythonMainAppResource",
    "RMainAppResource",
    # Enums
    "ImagePullPolicy",
    # Loader functions
    "load_job_config",
    "save_job_config",
    "generate_example_config_yaml",
    # Helpers
    "parse_spark_memory_mib",
    # Exceptions
    "ConfigError",
    "ConfigFileNotFoundError",
    "ConfigParseError",
    "ConfigValidationError",
]
