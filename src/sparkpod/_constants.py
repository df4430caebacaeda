"""Shared constants for sparkpod."""

# Driver container and pod naming
DRIVER_CONTAINER_NAME = "spark-kubernetes-driver"
DRIVER_POD_NAME_SUFFIX = "-driver"
# Pod names double as the pod hostname, so they must fit a DNS-1123 label
MAX_POD_NAME_LENGTH = 63

# Well-known driver ports
DRIVER_PORT_NAME = "driver-rpc-port"
BLOCK_MANAGER_PORT_NAME = "blockmanager"
UI_PORT_NAME = "spark-ui"
DEFAULT_DRIVER_PORT = 7078
DEFAULT_BLOCK_MANAGER_PORT = 7079
DEFAULT_UI_PORT = 4040

# Environment variable resolved by Kubernetes to the pod IP at schedule time
ENV_DRIVER_BIND_ADDRESS = "SPARK_DRIVER_BIND_ADDRESS"
POD_IP_FIELD_PATH = "status.podIP"

# Restart policy for driver pods (never restarted in place)
DRIVER_RESTART_POLICY = "Never"

# Memory overhead policy
MEMORY_OVERHEAD_MIN_MIB = 384
JVM_MEMORY_OVERHEAD_FACTOR = 0.1
NON_JVM_MEMORY_OVERHEAD_FACTOR = 0.4

# Entrypoint
SPARK_CONF_PATH = "/opt/spark/conf/spark.properties"
SPARK_INTERNAL_RESOURCE = "spark-internal"
PYTHON_RUNNER_CLASS = "org.apache.spark.deploy.PythonRunner"
R_RUNNER_CLASS = "org.apache.spark.deploy.RRunner"

# Reserved pod label keys (value filled in per build)
SPARK_APP_ID_LABEL = "spark-app-selector"
SPARK_ROLE_LABEL = "spark-role"
SPARK_DRIVER_ROLE = "driver"

# Scheme marking a dependency already present inside the container image
LOCAL_SCHEME = "local"

# Spark property keys read from / written back to the job configuration
KEY_APP_NAME = "spark.app.name"
KEY_APP_ID = "spark.app.id"
KEY_DRIVER_POD_NAME = "spark.kubernetes.driver.pod.name"
KEY_EXECUTOR_POD_NAME_PREFIX = "spark.kubernetes.executor.podNamePrefix"
KEY_SUBMIT_IN_DRIVER = "spark.kubernetes.submitInDriver"
KEY_MEMORY_OVERHEAD_FACTOR = "spark.kubernetes.memoryOverheadFactor"
KEY_DRIVER_CORES = "spark.driver.cores"
KEY_DRIVER_LIMIT_CORES = "spark.kubernetes.driver.limit.cores"
KEY_DRIVER_MEMORY = "spark.driver.memory"
KEY_DRIVER_MEMORY_OVERHEAD = "spark.driver.memoryOverhead"
KEY_CONTAINER_IMAGE = "spark.kubernetes.container.image"
KEY_DRIVER_CONTAINER_IMAGE = "spark.kubernetes.driver.container.image"
KEY_IMAGE_PULL_POLICY = "spark.kubernetes.container.image.pullPolicy"
KEY_IMAGE_PULL_SECRETS = "spark.kubernetes.container.image.pullSecrets"
KEY_JARS = "spark.jars"
KEY_FILES = "spark.files"
KEY_DRIVER_PORT = "spark.driver.port"
KEY_BLOCK_MANAGER_PORT = "spark.driver.blockManager.port"
KEY_UI_PORT = "spark.ui.port"
PREFIX_DRIVER_LABEL = "spark.kubernetes.driver.label."
PREFIX_DRIVER_ANNOTATION = "spark.kubernetes.driver.annotation."
PREFIX_DRIVER_ENV = "spark.kubernetes.driverEnv."
