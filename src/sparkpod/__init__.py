"""sparkpod - Spark driver pod specification builder for Kubernetes."""

__version__ = "0.1.0"
