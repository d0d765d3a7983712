"""keystash — secure credential storage for multi-service CLI tools."""

__version__ = "0.1.0"
