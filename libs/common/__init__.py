"""Common utilities shared by the service and its scripts.

Includes:
- ``config``: Pydantic-based configuration from environment variables.
- ``logging``: structured logging setup with structlog.
- ``metrics``: Prometheus metrics helpers.

Import pattern:
- from libs.common.config import DirectoryConfig
- from libs.common.logging import configure_logging
"""
