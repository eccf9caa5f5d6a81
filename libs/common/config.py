"""Configuration management for the employee directory service.

This module centralizes environment-driven configuration. It builds on
``pydantic_settings.BaseSettings`` so configuration can be provided via
environment variables, ``.env`` files, or defaults.

Highlights
- Strongly-typed settings with sensible defaults
- One place to discover the environment variables the service reads
- A small service-specific subclass keeps ingestion knobs apart

Usage
- Inject the config in your service entrypoint: ``config = DirectoryConfig()``
- Or select dynamically: ``config = get_config("directory")``
"""

from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration shared by the service and its scripts.

    Field names double as environment variable names (case-insensitive).
    Defaults keep local development convenient while still being explicit.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # Environment
    directory_env: str = Field(default="local")

    # Logging
    directory_log_level: str = Field(default="INFO")
    directory_log_format: str = Field(default="json")

    # OpenSearch
    directory_opensearch_hosts: str = Field(default="http://localhost:9200")
    directory_opensearch_username: Optional[str] = Field(default=None)
    directory_opensearch_password: Optional[str] = Field(default=None)
    directory_opensearch_verify_certs: bool = Field(default=False)
    directory_opensearch_ssl_assert_hostname: bool = Field(default=False)
    directory_opensearch_ssl_show_warn: bool = Field(default=False)
    directory_index_refresh: bool = Field(default=False)

    @property
    def opensearch_hosts(self) -> List[str]:
        """Host URLs parsed from the comma-separated setting."""
        return [h.strip() for h in self.directory_opensearch_hosts.split(",") if h.strip()]


class DirectoryConfig(BaseConfig):
    """Configuration for the directory HTTP service.

    Adds the listening socket, the fixed ingestion source and the facet field
    used by the department facets route.
    """

    port: int = Field(default=5000)
    directory_host: str = Field(default="0.0.0.0")
    directory_cors_origins: str = Field(default="*")

    # Ingestion
    directory_ingest_csv_path: str = Field(default="./employees.csv")
    directory_ingest_delimiter: str = Field(default=",")
    directory_ingest_concurrency: int = Field(default=1, ge=1)

    # Facets
    directory_facet_field: str = Field(default="Department")

    @property
    def cors_origins(self) -> List[str]:
        return [o.strip() for o in self.directory_cors_origins.split(",") if o.strip()]


def get_config(service_name: str) -> BaseConfig:
    """Get configuration for a specific service.

    Parameters
    - service_name: ``directory`` for the HTTP service; anything else yields
      the shared ``BaseConfig``.
    """
    config_map = {
        "directory": DirectoryConfig,
    }

    # Default to ``BaseConfig`` to avoid surprising crashes for unknown names.
    config_class = config_map.get(service_name, BaseConfig)
    return config_class()
