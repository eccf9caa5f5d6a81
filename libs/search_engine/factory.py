"""Index client factory.

Centralizes creation of the concrete ``IndexClient`` so the service does not
depend on backend details. The client is built once at process start and
handed to whoever needs it.
"""

from typing import Dict, Optional

import structlog

from libs.common.config import BaseConfig
from libs.common.metrics import MetricsCollector
from .base import IndexClient
from .opensearch import OpenSearchIndexClient

logger = structlog.get_logger("search_engine.factory")


def _as_bool(value: Optional[str]) -> bool:
    return (value or "false").lower() == "true"


def create_index_client_from_env(
    env_config: Dict[str, str],
    metrics: Optional[MetricsCollector] = None
) -> IndexClient:
    """Create an index client from a flat environment mapping.

    Parameters
    - env_config: Mapping of environment variable names to values
    - metrics: Optional collector passed to the client
    """
    hosts = [
        h.strip()
        for h in env_config.get("DIRECTORY_OPENSEARCH_HOSTS", "http://localhost:9200").split(",")
        if h.strip()
    ]
    if not hosts:
        raise ValueError("DIRECTORY_OPENSEARCH_HOSTS must name at least one host")

    logger.info("Creating OpenSearch index client", hosts=hosts)
    return OpenSearchIndexClient(
        hosts=hosts,
        username=env_config.get("DIRECTORY_OPENSEARCH_USERNAME"),
        password=env_config.get("DIRECTORY_OPENSEARCH_PASSWORD"),
        verify_certs=_as_bool(env_config.get("DIRECTORY_OPENSEARCH_VERIFY_CERTS")),
        ssl_assert_hostname=_as_bool(env_config.get("DIRECTORY_OPENSEARCH_SSL_ASSERT_HOSTNAME")),
        ssl_show_warn=_as_bool(env_config.get("DIRECTORY_OPENSEARCH_SSL_SHOW_WARN")),
        refresh_on_write=_as_bool(env_config.get("DIRECTORY_INDEX_REFRESH")),
        metrics=metrics,
    )


def create_index_client_from_config(
    config: BaseConfig,
    metrics: Optional[MetricsCollector] = None
) -> IndexClient:
    """Create an index client from typed service configuration."""
    hosts = config.opensearch_hosts
    if not hosts:
        raise ValueError("DIRECTORY_OPENSEARCH_HOSTS must name at least one host")

    logger.info("Creating OpenSearch index client", hosts=hosts)
    return OpenSearchIndexClient(
        hosts=hosts,
        username=config.directory_opensearch_username,
        password=config.directory_opensearch_password,
        verify_certs=config.directory_opensearch_verify_certs,
        ssl_assert_hostname=config.directory_opensearch_ssl_assert_hostname,
        ssl_show_warn=config.directory_opensearch_ssl_show_warn,
        refresh_on_write=config.directory_index_refresh,
        metrics=metrics,
    )
