"""OpenSearch index client implementation."""

from typing import Any, Dict, List, Optional

import structlog
from opensearchpy import AsyncOpenSearch, exceptions

from libs.common.metrics import MetricsCollector
from .base import (
    AggregationBucket,
    IndexClient,
    SearchEngineConnectionError,
    SearchEngineError,
    SearchEngineNotFoundError,
    SearchEngineRequestError,
)

logger = structlog.get_logger("search_engine.opensearch")

# Name of the terms aggregation inside facet queries
FIELD_AGGREGATION = "field_count"


def translate_error(error: Exception) -> SearchEngineError:
    """Map an ``opensearchpy`` exception onto the ``SearchEngineError`` tree."""
    engine_error_type = type(error).__name__

    if isinstance(error, exceptions.ConnectionError):
        return SearchEngineConnectionError(
            str(error),
            status_code=error.status_code,
            error=error.error,
            info=error.info,
            engine_error_type=engine_error_type,
        )
    if isinstance(error, exceptions.NotFoundError):
        return SearchEngineNotFoundError(
            str(error),
            status_code=error.status_code,
            error=error.error,
            info=error.info,
            engine_error_type=engine_error_type,
        )
    if isinstance(error, exceptions.TransportError):
        return SearchEngineRequestError(
            str(error),
            status_code=error.status_code,
            error=error.error,
            info=error.info,
            engine_error_type=engine_error_type,
        )
    return SearchEngineError(str(error), engine_error_type=engine_error_type)


class OpenSearchIndexClient(IndexClient):
    """OpenSearch-backed ``IndexClient`` using the asyncio client."""

    def __init__(
        self,
        hosts: List[str],
        username: Optional[str] = None,
        password: Optional[str] = None,
        verify_certs: bool = False,
        ssl_assert_hostname: bool = False,
        ssl_show_warn: bool = False,
        refresh_on_write: bool = False,
        metrics: Optional[MetricsCollector] = None,
        client: Optional[AsyncOpenSearch] = None,
    ):
        """Initialize the OpenSearch index client.

        Args:
            hosts: List of OpenSearch host URLs
            username: OpenSearch username
            password: OpenSearch password
            verify_certs: Whether to verify SSL certificates
            ssl_assert_hostname: Whether to assert hostname
            ssl_show_warn: Whether to show SSL warnings
            refresh_on_write: Wait for a refresh after each indexed document
            metrics: Optional collector recording each engine call
            client: Pre-built ``AsyncOpenSearch`` (tests inject a mock here)
        """
        if not hosts:
            raise ValueError("OpenSearch requires at least one host")

        self.hosts = hosts
        self.refresh_on_write = refresh_on_write
        self.metrics = metrics

        self.client = client or AsyncOpenSearch(
            hosts=hosts,
            http_auth=(username, password) if username and password else None,
            verify_certs=verify_certs,
            ssl_assert_hostname=ssl_assert_hostname,
            ssl_show_warn=ssl_show_warn,
            use_ssl=True if hosts[0].startswith('https') else False,
        )

    def _record(self, operation: str, outcome: str) -> None:
        if self.metrics is not None:
            self.metrics.record_engine_operation(operation, outcome)

    async def create_collection(self, name: str) -> Dict[str, Any]:
        """Create an index with engine defaults (no explicit mapping)."""
        try:
            response = await self.client.indices.create(index=name)
        except exceptions.OpenSearchException as e:
            self._record("create_collection", "error")
            logger.error("Failed to create collection", collection=name, error=str(e))
            raise translate_error(e) from e

        self._record("create_collection", "success")
        logger.info("Collection created", collection=name)
        return response

    async def index_document(self, collection: str, document: Dict[str, Any]) -> str:
        params: Dict[str, Any] = {}
        if self.refresh_on_write:
            params["refresh"] = "wait_for"

        try:
            response = await self.client.index(index=collection, body=document, **params)
        except exceptions.OpenSearchException as e:
            self._record("index_document", "error")
            logger.error("Failed to index document", collection=collection, error=str(e))
            raise translate_error(e) from e

        self._record("index_document", "success")
        document_id = response["_id"]
        logger.debug("Document indexed", collection=collection, document_id=document_id)
        return document_id

    async def search_by_field(
        self,
        collection: str,
        field: str,
        value: str
    ) -> List[Dict[str, Any]]:
        query = {
            "query": {
                "match": {field: value}
            }
        }

        try:
            response = await self.client.search(index=collection, body=query)
        except exceptions.OpenSearchException as e:
            self._record("search", "error")
            logger.error(
                "Search by field failed",
                collection=collection,
                field=field,
                error=str(e)
            )
            raise translate_error(e) from e

        self._record("search", "success")
        hits = response["hits"]["hits"]
        logger.info(
            "Search by field completed",
            collection=collection,
            field=field,
            results_count=len(hits)
        )
        return hits

    async def count(self, collection: str) -> int:
        try:
            response = await self.client.count(index=collection)
        except exceptions.OpenSearchException as e:
            self._record("count", "error")
            logger.error("Count failed", collection=collection, error=str(e))
            raise translate_error(e) from e

        self._record("count", "success")
        return int(response["count"])

    async def delete_document(self, collection: str, document_id: str) -> None:
        """Delete a document by id.

        The client raises ``NotFoundError`` for a 404; a ``not_found`` result
        that slips through is treated the same way.
        """
        try:
            response = await self.client.delete(index=collection, id=document_id)
        except exceptions.OpenSearchException as e:
            self._record("delete_document", "error")
            logger.error(
                "Failed to delete document",
                collection=collection,
                document_id=document_id,
                error=str(e)
            )
            raise translate_error(e) from e

        if response.get("result") == "not_found":
            self._record("delete_document", "error")
            logger.warning("Document not found", collection=collection, document_id=document_id)
            raise SearchEngineNotFoundError(
                f"Document {document_id} not found in {collection}",
                status_code=404,
                error="not_found",
                info=response,
                engine_error_type="NotFoundError",
            )

        self._record("delete_document", "success")
        logger.info("Document deleted", collection=collection, document_id=document_id)

    async def aggregate_by_field(self, collection: str, field: str) -> List[AggregationBucket]:
        query = {
            "size": 0,
            "aggs": {
                FIELD_AGGREGATION: {
                    "terms": {"field": f"{field}.keyword"}
                }
            }
        }

        try:
            response = await self.client.search(index=collection, body=query)
        except exceptions.OpenSearchException as e:
            self._record("aggregate", "error")
            logger.error(
                "Terms aggregation failed",
                collection=collection,
                field=field,
                error=str(e)
            )
            raise translate_error(e) from e

        self._record("aggregate", "success")
        buckets = response["aggregations"][FIELD_AGGREGATION]["buckets"]
        return [AggregationBucket(key=b["key"], count=b["doc_count"]) for b in buckets]

    async def health_check(self) -> bool:
        """Ping the cluster; any failure counts as unhealthy."""
        try:
            return bool(await self.client.ping())
        except Exception as e:
            logger.warning("OpenSearch health check failed", error=str(e))
            return False

    async def close(self) -> None:
        """Close the OpenSearch client connection."""
        await self.client.close()
        logger.info("OpenSearch client connection closed")
