"""Bulk ingestion of the employee CSV into a collection."""

from .bulk_indexer import BulkIndexer, IngestionResult

__all__ = ["BulkIndexer", "IngestionResult"]
