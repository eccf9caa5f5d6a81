"""Bulk CSV ingestion into a collection.

Reads the whole source file, drops the excluded column from every record and
indexes the records in file order. With the default concurrency of one,
exactly one write is in flight per ingestion; the first failing write aborts
the rest and documents already written stay in the index.
"""

import asyncio
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Union

import structlog

from libs.common.metrics import MetricsCollector
from libs.records.projector import project
from libs.records.reader import Record, read_records
from libs.search_engine.base import IndexClient

logger = structlog.get_logger("directory_service.ingestion")


@dataclass
class IngestionResult:
    """Outcome of a completed ingestion."""

    collection: str
    excluded_column: str
    document_ids: List[str] = field(default_factory=list)

    @property
    def indexed(self) -> int:
        return len(self.document_ids)


class BulkIndexer:
    """Ingests the configured CSV file into a collection.

    Parameters
    - index_client: Engine adapter receiving one ``index_document`` per row
    - csv_path: Fixed location of the source file
    - delimiter: CSV field separator
    - concurrency: Writes in flight at once; ``1`` keeps rows strictly sequential
    - metrics: Optional collector counting indexed documents
    """

    def __init__(
        self,
        index_client: IndexClient,
        csv_path: Union[str, Path],
        delimiter: str = ",",
        concurrency: int = 1,
        metrics: Optional[MetricsCollector] = None,
    ):
        if concurrency < 1:
            raise ValueError("concurrency must be at least 1")
        self.index_client = index_client
        self.csv_path = Path(csv_path)
        self.delimiter = delimiter
        self.concurrency = concurrency
        self.metrics = metrics

    def _load(self) -> List[Record]:
        return list(read_records(self.csv_path, delimiter=self.delimiter))

    async def load_records(self) -> List[Record]:
        """Read every record off the event loop."""
        return await asyncio.to_thread(self._load)

    async def ingest(self, collection: str, exclude_column: str) -> IngestionResult:
        """Index every row of the source file into ``collection``.

        Raises ``RecordSourceError`` if the file cannot be read and
        ``SearchEngineError`` for the first failing write.
        """
        start_time = time.time()
        records = await self.load_records()
        result = IngestionResult(collection=collection, excluded_column=exclude_column)

        logger.info(
            "Starting ingestion",
            collection=collection,
            excluded_column=exclude_column,
            rows=len(records),
            concurrency=self.concurrency
        )

        documents = [project(record, exclude_column) for record in records]
        try:
            if self.concurrency == 1:
                for document in documents:
                    result.document_ids.append(
                        await self.index_client.index_document(collection, document)
                    )
            else:
                for start in range(0, len(documents), self.concurrency):
                    window = documents[start:start + self.concurrency]
                    outcomes = await asyncio.gather(
                        *(self.index_client.index_document(collection, d) for d in window),
                        return_exceptions=True
                    )
                    # Siblings of a failed write are persisted; keep their ids
                    result.document_ids.extend(o for o in outcomes if isinstance(o, str))
                    for outcome in outcomes:
                        if isinstance(outcome, BaseException):
                            raise outcome
        except Exception as e:
            logger.error(
                "Ingestion aborted",
                collection=collection,
                indexed=result.indexed,
                rows=len(records),
                error=str(e)
            )
            raise
        finally:
            if self.metrics is not None:
                self.metrics.record_ingested_documents(result.indexed)

        logger.info(
            "Ingestion completed",
            collection=collection,
            indexed=result.indexed,
            duration_ms=(time.time() - start_time) * 1000
        )
        return result
