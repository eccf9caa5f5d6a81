"""Shared fixtures: an in-memory search engine and a wired test app."""

import re
import uuid
from collections import Counter
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

import pytest
from fastapi.testclient import TestClient

from libs.common.config import DirectoryConfig
from libs.search_engine.base import (
    AggregationBucket,
    IndexClient,
    SearchEngineConnectionError,
    SearchEngineNotFoundError,
    SearchEngineRequestError,
)
from service_directory.app.main import create_app


EMPLOYEES_CSV = (
    "EmployeeID,Name,Department\n"
    "E1,Alice Johnson,Eng\n"
    "E2,Bob Smith,Sales\n"
    "E3,Carol White,Eng\n"
    "E4,Dan Brown,Sales\n"
    "E5,Eve Davis,Eng\n"
)


def _tokens(value: Any) -> set:
    return set(re.findall(r"\w+", str(value).lower()))


class InMemoryIndexClient(IndexClient):
    """Dict-backed stand-in for a search engine.

    Mirrors the engine behaviours the service relies on: indices are created
    on first write, match queries compare lowercase tokens, and missing
    indices or documents raise ``SearchEngineNotFoundError``.
    """

    def __init__(self, fail_on_write: Optional[int] = None):
        self.collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self.fail_on_write = fail_on_write
        self.writes = 0
        self.closed = False

    def _collection(self, name: str) -> Dict[str, Dict[str, Any]]:
        if name not in self.collections:
            raise SearchEngineNotFoundError(
                f"no such index [{name}]",
                status_code=404,
                error="index_not_found_exception",
            )
        return self.collections[name]

    async def create_collection(self, name: str) -> Dict[str, Any]:
        if name in self.collections:
            raise SearchEngineRequestError(
                f"index [{name}] already exists",
                status_code=400,
                error="resource_already_exists_exception",
            )
        self.collections[name] = {}
        return {"acknowledged": True, "index": name}

    async def index_document(self, collection: str, document: Dict[str, Any]) -> str:
        self.writes += 1
        if self.fail_on_write is not None and self.writes == self.fail_on_write:
            raise SearchEngineRequestError(
                "mapper_parsing_exception",
                status_code=400,
                error="mapper_parsing_exception",
            )
        document_id = uuid.uuid4().hex
        self.collections.setdefault(collection, {})[document_id] = dict(document)
        return document_id

    async def search_by_field(self, collection: str, field: str, value: str) -> List[Dict[str, Any]]:
        wanted = _tokens(value)
        return [
            {"_index": collection, "_id": doc_id, "_score": 1.0, "_source": doc}
            for doc_id, doc in self._collection(collection).items()
            if field in doc and wanted & _tokens(doc[field])
        ]

    async def count(self, collection: str) -> int:
        return len(self._collection(collection))

    async def delete_document(self, collection: str, document_id: str) -> None:
        documents = self._collection(collection)
        if document_id not in documents:
            raise SearchEngineNotFoundError(
                "not_found",
                status_code=404,
                error="not_found",
                info={"_id": document_id, "result": "not_found"},
            )
        del documents[document_id]

    async def aggregate_by_field(self, collection: str, field: str) -> List[AggregationBucket]:
        counts = Counter(
            doc[field] for doc in self._collection(collection).values() if field in doc
        )
        ordered = sorted(counts.items(), key=lambda item: (-item[1], item[0]))
        return [AggregationBucket(key=key, count=count) for key, count in ordered]

    async def health_check(self) -> bool:
        return True

    async def close(self) -> None:
        self.closed = True


class UnreachableIndexClient(IndexClient):
    """Every call fails the way a refused connection does."""

    def _refused(self) -> SearchEngineConnectionError:
        return SearchEngineConnectionError(
            "ConnectionError(Connection refused)",
            status_code="N/A",
            error="Connection refused",
            engine_error_type="ConnectionError",
        )

    async def create_collection(self, name):
        raise self._refused()

    async def index_document(self, collection, document):
        raise self._refused()

    async def search_by_field(self, collection, field, value):
        raise self._refused()

    async def count(self, collection):
        raise self._refused()

    async def delete_document(self, collection, document_id):
        raise self._refused()

    async def aggregate_by_field(self, collection, field):
        raise self._refused()

    async def health_check(self):
        return False


@pytest.fixture
def employees_csv(tmp_path: Path) -> Path:
    path = tmp_path / "employees.csv"
    path.write_text(EMPLOYEES_CSV, encoding="utf-8")
    return path


@pytest.fixture
def engine() -> InMemoryIndexClient:
    return InMemoryIndexClient()


@pytest.fixture
def config(employees_csv: Path) -> DirectoryConfig:
    return DirectoryConfig(
        directory_ingest_csv_path=str(employees_csv),
        directory_log_level="WARNING",
    )


@pytest.fixture
def client(config: DirectoryConfig, engine: InMemoryIndexClient) -> Iterator[TestClient]:
    with TestClient(create_app(config, engine)) as test_client:
        yield test_client


@pytest.fixture
def unreachable_client(config: DirectoryConfig) -> Iterator[TestClient]:
    with TestClient(create_app(config, UnreachableIndexClient())) as test_client:
        yield test_client
