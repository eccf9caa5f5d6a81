"""Base index client interface.

Defines the abstract contract the directory service depends on, independent
of the backing search engine (OpenSearch, Elasticsearch, in-memory fakes).

All methods are asynchronous; callers suspend until the engine responds.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class AggregationBucket:
    """One terms aggregation bucket: an exact field value and its doc count."""

    key: Any
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return {"key": self.key, "count": self.count}


class IndexClient(ABC):
    """Abstract base class for search engine adapters.

    Implementations translate engine failures into ``SearchEngineError`` and
    never retry; every failure surfaces to the caller.
    """

    @abstractmethod
    async def create_collection(self, name: str) -> Dict[str, Any]:
        """Create a new empty index.

        Fails if the engine is unreachable or the index already exists.
        """
        pass

    @abstractmethod
    async def index_document(self, collection: str, document: Dict[str, Any]) -> str:
        """Persist one document and return the engine-assigned id."""
        pass

    @abstractmethod
    async def search_by_field(
        self,
        collection: str,
        field: str,
        value: str
    ) -> List[Dict[str, Any]]:
        """Run a match query of ``value`` against ``field``.

        Returns the raw hit objects in engine order. Matching semantics
        (tokenization, scoring) belong to the engine's default analyzer.
        """
        pass

    @abstractmethod
    async def count(self, collection: str) -> int:
        """Total number of documents in the collection."""
        pass

    @abstractmethod
    async def delete_document(self, collection: str, document_id: str) -> None:
        """Delete one document; fails if the id does not exist."""
        pass

    @abstractmethod
    async def aggregate_by_field(self, collection: str, field: str) -> List[AggregationBucket]:
        """Terms aggregation over the exact (keyword) value of ``field``.

        Buckets come back in engine order, which is descending count. The
        number of buckets is bounded by the engine's default size.
        """
        pass

    @abstractmethod
    async def health_check(self) -> bool:
        """Check if the engine is reachable."""
        pass

    async def close(self) -> None:
        """Release connections held by the client."""
        return None


class SearchEngineError(Exception):
    """Base exception for search engine operations.

    Carries the engine's own description of the failure so it can be handed
    back to HTTP callers unchanged.
    """

    def __init__(
        self,
        message: str,
        status_code: Any = None,
        error: Optional[str] = None,
        info: Any = None,
        engine_error_type: Optional[str] = None,
    ):
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.error = error
        self.info = info
        self.engine_error_type = engine_error_type or type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        """JSON-safe description of the raw engine error."""
        info = self.info
        if info is not None and not isinstance(info, (dict, list, str, int, float, bool)):
            info = str(info)
        return {
            "type": self.engine_error_type,
            "status_code": self.status_code,
            "error": self.error,
            "info": info,
            "message": self.message,
        }


class SearchEngineConnectionError(SearchEngineError):
    """The engine could not be reached (refused, DNS, timeout)."""
    pass


class SearchEngineRequestError(SearchEngineError):
    """The engine rejected the request."""
    pass


class SearchEngineNotFoundError(SearchEngineRequestError):
    """Index or document not found."""
    pass
