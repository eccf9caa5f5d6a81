"""API routes for the directory service.

Each handler makes one call against the index client (or the bulk indexer)
and maps the result to a small JSON body. Every failure is logged and
returned as a 500 carrying the raw error.

Failure bodies use FastAPI's ``{"detail": ...}`` envelope; the engine's
error sits under ``detail`` as ``{"type", "status_code", "error", "info",
"message"}`` (``{"type", "path", "message"}`` for an unreadable CSV file).
"""

from typing import Any, Dict, List, Union

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
import structlog

from libs.records.reader import RecordSourceError
from libs.search_engine.base import IndexClient, SearchEngineError
from ..ingestion import BulkIndexer

logger = structlog.get_logger("directory_service.api")

router = APIRouter()


class MessageResponse(BaseModel):
    """Acknowledgement for write operations."""
    message: str = Field(..., description="Human readable outcome")


class CountResponse(BaseModel):
    """Response model for the count endpoint."""
    count: int = Field(..., description="Documents in the collection")


class BucketResponse(BaseModel):
    """One terms aggregation bucket."""
    key: Any = Field(..., description="Exact field value")
    count: int = Field(..., description="Documents carrying the value")


def get_index_client(request: Request) -> IndexClient:
    """Get the index client from application state."""
    return request.app.state.index_client


def get_bulk_indexer(request: Request) -> BulkIndexer:
    """Get the bulk indexer from application state."""
    return request.app.state.bulk_indexer


def get_facet_field(request: Request) -> str:
    return request.app.state.config.directory_facet_field


def _failure(error: Union[SearchEngineError, RecordSourceError]) -> HTTPException:
    return HTTPException(status_code=500, detail=error.to_dict())


@router.post("/0000/{collection_name}", status_code=201, response_model=MessageResponse)
async def create_collection(
    collection_name: str,
    index_client: IndexClient = Depends(get_index_client)
):
    """Create a collection (index)."""
    try:
        await index_client.create_collection(collection_name)
    except SearchEngineError as e:
        logger.error("Error creating collection", collection=collection_name, error=str(e))
        raise _failure(e)

    return MessageResponse(message=f"Collection {collection_name} created successfully")


@router.post(
    "/index-data/{collection_name}/{exclude_column}",
    status_code=201,
    response_model=MessageResponse
)
async def index_data(
    collection_name: str,
    exclude_column: str,
    bulk_indexer: BulkIndexer = Depends(get_bulk_indexer)
):
    """Index the employee file, excluding one column from every row."""
    try:
        await bulk_indexer.ingest(collection_name, exclude_column)
    except (SearchEngineError, RecordSourceError) as e:
        logger.error(
            "Error indexing document",
            collection=collection_name,
            excluded_column=exclude_column,
            error=str(e)
        )
        raise _failure(e)

    return MessageResponse(
        message=f"Data indexed into {collection_name} excluding {exclude_column}"
    )


@router.get(
    "/search-by-column/{collection_name}/{column_name}/{column_value}",
    response_model=List[Dict[str, Any]]
)
async def search_by_column(
    collection_name: str,
    column_name: str,
    column_value: str,
    index_client: IndexClient = Depends(get_index_client)
):
    """Match ``column_value`` against ``column_name``; returns the raw hits."""
    try:
        return await index_client.search_by_field(collection_name, column_name, column_value)
    except SearchEngineError as e:
        logger.error(
            "Error searching by column",
            collection=collection_name,
            column=column_name,
            error=str(e)
        )
        raise _failure(e)


@router.get("/employee-count/{collection_name}", response_model=CountResponse)
async def employee_count(
    collection_name: str,
    index_client: IndexClient = Depends(get_index_client)
):
    """Count the documents of a collection."""
    try:
        count = await index_client.count(collection_name)
    except SearchEngineError as e:
        logger.error("Error getting employee count", collection=collection_name, error=str(e))
        raise _failure(e)

    return CountResponse(count=count)


@router.delete("/delete-employee/{collection_name}/{employee_id}", response_model=MessageResponse)
async def delete_employee(
    collection_name: str,
    employee_id: str,
    index_client: IndexClient = Depends(get_index_client)
):
    """Delete one document by its engine-assigned id."""
    try:
        await index_client.delete_document(collection_name, employee_id)
    except SearchEngineError as e:
        logger.error(
            "Error deleting employee",
            collection=collection_name,
            employee_id=employee_id,
            error=str(e)
        )
        raise _failure(e)

    return MessageResponse(message=f"Employee {employee_id} deleted from {collection_name}")


@router.get("/department-facets/{collection_name}", response_model=List[BucketResponse])
async def department_facets(
    collection_name: str,
    index_client: IndexClient = Depends(get_index_client),
    facet_field: str = Depends(get_facet_field)
):
    """Group documents by department and count each group."""
    try:
        buckets = await index_client.aggregate_by_field(collection_name, facet_field)
    except SearchEngineError as e:
        logger.error("Error getting department facets", collection=collection_name, error=str(e))
        raise _failure(e)

    return [BucketResponse(**bucket.to_dict()) for bucket in buckets]
