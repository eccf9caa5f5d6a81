"""Directory service main application."""

import time
from contextlib import asynccontextmanager
from typing import Optional

import uvicorn
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
import structlog

from .api.routes import router as api_router
from .ingestion import BulkIndexer
from libs.common.config import DirectoryConfig
from libs.common.logging import configure_logging
from libs.common.metrics import MetricsCollector
from libs.search_engine.base import IndexClient
from libs.search_engine.factory import create_index_client_from_config

logger = structlog.get_logger("directory_service")

SERVICE_NAME = "directory-service"
SERVICE_VERSION = "0.1.0"

# Metrics label for requests that match no route
UNMATCHED_ENDPOINT = "unmatched"


def create_app(
    config: Optional[DirectoryConfig] = None,
    index_client: Optional[IndexClient] = None,
) -> FastAPI:
    """Build the FastAPI application.

    Parameters
    - config: Service configuration; read from the environment when omitted
    - index_client: Pre-built engine client. When omitted one is created at
      startup from ``config`` and closed at shutdown.
    """
    config = config or DirectoryConfig()
    metrics_collector = MetricsCollector(SERVICE_NAME)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        """Application lifespan manager."""
        # Startup
        configure_logging(
            SERVICE_NAME,
            config.directory_log_level,
            config.directory_log_format,
            env=config.directory_env,
        )
        logger.info("Starting directory service", port=config.port)

        owns_client = index_client is None
        client = index_client or create_index_client_from_config(config, metrics_collector)

        app.state.config = config
        app.state.index_client = client
        app.state.metrics_collector = metrics_collector
        app.state.bulk_indexer = BulkIndexer(
            client,
            config.directory_ingest_csv_path,
            delimiter=config.directory_ingest_delimiter,
            concurrency=config.directory_ingest_concurrency,
            metrics=metrics_collector,
        )

        logger.info(
            "Directory service started successfully",
            csv_path=config.directory_ingest_csv_path,
            ingest_concurrency=config.directory_ingest_concurrency
        )

        yield

        # Shutdown
        logger.info("Shutting down directory service")
        if owns_client:
            await client.close()
        logger.info("Directory service shutdown complete")

    app = FastAPI(
        title="Employee Directory Service",
        description="Collection management, CSV ingestion and search over a search engine",
        version=SERVICE_VERSION,
        lifespan=lifespan
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.middleware("http")
    async def add_process_time_header(request: Request, call_next):
        """Add processing time header to responses."""
        start_time = time.time()
        response = await call_next(request)
        process_time = time.time() - start_time
        response.headers["X-Process-Time"] = str(process_time)
        return response

    @app.middleware("http")
    async def metrics_middleware(request: Request, call_next):
        """Collect metrics for HTTP requests."""
        start_time = time.time()

        try:
            response = await call_next(request)
            status_code = response.status_code
        except Exception as e:
            logger.exception("Unhandled error", path=request.url.path, error=str(e))
            status_code = 500
            response = JSONResponse(
                status_code=500,
                content={"detail": {"type": type(e).__name__, "message": str(e)}}
            )

        # Label by route template to keep path parameters out of the label set
        route = request.scope.get("route")
        endpoint = getattr(route, "path", UNMATCHED_ENDPOINT)
        metrics_collector.record_http_request(
            method=request.method,
            endpoint=endpoint,
            status=status_code,
            duration=time.time() - start_time
        )

        return response

    @app.get("/health")
    async def health_check(request: Request):
        """Health check endpoint."""
        if await request.app.state.index_client.health_check():
            return {"status": "healthy", "service": SERVICE_NAME}
        return JSONResponse(
            status_code=503,
            content={"status": "unhealthy", "service": SERVICE_NAME}
        )

    @app.get("/metrics")
    async def metrics():
        """Prometheus metrics endpoint."""
        return Response(content=metrics_collector.get_metrics(), media_type="text/plain")

    @app.get("/")
    async def root():
        """Root endpoint."""
        return {
            "service": SERVICE_NAME,
            "version": SERVICE_VERSION,
            "status": "running",
            "endpoints": {
                "health": "/health",
                "metrics": "/metrics",
                "create_collection": "/0000/{collection_name}",
                "index_data": "/index-data/{collection_name}/{exclude_column}",
                "search": "/search-by-column/{collection_name}/{column_name}/{column_value}",
                "count": "/employee-count/{collection_name}",
                "delete": "/delete-employee/{collection_name}/{employee_id}",
                "facets": "/department-facets/{collection_name}"
            }
        }

    return app


app = create_app()


def run() -> None:
    """Serve the application with uvicorn on the configured port."""
    config = DirectoryConfig()
    uvicorn.run(
        "service_directory.app.main:app",
        host=config.directory_host,
        port=config.port,
        log_level=config.directory_log_level.lower()
    )


if __name__ == "__main__":
    run()
