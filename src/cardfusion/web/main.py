"""
FastAPI application exposing the card pipeline over HTTP.
"""

from __future__ import annotations

import time
from contextlib import asynccontextmanager
from typing import Any, AsyncGenerator, Callable, Dict, Optional
from uuid import uuid4

import structlog
from fastapi import Depends, FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from prometheus_client import CONTENT_TYPE_LATEST

from cardfusion import __version__
from cardfusion.config.config import Config, settings
from cardfusion.exceptions import FusionError, InvalidRequestError
from cardfusion.intake import parse_batch_request
from cardfusion.observability import export_prometheus
from cardfusion.pipeline import CardPipeline

logger = structlog.get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Manage application lifecycle."""
    app.state.start_time = time.time()
    logger.info("Starting CardFusion API", version=__version__)
    yield
    logger.info("Shutting down CardFusion API")


app = FastAPI(
    title="CardFusion API",
    version=__version__,
    lifespan=lifespan,
)
app.state.config = None
app.state.pipeline = None

# The browser-side renderer calls the API directly
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
)


def get_config(request: Request) -> Config:
    """Configuration set by the CLI, or the lazily loaded global settings."""
    config: Optional[Config] = request.app.state.config
    return config if config is not None else settings  # type: ignore[return-value]


def get_pipeline(request: Request) -> CardPipeline:
    """Shared pipeline; override this dependency in tests."""
    if request.app.state.pipeline is None:
        request.app.state.pipeline = CardPipeline(get_config(request))
    return request.app.state.pipeline


@app.exception_handler(InvalidRequestError)
async def invalid_request_handler(request: Request, exc: InvalidRequestError) -> JSONResponse:
    logger.info("Rejected request", path=request.url.path, error=str(exc))
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": str(exc)})


@app.exception_handler(FusionError)
async def fusion_error_handler(request: Request, exc: FusionError) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"error": "Fuse failed", "reason": exc.reason},
    )


@app.post("/api/crawl")
async def crawl(request: Request, pipeline: CardPipeline = Depends(get_pipeline)) -> Dict[str, Any]:
    """Extract metadata for every requested URL."""
    batch = parse_batch_request(await request.body(), require_urls=True)
    structlog.contextvars.bind_contextvars(session=batch.session)
    return await pipeline.crawl_response(batch)


@app.post("/api/fuse")
async def fuse(request: Request, pipeline: CardPipeline = Depends(get_pipeline)) -> Dict[str, Any]:
    """Build one fused card from links, cards and/or prior crawl results."""
    batch = parse_batch_request(await request.body())
    structlog.contextvars.bind_contextvars(session=batch.session)
    return await pipeline.fuse_response(batch)


@app.get("/health")
async def health_check() -> Dict[str, Any]:
    """Health check endpoint for Kubernetes/Docker."""
    return {"status": "ok", "version": __version__}


@app.get("/metrics")
async def get_prometheus_metrics(request: Request) -> PlainTextResponse:
    """Endpoint for Prometheus to scrape."""
    if not get_config(request).monitoring.metrics_enabled:
        return PlainTextResponse("metrics disabled\n", status_code=status.HTTP_404_NOT_FOUND)
    return PlainTextResponse(export_prometheus(), media_type=CONTENT_TYPE_LATEST)


@app.middleware("http")
async def add_request_context(request: Request, call_next: Callable) -> Any:
    """Bind a request id for log records and report processing time."""
    start_time = time.time()
    request_id = request.headers.get("X-Request-ID") or str(uuid4())

    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(request_id=request_id)
    response = await call_next(request)
    process_time = time.time() - start_time

    response.headers["X-Process-Time"] = f"{process_time:.4f}"
    response.headers["X-Request-ID"] = request_id
    logger.info(
        "Handled request",
        method=request.method,
        path=request.url.path,
        status_code=response.status_code,
        response_time_ms=round(process_time * 1000, 2),
    )
    return response


def run_web_server(host: str = "127.0.0.1", port: int = 8000, config: Optional[Config] = None) -> None:
    """Function to run the FastAPI server."""
    import uvicorn

    app.state.config = config
    app.state.pipeline = None
    logger.info("Starting CardFusion API server", host=host, port=port)
    uvicorn.run(app, host=host, port=port, log_config=None)
