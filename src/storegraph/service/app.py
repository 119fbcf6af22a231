"""
Service app factory for Storegraph.

Creates a pre-configured FastAPI application with:
- CORS middleware
- Health check endpoint
- Lifecycle hooks for the document store and the Redis relay
- Logging filter to suppress noisy healthcheck logs
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from ..api import register_error_handlers, router
from ..config import StoregraphConfig
from ..graph import StoreGraph
from ..messaging.notifier import ChangeNotifier
from ..messaging.relay import RedisEventRelay
from ..store.base import DocumentStore
from ..store.sql import SQLDocumentStore

logger = logging.getLogger(__name__)


class HealthcheckLogFilter(logging.Filter):
    """Filter out noisy healthcheck logs."""

    FILTERED_PATHS = ("/health",)

    def filter(self, record: logging.LogRecord) -> bool:
        message = record.getMessage()
        for path in self.FILTERED_PATHS:
            if f'"{path}' in message or f" {path} " in message:
                return False
        return True


def _setup_logging_filter():
    """Add filter to uvicorn access logger to suppress healthcheck logs."""
    uvicorn_access = logging.getLogger("uvicorn.access")
    if not any(isinstance(f, HealthcheckLogFilter) for f in uvicorn_access.filters):
        uvicorn_access.addFilter(HealthcheckLogFilter())


def build_graph(config: StoregraphConfig, store: Optional[DocumentStore] = None) -> StoreGraph:
    """Build a StoreGraph from configuration."""
    store = store or SQLDocumentStore(config.database_url, echo=config.sql_echo)
    notifier = ChangeNotifier(
        capacity=config.channel_capacity,
        publish_timeout=config.publish_timeout,
    )
    return StoreGraph(store, notifier, strict_references=config.strict_references)


def create_app(
    config: Optional[StoregraphConfig] = None,
    *,
    store: Optional[DocumentStore] = None,
    redis_client: Any = None,
    cors_origins: Optional[list[str]] = None,
) -> FastAPI:
    """
    Create the Storegraph FastAPI app.

    Args:
        config: Service configuration (default: from environment)
        store: Document store (default: SQLDocumentStore on config.database_url)
        redis_client: Pre-built Redis client for the relay
        cors_origins: CORS allowed origins (default: all)

    Returns:
        Configured FastAPI application. The graph is available as ``app.state.graph``.
    """
    config = config or StoregraphConfig.from_env()
    graph = build_graph(config, store)

    relay = None
    if config.redis_url or redis_client is not None:
        relay = RedisEventRelay(
            graph.notifier,
            config.redis_url,
            client=redis_client,
            prefix=config.redis_prefix,
        )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        # Startup
        _setup_logging_filter()
        await graph.store.init()
        if relay:
            await relay.start()
        logger.info("Storegraph service started")

        yield

        # Shutdown
        if relay:
            await relay.stop()
        await graph.close()
        logger.info("Storegraph service stopped")

    app = FastAPI(
        title="Storegraph",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.graph = graph
    app.state.config = config
    app.state.relay = relay

    app.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    app.include_router(router)

    @app.get("/health")
    async def health_check():
        return {"status": "ok", "service": "storegraph"}

    return app
