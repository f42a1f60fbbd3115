# src/kubelet_summary_exporter/api/app.py
"""
FastAPI application factory for the exporter's HTTP endpoint.

Uses the factory pattern so the app can be created with or without
lifespan management.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Response
from prometheus_client import CONTENT_TYPE_LATEST, CollectorRegistry, generate_latest

from kubelet_summary_exporter import __version__
from kubelet_summary_exporter.collectors.ephemeral_storage_collector import EphemeralStorageCollector

logger = logging.getLogger(__name__)


def build_registry(collector: EphemeralStorageCollector) -> CollectorRegistry:
    """Returns a private registry holding only the exporter's collector."""
    registry = CollectorRegistry()
    registry.register(collector)
    return registry


def create_app(
    collector: EphemeralStorageCollector,
    metrics_path: str = "/metrics",
    use_lifespan: bool = False,
) -> FastAPI:
    """Create and configure the FastAPI application.

    Args:
        collector: The collector served on ``metrics_path``.
        metrics_path: Path of the Prometheus scrape endpoint.
        use_lifespan: If True, log startup and shutdown of the endpoint.
                      Set to False for testing.

    Returns:
        A configured FastAPI application instance.
    """
    registry = build_registry(collector)

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        logger.info("Serving kubelet summary metrics on %s", metrics_path)
        yield
        logger.info("Shutting down kubelet summary exporter...")

    app = FastAPI(
        title="kubelet-summary-exporter",
        version=__version__,
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
        lifespan=lifespan if use_lifespan else None,
    )

    # Plain ``def`` so each scrape runs in the threadpool; concurrent scrapes are allowed.
    def metrics() -> Response:
        return Response(content=generate_latest(registry), media_type=CONTENT_TYPE_LATEST)

    async def healthz() -> dict:
        return {"status": "ok", "version": __version__}

    app.add_api_route(metrics_path, metrics, methods=["GET"], include_in_schema=False)
    app.add_api_route("/healthz", healthz, methods=["GET"], include_in_schema=False)
    app.state.registry = registry
    app.state.collector = collector
    return app
