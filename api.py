"""
HTTP surface for the exporter: Prometheus scrape endpoint, health and collector diagnostics.
"""
from __future__ import annotations

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.responses import HTMLResponse, JSONResponse, Response

from errors import ScrapeBusyError
from orchestrator import CollectionOrchestrator
from utils import get_logger

logger = get_logger(__name__)

INDEX_HTML = """<html>
<head><title>MSSQL Exporter</title></head>
<body>
<h1>MSSQL Exporter</h1>
<p><a href="/metrics">Metrics</a></p>
<p><a href="/collectors">Collectors</a></p>
</body>
</html>
"""


def build_orchestrator() -> CollectionOrchestrator:
    """Orchestrator wired from config: pymssql executor, fresh registry."""
    import config
    from executor import MssqlExecutor

    settings = config.exporter_settings()
    return CollectionOrchestrator(
        MssqlExecutor(**config.mssql_settings()),
        deadline_sec=settings["scrape_deadline_sec"],
        busy_policy=settings["busy_policy"],
    )


def create_app(orchestrator: CollectionOrchestrator | None = None) -> FastAPI:
    orchestrator = orchestrator or build_orchestrator()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        yield
        orchestrator.executor.close()

    app = FastAPI(
        title="MSSQL Exporter",
        description="SQL Server metrics for Prometheus",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.orchestrator = orchestrator

    @app.get("/", response_class=HTMLResponse)
    def index() -> str:
        return INDEX_HTML

    @app.get("/health")
    def health() -> dict:
        return {"status": "ok", "state": orchestrator.state.value, "timestamp": time.time()}

    @app.get("/metrics")
    def metrics() -> Response:
        try:
            report = orchestrator.collect()
        except ScrapeBusyError as e:
            logger.info("Rejected scrape: %s", e)
            return Response("scrape already in progress\n", status_code=503, media_type="text/plain")
        if report.failed:
            logger.info("Scrape completed with failed collectors: %s", ", ".join(report.failed))
        registry = orchestrator.registry
        return Response(registry.exposition(), media_type=registry.content_type)

    @app.get("/collectors")
    def collectors() -> JSONResponse:
        report = orchestrator.last_report
        return JSONResponse({
            "state": orchestrator.state.value,
            "collectors": [spec.id for spec in orchestrator.collectors],
            "last_report": report.to_dict() if report else None,
        })

    return app
