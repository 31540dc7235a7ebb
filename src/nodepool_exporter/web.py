"""FastAPI application serving the exporter's HTTP endpoints.

Routes:
    GET <metrics path>: the registry in the Prometheus exposition format
    GET /: a static landing page linking to the metrics path
"""

from __future__ import annotations

import html

from fastapi import APIRouter, FastAPI, Request
from fastapi.responses import HTMLResponse, Response
from prometheus_client import CollectorRegistry
from prometheus_client.exposition import choose_encoder

LANDING_PAGE_TEMPLATE = """<html>
<head><title>Nodepool Exporter</title></head>
<body>
<h1>Nodepool Exporter</h1>
<p><a href="{metrics_path}">Metrics</a></p>
</body>
</html>
"""


def render_landing_page(metrics_path: str) -> str:
    """Render the landing page HTML with a link to the metrics path."""
    return LANDING_PAGE_TEMPLATE.format(metrics_path=html.escape(metrics_path, quote=True))


def create_routes(registry: CollectorRegistry, metrics_path: str = "/metrics") -> APIRouter:
    """Create the exporter routes.

    Args:
        registry: Registry to serialize on every metrics request.
        metrics_path: Path under which metrics are exposed.

    Returns:
        APIRouter with the metrics and landing page routes.
    """
    router = APIRouter()

    # Sync route: FastAPI runs it in a worker thread, so a slow nodepool
    # scrape never blocks the event loop.
    @router.get(metrics_path, include_in_schema=False)
    def metrics(request: Request) -> Response:
        encoder, content_type = choose_encoder(request.headers.get("accept", ""))
        return Response(content=encoder(registry), media_type=content_type)

    if metrics_path != "/":
        landing_page = render_landing_page(metrics_path)

        @router.get("/", response_class=HTMLResponse, include_in_schema=False)
        def index() -> HTMLResponse:
            return HTMLResponse(content=landing_page)

    return router


def create_app(registry: CollectorRegistry, metrics_path: str = "/metrics") -> FastAPI:
    """Create the FastAPI application for the exporter.

    Args:
        registry: Registry exposed on the metrics path.
        metrics_path: Path under which metrics are exposed.

    Returns:
        Configured FastAPI application.
    """
    app = FastAPI(
        title="Nodepool Exporter",
        docs_url=None,
        redoc_url=None,
        openapi_url=None,
    )
    app.include_router(create_routes(registry, metrics_path))
    return app


__all__ = ["create_app", "create_routes", "render_landing_page"]
