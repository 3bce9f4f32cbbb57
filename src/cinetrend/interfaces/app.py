"""FastAPI application factory (create_app)."""

from __future__ import annotations

import time
from collections.abc import Awaitable, Callable

import structlog
from fastapi import FastAPI, Request
from starlette.responses import Response

from cinetrend.infrastructure.config import AppConfig
from cinetrend.interfaces.app_state import AppState
from cinetrend.interfaces.composition import lifespan

log = structlog.get_logger(__name__)


def create_app(config: AppConfig) -> FastAPI:
    """Create FastAPI app: configuration ONLY, NO resource initialization.

    Resources (HTTP client, counter store) are created in lifespan().
    """
    app = FastAPI(
        title="cinetrend",
        description="Trending movies from search and click counters",
        version="0.1.0",
        lifespan=lifespan,
    )

    app.state = AppState()
    app.state.config = config

    from cinetrend.interfaces.api.events import router as events_router
    from cinetrend.interfaces.api.trending import router as trending_router

    app.include_router(trending_router, prefix="/api/v1")
    app.include_router(events_router, prefix="/api/v1")

    @app.get("/api/v1/healthz")
    async def healthz() -> dict[str, str | None]:
        """Liveness probe, returns 200 as long as the process is running."""
        store = getattr(app.state, "counter_store", None)
        return {
            "status": "ok",
            "store": config.store.backend if store is not None else None,
        }

    @app.middleware("http")
    async def log_requests(
        request: Request, call_next: Callable[[Request], Awaitable[Response]]
    ):
        start = time.perf_counter()
        status_code = 500
        try:
            response = await call_next(request)
            status_code = response.status_code
            return response
        finally:
            duration_ms = (time.perf_counter() - start) * 1000.0
            log.info(
                "http_request",
                method=request.method,
                path=request.url.path,
                query=str(request.url.query),
                status_code=status_code,
                duration_ms=round(duration_ms, 2),
                client_host=(request.client.host if request.client else None),
            )

    return app
