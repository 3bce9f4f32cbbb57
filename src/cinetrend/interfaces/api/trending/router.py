"""Trending ranking read endpoint."""

from __future__ import annotations

import structlog
from fastapi import APIRouter, Query, Request
from fastapi.responses import JSONResponse

from cinetrend.interfaces.api.common import ranking_response, resolve_handler

log = structlog.get_logger(__name__)

router = APIRouter(tags=["trending"])


@router.get("/trending")
async def trending(
    request: Request,
    limit: int | None = Query(
        default=None, ge=1, le=50, description="Ranking size (default from config)."
    ),
) -> JSONResponse:
    """Most clicked movies, highest count first.

    Always 200 with best-effort data (empty list when the store fails);
    500 only when the store connection is not configured.
    """
    handler = resolve_handler(request)
    if isinstance(handler, JSONResponse):
        log.warning("trending_unavailable", reason="store_not_configured")
        return handler

    docs = await handler.trending(limit)
    return ranking_response(docs)
