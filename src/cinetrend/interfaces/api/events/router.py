"""Interaction event intake (search submitted, detail viewed, poster found)."""

from __future__ import annotations

from typing import Any

import structlog
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from cinetrend.domain.entities import (
    DetailViewed,
    MovieSummary,
    PosterDiscovered,
    SearchSubmitted,
)
from cinetrend.interfaces.api.common import ranking_response, resolve_handler

log = structlog.get_logger(__name__)

router = APIRouter(prefix="/events", tags=["events"])


class TmdbMovieBody(BaseModel):
    """A TMDB movie result as the UI received it (unknown keys ignored)."""

    model_config = ConfigDict(extra="ignore")

    id: int | None = None
    title: str | None = None
    original_title: str | None = None
    poster_path: str | None = None
    vote_average: float | None = None
    release_date: str | None = None
    original_language: str | None = None

    def to_summary(self) -> MovieSummary:
        return MovieSummary.from_tmdb(self.model_dump())


class SearchSubmittedBody(BaseModel):
    term: str = Field(description="Search term as typed (case-sensitive).")
    chosen_result: TmdbMovieBody | None = Field(
        default=None, description="First result shown for the term."
    )


class DetailViewedBody(BaseModel):
    movie: TmdbMovieBody


class PosterDiscoveredBody(BaseModel):
    movie_id: int
    poster_url: str


@router.post("/search", status_code=202)
async def search_submitted(request: Request, body: SearchSubmittedBody) -> Any:
    handler = resolve_handler(request)
    if isinstance(handler, JSONResponse):
        return handler

    chosen = body.chosen_result.to_summary() if body.chosen_result else None
    doc = await handler.on_search_submitted(SearchSubmitted(term=body.term, chosen_result=chosen))
    log.debug("search_event_received", recorded=doc is not None)
    return {"recorded": doc is not None, "count": doc.count if doc else None}


@router.post("/detail-view")
async def detail_viewed(request: Request, body: DetailViewedBody) -> JSONResponse:
    """Count a detail-view click and return the refreshed ranking."""
    handler = resolve_handler(request)
    if isinstance(handler, JSONResponse):
        return handler

    docs = await handler.on_detail_viewed(DetailViewed(movie=body.movie.to_summary()))
    log.debug("detail_view_event_received", movie_id=body.movie.id)
    return ranking_response(docs)


@router.post("/poster")
async def poster_discovered(request: Request, body: PosterDiscoveredBody) -> JSONResponse:
    """Backfill a better poster for a clicked movie; count is untouched."""
    handler = resolve_handler(request)
    if isinstance(handler, JSONResponse):
        return handler

    docs = await handler.on_poster_discovered(
        PosterDiscovered(movie_id=body.movie_id, poster_url=body.poster_url)
    )
    log.debug("poster_event_received", movie_id=body.movie_id)
    return ranking_response(docs)
