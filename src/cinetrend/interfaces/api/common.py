"""Helpers shared by the counter routers."""

from __future__ import annotations

from typing import Any, cast

from fastapi import Request
from fastapi.responses import JSONResponse

from cinetrend.application.use_cases import CounterEventHandler
from cinetrend.domain.entities import CounterDocument
from cinetrend.interfaces.app_state import AppState


def resolve_handler(request: Request) -> CounterEventHandler | JSONResponse:
    """Return the event handler, or the 500 response for a misconfigured store."""
    state = cast(AppState, request.app.state)
    handler = getattr(state, "counter_events", None)
    if handler is not None:
        return handler
    error = getattr(state, "store_config_error", None)
    return JSONResponse(
        status_code=500,
        content={
            "error": "server_misconfiguration",
            "missing": list(error.missing) if error is not None else [],
        },
    )


def serialize_counter(doc: CounterDocument) -> dict[str, Any]:
    return {
        "key": doc.key,
        "title": doc.title,
        "poster_url": doc.poster_url,
        "count": doc.count,
        "movie_id": doc.movie_id,
    }


def ranking_response(docs: list[CounterDocument]) -> JSONResponse:
    return JSONResponse(content=[serialize_counter(d) for d in docs])
