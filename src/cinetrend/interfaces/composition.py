"""Composition root: dependency injection via FastAPI lifespan."""

from __future__ import annotations

from contextlib import asynccontextmanager
from typing import AsyncIterator, cast

import httpx
import structlog
from fastapi import FastAPI

from cinetrend.application.poster_policy import PosterBackfillPolicy
from cinetrend.application.use_cases import (
    CounterEventHandler,
    KeyedCounterAggregator,
    TrendingRanker,
)
from cinetrend.domain.entities import CounterStoreConfigError
from cinetrend.infrastructure.config.schema import AppConfig
from cinetrend.infrastructure.persistence import CounterStoreSetup, create_counter_store
from cinetrend.interfaces.app_state import AppState

log = structlog.get_logger(__name__)


def build_event_handler(setup: CounterStoreSetup, config: AppConfig) -> CounterEventHandler:
    """Wire aggregator + ranker around one store instance."""
    policy = PosterBackfillPolicy(
        no_image_poster=config.trending.no_image_poster,
        placeholder_markers=config.trending.placeholder_markers,
    )
    return CounterEventHandler(
        aggregator=KeyedCounterAggregator(setup.store, policy),
        ranker=TrendingRanker(setup.store),
        searches=setup.searches,
        clicks=setup.clicks,
        trending_limit=config.trending.limit,
        poster_base_url=config.trending.poster_base_url,
    )


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Lifespan Hook: Initialize and cleanup all resources (DI Composition Root).

    Order matters:
        1. HTTP client (required by the Appwrite store)
        2. Counter store (one instance per process)
        3. Event handler (aggregator + ranker share the store)

    A missing connection setting does not abort startup: the error is kept on
    the state and the ranking endpoints answer 500.
    """
    state = cast(AppState, app.state)
    config = state.config

    state.counter_store = None
    state.counter_events = None
    state.store_config_error = None

    # 1) HTTP client. No retry transport: failed counter writes are dropped.
    state.http_client = httpx.AsyncClient(
        timeout=httpx.Timeout(config.http_timeout_seconds),
        headers={"User-Agent": config.http_user_agent},
    )
    log.info("http_client_initialized", timeout=config.http_timeout_seconds)

    # 2) Counter store
    try:
        setup = create_counter_store(config, http_client=state.http_client)
    except CounterStoreConfigError as e:
        state.store_config_error = e
        log.error("counter_store_unavailable", missing=e.missing)
    else:
        if hasattr(setup.store, "__aenter__"):
            await setup.store.__aenter__()
        state.counter_store = setup.store
        # 3) Event handler
        state.counter_events = build_event_handler(setup, config)
        log.info(
            "counter_store_initialized",
            backend=config.store.backend,
            searches=setup.searches.collection_id,
            clicks=setup.clicks.collection_id,
        )

    try:
        yield
    finally:
        if state.counter_store is not None:
            await state.counter_store.aclose()
            log.info("counter_store_closed")

        await state.http_client.aclose()
        log.info("http_client_closed")

        log.info("app_shutdown_complete")
