"""Application state container for FastAPI dependency injection."""

from __future__ import annotations

from typing import TYPE_CHECKING

from starlette.datastructures import State

from cinetrend.infrastructure.config import AppConfig

if TYPE_CHECKING:
    import httpx

    from cinetrend.application.use_cases import CounterEventHandler
    from cinetrend.domain.entities import CounterStoreConfigError
    from cinetrend.domain.ports import CounterStorePort


class AppState(State):
    """FastAPI application state with all DI resources.

    Lifecycle managed by composition.py::lifespan().
    """

    # Configuration
    config: AppConfig

    # Infrastructure
    http_client: httpx.AsyncClient
    counter_store: CounterStorePort | None

    # Set instead of the store when connection settings are missing
    store_config_error: CounterStoreConfigError | None

    # Application Services
    counter_events: CounterEventHandler | None
