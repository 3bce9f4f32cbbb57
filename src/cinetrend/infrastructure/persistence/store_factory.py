"""Store factory - builds the counter store adapter from config."""

from __future__ import annotations

from dataclasses import dataclass

import httpx
import structlog

from cinetrend.domain.entities.counters import CounterCollection
from cinetrend.domain.entities.errors import CounterStoreConfigError
from cinetrend.domain.ports.counter_store import CounterStorePort
from cinetrend.infrastructure.appwrite.store import AppwriteCounterStore
from cinetrend.infrastructure.config.schema import AppConfig
from cinetrend.infrastructure.persistence.diskcache_store import DiskcacheCounterStore

log = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CounterStoreSetup:
    """A configured store plus the two collections it serves."""

    store: CounterStorePort
    searches: CounterCollection
    clicks: CounterCollection


def create_counter_store(
    config: AppConfig, *, http_client: httpx.AsyncClient
) -> CounterStoreSetup:
    """Create the counter store for ``config.store.backend``.

    The diskcache store is returned unopened; callers enter it with
    ``await store.__aenter__()``.

    Raises:
        CounterStoreConfigError: Appwrite settings are incomplete.
        ValueError: Unknown backend.
    """
    backend = config.store.backend
    if backend == "appwrite":
        aw = config.appwrite
        missing = aw.missing_settings()
        if missing:
            log.error("store_misconfigured", backend=backend, missing=missing)
            raise CounterStoreConfigError(missing)
        log.info(
            "store_factory_create",
            backend=backend,
            endpoint=aw.endpoint,
            database_id=aw.database_id,
            atomic_increment=aw.atomic_increment,
        )
        store = AppwriteCounterStore(
            http_client=http_client,
            endpoint=aw.endpoint,
            project_id=aw.project_id,
            api_key=aw.api_key,
            database_id=aw.database_id,
            atomic_increment=aw.atomic_increment,
        )
        return CounterStoreSetup(
            store=store,
            searches=CounterCollection.searches(aw.collection_id),
            clicks=CounterCollection.clicks(aw.clicks_collection),
        )
    elif backend == "diskcache":
        log.info(
            "store_factory_create",
            backend=backend,
            directory=str(config.store.directory),
        )
        return CounterStoreSetup(
            store=DiskcacheCounterStore(
                directory=config.store.directory,
                max_concurrent=config.store.max_concurrent,
            ),
            searches=CounterCollection.searches(config.store.search_collection),
            clicks=CounterCollection.clicks(config.store.clicks_collection),
        )
    else:
        raise ValueError(
            f"Unknown store backend: {backend!r}. Must be 'appwrite' or 'diskcache'."
        )
