"""Shared test fixtures for the cinetrend test suite."""

from __future__ import annotations

import itertools
from typing import Any
from unittest.mock import AsyncMock

import pytest

from cinetrend.application.poster_policy import PosterBackfillPolicy
from cinetrend.application.use_cases import (
    CounterEventHandler,
    KeyedCounterAggregator,
    TrendingRanker,
)
from cinetrend.domain.entities import (
    CounterCollection,
    CounterStoreError,
    MovieSummary,
    StoredDocument,
)

# ---------------------------------------------------------------------------
# Fake store
# ---------------------------------------------------------------------------


class FakeCounterStore:
    """In-memory CounterStorePort with failure injection.

    - ``reject_fields``: attributes the "collection schema" does not know;
      creating a document with any of them fails like Appwrite does.
    - ``fail_ops``: operation names that raise a transport error.
    """

    def __init__(
        self,
        *,
        supports_increment: bool = False,
        reject_fields: set[str] | None = None,
        fail_ops: set[str] | None = None,
    ) -> None:
        self.supports_increment = supports_increment
        self.reject_fields = reject_fields or set()
        self.fail_ops = fail_ops or set()
        self.collections: dict[str, dict[str, dict[str, Any]]] = {}
        self.calls: list[tuple[str, tuple[Any, ...]]] = []
        self._ids = itertools.count(1)

    def _check(self, op: str, *args: Any) -> None:
        self.calls.append((op, args))
        if op in self.fail_ops:
            raise CounterStoreError(f"{op} failed: connection reset", status_code=None)

    def ops(self) -> list[str]:
        return [op for op, _ in self.calls]

    def seed(self, collection: str, data: dict[str, Any]) -> StoredDocument:
        doc_id = f"doc{next(self._ids)}"
        self.collections.setdefault(collection, {})[doc_id] = dict(data)
        return StoredDocument(id=doc_id, data=dict(data))

    def docs(self, collection: str) -> list[dict[str, Any]]:
        return list(self.collections.get(collection, {}).values())

    async def find_by_equality(self, collection: str, field: str, value: Any) -> list[StoredDocument]:
        self._check("find", collection, field, value)
        return [
            StoredDocument(id=doc_id, data=dict(data))
            for doc_id, data in self.collections.get(collection, {}).items()
            if data.get(field) == value
        ]

    async def create(self, collection: str, data: dict[str, Any]) -> StoredDocument:
        self._check("create", collection, dict(data))
        unknown = sorted(set(data) & self.reject_fields)
        if unknown:
            raise CounterStoreError(
                f'Invalid document structure: Unknown attribute: "{unknown[0]}"',
                status_code=400,
                error_type="document_invalid_structure",
            )
        return self.seed(collection, data)

    async def update(self, collection: str, document_id: str, fields: dict[str, Any]) -> StoredDocument:
        self._check("update", collection, document_id, dict(fields))
        data = self.collections[collection][document_id]
        data.update(fields)
        return StoredDocument(id=document_id, data=dict(data))

    async def list_ordered(self, collection: str, order_by: str, limit: int) -> list[StoredDocument]:
        self._check("list", collection, order_by, limit)
        items = sorted(
            self.collections.get(collection, {}).items(),
            key=lambda kv: kv[1].get(order_by) or 0,
            reverse=True,
        )
        return [StoredDocument(id=i, data=dict(d)) for i, d in items[:limit]]

    async def increment(self, collection: str, document_id: str, field: str, value: int = 1) -> StoredDocument:
        self._check("increment", collection, document_id, field, value)
        data = self.collections[collection][document_id]
        data[field] = int(data.get(field) or 0) + value
        return StoredDocument(id=document_id, data=dict(data))

    async def aclose(self) -> None:
        return None


# ---------------------------------------------------------------------------
# Domain fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def searches() -> CounterCollection:
    return CounterCollection.searches("search_counts")


@pytest.fixture()
def clicks() -> CounterCollection:
    return CounterCollection.clicks("movie_clicks")


@pytest.fixture()
def dune() -> MovieSummary:
    return MovieSummary.from_tmdb(
        {
            "id": 438631,
            "title": "Dune",
            "poster_path": "/abc.jpg",
            "vote_average": 7.8,
            "release_date": "2021-09-15",
            "original_language": "en",
        }
    )


# ---------------------------------------------------------------------------
# Application fixtures
# ---------------------------------------------------------------------------


@pytest.fixture()
def store() -> FakeCounterStore:
    return FakeCounterStore()


@pytest.fixture()
def policy() -> PosterBackfillPolicy:
    return PosterBackfillPolicy()


@pytest.fixture()
def aggregator(store: FakeCounterStore, policy: PosterBackfillPolicy) -> KeyedCounterAggregator:
    return KeyedCounterAggregator(store, policy)


@pytest.fixture()
def ranker(store: FakeCounterStore) -> TrendingRanker:
    return TrendingRanker(store)


@pytest.fixture()
def event_handler(
    aggregator: KeyedCounterAggregator,
    ranker: TrendingRanker,
    searches: CounterCollection,
    clicks: CounterCollection,
) -> CounterEventHandler:
    return CounterEventHandler(
        aggregator=aggregator,
        ranker=ranker,
        searches=searches,
        clicks=clicks,
        trending_limit=5,
    )


@pytest.fixture()
def mock_store() -> AsyncMock:
    """Mock CounterStorePort (no atomic increment)."""
    mock = AsyncMock()
    mock.supports_increment = False
    mock.find_by_equality = AsyncMock(return_value=[])
    mock.list_ordered = AsyncMock(return_value=[])
    return mock
