"""Tests for the trending and event router endpoints."""

from __future__ import annotations

from fastapi import FastAPI
from fastapi.testclient import TestClient
from structlog.testing import capture_logs

from cinetrend.application.use_cases import (
    CounterEventHandler,
    KeyedCounterAggregator,
    TrendingRanker,
)
from cinetrend.domain.entities import CounterCollection, CounterStoreConfigError
from cinetrend.interfaces.api.events import router as events_router
from cinetrend.interfaces.api.trending import router as trending_router
from tests.conftest import FakeCounterStore

_POSTER = "https://image.tmdb.org/t/p/w500/abc.jpg"


def _make_app(
    *,
    store: FakeCounterStore | None = None,
    config_error: CounterStoreConfigError | None = None,
) -> FastAPI:
    """Create a minimal FastAPI app with the counter routers."""
    app = FastAPI()
    app.include_router(trending_router)
    app.include_router(events_router)

    app.state.store_config_error = config_error
    app.state.counter_events = None
    if store is not None:
        app.state.counter_events = CounterEventHandler(
            aggregator=KeyedCounterAggregator(store),
            ranker=TrendingRanker(store),
            searches=CounterCollection.searches("search_counts"),
            clicks=CounterCollection.clicks("movie_clicks"),
            trending_limit=5,
        )
    return app


class TestTrendingEndpoint:
    def test_returns_ranking(self) -> None:
        store = FakeCounterStore()
        store.seed("movie_clicks", {"movie_id": 1, "count": 2, "title": "A", "poster_url": "/a.jpg"})
        store.seed("movie_clicks", {"movie_id": 2, "count": 9, "title": "B", "poster_url": "/b.jpg"})
        client = TestClient(_make_app(store=store))

        resp = client.get("/trending")

        assert resp.status_code == 200
        assert resp.json() == [
            {"key": 2, "title": "B", "poster_url": "/b.jpg", "count": 9, "movie_id": 2},
            {"key": 1, "title": "A", "poster_url": "/a.jpg", "count": 2, "movie_id": 1},
        ]

    def test_limit_query(self) -> None:
        store = FakeCounterStore()
        for i in range(6):
            store.seed("movie_clicks", {"movie_id": i, "count": i})
        client = TestClient(_make_app(store=store))

        resp = client.get("/trending", params={"limit": 2})

        assert resp.status_code == 200
        assert [r["count"] for r in resp.json()] == [5, 4]

    def test_invalid_limit_rejected(self) -> None:
        client = TestClient(_make_app(store=FakeCounterStore()))
        assert client.get("/trending", params={"limit": 0}).status_code == 422
        assert client.get("/trending", params={"limit": 51}).status_code == 422

    def test_store_failure_is_200_empty(self) -> None:
        client = TestClient(_make_app(store=FakeCounterStore(fail_ops={"list"})))

        resp = client.get("/trending")

        assert resp.status_code == 200
        assert resp.json() == []

    def test_misconfiguration_is_500(self) -> None:
        app = _make_app(config_error=CounterStoreConfigError(["project_id", "api_key"]))
        client = TestClient(app)

        resp = client.get("/trending")

        assert resp.status_code == 500
        assert resp.json() == {
            "error": "server_misconfiguration",
            "missing": ["project_id", "api_key"],
        }

    def test_misconfiguration_is_logged(self) -> None:
        client = TestClient(_make_app(config_error=CounterStoreConfigError(["api_key"])))

        with capture_logs() as logs:
            client.get("/trending")

        assert {
            "event": "trending_unavailable",
            "log_level": "warning",
            "reason": "store_not_configured",
        } in logs

    def test_post_not_allowed(self) -> None:
        client = TestClient(_make_app(store=FakeCounterStore()))
        assert client.post("/trending").status_code == 405


class TestSearchEvent:
    def test_records_search(self) -> None:
        store = FakeCounterStore()
        client = TestClient(_make_app(store=store))

        resp = client.post(
            "/events/search",
            json={
                "term": "dune",
                "chosen_result": {
                    "id": 438631,
                    "title": "Dune",
                    "poster_path": "/abc.jpg",
                    "adult": False,
                    "genre_ids": [878, 12],
                },
            },
        )

        assert resp.status_code == 202
        assert resp.json() == {"recorded": True, "count": 1}
        (doc,) = store.docs("search_counts")
        assert doc["poster_url"] == _POSTER
        assert doc["movie_id"] == 438631

    def test_store_failure_is_not_an_error(self) -> None:
        client = TestClient(_make_app(store=FakeCounterStore(fail_ops={"find"})))

        resp = client.post("/events/search", json={"term": "dune"})

        assert resp.status_code == 202
        assert resp.json() == {"recorded": False, "count": None}

    def test_missing_term_is_422(self) -> None:
        client = TestClient(_make_app(store=FakeCounterStore()))
        assert client.post("/events/search", json={}).status_code == 422

    def test_misconfiguration_is_500(self) -> None:
        client = TestClient(_make_app(config_error=CounterStoreConfigError(["api_key"])))
        resp = client.post("/events/search", json={"term": "dune"})
        assert resp.status_code == 500


class TestDetailViewEvent:
    def test_returns_refreshed_ranking(self) -> None:
        store = FakeCounterStore()
        client = TestClient(_make_app(store=store))

        resp = client.post(
            "/events/detail-view",
            json={"movie": {"id": 550, "title": "Fight Club", "poster_path": "/fc.jpg"}},
        )

        assert resp.status_code == 200
        (entry,) = resp.json()
        assert entry["movie_id"] == 550
        assert entry["count"] == 1
        assert entry["poster_url"] == "https://image.tmdb.org/t/p/w500/fc.jpg"

    def test_intake_is_logged(self) -> None:
        client = TestClient(_make_app(store=FakeCounterStore()))

        with capture_logs() as logs:
            client.post("/events/detail-view", json={"movie": {"id": 550}})

        events = [entry["event"] for entry in logs]
        assert "detail_view_event_received" in events


class TestPosterEvent:
    def test_backfills_poster_without_counting(self) -> None:
        store = FakeCounterStore()
        store.seed("movie_clicks", {"movie_id": 550, "count": 3, "poster_url": "/no-movie.png"})
        client = TestClient(_make_app(store=store))

        resp = client.post("/events/poster", json={"movie_id": 550, "poster_url": _POSTER})

        assert resp.status_code == 200
        (entry,) = resp.json()
        assert entry["count"] == 3
        assert entry["poster_url"] == _POSTER
