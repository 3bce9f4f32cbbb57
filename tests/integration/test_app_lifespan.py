"""Integration tests for create_app + lifespan wiring."""

from __future__ import annotations

import os
from pathlib import Path

import pytest
import yaml
from fastapi.testclient import TestClient

from cinetrend.infrastructure.config.schema import AppConfig, AppwriteConfig
from cinetrend.interfaces.app import create_app
from cinetrend.interfaces.cli.cli import start

pytestmark = pytest.mark.integration


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in list(os.environ):
        if name.startswith(("CINETREND_", "APPWRITE_")):
            monkeypatch.delenv(name, raising=False)


def _diskcache_config(tmp_path: Path) -> AppConfig:
    return AppConfig.model_validate(
        {
            "environment": "test",
            "store": {"backend": "diskcache", "directory": str(tmp_path / "db")},
            "trending": {"limit": 2},
        }
    )


class TestDiskcacheApp:
    def test_events_flow_into_trending(self, tmp_path: Path) -> None:
        app = create_app(_diskcache_config(tmp_path))

        with TestClient(app) as client:
            for movie_id, clicks in [(10, 1), (20, 3), (30, 2)]:
                for _ in range(clicks):
                    resp = client.post(
                        "/api/v1/events/detail-view",
                        json={"movie": {"id": movie_id, "title": f"M{movie_id}"}},
                    )
                    assert resp.status_code == 200

            ranking = client.get("/api/v1/trending").json()

        assert [(r["movie_id"], r["count"]) for r in ranking] == [(20, 3), (30, 2)]

    def test_healthz_reports_backend(self, tmp_path: Path) -> None:
        app = create_app(_diskcache_config(tmp_path))

        with TestClient(app) as client:
            resp = client.get("/api/v1/healthz")

        assert resp.json() == {"status": "ok", "store": "diskcache"}

    def test_store_closed_on_shutdown(self, tmp_path: Path) -> None:
        app = create_app(_diskcache_config(tmp_path))

        with TestClient(app):
            store = app.state.counter_store
            assert store is not None

        assert store._cache is None


class TestMisconfiguredAppwrite:
    def test_startup_survives_and_endpoints_answer_500(self) -> None:
        config = AppConfig(appwrite=AppwriteConfig(project_id="proj"))
        app = create_app(config)

        with TestClient(app) as client:
            health = client.get("/api/v1/healthz")
            trending = client.get("/api/v1/trending")

        assert health.status_code == 200
        assert health.json()["store"] is None
        assert trending.status_code == 500
        assert trending.json() == {
            "error": "server_misconfiguration",
            "missing": ["api_key", "database_id", "collection_id"],
        }


class TestCli:
    def test_print_config(self, capsys: pytest.CaptureFixture[str]) -> None:
        rc = start(["--print-config", "--store-backend", "diskcache", "--log-level", "DEBUG"])

        assert rc == 0
        dumped = yaml.safe_load(capsys.readouterr().out)
        assert dumped["store"]["backend"] == "diskcache"
        assert dumped["logging"]["level"] == "DEBUG"

    def test_uvicorn_keeps_configured_logging(
        self, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        configured: list[AppConfig] = []
        runs: list[dict] = []
        monkeypatch.setattr(
            "cinetrend.interfaces.cli.cli.configure_logging",
            lambda config: configured.append(config) or {},
        )
        monkeypatch.setattr(
            "cinetrend.interfaces.cli.cli.uvicorn.run",
            lambda app, **kwargs: runs.append(kwargs),
        )

        assert start(["--store-backend", "diskcache", "--port", "9001"]) == 0

        assert len(configured) == 1
        (kwargs,) = runs
        assert kwargs["port"] == 9001
        assert kwargs["log_config"] is None
