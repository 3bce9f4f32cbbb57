"""Hardcoded default configuration values."""

from __future__ import annotations

from typing import Any

DEFAULT_CONFIG: dict[str, Any] = {
    "app_name": "cinetrend",
    "environment": "dev",
    "http": {
        "timeout_seconds": 10.0,
        "user_agent": "cinetrend/0.1.0",
    },
    "logging": {
        "level": "INFO",
        "format": None,  # Derived from environment in schema.py
    },
    "store": {
        "backend": "appwrite",
        "directory": "./.data/cinetrend",
    },
    "trending": {
        "limit": 5,
        "poster_base_url": "https://image.tmdb.org/t/p/w500",
        "no_image_poster": "/no-movie.png",
    },
}
