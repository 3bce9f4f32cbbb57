"""Domain entities for interaction counters and trending.

Pure value objects: no framework dependencies, no I/O.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Literal

CounterKind = Literal["search", "click"]
CounterKey = str | int

# Stored attribute names (Appwrite collection schema).
FIELD_SEARCH_TERM = "searchTerm"
FIELD_MOVIE_ID = "movie_id"
FIELD_COUNT = "count"
FIELD_TITLE = "title"
FIELD_POSTER_URL = "poster_url"

_EXTRA_FIELDS = ("vote_average", "release_date", "original_language")


@dataclass(frozen=True)
class StoredDocument:
    """Raw document as returned by a counter store."""

    id: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class CounterCollection:
    """A counter collection and the attribute its documents are keyed by."""

    collection_id: str
    key_field: str
    kind: CounterKind

    @classmethod
    def searches(cls, collection_id: str) -> CounterCollection:
        return cls(collection_id=collection_id, key_field=FIELD_SEARCH_TERM, kind="search")

    @classmethod
    def clicks(cls, collection_id: str) -> CounterCollection:
        return cls(collection_id=collection_id, key_field=FIELD_MOVIE_ID, kind="click")


@dataclass(frozen=True)
class CounterDocument:
    """One counter row: cumulative interaction count for a single key."""

    id: str
    key: CounterKey
    count: int = 0
    title: str | None = None
    poster_url: str | None = None
    movie_id: int | None = None
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_stored(
        cls, doc: StoredDocument, collection: CounterCollection
    ) -> CounterDocument:
        data = doc.data
        movie_id = data.get(FIELD_MOVIE_ID)
        return cls(
            id=doc.id,
            key=data.get(collection.key_field),
            count=int(data.get(FIELD_COUNT) or 0),
            title=data.get(FIELD_TITLE),
            poster_url=data.get(FIELD_POSTER_URL),
            movie_id=int(movie_id) if movie_id is not None else None,
            extra={k: data[k] for k in _EXTRA_FIELDS if data.get(k) is not None},
        )


@dataclass(frozen=True)
class MovieSummary:
    """Subset of a TMDB movie result that the counters care about."""

    id: int | None
    title: str | None = None
    poster_path: str | None = None
    vote_average: float | None = None
    release_date: str | None = None
    original_language: str | None = None

    @classmethod
    def from_tmdb(cls, item: dict[str, Any]) -> MovieSummary:
        movie_id = item.get("id")
        return cls(
            id=int(movie_id) if movie_id is not None else None,
            title=item.get("title") or item.get("original_title"),
            poster_path=item.get("poster_path") or None,
            vote_average=item.get("vote_average"),
            release_date=item.get("release_date") or None,
            original_language=item.get("original_language") or None,
        )


@dataclass(frozen=True)
class CounterMetadata:
    """Metadata carried by an interaction event.

    Every field is optional; ``None`` means "not known by this event".
    """

    title: str | None = None
    poster_url: str | None = None
    movie_id: int | None = None
    vote_average: float | None = None
    release_date: str | None = None
    original_language: str | None = None

    def extra_fields(self) -> dict[str, Any]:
        """Optional descriptive attributes that are present on the event."""
        values = {
            "vote_average": self.vote_average,
            "release_date": self.release_date,
            "original_language": self.original_language,
        }
        return {k: v for k, v in values.items() if v is not None}


# -- events -----------------------------------------------------------------


@dataclass(frozen=True)
class SearchSubmitted:
    term: str
    chosen_result: MovieSummary | None = None


@dataclass(frozen=True)
class DetailViewed:
    movie: MovieSummary


@dataclass(frozen=True)
class PosterDiscovered:
    movie_id: int
    poster_url: str
