from .counters import (
    CounterCollection,
    CounterDocument,
    CounterKind,
    CounterMetadata,
    DetailViewed,
    MovieSummary,
    PosterDiscovered,
    SearchSubmitted,
    StoredDocument,
)
from .errors import CounterStoreConfigError, CounterStoreError, is_schema_mismatch

__all__ = [
    "CounterCollection",
    "CounterDocument",
    "CounterKind",
    "CounterMetadata",
    "CounterStoreConfigError",
    "CounterStoreError",
    "DetailViewed",
    "MovieSummary",
    "PosterDiscovered",
    "SearchSubmitted",
    "StoredDocument",
    "is_schema_mismatch",
]
