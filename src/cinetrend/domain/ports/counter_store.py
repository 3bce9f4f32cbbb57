"""Port for the remote counter document store."""

from __future__ import annotations

from typing import Any, Protocol, runtime_checkable

from cinetrend.domain.entities.counters import StoredDocument


@runtime_checkable
class CounterStorePort(Protocol):
    """Async capability interface over a document collection.

    Implementations:
      - AppwriteCounterStore (Appwrite REST via httpx)
      - DiskcacheCounterStore (local SQLite via diskcache)

    Every method raises ``CounterStoreError`` on failure. The store holds no
    unique constraint on keys; callers find before they create.
    """

    supports_increment: bool

    async def find_by_equality(
        self, collection: str, field: str, value: Any
    ) -> list[StoredDocument]:
        """All documents whose ``field`` equals ``value`` exactly."""
        ...

    async def create(self, collection: str, data: dict[str, Any]) -> StoredDocument:
        """Create a document; the store assigns the id."""
        ...

    async def update(
        self, collection: str, document_id: str, fields: dict[str, Any]
    ) -> StoredDocument:
        """Partial update: only the given fields are written."""
        ...

    async def list_ordered(
        self, collection: str, order_by: str, limit: int
    ) -> list[StoredDocument]:
        """Up to ``limit`` documents, descending by ``order_by``."""
        ...

    async def increment(
        self, collection: str, document_id: str, field: str, value: int = 1
    ) -> StoredDocument:
        """Atomically add ``value`` to a numeric field.

        Only meaningful when ``supports_increment`` is true.
        """
        ...

    async def aclose(self) -> None:
        """Cleanup hook."""
        ...
