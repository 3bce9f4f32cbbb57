"""Trending use case: top-N counters by count."""

from __future__ import annotations

import structlog

from cinetrend.domain.entities.counters import (
    FIELD_COUNT,
    CounterCollection,
    CounterDocument,
)
from cinetrend.domain.ports.counter_store import CounterStorePort

log = structlog.get_logger(__name__)


class TrendingRanker:
    """Serves the count-descending ranking of a counter collection.

    Tie order is whatever the store returns and is not stable across calls.
    """

    def __init__(self, store: CounterStorePort) -> None:
        self._store = store

    async def top_n(self, collection: CounterCollection, n: int) -> list[CounterDocument]:
        """Return at most ``n`` documents, highest count first.

        Returns an empty list on any store failure so callers can simply
        hide the trending section.
        """
        if n <= 0:
            return []
        try:
            stored = await self._store.list_ordered(
                collection.collection_id, FIELD_COUNT, n
            )
        except Exception:
            log.warning(
                "trending_fetch_failed",
                collection=collection.collection_id,
                limit=n,
                exc_info=True,
            )
            return []

        docs: list[CounterDocument] = []
        for item in stored:
            try:
                docs.append(CounterDocument.from_stored(item, collection))
            except (TypeError, ValueError) as e:
                log.warning(
                    "trending_document_skipped",
                    collection=collection.collection_id,
                    document_id=item.id,
                    error=str(e),
                )
        # sorted() is stable, so equal counts keep the store's order.
        docs = sorted(docs, key=lambda d: d.count, reverse=True)[:n]
        log.debug("trending_fetched", collection=collection.collection_id, count=len(docs))
        return docs
