"""Keyed counter aggregation: turn interaction events into counter upserts."""

from __future__ import annotations

from typing import Any

import structlog

from cinetrend.application.poster_policy import PosterBackfillPolicy
from cinetrend.domain.entities.counters import (
    FIELD_COUNT,
    FIELD_MOVIE_ID,
    FIELD_POSTER_URL,
    FIELD_TITLE,
    CounterCollection,
    CounterDocument,
    CounterKey,
    CounterMetadata,
)
from cinetrend.domain.entities.errors import CounterStoreError, is_schema_mismatch
from cinetrend.domain.ports.counter_store import CounterStorePort

log = structlog.get_logger(__name__)


class KeyedCounterAggregator:
    """Find-or-create a counter document per key and bump its count.

    Counting is best-effort telemetry: ``record`` and ``refresh_poster``
    log and swallow every store failure and return ``None`` instead.

    Known race: find-then-create is not transactional. Two concurrent first
    events for one key can both miss and both create a document. When the
    store has no atomic increment, two concurrent increments can also read
    the same count and write the same value (lost update). When
    ``store.supports_increment`` is set the count goes through the store's
    atomic primitive and only the duplicate-on-create race remains.
    """

    def __init__(
        self,
        store: CounterStorePort,
        policy: PosterBackfillPolicy | None = None,
    ) -> None:
        self._store = store
        self._policy = policy or PosterBackfillPolicy()

    async def record(
        self,
        collection: CounterCollection,
        key: CounterKey,
        metadata: CounterMetadata | None = None,
    ) -> CounterDocument | None:
        """Count one event for ``key``. Returns the written document or None."""
        metadata = metadata or CounterMetadata()
        try:
            existing = await self._find(collection, key)
            if existing is None:
                return await self._create(collection, key, metadata)
            return await self._bump(collection, existing, metadata)
        except Exception:
            log.error(
                "counter_record_failed",
                collection=collection.collection_id,
                kind=collection.kind,
                key=key,
                exc_info=True,
            )
            return None

    async def refresh_poster(
        self,
        collection: CounterCollection,
        key: CounterKey,
        poster_url: str | None,
    ) -> CounterDocument | None:
        """Poster-only update; never touches ``count``, never creates.

        Repeating the call with the same URL is a no-op after the first
        successful write.
        """
        if not poster_url:
            return None
        try:
            existing = await self._find(collection, key)
            if existing is None:
                log.debug(
                    "poster_refresh_no_counter",
                    collection=collection.collection_id,
                    key=key,
                )
                return None
            if not self._policy.should_replace(poster_url, existing.poster_url):
                return existing

            stored = await self._store.update(
                collection.collection_id,
                existing.id,
                {FIELD_POSTER_URL: poster_url},
            )
            log.info(
                "poster_refreshed",
                collection=collection.collection_id,
                key=key,
                document_id=existing.id,
            )
            return CounterDocument.from_stored(stored, collection)
        except Exception:
            log.error(
                "poster_refresh_failed",
                collection=collection.collection_id,
                key=key,
                exc_info=True,
            )
            return None

    # -- internal helpers --------------------------------------------------

    async def _find(
        self, collection: CounterCollection, key: CounterKey
    ) -> CounterDocument | None:
        docs = await self._store.find_by_equality(
            collection.collection_id, collection.key_field, key
        )
        if not docs:
            return None
        if len(docs) > 1:
            # Left behind by the create race; the first one keeps counting.
            log.warning(
                "counter_duplicate_key",
                collection=collection.collection_id,
                key=key,
                documents=len(docs),
            )
        return CounterDocument.from_stored(docs[0], collection)

    async def _bump(
        self,
        collection: CounterCollection,
        existing: CounterDocument,
        metadata: CounterMetadata,
    ) -> CounterDocument:
        fields: dict[str, Any] = {}
        title = metadata.title or existing.title
        if title is not None:
            fields[FIELD_TITLE] = title
        if self._policy.should_replace(metadata.poster_url, existing.poster_url):
            fields[FIELD_POSTER_URL] = metadata.poster_url
        if collection.kind == "search" and metadata.movie_id is not None:
            fields[FIELD_MOVIE_ID] = metadata.movie_id

        cid = collection.collection_id
        if self._store.supports_increment:
            stored = await self._store.increment(cid, existing.id, FIELD_COUNT, 1)
            if fields:
                stored = await self._store.update(cid, existing.id, fields)
        else:
            fields[FIELD_COUNT] = existing.count + 1
            stored = await self._store.update(cid, existing.id, fields)

        doc = CounterDocument.from_stored(stored, collection)
        log.debug(
            "counter_incremented",
            collection=cid,
            key=existing.key,
            count=doc.count,
            poster_updated=FIELD_POSTER_URL in fields,
        )
        return doc

    async def _create(
        self,
        collection: CounterCollection,
        key: CounterKey,
        metadata: CounterMetadata,
    ) -> CounterDocument:
        data: dict[str, Any] = {
            collection.key_field: key,
            FIELD_COUNT: 1,
            FIELD_POSTER_URL: metadata.poster_url or self._policy.no_image_poster,
        }
        if metadata.title is not None:
            data[FIELD_TITLE] = metadata.title
        if collection.kind == "search":
            if metadata.movie_id is not None:
                data[FIELD_MOVIE_ID] = metadata.movie_id
            data.update(metadata.extra_fields())

        cid = collection.collection_id
        try:
            stored = await self._store.create(cid, data)
        except CounterStoreError as e:
            if not is_schema_mismatch(e):
                raise
            log.warning(
                "counter_schema_mismatch",
                collection=cid,
                key=key,
                error=e.message,
            )
            stored = await self._store.create(
                cid, {collection.key_field: key, FIELD_COUNT: 1}
            )
            log.info("counter_created_minimal", collection=cid, document_id=stored.id)
            return CounterDocument.from_stored(stored, collection)

        log.info("counter_created", collection=cid, key=key, document_id=stored.id)
        return CounterDocument.from_stored(stored, collection)
