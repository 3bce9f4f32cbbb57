"""Diskcache counter store - local SQLite-backed documents, no daemon."""

from __future__ import annotations

import asyncio
import sqlite3
import uuid
from pathlib import Path
from typing import Any

import structlog
from diskcache import Cache as DiskCache
from diskcache import Timeout

from cinetrend.domain.entities.counters import StoredDocument
from cinetrend.domain.entities.errors import CounterStoreError

log = structlog.get_logger(__name__)

_STORE_ERRORS = (OSError, sqlite3.Error, Timeout)


def _doc_key(collection: str, document_id: str) -> str:
    return f"{collection}:doc:{document_id}"


def _index_key(collection: str) -> str:
    return f"{collection}:_index"


class DiskcacheCounterStore:
    """Implements ``CounterStorePort`` on top of ``diskcache.Cache``.

    - Blocking disk I/O runs in ``asyncio.to_thread``.
    - Semaphore bounds parallel disk ops (SQLite lock contention).
    - Writes run inside ``Cache.transact()``, so ``increment`` is atomic.

    Key schema:
    - ``{collection}:doc:{id}`` -> dict of document attributes
    - ``{collection}:_index`` -> list of document ids (creation order)

    Args:
        directory: SQLite DB path.
        max_concurrent: Max parallel disk ops.
    """

    supports_increment = True

    def __init__(self, directory: str | Path = "./data", max_concurrent: int = 10) -> None:
        self.directory = Path(directory)
        self._cache: DiskCache | None = None
        self._semaphore = asyncio.Semaphore(max_concurrent)

    # --- Context Manager ---
    async def __aenter__(self) -> DiskcacheCounterStore:
        if self._cache is None:
            self._cache = await asyncio.to_thread(DiskCache, str(self.directory))
            log.info("diskcache_store_opened", path=str(self.directory))
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        if self._cache is not None:
            await asyncio.to_thread(self._cache.close)
            self._cache = None
            log.info("diskcache_store_closed", path=str(self.directory))

    # --- sync internals (run in worker threads) ---
    def _require(self) -> DiskCache:
        if self._cache is None:
            raise RuntimeError(
                "Store not initialized. Use 'async with store:' or await store.__aenter__()"
            )
        return self._cache

    def _load_all(self, collection: str) -> list[StoredDocument]:
        cache = self._require()
        docs: list[StoredDocument] = []
        for doc_id in cache.get(_index_key(collection), default=[]):
            data = cache.get(_doc_key(collection, doc_id))
            if data is not None:
                docs.append(StoredDocument(id=doc_id, data=dict(data)))
        return docs

    def _create_sync(self, collection: str, data: dict[str, Any]) -> StoredDocument:
        cache = self._require()
        doc_id = uuid.uuid4().hex
        with cache.transact():
            cache.set(_doc_key(collection, doc_id), dict(data))
            index = cache.get(_index_key(collection), default=[])
            cache.set(_index_key(collection), [*index, doc_id])
        return StoredDocument(id=doc_id, data=dict(data))

    def _update_sync(
        self, collection: str, document_id: str, fields: dict[str, Any]
    ) -> StoredDocument:
        cache = self._require()
        key = _doc_key(collection, document_id)
        with cache.transact():
            current = cache.get(key)
            if current is None:
                raise CounterStoreError(
                    f"Document {document_id!r} not found",
                    status_code=404,
                    error_type="document_not_found",
                )
            merged = {**current, **fields}
            cache.set(key, merged)
        return StoredDocument(id=document_id, data=merged)

    def _increment_sync(
        self, collection: str, document_id: str, field: str, value: int
    ) -> StoredDocument:
        cache = self._require()
        key = _doc_key(collection, document_id)
        with cache.transact():
            current = cache.get(key)
            if current is None:
                raise CounterStoreError(
                    f"Document {document_id!r} not found",
                    status_code=404,
                    error_type="document_not_found",
                )
            merged = {**current, field: int(current.get(field) or 0) + value}
            cache.set(key, merged)
        return StoredDocument(id=document_id, data=merged)

    async def _run(self, op: str, func, *args) -> Any:
        async with self._semaphore:
            try:
                return await asyncio.to_thread(func, *args)
            except _STORE_ERRORS as e:
                log.error("diskcache_store_error", op=op, error=str(e))
                raise CounterStoreError(f"diskcache {op} failed: {e}") from e

    # --- CounterStorePort implementation ---
    async def find_by_equality(
        self, collection: str, field: str, value: Any
    ) -> list[StoredDocument]:
        docs = await self._run("find", self._load_all, collection)
        return [d for d in docs if field in d.data and d.data[field] == value]

    async def create(self, collection: str, data: dict[str, Any]) -> StoredDocument:
        doc = await self._run("create", self._create_sync, collection, data)
        log.debug("diskcache_store_created", collection=collection, document_id=doc.id)
        return doc

    async def update(
        self, collection: str, document_id: str, fields: dict[str, Any]
    ) -> StoredDocument:
        return await self._run("update", self._update_sync, collection, document_id, fields)

    async def list_ordered(
        self, collection: str, order_by: str, limit: int
    ) -> list[StoredDocument]:
        docs = await self._run("list", self._load_all, collection)
        docs.sort(key=lambda d: d.data.get(order_by) or 0, reverse=True)
        return docs[:limit]

    async def increment(
        self, collection: str, document_id: str, field: str, value: int = 1
    ) -> StoredDocument:
        return await self._run(
            "increment", self._increment_sync, collection, document_id, field, value
        )
