"""Appwrite counter store: async httpx client for the Databases REST API."""

from __future__ import annotations

import json
from typing import Any

import httpx
import structlog

from cinetrend.domain.entities.counters import StoredDocument
from cinetrend.domain.entities.errors import CounterStoreError

log = structlog.get_logger(__name__)

# Appwrite's id placeholder that asks the server to generate a unique id.
_UNIQUE_ID = "unique()"


def _query(method: str, attribute: str | None = None, values: list[Any] | None = None) -> str:
    """Encode one Appwrite query (sent as a JSON string in ``queries[]``)."""
    q: dict[str, Any] = {"method": method}
    if attribute is not None:
        q["attribute"] = attribute
    if values is not None:
        q["values"] = values
    return json.dumps(q)


def _to_stored(doc: dict[str, Any]) -> StoredDocument:
    # "$id", "$createdAt", "$permissions", ... are system attributes.
    return StoredDocument(
        id=str(doc["$id"]),
        data={k: v for k, v in doc.items() if not k.startswith("$")},
    )


class AppwriteCounterStore:
    """Implements ``CounterStorePort`` against an Appwrite database.

    Args:
        http_client: Shared ``httpx.AsyncClient`` (owned by the caller).
        endpoint: API endpoint, e.g. ``https://cloud.appwrite.io/v1``.
        project_id: Sent as ``X-Appwrite-Project``.
        api_key: Server API key, sent as ``X-Appwrite-Key`` when given.
        database_id: Database holding the counter collections.
        atomic_increment: Use the document attribute increment endpoint.
    """

    def __init__(
        self,
        *,
        http_client: httpx.AsyncClient,
        endpoint: str,
        project_id: str,
        database_id: str,
        api_key: str | None = None,
        atomic_increment: bool = True,
    ) -> None:
        self._http = http_client
        self._base = f"{endpoint.rstrip('/')}/databases/{database_id}/collections"
        self._headers = {
            "X-Appwrite-Project": project_id,
            "Content-Type": "application/json",
        }
        if api_key:
            self._headers["X-Appwrite-Key"] = api_key
        self.supports_increment = atomic_increment

    # ------------------------------------------------------------------
    # Private helpers
    # ------------------------------------------------------------------

    def _documents_url(self, collection: str, *parts: str) -> str:
        return "/".join([f"{self._base}/{collection}/documents", *parts])

    async def _request(
        self,
        method: str,
        url: str,
        *,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        try:
            resp = await self._http.request(
                method, url, params=params, json=body, headers=self._headers
            )
        except httpx.HTTPError as e:
            log.warning("appwrite_network_error", method=method, url=url, error=str(e))
            raise CounterStoreError(f"Appwrite request failed: {e}") from e

        if resp.is_success:
            return resp.json()

        message = resp.text
        error_type = None
        try:
            payload = resp.json()
            message = payload.get("message", message)
            error_type = payload.get("type")
        except ValueError:
            pass
        log.warning(
            "appwrite_http_error",
            method=method,
            url=url,
            status=resp.status_code,
            error_type=error_type,
        )
        raise CounterStoreError(
            message, status_code=resp.status_code, error_type=error_type
        )

    # ------------------------------------------------------------------
    # Public API (CounterStorePort)
    # ------------------------------------------------------------------

    async def find_by_equality(
        self, collection: str, field: str, value: Any
    ) -> list[StoredDocument]:
        data = await self._request(
            "GET",
            self._documents_url(collection),
            params={"queries[]": [_query("equal", field, [value])]},
        )
        return [_to_stored(d) for d in data.get("documents", [])]

    async def create(self, collection: str, data: dict[str, Any]) -> StoredDocument:
        doc = await self._request(
            "POST",
            self._documents_url(collection),
            body={"documentId": _UNIQUE_ID, "data": data},
        )
        return _to_stored(doc)

    async def update(
        self, collection: str, document_id: str, fields: dict[str, Any]
    ) -> StoredDocument:
        doc = await self._request(
            "PATCH",
            self._documents_url(collection, document_id),
            body={"data": fields},
        )
        return _to_stored(doc)

    async def list_ordered(
        self, collection: str, order_by: str, limit: int
    ) -> list[StoredDocument]:
        data = await self._request(
            "GET",
            self._documents_url(collection),
            params={
                "queries[]": [
                    _query("orderDesc", order_by),
                    _query("limit", values=[limit]),
                ]
            },
        )
        return [_to_stored(d) for d in data.get("documents", [])]

    async def increment(
        self, collection: str, document_id: str, field: str, value: int = 1
    ) -> StoredDocument:
        doc = await self._request(
            "PATCH",
            self._documents_url(collection, document_id, field, "increment"),
            body={"value": value},
        )
        return _to_stored(doc)

    async def aclose(self) -> None:
        # The http client belongs to the composition root.
        return None
