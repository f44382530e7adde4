"""Thin read-only Firestore REST API client (no firebase-admin).

Uses google-auth for service account tokens and Firestore REST v1.
All HTTP calls use httpx.AsyncClient so they do not block the event loop.
Exports only read: document get, structured queries (runQuery) and
count aggregations (runAggregationQuery).
"""

from __future__ import annotations

import asyncio
import json
from collections.abc import AsyncIterator
from typing import Any

import httpx

from passdesk.infrastructure.firebase._rest_encoding import _encode_value, decode_document

_FIRESTORE_SCOPE = "https://www.googleapis.com/auth/datastore"
_BASE = "https://firestore.googleapis.com/v1"


def _get_credentials(key_dict: dict):
    """Return google.oauth2.service_account.Credentials for Firestore."""
    from google.oauth2 import service_account

    return service_account.Credentials.from_service_account_info(
        key_dict, scopes=[_FIRESTORE_SCOPE]
    )


def _get_access_token(credentials) -> str:
    from google.auth.transport.requests import Request

    if not credentials.valid:
        credentials.refresh(Request())
    return credentials.token


async def _request_async(
    client: httpx.AsyncClient,
    url: str,
    method: str = "GET",
    body: dict | None = None,
    access_token: str | None = None,
) -> dict | list | None:
    """Perform async HTTP request to Firestore REST API. 404 returns None."""
    headers = {"Content-Type": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    if method == "GET":
        resp = await client.get(url, headers=headers)
    elif method == "POST":
        resp = await client.post(url, headers=headers, json=body)
    else:
        raise ValueError(f"Unsupported method: {method!r}")
    if resp.status_code == 404:
        return None
    if resp.status_code != 200:
        resp.raise_for_status()
    raw = resp.content
    return json.loads(raw.decode()) if raw else {}


def _doc_id(name: str) -> str:
    return name.split("/")[-1] if name else ""


class DocumentSnapshot:
    """Snapshot of a document (id + data)."""

    def __init__(self, id_: str, data: dict):
        self.id = id_
        self._data = data

    def to_dict(self) -> dict:
        return self._data


class DocumentReference:
    """Reference to a single document; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path

    @property
    def id(self) -> str:
        return _doc_id(self._path)

    async def get(self) -> DocumentSnapshot | None:
        """Fetch the document; returns None if not found."""
        url = f"{_BASE}/{self._path}"
        out = await _request_async(
            self._client._http, url, access_token=await self._client.get_token()
        )
        if not out:
            return None
        return DocumentSnapshot(self.id, decode_document(out.get("fields")))


_OP_MAP: dict[str, str] = {
    "==": "EQUAL",
    "!=": "NOT_EQUAL",
    "<": "LESS_THAN",
    "<=": "LESS_THAN_OR_EQUAL",
    ">": "GREATER_THAN",
    ">=": "GREATER_THAN_OR_EQUAL",
    "in": "IN",
    "not-in": "NOT_IN",
    "array_contains": "ARRAY_CONTAINS",
    "array-contains": "ARRAY_CONTAINS",
    "array_contains_any": "ARRAY_CONTAINS_ANY",
    "array-contains-any": "ARRAY_CONTAINS_ANY",
}

_DIRECTIONS = ("ASCENDING", "DESCENDING")


class Query:
    """Fluent query builder for a collection; filters, order and limit run on the server.

    Several ``where`` calls are ANDed (compositeFilter).
    """

    def __init__(self, client: "FirestoreRESTClient", parent: str, collection_id: str):
        self._client = client
        self._parent = parent
        self._collection_id = collection_id
        self._filters: list[dict[str, Any]] = []
        self._order_by_field: str | None = None
        self._order_direction: str = "ASCENDING"
        self._limit: int | None = None

    def where(self, field: str, op: str, value: Any) -> "Query":
        op_name = _OP_MAP.get(op, op)
        if op_name not in _OP_MAP.values():
            raise ValueError(f"Unsupported filter operator: {op!r}")
        self._filters.append(
            {
                "fieldFilter": {
                    "field": {"fieldPath": field},
                    "op": op_name,
                    "value": _encode_value(value),
                }
            }
        )
        return self

    def order_by(self, field: str, direction: str = "ASCENDING") -> "Query":
        if direction not in _DIRECTIONS:
            raise ValueError(f"Unsupported sort direction: {direction!r}")
        self._order_by_field = field
        self._order_direction = direction
        return self

    def limit(self, n: int | None) -> "Query":
        self._limit = n
        return self

    def _where_clause(self) -> dict[str, Any] | None:
        if not self._filters:
            return None
        if len(self._filters) == 1:
            return self._filters[0]
        return {"compositeFilter": {"op": "AND", "filters": list(self._filters)}}

    def to_structured_query(self) -> dict[str, Any]:
        """Return the StructuredQuery body for this query."""
        structured: dict[str, Any] = {
            "from": [{"collectionId": self._collection_id}],
        }
        where = self._where_clause()
        if where is not None:
            structured["where"] = where
        if self._order_by_field is not None:
            structured["orderBy"] = [
                {
                    "field": {"fieldPath": self._order_by_field},
                    "direction": self._order_direction,
                }
            ]
        if self._limit:
            structured["limit"] = self._limit
        return structured

    async def stream(self) -> AsyncIterator[DocumentSnapshot]:
        """Execute the query and yield document snapshots in server order."""
        url = f"{_BASE}/{self._parent}:runQuery"
        resp = await _request_async(
            self._client._http,
            url,
            method="POST",
            body={"structuredQuery": self.to_structured_query()},
            access_token=await self._client.get_token(),
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        for item in items:
            if "document" not in item:
                continue
            doc = item["document"]
            yield DocumentSnapshot(_doc_id(doc.get("name", "")), decode_document(doc.get("fields")))

    async def count(self) -> int:
        """Return the number of matching documents (server-side COUNT aggregation)."""
        structured = self.to_structured_query()
        structured.pop("orderBy", None)
        body = {
            "structuredAggregationQuery": {
                "structuredQuery": structured,
                "aggregations": [{"alias": "total", "count": {}}],
            }
        }
        url = f"{_BASE}/{self._parent}:runAggregationQuery"
        resp = await _request_async(
            self._client._http,
            url,
            method="POST",
            body=body,
            access_token=await self._client.get_token(),
        )
        items = resp if isinstance(resp, list) else ([resp] if resp else [])
        for item in items:
            fields = (item.get("result") or {}).get("aggregateFields") or {}
            if "total" in fields:
                return int(fields["total"].get("integerValue", 0))
        return 0


class CollectionReference:
    """Reference to a collection; matches firestore API style."""

    def __init__(self, client: "FirestoreRESTClient", path: str):
        self._client = client
        self._path = path.rstrip("/")

    def document(self, document_id: str) -> DocumentReference:
        return DocumentReference(self._client, f"{self._path}/{document_id}")

    def query(self) -> Query:
        """Start an unfiltered query. Use .where(), .order_by(), .limit(), then .stream()."""
        parent, collection_id = self._path.rsplit("/", 1)
        return Query(self._client, parent, collection_id)

    def where(self, field: str, op: str, value: Any) -> Query:
        return self.query().where(field, op, value)


class FirestoreRESTClient:
    """Lightweight Firestore client using REST API (no firebase-admin).

    Paths are relative to the database root, e.g. ``projects/p1/orders``
    or ``users/u1``.
    """

    def __init__(
        self,
        project_id: str,
        credentials,
        *,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        self._project_id = project_id
        self._credentials = credentials
        self._prefix = f"projects/{project_id}/databases/(default)/documents"
        self._http = http_client if http_client is not None else httpx.AsyncClient(timeout=30.0)
        self._owns_http = http_client is None

    @property
    def project_id(self) -> str:
        return self._project_id

    async def aclose(self) -> None:
        """Close the HTTP client only if we created it (do not close injected client)."""
        if self._owns_http:
            await self._http.aclose()

    async def get_token(self) -> str:
        """Return a valid access token; refreshes in thread pool to avoid blocking."""
        return await asyncio.to_thread(_get_access_token, self._credentials)

    def collection(self, path: str) -> CollectionReference:
        return CollectionReference(self, f"{self._prefix}/{path.strip('/')}")

    def document(self, path: str) -> DocumentReference:
        return DocumentReference(self, f"{self._prefix}/{path.strip('/')}")
