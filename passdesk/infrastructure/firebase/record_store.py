"""Firestore-backed record store (implements IRecordStore)."""

from __future__ import annotations

from collections.abc import Sequence

import httpx

from passdesk.application.dtos.store import QueryFilter, StoredDocument
from passdesk.domain.enums import SortDirection
from passdesk.domain.exceptions import FetchException
from passdesk.infrastructure.firebase._rest_client import FirestoreRESTClient, Query

_STORE_ERRORS = (httpx.HTTPError, ValueError, KeyError)


class FirestoreRecordStore:
    """Read-only record store over the Firestore REST client.

    HTTP and decoding errors are raised as FetchException naming the path.
    """

    def __init__(self, client: FirestoreRESTClient) -> None:
        self._client = client

    def _query(
        self,
        path: str,
        filters: Sequence[QueryFilter],
        sort_field: str | None = None,
        sort_direction: SortDirection = SortDirection.DESCENDING,
        limit: int | None = None,
    ) -> Query:
        q = self._client.collection(path).query()
        for f in filters:
            q = q.where(f.field, f.op, f.value)
        if sort_field:
            q = q.order_by(sort_field, sort_direction.value)
        return q.limit(limit)

    async def query_collection(
        self,
        path: str,
        filters: Sequence[QueryFilter] = (),
        sort_field: str | None = None,
        sort_direction: SortDirection = SortDirection.DESCENDING,
        limit: int | None = None,
    ) -> list[StoredDocument]:
        try:
            q = self._query(path, filters, sort_field, sort_direction, limit)
            return [StoredDocument(snap.id, snap.to_dict()) async for snap in q.stream()]
        except _STORE_ERRORS as e:
            raise FetchException(path, str(e)) from e

    async def get_document(self, path: str) -> StoredDocument | None:
        try:
            snap = await self._client.document(path).get()
        except _STORE_ERRORS as e:
            raise FetchException(path, str(e)) from e
        if snap is None:
            return None
        return StoredDocument(snap.id, snap.to_dict())

    async def count(self, path: str, filters: Sequence[QueryFilter] = ()) -> int:
        try:
            return await self._query(path, filters).count()
        except _STORE_ERRORS as e:
            raise FetchException(path, str(e)) from e
