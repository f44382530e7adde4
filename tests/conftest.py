"""Pytest configuration and fixtures for passdesk.

Uses an in-memory record store instead of Firestore, and passdesk.main:app
with dependency overrides for HTTP tests. All imports use passdesk.*.
"""

import asyncio
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

import pytest
from fastapi import Request
from httpx import ASGITransport, AsyncClient

from passdesk.api.v1.dependencies import get_batch_sink, get_identity, get_record_store
from passdesk.application.dtos.store import QueryFilter, StoredDocument
from passdesk.core.limiter import limiter
from passdesk.domain.enums import SortDirection
from passdesk.infrastructure.delivery.sinks import MemoryDeliverySink
from passdesk.infrastructure.security.context import RequestIdentity
from passdesk.main import app

FIXED_NOW = datetime(2024, 5, 1, 9, 30, 0, tzinfo=UTC)

_OPS = {
    "==": lambda a, b: a == b,
    "!=": lambda a, b: a != b,
    "<": lambda a, b: a is not None and a < b,
    "<=": lambda a, b: a is not None and a <= b,
    ">": lambda a, b: a is not None and a > b,
    ">=": lambda a, b: a is not None and a >= b,
    "in": lambda a, b: a in b,
}


class FakeRecordStore:
    """In-memory IRecordStore with Firestore-like query semantics.

    Documents lacking the sort field are left out of sorted queries, as
    Firestore's orderBy does. Paths registered with fail() raise on access.
    peak_in_flight records the most calls outstanding at once.
    """

    def __init__(self) -> None:
        self.collections: dict[str, list[StoredDocument]] = {}
        self.documents: dict[str, StoredDocument] = {}
        self.failures: dict[str, Exception] = {}
        self.delays: dict[str, float] = {}
        self.calls: list[tuple[str, str]] = []
        self.in_flight = 0
        self.peak_in_flight = 0

    def add(self, path: str, doc_id: str, **data: Any) -> StoredDocument:
        doc = StoredDocument(doc_id, data)
        self.collections.setdefault(path, []).append(doc)
        return doc

    def put(self, path: str, **data: Any) -> StoredDocument:
        doc = StoredDocument(path.rsplit("/", 1)[-1], data)
        self.documents[path] = doc
        return doc

    def fail(self, path: str, exc: Exception | None = None) -> None:
        self.failures[path] = exc or RuntimeError(f"permission denied on {path}")

    async def _enter(self, op: str, path: str) -> None:
        self.calls.append((op, path))
        self.in_flight += 1
        self.peak_in_flight = max(self.peak_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(path, 0))
        finally:
            self.in_flight -= 1
        if path in self.failures:
            raise self.failures[path]

    def _matching(self, path: str, filters: Sequence[QueryFilter]) -> list[StoredDocument]:
        return [
            doc
            for doc in self.collections.get(path, [])
            if all(_OPS[f.op](doc.data.get(f.field), f.value) for f in filters)
        ]

    async def query_collection(
        self,
        path: str,
        filters: Sequence[QueryFilter] = (),
        sort_field: str | None = None,
        sort_direction: SortDirection = SortDirection.DESCENDING,
        limit: int | None = None,
    ) -> list[StoredDocument]:
        await self._enter("query", path)
        docs = self._matching(path, filters)
        if sort_field:
            docs = [d for d in docs if d.data.get(sort_field) is not None]
            docs.sort(
                key=lambda d: d.data[sort_field],
                reverse=sort_direction is SortDirection.DESCENDING,
            )
        if limit:
            docs = docs[:limit]
        return docs

    async def get_document(self, path: str) -> StoredDocument | None:
        await self._enter("get", path)
        return self.documents.get(path)

    async def count(self, path: str, filters: Sequence[QueryFilter] = ()) -> int:
        await self._enter("count", path)
        return len(self._matching(path, filters))


def ts(day: int, hour: int = 12) -> datetime:
    """Store-native timestamp on a day of May 2024."""
    return datetime(2024, 5, day, hour, 0, 0, tzinfo=UTC)


@pytest.fixture
def store() -> FakeRecordStore:
    """Empty in-memory store."""
    return FakeRecordStore()


@pytest.fixture
def seeded_store(store: FakeRecordStore) -> FakeRecordStore:
    """Project p1 with data for user u1 (no bookings) and a little for u2."""
    store.put(
        "users/u1",
        email="ana@example.com",
        firstName="Ana",
        lastName="Silva",
        createdAt=ts(1, 8),
    )
    store.put("users/u2", email="bo@example.com")
    store.add("projects/p1/users", "m1", userId="u1", role="resident", unit="A-12")
    store.add("projects/p1/users", "m2", userId="u2", role="resident", unit="B-3")
    store.add("projects/p1/gatePasses", "g1", userId="u1", createdAt=ts(2), plate="ABC-123")
    store.add("projects/p1/gatePasses", "g2", userId="u1", createdAt=ts(5), plate="XYZ-987")
    store.add("projects/p1/gatePasses", "g3", userId="u2", createdAt=ts(3), plate="OTH-000")
    store.add(
        "projects/p1/guestPasses",
        "gp1",
        userId="u1",
        createdAt=ts(4),
        guestName="Carla",
        validFrom={"seconds": 1714550400, "nanoseconds": 0},
    )
    store.add("projects/p1/orders", "o1", userId="u1", orderDate=ts(1), total=10.5)
    store.add("projects/p1/orders", "o2", userId="u1", orderDate=ts(3), total=99)
    store.add("projects/p1/orders", "o3", userId="u1", orderDate=ts(2), total=5)
    return store


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def batch_sink() -> MemoryDeliverySink:
    """Sink used by batch endpoints in HTTP tests (instead of the output directory)."""
    return MemoryDeliverySink()


def _identity_from_bearer(request: Request) -> RequestIdentity:
    """Test identity: the bearer token is the user id."""
    auth = request.headers.get("Authorization", "")
    return RequestIdentity(auth.removeprefix("Bearer ").strip() or None)


@pytest.fixture
async def client(seeded_store: FakeRecordStore, batch_sink: MemoryDeliverySink) -> AsyncClient:
    """Async HTTP client against the FastAPI app (ASGI) backed by the seeded store."""
    app.dependency_overrides[get_record_store] = lambda: seeded_store
    app.dependency_overrides[get_identity] = _identity_from_bearer
    app.dependency_overrides[get_batch_sink] = lambda: batch_sink
    limiter.enabled = False
    transport = ASGITransport(app=app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as ac:
            yield ac
    finally:
        app.dependency_overrides.clear()
        limiter.enabled = True


@pytest.fixture
def auth_headers() -> dict[str, str]:
    """Headers of a signed-in dashboard user u1 working in project p1."""
    return {"Authorization": "Bearer u1", "X-Project-ID": "p1"}
