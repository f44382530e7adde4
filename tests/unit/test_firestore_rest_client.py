"""Firestore REST client and record store against a mocked HTTP transport."""

import json
from datetime import UTC, datetime
from types import SimpleNamespace

import httpx
import pytest

from passdesk.application.dtos.store import QueryFilter
from passdesk.domain.enums import SortDirection
from passdesk.domain.exceptions import FetchException
from passdesk.infrastructure.firebase._rest_client import FirestoreRESTClient
from passdesk.infrastructure.firebase._rest_encoding import decode_document, encode_document
from passdesk.infrastructure.firebase.record_store import FirestoreRecordStore


def _client(handler) -> FirestoreRESTClient:
    http = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    return FirestoreRESTClient("demo", SimpleNamespace(valid=True, token="tok"), http_client=http)


def _doc(name: str, **fields) -> dict:
    return {"name": f"projects/demo/databases/(default)/documents/{name}", **encode_document(fields)}


def test_decode_document_handles_nested_values() -> None:
    fields = {
        "plate": {"stringValue": "ABC"},
        "count": {"integerValue": "3"},
        "paid": {"booleanValue": True},
        "createdAt": {"timestampValue": "2024-05-01T09:30:00.123456789Z"},
        "items": {"arrayValue": {"values": [{"mapValue": {"fields": {"sku": {"stringValue": "A"}}}}]}},
        "empty": {"arrayValue": {}},
        "gone": {"nullValue": None},
    }
    assert decode_document(fields) == {
        "plate": "ABC",
        "count": 3,
        "paid": True,
        "createdAt": datetime(2024, 5, 1, 9, 30, 0, 123456, tzinfo=UTC),
        "items": [{"sku": "A"}],
        "empty": [],
        "gone": None,
    }
    assert decode_document(None) == {}


async def test_get_document_and_missing_document() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        assert request.headers["Authorization"] == "Bearer tok"
        if request.url.path.endswith("/users/u1"):
            return httpx.Response(200, json=_doc("users/u1", email="a@x.io"))
        return httpx.Response(404, json={"error": {"code": 404}})

    store = FirestoreRecordStore(_client(handler))
    doc = await store.get_document("users/u1")
    assert doc.id == "u1"
    assert doc.data == {"email": "a@x.io"}
    assert await store.get_document("users/nobody") is None


async def test_query_sends_filters_order_and_limit() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json=[
                {"document": _doc("projects/p1/orders/o2", userId="u1", total=99)},
                {"document": _doc("projects/p1/orders/o1", userId="u1", total=5)},
                {"readTime": "2024-05-01T00:00:00Z"},
            ],
        )

    store = FirestoreRecordStore(_client(handler))
    docs = await store.query_collection(
        "projects/p1/orders",
        filters=[QueryFilter("userId", "==", "u1"), QueryFilter("status", "in", ["new", "paid"])],
        sort_field="orderDate",
        sort_direction=SortDirection.DESCENDING,
        limit=50,
    )

    assert [d.id for d in docs] == ["o2", "o1"]
    assert seen["path"].endswith("/documents/projects/p1:runQuery")
    query = seen["body"]["structuredQuery"]
    assert query["from"] == [{"collectionId": "orders"}]
    filters = query["where"]["compositeFilter"]["filters"]
    assert query["where"]["compositeFilter"]["op"] == "AND"
    assert filters[0]["fieldFilter"] == {
        "field": {"fieldPath": "userId"},
        "op": "EQUAL",
        "value": {"stringValue": "u1"},
    }
    assert filters[1]["fieldFilter"]["op"] == "IN"
    assert query["orderBy"] == [{"field": {"fieldPath": "orderDate"}, "direction": "DESCENDING"}]
    assert query["limit"] == 50


async def test_single_filter_query_has_no_composite() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json=[])

    store = FirestoreRecordStore(_client(handler))
    assert await store.query_collection("users", filters=[QueryFilter("userId", "==", "u1")]) == []
    query = seen["body"]["structuredQuery"]
    assert "fieldFilter" in query["where"]
    assert "orderBy" not in query
    assert "limit" not in query


async def test_count_uses_aggregation_query() -> None:
    seen: dict = {}

    def handler(request: httpx.Request) -> httpx.Response:
        seen["path"] = request.url.path
        seen["body"] = json.loads(request.content)
        return httpx.Response(
            200,
            json=[{"result": {"aggregateFields": {"total": {"integerValue": "42"}}}}],
        )

    store = FirestoreRecordStore(_client(handler))
    total = await store.count("projects/p1/gatePasses", [QueryFilter("userId", "==", "u1")])
    assert total == 42
    assert seen["path"].endswith("/documents/projects/p1:runAggregationQuery")
    aggregation = seen["body"]["structuredAggregationQuery"]
    assert aggregation["aggregations"] == [{"alias": "total", "count": {}}]
    assert aggregation["structuredQuery"]["from"] == [{"collectionId": "gatePasses"}]


async def test_http_errors_become_fetch_exceptions() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(403, json={"error": {"status": "PERMISSION_DENIED"}})

    store = FirestoreRecordStore(_client(handler))
    with pytest.raises(FetchException) as exc_info:
        await store.query_collection("projects/p1/orders")
    assert exc_info.value.details == {"path": "projects/p1/orders"}
    with pytest.raises(FetchException):
        await store.get_document("users/u1")
    with pytest.raises(FetchException):
        await store.count("projects/p1/orders")


async def test_unknown_operator_is_rejected() -> None:
    store = FirestoreRecordStore(_client(lambda request: httpx.Response(200, json=[])))
    with pytest.raises(FetchException):
        await store.query_collection("projects/p1/orders", filters=[QueryFilter("a", "~", 1)])


async def test_injected_http_client_is_not_closed() -> None:
    http = httpx.AsyncClient(transport=httpx.MockTransport(lambda r: httpx.Response(200)))
    client = FirestoreRESTClient("demo", None, http_client=http)
    await client.aclose()
    assert not http.is_closed
    await http.aclose()
