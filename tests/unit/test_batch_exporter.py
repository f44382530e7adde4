"""BatchExporter: unit isolation, ordering, file naming, totals."""

import json

import pytest

from passdesk.application.dtos.export import ExportUnit
from passdesk.application.services.aggregator import UserDataAggregator
from passdesk.application.services.batch_exporter import (
    BatchExporter,
    export_filename,
    units_for_categories,
    units_for_users,
)
from passdesk.application.services.record_fetcher import RecordFetcher
from passdesk.application.services.serializer import ExportSerializer
from passdesk.domain.enums import ExportCategory, ExportFormat
from passdesk.domain.exceptions import DeliveryException
from passdesk.infrastructure.delivery.sinks import MemoryDeliverySink

C = ExportCategory
F = ExportFormat


class FailingSink(MemoryDeliverySink):
    """Memory sink that refuses file names containing a marker."""

    def __init__(self, marker: str) -> None:
        super().__init__()
        self.marker = marker

    def deliver(self, content: str, filename: str, mime_type: str) -> None:
        if self.marker in filename:
            raise DeliveryException(filename, "disk full")
        super().deliver(content, filename, mime_type)


@pytest.fixture
def sink() -> MemoryDeliverySink:
    return MemoryDeliverySink()


def _exporter(store, sink, clock) -> BatchExporter:
    aggregator = UserDataAggregator(RecordFetcher(store), clock=clock)
    return BatchExporter(aggregator, ExportSerializer(), sink, clock=clock)


def test_filenames(fixed_clock) -> None:
    now = fixed_clock()
    assert export_filename(ExportUnit("p1", "u1", (C.GATE_PASSES,)), now) == "gate-passes-2024-05-01.json"
    assert export_filename(ExportUnit("p1", "u1", (C.ALL,), F.CSV), now) == "all-data-2024-05-01.csv"
    unit = ExportUnit("p1", "u7", (C.ALL,), F.JSON, embed_user_id=True)
    assert export_filename(unit, now) == "all-data-u7-2024-05-01.json"


def test_unit_builders() -> None:
    per_category = units_for_categories("p1", "u1", [C.ALL], F.CSV)
    assert [u.categories for u in per_category] == [(c,) for c in C.concrete()]
    assert all(u.export_format is F.CSV and not u.embed_user_id for u in per_category)

    per_user = units_for_users("p1", ["u1", "u2"], [C.ORDERS], F.JSON)
    assert [u.user_id for u in per_user] == ["u1", "u2"]
    assert all(u.embed_user_id and u.categories == (C.ORDERS,) for u in per_user)


async def test_single_category_json_is_the_aggregate_document(seeded_store, sink, fixed_clock) -> None:
    outcome = await _exporter(seeded_store, sink, fixed_clock).export_unit(
        ExportUnit("p1", "u1", (C.GATE_PASSES,), F.JSON)
    )
    assert outcome.success and outcome.record_count == 2
    delivered = sink.first()
    assert delivered.filename == "gate-passes-2024-05-01.json"
    assert delivered.mime_type == "application/json"
    body = json.loads(delivered.content)
    assert [g["id"] for g in body["gatePasses"]] == ["g2", "g1"]
    assert body["exportMetadata"]["dataTypes"] == {"gatePasses": 2}


async def test_single_category_csv_is_a_table_of_records(store, sink, fixed_clock) -> None:
    store.add("projects/p1/gatePasses", "g1", userId="u1", plate="ABC-123", createdAt="2024-05-01T00:00:00.000Z")
    store.add(
        "projects/p1/gatePasses",
        "g2",
        userId="u1",
        plate="XYZ-987",
        createdAt="2024-05-02T00:00:00.000Z",
        note='He said "hi", then left',
    )
    await _exporter(store, sink, fixed_clock).export_unit(ExportUnit("p1", "u1", (C.GATE_PASSES,), F.CSV))
    lines = sink.first().content.split("\n")
    assert lines[0] == "id,userId,plate,createdAt,note"
    assert lines[1] == 'g2,u1,XYZ-987,2024-05-02T00:00:00.000Z,"He said ""hi"", then left"'
    assert lines[2] == "g1,u1,ABC-123,2024-05-01T00:00:00.000Z,"


async def test_empty_csv_export_still_delivers_placeholder(store, sink, fixed_clock) -> None:
    outcome = await _exporter(store, sink, fixed_clock).export_unit(ExportUnit("p1", "u1", (C.BOOKINGS,), F.CSV))
    assert outcome.success and outcome.record_count == 0
    assert sink.first().content == "No bookings data found"
    assert sink.first().filename == "bookings-2024-05-01.csv"


async def test_failed_unit_does_not_abort_batch(seeded_store, fixed_clock) -> None:
    sink = FailingSink(marker="-u2-")
    units = units_for_users("p1", ["u1", "u2", "u3"], [C.ALL], F.JSON)
    summary = await _exporter(seeded_store, sink, fixed_clock).export_batch(units)

    assert [o.success for o in summary.outcomes] == [True, False, True]
    assert "disk full" in summary.outcomes[1].error
    assert sink.filenames == ["all-data-u1-2024-05-01.json", "all-data-u3-2024-05-01.json"]
    assert summary.totals.total_files == 2
    assert summary.totals.total_records == summary.outcomes[0].record_count + summary.outcomes[2].record_count
    assert summary.to_dict()["totalFiles"] == 2


async def test_units_run_in_input_order(seeded_store, sink, fixed_clock) -> None:
    units = units_for_categories("p1", "u1", [C.ORDERS, C.PROFILE, C.GATE_PASSES], F.JSON)
    summary = await _exporter(seeded_store, sink, fixed_clock).export_batch(units)
    assert sink.filenames == [
        "profile-2024-05-01.json",
        "gate-passes-2024-05-01.json",
        "orders-2024-05-01.json",
    ]
    assert [o.filename for o in summary.outcomes] == sink.filenames


async def test_skip_empty_delivers_no_file_for_empty_units(seeded_store, sink, fixed_clock) -> None:
    units = units_for_categories("p1", "u1", [C.ORDERS, C.BOOKINGS], F.CSV)
    summary = await _exporter(seeded_store, sink, fixed_clock).export_batch(units, skip_empty=True)
    bookings = summary.outcomes[1]
    assert bookings.success and bookings.filename is None
    assert bookings.message == "No data found"
    assert sink.filenames == ["orders-2024-05-01.csv"]
    assert summary.totals.total_files == 1
    assert summary.totals.total_records == 3


async def test_repeated_batches_have_same_totals(seeded_store, fixed_clock) -> None:
    units = units_for_users("p1", ["u1", "u2"], [C.ALL], F.JSON)
    first = await _exporter(seeded_store, MemoryDeliverySink(), fixed_clock).export_batch(units)
    second = await _exporter(seeded_store, MemoryDeliverySink(), fixed_clock).export_batch(units)
    assert first.totals == second.totals


async def test_empty_batch(seeded_store, sink, fixed_clock) -> None:
    summary = await _exporter(seeded_store, sink, fixed_clock).export_batch([], export_format=F.CSV)
    assert summary.outcomes == ()
    assert summary.totals.total_files == 0
    assert summary.totals.export_format is F.CSV


async def test_one_users_failing_category_does_not_fail_the_batch(
    seeded_store, sink, fixed_clock
) -> None:
    original = seeded_store.query_collection

    async def orders_denied_for_u1(path, filters=(), *args, **kwargs):
        if path == "projects/p1/orders" and any(f.value == "u1" for f in filters):
            raise PermissionError("orders denied for u1")
        return await original(path, filters, *args, **kwargs)

    seeded_store.query_collection = orders_denied_for_u1
    units = units_for_users("p1", ["u1", "u2"], [C.ALL], F.JSON)
    summary = await _exporter(seeded_store, sink, fixed_clock).export_batch(units)

    assert [o.success for o in summary.outcomes] == [True, True]
    u1 = json.loads(sink.files[0].content)
    assert u1["orders"] == []
    assert u1["exportMetadata"]["dataTypes"]["orders"] == 0
    assert [g["id"] for g in u1["gatePasses"]] == ["g2", "g1"]
