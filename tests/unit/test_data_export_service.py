"""DataExportService: preconditions, exports, summary files, listings, data check."""

import json

import pytest

from passdesk.application.use_cases.data_export import PROFILE_READ_CONCURRENCY, DataExportService
from passdesk.domain.enums import ExportCategory, ExportFormat
from passdesk.domain.exceptions import (
    NoProjectSelectedException,
    NotAuthenticatedException,
    ValidationException,
)
from passdesk.infrastructure.delivery.sinks import MemoryDeliverySink
from passdesk.infrastructure.security.context import HeaderProjectSelection, RequestIdentity

C = ExportCategory
F = ExportFormat


@pytest.fixture
def sink() -> MemoryDeliverySink:
    return MemoryDeliverySink()


@pytest.fixture
def make_service(seeded_store, sink, fixed_clock):
    def _make(user_id="u1", project_id="p1", **kwargs) -> DataExportService:
        return DataExportService(
            seeded_store,
            RequestIdentity(user_id),
            HeaderProjectSelection(project_id),
            sink,
            clock=fixed_clock,
            **kwargs,
        )

    return _make


async def test_no_project_is_checked_before_user_and_store(make_service, seeded_store) -> None:
    with pytest.raises(NoProjectSelectedException):
        await make_service(user_id=None, project_id=None).export_data(C.ALL)
    assert seeded_store.calls == []


async def test_unauthenticated_caller_is_rejected_before_store(make_service, seeded_store) -> None:
    with pytest.raises(NotAuthenticatedException):
        await make_service(user_id=None).export_data(C.ALL)
    with pytest.raises(NotAuthenticatedException):
        await make_service(user_id=None).export_all_separately()
    assert seeded_store.calls == []


async def test_export_data_all_as_json(make_service, sink) -> None:
    outcome = await make_service().export_data(C.ALL, F.JSON)
    assert outcome.success
    assert outcome.filename == "all-data-2024-05-01.json"
    body = json.loads(sink.first().content)
    assert body["exportMetadata"]["userId"] == "u1"
    assert len(body["orders"]) == 3


async def test_export_all_separately_skips_empty_and_adds_summary(make_service, sink) -> None:
    summary = await make_service().export_all_separately(F.JSON)
    assert len(summary.outcomes) == 6
    assert sink.filenames == [
        "profile-2024-05-01.json",
        "project-membership-2024-05-01.json",
        "gate-passes-2024-05-01.json",
        "guest-passes-2024-05-01.json",
        "orders-2024-05-01.json",
        "export-summary-2024-05-01.json",
    ]
    report = json.loads(sink.files[-1].content)
    assert report["projectId"] == "p1"
    assert report["userId"] == "u1"
    assert report["totalFiles"] == 5
    assert report["totalRecords"] == 8
    assert report["results"][-1]["message"] == "No data found"


async def test_summary_file_can_be_disabled(make_service, sink) -> None:
    await make_service(include_summary_file=False).export_all_separately(F.CSV, [C.ORDERS])
    assert sink.filenames == ["orders-2024-05-01.csv"]


async def test_csv_summary_file(make_service, sink) -> None:
    await make_service().export_all_separately(F.CSV, [C.ORDERS])
    summary_file = sink.files[-1]
    assert summary_file.filename == "export-summary-2024-05-01.csv"
    assert summary_file.mime_type == "text/csv"
    assert summary_file.content.startswith("Export Summary\n")


async def test_export_users_one_file_per_user(make_service, sink) -> None:
    summary = await make_service().export_users(["u1", "u2", "u1", ""], F.JSON)
    assert [o.unit.user_id for o in summary.outcomes] == ["u1", "u2"]
    assert sink.filenames[:2] == ["all-data-u1-2024-05-01.json", "all-data-u2-2024-05-01.json"]
    u2 = json.loads(sink.files[1].content)
    assert [g["id"] for g in u2["gatePasses"]] == ["g3"]


async def test_export_users_validates_selection(make_service) -> None:
    with pytest.raises(ValidationException):
        await make_service().export_users([])
    with pytest.raises(ValidationException):
        await make_service(max_users_per_batch=1).export_users(["u1", "u2"])


async def test_export_users_rejects_empty_category_selection(
    make_service, seeded_store, sink
) -> None:
    with pytest.raises(ValidationException) as exc_info:
        await make_service().export_users(["u1", "u2"], F.JSON, [])
    assert exc_info.value.details == {"field": "categories"}
    assert seeded_store.calls == []
    assert sink.files == []


async def test_list_project_users_merges_profiles(make_service, seeded_store) -> None:
    seeded_store.add("projects/p1/users", "m3", userId="u3")
    seeded_store.fail("users/u3")
    users = await make_service().list_project_users()
    assert [u.id for u in users] == ["u1", "u2", "u3"]
    assert users[0].display_name == "Ana Silva"
    assert users[1].display_name == "bo@example.com"
    assert users[2].email is None
    assert users[2].display_name == "u3"


async def test_check_project_data_counts(make_service, seeded_store) -> None:
    seeded_store.fail("projects/p1/bookings")
    checks = await make_service().check_project_data()
    assert checks[C.GATE_PASSES].total == 3
    assert checks[C.GATE_PASSES].user_specific == 2
    assert checks[C.ORDERS].to_dict() == {"total": 3, "userSpecific": 3}
    assert checks[C.BOOKINGS].error is not None
    other = await make_service().check_project_data("u2")
    assert other[C.GATE_PASSES].user_specific == 1


async def test_list_project_users_bounds_concurrent_profile_reads(make_service, store) -> None:
    for i in range(PROFILE_READ_CONCURRENCY * 3):
        store.add("projects/p1/users", f"m{i}", userId=f"u{i}")
        store.put(f"users/u{i}", email=f"u{i}@example.com")
        store.delays[f"users/u{i}"] = 0.01
    users = await make_service().list_project_users()
    assert len(users) == PROFILE_READ_CONCURRENCY * 3
    assert users[5].email == "u5@example.com"
    assert store.peak_in_flight == PROFILE_READ_CONCURRENCY


async def test_deliver_summary_ignores_the_per_batch_setting(make_service, sink) -> None:
    service = make_service(include_summary_file=False)
    summary = await service.export_users(["u1"], F.JSON)
    assert sink.filenames == ["all-data-u1-2024-05-01.json"]
    assert service.deliver_summary(summary) == "export-summary-2024-05-01.json"
    assert json.loads(sink.files[-1].content)["totalFiles"] == 1
