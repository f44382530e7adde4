"""Export the data of every member of a project to a directory (ops / cron use).

Usage:
    uv run python -m scripts.export_project_users <project_id> [json|csv] [output_dir]
Writes one file per member plus one summary file for the whole run under
<output_dir>/<project_id>/ (default output_dir: EXPORT_OUTPUT_DIR).
Requires FIREBASE_SERVICE_ACCOUNT_KEY or FIREBASE_SERVICE_ACCOUNT_PATH.
"""

import asyncio
import logging
import sys
from pathlib import Path

from passdesk.application.dtos.export import BatchSummary
from passdesk.application.use_cases.data_export import DataExportService
from passdesk.core.config import get_settings
from passdesk.domain.enums import ExportFormat
from passdesk.domain.value_objects.categories import parse_format
from passdesk.infrastructure.delivery.sinks import DirectoryDeliverySink
from passdesk.infrastructure.firebase.client import close_firebase, get_firestore_client, init_firebase
from passdesk.infrastructure.firebase.record_store import FirestoreRecordStore
from passdesk.infrastructure.security.context import HeaderProjectSelection, RequestIdentity
from passdesk.shared.telemetry.logging import setup_logging

# Recorded as the requesting user in summary files.
SCRIPT_USER_ID = "ops-script"

logger = logging.getLogger("scripts.export_project_users")


async def export_project(
    service: DataExportService,
    export_format: ExportFormat,
    batch_size: int,
    write_summary: bool = True,
) -> BatchSummary | None:
    """Export every member of the service's project in batches of batch_size.

    The service must not write per-batch summaries; one summary covering
    all batches is delivered at the end when write_summary is set.
    Returns None when the project has no members.
    """
    users = await service.list_project_users()
    if not users:
        return None
    summaries = []
    for start in range(0, len(users), batch_size):
        batch = [u.id for u in users[start : start + batch_size]]
        summary = await service.export_users(batch, export_format)
        for outcome in summary.failed:
            logger.error("Export failed for %s: %s", outcome.unit.user_id, outcome.error)
        summaries.append(summary)
    combined = BatchSummary.merge(summaries)
    if write_summary:
        service.deliver_summary(combined)
    return combined


async def main() -> None:
    """Export all project members in batches of EXPORT_MAX_USERS_PER_BATCH."""
    if len(sys.argv) < 2:
        print(
            "Usage: uv run python -m scripts.export_project_users <project_id> [json|csv] [output_dir]",
            file=sys.stderr,
        )
        sys.exit(1)
    project_id = sys.argv[1]
    export_format = parse_format(sys.argv[2] if len(sys.argv) > 2 else "json")
    settings = get_settings()
    output_dir = Path(sys.argv[3] if len(sys.argv) > 3 else settings.export_output_dir)

    setup_logging()
    if not init_firebase():
        print("Firestore not configured (set FIREBASE_SERVICE_ACCOUNT_KEY or PATH)", file=sys.stderr)
        sys.exit(1)
    client = get_firestore_client()
    try:
        service = DataExportService(
            FirestoreRecordStore(client),
            RequestIdentity(SCRIPT_USER_ID),
            HeaderProjectSelection(project_id),
            DirectoryDeliverySink(output_dir / project_id),
            query_limit=settings.export_query_limit,
            max_users_per_batch=settings.export_max_users_per_batch,
            include_summary_file=False,
        )
        summary = await export_project(
            service,
            export_format,
            settings.export_max_users_per_batch,
            write_summary=settings.export_include_summary_file,
        )
        if summary is None:
            print(f"No users in project {project_id}")
            return
        print(
            f"Exported {len(summary.outcomes)} user(s) of {project_id}: "
            f"{summary.totals.total_files} file(s), {summary.totals.total_records} record(s), "
            f"{len(summary.failed)} failure(s) -> {output_dir / project_id}"
        )
        if summary.failed:
            sys.exit(2)
    finally:
        await close_firebase()


if __name__ == "__main__":
    asyncio.run(main())
