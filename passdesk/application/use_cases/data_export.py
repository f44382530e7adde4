"""User data export use cases for the admin dashboard.

Every operation resolves the selected project and the signed-in user
first; NoProjectSelectedException / NotAuthenticatedException are raised
before any store access.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from passdesk.application.dtos.export import (
    BatchSummary,
    CollectionCheck,
    ExportUnit,
    ProjectUser,
    UnitOutcome,
)
from passdesk.application.dtos.store import QueryFilter
from passdesk.application.interfaces.repositories import IRecordStore
from passdesk.application.interfaces.services import (
    IDeliverySink,
    IIdentityProvider,
    IProjectSelection,
)
from passdesk.application.services.aggregator import UserDataAggregator
from passdesk.application.services.batch_exporter import (
    BatchExporter,
    units_for_categories,
    units_for_users,
)
from passdesk.application.services.record_fetcher import RecordFetcher
from passdesk.application.services.serializer import ExportSerializer
from passdesk.domain.enums import ExportCategory, ExportFormat
from passdesk.domain.exceptions import ValidationException
from passdesk.domain.entities.records import ProfileRecord, ProjectMembershipRecord
from passdesk.domain.value_objects.categories import (
    CATEGORY_SPECS,
    CHECKED_COLLECTIONS,
    SUMMARY_SLUG,
    USER_FIELD,
    expand_categories,
)
from passdesk.shared.utils.concurrency import settle_all
from passdesk.shared.utils.datetime import iso_date, utc_now

logger = logging.getLogger(__name__)

# Profile reads in flight at once when listing project members.
PROFILE_READ_CONCURRENCY = 10


class DataExportService:
    """Export the signed-in user's data, or selected project members' data."""

    def __init__(
        self,
        store: IRecordStore,
        identity: IIdentityProvider,
        project_selection: IProjectSelection,
        sink: IDeliverySink,
        *,
        query_limit: int | None = None,
        max_users_per_batch: int = 200,
        include_summary_file: bool = True,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._identity = identity
        self._project_selection = project_selection
        self._sink = sink
        self._query_limit = query_limit
        self._max_users_per_batch = max_users_per_batch
        self._include_summary_file = include_summary_file
        self._clock = clock
        self._serializer = ExportSerializer()
        aggregator = UserDataAggregator(RecordFetcher(store, query_limit), clock=clock)
        self._exporter = BatchExporter(aggregator, self._serializer, sink, clock=clock)

    def _context(self) -> tuple[str, str]:
        """Return (project_id, user_id) or raise the precondition error."""
        project_id = self._project_selection.current_project_id()
        user_id = self._identity.current_user_id()
        return project_id, user_id

    async def export_data(
        self, category: ExportCategory, export_format: ExportFormat = ExportFormat.JSON
    ) -> UnitOutcome:
        """Export one category (or ALL) of the signed-in user's data as a single file.

        Empty categories still produce a file (empty list in JSON, a
        ``No <category> data found`` line in CSV).
        """
        project_id, user_id = self._context()
        unit = ExportUnit(project_id, user_id, (category,), export_format)
        return await self._exporter.export_unit(unit)

    async def export_all_separately(
        self,
        export_format: ExportFormat = ExportFormat.JSON,
        categories: Iterable[ExportCategory] | None = None,
    ) -> BatchSummary:
        """Export each category of the signed-in user's data as its own file.

        Categories without records produce no file. A summary file is
        delivered last when enabled.
        """
        project_id, user_id = self._context()
        units = units_for_categories(
            project_id, user_id, categories or (ExportCategory.ALL,), export_format
        )
        summary = await self._exporter.export_batch(
            units, export_format=export_format, skip_empty=True
        )
        self._deliver_summary(summary)
        return summary

    async def export_users(
        self,
        user_ids: Iterable[str],
        export_format: ExportFormat = ExportFormat.JSON,
        categories: Iterable[ExportCategory] = (ExportCategory.ALL,),
    ) -> BatchSummary:
        """Export the same categories for several project members, one file per user.

        Raises:
            ValidationException: If no users or no categories are given, or the
                batch exceeds the configured limit.
        """
        project_id, _ = self._context()
        categories = tuple(categories)
        expand_categories(categories)  # rejects an empty selection
        selected = list(dict.fromkeys(u for u in user_ids if u))
        if not selected:
            raise ValidationException("Select at least one user to export", field="user_ids")
        if len(selected) > self._max_users_per_batch:
            raise ValidationException(
                f"Too many users in one export: {len(selected)} (max {self._max_users_per_batch})",
                field="user_ids",
            )
        units = units_for_users(project_id, selected, categories, export_format)
        summary = await self._exporter.export_batch(units, export_format=export_format)
        self._deliver_summary(summary)
        return summary

    def deliver_summary(self, summary: BatchSummary) -> str:
        """Deliver summary as a file regardless of ``include_summary_file``.

        Used by callers that run several batches and report them once.
        Returns the file name.
        """
        project_id, user_id = self._context()
        fmt = summary.totals.export_format
        body = {"projectId": project_id, "userId": user_id, **summary.to_dict()}
        filename = f"{SUMMARY_SLUG}-{iso_date(summary.export_date)}.{fmt.extension}"
        content = self._serializer.serialize_summary(body, fmt)
        self._sink.deliver(content, filename, fmt.mime_type)
        return filename

    def _deliver_summary(self, summary: BatchSummary) -> None:
        if not self._include_summary_file:
            return
        try:
            self.deliver_summary(summary)
        except Exception:
            logger.exception("Could not deliver export summary")

    async def list_project_users(self) -> list[ProjectUser]:
        """Return the selected project's members, with name and email from their profiles.

        A member whose profile cannot be read is still listed, without name/email.
        """
        project_id, _ = self._context()
        spec = CATEGORY_SPECS[ExportCategory.PROJECT_MEMBERSHIP]
        memberships = await self._store.query_collection(
            spec.path(project_id), limit=self._query_limit
        )
        member_ids = list(
            dict.fromkeys(ProjectMembershipRecord(doc.id, doc.data).user_id for doc in memberships)
        )
        profile_spec = CATEGORY_SPECS[ExportCategory.PROFILE]
        profiles = await settle_all(
            (self._store.get_document(profile_spec.path(project_id, uid)) for uid in member_ids),
            limit=PROFILE_READ_CONCURRENCY,
        )

        users: list[ProjectUser] = []
        for uid, outcome in zip(member_ids, profiles):
            if not outcome.ok:
                logger.warning("Could not read profile for user=%s: %s", uid, outcome.error)
            doc = outcome.value if outcome.ok else None
            profile = ProfileRecord(uid, doc.data if doc else {})
            users.append(
                ProjectUser(
                    id=uid,
                    email=profile.email,
                    first_name=profile.first_name,
                    last_name=profile.last_name,
                )
            )
        return users

    async def check_project_data(
        self, user_id: str | None = None
    ) -> dict[ExportCategory, CollectionCheck]:
        """Count documents per project collection, in total and owned by the user.

        Diagnoses empty exports. Errors are reported per collection.
        """
        project_id, current_user = self._context()
        target = user_id or current_user
        results: dict[ExportCategory, CollectionCheck] = {}
        for category in CHECKED_COLLECTIONS:
            path = CATEGORY_SPECS[category].path(project_id, target)
            try:
                total = await self._store.count(path)
                own = await self._store.count(path, [QueryFilter(USER_FIELD, "==", target)])
                results[category] = CollectionCheck(total=total, user_specific=own)
            except Exception as exc:
                logger.warning("Data check of %s failed: %s", path, exc)
                results[category] = CollectionCheck(error=str(exc))
            logger.debug(
                "%s: %d total, %d for user",
                category.value,
                results[category].total,
                results[category].user_specific,
            )
        return results
