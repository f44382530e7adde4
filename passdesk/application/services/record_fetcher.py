"""Record fetcher: one export category for one user, timestamps normalized."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from passdesk.application.dtos.export import CategoryData
from passdesk.application.dtos.store import QueryFilter, StoredDocument
from passdesk.application.interfaces.repositories import IRecordStore
from passdesk.domain.entities.records import ExportRecord
from passdesk.domain.enums import ExportCategory
from passdesk.domain.value_objects.categories import (
    CATEGORY_SPECS,
    USER_FIELD,
    CategorySpec,
)
from passdesk.shared.utils.datetime import normalize_timestamps

logger = logging.getLogger(__name__)


def to_record(spec: CategorySpec, doc: StoredDocument) -> ExportRecord:
    """Build the category's record type from a raw document, normalizing timestamps."""
    return spec.record_type(id=doc.id, data=normalize_timestamps(doc.data))


def _date_key(record: ExportRecord, field: str) -> tuple[bool, str]:
    value: Any = record.data.get(field)
    return (value is not None, "" if value is None else str(value))


def newest_first(records: Iterable[ExportRecord], field: str) -> list[ExportRecord]:
    """Order records by field, newest first; records without the field go last.

    Dates are compared in their normalized ISO-8601 form. Ties keep store order.
    """
    return sorted(records, key=lambda r: _date_key(r, field), reverse=True)


class RecordFetcher:
    """Fetch one category of records for one user.

    Failures never propagate: a failing category is logged and comes back
    empty (``()``, or None for singleton categories) so other categories
    can still be exported. A single document that cannot be converted is
    logged and left out; its siblings are kept. No retries are done here.

    List categories are queried by user only and ordered here, so documents
    missing the date field are kept and no composite index is needed.
    """

    def __init__(self, store: IRecordStore, query_limit: int | None = None) -> None:
        self._store = store
        self._query_limit = query_limit

    async def fetch(
        self, project_id: str, user_id: str, category: ExportCategory
    ) -> CategoryData:
        """Return the user's records of category, newest first (or record/None for singletons)."""
        spec = CATEGORY_SPECS[category]
        try:
            if spec.singleton:
                return await self._fetch_one(spec, project_id, user_id)
            return await self._fetch_many(spec, project_id, user_id)
        except Exception as exc:
            logger.warning(
                "Fetching %s for project=%s user=%s failed; exporting it empty: %s",
                category.value,
                project_id,
                user_id,
                exc,
                exc_info=True,
            )
            return None if spec.singleton else ()

    async def _fetch_one(
        self, spec: CategorySpec, project_id: str, user_id: str
    ) -> ExportRecord | None:
        path = spec.path(project_id, user_id)
        if not spec.project_scoped:
            doc = await self._store.get_document(path)
        else:
            docs = await self._store.query_collection(
                path,
                filters=[QueryFilter(USER_FIELD, "==", user_id)],
                limit=1,
            )
            doc = docs[0] if docs else None
        if doc is None:
            logger.debug("No %s document for user=%s", spec.category.value, user_id)
            return None
        return to_record(spec, doc)

    async def _fetch_many(
        self, spec: CategorySpec, project_id: str, user_id: str
    ) -> tuple[ExportRecord, ...]:
        path = spec.path(project_id, user_id)
        docs = await self._store.query_collection(
            path,
            filters=[QueryFilter(USER_FIELD, "==", user_id)],
            limit=self._query_limit,
        )
        if self._query_limit is not None and len(docs) >= self._query_limit:
            logger.warning(
                "%s for user=%s hit the query limit of %d; the export may be incomplete",
                path,
                user_id,
                self._query_limit,
            )
        records: list[ExportRecord] = []
        for doc in docs:
            try:
                records.append(to_record(spec, doc))
            except Exception as exc:
                logger.warning(
                    "Skipping %s/%s for user=%s: cannot normalize: %s",
                    path,
                    doc.id,
                    user_id,
                    exc,
                )
        logger.debug(
            "Found %d %s for project=%s user=%s",
            len(records),
            spec.category.value,
            project_id,
            user_id,
        )
        if spec.sort_field:
            records = newest_first(records, spec.sort_field)
        return tuple(records)
