"""Aggregator: all requested categories for one user, fetched concurrently."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from datetime import datetime

from passdesk.application.dtos.export import (
    AggregateResult,
    CategoryData,
    ExportMetadata,
    count_records,
)
from passdesk.application.services.record_fetcher import RecordFetcher
from passdesk.domain.enums import ExportCategory
from passdesk.domain.value_objects.categories import CATEGORY_SPECS, expand_categories
from passdesk.shared.telemetry.tracing import add_span_attributes, traced
from passdesk.shared.utils.concurrency import settle_all
from passdesk.shared.utils.datetime import utc_now

logger = logging.getLogger(__name__)


class UserDataAggregator:
    """Combine one user's categories into an AggregateResult.

    Fetches run concurrently and are joined with settle_all: the result is
    built only after every fetch has finished, and one failing fetch never
    cancels the others.
    """

    def __init__(
        self,
        fetcher: RecordFetcher,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._fetcher = fetcher
        self._clock = clock

    @traced("export.aggregate")
    async def aggregate(
        self,
        project_id: str,
        user_id: str,
        categories: Iterable[ExportCategory],
    ) -> AggregateResult:
        """Fetch every requested category (ALL expanded) and attach metadata."""
        selected = expand_categories(categories)
        outcomes = await settle_all(
            self._fetcher.fetch(project_id, user_id, category) for category in selected
        )

        data: dict[ExportCategory, CategoryData] = {}
        for category, outcome in zip(selected, outcomes):
            if outcome.ok:
                data[category] = outcome.value
                continue
            # RecordFetcher already downgrades its own errors; anything here is unexpected.
            logger.warning(
                "Unexpected failure aggregating %s for user=%s: %s",
                category.value,
                user_id,
                outcome.error,
            )
            data[category] = None if CATEGORY_SPECS[category].singleton else ()

        metadata = ExportMetadata(
            export_date=self._clock(),
            project_id=project_id,
            user_id=user_id,
            data_types={c: count_records(data[c]) for c in selected},
        )
        result = AggregateResult(categories=selected, data=data, metadata=metadata)
        add_span_attributes(record_count=result.total_records)
        logger.info(
            "Aggregated %d record(s) across %d categories for project=%s user=%s",
            result.total_records,
            len(selected),
            project_id,
            user_id,
        )
        return result
