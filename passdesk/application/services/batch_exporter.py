"""Batch exporter: runs export units one after another and reports each outcome."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Sequence
from datetime import datetime
from typing import Any

from passdesk.application.dtos.export import (
    AggregateResult,
    BatchSummary,
    BatchTotals,
    ExportUnit,
    UnitOutcome,
    category_data_to_plain,
)
from passdesk.application.interfaces.services import IDeliverySink
from passdesk.application.services.aggregator import UserDataAggregator
from passdesk.application.services.serializer import ExportSerializer
from passdesk.domain.enums import ExportCategory, ExportFormat
from passdesk.domain.value_objects.categories import expand_categories, report_slug
from passdesk.shared.telemetry.tracing import add_span_attributes, traced
from passdesk.shared.utils.datetime import iso_date, utc_now

logger = logging.getLogger(__name__)


def export_filename(unit: ExportUnit, when: datetime) -> str:
    """``<slug>-<YYYY-MM-DD>.<ext>``, or ``<slug>-<user_id>-<YYYY-MM-DD>.<ext>`` when embedding the user."""
    parts = [report_slug(unit.categories)]
    if unit.embed_user_id:
        parts.append(unit.user_id)
    parts.append(iso_date(when))
    return f"{'-'.join(parts)}.{unit.export_format.extension}"


def units_for_categories(
    project_id: str,
    user_id: str,
    categories: Iterable[ExportCategory],
    export_format: ExportFormat,
) -> list[ExportUnit]:
    """One user, one unit (and file) per category; ALL is expanded first."""
    return [
        ExportUnit(project_id, user_id, (category,), export_format)
        for category in expand_categories(categories)
    ]


def units_for_users(
    project_id: str,
    user_ids: Iterable[str],
    categories: Iterable[ExportCategory],
    export_format: ExportFormat,
) -> list[ExportUnit]:
    """Many users, same category set, one unit per user (file names embed the user id)."""
    selected = tuple(categories)
    return [
        ExportUnit(project_id, user_id, selected, export_format, embed_user_id=True)
        for user_id in user_ids
    ]


def unit_payload(unit: ExportUnit, result: AggregateResult) -> Any:
    """Value handed to the serializer for a unit.

    JSON always gets the whole aggregate document. CSV gets the records of
    a single-category unit, or the aggregate document as a single row.
    """
    if unit.export_format is ExportFormat.CSV and len(result.categories) == 1:
        return category_data_to_plain(result.get(result.categories[0]))
    return result.to_dict()


def unit_label(unit: ExportUnit) -> str:
    """Data type name used in the CSV placeholder line for empty exports."""
    expanded = expand_categories(unit.categories)
    if len(expanded) == 1:
        return expanded[0].value
    return ExportCategory.ALL.value


class BatchExporter:
    """Export units sequentially: aggregate, serialize, deliver.

    Units run in input order so delivered files keep that order. Any
    exception inside a unit becomes a failed outcome and the batch moves
    on to the next unit.
    """

    def __init__(
        self,
        aggregator: UserDataAggregator,
        serializer: ExportSerializer,
        sink: IDeliverySink,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._aggregator = aggregator
        self._serializer = serializer
        self._sink = sink
        self._clock = clock

    async def export_unit(self, unit: ExportUnit, skip_empty: bool = False) -> UnitOutcome:
        """Export one unit; exceptions propagate to the caller.

        With skip_empty, a unit without records delivers no file.
        """
        result = await self._aggregator.aggregate(
            unit.project_id, unit.user_id, unit.categories
        )
        record_count = result.total_records
        filename = export_filename(unit, self._clock())
        if skip_empty and record_count == 0:
            logger.info("No data for %s; skipping %s", unit.describe(), filename)
            return UnitOutcome(
                unit=unit,
                success=True,
                record_count=0,
                message="No data found",
            )

        content = self._serializer.serialize(
            unit_payload(unit, result), unit.export_format, label=unit_label(unit)
        )
        self._sink.deliver(content, filename, unit.export_format.mime_type)
        logger.info("Exported %s (%d record(s)) as %s", unit.describe(), record_count, filename)
        return UnitOutcome(
            unit=unit,
            success=True,
            record_count=record_count,
            filename=filename,
        )

    @traced("export.batch")
    async def export_batch(
        self,
        units: Sequence[ExportUnit],
        export_format: ExportFormat | None = None,
        skip_empty: bool = False,
    ) -> BatchSummary:
        """Run every unit and return one outcome per unit, in input order.

        Args:
            units: Units to export.
            export_format: Format reported in the totals; defaults to the first unit's.
            skip_empty: Do not deliver files for units without records.

        Returns:
            BatchSummary whose totals sum the successful outcomes.
        """
        outcomes: list[UnitOutcome] = []
        for unit in units:
            try:
                outcome = await self.export_unit(unit, skip_empty=skip_empty)
            except Exception as exc:
                logger.exception("Export of %s failed", unit.describe())
                outcome = UnitOutcome(unit=unit, success=False, error=str(exc) or type(exc).__name__)
            outcomes.append(outcome)

        if export_format is None:
            export_format = units[0].export_format if units else ExportFormat.JSON
        succeeded = [o for o in outcomes if o.success]
        totals = BatchTotals(
            total_files=sum(o.file_count for o in succeeded),
            total_records=sum(o.record_count for o in succeeded),
            export_format=export_format,
        )
        add_span_attributes(
            unit_count=len(outcomes),
            failed_count=len(outcomes) - len(succeeded),
            total_records=totals.total_records,
        )
        logger.info(
            "Batch export finished: %d unit(s), %d failed, %d file(s), %d record(s)",
            len(outcomes),
            len(outcomes) - len(succeeded),
            totals.total_files,
            totals.total_records,
        )
        return BatchSummary(
            outcomes=tuple(outcomes),
            totals=totals,
            export_date=self._clock(),
        )
