"""DTOs for user data export: units of work, aggregate results, batch summaries.

All objects are immutable; each export call builds fresh instances.
Serialized shapes (``to_dict``) use camelCase keys, matching the field
names of the exported documents.
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Union

from passdesk.domain.entities.records import ExportRecord
from passdesk.domain.enums import ExportCategory, ExportFormat
from passdesk.shared.utils.datetime import to_iso_string

# A singleton category resolves to one record or None; the others to a tuple.
CategoryData = Union[ExportRecord, None, tuple[ExportRecord, ...]]


def count_records(data: CategoryData) -> int:
    """Number of records in one category's data (singletons count 1 or 0)."""
    if data is None:
        return 0
    if isinstance(data, tuple):
        return len(data)
    return 1


def category_data_to_plain(data: CategoryData) -> list[dict[str, Any]] | dict[str, Any] | None:
    """Convert one category's data to plain dicts/lists for serialization."""
    if data is None:
        return None
    if isinstance(data, tuple):
        return [record.to_dict() for record in data]
    return data.to_dict()


@dataclass(frozen=True)
class ExportUnit:
    """One export request: a user's categories in a project, in one format.

    ``embed_user_id`` puts the user id in the file name (multi-user batches).
    """

    project_id: str
    user_id: str
    categories: tuple[ExportCategory, ...]
    export_format: ExportFormat = ExportFormat.JSON
    embed_user_id: bool = False

    def describe(self) -> str:
        return f"{self.user_id}:{'+'.join(c.value for c in self.categories)}"

    def to_dict(self) -> dict[str, Any]:
        return {
            "projectId": self.project_id,
            "userId": self.user_id,
            "categories": [c.value for c in self.categories],
            "format": self.export_format.value,
        }


@dataclass(frozen=True)
class ExportMetadata:
    """Export timestamp, source ids, and record count per category."""

    export_date: datetime
    project_id: str
    user_id: str
    data_types: Mapping[ExportCategory, int]

    def to_dict(self) -> dict[str, Any]:
        return {
            "exportDate": to_iso_string(self.export_date),
            "projectId": self.project_id,
            "userId": self.user_id,
            "dataTypes": {c.value: n for c, n in self.data_types.items()},
        }


@dataclass(frozen=True)
class AggregateResult:
    """All selected categories' data for one user, plus export metadata.

    Every selected category has a key in ``data`` even when its fetch
    failed or found nothing (empty tuple, or None for singletons).
    """

    categories: tuple[ExportCategory, ...]
    data: Mapping[ExportCategory, CategoryData]
    metadata: ExportMetadata

    def get(self, category: ExportCategory) -> CategoryData:
        return self.data[category]

    def record_count(self, category: ExportCategory) -> int:
        return count_records(self.data[category])

    @property
    def total_records(self) -> int:
        return sum(self.record_count(c) for c in self.categories)

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            c.value: category_data_to_plain(self.data[c]) for c in self.categories
        }
        out["exportMetadata"] = self.metadata.to_dict()
        return out


@dataclass(frozen=True)
class UnitOutcome:
    """Result of one export unit inside a batch."""

    unit: ExportUnit
    success: bool
    record_count: int = 0
    filename: str | None = None
    error: str | None = None
    message: str | None = None

    @property
    def file_count(self) -> int:
        return 1 if self.success and self.filename else 0

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {
            "unit": self.unit.describe(),
            "userId": self.unit.user_id,
            "dataType": "+".join(c.value for c in self.unit.categories),
            "success": self.success,
            "recordCount": self.record_count,
            "filename": self.filename,
        }
        if self.error is not None:
            out["error"] = self.error
        if self.message is not None:
            out["message"] = self.message
        return out


@dataclass(frozen=True)
class BatchTotals:
    """Sums over successful outcomes of a batch."""

    total_files: int
    total_records: int
    export_format: ExportFormat


@dataclass(frozen=True)
class BatchSummary:
    """Ordered per-unit outcomes of a batch plus aggregate totals."""

    outcomes: tuple[UnitOutcome, ...]
    totals: BatchTotals
    export_date: datetime

    @classmethod
    def merge(cls, summaries: Sequence["BatchSummary"]) -> "BatchSummary":
        """Combine consecutive batches into one summary (date and format of the first)."""
        if not summaries:
            raise ValueError("Nothing to merge")
        first = summaries[0]
        return cls(
            outcomes=tuple(o for s in summaries for o in s.outcomes),
            totals=BatchTotals(
                total_files=sum(s.totals.total_files for s in summaries),
                total_records=sum(s.totals.total_records for s in summaries),
                export_format=first.totals.export_format,
            ),
            export_date=first.export_date,
        )

    @property
    def succeeded(self) -> tuple[UnitOutcome, ...]:
        return tuple(o for o in self.outcomes if o.success)

    @property
    def failed(self) -> tuple[UnitOutcome, ...]:
        return tuple(o for o in self.outcomes if not o.success)

    def to_dict(self) -> dict[str, Any]:
        return {
            "exportDate": to_iso_string(self.export_date),
            "format": self.totals.export_format.value,
            "results": [o.to_dict() for o in self.outcomes],
            "totalFiles": self.totals.total_files,
            "totalRecords": self.totals.total_records,
        }


@dataclass(frozen=True)
class DeliveredFile:
    """One file handed to a delivery sink."""

    content: str
    filename: str
    mime_type: str


@dataclass(frozen=True)
class CollectionCheck:
    """Data check for one project collection: total docs and docs owned by the user."""

    total: int = 0
    user_specific: int = 0
    error: str | None = None

    def to_dict(self) -> dict[str, Any]:
        out: dict[str, Any] = {"total": self.total, "userSpecific": self.user_specific}
        if self.error is not None:
            out["error"] = self.error
        return out


@dataclass(frozen=True)
class ProjectUser:
    """A project member selectable for export (membership merged with profile)."""

    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None

    @property
    def display_name(self) -> str:
        if self.first_name and self.last_name:
            return f"{self.first_name} {self.last_name}"
        return self.email or self.id
