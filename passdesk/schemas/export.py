"""Export API schemas."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from passdesk.application.dtos.export import (
    BatchSummary,
    CollectionCheck,
    ProjectUser,
    UnitOutcome,
)
from passdesk.domain.enums import ExportCategory, ExportFormat


class SeparateExportRequest(BaseModel):
    """Request body for POST /exports/separate."""

    format: ExportFormat = ExportFormat.JSON
    categories: list[ExportCategory] | None = Field(
        default=None, description="Categories to export; all when omitted"
    )


class UsersExportRequest(BaseModel):
    """Request body for POST /exports/users."""

    user_ids: list[str] = Field(..., min_length=1)
    format: ExportFormat = ExportFormat.JSON
    categories: list[ExportCategory] = Field(default_factory=lambda: [ExportCategory.ALL])

    @field_validator("user_ids")
    @classmethod
    def strip_user_ids(cls, v: list[str]) -> list[str]:
        return [u.strip() for u in v if u and u.strip()]


class ProjectUserResponse(BaseModel):
    """A project member selectable for export."""

    id: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    display_name: str

    @classmethod
    def from_user(cls, user: ProjectUser) -> ProjectUserResponse:
        return cls(
            id=user.id,
            email=user.email,
            first_name=user.first_name,
            last_name=user.last_name,
            display_name=user.display_name,
        )


class UnitOutcomeResponse(BaseModel):
    """Outcome of one export unit."""

    user_id: str
    categories: list[ExportCategory]
    success: bool
    record_count: int
    filename: str | None = None
    error: str | None = None
    message: str | None = None

    @classmethod
    def from_outcome(cls, outcome: UnitOutcome) -> UnitOutcomeResponse:
        return cls(
            user_id=outcome.unit.user_id,
            categories=list(outcome.unit.categories),
            success=outcome.success,
            record_count=outcome.record_count,
            filename=outcome.filename,
            error=outcome.error,
            message=outcome.message,
        )


class BatchSummaryResponse(BaseModel):
    """Response for batch exports: per-unit outcomes plus totals."""

    export_date: str
    format: ExportFormat
    total_files: int
    total_records: int
    failed: int
    results: list[UnitOutcomeResponse]

    @classmethod
    def from_summary(cls, summary: BatchSummary) -> BatchSummaryResponse:
        body = summary.to_dict()
        return cls(
            export_date=body["exportDate"],
            format=summary.totals.export_format,
            total_files=summary.totals.total_files,
            total_records=summary.totals.total_records,
            failed=len(summary.failed),
            results=[UnitOutcomeResponse.from_outcome(o) for o in summary.outcomes],
        )


class CollectionCheckResponse(BaseModel):
    """Document counts of one project collection."""

    total: int
    user_specific: int
    error: str | None = None

    @classmethod
    def from_check(cls, check: CollectionCheck) -> CollectionCheckResponse:
        return cls(total=check.total, user_specific=check.user_specific, error=check.error)


class ProjectDataCheckResponse(BaseModel):
    """Response for GET /exports/check."""

    project_id: str
    user_id: str
    collections: dict[str, CollectionCheckResponse]
