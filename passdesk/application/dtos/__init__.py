"""Application DTOs: store documents and export results."""

from passdesk.application.dtos.export import (
    AggregateResult,
    BatchSummary,
    BatchTotals,
    CollectionCheck,
    DeliveredFile,
    ExportMetadata,
    ExportUnit,
    ProjectUser,
    UnitOutcome,
)
from passdesk.application.dtos.store import QueryFilter, StoredDocument

__all__ = [
    "AggregateResult",
    "BatchSummary",
    "BatchTotals",
    "CollectionCheck",
    "DeliveredFile",
    "ExportMetadata",
    "ExportUnit",
    "ProjectUser",
    "QueryFilter",
    "StoredDocument",
    "UnitOutcome",
]
