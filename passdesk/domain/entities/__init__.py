"""Domain entities: exportable record variants."""

from passdesk.domain.entities.records import (
    RECORD_TYPES,
    BookingRecord,
    ExportRecord,
    GatePassRecord,
    GuestPassRecord,
    OrderRecord,
    ProfileRecord,
    ProjectMembershipRecord,
)

__all__ = [
    "RECORD_TYPES",
    "BookingRecord",
    "ExportRecord",
    "GatePassRecord",
    "GuestPassRecord",
    "OrderRecord",
    "ProfileRecord",
    "ProjectMembershipRecord",
]
