"""Exportable record entities, one variant per category.

Every document field (known or not) is kept in ``data`` in store order so
exports never drop unknown fields. Variants add accessors for the fields
the service reads.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, ClassVar

from passdesk.domain.enums import ExportCategory


@dataclass(frozen=True)
class ExportRecord:
    """A single normalized document from the store.

    ``data`` holds the document fields with timestamps already converted
    to ISO-8601 strings; nested maps and lists are kept as-is.
    """

    category: ClassVar[ExportCategory]

    id: str
    data: Mapping[str, Any] = field(default_factory=dict)

    @property
    def user_id(self) -> str | None:
        return self.data.get("userId")

    @property
    def created_at(self) -> str | None:
        return self.data.get("createdAt")

    def to_dict(self) -> dict[str, Any]:
        """Return the export shape: ``id`` first, then document fields in order.

        A document field literally named ``id`` overrides the document id.
        """
        return {"id": self.id, **self.data}


@dataclass(frozen=True)
class GatePassRecord(ExportRecord):
    """Gate pass issued to a resident (projects/{pid}/gatePasses)."""

    category: ClassVar[ExportCategory] = ExportCategory.GATE_PASSES


@dataclass(frozen=True)
class GuestPassRecord(ExportRecord):
    """Guest pass created by a resident for a visitor (projects/{pid}/guestPasses)."""

    category: ClassVar[ExportCategory] = ExportCategory.GUEST_PASSES

    @property
    def valid_from(self) -> str | None:
        return self.data.get("validFrom")


@dataclass(frozen=True)
class OrderRecord(ExportRecord):
    """Store order or purchase (projects/{pid}/orders)."""

    category: ClassVar[ExportCategory] = ExportCategory.ORDERS


@dataclass(frozen=True)
class BookingRecord(ExportRecord):
    """Court, academy or service booking (projects/{pid}/bookings)."""

    category: ClassVar[ExportCategory] = ExportCategory.BOOKINGS


@dataclass(frozen=True)
class ProfileRecord(ExportRecord):
    """Global user profile (users/{uid}); not scoped to a project."""

    category: ClassVar[ExportCategory] = ExportCategory.PROFILE

    @property
    def user_id(self) -> str | None:
        return self.id

    @property
    def email(self) -> str | None:
        return self.data.get("email")

    @property
    def first_name(self) -> str | None:
        return self.data.get("firstName")

    @property
    def last_name(self) -> str | None:
        return self.data.get("lastName")


@dataclass(frozen=True)
class ProjectMembershipRecord(ExportRecord):
    """A user's membership document inside a project (projects/{pid}/users)."""

    category: ClassVar[ExportCategory] = ExportCategory.PROJECT_MEMBERSHIP

    @property
    def user_id(self) -> str | None:
        """Member id: the ``userId`` field, or the document id when it is unset."""
        return self.data.get("userId") or self.id


RECORD_TYPES: dict[ExportCategory, type[ExportRecord]] = {
    record_type.category: record_type
    for record_type in (
        ProfileRecord,
        ProjectMembershipRecord,
        GatePassRecord,
        GuestPassRecord,
        OrderRecord,
        BookingRecord,
    )
}
