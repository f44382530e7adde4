"""Domain enumerations for the passdesk export service.

Enums represent fixed sets of domain values (categories, formats).
"""

from enum import Enum


class ExportCategory(str, Enum):
    """Kind of exportable record set.

    ALL is synthetic: it expands to every concrete category at the
    aggregation boundary.
    """

    PROFILE = "profile"
    PROJECT_MEMBERSHIP = "projectMembership"
    GATE_PASSES = "gatePasses"
    GUEST_PASSES = "guestPasses"
    ORDERS = "orders"
    BOOKINGS = "bookings"
    ALL = "all"

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid category values as strings.

        Returns:
            List of enum value strings (e.g. for validation or serialization).
        """
        return [category.value for category in cls]

    @classmethod
    def concrete(cls) -> tuple["ExportCategory", ...]:
        """Return the fixed category list that ALL expands to, in export order."""
        return (
            cls.PROFILE,
            cls.PROJECT_MEMBERSHIP,
            cls.GATE_PASSES,
            cls.GUEST_PASSES,
            cls.ORDERS,
            cls.BOOKINGS,
        )


class ExportFormat(str, Enum):
    """Output encoding for an export file."""

    JSON = "json"
    CSV = "csv"

    @property
    def mime_type(self) -> str:
        return "application/json" if self is ExportFormat.JSON else "text/csv"

    @property
    def extension(self) -> str:
        return self.value


class SortDirection(str, Enum):
    """Store query sort direction (Firestore structuredQuery values)."""

    ASCENDING = "ASCENDING"
    DESCENDING = "DESCENDING"
