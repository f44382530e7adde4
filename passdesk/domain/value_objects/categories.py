"""Category catalogue: where each export category lives and how it is ordered.

Firestore layout:
    users/{uid}                      profile (global)
    projects/{pid}/users             project membership (one doc per user)
    projects/{pid}/gatePasses        gate passes
    projects/{pid}/guestPasses       guest passes
    projects/{pid}/orders            orders
    projects/{pid}/bookings          bookings
"""

from collections.abc import Iterable
from dataclasses import dataclass

from passdesk.domain.entities.records import RECORD_TYPES, ExportRecord
from passdesk.domain.enums import ExportCategory, ExportFormat
from passdesk.domain.exceptions import ValidationException

USER_FIELD = "userId"


@dataclass(frozen=True)
class CategorySpec:
    """Storage location, ordering and file naming of one concrete category."""

    category: ExportCategory
    collection: str
    project_scoped: bool
    singleton: bool
    sort_field: str | None
    file_slug: str

    @property
    def record_type(self) -> type[ExportRecord]:
        return RECORD_TYPES[self.category]

    def path(self, project_id: str, user_id: str | None = None) -> str:
        """Return the collection path (or document path for the global profile)."""
        if not self.project_scoped:
            return f"{self.collection}/{user_id}"
        return f"projects/{project_id}/{self.collection}"


CATEGORY_SPECS: dict[ExportCategory, CategorySpec] = {
    ExportCategory.PROFILE: CategorySpec(
        category=ExportCategory.PROFILE,
        collection="users",
        project_scoped=False,
        singleton=True,
        sort_field=None,
        file_slug="profile",
    ),
    ExportCategory.PROJECT_MEMBERSHIP: CategorySpec(
        category=ExportCategory.PROJECT_MEMBERSHIP,
        collection="users",
        project_scoped=True,
        singleton=True,
        sort_field=None,
        file_slug="project-membership",
    ),
    ExportCategory.GATE_PASSES: CategorySpec(
        category=ExportCategory.GATE_PASSES,
        collection="gatePasses",
        project_scoped=True,
        singleton=False,
        sort_field="createdAt",
        file_slug="gate-passes",
    ),
    ExportCategory.GUEST_PASSES: CategorySpec(
        category=ExportCategory.GUEST_PASSES,
        collection="guestPasses",
        project_scoped=True,
        singleton=False,
        sort_field="createdAt",
        file_slug="guest-passes",
    ),
    ExportCategory.ORDERS: CategorySpec(
        category=ExportCategory.ORDERS,
        collection="orders",
        project_scoped=True,
        singleton=False,
        sort_field="orderDate",
        file_slug="orders",
    ),
    ExportCategory.BOOKINGS: CategorySpec(
        category=ExportCategory.BOOKINGS,
        collection="bookings",
        project_scoped=True,
        singleton=False,
        sort_field="bookingDate",
        file_slug="bookings",
    ),
}

ALL_DATA_SLUG = "all-data"
SUMMARY_SLUG = "export-summary"

# Project collections scanned by the data check diagnostic.
CHECKED_COLLECTIONS: tuple[ExportCategory, ...] = (
    ExportCategory.GATE_PASSES,
    ExportCategory.GUEST_PASSES,
    ExportCategory.ORDERS,
    ExportCategory.BOOKINGS,
)


def expand_categories(
    categories: Iterable[ExportCategory],
) -> tuple[ExportCategory, ...]:
    """Expand ALL and de-duplicate, keeping the canonical category order.

    Raises:
        ValidationException: If no category is given.
    """
    requested = set(categories)
    if not requested:
        raise ValidationException("At least one category is required", field="categories")
    if ExportCategory.ALL in requested:
        return ExportCategory.concrete()
    return tuple(c for c in ExportCategory.concrete() if c in requested)


def parse_category(value: str) -> ExportCategory:
    """Return the category for a raw value; raise ValidationException if unknown."""
    try:
        return ExportCategory(value)
    except ValueError:
        raise ValidationException(
            f"Unknown data type: {value!r}. Must be one of: {', '.join(ExportCategory.values())}",
            field="category",
        ) from None


def parse_format(value: str) -> ExportFormat:
    """Return the export format for a raw value; raise ValidationException if unknown."""
    try:
        return ExportFormat(value.lower())
    except ValueError:
        raise ValidationException(
            f"Unknown export format: {value!r}. Must be 'json' or 'csv'",
            field="format",
        ) from None


def report_slug(categories: Iterable[ExportCategory]) -> str:
    """File name stem for a set of categories.

    One category uses its own slug; the full set is ``all-data``; any
    other combination joins the slugs in canonical order.
    """
    expanded = expand_categories(categories)
    if len(expanded) == 1:
        return CATEGORY_SPECS[expanded[0]].file_slug
    if expanded == ExportCategory.concrete():
        return ALL_DATA_SLUG
    return "_".join(CATEGORY_SPECS[c].file_slug for c in expanded)
