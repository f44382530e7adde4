"""Domain value objects: category catalogue and parsing helpers."""

from passdesk.domain.value_objects.categories import (
    CATEGORY_SPECS,
    CategorySpec,
    expand_categories,
    parse_category,
    parse_format,
    report_slug,
)

__all__ = [
    "CATEGORY_SPECS",
    "CategorySpec",
    "expand_categories",
    "parse_category",
    "parse_format",
    "report_slug",
]
