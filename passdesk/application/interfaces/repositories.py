"""Store interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
All types reference application DTOs only; no infrastructure imports.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Protocol

from passdesk.domain.enums import SortDirection

if TYPE_CHECKING:
    from passdesk.application.dtos.store import QueryFilter, StoredDocument


class IRecordStore(Protocol):
    """Protocol for the read-only document store used by exports.

    Implementations are shared across concurrent fetches and must not hold
    per-call state. Failures surface as exceptions (FetchException preferred).
    """

    async def query_collection(
        self,
        path: str,
        filters: Sequence[QueryFilter] = (),
        sort_field: str | None = None,
        sort_direction: SortDirection = SortDirection.DESCENDING,
        limit: int | None = None,
    ) -> list[StoredDocument]:
        """Return documents of the collection at path matching all filters, in sort order."""

    async def get_document(self, path: str) -> StoredDocument | None:
        """Return the document at path, or None if it does not exist."""

    async def count(self, path: str, filters: Sequence[QueryFilter] = ()) -> int:
        """Return the number of documents in the collection matching all filters."""
