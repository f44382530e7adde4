"""DTOs exchanged with the document store port."""

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class StoredDocument:
    """Raw document as returned by the store: id plus field map.

    Field values may include store-native timestamps (datetime).
    """

    id: str
    data: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class QueryFilter:
    """Single field filter; op uses Firestore client syntax (==, <, in, ...)."""

    field: str
    op: str
    value: Any
