"""Domain layer: record entities, category catalogue, enums, and exceptions.

No dependencies on infrastructure or presentation. Used by application
and infrastructure layers.
"""

from passdesk.domain.entities import ExportRecord
from passdesk.domain.enums import ExportCategory, ExportFormat, SortDirection
from passdesk.domain.exceptions import (
    DeliveryException,
    FetchException,
    NoProjectSelectedException,
    NotAuthenticatedException,
    PassdeskException,
    SerializationException,
    StoreUnavailableException,
    ValidationException,
)

__all__ = [
    # Entities
    "ExportRecord",
    # Enums
    "ExportCategory",
    "ExportFormat",
    "SortDirection",
    # Exceptions
    "DeliveryException",
    "FetchException",
    "NoProjectSelectedException",
    "NotAuthenticatedException",
    "PassdeskException",
    "SerializationException",
    "StoreUnavailableException",
    "ValidationException",
]
