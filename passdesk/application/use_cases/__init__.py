"""Use cases exposed to the API layer."""

from passdesk.application.use_cases.data_export import DataExportService

__all__ = ["DataExportService"]
