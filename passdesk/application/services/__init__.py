"""Export engine services: fetcher, aggregator, serializer, batch exporter."""

from passdesk.application.services.aggregator import UserDataAggregator
from passdesk.application.services.batch_exporter import (
    BatchExporter,
    export_filename,
    units_for_categories,
    units_for_users,
)
from passdesk.application.services.record_fetcher import RecordFetcher
from passdesk.application.services.serializer import ExportSerializer

__all__ = [
    "BatchExporter",
    "ExportSerializer",
    "RecordFetcher",
    "UserDataAggregator",
    "export_filename",
    "units_for_categories",
    "units_for_users",
]
