"""Export serializer: JSON documents and CSV tables.

JSON output is indented by two spaces and round-trips through json.loads.

CSV output takes its header from the first row only. Rows missing a
header field get an empty cell; fields that appear only on later rows are
not exported. Nested maps and lists are written as their JSON encoding,
always quoted. Strings are quoted when they contain a comma, quote, or
line break, with embedded quotes doubled.
"""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from datetime import date, datetime
from typing import Any

from passdesk.domain.enums import ExportFormat
from passdesk.domain.exceptions import SerializationException
from passdesk.shared.utils.datetime import to_iso_string

CSV_SEPARATOR = ","
CSV_QUOTE = '"'
CSV_LINE_END = "\n"
_NEEDS_QUOTING = (CSV_SEPARATOR, CSV_QUOTE, "\n", "\r")

SUMMARY_HEADERS = ("Data Type", "Records Found", "Status", "File Name")


def _json_default(value: Any) -> Any:
    if isinstance(value, (datetime, date)):
        return to_iso_string(value)
    if isinstance(value, (set, frozenset, tuple)):
        return list(value)
    raise TypeError(f"Object of type {type(value).__name__} is not JSON serializable")


def to_json(value: Any) -> str:
    """Encode value as indented JSON.

    Raises:
        SerializationException: For cyclic structures or unsupported types.
    """
    try:
        return json.dumps(value, indent=2, ensure_ascii=False, default=_json_default)
    except (TypeError, ValueError, RecursionError) as exc:
        raise SerializationException(ExportFormat.JSON.value, str(exc)) from exc


def _quote(text: str) -> str:
    return CSV_QUOTE + text.replace(CSV_QUOTE, CSV_QUOTE * 2) + CSV_QUOTE


def render_cell(value: Any) -> str:
    """Render one CSV cell."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (Mapping, list, tuple)):
        return _quote(json.dumps(value, ensure_ascii=False, default=_json_default))
    if isinstance(value, (datetime, date)):
        return to_iso_string(value)
    text = str(value)
    if any(ch in text for ch in _NEEDS_QUOTING):
        return _quote(text)
    return text


def to_csv(rows: Any, label: str = "records") -> str:
    """Encode a sequence of records (or a single record) as CSV.

    Args:
        rows: Sequence of mappings, a single mapping, or None.
        label: Data type named in the placeholder line for empty input.

    Returns:
        CSV text, or ``No <label> data found`` when there are no rows.

    Raises:
        SerializationException: If rows are not mappings or a value cannot be encoded.
    """
    if rows is None:
        rows = []
    elif isinstance(rows, Mapping):
        rows = [rows]
    if not rows:
        return f"No {label} data found"
    if not all(isinstance(row, Mapping) for row in rows):
        raise SerializationException(
            ExportFormat.CSV.value, "tabular export needs a sequence of records"
        )

    headers = list(rows[0].keys())
    lines = [CSV_SEPARATOR.join(render_cell(h) for h in headers)]
    try:
        for row in rows:
            lines.append(CSV_SEPARATOR.join(render_cell(row.get(h)) for h in headers))
    except (TypeError, ValueError, RecursionError) as exc:
        raise SerializationException(ExportFormat.CSV.value, str(exc)) from exc
    return CSV_LINE_END.join(lines)


def summary_to_csv(summary: Mapping[str, Any]) -> str:
    """Render a batch summary dict as a readable CSV report.

    A few ``Key: value`` lines, a blank line, then one row per exported unit.
    """
    lines = [
        "Export Summary",
        f"Export Date: {summary.get('exportDate', '')}",
        f"Project ID: {summary.get('projectId', '')}",
        f"User ID: {summary.get('userId', '')}",
        f"Total Files: {summary.get('totalFiles', 0)}",
        f"Total Records: {summary.get('totalRecords', 0)}",
        "",
        CSV_SEPARATOR.join(SUMMARY_HEADERS),
    ]
    for result in summary.get("results", []):
        lines.append(
            CSV_SEPARATOR.join(
                render_cell(v)
                for v in (
                    result.get("dataType"),
                    result.get("recordCount") or 0,
                    "Success" if result.get("success") else "Failed",
                    result.get("filename") or "N/A",
                )
            )
        )
    return CSV_LINE_END.join(lines)


class ExportSerializer:
    """Encode export payloads in the requested format."""

    def serialize(
        self, value: Any, export_format: ExportFormat, label: str = "records"
    ) -> str:
        """Return value encoded as JSON or CSV (see module docstring for CSV rules)."""
        if export_format is ExportFormat.CSV:
            if isinstance(value, Sequence) and not isinstance(value, (str, list)):
                value = list(value)
            return to_csv(value, label)
        return to_json(value)

    def serialize_summary(self, summary: Mapping[str, Any], export_format: ExportFormat) -> str:
        if export_format is ExportFormat.CSV:
            return summary_to_csv(summary)
        return to_json(summary)
