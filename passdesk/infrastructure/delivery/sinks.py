"""Delivery sinks for export files.

MemoryDeliverySink keeps files in order (HTTP downloads, tests).
DirectoryDeliverySink writes them under a root directory with atomic writes.
"""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from passdesk.application.dtos.export import DeliveredFile
from passdesk.domain.exceptions import DeliveryException

logger = logging.getLogger(__name__)


class MemoryDeliverySink:
    """Collect delivered files in memory, in delivery order."""

    def __init__(self) -> None:
        self.files: list[DeliveredFile] = []

    def deliver(self, content: str, filename: str, mime_type: str) -> None:
        self.files.append(DeliveredFile(content, filename, mime_type))

    @property
    def filenames(self) -> list[str]:
        return [f.filename for f in self.files]

    def first(self) -> DeliveredFile | None:
        return self.files[0] if self.files else None


class DirectoryDeliverySink:
    """Write export files under a root directory (UTF-8, temp file + rename).

    File names are validated against the root; an existing file of the same
    name is replaced.
    """

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory).expanduser().resolve()
        self.written: list[Path] = []

    def _target(self, filename: str) -> Path:
        target = (self.directory / filename).resolve()
        try:
            target.relative_to(self.directory)
        except ValueError as e:
            raise DeliveryException(filename, "path escapes output directory") from e
        return target

    def deliver(self, content: str, filename: str, mime_type: str) -> None:
        target = self._target(filename)
        try:
            self.directory.mkdir(parents=True, exist_ok=True, mode=0o750)
            fd, tmp = tempfile.mkstemp(dir=self.directory, prefix=".", suffix=".tmp")
            try:
                with os.fdopen(fd, "w", encoding="utf-8", newline="") as f:
                    f.write(content)
                os.replace(tmp, target)
            except BaseException:
                Path(tmp).unlink(missing_ok=True)
                raise
        except OSError as e:
            raise DeliveryException(filename, str(e)) from e
        self.written.append(target)
        logger.info("Wrote %s (%s, %d chars)", target, mime_type, len(content))
