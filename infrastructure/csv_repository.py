"""CSV persistence for location logs.

Each log is a headerless CSV with rows ``<YYYYMMDD_HHMMSS>,<latitude>,<longitude>``.
Appends open, write, flush, fsync and close the file so every record is on disk
before the call returns.
"""

from __future__ import annotations

from collections.abc import Iterator
import csv
import os
from pathlib import Path

from loguru import logger

from core.errors import StorageFailure
from core.models import LocationRecord
from infrastructure.utils import format_coordinate, parse_timestamp


class CsvLocationRepository:
    """Create, append to, and read back location log files."""

    def create(self, csv_path: str | Path) -> Path:
        """Create an empty log at `csv_path`; an existing file is never truncated."""
        path = Path(csv_path)
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.touch(exist_ok=True)
        except OSError as ex:
            raise StorageFailure(f"Cannot create location log ({ex})", path) from ex
        return path

    def append(self, csv_path: str | Path, record: LocationRecord) -> None:
        """Append one record and flush it to disk."""
        path = Path(csv_path)
        row = [
            record.timestamp,
            format_coordinate(record.latitude),
            format_coordinate(record.longitude),
        ]
        try:
            with path.open("a", encoding="utf-8", newline="") as f:
                writer = csv.writer(f, lineterminator="\n")
                writer.writerow(row)
                f.flush()
                os.fsync(f.fileno())
        except OSError as ex:
            raise StorageFailure(f"Cannot append location record ({ex})", path) from ex

    def load(self, csv_path: str | Path) -> Iterator[LocationRecord]:
        """Yield `LocationRecord` rows from `csv_path`, skipping malformed ones."""
        path = Path(csv_path)
        with path.open("r", encoding="utf-8", newline="") as f:
            reader = csv.reader(f)
            for line_no, row in enumerate(reader, start=1):
                try:
                    if len(row) != 3 or parse_timestamp(row[0]) is None:
                        raise ValueError("expected <timestamp>,<lat>,<lng>")
                    yield LocationRecord(
                        timestamp=row[0], latitude=float(row[1]), longitude=float(row[2])
                    )
                except (ValueError, TypeError) as ex:
                    logger.error("CSV row error in {} line {}: {} | row={}", path, line_no, ex, row)
                    continue
