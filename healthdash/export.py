"""
CSV projection of sleep and weight records for plotting.

The export reads a user's record file, keeps the lines that decode, and
writes ``DateTime, <value column>`` followed by one row per record to a
fixed, category-named file. The source file is only ever read.
"""
import csv
import logging
from pathlib import Path
from typing import Callable, List, NamedTuple

from healthdash import codec
from healthdash.errors import ParseError, StorageError
from healthdash.models import Category, CsvRow
from healthdash.storage.recordstore import RecordStore

logger = logging.getLogger(__name__)


class ExportFormat(NamedTuple):
    filename: str
    header: str
    value: Callable


EXPORT_FORMATS = {
    Category.SLEEP: ExportFormat(
        "sleep_data.csv",
        "DateTime, SleepDuration_minutes",
        lambda r: str(r.duration_minutes),
    ),
    Category.WEIGHT: ExportFormat(
        "weight_data.csv",
        "DateTime, Weight_kg",
        lambda r: f"{r.kilograms:.2f}",
    ),
}


class ExportResult(NamedTuple):
    path: Path
    rows: List[CsvRow]


def write_rows(path: Path, header: str, rows) -> None:
    """Write the header line and all data rows, replacing any existing file."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with path.open("w", newline="", encoding="utf-8") as csvfile:
        csvfile.write(header + "\n")
        writer = csv.writer(csvfile, lineterminator="\n")
        writer.writerows(rows)


def export(store: RecordStore, username: str, category: Category, export_dir) -> ExportResult:
    fmt = EXPORT_FORMATS.get(category)
    if fmt is None:
        raise ValueError(f"{category.value} records cannot be exported")

    # read everything first so a missing source leaves the old export alone
    rows = []
    for position, line in store.list_all(username, category):
        try:
            record, timestamp = codec.decode_with_timestamp(line, category)
        except ParseError as e:
            logger.debug("skipping line %d of %s: %s", position, category.value, e)
            continue
        # timestamp goes out as written in the source line
        rows.append(CsvRow(timestamp, fmt.value(record)))

    path = Path(export_dir) / fmt.filename
    try:
        write_rows(path, fmt.header, rows)
    except OSError as e:
        raise StorageError(f"Cannot write {path}: {e}") from e
    logger.debug("exported %d %s row(s) to %s", len(rows), category.value, path)
    return ExportResult(path, rows)
