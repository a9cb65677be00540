"""CSV import of coverage area exports.

Expected header (extra columns are ignored)::

    id,division,city,city_id,zone,zone_id,area,area_id,inside_dhaka_flag

Rows without an area are skipped. Rows that fail CoverageArea validation are
reported in ``ImportResult.errors`` or, when ``skip_invalid`` is False, abort
the import with IngestionError.
"""

import csv
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from pydantic import ValidationError

from coverage_resolver.domain.models import CoverageArea
from coverage_resolver.logging import get_logger

logger = get_logger(__name__, component="ingestion")

COVERAGE_COLUMNS = (
    "id",
    "division",
    "city",
    "city_id",
    "zone",
    "zone_id",
    "area",
    "area_id",
    "inside_dhaka_flag",
)

_TRUE_VALUES = frozenset({"true", "yes", "1", "y", "t"})
_FALSE_VALUES = frozenset({"false", "no", "0", "n", "f", ""})


class IngestionError(Exception):
    """Raised when a coverage CSV cannot be read or contains an invalid row."""

    def __init__(self, message: str, row_number: Optional[int] = None):
        super().__init__(message)
        self.row_number = row_number


@dataclass(frozen=True)
class RowError:
    """Validation failure for one CSV row (1-based, header is row 1)."""

    row_number: int
    message: str


@dataclass
class ImportResult:
    """Outcome of reading one CSV file."""

    records: List[CoverageArea] = field(default_factory=list)
    skipped: int = 0
    errors: List[RowError] = field(default_factory=list)

    @property
    def imported(self) -> int:
        return len(self.records)

    @property
    def had_errors(self) -> bool:
        return bool(self.errors)


def parse_flag(value: Optional[str]) -> bool:
    """Parse a boolean CSV cell (true/false, yes/no, 1/0; blank is False).

    Raises:
        ValueError: If the value is not a recognised boolean
    """
    normalized = (value or "").strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"Invalid inside_dhaka_flag value: {value!r}")


def _row_to_fields(row: Dict[str, Optional[str]]) -> Dict[str, object]:
    fields: Dict[str, object] = {}
    for column in COVERAGE_COLUMNS:
        raw = row.get(column)
        value = raw.strip() if isinstance(raw, str) else raw

        if column == "inside_dhaka_flag":
            fields[column] = parse_flag(value)
        else:
            # blank numeric cells become None rather than failing int parsing
            fields[column] = value or None
    return fields


def read_coverage_csv(path: Union[str, Path], skip_invalid: bool = True) -> ImportResult:
    """Read coverage records from a CSV file.

    Args:
        path: CSV file with a header row
        skip_invalid: Collect invalid rows in ``errors`` instead of raising

    Returns:
        ImportResult with records in file order

    Raises:
        IngestionError: If the file cannot be read, has no ``area`` column,
            or contains an invalid row while ``skip_invalid`` is False
    """
    csv_path = Path(path)
    result = ImportResult()

    try:
        with open(csv_path, "r", encoding="utf-8-sig", newline="") as f:
            reader = csv.DictReader(f)
            if not reader.fieldnames or "area" not in reader.fieldnames:
                raise IngestionError(f"{csv_path} has no 'area' column in its header")

            for row_number, row in enumerate(reader, start=2):
                if not (row.get("area") or "").strip():
                    result.skipped += 1
                    continue

                try:
                    record = CoverageArea(**_row_to_fields(row))
                except (ValidationError, ValueError) as e:
                    message = str(e).splitlines()[0] if str(e) else type(e).__name__
                    if not skip_invalid:
                        raise IngestionError(
                            f"Invalid row {row_number} in {csv_path}: {e}", row_number=row_number
                        ) from e
                    logger.warning(
                        f"Skipping invalid row {row_number}: {message}",
                        extra={"event": "ingestion.csv.row_invalid", "row_number": row_number},
                    )
                    result.errors.append(RowError(row_number=row_number, message=str(e)))
                    continue

                result.records.append(record)

    except OSError as e:
        raise IngestionError(f"Failed to read coverage CSV {csv_path}: {e}") from e
    except csv.Error as e:
        raise IngestionError(f"Malformed coverage CSV {csv_path}: {e}") from e

    logger.info(
        f"Read {result.imported} coverage areas from {csv_path.name}",
        extra={
            "event": "ingestion.csv.completed",
            "path": str(csv_path),
            "imported": result.imported,
            "skipped": result.skipped,
            "error_count": len(result.errors),
        },
    )
    return result
