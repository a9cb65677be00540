"""Loading coverage records from CSV exports."""

from .csv_importer import (
    COVERAGE_COLUMNS,
    ImportResult,
    IngestionError,
    RowError,
    parse_flag,
    read_coverage_csv,
)

__all__ = [
    "COVERAGE_COLUMNS",
    "ImportResult",
    "IngestionError",
    "RowError",
    "parse_flag",
    "read_coverage_csv",
]
