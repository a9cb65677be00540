"""Persistence layer exceptions.

All persistence exceptions inherit from PersistenceError so callers can catch
every database failure with a single except clause.
"""


class PersistenceError(Exception):
    """Base exception for all persistence layer errors."""

    pass


class DatabaseConnectionError(PersistenceError):
    """Raised when database connection or initialization fails.

    Examples:
    - Invalid database URL format
    - Database file not accessible
    - Database used before init_database() was called
    """

    pass


class RecordNotFoundError(PersistenceError):
    """Raised when a required coverage record is not found.

    Optional lookups such as CoverageAreaRepository.get_by_id() return None
    instead of raising this.
    """

    pass


class DataIntegrityError(PersistenceError):
    """Raised when a database constraint is violated.

    Examples:
    - Two rows with the same (city_id, zone_id, area_id) triple
    - Missing area on insert
    """

    pass
