"""Persistence layer for the coverage dataset.

Public API:
    # Database initialization and session management
    - init_database(database_url: str) -> None
    - get_session() -> ContextManager[Session]
    - close_database() -> None
    - get_engine() -> Engine

    # Repository
    - CoverageAreaRepository: dataset loading, upserts and catalog lookups

    # Exceptions
    - PersistenceError: Base exception for all persistence errors
    - DatabaseConnectionError: Database connection/initialization failures
    - RecordNotFoundError: Required record not found
    - DataIntegrityError: Constraint violations

Example usage:
    >>> from coverage_resolver.persistence import init_database, get_session, CoverageAreaRepository
    >>>
    >>> init_database("sqlite:///./data/coverage.db")
    >>>
    >>> with get_session() as session:
    ...     records = CoverageAreaRepository(session).list_all()
"""

from .database import close_database, get_engine, get_session, init_database
from .exceptions import (
    DatabaseConnectionError,
    DataIntegrityError,
    PersistenceError,
    RecordNotFoundError,
)
from .repositories import CoverageAreaRepository

__all__ = [
    # Database functions
    "init_database",
    "get_session",
    "close_database",
    "get_engine",
    # Repository
    "CoverageAreaRepository",
    # Exceptions
    "PersistenceError",
    "DatabaseConnectionError",
    "RecordNotFoundError",
    "DataIntegrityError",
]
