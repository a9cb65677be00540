"""Configuration schema models using Pydantic."""

from enum import Enum
from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field, field_validator, model_validator


class DatasetSource(str, Enum):
    """Where the reference coverage dataset is loaded from."""

    DATABASE = "database"
    CSV = "csv"


class LogLevel(str, Enum):
    """Logging levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class LogFormat(str, Enum):
    """Log output formats."""

    JSON = "json"
    KEY_VALUE = "key-value"


class DatasetConfig(BaseModel):
    """Reference dataset settings."""

    source: DatasetSource = Field(
        DatasetSource.DATABASE, description="Load coverage areas from the database or a CSV file"
    )
    csv_path: Optional[Path] = Field(None, description="CSV file used when source is 'csv'")
    skip_invalid_rows: bool = Field(
        True, description="Skip CSV rows that fail validation instead of aborting"
    )

    @model_validator(mode="after")
    def validate_csv_path(self):
        """A CSV source needs a path."""
        if self.source == DatasetSource.CSV and self.csv_path is None:
            raise ValueError("dataset.csv_path is required when dataset.source is 'csv'")
        return self

    model_config = {"use_enum_values": True}


class LoggingConfig(BaseModel):
    """Logging configuration."""

    level: LogLevel = Field(LogLevel.INFO, description="Log level")
    format: LogFormat = Field(
        LogFormat.KEY_VALUE, description="Log output format (json or key-value)"
    )

    model_config = {"use_enum_values": True}


class CatalogConfig(BaseModel):
    """Limits for catalog search and suggest lookups."""

    search_limit: int = Field(50, ge=1, le=500, description="Maximum rows returned by search")
    suggest_default_limit: int = Field(
        20, ge=1, description="Suggestions returned when the caller gives no limit"
    )
    suggest_max_limit: int = Field(
        100, ge=1, le=100, description="Upper bound for caller-supplied suggest limits"
    )

    @model_validator(mode="after")
    def validate_suggest_limits(self):
        """Default suggest limit must not exceed the maximum."""
        if self.suggest_default_limit > self.suggest_max_limit:
            raise ValueError(
                f"suggest_default_limit ({self.suggest_default_limit}) cannot exceed "
                f"suggest_max_limit ({self.suggest_max_limit})"
            )
        return self

    def clamp_suggest_limit(self, limit: Optional[int]) -> int:
        """Apply the default when no limit is given and cap it at the maximum."""
        if limit is None:
            return self.suggest_default_limit
        return max(1, min(limit, self.suggest_max_limit))

    def clamp_search_limit(self, limit: Optional[int]) -> int:
        """Cap a caller-supplied search limit at search_limit, which is also the default."""
        if limit is None:
            return self.search_limit
        return max(1, min(limit, self.search_limit))


class AppConfig(BaseModel):
    """Root configuration object for the Coverage Area Resolver."""

    dataset: DatasetConfig = Field(default_factory=DatasetConfig, description="Dataset settings")
    logging: LoggingConfig = Field(
        default_factory=LoggingConfig, description="Logging configuration"
    )
    catalog: CatalogConfig = Field(
        default_factory=CatalogConfig, description="Catalog lookup limits"
    )

    @field_validator("dataset", mode="before")
    @classmethod
    def default_dataset(cls, v):
        """Treat an empty ``dataset:`` block as defaults."""
        return {} if v is None else v
