"""Additional validation utilities for configuration."""

import warnings
from typing import Any, Dict, List

LARGE_SEARCH_LIMIT = 200


def check_for_warnings(config_dict: Dict[str, Any]) -> List[str]:
    """
    Check configuration for potential issues and return warnings.

    Args:
        config_dict: Raw configuration dictionary

    Returns:
        List of warning messages
    """
    warning_messages = []

    dataset = config_dict.get("dataset") or {}
    if isinstance(dataset, dict):
        source = str(dataset.get("source", "database")).strip().lower()
        if source == "database" and dataset.get("csv_path"):
            warning_messages.append(
                "dataset.csv_path is set but dataset.source is 'database'; the CSV file is ignored"
            )

        csv_path = dataset.get("csv_path")
        if isinstance(csv_path, str) and csv_path and not csv_path.lower().endswith(".csv"):
            warning_messages.append(
                f"dataset.csv_path ({csv_path}) does not end in .csv"
            )

    catalog = config_dict.get("catalog") or {}
    if isinstance(catalog, dict):
        search_limit = catalog.get("search_limit", 50)
        if isinstance(search_limit, int) and search_limit > LARGE_SEARCH_LIMIT:
            warning_messages.append(
                f"Large catalog.search_limit ({search_limit}) may slow down search responses"
            )

    return warning_messages


def emit_warnings(warning_messages: List[str]) -> None:
    """
    Emit warning messages using Python's warnings module.

    Args:
        warning_messages: List of warning messages to emit
    """
    for message in warning_messages:
        warnings.warn(message, UserWarning, stacklevel=2)
