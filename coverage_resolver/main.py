"""Command-line entry point for the Coverage Area Resolver."""

from dotenv import load_dotenv
load_dotenv()

import argparse
import json
import sys
import time
from pathlib import Path
from typing import Callable, Iterable, List, Optional, Tuple

from coverage_resolver.config.environment import EnvironmentConfig
from coverage_resolver.config.exceptions import ConfigurationError
from coverage_resolver.config.loader import load_config, validate_config_file
from coverage_resolver.config.models import AppConfig, DatasetSource
from coverage_resolver.domain.models import CoverageArea
from coverage_resolver.ingestion import IngestionError, read_coverage_csv
from coverage_resolver.logging import get_logger
from coverage_resolver.logging.config import configure_logging
from coverage_resolver.matching.engine import CoverageResolver
from coverage_resolver.matching.utils import build_suggestion_payload, serialize_coverage_areas
from coverage_resolver.normalization.service import DatasetCache
from coverage_resolver.persistence import (
    CoverageAreaRepository,
    PersistenceError,
    close_database,
    get_session,
    init_database,
)

logger = get_logger(__name__, component="cli")

EXIT_OK = 0
EXIT_ERROR = 1
EXIT_UNRESOLVED = 2


def load_runtime_config(
    config_path: Optional[Path], log_level_override: Optional[str]
) -> Tuple[AppConfig, EnvironmentConfig]:
    """
    Load and prepare runtime configuration.

    Log level priority: CLI flag > LOG_LEVEL environment variable > config file.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    app_config, env_config = load_config(config_path)

    if log_level_override:
        env_config.log_level = log_level_override
    elif env_config.log_level:
        pass
    elif app_config.logging and app_config.logging.level:
        env_config.log_level = app_config.logging.level
    else:
        env_config.log_level = "INFO"

    return app_config, env_config


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Coverage Area Resolver - match free-form delivery addresses to coverage areas"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=None,
        help="Path to configuration file (default: config.yaml or config/config.yaml)",
    )
    parser.add_argument(
        "--log-level",
        default=None,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Log level (overrides config and environment)",
    )
    parser.add_argument(
        "--import-csv",
        type=Path,
        default=None,
        metavar="PATH",
        help="Import coverage areas from a CSV file into the database and exit",
    )
    parser.add_argument(
        "--address",
        action="append",
        default=[],
        metavar="TEXT",
        help="Address to resolve (repeatable); prints one JSON payload per address",
    )
    parser.add_argument(
        "--suggest",
        default=None,
        metavar="TEXT",
        help="Print coverage areas whose division, city, zone or area contains TEXT",
    )
    parser.add_argument(
        "--search",
        default=None,
        metavar="TEXT",
        help="Print coverage areas whose area name contains TEXT",
    )
    parser.add_argument(
        "--city",
        default=None,
        metavar="TEXT",
        help="Restrict --search to cities whose name contains TEXT",
    )
    parser.add_argument(
        "--limit",
        type=int,
        default=None,
        help="Maximum rows for --suggest or --search (default and cap from catalog config)",
    )
    parser.add_argument(
        "--stats",
        action="store_true",
        help="Print dataset counts (total, inside/outside Dhaka, per division) as JSON",
    )
    parser.add_argument(
        "--validate-config",
        action="store_true",
        help="Validate the configuration file and exit",
    )
    return parser


def _needs_database(args: argparse.Namespace, app_config: AppConfig) -> bool:
    if args.import_csv or args.suggest or args.search or args.stats:
        return True
    return bool(args.address) and app_config.dataset.source == DatasetSource.DATABASE


def _dataset_loader(app_config: AppConfig) -> Callable[[], Iterable[CoverageArea]]:
    """Pick the reference dataset source configured under ``dataset``."""
    dataset_config = app_config.dataset

    if dataset_config.source == DatasetSource.CSV:
        def load_from_csv() -> List[CoverageArea]:
            return read_coverage_csv(
                dataset_config.csv_path, skip_invalid=dataset_config.skip_invalid_rows
            ).records

        return load_from_csv

    def load_from_database() -> List[CoverageArea]:
        with get_session() as session:
            return CoverageAreaRepository(session).list_all()

    return load_from_database


def run_import(csv_path: Path, app_config: AppConfig) -> int:
    """Import a CSV file into the database and print a JSON summary."""
    result = read_coverage_csv(csv_path, skip_invalid=app_config.dataset.skip_invalid_rows)

    with get_session() as session:
        stored = CoverageAreaRepository(session).upsert_many(result.records)

    summary = {
        "path": str(csv_path),
        "imported": len(stored),
        "skipped": result.skipped,
        "errors": [{"row": error.row_number, "message": error.message} for error in result.errors],
    }
    print(json.dumps(summary, ensure_ascii=False))

    logger.info(
        f"Imported {len(stored)} coverage areas",
        extra={"event": "cli.import.completed", "imported": len(stored), "skipped": result.skipped},
    )
    return EXIT_OK


def run_suggest(query: str, limit: Optional[int], app_config: AppConfig) -> int:
    """Print catalog suggestions for a query as a JSON array."""
    effective_limit = app_config.catalog.clamp_suggest_limit(limit)

    with get_session() as session:
        records = CoverageAreaRepository(session).suggest(query, limit=effective_limit)

    print(json.dumps(serialize_coverage_areas(records), ensure_ascii=False))
    return EXIT_OK


def run_search(area: str, city: Optional[str], limit: Optional[int], app_config: AppConfig) -> int:
    """Print coverage areas matching the area (and optional city) filter as a JSON array."""
    effective_limit = app_config.catalog.clamp_search_limit(limit)

    with get_session() as session:
        records = CoverageAreaRepository(session).search(area=area, city=city, limit=effective_limit)

    print(json.dumps(serialize_coverage_areas(records), ensure_ascii=False))
    return EXIT_OK


def run_stats() -> int:
    """Print dataset counts as JSON."""
    with get_session() as session:
        stats = CoverageAreaRepository(session).stats()

    print(json.dumps(stats, ensure_ascii=False))
    logger.info(
        f"Dataset holds {stats['total']} coverage areas",
        extra={"event": "cli.stats.completed", "total": stats["total"]},
    )
    return EXIT_OK


def run_resolve(addresses: List[str], app_config: AppConfig) -> int:
    """Resolve addresses and print one suggestion payload per line.

    Returns EXIT_UNRESOLVED when at least one address found no coverage area.
    """
    cache = DatasetCache(_dataset_loader(app_config))
    resolver = CoverageResolver(cache.get())

    unresolved = 0
    for result in resolver.resolve_batch(addresses):
        if not result.is_match:
            unresolved += 1
        print(json.dumps(build_suggestion_payload(result), ensure_ascii=False))

    logger.info(
        f"Resolved {len(addresses) - unresolved} of {len(addresses)} addresses",
        extra={
            "event": "cli.resolve.completed",
            "address_count": len(addresses),
            "unresolved_count": unresolved,
        },
    )
    return EXIT_UNRESOLVED if unresolved else EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """
    Main entry point for the Coverage Area Resolver CLI.

    Returns:
        0 on success, 1 on configuration/persistence/ingestion errors,
        2 when any address could not be resolved.
    """
    start_time = time.time()
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.validate_config:
        return EXIT_OK if validate_config_file(args.config) else EXIT_ERROR

    if not (args.import_csv or args.address or args.suggest or args.search or args.stats):
        parser.print_usage(sys.stderr)
        print(
            "Nothing to do: pass --address, --suggest, --search, --stats or --import-csv",
            file=sys.stderr,
        )
        return EXIT_ERROR

    database_ready = False
    try:
        app_config, env_config = load_runtime_config(args.config, args.log_level)

        log_format = app_config.logging.format if app_config.logging else "key-value"
        configure_logging(
            level=env_config.log_level,
            format_type=log_format,
            environment=env_config.environment,
        )

        logger.info(
            "Coverage Area Resolver starting",
            extra={
                "event": "service.starting",
                "config_path": str(args.config) if args.config else None,
                "log_level": env_config.log_level,
                "dataset_source": DatasetSource(app_config.dataset.source).value,
            },
        )

        if _needs_database(args, app_config):
            init_database(env_config.database_url)
            database_ready = True

        if args.import_csv:
            return run_import(args.import_csv, app_config)

        exit_code = EXIT_OK
        if args.stats:
            exit_code = run_stats()
        if args.suggest:
            exit_code = run_suggest(args.suggest, args.limit, app_config)
        if args.search:
            exit_code = run_search(args.search, args.city, args.limit, app_config)
        if args.address:
            exit_code = max(exit_code, run_resolve(args.address, app_config))
        return exit_code

    except ConfigurationError as e:
        print(f"Configuration Error: {e}", file=sys.stderr)
        logger.error(
            f"Configuration error: {e}",
            extra={"event": "config.error", "error_type": "ConfigurationError"},
        )
        return EXIT_ERROR
    except (PersistenceError, IngestionError) as e:
        print(f"Error: {e}", file=sys.stderr)
        logger.error(
            f"Data access failed: {e}",
            extra={"event": "service.data_error", "error_type": type(e).__name__},
        )
        return EXIT_ERROR
    except KeyboardInterrupt:
        print("\nInterrupted by user", file=sys.stderr)
        return EXIT_ERROR
    finally:
        if database_ready:
            close_database()
        logger.debug(
            "Coverage Area Resolver stopped",
            extra={
                "event": "service.stopping",
                "uptime_seconds": round(time.time() - start_time, 2),
            },
        )


if __name__ == "__main__":
    sys.exit(main())
