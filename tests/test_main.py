"""Unit tests for the main entry point.

Tests the main() function including:
- CLI argument parsing
- Configuration loading with priority (CLI > env > config)
- Dataset source selection
- Exit code handling
- Error handling
"""

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from coverage_resolver.config.environment import EnvironmentConfig
from coverage_resolver.config.exceptions import ConfigurationError
from coverage_resolver.config.models import AppConfig, CatalogConfig, DatasetConfig, LoggingConfig
from coverage_resolver.main import load_runtime_config, main
from coverage_resolver.persistence import PersistenceError

FIXTURES_DIR = Path(__file__).parent / "fixtures"
CSV_FIXTURE = FIXTURES_DIR / "coverage_areas.csv"


def _csv_config():
    return AppConfig(dataset=DatasetConfig(source="csv", csv_path=CSV_FIXTURE))


@pytest.fixture
def mock_runtime():
    """Patch config loading and logging setup so main() runs in-process."""
    with patch("coverage_resolver.main.load_config") as mock_load, patch(
        "coverage_resolver.main.configure_logging"
    ) as mock_logging:
        mock_load.return_value = (_csv_config(), EnvironmentConfig(database_url="sqlite:///:memory:"))
        yield mock_load, mock_logging


class TestLoadRuntimeConfig:
    """Test suite for load_runtime_config helper."""

    def test_log_level_priority(self, tmp_path):
        """Log level priority: CLI > env > config."""
        config_file = tmp_path / "config.yaml"

        with patch("coverage_resolver.main.load_config") as mock_load:
            app_config = AppConfig(logging=LoggingConfig(level="WARNING", format="key-value"))
            env_config = EnvironmentConfig(log_level="INFO")
            mock_load.return_value = (app_config, env_config)

            _, resolved = load_runtime_config(config_file, "DEBUG")
            assert resolved.log_level == "DEBUG"

            env_config.log_level = "INFO"
            _, resolved = load_runtime_config(config_file, None)
            assert resolved.log_level == "INFO"

            env_config.log_level = None
            _, resolved = load_runtime_config(config_file, None)
            assert resolved.log_level == "WARNING"

    def test_propagates_configuration_error(self, tmp_path):
        with patch("coverage_resolver.main.load_config") as mock_load:
            mock_load.side_effect = ConfigurationError("broken")

            with pytest.raises(ConfigurationError):
                load_runtime_config(tmp_path / "config.yaml", None)


class TestMain:
    """Tests for main()."""

    def test_nothing_to_do(self, capsys):
        assert main([]) == 1
        assert "Nothing to do" in capsys.readouterr().err

    def test_resolve_from_csv(self, mock_runtime, capsys):
        exit_code = main(["--address", "House 5, Road 11, Gulshan 1, Dhaka"])

        assert exit_code == 0
        payload = json.loads(capsys.readouterr().out.strip())
        assert payload["status"] == "SUCCESS"
        assert payload["suggested_area"] == "Gulshan 1"
        assert payload["suggested_area_id"] == 101

    def test_unresolved_address_exit_code(self, mock_runtime, capsys):
        exit_code = main(["--address", "Tongi, Gazipur", "--address", "xy"])

        lines = capsys.readouterr().out.strip().splitlines()
        assert exit_code == 2
        assert [json.loads(line)["status"] for line in lines] == ["SUCCESS", "FAILED"]

    def test_log_level_flag_reaches_logging(self, mock_runtime):
        _, mock_logging = mock_runtime

        main(["--log-level", "DEBUG", "--address", "Tongi, Gazipur"])

        assert mock_logging.call_args.kwargs["level"] == "DEBUG"

    def test_configuration_error_exit_code(self, capsys):
        with patch("coverage_resolver.main.load_config") as mock_load:
            mock_load.side_effect = ConfigurationError("Configuration file not found")

            assert main(["--address", "Gulshan 1"]) == 1

        assert "Configuration Error" in capsys.readouterr().err

    def test_persistence_error_exit_code(self, mock_runtime, capsys):
        mock_load, _ = mock_runtime
        mock_load.return_value = (AppConfig(), EnvironmentConfig(database_url="sqlite:///:memory:"))

        with patch("coverage_resolver.main.init_database") as mock_init:
            mock_init.side_effect = PersistenceError("database locked")

            assert main(["--address", "Gulshan 1"]) == 1

        assert "database locked" in capsys.readouterr().err

    def test_import_then_suggest(self, mock_runtime, capsys, tmp_path):
        """Imported rows are served by the catalog suggest lookup."""
        mock_load, _ = mock_runtime
        db_url = f"sqlite:///{tmp_path / 'coverage.db'}"
        mock_load.return_value = (_csv_config(), EnvironmentConfig(database_url=db_url))

        assert main(["--import-csv", str(CSV_FIXTURE)]) == 0
        summary = json.loads(capsys.readouterr().out)
        assert summary["imported"] == 5
        assert summary["skipped"] == 1
        assert [error["row"] for error in summary["errors"]] == [8, 9]

        assert main(["--suggest", "mirpur", "--limit", "1"]) == 0
        suggestions = json.loads(capsys.readouterr().out)
        assert [s["area"] for s in suggestions] == ["Mirpur 10"]

    def test_resolve_from_database(self, mock_runtime, capsys, tmp_path):
        mock_load, _ = mock_runtime
        db_url = f"sqlite:///{tmp_path / 'coverage.db'}"
        mock_load.return_value = (_csv_config(), EnvironmentConfig(database_url=db_url))
        assert main(["--import-csv", str(CSV_FIXTURE)]) == 0
        capsys.readouterr()

        mock_load.return_value = (AppConfig(), EnvironmentConfig(database_url=db_url))
        assert main(["--address", "Agrabad, Chattogram"]) == 0

        payload = json.loads(capsys.readouterr().out)
        assert payload["suggested_city"] == "Chattogram"
        assert payload["inside_dhaka_flag"] is False

    def test_search_uses_configured_limit(self, mock_runtime, capsys, tmp_path):
        """catalog.search_limit is the default and the cap for --search."""
        mock_load, _ = mock_runtime
        db_url = f"sqlite:///{tmp_path / 'coverage.db'}"
        mock_load.return_value = (_csv_config(), EnvironmentConfig(database_url=db_url))
        assert main(["--import-csv", str(CSV_FIXTURE)]) == 0
        capsys.readouterr()

        limited = AppConfig(catalog=CatalogConfig(search_limit=1))
        mock_load.return_value = (limited, EnvironmentConfig(database_url=db_url))

        assert main(["--search", "mirpur"]) == 0
        assert [s["area"] for s in json.loads(capsys.readouterr().out)] == ["Mirpur 10"]

        assert main(["--search", "mirpur", "--limit", "50"]) == 0
        assert len(json.loads(capsys.readouterr().out)) == 1

        mock_load.return_value = (AppConfig(), EnvironmentConfig(database_url=db_url))
        assert main(["--search", "mirpur"]) == 0
        assert [s["area"] for s in json.loads(capsys.readouterr().out)] == ["Mirpur 10", "Mirpur 2"]

        assert main(["--search", "a", "--city", "chatto"]) == 0
        assert [s["id"] for s in json.loads(capsys.readouterr().out)] == ["ctg-agrabad"]

    def test_stats(self, mock_runtime, capsys, tmp_path):
        mock_load, _ = mock_runtime
        db_url = f"sqlite:///{tmp_path / 'coverage.db'}"
        mock_load.return_value = (_csv_config(), EnvironmentConfig(database_url=db_url))
        assert main(["--import-csv", str(CSV_FIXTURE)]) == 0
        capsys.readouterr()

        assert main(["--stats"]) == 0

        stats = json.loads(capsys.readouterr().out)
        assert stats == {
            "total": 5,
            "inside_dhaka": 2,
            "outside_dhaka": 3,
            "by_division": {"Chattogram": 1, "Dhaka": 4},
        }


class TestValidateConfigFlag:
    """Tests for --validate-config."""

    def test_valid_config(self, capsys):
        assert main(["--validate-config", "--config", str(FIXTURES_DIR / "valid_config.yaml")]) == 0
        assert "is valid" in capsys.readouterr().out

    def test_invalid_config(self, capsys):
        config_path = FIXTURES_DIR / "invalid_csv_source_config.yaml"

        assert main(["--validate-config", "--config", str(config_path)]) == 1
        assert "validation failed" in capsys.readouterr().out

    def test_does_not_load_environment_or_database(self):
        with patch("coverage_resolver.main.load_config") as mock_load, patch(
            "coverage_resolver.main.init_database"
        ) as mock_init:
            main(["--validate-config", "--config", str(FIXTURES_DIR / "valid_config.yaml")])

        mock_load.assert_not_called()
        mock_init.assert_not_called()
