"""Tests for the command-line entry point"""

import logging

import pytest

from renewable_usage.cli import main, parse_arguments
from renewable_usage.utils import config_loader
from renewable_usage.utils.config_loader import Config


@pytest.fixture(autouse=True)
def detach_log_handlers():
    yield
    logger = logging.getLogger("renewable_usage")
    for handler in list(logger.handlers):
        handler.close()
    logger.handlers = []
    logger.setLevel(logging.NOTSET)


def test_parse_map_year():
    assert parse_arguments(["--map-year", "2022"]).map_year == 2022
    assert parse_arguments(["--map-year", "all"]).map_year is None
    assert not hasattr(parse_arguments([]), "map_year")


def test_parse_map_year_rejects_text():
    with pytest.raises(SystemExit):
        parse_arguments(["--map-year", "recent"])


def test_main_writes_report(usage_csv, tmp_path):
    output_dir = tmp_path / "report"
    with pytest.raises(SystemExit) as exc:
        main(["--data", str(usage_csv), "--output-dir", str(output_dir),
              "--log-dir", str(tmp_path / "logs"), "--no-export"])

    assert exc.value.code == 0
    assert (output_dir / "usage_map.html").exists()
    assert (output_dir / "report_summary.json").exists()
    assert not list(output_dir.glob("*.csv"))
    assert (tmp_path / "logs" / "report.log").exists()


def test_main_exits_on_load_error(tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["--data", str(tmp_path / "missing.csv"), "--output-dir", str(tmp_path / "report"),
              "--log-dir", str(tmp_path / "logs")])

    assert exc.value.code == 1


def test_main_exits_on_bad_config(tmp_path, monkeypatch):
    monkeypatch.setenv("RENEWABLE_USAGE_CONFIG", "placeholder")
    with pytest.raises(SystemExit) as exc:
        main(["--config", str(tmp_path / "absent.yaml")])

    assert exc.value.code == 1


def test_main_rejects_non_positive_sample_size(usage_csv, tmp_path):
    with pytest.raises(SystemExit) as exc:
        main(["--data", str(usage_csv), "--output-dir", str(tmp_path / "report"),
              "--log-dir", str(tmp_path / "logs"), "--sample-size", "-1"])

    assert exc.value.code == 1
    assert not (tmp_path / "report" / "report_summary.json").exists()


def test_main_runs_without_project_config(usage_csv, tmp_path, monkeypatch):
    monkeypatch.delenv("RENEWABLE_USAGE_CONFIG")
    monkeypatch.setattr(config_loader, "PROJECT_ROOT", tmp_path)
    monkeypatch.chdir(tmp_path)
    Config.reset()

    with pytest.raises(SystemExit) as exc:
        main(["--data", str(usage_csv)])

    assert exc.value.code == 0
    assert (tmp_path / "results" / "report" / "report_summary.json").exists()
    assert (tmp_path / "logs" / "report.log").exists()
