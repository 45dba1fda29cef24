"""Shared fixtures for the renewable usage report tests."""

import os
from pathlib import Path

import matplotlib

matplotlib.use("Agg")

import pandas as pd
import pytest

PROJECT_ROOT = Path(__file__).parent.parent

os.environ.setdefault("RENEWABLE_USAGE_CONFIG", str(PROJECT_ROOT / "config.yaml"))

from renewable_usage.utils.config_loader import Config  # noqa: E402

USAGE_HEADER = "Country,Energy_Source,Year,Household_Size,Monthly_Usage_kWh,Cost_Savings_USD\n"


@pytest.fixture(autouse=True)
def fresh_config(monkeypatch):
    """Every test sees the project config without leftover overrides."""
    monkeypatch.setenv("RENEWABLE_USAGE_CONFIG", str(PROJECT_ROOT / "config.yaml"))
    for var in ("RENEWABLE_USAGE_DATA", "RENEWABLE_USAGE_OUTPUT_DIR",
                "RENEWABLE_USAGE_SAMPLE_SIZE", "RENEWABLE_USAGE_RANDOM_SEED"):
        monkeypatch.delenv(var, raising=False)
    Config.reset()
    yield
    Config.reset()


@pytest.fixture
def usage_table():
    """Small typed usage table covering every chart."""
    return pd.DataFrame({
        "Country": ["Germany", "Germany", "India", "India", "USA", "Atlantis", "USA", "India"],
        "Energy_Source": ["Solar", "Wind", "Solar", "Hydro", "Wind", "Solar", "Hydro", "Wind"],
        "Year": [2023, 2023, 2024, 2024, 2024, 2024, 2023, 2024],
        "Household_Size": [2, 2, 3, 3, 4, 4, 2, 3],
        "Monthly_Usage_kWh": [120.0, 180.0, 90.0, 150.0, 300.0, 210.0, 60.0, float("nan")],
        "Cost_Savings_USD": [40.0, 55.0, 20.0, 35.0, 80.0, 25.0, 15.0, 30.0],
    })


@pytest.fixture
def example_rows():
    """Three-row example: two solar rows for country A, one wind row for B."""
    return pd.DataFrame({
        "Country": ["A", "A", "B"],
        "Energy_Source": ["Solar", "Solar", "Wind"],
        "Year": [2024, 2024, 2024],
        "Household_Size": [2, 2, 3],
        "Monthly_Usage_kWh": [100.0, 200.0, 50.0],
        "Cost_Savings_USD": [10.0, 20.0, 5.0],
    })


@pytest.fixture
def write_csv(tmp_path):
    """Write text to a CSV file in the test directory and return its path."""
    def _write(text: str, name: str = "usage.csv") -> Path:
        path = tmp_path / name
        path.write_text(text)
        return path
    return _write


@pytest.fixture
def usage_csv(write_csv, usage_table):
    """The usage_table fixture written to disk."""
    path = write_csv("")
    usage_table.to_csv(path, index=False)
    return path


@pytest.fixture
def coordinates():
    """Small coordinate reference; Atlantis is deliberately absent."""
    return pd.DataFrame({
        "Country": ["Germany", "India", "USA", "A", "B"],
        "Capital": ["Berlin", "New Delhi", "Washington", "Alpha", "Beta"],
        "Latitude": [52.52, 28.61, 38.91, 10.0, -10.0],
        "Longitude": [13.40, 77.21, -77.04, 20.0, -20.0],
    })
