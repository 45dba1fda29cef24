"""Tests for chart rendering"""

import math

import matplotlib.pyplot as plt
import pandas as pd
import pytest

from renewable_usage.errors import RenderError
from renewable_usage.processing.aggregation import (
    savings_by_source,
    usage_trend_by_source,
    usage_by_household_size,
    usage_confidence_by_household_size,
)
from renewable_usage.visualize import UsageVisualizer, DEFAULT_CHART_SPECS, build_chart_specs
from renewable_usage.visualize.chart_spec import ChartSpec


@pytest.fixture
def visualizer(tmp_path):
    return UsageVisualizer(output_dir=tmp_path / "charts", dpi=50)


@pytest.fixture
def map_rows():
    return pd.DataFrame({
        "Country": ["USA", "Germany", "Atlantis"],
        "Total_Usage_kWh": [360.0, 300.0, 210.0],
        "Latitude": [38.91, 52.52, math.nan],
        "Longitude": [-77.04, 13.40, math.nan],
    })


@pytest.mark.parametrize("name, build", [
    ("savings_by_source", savings_by_source),
    ("usage_trend", usage_trend_by_source),
    ("usage_by_household_size", usage_by_household_size),
    ("usage_confidence", usage_confidence_by_household_size),
])
def test_static_charts_are_written(name, build, visualizer, usage_table):
    spec = DEFAULT_CHART_SPECS[name]
    path = visualizer.render(build(usage_table), spec)

    assert path == visualizer.output_dir / spec.filename
    assert path.exists()
    assert path.read_bytes()[:8] == b"\x89PNG\r\n\x1a\n"


def test_bar_chart_lists_highest_savings_first(visualizer, usage_table):
    rows = savings_by_source(usage_table)
    fig, ax = plt.subplots()
    try:
        visualizer._draw_bar(ax, rows, DEFAULT_CHART_SPECS["savings_by_source"])
        fig.canvas.draw()
        labels = [t.get_text() for t in ax.get_yticklabels()]
        assert ax.yaxis_inverted()
        assert labels == ["Wind", "Solar", "Hydro"]
    finally:
        plt.close(fig)


def test_line_chart_has_one_line_per_source(visualizer, usage_table):
    rows = usage_trend_by_source(usage_table)
    fig, ax = plt.subplots()
    try:
        visualizer._draw_line(ax, rows, DEFAULT_CHART_SPECS["usage_trend"])
        assert sorted(line.get_label() for line in ax.get_lines()) == ["Hydro", "Solar", "Wind"]
    finally:
        plt.close(fig)


def test_box_chart_has_one_box_per_household_size(visualizer, usage_table):
    rows = usage_by_household_size(usage_table)
    fig, ax = plt.subplots()
    try:
        visualizer._draw_box(ax, rows, DEFAULT_CHART_SPECS["usage_by_household_size"])
        fig.canvas.draw()
        assert len(ax.patches) == 3
        assert [t.get_text() for t in ax.get_xticklabels()] == ["2", "3", "4"]
    finally:
        plt.close(fig)


def test_error_bars_span_confidence_interval(visualizer, usage_table):
    rows = usage_confidence_by_household_size(usage_table)
    fig, ax = plt.subplots()
    try:
        visualizer._draw_errorbar(ax, rows, DEFAULT_CHART_SPECS["usage_confidence"])
        _, _, bar_lines = ax.containers[0].lines
        segments = bar_lines[0].get_segments()

        assert len(segments) == len(rows)
        for segment, (_, row) in zip(segments, rows.iterrows()):
            assert segment[0][0] == row["Household_Size"]
            assert segment[0][1] == pytest.approx(row["CI_Lower"])
            assert segment[1][1] == pytest.approx(row["CI_Upper"])
    finally:
        plt.close(fig)


def test_map_marker_size_follows_total_usage(visualizer, map_rows):
    fig = visualizer.build_usage_map(map_rows, DEFAULT_CHART_SPECS["usage_map"])
    trace = fig.data[0]

    assert list(trace.hovertext) == ["USA", "Germany"]
    assert list(trace.marker.size) == [360.0, 300.0]
    assert "Total_Usage_kWh" in trace.hovertemplate


def test_map_without_coordinates_builds_nothing(visualizer, map_rows):
    rows = map_rows[map_rows["Country"] == "Atlantis"]
    assert visualizer.build_usage_map(rows, DEFAULT_CHART_SPECS["usage_map"]) is None


def test_map_skips_rows_without_coordinates(visualizer, map_rows):
    path = visualizer.render(map_rows, DEFAULT_CHART_SPECS["usage_map"])
    html = path.read_text()

    assert path.suffix == ".html"
    assert "USA" in html
    assert "Germany" in html
    assert "Atlantis" not in html


@pytest.mark.parametrize("name", list(DEFAULT_CHART_SPECS))
def test_empty_rows_render_placeholder(name, visualizer):
    spec = DEFAULT_CHART_SPECS[name]
    path = visualizer.render(pd.DataFrame(), spec)

    assert path.exists()
    if spec.is_interactive:
        assert "No data available" in path.read_text()


def test_map_with_only_unresolved_rows_renders_placeholder(visualizer, map_rows):
    path = visualizer.render(map_rows.iloc[[2]], DEFAULT_CHART_SPECS["usage_map"])
    assert "No data available" in path.read_text()


def test_missing_columns_raise(visualizer, usage_table):
    with pytest.raises(RenderError, match="missing columns"):
        visualizer.render(usage_table, DEFAULT_CHART_SPECS["usage_confidence"])


def test_unknown_kind_raises(visualizer, usage_table):
    spec = ChartSpec(name="pie", kind="pie", title="Pie", x="Country", y="Year", filename="pie.png")
    with pytest.raises(RenderError, match="Unknown chart kind"):
        visualizer.render(usage_table, spec)


def test_render_is_repeatable(visualizer, usage_table):
    spec = DEFAULT_CHART_SPECS["usage_confidence"]
    rows = usage_confidence_by_household_size(usage_table)

    first = visualizer.render(rows, spec).read_bytes()
    second = visualizer.render(rows, spec).read_bytes()
    assert first == second


def test_build_chart_specs_applies_overrides():
    specs = build_chart_specs({
        "savings_by_source": {"title": "Savings", "filename": "bars.png"},
        "usage_map": None,
        "dpi": 100,
    })

    assert list(specs) == list(DEFAULT_CHART_SPECS)
    assert specs["savings_by_source"].title == "Savings"
    assert specs["savings_by_source"].filename == "bars.png"
    assert specs["usage_map"] == DEFAULT_CHART_SPECS["usage_map"]


def test_required_columns():
    spec = DEFAULT_CHART_SPECS["usage_confidence"]
    assert spec.required_columns == ("Household_Size", "Mean_Usage_kWh", "CI_Lower", "CI_Upper")
