"""
Report run: load the usage table once, then build and render each chart.

Each chart is computed from the same read-only table into its own output.
A load failure aborts the run; a failure in one chart is logged, recorded in
the result and the remaining charts are still drawn.
"""

import json
import time
import pandas as pd
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Dict, Optional, Union, Any
import logging

from ..utils.config_loader import get_config
from ..utils.logging_setup import log_execution_time, create_performance_summary
from ..utils.constants import DEFAULT_CONFIDENCE_Z, DEFAULT_DPI, SUMMARY_FILENAME
from ..data_loading.usage_loader import load_usage_data, create_usage_summary_report
from ..visualize import UsageVisualizer, ChartSpec, DEFAULT_CHART_SPECS, build_chart_specs
from . import aggregation
from .geo_join import load_capital_coordinates, join_coordinates, resolved_rows

logger = logging.getLogger(__name__)

_UNSET = object()


@dataclass
class ReportResult:
    """Outcome of one report run."""

    rendered: Dict[str, Path] = field(default_factory=dict)
    failed: Dict[str, str] = field(default_factory=dict)
    tables: Dict[str, pd.DataFrame] = field(default_factory=dict)
    summary: Dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return not self.failed

    def chart_status(self) -> Dict[str, Dict[str, str]]:
        status = {name: {'status': 'rendered', 'path': str(path)} for name, path in self.rendered.items()}
        status.update({name: {'status': 'failed', 'error': message} for name, message in self.failed.items()})
        return status


def build_chart_tables(table: pd.DataFrame,
                       confidence_z: float = DEFAULT_CONFIDENCE_Z,
                       map_year: Optional[int] = None,
                       coordinates_path: Optional[Union[str, Path]] = None
                       ) -> Dict[str, Callable[[], pd.DataFrame]]:
    """
    Per-chart row builders, in report order.

    Builders are returned unevaluated so the report can run and report each
    one on its own.

    Args:
        table: Loaded usage table
        confidence_z: Critical value for the confidence interval chart
        map_year: Year shown on the country map (None for all years)
        coordinates_path: Capital coordinate reference (None for the bundled one)

    Returns:
        Chart name -> zero-argument callable producing that chart's rows
    """
    def usage_map_rows() -> pd.DataFrame:
        totals = aggregation.total_usage_by_country(table, year=map_year)
        reference = load_capital_coordinates(coordinates_path)
        return resolved_rows(join_coordinates(totals, reference))

    return {
        'savings_by_source': lambda: aggregation.savings_by_source(table),
        'usage_trend': lambda: aggregation.usage_trend_by_source(table),
        'usage_by_household_size': lambda: aggregation.usage_by_household_size(table),
        'usage_confidence': lambda: aggregation.usage_confidence_by_household_size(table, z=confidence_z),
        'usage_map': usage_map_rows,
    }


def _export_table(rows: pd.DataFrame, spec: ChartSpec, output_dir: Path) -> Path:
    output_path = output_dir / f"{Path(spec.filename).stem}.csv"
    rows.to_csv(output_path, index=False)
    logger.debug(f"Exported {spec.name} rows to {output_path}")
    return output_path


def _write_summary(result: ReportResult, output_dir: Path) -> Path:
    output_path = output_dir / SUMMARY_FILENAME
    payload = dict(result.summary)
    payload['charts'] = result.chart_status()
    with open(output_path, 'w') as f:
        json.dump(payload, f, indent=2, sort_keys=True)
    logger.info(f"Saved report summary to {output_path}")
    return output_path


@log_execution_time(logger)
def run_report(data_path: Optional[Union[str, Path]] = None,
               output_dir: Optional[Union[str, Path]] = None,
               map_year: Any = _UNSET,
               sample_size: Optional[int] = None,
               export_tables: Optional[bool] = None,
               coordinates_path: Optional[Union[str, Path]] = None,
               table: Optional[pd.DataFrame] = None) -> ReportResult:
    """
    Produce every chart of the report.

    Arguments left unset fall back to the configuration.

    Args:
        data_path: Usage table to load
        output_dir: Directory for artifacts
        map_year: Year for the country map; None maps every year
        sample_size: Number of usage records to keep
        export_tables: Also write each chart's rows as CSV
        coordinates_path: Capital coordinate reference
        table: Already-loaded usage table; skips loading when given

    Returns:
        ReportResult with per-chart paths and failures

    Raises:
        LoadError: If the usage table cannot be loaded
    """
    config = get_config()
    start_time = time.time()

    output_dir = Path(output_dir or config.get_data_path('output_dir') or "results/report")
    output_dir.mkdir(parents=True, exist_ok=True)

    if map_year is _UNSET:
        map_year = config.get('aggregation.map_year')
    if export_tables is None:
        export_tables = bool(config.get('processing.export_tables', True))
    if coordinates_path is None:
        coordinates_path = config.get_data_path('capital_coordinates')
    confidence_z = float(config.get('aggregation.confidence_z', DEFAULT_CONFIDENCE_Z))

    if table is None:
        table = load_usage_data(data_path, sample_size=config.get_sample_size(sample_size))

    result = ReportResult()
    result.summary['dataset'] = create_usage_summary_report(table)
    result.summary['map_year'] = map_year
    result.summary['confidence_z'] = confidence_z

    specs = build_chart_specs({name: config.get_chart_config(name) for name in DEFAULT_CHART_SPECS})
    visualizer = UsageVisualizer(output_dir, dpi=int(config.get('charts.dpi', DEFAULT_DPI)))
    builders = build_chart_tables(table, confidence_z, map_year, coordinates_path)

    for name, build_rows in builders.items():
        spec = specs[name]
        try:
            rows = build_rows()
            result.tables[name] = rows
            if export_tables:
                _export_table(rows, spec, output_dir)
            result.rendered[name] = visualizer.render(rows, spec)
        except Exception as e:
            logger.error(f"Chart {name} failed and was skipped: {e}", exc_info=True)
            result.failed[name] = str(e)

    _write_summary(result, output_dir)

    create_performance_summary("report", {
        "Usage records": len(table),
        "Charts rendered": len(result.rendered),
        "Charts failed": len(result.failed),
        "Output directory": str(output_dir),
        "Elapsed seconds": time.time() - start_time,
    }, logger)

    return result
