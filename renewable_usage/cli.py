"""
Command-line interface for the renewable usage report.

Usage:
    renewable-usage-report
    renewable-usage-report --data data/usage.csv --output-dir results/report
    renewable-usage-report --map-year all --sample-size 500
"""

import argparse
import os
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional
import logging

from .errors import LoadError
from .utils.config_loader import Config, ConfigurationError, get_config
from .utils.logging_setup import setup_logging


def _map_year(value: str):
    if value.lower() == 'all':
        return None
    try:
        return int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected a year or 'all', got '{value}'")


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Household renewable energy usage report - charts by source, year, household size and country",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # Full report with the settings from config.yaml
  renewable-usage-report

  # Another input file and output directory
  renewable-usage-report --data data/usage.csv --output-dir results/run2

  # Map every year instead of the configured one
  renewable-usage-report --map-year all
        """
    )

    parser.add_argument('--config', type=str, default=None,
                        help='Configuration file (default: config.yaml in the project root)')
    parser.add_argument('--data', type=str, default=None,
                        help='Usage table to load (overrides data_paths.usage_data)')
    parser.add_argument('--output-dir', type=str, default=None,
                        help='Directory for charts and tables (overrides data_paths.output_dir)')
    parser.add_argument('--coordinates', type=str, default=None,
                        help='Capital coordinates CSV (default: bundled table)')
    parser.add_argument('--map-year', type=_map_year, default=argparse.SUPPRESS,
                        help="Year shown on the country map, or 'all'")
    parser.add_argument('--sample-size', type=int, default=None,
                        help='Number of usage records to sample')
    parser.add_argument('--no-export', action='store_true',
                        help='Do not write the per-chart CSV tables')
    parser.add_argument('--log-dir', type=str, default=None,
                        help='Directory for log files (default: logs/)')
    parser.add_argument('--verbose', '-v', action='store_true',
                        help='Enable debug logging')

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None):
    """Main entry point."""
    args = parse_arguments(argv)

    if args.config:
        os.environ['RENEWABLE_USAGE_CONFIG'] = str(Path(args.config).resolve())
        Config.reset()

    try:
        get_config()
        logger = setup_logging('report', console=True, log_dir=args.log_dir,
                               level='DEBUG' if args.verbose else None)
    except ConfigurationError as e:
        print(f"Configuration error: {e}", file=sys.stderr)
        sys.exit(1)

    logger.info("=" * 80)
    logger.info("RENEWABLE ENERGY USAGE REPORT")
    logger.info("=" * 80)
    logger.info(f"Start time: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")

    # Imported here so plotting backends load after logging is configured;
    # charts are only ever written to files
    os.environ.setdefault("MPLBACKEND", "Agg")
    from .processing.report_pipeline import run_report

    kwargs = dict(
        data_path=args.data,
        output_dir=args.output_dir,
        sample_size=args.sample_size,
        export_tables=False if args.no_export else None,
        coordinates_path=args.coordinates,
    )
    if hasattr(args, 'map_year'):
        kwargs['map_year'] = args.map_year

    try:
        result = run_report(**kwargs)
    except LoadError as e:
        logger.error(f"Could not load usage data: {e}")
        sys.exit(1)
    except KeyboardInterrupt:
        logger.warning("Report interrupted by user")
        sys.exit(1)

    for name, path in result.rendered.items():
        logger.info(f"  [ok] {name}: {path}")
    for name, message in result.failed.items():
        logger.warning(f"  [failed] {name}: {message}")

    if result.failed:
        logger.error(f"{len(result.failed)} of {len(result.rendered) + len(result.failed)} charts failed")
        sys.exit(2)

    logger.info("All charts rendered.")
    sys.exit(0)


if __name__ == "__main__":
    main()
