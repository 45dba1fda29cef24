#!/usr/bin/env python3
"""
Renewable Usage Report - entry point.

Loads the household renewable energy usage table and writes the chart set
(savings by source, usage trend, household size boxplot, confidence
intervals and the country map).

Usage:
    python main.py
    python main.py --data data/usage.csv --output-dir results/report
    python main.py --map-year all
"""

import os

# Force non-interactive backend for headless/CI environments before any pyplot import
os.environ.setdefault("MPLBACKEND", "Agg")

from renewable_usage.cli import main


if __name__ == "__main__":
    main()
