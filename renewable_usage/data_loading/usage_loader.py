"""
Household renewable energy usage loader.

This module reads the usage table (one record per household, month and year),
normalises its column names and types, and validates it before any chart is
computed. Every failure is reported as a LoadError, which aborts the run.
"""

import re
import pandas as pd
from pathlib import Path
from typing import Optional, Dict, Any, Union
import logging

from ..errors import LoadError
from ..utils.config_loader import get_config
from ..utils.logging_setup import log_execution_time, log_memory_usage
from ..utils.constants import (
    COUNTRY, ENERGY_SOURCE, YEAR, HOUSEHOLD_SIZE, MONTHLY_USAGE, COST_SAVINGS,
    REQUIRED_COLUMNS, KEY_COLUMNS, INTEGER_COLUMNS, MEASURE_COLUMNS,
    ENERGY_SOURCES, MIN_YEAR, MAX_YEAR, MIN_HOUSEHOLD_SIZE, MAX_HOUSEHOLD_SIZE,
)
from ..validation.data_validator import (
    DataValidationError,
    validate_required_columns,
    coerce_numeric_column,
    check_missing_values,
    validate_numeric_range,
    validate_categorical_values,
)

logger = logging.getLogger(__name__)


# Normalised header (lowercase, alphanumerics only) -> canonical column
COLUMN_ALIASES = {
    'country': COUNTRY,
    'energysource': ENERGY_SOURCE,
    'year': YEAR,
    'householdsize': HOUSEHOLD_SIZE,
    'monthlyusagekwh': MONTHLY_USAGE,
    'monthlyusage': MONTHLY_USAGE,
    'usagekwh': MONTHLY_USAGE,
    'costsavingsusd': COST_SAVINGS,
    'costsavings': COST_SAVINGS,
    'savingsusd': COST_SAVINGS,
}


def _normalise_header(name: str) -> str:
    return re.sub(r'[^a-z0-9]', '', str(name).lower())


def standardize_columns(df: pd.DataFrame) -> pd.DataFrame:
    """
    Rename recognised header variants to the canonical column names.

    Headers are matched case-insensitively with spaces, underscores and
    punctuation ignored, so ``Monthly Usage (kWh)`` maps to
    ``Monthly_Usage_kWh``. Unrecognised columns are kept as they are.

    Args:
        df: Raw usage DataFrame

    Returns:
        DataFrame with canonical column names
    """
    rename_dict = {}
    for col in df.columns:
        canonical = COLUMN_ALIASES.get(_normalise_header(col))
        if canonical is not None and canonical not in rename_dict.values():
            rename_dict[col] = canonical

    return df.rename(columns=rename_dict)


def clean_usage_data(df: pd.DataFrame) -> pd.DataFrame:
    """
    Validate and type the usage table.

    Args:
        df: Usage DataFrame with canonical column names

    Returns:
        New DataFrame restricted to the usage record columns

    Raises:
        DataValidationError: If the table violates the usage record schema
    """
    validate_required_columns(df, REQUIRED_COLUMNS, name="Usage table")

    df = df[REQUIRED_COLUMNS].copy()

    check_missing_values(df, KEY_COLUMNS, allow_null=False)

    df[COUNTRY] = df[COUNTRY].astype(str).str.strip()
    df[ENERGY_SOURCE] = df[ENERGY_SOURCE].astype(str).str.strip().str.title()
    validate_categorical_values(df, ENERGY_SOURCE, ENERGY_SOURCES, allow_null=False)

    for col in INTEGER_COLUMNS:
        values = coerce_numeric_column(df, col)
        fractional = values % 1 != 0
        if fractional.any():
            raise DataValidationError(
                f"Column '{col}' has {int(fractional.sum())} non-integer values"
            )
        df[col] = values.astype('int64')

    for col in MEASURE_COLUMNS:
        df[col] = coerce_numeric_column(df, col)

    validate_numeric_range(df, MONTHLY_USAGE, min_value=0)

    # Out-of-range keys are unusual but still valid groups
    validate_numeric_range(df, YEAR, MIN_YEAR, MAX_YEAR, strict=False)
    validate_numeric_range(df, HOUSEHOLD_SIZE, MIN_HOUSEHOLD_SIZE, MAX_HOUSEHOLD_SIZE, strict=False)

    return df


@log_execution_time(logger)
@log_memory_usage(logger)
def load_usage_data(path: Optional[Union[str, Path]] = None,
                    sample_size: Optional[int] = None,
                    delimiter: Optional[str] = None) -> pd.DataFrame:
    """
    Load and validate the household renewable energy usage table.

    Args:
        path: Delimited file to read (default: ``data_paths.usage_data``)
        sample_size: Number of records to keep (None for all)
        delimiter: Field separator (default: ``processing.delimiter``)

    Returns:
        DataFrame with typed usage record columns

    Raises:
        LoadError: If the file is missing, malformed or lacks a required column,
            or sample_size is not positive
    """
    if path is None or delimiter is None:
        config = get_config()
        if path is None:
            path = config.get_data_path('usage_data')
        if delimiter is None:
            delimiter = config.get('processing.delimiter', ',')

    if path is None:
        raise LoadError("No usage data path configured")

    if sample_size is not None and sample_size < 1:
        raise LoadError(f"Sample size must be a positive number of records, got {sample_size}")

    usage_file = Path(path)
    logger.info(f"Loading usage data from: {usage_file}")

    if not usage_file.exists():
        raise LoadError(f"Usage data file not found: {usage_file}")

    try:
        raw = pd.read_csv(usage_file, sep=delimiter, skipinitialspace=True)
    except pd.errors.EmptyDataError:
        raise LoadError(f"Usage data file is empty: {usage_file}")
    except (pd.errors.ParserError, UnicodeDecodeError) as e:
        raise LoadError(f"Malformed usage data file {usage_file}: {e}")

    try:
        df = clean_usage_data(standardize_columns(raw))
    except DataValidationError as e:
        raise LoadError(f"Invalid usage data in {usage_file}: {e}")

    if sample_size and sample_size < len(df):
        seed = get_config().get_random_seed()
        logger.info(f"Sampling {sample_size} usage records (seed={seed})")
        df = df.sample(n=sample_size, random_state=seed).sort_index()

    df = df.reset_index(drop=True)

    logger.info(f"Loaded {len(df)} usage records")
    logger.info(f"  Countries: {df[COUNTRY].nunique()}")
    logger.info(f"  Energy sources: {sorted(df[ENERGY_SOURCE].unique())}")
    logger.info(f"  Memory usage: {df.memory_usage(deep=True).sum() / 1024**2:.2f} MB")

    return df


def create_usage_summary_report(df: pd.DataFrame) -> Dict[str, Any]:
    """
    Create summary statistics for the usage table.

    Args:
        df: Usage DataFrame

    Returns:
        Dictionary with JSON-serialisable summary statistics
    """
    def _float(value):
        return None if pd.isna(value) else round(float(value), 4)

    summary = {
        'total_records': int(len(df)),
        'countries': sorted(df[COUNTRY].unique().tolist()) if len(df) else [],
        'energy_sources': {str(k): int(v) for k, v in df[ENERGY_SOURCE].value_counts().sort_index().items()},
        'year_range': [int(df[YEAR].min()), int(df[YEAR].max())] if len(df) else None,
        'household_size_range': [int(df[HOUSEHOLD_SIZE].min()), int(df[HOUSEHOLD_SIZE].max())] if len(df) else None,
        'avg_monthly_usage_kwh': _float(df[MONTHLY_USAGE].mean()),
        'avg_cost_savings_usd': _float(df[COST_SAVINGS].mean()),
        'missing_values': {col: int(df[col].isna().sum()) for col in MEASURE_COLUMNS},
    }

    return summary
