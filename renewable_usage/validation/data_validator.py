"""
General data validation utilities for the renewable usage report.

This module provides the column, type and range checks the loaders run
before a table is handed to the aggregation code.
"""

import pandas as pd
from typing import Dict, List, Any, Optional
import logging

logger = logging.getLogger(__name__)


class DataValidationError(Exception):
    """Raised when data validation fails."""
    pass


def validate_dataframe(df: pd.DataFrame, name: str = "DataFrame") -> None:
    """
    Validate that input is a non-empty DataFrame.

    Args:
        df: DataFrame to validate
        name: Name for error messages

    Raises:
        DataValidationError: If validation fails
    """
    if df is None:
        raise DataValidationError(f"{name} is None")

    if not isinstance(df, pd.DataFrame):
        raise DataValidationError(f"{name} is not a pandas DataFrame")

    if len(df) == 0:
        raise DataValidationError(f"{name} is empty")


def validate_required_columns(df: pd.DataFrame, required_columns: List[str],
                              name: str = "DataFrame") -> None:
    """
    Validate that DataFrame contains required columns.

    Args:
        df: DataFrame to validate
        required_columns: List of required column names
        name: Name for error messages

    Raises:
        DataValidationError: If any required columns are missing
    """
    validate_dataframe(df, name)

    missing_columns = [col for col in required_columns if col not in df.columns]

    if missing_columns:
        raise DataValidationError(
            f"{name} missing required columns: {missing_columns}"
        )


def coerce_numeric_column(df: pd.DataFrame, column: str) -> pd.Series:
    """
    Convert a column to numbers without silently turning text into NaN.

    Empty cells stay missing; any other value that does not parse is an error.

    Args:
        df: DataFrame containing the column
        column: Column name to convert

    Returns:
        Float series

    Raises:
        DataValidationError: If the column holds non-numeric text
    """
    if column not in df.columns:
        raise DataValidationError(f"Column '{column}' not found")

    raw = df[column]
    converted = pd.to_numeric(raw, errors='coerce')
    bad_mask = converted.isna() & raw.notna()

    if pd.api.types.is_object_dtype(raw) or pd.api.types.is_string_dtype(raw):
        bad_mask &= raw.astype(str).str.strip() != ''

    if bad_mask.any():
        examples = raw[bad_mask].astype(str).unique()[:5].tolist()
        rows = (bad_mask[bad_mask].index[:5] + 2).tolist()  # header is line 1
        raise DataValidationError(
            f"Column '{column}' has {int(bad_mask.sum())} non-numeric values "
            f"(e.g. {examples} on lines {rows})"
        )

    return converted.astype(float)


def check_missing_values(df: pd.DataFrame, columns: List[str],
                         allow_null: bool = False) -> Dict[str, int]:
    """
    Count missing values per column.

    Args:
        df: DataFrame to check
        columns: Columns to inspect
        allow_null: If False, raise on any missing value

    Returns:
        Dict mapping column name to its missing count

    Raises:
        DataValidationError: If allow_null is False and values are missing
    """
    counts = {col: int(df[col].isna().sum()) for col in columns if col in df.columns}
    offending = {col: n for col, n in counts.items() if n > 0}

    if offending and not allow_null:
        raise DataValidationError(f"Missing values in required columns: {offending}")

    return counts


def validate_numeric_range(df: pd.DataFrame, column: str,
                           min_value: Optional[float] = None,
                           max_value: Optional[float] = None,
                           allow_null: bool = True,
                           strict: bool = True) -> Dict[str, Any]:
    """
    Validate numeric column values are within expected range.

    Args:
        df: DataFrame containing the column
        column: Column name to validate
        min_value: Minimum allowed value (inclusive)
        max_value: Maximum allowed value (inclusive)
        allow_null: Whether null values are allowed
        strict: If True raise on out-of-range values; if False only log a warning

    Returns:
        Dict with validation statistics

    Raises:
        DataValidationError: If values are out of range and strict is set
    """
    if column not in df.columns:
        raise DataValidationError(f"Column '{column}' not found")

    col_data = df[column]

    null_count = int(col_data.isna().sum())
    if null_count > 0 and not allow_null:
        raise DataValidationError(f"Column '{column}' contains {null_count} null values")

    non_null_data = col_data.dropna()

    results = {
        'column': column,
        'null_count': null_count,
        'null_percentage': (null_count / len(df)) * 100 if len(df) else 0.0,
        'min_value': non_null_data.min() if len(non_null_data) > 0 else None,
        'max_value': non_null_data.max() if len(non_null_data) > 0 else None,
        'out_of_range_count': 0
    }

    if len(non_null_data) == 0:
        return results

    out_of_range = 0

    if min_value is not None:
        below_min = int((non_null_data < min_value).sum())
        if below_min > 0:
            out_of_range += below_min
            logger.warning(f"{below_min} values in '{column}' below minimum {min_value}")

    if max_value is not None:
        above_max = int((non_null_data > max_value).sum())
        if above_max > 0:
            out_of_range += above_max
            logger.warning(f"{above_max} values in '{column}' above maximum {max_value}")

    results['out_of_range_count'] = out_of_range

    if out_of_range > 0 and strict:
        raise DataValidationError(
            f"Column '{column}' has {out_of_range} values outside range [{min_value}, {max_value}]"
        )

    return results


def validate_categorical_values(df: pd.DataFrame, column: str,
                                valid_values: List[Any],
                                allow_null: bool = True) -> Dict[str, Any]:
    """
    Validate categorical column contains only expected values.

    Args:
        df: DataFrame containing the column
        column: Column name to validate
        valid_values: List of valid values
        allow_null: Whether null values are allowed

    Returns:
        Dict with validation statistics

    Raises:
        DataValidationError: If invalid values found
    """
    if column not in df.columns:
        raise DataValidationError(f"Column '{column}' not found")

    col_data = df[column]

    null_count = int(col_data.isna().sum())
    if null_count > 0 and not allow_null:
        raise DataValidationError(f"Column '{column}' contains {null_count} null values")

    unique_values = col_data.dropna().unique()
    invalid_values = [val for val in unique_values if val not in valid_values]

    results = {
        'column': column,
        'null_count': null_count,
        'unique_count': len(unique_values),
        'invalid_count': len(invalid_values),
        'invalid_values': invalid_values[:10]
    }

    if invalid_values:
        raise DataValidationError(
            f"Column '{column}' contains invalid values: {invalid_values[:5]}"
        )

    return results
