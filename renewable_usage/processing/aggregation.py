"""
Group-by reductions behind each chart.

Every function takes the loaded usage table, reads an independent projection
of it and returns a new DataFrame; the source table is never modified.
Groups keep first-appearance order and every sort is stable, so ties stay in
input order and repeated runs give identical rows.
"""

import numpy as np
import pandas as pd
from typing import Dict, List, Optional, Tuple, Union
import logging

from ..errors import AggregationError
from ..utils.constants import (
    COUNTRY, ENERGY_SOURCE, YEAR, HOUSEHOLD_SIZE, MONTHLY_USAGE, COST_SAVINGS,
    MEAN_SAVINGS, MEAN_USAGE, SD_USAGE, N_USAGE, CI_LOWER, CI_UPPER, TOTAL_USAGE,
    DEFAULT_CONFIDENCE_Z, MIN_CI_GROUP_SIZE, SUPPORTED_REDUCTIONS,
)

logger = logging.getLogger(__name__)

Reduction = Tuple[str, str]


def aggregate(table: pd.DataFrame,
              group_keys: Union[str, List[str]],
              reductions: Dict[str, Reduction],
              sort_by: Optional[Union[str, List[str]]] = None,
              ascending: Union[bool, List[bool]] = True) -> pd.DataFrame:
    """
    Group the table and reduce one or more numeric columns per group.

    Args:
        table: Usage DataFrame (read only)
        group_keys: Column or columns to group by
        reductions: Output column -> (source column, reduction), where the
            reduction is one of ``mean``, ``sum``, ``std`` or ``count``
        sort_by: Column(s) to sort the result by; None keeps group order
        ascending: Sort direction(s)

    Returns:
        One row per group with the key columns followed by the reductions

    Raises:
        AggregationError: On an unknown column or reduction
    """
    keys = [group_keys] if isinstance(group_keys, str) else list(group_keys)

    missing = [c for c in keys + [src for src, _ in reductions.values()] if c not in table.columns]
    if missing:
        raise AggregationError(f"Columns not in table: {missing}")

    unknown = [how for _, how in reductions.values() if how not in SUPPORTED_REDUCTIONS]
    if unknown:
        raise AggregationError(f"Unsupported reductions: {unknown}")

    # Missing values are skipped by every reduction; std uses ddof=1 on the
    # non-missing count and sum over an all-missing group is 0.
    result = (
        table.groupby(keys, sort=False, observed=True, dropna=True)
        .agg(**{out: pd.NamedAgg(column=src, aggfunc=how) for out, (src, how) in reductions.items()})
        .reset_index()
    )

    if sort_by is not None:
        result = result.sort_values(sort_by, ascending=ascending, kind='mergesort')

    return result.reset_index(drop=True)


def _drop_undefined(result: pd.DataFrame, column: str, keys: List[str], what: str) -> pd.DataFrame:
    undefined = result[column].isna()
    if undefined.any():
        groups = result.loc[undefined, keys].to_dict('records')
        logger.warning(f"Omitting {int(undefined.sum())} groups with no {what} values: {groups}")
        result = result[~undefined].reset_index(drop=True)
    return result


def confidence_interval(mean: float, sd: float, n: int,
                        z: float = DEFAULT_CONFIDENCE_Z) -> Tuple[float, float]:
    """
    Normal-approximation confidence interval ``mean +/- z * sd / sqrt(n)``.

    Args:
        mean: Group mean
        sd: Sample standard deviation
        n: Number of non-missing observations
        z: Critical value (1.96 for 95%)

    Returns:
        (lower, upper) bounds

    Raises:
        AggregationError: If n < 2 or the inputs are not finite
    """
    if n < MIN_CI_GROUP_SIZE:
        raise AggregationError(f"Confidence interval undefined for group size {n}")

    if not (np.isfinite(mean) and np.isfinite(sd)):
        raise AggregationError(f"Confidence interval undefined for mean={mean}, sd={sd}")

    margin = float(z * sd / np.sqrt(n))
    return float(mean) - margin, float(mean) + margin


def savings_by_source(table: pd.DataFrame) -> pd.DataFrame:
    """Mean cost savings per energy source, highest first."""
    result = aggregate(
        table,
        ENERGY_SOURCE,
        {MEAN_SAVINGS: (COST_SAVINGS, 'mean')},
        sort_by=MEAN_SAVINGS,
        ascending=False,
    )
    return _drop_undefined(result, MEAN_SAVINGS, [ENERGY_SOURCE], COST_SAVINGS)


def usage_trend_by_source(table: pd.DataFrame) -> pd.DataFrame:
    """Mean monthly usage per year and energy source, by ascending year."""
    result = aggregate(
        table,
        [YEAR, ENERGY_SOURCE],
        {MEAN_USAGE: (MONTHLY_USAGE, 'mean')},
        sort_by=[YEAR, ENERGY_SOURCE],
        ascending=True,
    )
    return _drop_undefined(result, MEAN_USAGE, [YEAR, ENERGY_SOURCE], MONTHLY_USAGE)


def usage_by_household_size(table: pd.DataFrame) -> pd.DataFrame:
    """
    Per-record usage grouped by household size, for the boxplot.

    Returns the (household size, usage) projection with missing usage
    removed, ordered by household size and then input order.
    """
    projection = table[[HOUSEHOLD_SIZE, MONTHLY_USAGE]].dropna(subset=[MONTHLY_USAGE])
    return projection.sort_values(HOUSEHOLD_SIZE, kind='mergesort').reset_index(drop=True)


def usage_confidence_by_household_size(table: pd.DataFrame,
                                       z: float = DEFAULT_CONFIDENCE_Z) -> pd.DataFrame:
    """
    Mean usage with a confidence interval per household size.

    Groups with fewer than two non-missing usage values have no sample
    standard deviation; they are logged and left out of the result rather
    than failing the chart.

    Args:
        table: Usage DataFrame
        z: Critical value for the interval

    Returns:
        DataFrame with household size, mean, sd, n and interval bounds
    """
    stats = aggregate(
        table,
        HOUSEHOLD_SIZE,
        {
            MEAN_USAGE: (MONTHLY_USAGE, 'mean'),
            SD_USAGE: (MONTHLY_USAGE, 'std'),
            N_USAGE: (MONTHLY_USAGE, 'count'),
        },
        sort_by=HOUSEHOLD_SIZE,
    )

    rows = []
    for record in stats.to_dict('records'):
        try:
            lower, upper = confidence_interval(record[MEAN_USAGE], record[SD_USAGE], int(record[N_USAGE]), z)
        except AggregationError as e:
            logger.warning(f"Omitting household size {record[HOUSEHOLD_SIZE]}: {e}")
            continue
        record[CI_LOWER] = lower
        record[CI_UPPER] = upper
        rows.append(record)

    columns = [HOUSEHOLD_SIZE, MEAN_USAGE, SD_USAGE, N_USAGE, CI_LOWER, CI_UPPER]
    result = pd.DataFrame(rows, columns=columns)
    if len(result):
        result[N_USAGE] = result[N_USAGE].astype('int64')
    return result


def total_usage_by_country(table: pd.DataFrame, year: Optional[int] = None) -> pd.DataFrame:
    """
    Total monthly usage per country, largest first.

    Args:
        table: Usage DataFrame
        year: Restrict to one year; None sums every year

    Returns:
        DataFrame with country and total usage
    """
    if year is not None:
        table = table[table[YEAR] == year]
        if table.empty:
            logger.warning(f"No usage records for year {year}")

    result = aggregate(
        table,
        COUNTRY,
        {TOTAL_USAGE: (MONTHLY_USAGE, 'sum'), N_USAGE: (MONTHLY_USAGE, 'count')},
        sort_by=TOTAL_USAGE,
        ascending=False,
    )

    # A sum over nothing but missing values is 0, which would be wrong data
    no_values = result[N_USAGE] == 0
    if no_values.any():
        logger.warning(
            f"Omitting countries with no {MONTHLY_USAGE} values: "
            f"{result.loc[no_values, COUNTRY].tolist()}"
        )
        result = result[~no_values]

    return result.drop(columns=N_USAGE).reset_index(drop=True)

