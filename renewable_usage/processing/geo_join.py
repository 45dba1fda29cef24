"""
Capital-city coordinate lookup for the country usage map.

Countries are matched to the reference by exact, case-sensitive name. A
country without a match keeps missing coordinates and is left off the map;
it never stops the map from being drawn.
"""

import pandas as pd
from pathlib import Path
from typing import Optional, Tuple, Union
import logging

from ..errors import LoadError, GeoResolutionError
from ..utils.constants import COUNTRY, CAPITAL, LATITUDE, LONGITUDE, RESOLVED, COORDINATE_COLUMNS

logger = logging.getLogger(__name__)

BUNDLED_COORDINATES = Path(__file__).parent.parent / "data" / "capital_coordinates.csv"


def load_capital_coordinates(path: Optional[Union[str, Path]] = None) -> pd.DataFrame:
    """
    Load the country -> capital coordinate reference.

    Args:
        path: CSV with Country, Latitude and Longitude columns (Capital is
            optional); default is the table shipped with the package

    Returns:
        One row per country; when a country appears more than once the
        first entry is kept

    Raises:
        LoadError: If the file is missing, unreadable or lacks a column
    """
    reference_file = Path(path) if path else BUNDLED_COORDINATES

    if not reference_file.exists():
        raise LoadError(f"Coordinate reference not found: {reference_file}")

    try:
        reference = pd.read_csv(reference_file)
    except (pd.errors.ParserError, pd.errors.EmptyDataError, UnicodeDecodeError) as e:
        raise LoadError(f"Malformed coordinate reference {reference_file}: {e}")

    missing = [col for col in COORDINATE_COLUMNS if col not in reference.columns]
    if missing:
        raise LoadError(f"Coordinate reference {reference_file} missing columns: {missing}")

    keep = [COUNTRY, CAPITAL, LATITUDE, LONGITUDE] if CAPITAL in reference.columns else COORDINATE_COLUMNS
    reference = reference[keep].dropna(subset=COORDINATE_COLUMNS).copy()
    reference[COUNTRY] = reference[COUNTRY].astype(str)

    duplicated = reference[COUNTRY].duplicated(keep='first')
    if duplicated.any():
        logger.debug(f"Dropping {int(duplicated.sum())} duplicate coordinate entries")
        reference = reference[~duplicated]

    logger.info(f"Loaded coordinates for {len(reference)} countries from {reference_file}")
    return reference.reset_index(drop=True)


def lookup_coordinates(country: str, reference: pd.DataFrame) -> Tuple[float, float]:
    """
    Coordinates of one country's capital.

    Raises:
        GeoResolutionError: If the country is not in the reference
    """
    match = reference.loc[reference[COUNTRY] == country]
    if match.empty:
        raise GeoResolutionError(f"No coordinates for country '{country}'")

    first = match.iloc[0]
    return float(first[LATITUDE]), float(first[LONGITUDE])


def join_coordinates(rows: pd.DataFrame, reference: pd.DataFrame) -> pd.DataFrame:
    """
    Attach capital coordinates to country-keyed aggregate rows.

    Args:
        rows: Aggregate rows with a Country column
        reference: Output of load_capital_coordinates

    Returns:
        Copy of rows with Latitude, Longitude and Resolved columns;
        unresolved rows have missing coordinates and Resolved False
    """
    joined = rows.copy()
    latitudes, longitudes, resolved = [], [], []

    for country in joined[COUNTRY]:
        try:
            lat, lon = lookup_coordinates(country, reference)
        except GeoResolutionError as e:
            logger.warning(f"{e}; dropping it from the map")
            lat, lon, found = float('nan'), float('nan'), False
        else:
            found = True
        latitudes.append(lat)
        longitudes.append(lon)
        resolved.append(found)

    joined[LATITUDE] = pd.Series(latitudes, index=joined.index, dtype='float64')
    joined[LONGITUDE] = pd.Series(longitudes, index=joined.index, dtype='float64')
    joined[RESOLVED] = pd.Series(resolved, index=joined.index, dtype='bool')

    return joined


def resolved_rows(joined: pd.DataFrame) -> pd.DataFrame:
    """Rows of a joined table that have coordinates."""
    return joined[joined[RESOLVED]].reset_index(drop=True)
