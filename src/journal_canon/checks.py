"""Custom validation checks for travel journal data.

This module contains DataFrame-level validation checks that run during the
custom validator phase (after row-level validation).

A check takes the table it is registered on and returns a list of error
messages, empty when the table passes. Add it to CUSTOM_VALIDATORS below to
run it whenever that table is validated.
"""

from collections.abc import Callable

import polars as pl

TableCheck = Callable[[pl.DataFrame], list[str]]


def check_end_not_before_start(trips: pl.DataFrame) -> list[str]:
    """Ensure end_date is on or after start_date for all trips.

    Args:
        trips: DataFrame with trip records

    Returns:
        List of error messages (empty if validation passes)
    """
    errors = []
    bad_trips = trips.filter(
        pl.col("end_date").cast(pl.Utf8) < pl.col("start_date").cast(pl.Utf8)
    )
    if len(bad_trips) > 0:
        trip_ids = bad_trips["id"].to_list()[:5]
        errors.append(
            f"Found {len(bad_trips)} trips where end_date < start_date. "
            f"Sample trip IDs: {trip_ids}"
        )
    return errors


def check_day_index_unique_per_trip(trip_days: pl.DataFrame) -> list[str]:
    """Ensure each day_index appears at most once within a trip.

    Args:
        trip_days: DataFrame with trip day records

    Returns:
        List of error messages (empty if validation passes)
    """
    errors = []
    if "day_index" not in trip_days.columns:
        return errors

    duplicated = (
        trip_days.filter(pl.col("day_index").is_not_null())
        .group_by(["trip_id", "day_index"])
        .agg(pl.len().alias("count"))
        .filter(pl.col("count") > 1)
    )
    if len(duplicated) > 0:
        trip_ids = sorted(str(v) for v in duplicated["trip_id"].unique())
        errors.append(
            f"Found {len(duplicated)} repeated day_index values. "
            f"Sample trip IDs: {trip_ids[:5]}"
        )
    return errors


# Registry of custom validators
# Format: {table_name: [check_function1, check_function2, ...]}
CUSTOM_VALIDATORS: dict[str, list[TableCheck]] = {
    "trips": [check_end_not_before_start],
    "trip_days": [check_day_index_unique_per_trip],
}
