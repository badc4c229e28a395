"""Shared frame helpers for statistics aggregation."""

import polars as pl
from pydantic import BaseModel

from journal_canon.codebook import BUCKET_WIDTHS, Granularity, TripOrder


def trip_sort(order: TripOrder) -> tuple[list[str], list[bool]]:
    """Sort columns and directions for trip lists inside buckets."""
    if order == TripOrder.RECENT:
        return ["start_date", "trip_name_key", "trip_id"], [True, False, False]
    return ["trip_name_key", "trip_id"], [False, False]


def collect_trip_lists(
    pairs: pl.DataFrame,
    by: str,
    trips: pl.DataFrame,
    order: TripOrder,
) -> pl.DataFrame:
    """Group distinct (key, trip) pairs into ordered trip lists.

    Args:
        pairs: Frame with the grouping column and trip_id
        by: Grouping column
        trips: Indexed trips (trip_id, trip_name, trip_name_key, start_date)
        order: Ordering of each trip list

    Returns:
        One row per key with trip_count and trips (list of
        {trip_id, trip_name} structs)
    """
    sort_cols, descending = trip_sort(order)
    return (
        pairs.select([by, "trip_id"])
        .unique()
        .join(
            trips.select(
                ["trip_id", "trip_name", "trip_name_key", "start_date"]
            ),
            on="trip_id",
            how="inner",
        )
        .sort(sort_cols, descending=descending)
        .group_by(by, maintain_order=True)
        .agg(
            pl.len().alias("trip_count"),
            pl.struct(["trip_id", "trip_name"]).alias("trips"),
        )
    )


def bucket_expr(column: str, granularity: Granularity) -> pl.Expr:
    """Year (YYYY) or month (YYYY-MM) prefix of an ISO date column."""
    return pl.col(column).str.slice(0, BUCKET_WIDTHS[granularity])


def sort_buckets(frame: pl.DataFrame, granularity: Granularity) -> pl.DataFrame:
    """Sort trend buckets chronologically.

    Year buckets compare as integers, month buckets as strings.
    """
    if granularity == Granularity.YEAR:
        return frame.sort(
            pl.col("bucket").cast(pl.Int64, strict=False),
            pl.col("bucket"),
            nulls_last=True,
        )
    return frame.sort("bucket")


def to_models(
    frame: pl.DataFrame, model: type[BaseModel]
) -> tuple[BaseModel, ...]:
    """Convert aggregated rows into summary models."""
    return tuple(
        model.model_validate(row) for row in frame.iter_rows(named=True)
    )
