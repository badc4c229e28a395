"""Year and month trend series.

Trips per period:
    Each trip, completed or not, is placed in exactly one bucket per
    granularity: the bucket holding most of its days. Ties go to the earlier
    bucket. A trip without days falls back to the bucket of its start date
    and is skipped when it has none.

Travel days per period:
    Each past-or-today day is placed in the bucket of its own date, so a trip
    spanning a year boundary contributes days to both years.
"""

import logging
from dataclasses import dataclass

import polars as pl

from journal_canon.codebook import Granularity, TripOrder
from journal_canon.summary import TravelDayTrendBucket, TripTrendBucket

from .configs import StatsConfig
from .helpers import bucket_expr, collect_trip_lists, sort_buckets, to_models
from .indexer import EntityIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TrendStats:
    """Trend part of the summary."""

    trip_trends_year: tuple[TripTrendBucket, ...]
    trip_trends_month: tuple[TripTrendBucket, ...]
    travel_day_trends_year: tuple[TravelDayTrendBucket, ...]
    travel_day_trends_month: tuple[TravelDayTrendBucket, ...]


def dominant_buckets(
    trips: pl.DataFrame, days: pl.DataFrame, granularity: Granularity
) -> pl.DataFrame:
    """Assign every trip to the bucket containing most of its days.

    Args:
        trips: Indexed trips (trip_id, start_date)
        days: Indexed days (trip_id, date)
        granularity: Year or month bucketing

    Returns:
        Frame with one (trip_id, bucket) row per datable trip
    """
    counts = (
        days.filter(pl.col("date").is_not_null())
        .with_columns(bucket_expr("date", granularity).alias("bucket"))
        .group_by(["trip_id", "bucket"])
        .agg(pl.len().alias("day_count"))
        .sort(["trip_id", "day_count", "bucket"], descending=[False, True, False])
        .group_by("trip_id", maintain_order=True)
        .agg(pl.col("bucket").first())
    )

    assigned = (
        trips.select(["trip_id", "start_date"])
        .join(counts, on="trip_id", how="left")
        .with_columns(
            pl.coalesce(
                pl.col("bucket"), bucket_expr("start_date", granularity)
            ).alias("bucket")
        )
        .select(["trip_id", "bucket"])
    )

    undated = assigned.filter(pl.col("bucket").is_null())
    if len(undated) > 0:
        logger.warning(
            "Skipping %d trips without days or start date in %s trends: %s",
            len(undated),
            granularity,
            undated["trip_id"].to_list(),
        )
    return assigned.filter(pl.col("bucket").is_not_null())


class TrendBucketer:
    """Builds trips-per-period and travel-days-per-period series."""

    def __init__(self, config: StatsConfig) -> None:
        """Initialize TrendBucketer with configuration.

        Args:
            config: Statistics configuration
        """
        self.config = config

    def aggregate(self, index: EntityIndex) -> TrendStats:
        """Bucket trips and travel days at year and month granularity.

        Args:
            index: Entity index with is_past_or_today on days

        Returns:
            TrendStats with the four series
        """
        stats = TrendStats(
            trip_trends_year=self._trip_trends(index, Granularity.YEAR),
            trip_trends_month=self._trip_trends(index, Granularity.MONTH),
            travel_day_trends_year=self._travel_day_trends(
                index, Granularity.YEAR
            ),
            travel_day_trends_month=self._travel_day_trends(
                index, Granularity.MONTH
            ),
        )
        logger.info(
            "Built trends: %d trip years, %d trip months, "
            "%d travel-day years, %d travel-day months",
            len(stats.trip_trends_year),
            len(stats.trip_trends_month),
            len(stats.travel_day_trends_year),
            len(stats.travel_day_trends_month),
        )
        return stats

    def _trip_trends(
        self, index: EntityIndex, granularity: Granularity
    ) -> tuple[TripTrendBucket, ...]:
        assigned = dominant_buckets(index.trips, index.days, granularity)
        buckets = collect_trip_lists(
            assigned, "bucket", index.trips, self.config.trip_order
        )
        return to_models(sort_buckets(buckets, granularity), TripTrendBucket)

    def _travel_day_trends(
        self, index: EntityIndex, granularity: Granularity
    ) -> tuple[TravelDayTrendBucket, ...]:
        past_days = (
            index.days.filter(pl.col("is_past_or_today"))
            .with_columns(bucket_expr("date", granularity).alias("bucket"))
            .join(
                index.trips.select(
                    ["trip_id", "trip_name", "trip_name_key", "start_date"]
                ),
                on="trip_id",
                how="inner",
            )
        )

        if self.config.trip_order == TripOrder.RECENT:
            # Same date shows newer trips first
            day_sort = [
                "date", "start_date", "trip_name_key", "trip_id", "day_index"
            ]
            descending = [False, True, False, False, False]
        else:
            day_sort = ["date", "trip_name_key", "trip_id", "day_index"]
            descending = [False, False, False, False]

        entries = (
            past_days.sort(day_sort, descending=descending)
            .group_by("bucket", maintain_order=True)
            .agg(
                pl.len().alias("day_count"),
                pl.struct(["trip_id", "trip_name", "day_index", "date"]).alias(
                    "trip_days"
                ),
            )
        )
        trips = collect_trip_lists(
            past_days, "bucket", index.trips, self.config.trip_order
        )

        buckets = entries.join(trips, on="bucket", how="inner").select(
            ["bucket", "day_count", "trip_count", "trips", "trip_days"]
        )
        return to_models(sort_buckets(buckets, granularity), TravelDayTrendBucket)
