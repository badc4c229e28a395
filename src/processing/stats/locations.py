"""Location aggregation for travel statistics.

Locations are deduplicated by a place key built from the lowercase city and
country. Only locations recorded on past-or-today days count; trip completion
plays no role here.

Most-visited selection ranks places by:
1. Distinct trips (or distinct days for the by-days variant), descending
2. Latest start date of a trip that touched the place, descending
3. "city,country" label in lowercase, ascending
"""

import logging
from dataclasses import dataclass

import polars as pl

from journal_canon.summary import PlaceSummary

from .configs import StatsConfig
from .indexer import EntityIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LocationStats:
    """Location-derived part of the summary."""

    countries_visited: int
    locations_visited: int
    most_visited: PlaceSummary | None
    most_visited_by_days: PlaceSummary | None


class LocationAggregator:
    """Counts places and countries and selects the most visited place."""

    def __init__(self, config: StatsConfig) -> None:
        """Initialize LocationAggregator with configuration.

        Args:
            config: Statistics configuration
        """
        self.config = config

    def aggregate(self, index: EntityIndex) -> LocationStats:
        """Aggregate visits from a classified entity index.

        Args:
            index: Entity index with is_past_or_today on days

        Returns:
            LocationStats with counts and most-visited places
        """
        visits = self._qualifying_visits(index)
        places = self._place_stats(visits)

        stats = LocationStats(
            countries_visited=visits["country"].drop_nulls().n_unique(),
            locations_visited=len(places),
            most_visited=self._select_top(places, "trip_count"),
            most_visited_by_days=self._select_top(places, "days_here"),
        )
        logger.info(
            "Aggregated %d locations across %d countries",
            stats.locations_visited,
            stats.countries_visited,
        )
        return stats

    def _qualifying_visits(self, index: EntityIndex) -> pl.DataFrame:
        """Locations on past-or-today days that name a city or country."""
        return (
            index.locations.join(
                index.days.select(["day_id", "trip_id", "is_past_or_today"]),
                on="day_id",
                how="inner",
            )
            .join(
                index.trips.select(["trip_id", "start_date"]),
                on="trip_id",
                how="inner",
            )
            .filter(pl.col("is_past_or_today"))
            .filter(pl.col("city").is_not_null() | pl.col("country").is_not_null())
            .sort("location_row")
        )

    def _place_stats(self, visits: pl.DataFrame) -> pl.DataFrame:
        """Per place key: display names, distinct trips/days, latest start."""
        city_lower = pl.col("city").fill_null("").str.to_lowercase()
        country_lower = pl.col("country").fill_null("").str.to_lowercase()

        return (
            visits.with_columns(
                pl.concat_str([city_lower, pl.lit("|"), country_lower]).alias(
                    "place_key"
                ),
                pl.concat_str([city_lower, pl.lit(","), country_lower]).alias(
                    "place_label"
                ),
            )
            .group_by("place_key", maintain_order=True)
            .agg(
                # Display casing comes from the first location seen
                pl.col("city").first(),
                pl.col("country").first(),
                pl.col("place_label").first(),
                pl.col("trip_id").n_unique().alias("trip_count"),
                pl.col("day_id").n_unique().alias("days_here"),
                pl.col("start_date").max().alias("latest_trip_start"),
            )
        )

    def _select_top(
        self, places: pl.DataFrame, count_col: str
    ) -> PlaceSummary | None:
        """Pick the highest ranked place by count, recency, then label."""
        if places.is_empty():
            return None

        top = places.sort(
            [count_col, "latest_trip_start", "place_label"],
            descending=[True, True, False],
        ).row(0, named=True)

        return PlaceSummary(
            city=top["city"],
            country=top["country"],
            trip_count=top["trip_count"],
            days_here=top["days_here"],
        )
