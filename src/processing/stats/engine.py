"""Travel statistics engine.

Computes one immutable StatsSummary from the full set of journal rows of a
single user. Every call recomputes everything; nothing is kept between calls.

Algorithm Overview:
-------------------
1. Entity Indexing
    - Casts ids to strings and dates to ISO strings
    - Drops rows whose trip or trip day reference does not resolve
    - Applies display fallbacks for missing trip names and day indexes
2. Temporal Classification
    - Day is past-or-today when date <= today
    - Trip is completed when end_date < today
3. Aggregation (independent of each other)
    - Locations: place deduplication, counts, most-visited selection
    - Distributions: hashtags, trip types and companions of completed trips
    - Trends: dominant bucket per trip, direct bucket per travel day
4. Assembly
    - Totals plus all aggregation results in one frozen summary
    - An empty trip set yields the empty summary without aggregating
"""

import datetime as dt
import logging
from typing import Any

import polars as pl

from journal_canon.summary import StatsSummary
from pipeline.decoration import step

from .configs import StatsConfig
from .distributions import DistributionAggregator
from .indexer import build_index
from .locations import LocationAggregator
from .temporal import TemporalClassifier, to_iso_date
from .trends import TrendBucketer

logger = logging.getLogger(__name__)


class StatsEngine:
    """Compose the statistics summary from journal tables."""

    def __init__(self, config: StatsConfig | None = None) -> None:
        """Initialize StatsEngine with configuration.

        Args:
            config: Optional statistics configuration
        """
        self.config = config or StatsConfig()
        self.location_aggregator = LocationAggregator(self.config)
        self.distribution_aggregator = DistributionAggregator(self.config)
        self.trend_bucketer = TrendBucketer(self.config)

    def calculate(
        self,
        trips: pl.DataFrame | None,
        trip_days: pl.DataFrame | None,
        *,
        today: str | dt.date,
        **tables: pl.DataFrame | None,
    ) -> StatsSummary:
        """Compute the summary for one user's journal.

        Args:
            trips: Trip rows
            trip_days: Trip day rows
            today: Reference date for the temporal predicates
            **tables: Optional tables keyed by table name (trip_locations,
                trip_day_hashtags, trip_types, trip_companion_groups,
                trip_companion_people, trip_groups, trip_group_people,
                people)

        Returns:
            StatsSummary for the supplied rows

        Raises:
            ValueError: If today is not an ISO date
        """
        classifier = TemporalClassifier(today)

        if trips is None or trips.is_empty():
            logger.info("No trips supplied, returning empty summary")
            return StatsSummary.empty()

        index = classifier.classify(
            build_index(trips, trip_days, config=self.config, **tables)
        )

        locations = self.location_aggregator.aggregate(index)
        distributions = self.distribution_aggregator.aggregate(index)
        trends = self.trend_bucketer.aggregate(index)

        total_travel_days = (
            index.days.filter(pl.col("is_past_or_today"))["date"]
            .drop_nulls()
            .n_unique()
        )

        summary = StatsSummary(
            total_trips=index.trip_rows,
            total_travel_days=total_travel_days,
            countries_visited=locations.countries_visited,
            locations_visited=locations.locations_visited,
            most_visited_location=locations.most_visited,
            most_visited_by_days=locations.most_visited_by_days,
            hashtag_distribution=distributions.hashtags,
            trip_type_distribution=distributions.trip_types,
            trip_companion_person_distribution=distributions.companion_people,
            trip_companion_group_distribution=distributions.companion_groups,
            trip_trends_year=trends.trip_trends_year,
            trip_trends_month=trends.trip_trends_month,
            travel_day_trends_year=trends.travel_day_trends_year,
            travel_day_trends_month=trends.travel_day_trends_month,
        )

        logger.info(
            "Computed stats for %d trips and %d travel days as of %s",
            summary.total_trips,
            summary.total_travel_days,
            classifier.today,
        )
        return summary


def calculate_stats(
    trips: pl.DataFrame | None,
    trip_days: pl.DataFrame | None,
    trip_locations: pl.DataFrame | None = None,
    trip_day_hashtags: pl.DataFrame | None = None,
    trip_types: pl.DataFrame | None = None,
    *,
    today: str | dt.date,
    trip_companion_groups: pl.DataFrame | None = None,
    trip_companion_people: pl.DataFrame | None = None,
    trip_groups: pl.DataFrame | None = None,
    trip_group_people: pl.DataFrame | None = None,
    people: pl.DataFrame | None = None,
    config: StatsConfig | None = None,
) -> StatsSummary:
    """Compute the travel statistics summary for one user.

    Args:
        trips: Trip rows
        trip_days: Trip day rows
        trip_locations: Location rows per trip day
        trip_day_hashtags: Hashtag rows per trip day
        trip_types: Trip type rows
        today: Reference date (ISO string or date)
        trip_companion_groups: Companion groups selected per trip
        trip_companion_people: Companions selected per trip
        trip_groups: Companion group names
        trip_group_people: Companion group memberships
        people: Companion names
        config: Optional statistics configuration

    Returns:
        StatsSummary for the supplied rows
    """
    return StatsEngine(config).calculate(
        trips,
        trip_days,
        today=today,
        trip_locations=trip_locations,
        trip_day_hashtags=trip_day_hashtags,
        trip_types=trip_types,
        trip_companion_groups=trip_companion_groups,
        trip_companion_people=trip_companion_people,
        trip_groups=trip_groups,
        trip_group_people=trip_group_people,
        people=people,
    )


@step()
def compute_stats(
    trips: pl.DataFrame,
    trip_days: pl.DataFrame,
    trip_locations: pl.DataFrame | None = None,
    trip_day_hashtags: pl.DataFrame | None = None,
    trip_types: pl.DataFrame | None = None,
    trip_companion_groups: pl.DataFrame | None = None,
    trip_companion_people: pl.DataFrame | None = None,
    trip_groups: pl.DataFrame | None = None,
    trip_group_people: pl.DataFrame | None = None,
    people: pl.DataFrame | None = None,
    today: str | dt.date | None = None,
    stats_config: dict[str, Any] | None = None,
) -> dict[str, StatsSummary]:
    """Pipeline step computing the statistics summary.

    Args:
        trips: Trip rows
        trip_days: Trip day rows
        trip_locations: Location rows per trip day
        trip_day_hashtags: Hashtag rows per trip day
        trip_types: Trip type rows
        trip_companion_groups: Companion groups selected per trip
        trip_companion_people: Companions selected per trip
        trip_groups: Companion group names
        trip_group_people: Companion group memberships
        people: Companion names
        today: Reference date; defaults to the current UTC date
        stats_config: StatsConfig fields from the pipeline config

    Returns:
        Dict with the summary under "summary"
    """
    if today is None:
        today = dt.datetime.now(dt.UTC).date().isoformat()
    else:
        today = to_iso_date(today)

    summary = calculate_stats(
        trips,
        trip_days,
        trip_locations,
        trip_day_hashtags,
        trip_types,
        today=today,
        trip_companion_groups=trip_companion_groups,
        trip_companion_people=trip_companion_people,
        trip_groups=trip_groups,
        trip_group_people=trip_group_people,
        people=people,
        config=StatsConfig(**(stats_config or {})),
    )
    return {"summary": summary}
