"""Categorical distributions over completed trips.

Hashtags are counted per distinct trip day, trip types and companions per
distinct trip. Trips that are still active or have not started yet never
contribute.
"""

import logging
from dataclasses import dataclass

import polars as pl

from journal_canon.codebook import TripOrder
from journal_canon.summary import (
    CompanionGroupBucket,
    CompanionPersonBucket,
    HashtagBucket,
    TripTypeBucket,
)

from .configs import StatsConfig
from .helpers import collect_trip_lists, to_models
from .indexer import EntityIndex

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DistributionStats:
    """Distribution part of the summary."""

    hashtags: tuple[HashtagBucket, ...]
    trip_types: tuple[TripTypeBucket, ...]
    companion_people: tuple[CompanionPersonBucket, ...]
    companion_groups: tuple[CompanionGroupBucket, ...]


class DistributionAggregator:
    """Builds hashtag, trip type and companion distributions."""

    def __init__(self, config: StatsConfig) -> None:
        """Initialize DistributionAggregator with configuration.

        Args:
            config: Statistics configuration
        """
        self.config = config

    def aggregate(self, index: EntityIndex) -> DistributionStats:
        """Aggregate distributions from a classified entity index.

        Args:
            index: Entity index with is_completed on trips

        Returns:
            DistributionStats with all four distributions
        """
        completed = index.trips.filter(pl.col("is_completed"))
        logger.debug(
            "Aggregating distributions over %d completed trips", len(completed)
        )

        stats = DistributionStats(
            hashtags=to_models(
                self._hashtags(index, completed), HashtagBucket
            ),
            trip_types=to_models(
                self._trip_types(index, completed), TripTypeBucket
            ),
            companion_people=to_models(
                self._companion_people(index, completed), CompanionPersonBucket
            ),
            companion_groups=to_models(
                self._companion_groups(index, completed), CompanionGroupBucket
            ),
        )
        logger.info(
            "Built %d hashtag, %d trip type, %d person and %d group buckets",
            len(stats.hashtags),
            len(stats.trip_types),
            len(stats.companion_people),
            len(stats.companion_groups),
        )
        return stats

    def _hashtags(
        self, index: EntityIndex, completed: pl.DataFrame
    ) -> pl.DataFrame:
        """Distinct tagged days per hashtag, most used first."""
        if self.config.trip_order == TripOrder.RECENT:
            sort_cols = ["start_date", "trip_name_key", "trip_id", "day_index"]
            descending = [True, False, False, False]
        else:
            sort_cols = ["trip_name_key", "trip_id", "day_index"]
            descending = [False, False, False]

        return (
            index.hashtags.unique(subset=["hashtag", "day_id"])
            .join(
                index.days.select(["day_id", "trip_id", "day_index"]),
                on="day_id",
                how="inner",
            )
            .join(
                completed.select(
                    ["trip_id", "trip_name", "trip_name_key", "start_date"]
                ),
                on="trip_id",
                how="inner",
            )
            .sort(sort_cols, descending=descending)
            .group_by("hashtag", maintain_order=True)
            .agg(
                pl.len().alias("day_count"),
                pl.struct(["trip_id", "trip_name", "day_index"]).alias(
                    "trip_days"
                ),
            )
            .sort(["day_count", "hashtag"], descending=[True, False])
        )

    def _trip_types(
        self, index: EntityIndex, completed: pl.DataFrame
    ) -> pl.DataFrame:
        """Distinct completed trips per trip type."""
        return collect_trip_lists(
            index.trip_types, "type", completed, self.config.trip_order
        ).sort(["trip_count", "type"], descending=[True, False])

    def _companion_groups(
        self, index: EntityIndex, completed: pl.DataFrame
    ) -> pl.DataFrame:
        """Distinct completed trips per explicitly selected group."""
        return (
            collect_trip_lists(
                index.companion_groups,
                "group_id",
                completed,
                self.config.trip_order,
            )
            .join(index.groups, on="group_id", how="left")
            .with_columns(
                pl.col("group_name").fill_null(self.config.unknown_group_name)
            )
            .sort(
                ["trip_count", "group_name", "group_id"],
                descending=[True, False, False],
            )
            .select(["group_id", "group_name", "trip_count", "trips"])
        )

    def _companion_people(
        self, index: EntityIndex, completed: pl.DataFrame
    ) -> pl.DataFrame:
        """Distinct completed trips per person, direct or through a group."""
        implied = index.companion_groups.join(
            index.group_members, on="group_id", how="inner"
        ).select(["trip_id", "person_id"])
        pairs = pl.concat(
            [index.companion_people.select(["trip_id", "person_id"]), implied]
        )

        full_name = pl.concat_str(
            [pl.col("first_name"), pl.col("last_name")],
            separator=" ",
            ignore_nulls=True,
        ).str.to_lowercase()

        return (
            collect_trip_lists(
                pairs, "person_id", completed, self.config.trip_order
            )
            .join(index.people, on="person_id", how="left")
            .with_columns(
                pl.col("first_name").fill_null(self.config.unknown_person_name)
            )
            .sort(
                [pl.col("trip_count"), full_name, pl.col("person_id")],
                descending=[True, False, False],
            )
            .select(
                ["person_id", "first_name", "last_name", "trip_count", "trips"]
            )
        )
