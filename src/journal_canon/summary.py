"""Output models for the journal statistics summary.

All models are frozen and hold tuples, so a summary cannot be changed once
assembled. Attributes are snake_case; ``model_dump(by_alias=True)`` yields
the camelCase keys the presentation layer consumes.
"""

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel


class SummaryModel(BaseModel):
    """Base class for immutable summary values."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


class TripRef(SummaryModel):
    """A trip listed inside a bucket."""

    trip_id: str
    trip_name: str


class HashtagTripDay(SummaryModel):
    """A trip day carrying a hashtag."""

    trip_id: str
    trip_name: str
    day_index: int


class TravelDay(SummaryModel):
    """A dated trip day inside a travel-day trend bucket."""

    trip_id: str
    trip_name: str
    day_index: int
    date: str


class PlaceSummary(SummaryModel):
    """Visit counts for one deduplicated place."""

    city: str | None
    country: str | None
    trip_count: int
    days_here: int


class HashtagBucket(SummaryModel):
    """Days on completed trips tagged with one hashtag."""

    hashtag: str
    day_count: int
    trip_days: tuple[HashtagTripDay, ...]


class TripTypeBucket(SummaryModel):
    """Completed trips carrying one trip type."""

    type: str
    trip_count: int
    trips: tuple[TripRef, ...]


class CompanionPersonBucket(SummaryModel):
    """Completed trips shared with one person."""

    person_id: str
    first_name: str
    last_name: str | None
    trip_count: int
    trips: tuple[TripRef, ...]


class CompanionGroupBucket(SummaryModel):
    """Completed trips taken with one companion group."""

    group_id: str
    group_name: str
    trip_count: int
    trips: tuple[TripRef, ...]


class TripTrendBucket(SummaryModel):
    """Trips whose dominant period is this bucket."""

    bucket: str
    trip_count: int
    trips: tuple[TripRef, ...]


class TravelDayTrendBucket(SummaryModel):
    """Past or current travel days falling in this bucket."""

    bucket: str
    day_count: int
    trip_count: int
    trips: tuple[TripRef, ...]
    trip_days: tuple[TravelDay, ...]


class StatsSummary(SummaryModel):
    """Aggregated travel statistics for one user."""

    total_trips: int
    total_travel_days: int
    countries_visited: int
    locations_visited: int
    most_visited_location: PlaceSummary | None
    most_visited_by_days: PlaceSummary | None
    hashtag_distribution: tuple[HashtagBucket, ...]
    trip_type_distribution: tuple[TripTypeBucket, ...]
    trip_companion_person_distribution: tuple[CompanionPersonBucket, ...]
    trip_companion_group_distribution: tuple[CompanionGroupBucket, ...]
    trip_trends_year: tuple[TripTrendBucket, ...]
    trip_trends_month: tuple[TripTrendBucket, ...]
    travel_day_trends_year: tuple[TravelDayTrendBucket, ...]
    travel_day_trends_month: tuple[TravelDayTrendBucket, ...]

    @classmethod
    def empty(cls) -> "StatsSummary":
        """Return the summary for a user with no trips."""
        return cls(
            total_trips=0,
            total_travel_days=0,
            countries_visited=0,
            locations_visited=0,
            most_visited_location=None,
            most_visited_by_days=None,
            hashtag_distribution=(),
            trip_type_distribution=(),
            trip_companion_person_distribution=(),
            trip_companion_group_distribution=(),
            trip_trends_year=(),
            trip_trends_month=(),
            travel_day_trends_year=(),
            travel_day_trends_month=(),
        )
