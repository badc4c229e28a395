"""Configuration model for statistics aggregation."""

from pydantic import BaseModel, ConfigDict, Field

from journal_canon.codebook import TripOrder


class StatsConfig(BaseModel):
    """Configuration model for statistics aggregation.

    Holds the display fallbacks applied when journal rows are missing
    optional values, and the ordering of trip lists inside buckets.
    """

    model_config = ConfigDict(frozen=True)

    untitled_trip_name: str = Field(
        default="Untitled trip",
        description="Name shown for trips without a name",
    )

    default_day_index: int = Field(
        default=1,
        ge=1,
        description="Day index shown for trip days without one",
    )

    unknown_person_name: str = Field(
        default="Unknown",
        description=(
            "First name shown for companions missing from the people table"
        ),
    )

    unknown_group_name: str = Field(
        default="Unknown group",
        description=(
            "Name shown for companion groups missing from the groups table"
        ),
    )

    trip_order: TripOrder = Field(
        default=TripOrder.NAME,
        description=(
            "Ordering of trip lists inside buckets: 'name' sorts by trip "
            "name, 'recent' sorts newest start date first"
        ),
    )
