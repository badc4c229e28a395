"""Enumerations for travel journal statistics."""

from enum import StrEnum


class TripOrder(StrEnum):
    """Ordering applied to trip lists inside summary buckets."""

    NAME = "name"
    RECENT = "recent"


class Granularity(StrEnum):
    """Calendar period used for trend buckets."""

    YEAR = "year"
    MONTH = "month"


# Width of the ISO date prefix that forms a bucket key
BUCKET_WIDTHS = {
    Granularity.YEAR: 4,
    Granularity.MONTH: 7,
}
