"""Temporal classification of trips and trip days.

Two predicates gate every downstream aggregation:

- a day is *past or today* when ``date <= today``;
- a trip is *completed* when ``end_date < today`` (a trip ending today is
  still active).

ISO date strings compare correctly under lexical ordering, so both checks are
plain string comparisons.
"""

import datetime as dt
import logging
from dataclasses import replace

import polars as pl

from .indexer import EntityIndex

logger = logging.getLogger(__name__)


def to_iso_date(value: str | dt.date) -> str:
    """Normalize a reference date to an ISO ``YYYY-MM-DD`` string.

    Raises:
        ValueError: If a string value is not an ISO date
    """
    if isinstance(value, dt.datetime):
        value = value.date()
    if isinstance(value, dt.date):
        return value.isoformat()
    return dt.date.fromisoformat(value).isoformat()


class TemporalClassifier:
    """Flags trips and days relative to a fixed reference date."""

    def __init__(self, today: str | dt.date) -> None:
        """Initialize classifier with the reference date.

        Args:
            today: Reference date, normally the current UTC date
        """
        self.today = to_iso_date(today)

    def classify(self, index: EntityIndex) -> EntityIndex:
        """Return a copy of the index with temporal flags added.

        Adds ``is_completed`` to trips and ``is_past_or_today`` to days.
        """
        trips = index.trips.with_columns(
            (pl.col("end_date") < pl.lit(self.today)).alias("is_completed"),
        )
        days = index.days.with_columns(
            (pl.col("date") <= pl.lit(self.today)).alias("is_past_or_today")
        )

        logger.debug(
            "Classified %d of %d trips as completed as of %s",
            trips["is_completed"].sum(),
            len(trips),
            self.today,
        )
        return replace(index, trips=trips, days=days)
