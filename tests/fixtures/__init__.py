"""Test fixtures for journal data."""

from .journal_records import (
    create_group,
    create_hashtag,
    create_location,
    create_person,
    create_trip,
    create_trip_day,
    create_trip_days,
    create_trip_type,
    lima_journal,
    to_frame,
)

__all__ = [
    "create_group",
    "create_hashtag",
    "create_location",
    "create_person",
    "create_trip",
    "create_trip_day",
    "create_trip_days",
    "create_trip_type",
    "lima_journal",
    "to_frame",
]
