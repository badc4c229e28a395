"""Entity indexing for statistics aggregation.

Turns the flat journal tables into keyed frames with a fixed schema:

- every identifier is cast to a string and renamed to ``<entity>_id``;
- date columns become ISO ``YYYY-MM-DD`` strings;
- blank ``city``/``region``/``country`` values become null;
- rows whose parent reference does not resolve are dropped;
- absent tables become empty frames.

No business logic happens here.
"""

import logging
from dataclasses import dataclass

import polars as pl

from .configs import StatsConfig

logger = logging.getLogger(__name__)

TRIP_COLUMNS = {
    "id": pl.Utf8,
    "name": pl.Utf8,
    "start_date": pl.Utf8,
    "end_date": pl.Utf8,
}
DAY_COLUMNS = {
    "id": pl.Utf8,
    "trip_id": pl.Utf8,
    "date": pl.Utf8,
    "day_index": pl.Int64,
}
LOCATION_COLUMNS = {
    "trip_day_id": pl.Utf8,
    "city": pl.Utf8,
    "region": pl.Utf8,
    "country": pl.Utf8,
}
HASHTAG_COLUMNS = {"trip_day_id": pl.Utf8, "hashtag": pl.Utf8}
TRIP_TYPE_COLUMNS = {"trip_id": pl.Utf8, "type": pl.Utf8}
COMPANION_GROUP_COLUMNS = {"trip_id": pl.Utf8, "trip_group_id": pl.Utf8}
COMPANION_PERSON_COLUMNS = {"trip_id": pl.Utf8, "person_id": pl.Utf8}
GROUP_COLUMNS = {"id": pl.Utf8, "name": pl.Utf8}
GROUP_PERSON_COLUMNS = {"trip_group_id": pl.Utf8, "person_id": pl.Utf8}
PEOPLE_COLUMNS = {
    "id": pl.Utf8,
    "first_name": pl.Utf8,
    "last_name": pl.Utf8,
}

# Columns that may be absent from an export
OPTIONAL_COLUMNS = {
    "name",
    "day_index",
    "city",
    "region",
    "country",
    "first_name",
    "last_name",
}
DATE_COLUMNS = {"start_date", "end_date", "date"}
PLACE_COLUMNS = ["city", "region", "country"]


@dataclass(frozen=True)
class EntityIndex:
    """Keyed journal frames for one statistics computation.

    Attributes:
        trip_rows: Number of trip rows supplied by the caller
        trips: One row per trip_id (trip_name, trip_name_key, dates)
        days: One row per day_id of a known trip (trip_id, date, day_index)
        locations: Locations on known days, in input order (location_row)
        hashtags: (day_id, hashtag) on known days
        trip_types: (trip_id, type) on known trips
        companion_groups: (trip_id, group_id) on known trips
        companion_people: (trip_id, person_id) on known trips
        groups: One row per group_id (group_name)
        group_members: (group_id, person_id)
        people: One row per person_id (first_name, last_name)
    """

    trip_rows: int
    trips: pl.DataFrame
    days: pl.DataFrame
    locations: pl.DataFrame
    hashtags: pl.DataFrame
    trip_types: pl.DataFrame
    companion_groups: pl.DataFrame
    companion_people: pl.DataFrame
    groups: pl.DataFrame
    group_members: pl.DataFrame
    people: pl.DataFrame


def _date_expr(df: pl.DataFrame, column: str) -> pl.Expr:
    """Render a date column as an ISO date string."""
    if df.schema[column].is_temporal():
        return pl.col(column).cast(pl.Date).cast(pl.Utf8)
    return pl.col(column).cast(pl.Utf8)


def _conform(
    df: pl.DataFrame | None,
    columns: dict[str, pl.DataType],
) -> pl.DataFrame:
    """Select and cast the columns the engine reads from a table."""
    if df is None or df.width == 0:
        return pl.DataFrame(schema=columns)

    missing = [
        c for c in columns if c not in df.columns and c in OPTIONAL_COLUMNS
    ]
    df = df.with_columns(
        [pl.lit(None, dtype=columns[c]).alias(c) for c in missing]
    )
    return df.select(
        [
            (
                _date_expr(df, name)
                if name in DATE_COLUMNS
                else pl.col(name).cast(dtype)
            ).alias(name)
            for name, dtype in columns.items()
        ]
    )


def _blank_to_null(column: str) -> pl.Expr:
    """Treat empty strings as missing values."""
    return (
        pl.when(pl.col(column).str.len_chars() > 0)
        .then(pl.col(column))
        .alias(column)
    )


def build_index(
    trips: pl.DataFrame,
    trip_days: pl.DataFrame | None = None,
    trip_locations: pl.DataFrame | None = None,
    trip_day_hashtags: pl.DataFrame | None = None,
    trip_types: pl.DataFrame | None = None,
    trip_companion_groups: pl.DataFrame | None = None,
    trip_companion_people: pl.DataFrame | None = None,
    trip_groups: pl.DataFrame | None = None,
    trip_group_people: pl.DataFrame | None = None,
    people: pl.DataFrame | None = None,
    config: StatsConfig | None = None,
) -> EntityIndex:
    """Index journal tables by id and drop unresolvable references.

    Args:
        trips: Trip rows for one user
        trip_days: Day rows of those trips
        trip_locations: Location rows of those days
        trip_day_hashtags: Hashtag rows of those days
        trip_types: Trip type rows
        trip_companion_groups: Companion groups selected per trip
        trip_companion_people: Companions selected per trip
        trip_groups: Companion group names
        trip_group_people: Companion group memberships
        people: Companion names
        config: Display fallbacks for missing names and day indexes

    Returns:
        EntityIndex with normalized, keyed frames
    """
    config = config or StatsConfig()

    trip_table = _conform(trips, TRIP_COLUMNS)
    trip_frame = (
        trip_table.rename({"id": "trip_id", "name": "trip_name"})
        .filter(pl.col("trip_id").is_not_null())
        .unique(subset="trip_id", keep="last", maintain_order=True)
        .with_columns(pl.col("trip_name").fill_null(config.untitled_trip_name))
        .with_columns(
            pl.col("trip_name").str.to_lowercase().alias("trip_name_key")
        )
    )
    known_trips = trip_frame.select("trip_id")

    days = (
        _conform(trip_days, DAY_COLUMNS)
        .rename({"id": "day_id"})
        .filter(pl.col("day_id").is_not_null())
        .join(known_trips, on="trip_id", how="semi")
        .unique(subset="day_id", keep="last", maintain_order=True)
        .with_columns(pl.col("day_index").fill_null(config.default_day_index))
    )
    known_days = days.select("day_id")

    locations = (
        _conform(trip_locations, LOCATION_COLUMNS)
        .rename({"trip_day_id": "day_id"})
        .with_row_index("location_row")
        .with_columns([_blank_to_null(c) for c in PLACE_COLUMNS])
        .join(known_days, on="day_id", how="semi")
    )

    hashtags = (
        _conform(trip_day_hashtags, HASHTAG_COLUMNS)
        .rename({"trip_day_id": "day_id"})
        .filter(pl.col("hashtag").is_not_null())
        .join(known_days, on="day_id", how="semi")
    )

    type_frame = (
        _conform(trip_types, TRIP_TYPE_COLUMNS)
        .filter(pl.col("type").is_not_null())
        .join(known_trips, on="trip_id", how="semi")
    )

    companion_groups = (
        _conform(trip_companion_groups, COMPANION_GROUP_COLUMNS)
        .rename({"trip_group_id": "group_id"})
        .filter(pl.col("group_id").is_not_null())
        .join(known_trips, on="trip_id", how="semi")
    )

    companion_people = (
        _conform(trip_companion_people, COMPANION_PERSON_COLUMNS)
        .filter(pl.col("person_id").is_not_null())
        .join(known_trips, on="trip_id", how="semi")
    )

    groups = (
        _conform(trip_groups, GROUP_COLUMNS)
        .rename({"id": "group_id", "name": "group_name"})
        .filter(pl.col("group_id").is_not_null())
        .unique(subset="group_id", keep="last", maintain_order=True)
    )

    group_members = (
        _conform(trip_group_people, GROUP_PERSON_COLUMNS)
        .rename({"trip_group_id": "group_id"})
        .filter(pl.col("person_id").is_not_null())
    )

    people_frame = (
        _conform(people, PEOPLE_COLUMNS)
        .rename({"id": "person_id"})
        .filter(pl.col("person_id").is_not_null())
        .unique(subset="person_id", keep="last", maintain_order=True)
    )

    logger.debug(
        "Indexed %d trips, %d days, %d locations, %d hashtags",
        len(trip_frame),
        len(days),
        len(locations),
        len(hashtags),
    )

    return EntityIndex(
        trip_rows=len(trip_table),
        trips=trip_frame,
        days=days,
        locations=locations,
        hashtags=hashtags,
        trip_types=type_frame,
        companion_groups=companion_groups,
        companion_people=companion_people,
        groups=groups,
        group_members=group_members,
        people=people_frame,
    )
