"""End-to-end tests for calculate_stats.

Covers the empty summary, the Lima journal before and after completion,
distinct date counting, dominant buckets across a year boundary and the
camelCase export of the summary.
"""

import datetime as dt

import polars as pl
import pytest
from pydantic import ValidationError

from journal_canon import StatsSummary
from processing.stats import StatsConfig, calculate_stats
from tests.fixtures import (
    create_location,
    create_trip,
    create_trip_day,
    create_trip_days,
    lima_journal,
    to_frame,
)


class TestEmptySummary:
    """Tests for a user without trips."""

    def test_empty_trips_frame(self):
        """An empty trip set yields zero counts and empty collections."""
        summary = calculate_stats(
            pl.DataFrame(), pl.DataFrame(), today="2024-06-01"
        )
        assert summary == StatsSummary.empty()

    def test_trips_with_schema_but_no_rows(self):
        """A trips frame with columns but no rows is also empty."""
        trips = pl.DataFrame(
            schema={"id": pl.Utf8, "start_date": pl.Utf8, "end_date": pl.Utf8}
        )
        summary = calculate_stats(trips, None, today="2024-06-01")

        assert summary.total_trips == 0
        assert summary.most_visited_location is None
        assert summary.trip_trends_year == ()

    def test_empty_summary_ignores_orphan_rows(self):
        """Days without trips do not make a summary non-empty."""
        days = to_frame(create_trip_days("t1", "2024-01-10", 2))
        summary = calculate_stats(pl.DataFrame(), days, today="2024-06-01")
        assert summary == StatsSummary.empty()

    def test_malformed_today_raises(self):
        """A reference date that is not ISO is a caller error."""
        with pytest.raises(ValueError):
            calculate_stats(pl.DataFrame(), None, today="June 1st")


class TestLimaJournal:
    """One trip Jan 10-12 2024 with a Lima location on day 1."""

    def test_completed_trip(self):
        """All aggregations see a trip that ended before today."""
        summary = calculate_stats(**lima_journal(), today="2024-06-01")

        assert summary.total_trips == 1
        assert summary.total_travel_days == 3
        assert summary.countries_visited == 1
        assert summary.locations_visited == 1

        place = summary.most_visited_location
        assert place.city == "Lima"
        assert place.country == "Peru"
        assert place.trip_count == 1
        assert place.days_here == 1

        assert len(summary.hashtag_distribution) == 1
        food = summary.hashtag_distribution[0]
        assert food.hashtag == "food"
        assert food.day_count == 2
        assert [d.day_index for d in food.trip_days] == [1, 2]
        assert {d.trip_name for d in food.trip_days} == {"Peru"}

        assert len(summary.trip_type_distribution) == 1
        adventure = summary.trip_type_distribution[0]
        assert adventure.type == "adventure"
        assert adventure.trip_count == 1
        assert adventure.trips[0].trip_id == "t1"

    def test_trip_in_progress(self):
        """Distributions drop an active trip, locations still count."""
        summary = calculate_stats(**lima_journal(), today="2024-01-11")

        assert summary.total_trips == 1
        assert summary.total_travel_days == 2
        assert summary.hashtag_distribution == ()
        assert summary.trip_type_distribution == ()
        assert summary.most_visited_location is not None
        assert summary.most_visited_location.city == "Lima"

    def test_trip_ending_today_is_not_completed(self):
        """A trip whose end date is today is still in progress."""
        summary = calculate_stats(**lima_journal(), today="2024-01-12")

        assert summary.total_travel_days == 3
        assert summary.trip_type_distribution == ()

    def test_today_as_date(self):
        """A date object works as the reference date."""
        by_string = calculate_stats(**lima_journal(), today="2024-06-01")
        by_date = calculate_stats(**lima_journal(), today=dt.date(2024, 6, 1))
        assert by_string == by_date

    def test_trends(self):
        """The trip lands in 2024 and January 2024."""
        summary = calculate_stats(**lima_journal(), today="2024-06-01")

        assert [b.bucket for b in summary.trip_trends_year] == ["2024"]
        assert [b.bucket for b in summary.trip_trends_month] == ["2024-01"]
        assert summary.trip_trends_year[0].trip_count == 1

        days_2024 = summary.travel_day_trends_year[0]
        assert days_2024.bucket == "2024"
        assert days_2024.day_count == 3
        assert days_2024.trip_count == 1
        assert [d.date for d in days_2024.trip_days] == [
            "2024-01-10",
            "2024-01-11",
            "2024-01-12",
        ]


class TestTotals:
    """Tests for the summary totals."""

    def test_travel_days_count_distinct_dates(self):
        """Two trips on the same date count one travel day."""
        trips = to_frame(
            [
                create_trip("a", "2024-03-01", "2024-03-02", name="A"),
                create_trip("b", "2024-03-02", "2024-03-03", name="B"),
            ]
        )
        days = to_frame(
            create_trip_days("a", "2024-03-01", 2)
            + create_trip_days("b", "2024-03-02", 2)
        )
        summary = calculate_stats(trips, days, today="2024-06-01")

        assert summary.total_trips == 2
        assert summary.total_travel_days == 3

    def test_total_trips_counts_input_rows(self):
        """Trips without days still count towards the total."""
        trips = to_frame(
            [
                create_trip("a", "2024-03-01", "2024-03-02"),
                create_trip("b", "2025-03-01", "2025-03-02"),
            ]
        )
        summary = calculate_stats(trips, None, today="2024-06-01")

        assert summary.total_trips == 2
        assert summary.total_travel_days == 0

    def test_future_days_excluded(self):
        """Days after today are not travel days yet."""
        trips = to_frame([create_trip("a", "2024-05-30", "2024-06-03")])
        days = to_frame(create_trip_days("a", "2024-05-30", 5))
        summary = calculate_stats(trips, days, today="2024-06-01")

        assert summary.total_travel_days == 3


class TestDominantBucket:
    """Tests for trip trend bucket assignment."""

    def test_new_year_trip_buckets_in_january(self):
        """Three January days outweigh one December day."""
        trips = to_frame(
            [create_trip("nye", "2023-12-31", "2024-01-03", name="NYE")]
        )
        days = to_frame(create_trip_days("nye", "2023-12-31", 4))
        summary = calculate_stats(trips, days, today="2024-06-01")

        assert [b.bucket for b in summary.trip_trends_year] == ["2024"]
        assert [b.bucket for b in summary.trip_trends_month] == ["2024-01"]

        # Travel days follow their own dates
        year_days = {
            b.bucket: b.day_count for b in summary.travel_day_trends_year
        }
        assert year_days == {"2023": 1, "2024": 3}

    def test_tie_goes_to_earlier_bucket(self):
        """Two days in each year pick the earlier year."""
        trips = to_frame([create_trip("t", "2023-12-30", "2024-01-02")])
        days = to_frame(create_trip_days("t", "2023-12-30", 4))
        summary = calculate_stats(trips, days, today="2024-06-01")

        assert [b.bucket for b in summary.trip_trends_year] == ["2023"]
        assert [b.bucket for b in summary.trip_trends_month] == ["2023-12"]

    def test_trip_without_days_uses_start_date(self):
        """A trip with no days falls back to its start date bucket."""
        trips = to_frame([create_trip("t", "2022-07-15", "2022-07-20")])
        summary = calculate_stats(trips, None, today="2024-06-01")

        assert [b.bucket for b in summary.trip_trends_month] == ["2022-07"]
        assert summary.travel_day_trends_month == ()

    def test_future_trip_has_trip_trend(self):
        """Trips per period include trips that have not started."""
        trips = to_frame([create_trip("t", "2025-02-01", "2025-02-03")])
        days = to_frame(create_trip_days("t", "2025-02-01", 3))
        summary = calculate_stats(trips, days, today="2024-06-01")

        assert [b.bucket for b in summary.trip_trends_year] == ["2025"]
        assert summary.travel_day_trends_year == ()


class TestNormalization:
    """Tests for ingestion fallbacks and skipped references."""

    def test_untitled_trip_and_default_day_index(self):
        """Null names and day indexes get display fallbacks."""
        trips = to_frame([create_trip(name=None)])
        days = to_frame([create_trip_day(day_index=None)])
        summary = calculate_stats(trips, days, today="2024-06-01")

        entry = summary.travel_day_trends_year[0].trip_days[0]
        assert entry.trip_name == "Untitled trip"
        assert entry.day_index == 1

    def test_custom_fallbacks(self):
        """Fallbacks come from StatsConfig."""
        trips = to_frame([create_trip(name=None)])
        days = to_frame([create_trip_day(day_index=None)])
        config = StatsConfig(untitled_trip_name="Sin nombre")
        summary = calculate_stats(
            trips, days, today="2024-06-01", config=config
        )

        assert summary.trip_trends_year[0].trips[0].trip_name == "Sin nombre"

    def test_unresolvable_references_are_skipped(self):
        """Days of unknown trips and locations of unknown days are ignored."""
        trips = to_frame([create_trip("t1")])
        days = to_frame(
            [
                create_trip_day("d1", "t1", "2024-01-10"),
                create_trip_day("dx", "missing", "2024-02-01"),
            ]
        )
        locations = to_frame(
            [
                create_location("l1", "d1", "Lima", country="Peru"),
                create_location("l2", "nowhere", "Quito", country="Ecuador"),
            ]
        )
        summary = calculate_stats(
            trips, days, locations, today="2024-06-01"
        )

        assert summary.total_travel_days == 1
        assert summary.countries_visited == 1
        assert summary.locations_visited == 1

    def test_integer_ids_become_strings(self):
        """Numeric ids are treated as opaque strings."""
        trips = pl.DataFrame(
            {
                "id": [7],
                "name": ["Seven"],
                "start_date": [dt.date(2024, 1, 10)],
                "end_date": [dt.date(2024, 1, 11)],
            }
        )
        days = pl.DataFrame(
            {
                "id": [70, 71],
                "trip_id": [7, 7],
                "date": [dt.date(2024, 1, 10), dt.date(2024, 1, 11)],
                "day_index": [1, 2],
            }
        )
        summary = calculate_stats(trips, days, today="2024-06-01")

        assert summary.trip_trends_year[0].trips[0].trip_id == "7"
        assert summary.total_travel_days == 2
        assert summary.travel_day_trends_month[0].trip_days[0].date == (
            "2024-01-10"
        )


class TestSummaryExport:
    """Tests for the camelCase export of the summary."""

    def test_dump_by_alias(self):
        """Dumped keys are camelCase at every level."""
        summary = calculate_stats(**lima_journal(), today="2024-06-01")
        dumped = summary.model_dump(by_alias=True)

        assert dumped["totalTrips"] == 1
        assert dumped["totalTravelDays"] == 3
        assert dumped["mostVisitedLocation"] == {
            "city": "Lima",
            "country": "Peru",
            "tripCount": 1,
            "daysHere": 1,
        }
        assert dumped["hashtagDistribution"][0]["tripDays"][0] == {
            "tripId": "t1",
            "tripName": "Peru",
            "dayIndex": 1,
        }
        assert dumped["travelDayTrendsMonth"][0]["tripCount"] == 1

    def test_summary_is_frozen(self):
        """A computed summary cannot be modified."""
        summary = calculate_stats(**lima_journal(), today="2024-06-01")
        with pytest.raises(ValidationError):
            summary.total_trips = 5
