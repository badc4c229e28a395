"""Row models for travel journal tables.

Models describe single rows of the hosted store's exports. Use
JournalData.validate() to check a whole Polars table against them.
Identifiers are opaque strings; numeric ids from exports are coerced.
"""

import datetime as dt

from pydantic import BaseModel, ConfigDict, Field

from .fields import journal_field


class JournalRow(BaseModel):
    """Base class for journal row models."""

    model_config = ConfigDict(coerce_numbers_to_str=True)


class TripModel(JournalRow):
    """A trip owned by a single user."""

    id: str = journal_field(primary_key=True)
    start_date: dt.date
    end_date: dt.date
    name: str | None = None
    user_id: str | None = None


class TripDayModel(JournalRow):
    """One calendar day of a trip."""

    id: str = journal_field(primary_key=True)
    trip_id: str = journal_field(references="trips.id")
    date: dt.date
    # Missing indexes are shown as day 1
    day_index: int | None = Field(default=None, ge=1)


class TripLocationModel(JournalRow):
    """A place recorded on a trip day."""

    id: str = journal_field(primary_key=True)
    trip_day_id: str = journal_field(references="trip_days.id")
    city: str | None = None
    region: str | None = None
    country: str | None = None


class TripDayHashtagModel(JournalRow):
    """A hashtag attached to a trip day."""

    trip_day_id: str = journal_field(references="trip_days.id")
    hashtag: str = Field(min_length=1)


class TripTypeModel(JournalRow):
    """A category label attached to a trip."""

    trip_id: str = journal_field(references="trips.id")
    type: str = Field(min_length=1)


class TripGroupModel(JournalRow):
    """A named group of travel companions."""

    id: str = journal_field(primary_key=True)
    name: str
    user_id: str | None = None


class PersonModel(JournalRow):
    """A travel companion."""

    id: str = journal_field(primary_key=True)
    first_name: str
    last_name: str | None = None
    user_id: str | None = None


class TripGroupPersonModel(JournalRow):
    """Membership of a person in a companion group."""

    trip_group_id: str = journal_field(references="trip_groups.id")
    person_id: str = journal_field(references="people.id")


class TripCompanionGroupModel(JournalRow):
    """A companion group selected for a trip."""

    trip_id: str = journal_field(references="trips.id")
    trip_group_id: str = journal_field(references="trip_groups.id")


class TripCompanionPersonModel(JournalRow):
    """A companion selected directly for a trip."""

    trip_id: str = journal_field(references="trips.id")
    person_id: str = journal_field(references="people.id")
