"""Journal canon package initialization."""
from .dataclass import TABLE_MODELS, JournalData
from .models import (
    PersonModel,
    TripCompanionGroupModel,
    TripCompanionPersonModel,
    TripDayHashtagModel,
    TripDayModel,
    TripGroupModel,
    TripGroupPersonModel,
    TripLocationModel,
    TripModel,
    TripTypeModel,
)
from .summary import StatsSummary
from .validators import ValidationError

__all__ = [
    "TABLE_MODELS",
    "JournalData",
    "PersonModel",
    "StatsSummary",
    "TripCompanionGroupModel",
    "TripCompanionPersonModel",
    "TripDayHashtagModel",
    "TripDayModel",
    "TripGroupModel",
    "TripGroupPersonModel",
    "TripLocationModel",
    "TripModel",
    "TripTypeModel",
    "ValidationError",
]
