"""Journal tables for one user and their validation state."""
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

import polars as pl
from pydantic import BaseModel

from .checks import CUSTOM_VALIDATORS, TableCheck
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
from .validators import (
    TableSchema,
    ValidationError,
    check_primary_key,
    find_orphans,
    validate_rows,
)

logger = logging.getLogger(__name__)

# Journal table name -> row model
TABLE_MODELS: dict[str, type[BaseModel]] = {
    "trips": TripModel,
    "trip_days": TripDayModel,
    "trip_locations": TripLocationModel,
    "trip_day_hashtags": TripDayHashtagModel,
    "trip_types": TripTypeModel,
    "trip_groups": TripGroupModel,
    "trip_group_people": TripGroupPersonModel,
    "trip_companion_groups": TripCompanionGroupModel,
    "trip_companion_people": TripCompanionPersonModel,
    "people": PersonModel,
}

TABLE_SCHEMAS = {
    name: TableSchema.from_model(model) for name, model in TABLE_MODELS.items()
}


@dataclass
class JournalData:
    """Journal tables for one user plus the computed summary.

    Assigning a table clears its validated flag, so a step that replaces a
    table has it checked again before the next step reads it.
    """

    trips: pl.DataFrame | None = None
    trip_days: pl.DataFrame | None = None
    trip_locations: pl.DataFrame | None = None
    trip_day_hashtags: pl.DataFrame | None = None
    trip_types: pl.DataFrame | None = None
    trip_groups: pl.DataFrame | None = None
    trip_group_people: pl.DataFrame | None = None
    trip_companion_groups: pl.DataFrame | None = None
    trip_companion_people: pl.DataFrame | None = None
    people: pl.DataFrame | None = None

    summary: StatsSummary | None = None

    _validated: set[str] = field(default_factory=set)
    _checks: dict[str, list[TableCheck]] = field(
        default_factory=lambda: {
            table: list(checks) for table, checks in CUSTOM_VALIDATORS.items()
        }
    )

    def __setattr__(self, name: str, value: object) -> None:
        """Clear the validated flag of a table when it is replaced."""
        object.__setattr__(self, name, value)

        # Not yet set while __init__ assigns the tables
        validated = self.__dict__.get("_validated")
        if validated is not None and name in validated:
            validated.discard(name)
            logger.debug("Table '%s' replaced, will be validated again", name)

    def validate(self, table_name: str) -> None:
        """Check one table's keys, references, rows and custom checks.

        Raises:
            ValueError: If table_name is not a journal table
            ValidationError: On duplicate keys, bad rows or a failed check.
                Unresolved references are only logged.
        """
        if table_name not in TABLE_SCHEMAS:
            msg = (
                f"Invalid table name: {table_name}. "
                f"Valid tables: {', '.join(TABLE_SCHEMAS)}"
            )
            raise ValueError(msg)

        df = getattr(self, table_name)
        if df is None:
            logger.warning("Table '%s' not loaded, skipping", table_name)
            return

        schema = TABLE_SCHEMAS[table_name]
        logger.info("Validating '%s' (%s rows)", table_name, f"{len(df):,}")

        if schema.primary_key:
            check_primary_key(table_name, df, schema.primary_key)
        find_orphans(
            table_name,
            df,
            schema.references,
            {name: getattr(self, name) for name in TABLE_SCHEMAS},
        )
        validate_rows(table_name, df, schema.model)

        for check in self._checks.get(table_name, []):
            errors = check(df)
            if errors:
                raise ValidationError(
                    table=table_name,
                    rule=check.__name__,
                    message="; ".join(errors),
                )

        self._validated.add(table_name)
        logger.debug("Table '%s' is valid", table_name)

    def register_validator(
        self, table_name: str
    ) -> Callable[[TableCheck], TableCheck]:
        """Add a custom check for one table of this instance.

        Example:
            >>> @data.register_validator("trip_types")
            ... def check_types(trip_types: pl.DataFrame) -> list[str]:
            ...     return []
        """
        if table_name not in TABLE_SCHEMAS:
            msg = f"Unknown table: {table_name}"
            raise ValueError(msg)

        def decorator(func: TableCheck) -> TableCheck:
            self._checks.setdefault(table_name, []).append(func)
            return func

        return decorator

    def is_validated(self, table_name: str) -> bool:
        """Whether a table passed validation and was not replaced since."""
        return table_name in self._validated
