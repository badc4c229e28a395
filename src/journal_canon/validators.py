"""Table-level validation of journal exports.

Keys and references come from the metadata written by ``journal_field``.
Rows are checked against their model in one batch. References that do not
resolve are reported but never rejected: the statistics engine skips them.
Custom table checks live in checks.py and are run by JournalData.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from functools import cache

import polars as pl
from pydantic import BaseModel, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

logger = logging.getLogger(__name__)

# Offending values listed in messages
MAX_REPORTED = 10


@dataclass
class ValidationError(Exception):
    """A journal table failed validation.

    Attributes:
        table: Journal table name
        rule: Check that failed (unique_constraint, foreign_key,
            row_validation or a custom check name)
        message: Human-readable description
        row_id: Position of the first bad row, for row failures
        column: Offending column, when one can be named
    """

    table: str
    rule: str
    message: str
    row_id: int | None = None
    column: str | None = None

    def __str__(self) -> str:
        """Format as ``table/row/column [rule]: message``."""
        where = [self.table]
        if self.row_id is not None:
            where.append(f"row {self.row_id}")
        if self.column:
            where.append(self.column)
        return f"{'/'.join(where)} [{self.rule}]: {self.message}"


def _preview(values: list[str]) -> str:
    shown = ", ".join(values[:MAX_REPORTED])
    return f"{shown} ..." if len(values) > MAX_REPORTED else shown


@dataclass(frozen=True)
class TableSchema:
    """Primary key and references declared on a row model."""

    model: type[BaseModel]
    primary_key: str | None
    references: dict[str, tuple[str, str]]

    @classmethod
    def from_model(cls, model: type[BaseModel]) -> "TableSchema":
        """Read journal_field metadata from a row model."""
        primary_key = None
        references = {}
        for name, info in model.model_fields.items():
            extra = info.json_schema_extra or {}
            if extra.get("primary_key"):
                primary_key = name
            if "references" in extra:
                table, _, column = extra["references"].partition(".")
                references[name] = (table, column)
        return cls(model, primary_key, references)


def check_primary_key(table: str, df: pl.DataFrame, column: str) -> None:
    """Raise if the key column is absent or holds repeated values."""
    if column not in df.columns:
        raise ValidationError(
            table=table,
            rule="unique_constraint",
            column=column,
            message="Key column is missing",
        )

    keys = df.get_column(column).drop_nulls().cast(pl.Utf8)
    repeated = keys.filter(keys.is_duplicated()).unique().sort().to_list()
    if repeated:
        raise ValidationError(
            table=table,
            rule="unique_constraint",
            column=column,
            message=f"Duplicate ids: {_preview(repeated)}",
        )


def find_orphans(
    table: str,
    df: pl.DataFrame,
    references: dict[str, tuple[str, str]],
    tables: Mapping[str, pl.DataFrame | None],
) -> dict[str, list[str]]:
    """Log reference values that have no parent row.

    Args:
        table: Name of the child table
        df: Child table
        references: Child column -> (parent table, parent column)
        tables: Loaded journal tables by name

    Returns:
        Child column -> sorted orphaned values, for columns that have any
    """
    orphans = {}

    for column, (parent, parent_column) in references.items():
        parent_df = tables.get(parent)
        if column not in df.columns or parent_df is None:
            logger.debug(
                "No reference check for %s.%s: %s not loaded",
                table,
                column,
                parent,
            )
            continue

        if parent_column not in parent_df.columns:
            raise ValidationError(
                table=table,
                rule="foreign_key",
                column=column,
                message=f"{parent} has no column '{parent_column}'",
            )

        missing = (
            df.select(pl.col(column).cast(pl.Utf8))
            .drop_nulls()
            .unique()
            .join(
                parent_df.select(
                    pl.col(parent_column).cast(pl.Utf8).alias(column)
                ),
                on=column,
                how="anti",
            )
            .get_column(column)
            .sort()
            .to_list()
        )
        if missing:
            logger.warning(
                "%s.%s: %d values missing from %s.%s, will be skipped: %s",
                table,
                column,
                len(missing),
                parent,
                parent_column,
                _preview(missing),
            )
            orphans[column] = missing

    return orphans


@cache
def _rows_adapter(model: type[BaseModel]) -> TypeAdapter:
    return TypeAdapter(list[model])


def validate_rows(
    table: str, df: pl.DataFrame, model: type[BaseModel]
) -> None:
    """Validate every row of a table against its model.

    Raises:
        ValidationError: Describing the first failing row and column
    """
    try:
        _rows_adapter(model).validate_python(df.to_dicts())
    except PydanticValidationError as e:
        first = e.errors()[0]
        loc = first["loc"]
        raise ValidationError(
            table=table,
            rule="row_validation",
            row_id=loc[0] if loc else None,
            column=str(loc[1]) if len(loc) > 1 else None,
            message=f"{first['msg']} ({e.error_count()} errors in table)",
        ) from e


__all__ = [
    "TableSchema",
    "ValidationError",
    "check_primary_key",
    "find_orphans",
    "validate_rows",
]
