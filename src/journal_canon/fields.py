"""Field helper carrying key and reference metadata for journal tables."""
from typing import Any

from pydantic import Field


def journal_field(
    *,
    primary_key: bool = False,
    references: str | None = None,
    **field_kwargs: Any,  # noqa: ANN401
) -> Any:  # noqa: ANN401
    """Create a Field annotated with table-level metadata.

    The metadata is stored in ``json_schema_extra`` and read back by
    ``validators.TableSchema`` when a whole table is validated.

    Args:
        primary_key: Values must be unique within the table.
        references: Parent column as ``"table.column"``. Values missing from
            the parent are reported by validation but not rejected.
        **field_kwargs: Passed through to ``pydantic.Field``.

    Example:
        >>> trip_id: str = journal_field(references="trips.id")
    """
    extra = dict(field_kwargs.pop("json_schema_extra", None) or {})

    if primary_key:
        extra["primary_key"] = True

    if references is not None:
        table, _, column = references.partition(".")
        if not table or not column:
            msg = f"Expected 'table.column', got references={references!r}"
            raise ValueError(msg)
        extra["references"] = references

    return Field(json_schema_extra=extra, **field_kwargs)
