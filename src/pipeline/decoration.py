"""Decorators for pipeline steps with automatic validation."""
import functools
import inspect
import logging
from collections.abc import Callable
from typing import Any

import polars as pl

from journal_canon import TABLE_MODELS, JournalData

logger = logging.getLogger(__name__)

# Journal table names that can be validated
JOURNAL_TABLES = set(TABLE_MODELS)


def step(
    *,
    validate_input: bool = True,
    validate_output: bool = False,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Decorator for pipeline steps with automatic validation.

    This decorator validates journal table inputs and/or outputs using
    the Pydantic row models in journal_canon.models. Only parameters and
    dict entries whose names match a journal table (trips, trip_days,
    trip_locations, ...) and hold a DataFrame are validated; absent
    optional tables are passed through untouched.

    Tables already validated on the JournalData passed as 'journal_data'
    and not replaced since are not checked again.

    The pipeline may override the decorator defaults per step by passing
    'validate_input' / 'validate_output' keyword arguments.

    Args:
        validate_input: If True, validate input DataFrames that match
            journal table names
        validate_output: If True, validate output DataFrames returned in
            a dict under journal table names

    Example:
        >>> @step(validate_output=True)
        ... def load_data(input_paths: dict) -> dict[str, pl.DataFrame]:
        ...     return {"trips": trips_df, "trip_days": trip_days_df}

    Returns:
        Decorated function with validation
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        @functools.wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:  # noqa: ANN401
            journal_data = kwargs.pop("journal_data", None)
            check_inputs = kwargs.pop("validate_input", validate_input)
            check_outputs = kwargs.pop("validate_output", validate_output)

            if check_inputs:
                _validate_inputs(func, args, kwargs, journal_data)

            result = func(*args, **kwargs)

            # Store results on journal_data if available
            if journal_data is not None and isinstance(result, dict):
                for key, value in result.items():
                    if hasattr(journal_data, key):
                        setattr(journal_data, key, value)

            if check_outputs and isinstance(result, dict):
                _validate_dict_outputs(result, func.__name__, journal_data)
            elif check_outputs and isinstance(result, tuple):
                logger.warning(
                    "Step '%s' returns tuple - cannot auto-validate. "
                    "Consider returning dict with table names as keys.",
                    func.__name__,
                )

            return result

        return wrapper  # type: ignore[return-value]

    return decorator


def _validate_inputs(
    func: Callable,
    args: tuple,
    kwargs: dict,
    journal_data: JournalData | None = None,
) -> None:
    """Validate input parameters that are journal DataFrames."""
    sig = inspect.signature(func)
    bound = sig.bind(*args, **kwargs)
    bound.apply_defaults()

    validator = journal_data or JournalData()

    # Attach every input first so foreign keys resolve across tables
    inputs = {
        name: value
        for name, value in bound.arguments.items()
        if _is_journal_dataframe(name, value)
    }
    for name, value in inputs.items():
        if getattr(validator, name) is not value:
            setattr(validator, name, value)

    for name in inputs:
        if validator.is_validated(name):
            logger.debug("Input '%s' already validated", name)
            continue

        logger.info("Validating input '%s' for step '%s'", name, func.__name__)
        validator.validate(name)


def _validate_dict_outputs(
    result: dict,
    func_name: str,
    journal_data: JournalData | None = None,
) -> None:
    """Validate outputs in dict format."""
    validator = journal_data or JournalData()
    outputs = {
        key: value
        for key, value in result.items()
        if _is_journal_dataframe(key, value)
    }
    # Data already stored by the wrapper when journal_data was given
    if journal_data is None:
        for key, value in outputs.items():
            setattr(validator, key, value)

    for key in outputs:
        logger.info(
            "Validating output '%s' from step '%s'",
            key,
            func_name,
        )
        validator.validate(key)


def _is_journal_dataframe(name: str, value: Any) -> bool:  # noqa: ANN401
    """Check if a value is a DataFrame for a journal table."""
    return name in JOURNAL_TABLES and isinstance(value, pl.DataFrame)
