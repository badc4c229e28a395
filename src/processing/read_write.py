"""Loads journal tables from exports and writes the computed summary."""

import logging
from pathlib import Path

import polars as pl

from journal_canon import TABLE_MODELS, StatsSummary
from pipeline.decoration import step

logger = logging.getLogger(__name__)


def _read_table(table: str, path: str) -> pl.DataFrame:
    """Read one exported table, keeping CSV values as strings."""
    if path.endswith(".csv"):
        # Ids stay opaque; row models coerce numbers and dates
        return pl.read_csv(path, infer_schema_length=0)
    if path.endswith(".parquet"):
        return pl.read_parquet(path)
    if path.endswith(".json"):
        return pl.read_json(path)
    if path.endswith((".ndjson", ".jsonl")):
        return pl.read_ndjson(path)

    msg = f"Unsupported file format for table {table}: {path}"
    raise ValueError(msg)


@step(validate_input=False)
def load_data(
    input_paths: dict[str, str],
    user_id: str | int | None = None,
) -> dict[str, pl.DataFrame]:
    """Load journal tables from input paths.

    Args:
        input_paths: Journal table name to CSV, Parquet or JSON path
        user_id: If given, keep only rows of this user in tables that carry
            a user_id column

    Returns:
        Dict of journal table name to DataFrame

    Raises:
        ValueError: If a table name or file format is not supported
    """
    data = {}

    for table, path in input_paths.items():
        if table not in TABLE_MODELS:
            msg = f"Unknown journal table '{table}' in input_paths"
            raise ValueError(msg)

        logger.info("Loading %s...", table)
        df = _read_table(table, str(path))

        if user_id is not None and "user_id" in df.columns:
            df = df.filter(
                pl.col("user_id").cast(pl.Utf8) == pl.lit(str(user_id))
            )
            logger.debug("Kept %d %s rows for user %s", len(df), table, user_id)

        data[table] = df

    logger.info("All data loaded successfully.")
    return data


@step()
def write_summary(
    summary: StatsSummary,
    output_path: str,
) -> None:
    """Write the summary as camelCase JSON.

    Args:
        summary: Computed statistics summary
        output_path: Destination JSON file
    """
    if summary is None:
        msg = "No summary to write; run compute_stats first"
        raise ValueError(msg)

    path = Path(output_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    logger.info("Writing summary to %s...", path)
    path.write_text(summary.model_dump_json(by_alias=True, indent=2))
    logger.info("Summary written successfully.")
