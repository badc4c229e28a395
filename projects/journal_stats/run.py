"""Runner script for the travel journal statistics pipeline."""

import logging
from pathlib import Path

from pipeline.pipeline import Pipeline
from processing import compute_stats, load_data, write_summary

# ---------------------------------------------------------------------
# Configuration
# ---------------------------------------------------------------------

# Path to the YAML config file
CONFIG_PATH = Path(__file__).parent / "config.yaml"

# ---------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s | %(levelname)s | %(message)s",
)

logger = logging.getLogger(__name__)


# Set up steps list ----------------------------------------------------
# Steps are passed as callables so project-specific steps can be swapped
# in without changing the pipeline definition
# ---------------------------------------------------------------------
processing_steps = [
    load_data,
    compute_stats,
    write_summary,
]


# ---------------------------------------------------------------------
if __name__ == "__main__":
    logger.info("Starting travel journal statistics pipeline")

    pipeline = Pipeline(config_path=CONFIG_PATH, steps=processing_steps)
    result = pipeline.run()

    logger.info(
        "Pipeline finished: %d trips, %d travel days, %d countries",
        result.summary.total_trips,
        result.summary.total_travel_days,
        result.summary.countries_visited,
    )
