"""Initialization of the processing module for the travel journal.

This module imports and exposes all step functions for easy access.
"""

from .read_write import load_data, write_summary
from .stats import calculate_stats, compute_stats

__all__ = [
    "calculate_stats",
    "compute_stats",
    "load_data",
    "write_summary",
]
