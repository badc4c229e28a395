"""Travel statistics aggregation module."""

from .configs import StatsConfig
from .distributions import DistributionAggregator
from .engine import StatsEngine, calculate_stats, compute_stats
from .indexer import EntityIndex, build_index
from .locations import LocationAggregator
from .temporal import TemporalClassifier
from .trends import TrendBucketer

__all__ = [
    "DistributionAggregator",
    "EntityIndex",
    "LocationAggregator",
    "StatsConfig",
    "StatsEngine",
    "TemporalClassifier",
    "TrendBucketer",
    "build_index",
    "calculate_stats",
    "compute_stats",
]
