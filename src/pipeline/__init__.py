"""Pipeline module for orchestrating journal processing steps."""

from .decoration import step
from .pipeline import Pipeline

__all__ = [
    "Pipeline",
    "step",
]
