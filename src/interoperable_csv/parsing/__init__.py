"""
Parsing module for the iCSV engine.

Provides the shared header section parser and the readers for both profiles.
"""

from .sections import Section, SectionParser, split_assignment
from .standard import StandardReader
from .timeseries import TimeseriesReader

__all__ = [
    "Section",
    "SectionParser",
    "split_assignment",
    "StandardReader",
    "TimeseriesReader",
]
