"""
Data models for the iCSV engine.

Contains the header sections, geometry and the two file objects.
"""

from .geometry import Geometry, Location
from .metadata import MetadataSection, RequiredMetadata, RecommendedMetadata
from .fields import FieldsSection, RecommendedFields
from .files import ICSVBase, ICSV2DTimeseries

__all__ = [
    "Geometry",
    "Location",
    "MetadataSection",
    "RequiredMetadata",
    "RecommendedMetadata",
    "FieldsSection",
    "RecommendedFields",
    "ICSVBase",
    "ICSV2DTimeseries",
]
