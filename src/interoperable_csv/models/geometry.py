"""
Geometry data models.

Point location or data-column reference plus an EPSG spatial reference,
parsed from and rendered to the ``geometry``/``srid`` metadata strings.
"""

import logging
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from ..core.exceptions import FormatError

logger = logging.getLogger(__name__)

_SRID_PATTERN = re.compile(r"^\s*[A-Za-z_]*\s*:\s*(-?\d+)\s*$")
_POINT_PATTERN = re.compile(r"^\s*(POINTZ|POINT)\s*\((.*)\)\s*$")


@dataclass(frozen=True)
class Location:
    """A 2D or 3D point."""

    x: float
    y: float
    z: Optional[float] = None


@dataclass(frozen=True)
class Geometry:
    """
    Geolocation of an iCSV file.

    Exactly one of ``location`` (a fixed point) or ``column_name`` (a data
    column carrying the geometry) is set.
    """

    epsg: int
    location: Optional[Location] = None
    column_name: Optional[str] = None

    def __post_init__(self):
        if (self.location is None) == (self.column_name is None):
            raise FormatError("Geometry needs exactly one of location or column_name")
        if self.epsg <= 0:
            raise FormatError(f"Invalid EPSG code: {self.epsg}")

    @classmethod
    def from_strings(cls, geometry: str, srid: str) -> "Geometry":
        """
        Build from the ``geometry`` and ``srid`` metadata values.

        Args:
            geometry: 'POINT(x y)', 'POINTZ(x y z)' or a column name
            srid: Spatial reference such as 'EPSG:2056'

        Returns:
            Geometry instance
        """
        epsg = parse_srid(srid)
        location, column_name = parse_location(geometry)
        return cls(epsg=epsg, location=location, column_name=column_name)

    @property
    def geometry_string(self) -> str:
        if self.column_name is not None:
            return self.column_name
        loc = self.location
        if loc.z is not None:
            return f"POINTZ({_format_coordinate(loc.x)} {_format_coordinate(loc.y)} {_format_coordinate(loc.z)})"
        return f"POINT({_format_coordinate(loc.x)} {_format_coordinate(loc.y)})"

    @property
    def srid_string(self) -> str:
        return f"EPSG:{self.epsg}"

    def render(self) -> Tuple[str, str]:
        """Return the (geometry, srid) metadata strings."""
        return self.geometry_string, self.srid_string


def parse_srid(srid: str) -> int:
    """
    Parse an 'EPSG:XXXX' style string into an EPSG code.

    Raises:
        FormatError: If the string is not '<prefix>:<integer>' with a positive code
    """
    match = _SRID_PATTERN.match(str(srid))
    if match is None:
        raise FormatError(f"Invalid SRID: {srid}, expected format: EPSG:XXXX")
    epsg = int(match.group(1))
    if epsg <= 0:
        raise FormatError(f"Invalid SRID: {srid}, EPSG code must be positive")
    return epsg


def parse_location(geometry: str) -> Tuple[Optional[Location], Optional[str]]:
    """
    Parse a WKT-like point string.

    Strings that are not POINT/POINTZ are returned as a column name.

    Returns:
        Tuple of (location, column_name); exactly one is set

    Raises:
        FormatError: If a POINT/POINTZ string has the wrong arity or non-numeric tokens
    """
    match = _POINT_PATTERN.match(geometry)
    if match is None:
        logger.info(f"Using geometry string {geometry!r} as column name for location, unknown WKT string")
        return None, geometry

    kind, content = match.groups()
    arity = 3 if kind == "POINTZ" else 2
    tokens = content.split()
    if len(tokens) != arity:
        raise FormatError(f"Invalid {kind} geometry: {geometry}, expected {arity} coordinates")
    try:
        values = [float(t) for t in tokens]
    except ValueError as e:
        raise FormatError(f"Invalid {kind} geometry: {geometry}, coordinates must be numeric") from e

    return Location(*values), None


def _format_coordinate(value: float) -> str:
    if float(value).is_integer():
        return str(int(value))
    return repr(float(value))
