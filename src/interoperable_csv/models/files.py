"""
In-memory iCSV file objects for the two application profiles.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Sequence

import pandas as pd

from ..core import constants
from ..core.exceptions import FormatError
from .fields import FieldsSection
from .geometry import Geometry
from .metadata import MetadataSection


@dataclass
class ICSVBase:
    """
    Single-table iCSV file (standard profile).

    ``data`` columns follow ``fields.fields`` positionally. The geometry is
    parsed from the metadata when not given.
    """

    metadata: MetadataSection
    fields: FieldsSection
    data: pd.DataFrame
    geometry: Optional[Geometry] = None

    def __post_init__(self):
        if self.geometry is None:
            self.geometry = self.metadata.to_geometry()

    @property
    def profile(self) -> str:
        return "standard"

    def __repr__(self) -> str:
        return (
            f"ICSVBase(fields={self.fields.fields}, rows={len(self.data)}, "
            f"geometry={self.geometry.geometry_string!r})"
        )


@dataclass
class ICSV2DTimeseries:
    """
    iCSV file with the 2DTIMESERIES profile.

    ``data`` maps every entry of ``dates`` to its block; blocks share the
    declared schema but may differ in row count. ``out_datefmt`` only
    controls how [DATE=...] markers are written.
    """

    metadata: MetadataSection
    fields: FieldsSection
    data: Dict[datetime, pd.DataFrame]
    dates: List[datetime]
    geometry: Optional[Geometry] = None
    out_datefmt: str = constants.DEFAULT_DATE_FORMAT

    def __post_init__(self):
        self.dates = list(self.dates)
        if not self.dates:
            raise FormatError("A 2DTIMESERIES file needs at least one date")
        missing = [d for d in self.dates if d not in self.data]
        if missing:
            raise FormatError(f"No data block for dates: {', '.join(str(d) for d in missing)}")
        self.fields.validate(self.data[self.dates[0]].shape[1])
        if self.geometry is None:
            self.geometry = self.metadata.to_geometry()

    @classmethod
    def from_blocks(
        cls,
        metadata: MetadataSection,
        fields: FieldsSection,
        blocks: Sequence[pd.DataFrame],
        dates: Sequence[datetime],
        **kwargs
    ) -> "ICSV2DTimeseries":
        """
        Build from parallel sequences of blocks and dates.

        Raises:
            FormatError: If the sequences differ in length or a date repeats
        """
        if len(blocks) != len(dates):
            raise FormatError(
                f"Number of data blocks ({len(blocks)}) and dates ({len(dates)}) must match"
            )
        if len(set(dates)) != len(dates):
            raise FormatError("Dates must be unique")
        data = dict(zip(dates, blocks))
        return cls(metadata=metadata, fields=fields, data=data, dates=list(dates), **kwargs)

    @property
    def profile(self) -> str:
        return "2dtimeseries"

    def __repr__(self) -> str:
        return (
            f"ICSV2DTimeseries(fields={self.fields.fields}, dates={len(self.dates)}, "
            f"geometry={self.geometry.geometry_string!r})"
        )
