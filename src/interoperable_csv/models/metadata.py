"""
[METADATA] section model.

Required keys, recommended keys and an open bag of other key/value pairs.
"""

import logging
from dataclasses import dataclass, field, fields as dataclass_fields
from typing import Any, Dict, Mapping, Optional

from ..core import constants
from ..core.exceptions import FormatError
from .geometry import Geometry

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RequiredMetadata:
    """Keys every iCSV file must declare."""

    field_delimiter: str
    geometry: str
    srid: str


@dataclass(frozen=True)
class RecommendedMetadata:
    """Optional keys with agreed meaning. Unset keys are omitted on write."""

    station_id: Optional[str] = None
    nodata: Optional[Any] = None
    timezone: Optional[Any] = None
    doi: Optional[str] = None
    timestamp_meaning: Optional[str] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f.name) is None for f in dataclass_fields(self))


@dataclass(frozen=True)
class MetadataSection:
    """File-level metadata of an iCSV file."""

    required: RequiredMetadata
    recommended: RecommendedMetadata = field(default_factory=RecommendedMetadata)
    other: Dict[str, str] = field(default_factory=dict)

    @classmethod
    def build(cls, values: Optional[Mapping[str, Any]] = None, **kwargs) -> "MetadataSection":
        """
        Build a metadata section from key/value pairs.

        ``geometry`` may be given as a ``Geometry``, in which case ``srid`` is
        derived from it. Recommended keys set to None are dropped and all
        unrecognized keys go into ``other``.

        Args:
            values: Mapping of metadata keys to values
            **kwargs: Additional metadata keys

        Returns:
            MetadataSection instance

        Raises:
            FormatError: If a required key is missing or empty
        """
        merged = dict(values or {})
        merged.update(kwargs)

        geometry = merged.get("geometry")
        if isinstance(geometry, Geometry):
            merged["geometry"], merged["srid"] = geometry.render()

        missing = [
            key for key in constants.REQUIRED_METADATA_KEYS
            if merged.get(key) is None or str(merged[key]) == ""
        ]
        if missing:
            raise FormatError(
                f"Invalid required metadata, missing or empty: {', '.join(missing)} "
                f"(needs {', '.join(constants.REQUIRED_METADATA_KEYS)})"
            )

        required = RequiredMetadata(
            field_delimiter=str(merged["field_delimiter"]),
            geometry=str(merged["geometry"]),
            srid=str(merged["srid"]),
        )
        recommended = RecommendedMetadata(
            **{k: merged.get(k) for k in constants.RECOMMENDED_METADATA_KEYS}
        )
        known = set(constants.REQUIRED_METADATA_KEYS) | set(constants.RECOMMENDED_METADATA_KEYS)
        other = {
            str(k): str(v) for k, v in merged.items()
            if k not in known and v is not None
        }
        return cls(required=required, recommended=recommended, other=other)

    @property
    def field_delimiter(self) -> str:
        return self.required.field_delimiter

    @property
    def geometry(self) -> str:
        return self.required.geometry

    @property
    def srid(self) -> str:
        return self.required.srid

    @property
    def station_id(self) -> Optional[str]:
        return self.recommended.station_id

    @property
    def nodata(self) -> Optional[Any]:
        return self.recommended.nodata

    @property
    def timezone(self) -> Optional[Any]:
        return self.recommended.timezone

    @property
    def doi(self) -> Optional[str]:
        return self.recommended.doi

    @property
    def timestamp_meaning(self) -> Optional[str]:
        return self.recommended.timestamp_meaning

    def get_attribute(self, name: str) -> Optional[Any]:
        """
        Look up a required, recommended or other metadata value by name.

        Unknown names log a warning and return None.
        """
        if name in constants.REQUIRED_METADATA_KEYS:
            return getattr(self.required, name)
        if name in constants.RECOMMENDED_METADATA_KEYS:
            return getattr(self.recommended, name)
        if name in self.other:
            return self.other[name]
        logger.warning(f"Invalid attribute name: {name}")
        return None

    def to_geometry(self) -> Geometry:
        """Parse the geometry/srid strings into a Geometry."""
        return Geometry.from_strings(self.geometry, self.srid)

    def flatten(self) -> Dict[str, str]:
        """
        Return a flat, string-valued view for serialization.

        Required keys always appear; recommended and other keys only when set.
        """
        flat = {key: str(getattr(self.required, key)) for key in constants.REQUIRED_METADATA_KEYS}
        for key in constants.RECOMMENDED_METADATA_KEYS:
            value = getattr(self.recommended, key)
            if value is not None:
                flat[key] = str(value)
        for key, value in self.other.items():
            if value is not None:
                flat[key] = str(value)
        return flat
