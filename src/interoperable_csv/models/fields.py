"""
[FIELDS] section model.

Column names plus per-column attribute vectors, each either empty or one
entry per column.
"""

import logging
from dataclasses import dataclass, field, fields as dataclass_fields
from typing import Any, Dict, List, Mapping, Optional

from ..core import constants
from ..core.exceptions import FormatError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RecommendedFields:
    """Per-column attributes with agreed meaning."""

    units_multiplier: List[str] = field(default_factory=list)
    units: List[str] = field(default_factory=list)
    long_name: List[str] = field(default_factory=list)
    standard_name: List[str] = field(default_factory=list)

    def is_empty(self) -> bool:
        return all(not getattr(self, f.name) for f in dataclass_fields(self))


@dataclass(frozen=True)
class FieldsSection:
    """Declared columns of an iCSV file."""

    fields: List[str]
    recommended: RecommendedFields = field(default_factory=RecommendedFields)
    other: Dict[str, List[str]] = field(default_factory=dict)

    @classmethod
    def build(cls, values: Optional[Mapping[str, Any]] = None, **kwargs) -> "FieldsSection":
        """
        Build a fields section from key/value pairs.

        ``fields`` is required. Attribute values must be sequences; a plain
        string is skipped with a warning rather than turned into a one-entry
        vector. Lengths are checked later by ``validate``.

        Raises:
            FormatError: If ``fields`` is missing, empty or not a sequence
        """
        merged = dict(values or {})
        merged.update(kwargs)

        names = merged.pop(constants.FIELDS_KEY, None)
        if names is None:
            raise FormatError("Missing required 'fields' entry in [FIELDS] section")
        if isinstance(names, str):
            raise FormatError(f"'fields' must be a sequence of column names, got {names!r}")
        names = [str(n) for n in names]
        if not names:
            raise FormatError("'fields' must declare at least one column")

        recommended = {}
        other = {}
        for key, value in merged.items():
            vector = _as_vector(key, value)
            if vector is None:
                continue
            if key in constants.RECOMMENDED_FIELD_KEYS:
                recommended[key] = vector
            else:
                other[str(key)] = vector

        return cls(fields=names, recommended=RecommendedFields(**recommended), other=other)

    @property
    def ncols(self) -> int:
        return len(self.fields)

    def get_attribute(self, name: str) -> Optional[List[str]]:
        """
        Look up ``fields`` or a per-column attribute by name.

        Unknown names log a warning and return None.
        """
        if name == constants.FIELDS_KEY:
            return self.fields
        if name in constants.RECOMMENDED_FIELD_KEYS:
            return getattr(self.recommended, name)
        if name in self.other:
            return self.other[name]
        logger.warning(f"Invalid attribute name: {name}")
        return None

    def miscellaneous_fields(self) -> Dict[str, List[str]]:
        """All non-empty per-column attributes, without the column names."""
        misc = {}
        for key in constants.RECOMMENDED_FIELD_KEYS:
            value = getattr(self.recommended, key)
            if value:
                misc[key] = value
        for key, value in self.other.items():
            if value:
                misc[key] = value
        return misc

    def all_fields(self) -> Dict[str, List[str]]:
        """Column names followed by every non-empty attribute, in write order."""
        return {constants.FIELDS_KEY: self.fields, **self.miscellaneous_fields()}

    def validate(self, ncols: int) -> None:
        """
        Check the section against the number of data columns.

        Raises:
            FormatError: On the first attribute whose length differs from ncols
        """
        if len(self.fields) != ncols:
            raise FormatError(
                f"Number of fields ({len(self.fields)}) does not match the number of columns ({ncols})"
            )
        for key, value in self.miscellaneous_fields().items():
            if len(value) != ncols:
                raise FormatError(
                    f"Number of {key} entries ({len(value)}) does not match the number of columns ({ncols})"
                )


def _as_vector(key: str, value: Any) -> Optional[List[str]]:
    if value is None:
        return []
    if isinstance(value, str):
        logger.warning(f"String values for {key} are not supported, skipping")
        return None
    return [str(v) for v in value]
