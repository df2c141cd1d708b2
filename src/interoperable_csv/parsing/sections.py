"""
Header section parser shared by both profile readers.

Routes comment lines to the [METADATA] and [FIELDS] builders and tracks
the section state, which only ever moves forward.
"""

import logging
from enum import IntEnum
from typing import Any, Dict, List, Optional, Tuple

from ..core import constants
from ..core.exceptions import FormatError
from ..models import FieldsSection, Geometry, MetadataSection


class Section(IntEnum):
    """Parser state."""

    NONE = 0
    METADATA = 1
    FIELDS = 2
    DATA = 3


_MARKERS = {
    constants.METADATA_MARKER: Section.METADATA,
    constants.FIELDS_MARKER: Section.FIELDS,
    constants.DATA_MARKER: Section.DATA,
}


def is_comment(raw_line: str) -> bool:
    return raw_line.startswith(constants.COMMENT_PREFIX)


def strip_comment(raw_line: str) -> str:
    """Drop the comment prefix and surrounding whitespace."""
    return raw_line[len(constants.COMMENT_PREFIX):].strip()


def split_assignment(line: str) -> Tuple[str, str]:
    """
    Split a 'key = value' header line.

    Raises:
        FormatError: If the line does not contain exactly one '='
    """
    parts = line.split("=")
    if len(parts) != 2:
        raise FormatError("Invalid assignment line, expected exactly one '='", line=line)
    return parts[0].strip(), parts[1].strip()


class SectionParser:
    """
    Incremental parser for the iCSV header.

    Key/value pairs are accumulated per section. The metadata section is
    finalized when the parser leaves [METADATA], because [FIELDS] values are
    split with its delimiter; the fields section is finalized on request.
    """

    def __init__(self, source: Optional[str] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize section parser.

        Args:
            source: File path used in error messages
            logger: Logger instance
        """
        self.source = source
        self.logger = logger or logging.getLogger(__name__)
        self.section = Section.NONE
        self._metadata_values: Dict[str, Any] = {}
        self._fields_values: Dict[str, List[str]] = {}
        self.metadata: Optional[MetadataSection] = None
        self.geometry: Optional[Geometry] = None

    def feed(self, line: str) -> bool:
        """
        Process one header line with its comment prefix removed.

        Args:
            line: Stripped comment text

        Returns:
            True if the line was consumed as a marker or header entry,
            False once the parser is in the [DATA] section
        """
        target = _MARKERS.get(line)
        if target is not None:
            self._transition(target, line)
            return True

        if self.section == Section.DATA:
            return False

        if not line:
            return True

        if self.section == Section.NONE:
            self.logger.debug(f"Ignoring comment before [METADATA]: {line}")
        elif self.section == Section.METADATA:
            self._add_metadata_line(line)
        elif self.section == Section.FIELDS:
            self._add_fields_line(line)
        return True

    def _transition(self, target: Section, line: str) -> None:
        if target <= self.section:
            raise FormatError(
                f"Section marker {line} after {self.section.name} section",
                source=self.source,
                line=line
            )
        if target >= Section.FIELDS and self.metadata is None:
            self._finalize_metadata()
        self.logger.debug(f"Entering {target.name} section")
        self.section = target

    def _finalize_metadata(self) -> None:
        try:
            self.metadata = MetadataSection.build(self._metadata_values)
            self.geometry = self.metadata.to_geometry()
        except FormatError as e:
            raise FormatError(f"Invalid [METADATA] section: {e}", source=self.source) from e

    def _add_metadata_line(self, line: str) -> None:
        key, value = self._split(line)
        if key in self._metadata_values:
            self.logger.warning(f"Duplicate metadata key {key!r}, keeping last value")
        self._metadata_values[key] = value

    def _add_fields_line(self, line: str) -> None:
        key, value = self._split(line)
        delimiter = self.metadata.field_delimiter
        if key in self._fields_values:
            self.logger.warning(f"Duplicate fields key {key!r}, keeping last value")
        self._fields_values[key] = [v.strip() for v in value.split(delimiter)]

    def _split(self, line: str) -> Tuple[str, str]:
        try:
            return split_assignment(line)
        except FormatError as e:
            raise FormatError(str(e), source=self.source) from e

    def finalize_fields(self) -> FieldsSection:
        """
        Build the fields section from the accumulated entries.

        Raises:
            FormatError: If the header had no [METADATA]/[FIELDS] content
        """
        if self.metadata is None:
            raise FormatError("Missing [METADATA]/[FIELDS] sections", source=self.source)
        try:
            return FieldsSection.build(self._fields_values)
        except FormatError as e:
            raise FormatError(f"Invalid [FIELDS] section: {e}", source=self.source) from e
