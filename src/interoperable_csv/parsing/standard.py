"""
Reader for the standard (single table) iCSV profile.
"""

import logging
from pathlib import Path
from typing import Optional, Set, Union

from ..core import constants
from ..core.config import Config
from ..core.date_utils import DateUtils
from ..core.exceptions import FormatError
from ..models import ICSVBase
from .sections import Section, SectionParser, is_comment, strip_comment
from .table import empty_table, load_table, prepare_columns


class StandardReader:
    """Read standard-profile iCSV files."""

    def __init__(self, config: Optional[Config] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize reader.

        Args:
            config: Configuration instance
            logger: Logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.date_utils = DateUtils(self.logger)

    def read(self, path: Union[str, Path]) -> ICSVBase:
        """
        Read a standard iCSV file.

        The file is scanned line by line to parse the header and note the
        comment and blank lines; the data body is then loaded in one pass
        that skips exactly those lines. Comments are allowed after the first
        data row only.

        Args:
            path: File to read

        Returns:
            ICSVBase instance

        Raises:
            FormatError: If the file violates the format
        """
        source = str(path)
        parser = SectionParser(source=source, logger=self.logger)
        skip_lines: Set[int] = set()
        has_rows = False

        with open(source, "r", encoding="utf-8") as fh:
            first_line = fh.readline().rstrip()
            if first_line not in constants.FIRSTLINES:
                raise FormatError("Not an iCSV file", source=source, line=first_line)
            skip_lines.add(0)

            for line_no, raw_line in enumerate(fh, start=1):
                raw_line = raw_line.rstrip("\r\n")
                if is_comment(raw_line):
                    skip_lines.add(line_no)
                    if has_rows:
                        self.logger.debug(f"Skipping comment in data section: {raw_line}")
                    elif not parser.feed(strip_comment(raw_line)):
                        raise FormatError(
                            "Data section should not contain any comments",
                            source=source,
                            line=raw_line
                        )
                    continue
                if not raw_line.strip():
                    skip_lines.add(line_no)
                    continue
                if parser.section != Section.DATA:
                    raise FormatError("Data section was not specified", source=source, line=raw_line)
                has_rows = True

        if parser.section != Section.DATA:
            raise FormatError("Data section was not specified", source=source)

        metadata = parser.metadata
        fields = parser.finalize_fields()

        df = load_table(source, metadata.field_delimiter, skiprows=skip_lines) if has_rows else None
        if df is None or df.shape[1] == 0:
            self.logger.warning(f"No data rows in {source}")
            df = empty_table(fields)

        try:
            fields.validate(df.shape[1])
        except FormatError as e:
            raise FormatError(str(e), source=source) from e

        prepare_columns(df, fields, self.date_utils)
        self.logger.debug(f"Read {len(df)} rows x {df.shape[1]} columns from {source}")

        return ICSVBase(metadata=metadata, fields=fields, data=df, geometry=parser.geometry)
