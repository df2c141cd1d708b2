"""
Reader for the 2DTIMESERIES iCSV profile.

The file is read twice: a scan pass parses the header and records the
date and row count of every block along with the comment and blank
lines, then a load pass reads all data rows
at once and splits them back into blocks using those counts.
"""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Set, Union

from ..core import constants
from ..core.config import Config
from ..core.date_utils import DateUtils
from ..core.exceptions import FormatError
from ..models import ICSV2DTimeseries
from .sections import Section, SectionParser, is_comment, strip_comment
from .table import empty_table, load_table, prepare_columns


@dataclass
class BlockScan:
    """Result of the scan pass."""

    parser: SectionParser
    dates: List[datetime] = field(default_factory=list)
    block_lengths: List[int] = field(default_factory=list)
    skip_lines: Set[int] = field(default_factory=set)

    @property
    def total_rows(self) -> int:
        return sum(self.block_lengths)


class TimeseriesReader:
    """Read 2DTIMESERIES iCSV files."""

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

    def read(self, path: Union[str, Path], date_format: Optional[str] = None) -> ICSV2DTimeseries:
        """
        Read a 2DTIMESERIES iCSV file.

        Args:
            path: File to read
            date_format: strptime format of the [DATE=...] markers. Defaults to
                         the configured reader format

        Returns:
            ICSV2DTimeseries instance; its ``out_datefmt`` is the format used to read

        Raises:
            FormatError: If the file violates the format
        """
        source = str(path)
        if date_format is None:
            date_format = self.config.date_format if self.config else constants.DEFAULT_DATE_FORMAT

        scan = self._scan(source, date_format)
        metadata = scan.parser.metadata
        fields = scan.parser.finalize_fields()

        df_all = load_table(source, metadata.field_delimiter, skiprows=scan.skip_lines)
        if df_all.shape[1] == 0:
            df_all = empty_table(fields)

        try:
            fields.validate(df_all.shape[1])
        except FormatError as e:
            raise FormatError(str(e), source=source) from e

        if len(df_all) != scan.total_rows:
            raise FormatError(
                f"Data row count mismatch: expected {scan.total_rows} rows across "
                f"{len(scan.dates)} dates, got {len(df_all)}",
                source=source
            )

        prepare_columns(df_all, fields, self.date_utils)

        data = {}
        start = 0
        for date, length in zip(scan.dates, scan.block_lengths):
            data[date] = df_all.iloc[start:start + length].reset_index(drop=True)
            start += length

        self.logger.debug(f"Read {len(scan.dates)} blocks ({len(df_all)} rows) from {source}")

        return ICSV2DTimeseries(
            metadata=metadata,
            fields=fields,
            data=data,
            dates=scan.dates,
            geometry=scan.parser.geometry,
            out_datefmt=date_format,
        )

    def _scan(self, source: str, date_format: str) -> BlockScan:
        scan = BlockScan(parser=SectionParser(source=source, logger=self.logger))
        parser = scan.parser
        in_block = False
        current_len = 0

        with open(source, "r", encoding="utf-8") as fh:
            first_line = fh.readline().rstrip()
            if first_line not in constants.FIRSTLINES_2DTIMESERIES:
                raise FormatError(
                    "Not an iCSV file with the 2DTIMESERIES application profile",
                    source=source,
                    line=first_line
                )
            scan.skip_lines.add(0)

            for line_no, raw_line in enumerate(fh, start=1):
                raw_line = raw_line.rstrip("\r\n")

                if is_comment(raw_line):
                    scan.skip_lines.add(line_no)
                    line = strip_comment(raw_line)
                    if parser.feed(line):
                        continue
                    if _is_date_marker(line):
                        if in_block:
                            scan.block_lengths.append(current_len)
                            current_len = 0
                        scan.dates.append(self._parse_marker(line, date_format, scan.dates, source, raw_line))
                        in_block = True
                    elif in_block:
                        raise FormatError(
                            "Comments inside a data block are not allowed (only [DATE=...] markers)",
                            source=source,
                            line=raw_line
                        )
                    else:
                        self.logger.debug(f"Ignoring comment before first date marker: {raw_line}")
                    continue

                if not raw_line.strip():
                    scan.skip_lines.add(line_no)
                    continue
                if parser.section != Section.DATA:
                    raise FormatError("Data section was not specified", source=source, line=raw_line)
                if not in_block:
                    raise FormatError("No [DATE=...] marker before data lines", source=source, line=raw_line)
                current_len += 1

        if in_block:
            scan.block_lengths.append(current_len)

        if parser.section != Section.DATA:
            raise FormatError("Missing [DATA] section", source=source)
        if not scan.dates:
            raise FormatError("No [DATE=...] markers found in 2DTIMESERIES file", source=source)

        return scan

    @staticmethod
    def _parse_marker(
        line: str,
        date_format: str,
        seen: List[datetime],
        source: str,
        raw_line: str
    ) -> datetime:
        token = line[len(constants.DATE_MARKER_PREFIX):-len(constants.DATE_MARKER_SUFFIX)]
        try:
            date = DateUtils.parse_date(token, date_format)
        except FormatError as e:
            raise FormatError(str(e), source=source, line=raw_line) from e
        if date in seen:
            raise FormatError(f"Duplicate date marker {token}", source=source, line=raw_line)
        return date


def _is_date_marker(line: str) -> bool:
    return line.startswith(constants.DATE_MARKER_PREFIX) and line.endswith(constants.DATE_MARKER_SUFFIX)
