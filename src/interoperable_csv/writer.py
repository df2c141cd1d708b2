"""
Data writer module for iCSV files.

Handles writing both profiles and appending date blocks to an existing
2DTIMESERIES file.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import IO, List, Optional, Union

import pandas as pd

from .core import constants
from .core.config import Config
from .core.date_utils import DateUtils
from .core.exceptions import FormatError
from .models import ICSV2DTimeseries, ICSVBase

# Placeholder separator for delimiters DataFrame.to_csv cannot take
_UNIT_SEPARATOR = "\x1f"


class ICSVWriter:
    """Write iCSV files."""

    def __init__(self, config: Optional[Config] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize writer.

        Args:
            config: Configuration instance
            logger: Logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)

    def write(self, icsv: Union[ICSVBase, ICSV2DTimeseries], path: Union[str, Path]) -> Path:
        """
        Write an iCSV file of either profile.

        The fields section is validated against the data before the file
        is opened, so an invalid object never creates or truncates a file.

        Args:
            icsv: File object to write
            path: Destination path

        Returns:
            Path written

        Raises:
            FormatError: If the fields do not match the data columns
        """
        if isinstance(icsv, ICSV2DTimeseries):
            return self._write_timeseries(icsv, Path(path))
        if isinstance(icsv, ICSVBase):
            return self._write_standard(icsv, Path(path))
        raise TypeError(f"Cannot write object of type {type(icsv).__name__}")

    def _write_standard(self, icsv: ICSVBase, path: Path) -> Path:
        if icsv.data is None:
            raise FormatError("No data to write")
        icsv.fields.validate(icsv.data.shape[1])

        delimiter = icsv.metadata.field_delimiter
        with open(path, "w", encoding="utf-8", newline="") as fh:
            self._write_header(fh, icsv, constants.FIRSTLINES[-1])
            self._write_rows(fh, icsv.data, delimiter)

        self.logger.info(f"Wrote {len(icsv.data)} rows to {path}")
        return path

    def _write_timeseries(self, icsv: ICSV2DTimeseries, path: Path) -> Path:
        for date in icsv.dates:
            try:
                icsv.fields.validate(icsv.data[date].shape[1])
            except FormatError as e:
                raise FormatError(f"Block {date}: {e}") from e

        delimiter = icsv.metadata.field_delimiter
        with open(path, "w", encoding="utf-8", newline="") as fh:
            self._write_header(fh, icsv, constants.FIRSTLINES_2DTIMESERIES[-1])
            for date in icsv.dates:
                fh.write(self._date_marker(date, icsv.out_datefmt))
                self._write_rows(fh, icsv.data[date], delimiter)

        self.logger.info(f"Wrote {len(icsv.dates)} date blocks to {path}")
        return path

    def append_timepoint(
        self,
        path: Union[str, Path],
        date: datetime,
        block: pd.DataFrame,
        field_delimiter: Optional[str] = None,
        date_format: Optional[str] = None
    ) -> None:
        """
        Append a [DATE=...] block to an existing 2DTIMESERIES file.

        The file is not parsed: the caller guarantees that ``block`` matches
        the declared fields and that ``field_delimiter`` matches the header.
        A mismatch only surfaces on the next read.

        Args:
            path: Existing 2DTIMESERIES file
            date: Date of the new block
            block: Rows of the new block
            field_delimiter: Delimiter of the target file (default: configured, else ',')
            date_format: strftime format of the marker (default: configured output format)
        """
        if field_delimiter is None:
            field_delimiter = self.config.field_delimiter if self.config else ","
        if date_format is None:
            date_format = self.config.out_date_format if self.config else constants.DEFAULT_DATE_FORMAT
        if not field_delimiter:
            raise FormatError("field_delimiter must not be empty")

        with open(path, "a", encoding="utf-8", newline="") as fh:
            fh.write(self._date_marker(date, date_format))
            self._write_rows(fh, block, field_delimiter)

        self.logger.debug(f"Appended {len(block)} rows for {date} to {path}")

    def header_lines(self, icsv: Union[ICSVBase, ICSV2DTimeseries], first_line: str) -> List[str]:
        """Render the version line plus the [METADATA], [FIELDS] and [DATA] headers."""
        delimiter = icsv.metadata.field_delimiter
        lines = [first_line, f"# {constants.METADATA_MARKER}"]
        for key, value in icsv.metadata.flatten().items():
            lines.append(f"# {key} = {value}")
        lines.append(f"# {constants.FIELDS_MARKER}")
        for key, values in icsv.fields.all_fields().items():
            lines.append(f"# {key} = {delimiter.join(str(v) for v in values)}")
        lines.append(f"# {constants.DATA_MARKER}")
        return lines

    def _write_header(self, fh: IO[str], icsv: Union[ICSVBase, ICSV2DTimeseries], first_line: str) -> None:
        for line in self.header_lines(icsv, first_line):
            fh.write(line + "\n")

    @staticmethod
    def _date_marker(date: datetime, date_format: str) -> str:
        return (
            f"# {constants.DATE_MARKER_PREFIX}"
            f"{DateUtils.format_date(date, date_format)}"
            f"{constants.DATE_MARKER_SUFFIX}\n"
        )

    @staticmethod
    def _write_rows(fh: IO[str], df: pd.DataFrame, delimiter: str) -> None:
        if len(delimiter) == 1:
            df.to_csv(fh, sep=delimiter, header=False, index=False, na_rep="", lineterminator="\n")
            return
        text = df.to_csv(sep=_UNIT_SEPARATOR, header=False, index=False, na_rep="", lineterminator="\n")
        fh.write(text.replace(_UNIT_SEPARATOR, delimiter))


def write(
    icsv: Union[ICSVBase, ICSV2DTimeseries],
    path: Union[str, Path],
    config: Optional[Config] = None
) -> Path:
    """Write an iCSV file of either profile."""
    return ICSVWriter(config).write(icsv, path)


def append_timepoint(
    path: Union[str, Path],
    date: datetime,
    block: pd.DataFrame,
    field_delimiter: str = ",",
    date_format: str = constants.DEFAULT_DATE_FORMAT
) -> None:
    """Append a date block to an existing 2DTIMESERIES file without re-reading it."""
    ICSVWriter().append_timepoint(path, date, block, field_delimiter=field_delimiter, date_format=date_format)
