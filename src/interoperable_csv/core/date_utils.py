"""
Date and timezone utilities.

Centralizes timestamp parsing for data columns and [DATE=...] markers,
plus timezone resolution for the ``timezone`` metadata key.
"""

import logging
from datetime import datetime, tzinfo
from typing import Optional, Tuple, Union

import pandas as pd
import pytz
from pandas.api.types import is_datetime64_any_dtype

from . import constants
from .exceptions import FormatError


class DateUtils:
    """Utilities for date parsing, formatting and timezone handling."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize date utilities.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    @staticmethod
    def try_parse_datetime(token: str) -> Optional[datetime]:
        """
        Parse a timestamp using the known ISO-like patterns.

        The fixed patterns are tried in order, then ``datetime.fromisoformat``.

        Args:
            token: Text to parse

        Returns:
            Parsed datetime, or None if no pattern matches
        """
        text = token.strip()
        for pattern in constants.DATETIME_PATTERNS:
            try:
                return datetime.strptime(text, pattern)
            except ValueError:
                continue
        try:
            return datetime.fromisoformat(text)
        except ValueError:
            return None

    def coerce_column(self, values: pd.Series) -> Tuple[pd.Series, bool]:
        """
        Convert a column of timestamp strings to datetimes, all or nothing.

        Missing entries become NaT. The first entry that cannot be parsed
        aborts the conversion and the original column is returned.

        Args:
            values: Column to convert

        Returns:
            Tuple of (column, changed)
        """
        if is_datetime64_any_dtype(values):
            return values, False

        parsed = []
        any_parsed = False
        for value in values:
            if isinstance(value, datetime):
                parsed.append(value)
                any_parsed = True
                continue
            if not isinstance(value, str):
                if pd.isna(value):
                    parsed.append(None)
                    continue
                self.logger.debug(f"Column {values.name!r} holds non-text value {value!r}, not a timestamp")
                return values, False

            dt = self.try_parse_datetime(value)
            if dt is None:
                self.logger.debug(f"Column {values.name!r}: {value!r} is not a timestamp, keeping original values")
                return values, False
            parsed.append(dt)
            any_parsed = True

        if not any_parsed:
            return values, False

        try:
            coerced = pd.to_datetime(pd.Series(parsed, index=values.index, dtype=object))
        except (ValueError, TypeError) as e:
            self.logger.debug(f"Column {values.name!r} mixes incompatible timestamps: {e}")
            return values, False

        coerced.name = values.name
        return coerced, True

    @staticmethod
    def parse_date(token: str, date_format: str = constants.DEFAULT_DATE_FORMAT) -> datetime:
        """
        Parse a [DATE=...] marker token with an explicit format.

        Raises:
            FormatError: If the token does not match the format
        """
        try:
            return datetime.strptime(token.strip(), date_format)
        except ValueError as e:
            raise FormatError(f"Invalid date {token!r} for format {date_format!r}: {e}") from e

    @staticmethod
    def format_date(dt: datetime, date_format: str = constants.DEFAULT_DATE_FORMAT) -> str:
        """Render a date for a [DATE=...] marker."""
        return dt.strftime(date_format)

    @staticmethod
    def parse_timezone(timezone: Union[str, int, float]) -> tzinfo:
        """
        Resolve the ``timezone`` metadata value.

        Accepts an IANA name (e.g. 'Europe/Zurich') or a numeric offset in
        hours (e.g. '1', '-3.5').

        Raises:
            ValueError: If timezone is invalid
        """
        text = str(timezone).strip()
        try:
            offset_hours = float(text)
        except ValueError:
            offset_hours = None

        if offset_hours is not None:
            return pytz.FixedOffset(int(round(offset_hours * 60)))

        try:
            return pytz.timezone(text)
        except pytz.exceptions.UnknownTimeZoneError:
            raise ValueError(f"Invalid timezone: {timezone}")

    def localize_column(self, values: pd.Series, timezone: Union[str, int, float]) -> pd.Series:
        """
        Attach a timezone to a naive datetime column.

        Non-datetime and already-aware columns are returned unchanged.
        """
        if not is_datetime64_any_dtype(values) or values.dt.tz is not None:
            return values

        tz = self.parse_timezone(timezone)
        self.logger.debug(f"Localizing column {values.name!r} to {tz}")
        return values.dt.tz_localize(tz)
