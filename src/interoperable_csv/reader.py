"""
Profile detection and the top-level read entry point.
"""

import logging
from enum import Enum
from pathlib import Path
from typing import Optional, Union

from .core import constants
from .core.config import Config
from .core.exceptions import FormatError
from .models import ICSV2DTimeseries, ICSVBase
from .parsing import StandardReader, TimeseriesReader


class Profile(Enum):
    """iCSV application profiles."""

    STANDARD = "standard"
    TIMESERIES_2D = "2dtimeseries"


def detect_profile(first_line: str) -> Profile:
    """
    Classify the first line of a file.

    Raises:
        FormatError: If the line is not a recognized version marker
    """
    line = first_line.rstrip()
    if line in constants.FIRSTLINES_2DTIMESERIES:
        return Profile.TIMESERIES_2D
    if line in constants.FIRSTLINES:
        return Profile.STANDARD
    raise FormatError("Not an iCSV file", line=line)


class ICSVReader:
    """Read iCSV files of either profile."""

    def __init__(self, config: Optional[Config] = None, logger: Optional[logging.Logger] = None):
        """
        Initialize reader.

        Args:
            config: Configuration instance
            logger: Logger instance
        """
        self.config = config
        self.logger = logger or logging.getLogger(__name__)
        self.standard_reader = StandardReader(config, self.logger)
        self.timeseries_reader = TimeseriesReader(config, self.logger)

    def read_profile(self, path: Union[str, Path]) -> Profile:
        """Detect the profile of a file from its first line."""
        with open(path, "r", encoding="utf-8") as fh:
            first_line = fh.readline()
        try:
            return detect_profile(first_line)
        except FormatError as e:
            raise FormatError("Not an iCSV file", source=str(path), line=first_line.rstrip()) from e

    def read(
        self,
        path: Union[str, Path],
        date_format: Optional[str] = None
    ) -> Union[ICSVBase, ICSV2DTimeseries]:
        """
        Read an iCSV file, dispatching on its first line.

        Args:
            path: File to read
            date_format: Date marker format for the 2DTIMESERIES profile

        Returns:
            ICSVBase or ICSV2DTimeseries
        """
        profile = self.read_profile(path)
        self.logger.debug(f"Reading {path} as {profile.value} profile")
        if profile is Profile.TIMESERIES_2D:
            return self.timeseries_reader.read(path, date_format=date_format)
        return self.standard_reader.read(path)


def read(
    path: Union[str, Path],
    date_format: Optional[str] = None,
    config: Optional[Config] = None
) -> Union[ICSVBase, ICSV2DTimeseries]:
    """Read an iCSV file of either profile."""
    return ICSVReader(config).read(path, date_format=date_format)
