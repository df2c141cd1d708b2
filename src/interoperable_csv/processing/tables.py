"""
Flat table conversion.

Turns a file object into a single DataFrame with file-level metadata and
per-column attributes attached in ``DataFrame.attrs``.
"""

import logging
from typing import Dict, List, Optional, Union

import numpy as np
import pandas as pd

from ..core import constants
from ..core.date_utils import DateUtils
from ..core.exceptions import FormatError
from ..models import FieldsSection, ICSV2DTimeseries, ICSVBase, MetadataSection


class TableConverter:
    """Convert iCSV file objects to flat DataFrames."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize table converter.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.date_utils = DateUtils(self.logger)

    def to_flat_table(
        self,
        icsv: Union[ICSVBase, ICSV2DTimeseries],
        localize: bool = False,
        mask_nodata: bool = False,
        date_column: str = constants.FLAT_DATE_COLUMN
    ) -> pd.DataFrame:
        """
        Convert a file object to one DataFrame.

        For the 2DTIMESERIES profile all blocks are concatenated in date
        order with an added ``date_column`` holding each block's date; the
        result has the union of the block columns.

        ``df.attrs["metadata"]`` holds the flattened metadata and
        ``df.attrs["column_metadata"]`` maps each declared column to its
        attributes. Attribute vectors whose length differs from the number
        of fields are skipped.

        Args:
            icsv: File object
            localize: Attach the ``timezone`` metadata to parsed timestamp columns
            mask_nodata: Replace the ``nodata`` sentinel with missing values
            date_column: Name of the added date column (2DTIMESERIES only)

        Returns:
            New DataFrame; the file object is not modified
        """
        if isinstance(icsv, ICSV2DTimeseries):
            df = self._concat_blocks(icsv, date_column)
            time_columns = list(constants.TIMESTAMP_COLUMNS) + [date_column]
        else:
            df = self._rename(icsv.data.copy(), icsv.fields)
            time_columns = list(constants.TIMESTAMP_COLUMNS)

        if mask_nodata:
            df = self._mask_nodata(df, icsv.metadata)
        if localize:
            df = self._localize(df, icsv.metadata, time_columns)

        df.attrs["metadata"] = icsv.metadata.flatten()
        df.attrs["column_metadata"] = column_metadata(icsv.fields)
        return df

    def _concat_blocks(self, icsv: ICSV2DTimeseries, date_column: str) -> pd.DataFrame:
        if date_column in icsv.fields.fields:
            raise FormatError(
                f"Column {date_column!r} already exists, choose another date_column"
            )

        frames = []
        for date in icsv.dates:
            block = self._rename(icsv.data[date].copy(), icsv.fields)
            block[date_column] = pd.Series([date] * len(block), index=block.index, dtype="datetime64[ns]")
            frames.append(block)

        return pd.concat(frames, ignore_index=True, sort=False)

    @staticmethod
    def _rename(df: pd.DataFrame, fields: FieldsSection) -> pd.DataFrame:
        if df.shape[1] != len(fields.fields):
            raise FormatError(
                f"Number of fields ({len(fields.fields)}) does not match the number of columns ({df.shape[1]})"
            )
        df.columns = list(fields.fields)
        return df

    def _mask_nodata(self, df: pd.DataFrame, metadata: MetadataSection) -> pd.DataFrame:
        if metadata.nodata is None:
            self.logger.warning("mask_nodata requested but no nodata value is declared")
            return df

        sentinels: List[object] = [str(metadata.nodata)]
        try:
            number = float(metadata.nodata)
        except (TypeError, ValueError):
            number = None
        if number is not None:
            sentinels.append(number)

        self.logger.debug(f"Masking nodata sentinels {sentinels}")
        return df.replace(sentinels, np.nan)

    def _localize(self, df: pd.DataFrame, metadata: MetadataSection, columns: List[str]) -> pd.DataFrame:
        if metadata.timezone is None:
            self.logger.warning("localize requested but no timezone is declared")
            return df

        for name in columns:
            if name in df.columns:
                df[name] = self.date_utils.localize_column(df[name], metadata.timezone)
        return df


def column_metadata(fields: FieldsSection) -> Dict[str, Dict[str, str]]:
    """Per-column attributes for every attribute vector with one entry per field."""
    ncols = len(fields.fields)
    columns: Dict[str, Dict[str, str]] = {name: {} for name in fields.fields}
    for attr, values in fields.miscellaneous_fields().items():
        if len(values) != ncols:
            continue
        for name, value in zip(fields.fields, values):
            columns[name][attr] = value
    return columns
