"""
Conversion module for the iCSV engine.

Provides flat table and labeled array views of parsed files.
"""

import logging
from typing import Optional, Union

import pandas as pd
import xarray as xr

from ..core import constants
from ..models import ICSV2DTimeseries, ICSVBase
from .arrays import ArrayConverter
from .tables import TableConverter


class DataConverter:
    """
    Unified converter combining the flat table and labeled array views.

    This class provides a convenient interface to all conversion operations.
    """

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize data converter.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)
        self.tables = TableConverter(logger)
        self.arrays = ArrayConverter(logger)

    def to_flat_table(self, icsv: Union[ICSVBase, ICSV2DTimeseries], **kwargs) -> pd.DataFrame:
        """See ``TableConverter.to_flat_table``."""
        return self.tables.to_flat_table(icsv, **kwargs)

    def to_array(self, icsv: Union[ICSVBase, ICSV2DTimeseries], **kwargs) -> xr.DataArray:
        """See ``ArrayConverter.to_array``."""
        return self.arrays.to_array(icsv, **kwargs)


def to_flat_table(
    icsv: Union[ICSVBase, ICSV2DTimeseries],
    localize: bool = False,
    mask_nodata: bool = False,
    date_column: str = constants.FLAT_DATE_COLUMN
) -> pd.DataFrame:
    """Flat DataFrame view of a file object."""
    return TableConverter().to_flat_table(
        icsv, localize=localize, mask_nodata=mask_nodata, date_column=date_column
    )


def to_array(
    icsv: Union[ICSVBase, ICSV2DTimeseries],
    row_dim: Optional[str] = None,
    col_dim: str = constants.DEFAULT_FIELD_DIM,
    index_column: Optional[str] = None,
    drop_non_numeric: bool = True
) -> xr.DataArray:
    """Labeled 2D/3D array view of a file object."""
    return ArrayConverter().to_array(
        icsv,
        row_dim=row_dim,
        col_dim=col_dim,
        index_column=index_column,
        drop_non_numeric=drop_non_numeric,
    )


__all__ = [
    "DataConverter",
    "TableConverter",
    "ArrayConverter",
    "to_flat_table",
    "to_array",
]
