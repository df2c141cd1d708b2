"""
Labeled array conversion.

Standard files become 2D ``xarray.DataArray`` objects (row, field);
2DTIMESERIES files become 3D arrays (layer, field, time).
"""

import logging
from typing import Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd
import xarray as xr
from pandas.api.types import is_numeric_dtype

from ..core import constants
from ..core.exceptions import FormatError
from ..models import FieldsSection, ICSV2DTimeseries, ICSVBase


class ArrayConverter:
    """Convert iCSV file objects to labeled arrays."""

    def __init__(self, logger: Optional[logging.Logger] = None):
        """
        Initialize array converter.

        Args:
            logger: Logger instance
        """
        self.logger = logger or logging.getLogger(__name__)

    def to_array(
        self,
        icsv,
        row_dim: Optional[str] = None,
        col_dim: str = constants.DEFAULT_FIELD_DIM,
        index_column: Optional[str] = None,
        drop_non_numeric: bool = True
    ) -> xr.DataArray:
        """
        Convert a file object to a labeled array.

        Args:
            icsv: ICSVBase or ICSV2DTimeseries
            row_dim: Name of the row/layer dimension. When left as None it is
                     'x' if an index column is used and 'y' otherwise
            col_dim: Name of the field dimension
            index_column: Column providing row coordinates. Defaults to
                          'timestamp'/'time' (standard) or 'layer_index' (2DTIMESERIES)
            drop_non_numeric: Keep only numeric columns

        Returns:
            xarray.DataArray with the flattened metadata as attrs

        Raises:
            FormatError: If no data column is left after filtering
        """
        if isinstance(icsv, ICSV2DTimeseries):
            return self._to_array_3d(icsv, row_dim, col_dim, index_column, drop_non_numeric)
        if isinstance(icsv, ICSVBase):
            return self._to_array_2d(icsv, row_dim, col_dim, index_column, drop_non_numeric)
        raise TypeError(f"Cannot convert object of type {type(icsv).__name__}")

    def _to_array_2d(
        self,
        icsv: ICSVBase,
        row_dim: Optional[str],
        col_dim: str,
        index_column: Optional[str],
        drop_non_numeric: bool
    ) -> xr.DataArray:
        df = icsv.data
        idx = self._resolve_index(df.columns, index_column, constants.INDEX_COLUMN_CANDIDATES)
        cols = [c for c in df.columns if c != idx]
        cols = self._select_columns(df, cols, icsv.fields, drop_non_numeric)

        dtype = common_dtype(df[c].dtype for c in cols)
        values = df[cols].to_numpy(dtype=dtype)

        rows = df[idx].to_numpy() if idx is not None else np.arange(1, len(df) + 1)
        dim = self._row_dim(row_dim, idx is not None)

        coords = {dim: rows, col_dim: [str(c) for c in cols]}
        coords.update(field_coords(icsv.fields, cols, col_dim, exclude=(dim,)))

        self.logger.debug(f"Built 2D array {values.shape} with dims ({dim}, {col_dim})")
        return xr.DataArray(values, dims=(dim, col_dim), coords=coords, attrs=icsv.metadata.flatten())

    def _to_array_3d(
        self,
        icsv: ICSV2DTimeseries,
        row_dim: Optional[str],
        col_dim: str,
        index_column: Optional[str],
        drop_non_numeric: bool
    ) -> xr.DataArray:
        dates = icsv.dates
        blocks = [icsv.data[d] for d in dates]
        reference = blocks[0]

        idx = self._resolve_index(reference.columns, index_column, (constants.LAYER_INDEX_COLUMN,))
        skip = set(constants.TIMESTAMP_COLUMNS) | {idx}
        cols = [c for c in reference.columns if c not in skip]
        cols = self._select_columns(reference, cols, icsv.fields, drop_non_numeric)

        has_idx = idx is not None
        if has_idx:
            observed = pd.concat(
                [b[idx] for b in blocks if idx in b.columns], ignore_index=True
            ).dropna()
            layers = np.sort(observed.unique())
        else:
            layers = np.arange(1, max(len(b) for b in blocks) + 1)

        dtype = common_dtype(b[c].dtype for b in blocks for c in cols if c in b.columns)
        dtype, fill = missing_capable(dtype)
        buffer = np.full((len(layers), len(cols), len(dates)), fill, dtype=dtype)

        positions = {layer: i for i, layer in enumerate(layers)}
        for k, block in enumerate(blocks):
            if has_idx:
                if idx not in block.columns:
                    self.logger.debug(f"Block {dates[k]} has no {idx!r} column, leaving it empty")
                    continue
                mapped = block[idx].map(positions)
                valid = mapped.notna().to_numpy()
                targets = mapped[valid].astype(int).to_numpy()
            else:
                valid = np.ones(len(block), dtype=bool)
                targets = np.arange(len(block))

            for j, c in enumerate(cols):
                if c not in block.columns:
                    continue
                buffer[targets, j, k] = block[c].to_numpy()[valid]

        dim = self._row_dim(row_dim, has_idx)
        coords = {
            dim: layers,
            col_dim: [str(c) for c in cols],
            constants.TIME_DIM: pd.to_datetime(list(dates)),
        }
        coords.update(field_coords(icsv.fields, cols, col_dim, exclude=(dim, constants.TIME_DIM)))

        self.logger.debug(f"Built 3D array {buffer.shape} with dims ({dim}, {col_dim}, {constants.TIME_DIM})")
        return xr.DataArray(
            buffer,
            dims=(dim, col_dim, constants.TIME_DIM),
            coords=coords,
            attrs=icsv.metadata.flatten(),
        )

    def _resolve_index(
        self,
        columns: Iterable,
        index_column: Optional[str],
        candidates: Sequence[str]
    ) -> Optional[str]:
        names = list(columns)
        if index_column is not None:
            if index_column in names:
                return index_column
            self.logger.warning(f"Index column {index_column!r} not found, using row positions")
            return None
        for candidate in candidates:
            if candidate in names:
                return candidate
        return None

    def _select_columns(
        self,
        df: pd.DataFrame,
        cols: List,
        fields: FieldsSection,
        drop_non_numeric: bool
    ) -> List:
        if drop_non_numeric:
            dropped = [c for c in cols if not is_numeric_dtype(df[c])]
            if dropped:
                self.logger.debug(f"Dropping non-numeric columns: {dropped}")
            cols = [c for c in cols if c not in dropped]

        order = {name: i for i, name in enumerate(fields.fields)}
        cols = sorted(cols, key=lambda c: order.get(c, len(order)))

        if not cols:
            raise FormatError(
                "No data columns available for array conversion (after filtering index and non-numeric)"
            )
        return cols

    @staticmethod
    def _row_dim(row_dim: Optional[str], has_index: bool) -> str:
        if row_dim is not None:
            return row_dim
        return constants.DEFAULT_ROW_DIM if has_index else constants.FALLBACK_ROW_DIM


def common_dtype(dtypes: Iterable) -> np.dtype:
    """Smallest numpy dtype holding every given dtype; object when they do not promote."""
    dtypes = list(dtypes)
    if not dtypes:
        return np.dtype(np.float64)
    try:
        return np.result_type(*dtypes)
    except (TypeError, ValueError):
        return np.dtype(object)


def missing_capable(dtype: np.dtype) -> Tuple[np.dtype, object]:
    """Promote a dtype so it can hold a missing marker; returns (dtype, missing value)."""
    if dtype.kind in "biu":
        return np.dtype(np.float64), np.nan
    if dtype.kind in "fc":
        return dtype, np.nan
    if dtype.kind in "mM":
        return dtype, dtype.type("NaT")
    return np.dtype(object), np.nan


def field_coords(
    fields: FieldsSection,
    cols: List,
    col_dim: str,
    exclude: Sequence[str] = ()
) -> Dict[str, Tuple[str, List[str]]]:
    """Per-field attributes as non-index coordinates along the field dimension."""
    coords = {}
    ncols = len(fields.fields)
    for attr, values in fields.miscellaneous_fields().items():
        if len(values) != ncols or attr in exclude or attr == col_dim:
            continue
        lookup = dict(zip(fields.fields, values))
        coords[attr] = (col_dim, [lookup.get(c, "") for c in cols])
    return coords
