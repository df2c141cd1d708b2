"""
Delimited data body loading shared by both profile readers.
"""

import logging
import re
from typing import Collection, Optional, Union

import pandas as pd

from ..core import constants
from ..core.date_utils import DateUtils
from ..core.exceptions import FormatError
from ..models import FieldsSection

logger = logging.getLogger(__name__)


def load_table(
    source: str,
    delimiter: str,
    skiprows: Union[int, Collection[int]] = 0
) -> pd.DataFrame:
    """
    Load delimited rows without a header row.

    Only whole lines are skipped: the callers pass the physical line
    numbers of header, comment and blank lines, so a '#' inside a value is
    kept. Only empty fields are missing values, matching what the writer
    emits. A body without any rows yields an empty frame without columns.

    Raises:
        FormatError: If the rows cannot be parsed
    """
    if len(delimiter) > 1:
        options = {"sep": re.escape(delimiter), "engine": "python"}
    else:
        options = {"sep": delimiter}

    try:
        return pd.read_csv(
            source,
            header=None,
            skiprows=skiprows,
            skip_blank_lines=True,
            keep_default_na=False,
            na_values=[""],
            encoding="utf-8",
            **options,
        )
    except pd.errors.EmptyDataError:
        logger.debug(f"No data rows in {source}")
        return pd.DataFrame()
    except pd.errors.ParserError as e:
        raise FormatError(f"Could not parse data section: {e}", source=str(source)) from e


def empty_table(fields: FieldsSection) -> pd.DataFrame:
    return pd.DataFrame(columns=list(fields.fields))


def prepare_columns(
    df: pd.DataFrame,
    fields: FieldsSection,
    date_utils: Optional[DateUtils] = None
) -> pd.DataFrame:
    """
    Name columns after the declared fields and parse time/timestamp columns.

    Returns:
        The same DataFrame, modified in place
    """
    date_utils = date_utils or DateUtils()
    df.columns = list(fields.fields)
    for name in constants.TIMESTAMP_COLUMNS:
        if fields.fields.count(name) != 1:
            continue
        coerced, changed = date_utils.coerce_column(df[name])
        if changed:
            df[name] = coerced
    return df
