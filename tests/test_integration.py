"""
Integration tests for the complete read, convert and write workflow.

Uses the sample files in tests/fixtures.
"""

from datetime import datetime

import numpy as np
import pandas as pd
import pytest

from src.interoperable_csv import read, to_array, to_flat_table, write
from src.interoperable_csv.models import ICSV2DTimeseries, ICSVBase
from src.interoperable_csv.writer import append_timepoint


@pytest.mark.integration
class TestStationPipeline:
    """Standard profile file from disk to table and array."""

    def test_read_and_convert(self, fixtures_dir):
        icsv = read(fixtures_dir / "station.icsv")

        assert isinstance(icsv, ICSVBase)
        assert icsv.metadata.field_delimiter == "|"
        assert icsv.fields.get_attribute("long_name")[1] == "air temperature"

        df = to_flat_table(icsv, mask_nodata=True, localize=True)
        assert np.isnan(df["VW"].iloc[1])
        assert df["timestamp"].iloc[0].utcoffset().total_seconds() == 3600
        assert df.attrs["column_metadata"]["VW"]["units"] == "m/s"

        arr = to_array(icsv)
        assert arr.dims == ("x", "field")
        assert arr.shape == (3, 3)
        assert float(arr.sel(field="TA").values[0]) == pytest.approx(268.15)

    def test_rewrite_identical(self, fixtures_dir, tmp_path):
        icsv = read(fixtures_dir / "station.icsv")
        out = tmp_path / "station.icsv"
        write(icsv, out)

        again = read(out)
        assert again.metadata == icsv.metadata
        assert again.fields == icsv.fields
        pd.testing.assert_frame_equal(again.data, icsv.data)


@pytest.mark.integration
class TestSnowpackPipeline:
    """2DTIMESERIES file from disk to table and array."""

    def test_read(self, fixtures_dir):
        icsv = read(fixtures_dir / "snowpack.icsv")

        assert isinstance(icsv, ICSV2DTimeseries)
        assert icsv.dates == [datetime(2024, 1, d) for d in (1, 2, 3)]
        assert [len(icsv.data[d]) for d in icsv.dates] == [3, 2, 4]

    def test_array(self, fixtures_dir):
        arr = to_array(read(fixtures_dir / "snowpack.icsv"))

        assert arr.dims == ("x", "field", "time")
        assert arr.shape == (4, 3, 3)
        assert list(arr["field"].values) == ["height", "density", "temperature"]
        assert np.isnan(arr.sel(field="density").values[2, 1])
        assert arr.sel(field="density").values[3, 2] == 90.0

    def test_append_and_reread(self, fixtures_dir, tmp_path):
        icsv = read(fixtures_dir / "snowpack.icsv")
        out = tmp_path / "snowpack.icsv"
        write(icsv, out)

        block = pd.DataFrame({
            "layer_index": [1, 2],
            "height": [0.1, 0.2],
            "density": [335.0, 300.0],
            "temperature": [267.5, 266.9],
        })
        append_timepoint(out, datetime(2024, 1, 4), block)

        again = read(out)
        assert len(again.dates) == 4
        assert again.dates[-1] == datetime(2024, 1, 4)
        assert again.data[again.dates[-1]]["density"].tolist() == [335.0, 300.0]
        assert len(to_flat_table(again)) == 11
