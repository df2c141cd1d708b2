"""
Tests for the 2DTIMESERIES profile reader, writer and append.
"""

from datetime import datetime

import pandas as pd
import pytest

from src.interoperable_csv.core.config import Config
from src.interoperable_csv.core.exceptions import FormatError
from src.interoperable_csv.models import FieldsSection, ICSV2DTimeseries, MetadataSection
from src.interoperable_csv.parsing import TimeseriesReader
from src.interoperable_csv.reader import read
from src.interoperable_csv.writer import ICSVWriter, append_timepoint, write


HEADER = [
    "# iCSV 1.0 UTF-8 2DTIMESERIES",
    "# [METADATA]",
    "# field_delimiter = ,",
    "# geometry = POINT(600000 200000)",
    "# srid = EPSG:2056",
    "# [FIELDS]",
    "# fields = a,b",
    "# [DATA]",
]


class TestTimeseriesReader:
    """Test cases for reading 2DTIMESERIES files."""

    @pytest.fixture
    def reader(self):
        return TimeseriesReader()

    def test_read_blocks(self, write_text, reader):
        path = write_text(HEADER + [
            "# [DATE=2024-01-01T00:00:00]",
            "1,2",
            "3,4",
            "# [DATE=2024-01-02T00:00:00]",
            "5,6",
        ])
        icsv = reader.read(path)

        assert icsv.dates == [datetime(2024, 1, 1), datetime(2024, 1, 2)]
        assert icsv.data[datetime(2024, 1, 1)]["a"].tolist() == [1, 3]
        assert icsv.data[datetime(2024, 1, 2)]["b"].tolist() == [6]
        assert icsv.data[datetime(2024, 1, 2)].index.tolist() == [0]

    def test_blank_lines_ignored(self, write_text, reader):
        path = write_text(HEADER + [
            "# [DATE=2024-01-01T00:00:00]",
            "1,2",
            "",
            "3,4",
            "# [DATE=2024-01-02T00:00:00]",
            "",
            "5,6",
        ])
        icsv = reader.read(path)
        assert [len(icsv.data[d]) for d in icsv.dates] == [2, 1]

    def test_empty_block(self, write_text, reader):
        path = write_text(HEADER + [
            "# [DATE=2024-01-01T00:00:00]",
            "# [DATE=2024-01-02T00:00:00]",
            "5,6",
        ])
        icsv = reader.read(path)
        assert len(icsv.data[datetime(2024, 1, 1)]) == 0
        assert len(icsv.data[datetime(2024, 1, 2)]) == 1

    def test_comment_before_first_marker(self, write_text, reader):
        path = write_text(HEADER + [
            "# produced by station logger",
            "# [DATE=2024-01-01T00:00:00]",
            "1,2",
        ])
        assert len(reader.read(path).dates) == 1

    def test_comment_inside_block(self, write_text, reader):
        path = write_text(HEADER + [
            "# [DATE=2024-01-01T00:00:00]",
            "1,2",
            "# [DATE=2024-01-02T00:00:00]",
            "# comment",
            "5,6",
        ])
        with pytest.raises(FormatError, match="Comments inside a data block") as excinfo:
            reader.read(path)
        assert excinfo.value.line == "# comment"
        assert "# comment" in str(excinfo.value)

    def test_field_count_mismatch(self, write_text, reader):
        lines = [line if not line.startswith("# fields") else "# fields = a,b,c" for line in HEADER]
        path = write_text(lines + [
            "# [DATE=2024-01-01T00:00:00]",
            "1,2",
            "# [DATE=2024-01-02T00:00:00]",
            "5,6",
        ])
        with pytest.raises(FormatError, match="Number of fields"):
            reader.read(path)

    def test_data_without_marker(self, write_text, reader):
        path = write_text(HEADER + ["1,2"])
        with pytest.raises(FormatError, match=r"No \[DATE=\.\.\.\] marker"):
            reader.read(path)

    def test_no_markers(self, write_text, reader):
        with pytest.raises(FormatError, match="No \\[DATE"):
            reader.read(write_text(HEADER))

    def test_missing_data_section(self, write_text, reader):
        with pytest.raises(FormatError, match="DATA"):
            reader.read(write_text(HEADER[:-1]))

    def test_invalid_date(self, write_text, reader):
        path = write_text(HEADER + ["# [DATE=yesterday]", "1,2"])
        with pytest.raises(FormatError, match="Invalid date"):
            reader.read(path)

    def test_duplicate_date(self, write_text, reader):
        path = write_text(HEADER + [
            "# [DATE=2024-01-01T00:00:00]",
            "1,2",
            "# [DATE=2024-01-01T00:00:00]",
            "3,4",
        ])
        with pytest.raises(FormatError, match="Duplicate date"):
            reader.read(path)

    def test_custom_date_format(self, write_text, reader):
        path = write_text(HEADER + ["# [DATE=01.01.2024 10:00]", "1,2"])
        icsv = reader.read(path, date_format="%d.%m.%Y %H:%M")
        assert icsv.dates == [datetime(2024, 1, 1, 10)]
        assert icsv.out_datefmt == "%d.%m.%Y %H:%M"

    def test_configured_date_format(self, write_text, monkeypatch):
        monkeypatch.setenv("ICSV_DATE_FORMAT", "%Y%m%d")
        path = write_text(HEADER + ["# [DATE=20240101]", "1,2"])
        icsv = TimeseriesReader(config=Config()).read(path)
        assert icsv.dates == [datetime(2024, 1, 1)]

    def test_standard_file_rejected(self, write_text, reader):
        path = write_text(["# iCSV 1.0 UTF-8"] + HEADER[1:])
        with pytest.raises(FormatError, match="2DTIMESERIES"):
            reader.read(path)


class TestTimeseriesModel:
    """Test cases for ICSV2DTimeseries construction."""

    def test_from_blocks_length_mismatch(self, metadata):
        fields = FieldsSection.build(fields=["a"])
        with pytest.raises(FormatError):
            ICSV2DTimeseries.from_blocks(metadata, fields, [pd.DataFrame({"a": [1]})], [])

    def test_requires_dates(self, metadata):
        with pytest.raises(FormatError):
            ICSV2DTimeseries(metadata=metadata, fields=FieldsSection.build(fields=["a"]), data={}, dates=[])

    def test_missing_block(self, metadata):
        with pytest.raises(FormatError, match="No data block"):
            ICSV2DTimeseries(
                metadata=metadata,
                fields=FieldsSection.build(fields=["a"]),
                data={},
                dates=[datetime(2024, 1, 1)],
            )

    def test_first_block_checked(self, metadata):
        with pytest.raises(FormatError, match="Number of fields"):
            ICSV2DTimeseries.from_blocks(
                metadata,
                FieldsSection.build(fields=["a", "b"]),
                [pd.DataFrame({"a": [1]})],
                [datetime(2024, 1, 1)],
            )


class TestTimeseriesWriter:
    """Test cases for writing and appending 2DTIMESERIES files."""

    def test_round_trip(self, tmp_path, timeseries_file):
        path = write(timeseries_file, tmp_path / "ts.icsv")
        result = read(path)

        assert isinstance(result, ICSV2DTimeseries)
        assert result.dates == timeseries_file.dates
        for date in timeseries_file.dates:
            pd.testing.assert_frame_equal(result.data[date], timeseries_file.data[date])
        assert result.metadata == timeseries_file.metadata
        assert result.geometry == timeseries_file.geometry

    def test_date_markers(self, tmp_path, timeseries_file):
        timeseries_file.out_datefmt = "%Y-%m-%d %H:%M"
        path = ICSVWriter().write(timeseries_file, tmp_path / "ts.icsv")
        lines = path.read_text(encoding="utf-8").splitlines()
        assert "# [DATE=2024-01-01 10:00]" in lines
        assert lines.index("# [DATE=2024-01-02 10:00]") == lines.index("# [DATE=2024-01-01 10:00]") + 4

    def test_write_rejects_bad_later_block(self, tmp_path, timeseries_file):
        timeseries_file.data[timeseries_file.dates[1]] = pd.DataFrame({"layer_index": [1]})
        path = tmp_path / "bad.icsv"
        with pytest.raises(FormatError):
            write(timeseries_file, path)
        assert not path.exists()

    def test_append_timepoint(self, tmp_path, timeseries_file):
        path = write(timeseries_file, tmp_path / "ts.icsv")
        d3 = datetime(2024, 1, 3, 10)
        df3 = pd.DataFrame({"layer_index": [1, 2], "var1": [2.0, 3.0], "var2": [12.0, 22.0]})

        assert append_timepoint(path, d3, df3, field_delimiter=",") is None

        result = read(path)
        assert len(result.dates) == len(timeseries_file.dates) + 1
        assert result.dates[-1] == d3
        pd.testing.assert_frame_equal(result.data[d3], df3)

    def test_append_mismatch_surfaces_on_read(self, tmp_path, timeseries_file):
        path = write(timeseries_file, tmp_path / "ts.icsv")
        ICSVWriter().append_timepoint(path, datetime(2024, 1, 3), pd.DataFrame({"x": [1], "y": [2], "z": [3], "w": [4]}))
        with pytest.raises(FormatError):
            read(path)

    def test_append_rejects_empty_delimiter(self, tmp_path, timeseries_file):
        path = write(timeseries_file, tmp_path / "ts.icsv")
        with pytest.raises(FormatError, match="must not be empty"):
            ICSVWriter().append_timepoint(path, datetime(2024, 1, 3), pd.DataFrame({"a": [1]}), field_delimiter="")

    def test_hash_and_na_strings_round_trip(self, tmp_path, metadata):
        fields = FieldsSection.build(fields=["a", "s"])
        d1, d2 = datetime(2024, 1, 1), datetime(2024, 1, 2)
        icsv = ICSV2DTimeseries.from_blocks(
            metadata, fields,
            [pd.DataFrame({"a": [1, 2], "s": ["plot#1", "NA"]}), pd.DataFrame({"a": [3], "s": ["null"]})],
            [d1, d2],
        )
        result = read(write(icsv, tmp_path / "hash.icsv"))

        assert result.data[d1]["s"].tolist() == ["plot#1", "NA"]
        assert result.data[d2]["s"].tolist() == ["null"]

    def test_multi_character_delimiter(self, tmp_path):
        md = MetadataSection.build(field_delimiter="||", geometry="POINT(1 2)", srid="EPSG:2056")
        fields = FieldsSection.build(fields=["layer_index", "v"])
        d1, d2 = datetime(2024, 1, 1), datetime(2024, 1, 2)
        icsv = ICSV2DTimeseries.from_blocks(
            md, fields, [pd.DataFrame({"layer_index": [1, 2], "v": [0.5, 1.5]})], [d1]
        )
        path = write(icsv, tmp_path / "multi.icsv")
        append_timepoint(path, d2, pd.DataFrame({"layer_index": [1], "v": [2.5]}), field_delimiter="||")

        assert path.read_text(encoding="utf-8").splitlines()[-1] == "1||2.5"
        result = read(path)
        assert result.dates == [d1, d2]
        assert result.data[d1]["v"].tolist() == [0.5, 1.5]
        assert result.data[d2]["layer_index"].tolist() == [1]
