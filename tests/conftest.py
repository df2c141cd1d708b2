"""
Pytest configuration and shared fixtures for all tests.
"""

import sys
from datetime import datetime
from pathlib import Path

import pandas as pd
import pytest

# Add the project root to sys.path so we can import from src
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from src.interoperable_csv.models import FieldsSection, ICSV2DTimeseries, ICSVBase, MetadataSection  # noqa: E402


@pytest.fixture(scope="session")
def fixtures_dir():
    """Get the fixtures directory path."""
    return Path(__file__).parent / "fixtures"


@pytest.fixture
def write_text(tmp_path):
    """Write a list of lines to a temporary file and return its path."""
    def _write(lines, name="sample.icsv"):
        path = tmp_path / name
        path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        return path
    return _write


@pytest.fixture
def metadata():
    """Minimal valid metadata section."""
    return MetadataSection.build(
        field_delimiter=",",
        geometry="POINT(600000 200000)",
        srid="EPSG:2056",
    )


@pytest.fixture
def base_file(metadata):
    """Standard profile file with a timestamp column and two integer columns."""
    df = pd.DataFrame({
        "timestamp": pd.to_datetime(["2024-01-01T00:00:00", "2024-01-02T00:00:00", "2024-01-03T12:30:00"]),
        "a": [1, 2, 3],
        "b": [6, 7, 8],
    })
    fields = FieldsSection.build(fields=["timestamp", "a", "b"], units=["-", "m", "K"])
    return ICSVBase(metadata=metadata, fields=fields, data=df)


@pytest.fixture
def timeseries_file(metadata):
    """2DTIMESERIES file with a layer index and two blocks."""
    d1 = datetime(2024, 1, 1, 10)
    d2 = datetime(2024, 1, 2, 10)
    df1 = pd.DataFrame({"layer_index": [1, 2, 3], "var1": [1.0, 2.0, 3.0], "var2": [10.0, 20.0, 30.0]})
    df2 = pd.DataFrame({"layer_index": [1, 2, 3], "var1": [1.5, 2.5, 3.5], "var2": [15.0, 25.0, 35.0]})
    fields = FieldsSection.build(fields=["layer_index", "var1", "var2"])
    return ICSV2DTimeseries.from_blocks(metadata, fields, [df1, df2], [d1, d2])


def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test reading fixture files"
    )
    config.addinivalue_line(
        "markers", "unit: mark test as unit test (no file access)"
    )
