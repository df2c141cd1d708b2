"""
Interoperable CSV (iCSV)

This package reads, writes and converts iCSV files: delimited text with
[METADATA] and [FIELDS] header sections, in the standard single-table
profile and the 2DTIMESERIES profile of dated blocks.
"""

__version__ = "0.1.0"
__description__ = "Reader, writer and converters for the iCSV format"

_LAZY = {
    "read": ".reader",
    "ICSVReader": ".reader",
    "detect_profile": ".reader",
    "Profile": ".reader",
    "write": ".writer",
    "append_timepoint": ".writer",
    "ICSVWriter": ".writer",
    "to_flat_table": ".processing",
    "to_array": ".processing",
    "DataConverter": ".processing",
    "ICSVBase": ".models",
    "ICSV2DTimeseries": ".models",
    "MetadataSection": ".models",
    "FieldsSection": ".models",
    "Geometry": ".models",
    "Location": ".models",
    "FormatError": ".core",
    "Config": ".core",
}


def __getattr__(name):
    """Lazy import to avoid importing pandas/xarray when not needed."""
    if name in _LAZY:
        import importlib
        module = importlib.import_module(_LAZY[name], __name__)
        return getattr(module, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")


__all__ = list(_LAZY)
