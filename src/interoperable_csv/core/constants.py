"""
Format-wide constants for the iCSV engine.

Version markers, section markers, recognized header keys and conversion
defaults used throughout the package.
"""

# Recognized format versions
VERSIONS = ("1.0",)
FIRSTLINES = tuple(f"# iCSV {v} UTF-8" for v in VERSIONS)
FIRSTLINES_2DTIMESERIES = tuple(f"# iCSV {v} UTF-8 2DTIMESERIES" for v in VERSIONS)

# Header markers
COMMENT_PREFIX = "#"
METADATA_MARKER = "[METADATA]"
FIELDS_MARKER = "[FIELDS]"
DATA_MARKER = "[DATA]"
DATE_MARKER_PREFIX = "[DATE="
DATE_MARKER_SUFFIX = "]"

# Header keys
REQUIRED_METADATA_KEYS = ("field_delimiter", "geometry", "srid")
RECOMMENDED_METADATA_KEYS = ("station_id", "nodata", "timezone", "doi", "timestamp_meaning")
FIELDS_KEY = "fields"
RECOMMENDED_FIELD_KEYS = ("units_multiplier", "units", "long_name", "standard_name")

# Date handling
DEFAULT_DATE_FORMAT = "%Y-%m-%dT%H:%M:%S"
TIMESTAMP_COLUMNS = ("time", "timestamp")
DATETIME_PATTERNS = (
    "%Y-%m-%dT%H:%M:%S",
    "%Y-%m-%d %H:%M:%S",
    "%Y-%m-%dT%H:%M:%S.%f",
    "%Y-%m-%d %H:%M:%S.%f",
)

# Conversion defaults
INDEX_COLUMN_CANDIDATES = ("timestamp", "time")  # 2D, checked in order
LAYER_INDEX_COLUMN = "layer_index"  # 3D
DEFAULT_ROW_DIM = "x"
FALLBACK_ROW_DIM = "y"
DEFAULT_FIELD_DIM = "field"
TIME_DIM = "time"
FLAT_DATE_COLUMN = "time"
