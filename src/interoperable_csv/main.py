"""
Command line entry point for the iCSV engine.

Inspects, validates and converts iCSV files.
"""

import sys
from pathlib import Path
from typing import List, Optional

from .core import Config, FormatError, LoggerContext, setup_logger
from .models import ICSV2DTimeseries
from .processing import DataConverter
from .reader import ICSVReader


class ICSVApp:
    """Command line application."""

    def __init__(self, config_file: Optional[str] = None):
        """
        Initialize application.

        Args:
            config_file: Path to configuration file
        """
        self.config = Config(config_file)
        self.logger = setup_logger(log_file=self.config.log_file, log_level=self.config.log_level)
        self.logger.debug(f"Configuration: {self.config}")

        self.reader = ICSVReader(self.config, self.logger)
        self.converter = DataConverter(self.logger)

    def info(self, path: str) -> str:
        """Summarize a file's profile, header and data shape."""
        with LoggerContext(self.logger, f"reading {path}"):
            icsv = self.reader.read(path)

        lines = [f"Profile: {icsv.profile}", "Metadata:"]
        lines.extend(f"  {k} = {v}" for k, v in icsv.metadata.flatten().items())
        lines.append("Fields:")
        lines.extend(f"  {k} = {', '.join(v)}" for k, v in icsv.fields.all_fields().items())
        lines.append(f"Geometry: {icsv.geometry.geometry_string} ({icsv.geometry.srid_string})")

        if isinstance(icsv, ICSV2DTimeseries):
            lines.append(f"Dates: {len(icsv.dates)} ({icsv.dates[0]} .. {icsv.dates[-1]})")
            lines.append(f"Rows: {sum(len(icsv.data[d]) for d in icsv.dates)}")
        else:
            lines.append(f"Rows: {len(icsv.data)}")

        return "\n".join(lines)

    def validate(self, path: str) -> bool:
        """Return True if the file reads without format errors."""
        try:
            self.reader.read(path)
        except FormatError as e:
            self.logger.error(f"{path} is not valid: {e}")
            return False
        self.logger.info(f"{path} is a valid iCSV file")
        return True

    def convert(self, path: str, output: str) -> Path:
        """Write the flat table of an iCSV file as plain CSV with a header row."""
        with LoggerContext(self.logger, f"converting {path}"):
            icsv = self.reader.read(path)
            df = self.converter.to_flat_table(icsv)
            df.to_csv(output, index=False)
        return Path(output)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(
        prog="icsv",
        description="Inspect, validate and convert iCSV files"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file"
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    info_parser = subparsers.add_parser("info", help="Show header and data summary")
    info_parser.add_argument("file", help="iCSV file")

    validate_parser = subparsers.add_parser("validate", help="Check a file against the format")
    validate_parser.add_argument("file", help="iCSV file")

    convert_parser = subparsers.add_parser("convert", help="Write the flat table as CSV")
    convert_parser.add_argument("file", help="iCSV file")
    convert_parser.add_argument("output", help="Output CSV path")

    args = parser.parse_args(argv)

    try:
        app = ICSVApp(config_file=args.config)
        if args.command == "info":
            print(app.info(args.file))
        elif args.command == "validate":
            return 0 if app.validate(args.file) else 1
        elif args.command == "convert":
            print(app.convert(args.file, args.output))
    except (FormatError, OSError, ValueError) as e:
        print(f"icsv failed: {e}")
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
