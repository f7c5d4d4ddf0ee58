"""Command-line entry point that writes a single record."""

import argparse
import sys
from typing import Any

from core_registry_logger.exceptions import LoggerError
from core_registry_logger.levels import SeverityLevel
from core_registry_logger.logger_setup import Logger, LoggerOptions, load_options


def parse_metadata(pairs: list[str]) -> dict[str, str]:
    """Turn ``KEY=VALUE`` arguments into a metadata mapping."""
    metadata: dict[str, str] = {}
    for pair in pairs:
        key, separator, value = pair.partition("=")
        if not separator or not key:
            error_msg = f"Invalid metadata entry {pair!r}, expected KEY=VALUE"
            raise argparse.ArgumentTypeError(error_msg)
        metadata[key] = value
    return metadata


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    level_names = [level.label for level in SeverityLevel]
    parser = argparse.ArgumentParser(
        description="Write a record to a Core Registry project log",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument("message", help="Message to log")
    parser.add_argument("--config", type=str, help="Path to a JSON options file")
    parser.add_argument("--project-name", type=str, help="Project log directory name")
    parser.add_argument(
        "--log-level",
        type=str,
        choices=level_names,
        help="Minimum level written to the combined and daily logs",
    )
    parser.add_argument("--package-version", type=str, help="Version tag for each line")
    parser.add_argument(
        "--level",
        type=str,
        choices=level_names,
        default="info",
        help="Level of the written record",
    )
    parser.add_argument(
        "--meta",
        action="append",
        default=[],
        metavar="KEY=VALUE",
        help="Metadata field, may be repeated",
    )
    return parser


def build_options(args: argparse.Namespace) -> LoggerOptions:
    """Merge the options file with command-line overrides."""
    values: dict[str, Any] = {}
    if args.config:
        base = load_options(args.config)
        values.update(
            project_name=base.project_name,
            log_level=base.log_level,
            package_version=base.package_version,
            root_dir=base.root_dir,
            max_size=base.max_size,
            compress=base.compress,
            colorize=base.colorize,
        )
    overrides = {
        "project_name": args.project_name,
        "log_level": args.log_level,
        "package_version": args.package_version,
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return LoggerOptions.from_mapping(values)


def main(argv: list[str] | None = None) -> None:
    """Execute the main entry point for the logging command."""
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        metadata = parse_metadata(args.meta)
    except argparse.ArgumentTypeError as e:
        parser.error(str(e))

    try:
        options = build_options(args)
        with Logger(options) as log:
            log.emit(args.level, args.message, metadata)
    except LoggerError as e:
        sys.stderr.write(f"Logger configuration error: {e}\n")
        sys.exit(1)


if __name__ == "__main__":
    main()
