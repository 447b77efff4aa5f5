"""CLI entrypoint for scanvault."""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from scanvault import __version__
from scanvault.cli.handlers import (
    handle_scan,
    handle_scan_path,
    handle_validate_config,
    preflight,
    print_report,
)
from scanvault.constants.branding import CLI_DESCRIPTION
from scanvault.exceptions import ConfigError, ScanvaultError
from scanvault.exceptions.validation import format_errors


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError(f"expected a positive integer, got {value!r}")
    return number


def _add_common_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "-r",
        "--root",
        type=Path,
        default=Path("."),
        help="Directory holding scanvault.yaml and relative paths (default: current directory)",
    )
    parser.add_argument("-c", "--config", type=Path, help="Explicit config file")


def _add_output_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-o", "--output-dir", type=Path, required=True, help="Directory for raw results and scan record")
    parser.add_argument("--no-stdout", action="store_true", help="Silence stdout output")
    parser.add_argument("--no-color", action="store_true", help="Disable colored output")
    parser.add_argument("-v", "--verbose", action="store_true", help="Always show cache statistics")


def build_parser() -> argparse.ArgumentParser:
    """Build top-level CLI parser."""
    parser = argparse.ArgumentParser(
        prog="scanvault",
        description=CLI_DESCRIPTION,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("--debug", action="store_true", help="Enable debug logging")
    verbosity.add_argument("--quiet", action="store_true", help="Only log warnings and errors")
    subparsers = parser.add_subparsers(dest="command", required=True)

    scan = subparsers.add_parser("scan", help="Scan third-party packages, reusing stored results")
    scan.add_argument("-p", "--packages", type=Path, required=True, help="YAML or JSON package descriptor file")
    _add_common_arguments(scan)
    _add_output_arguments(scan)
    scan.add_argument("-n", "--no-cache", action="store_true", help="Disable result store reads/writes")
    scan.add_argument(
        "-j",
        "--max-workers",
        type=_positive_int,
        default=None,
        help="Number of packages scanned in parallel (overrides max_workers from config)",
    )

    scan_path = subparsers.add_parser("scan-path", help="Scan a local file or directory without the result store")
    scan_path.add_argument("-i", "--input", type=Path, required=True, help="File or directory to scan")
    _add_common_arguments(scan_path)
    _add_output_arguments(scan_path)

    validate = subparsers.add_parser("validate-config", help="Validate configuration without scanning")
    _add_common_arguments(validate)

    return parser


def main(argv: list[str] | None = None) -> int:
    """CLI entrypoint."""
    parser = build_parser()
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.debug else logging.WARNING if args.quiet else logging.INFO
    logging.basicConfig(level=level, format="%(levelname)s %(message)s")

    if args.command == "validate-config":
        return handle_validate_config(args)

    validation_errors = preflight(args)
    if validation_errors:
        print(format_errors(validation_errors), file=sys.stderr)
        return 2

    handler = handle_scan if args.command == "scan" else handle_scan_path
    try:
        record = handler(args)
    except ConfigError as exc:
        print(f"Configuration error: {exc}", file=sys.stderr)
        return 2
    except ScanvaultError as exc:
        print(f"Scanner error: {exc}", file=sys.stderr)
        return 1

    print_report(record, args)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
