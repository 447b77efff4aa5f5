"""CLI subcommand handlers."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from scanvault.config import ScanvaultConfig, load_config, validate_config_file
from scanvault.exceptions.validation import ValidationError, format_errors
from scanvault.model import ScanRecord, load_packages
from scanvault.reporting import StdoutReporter, write_scan_record
from scanvault.scanner.downloader import Downloader
from scanvault.scanner.engines import create_engine
from scanvault.scanner.orchestrator import ScanPipeline, build_scan_record
from scanvault.scanner.provisioner import ScannerProvisioner
from scanvault.storage import NullStorage, ScanResultStorage, create_storage


def build_pipeline(
    config: ScanvaultConfig,
    *,
    output_dir: Path,
    no_cache: bool = False,
    max_workers: int | None = None,
) -> ScanPipeline:
    """Wire engine, store, downloader and provisioner from a resolved config."""
    engine = create_engine(config.scanner)
    storage: ScanResultStorage = NullStorage() if no_cache else create_storage(config.storage)
    return ScanPipeline(
        engine,
        storage,
        Downloader(),
        output_dir=output_dir,
        download_dir=config.download_dir,
        max_workers=max_workers or config.max_workers,
        keep_downloads=config.keep_downloads,
        provisioner=ScannerProvisioner(engine, config.bootstrap_dir),
    )


def preflight(args: argparse.Namespace) -> list[ValidationError]:
    return validate_config_file(args.root, args.config, config_explicit=args.config is not None)


def handle_validate_config(args: argparse.Namespace) -> int:
    """Run config validation and report results."""
    errors = preflight(args)
    if errors:
        print(format_errors(errors), file=sys.stderr)
        return 2

    print("Configuration is valid.")
    return 0


def handle_scan(args: argparse.Namespace) -> ScanRecord:
    """Scan every package of the descriptor file and write the scan record."""
    config = load_config(args.root, args.config)
    packages = load_packages(args.packages)
    pipeline = build_pipeline(
        config,
        output_dir=args.output_dir,
        no_cache=args.no_cache,
        max_workers=args.max_workers,
    )
    results = pipeline.scan_packages(packages)
    record = build_scan_record(results, pipeline.storage)
    write_scan_record(args.output_dir, record)
    return record


def handle_scan_path(args: argparse.Namespace) -> ScanRecord:
    """Scan a local path without any result store and write the scan record."""
    config = load_config(args.root, args.config)
    pipeline = build_pipeline(config, output_dir=args.output_dir, no_cache=True)
    record = pipeline.scan_path(args.input)
    write_scan_record(args.output_dir, record)
    return record


def print_report(record: ScanRecord, args: argparse.Namespace) -> None:
    if args.no_stdout:
        return
    use_color = not args.no_color and sys.stdout.isatty()
    print(StdoutReporter(record, color=use_color, verbose=args.verbose).render())
