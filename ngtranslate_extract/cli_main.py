# -*- coding: utf-8 -*-
"""
ngtranslate-extract CLI Main Module
"""

import argparse
import logging
import os
from pathlib import Path
from typing import List, Optional

from ngtranslate_extract.core.diagnostics import ExtractionReport
from ngtranslate_extract.core.extractor import Artifact, BuildResult, TranslationExtractor
from ngtranslate_extract.core.serializer import CatalogSerializer
from ngtranslate_extract.exceptions import ConfigError, SerializationError
from ngtranslate_extract.utils.config import DEFAULT_CONFIG_FILE, ConfigManager
from ngtranslate_extract.utils.encoding import read_text_safely
from ngtranslate_extract.version import VERSION

logger = logging.getLogger(__name__)

# Directories never scanned
SKIP_DIRS = frozenset({
    "node_modules", "bower_components", ".git", ".hg", ".svn",
    "dist", "build", "coverage", ".cache", "__pycache__",
})


def setup_logging(verbose: bool):
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[logging.StreamHandler()]
    )


def print_header():
    """Print the CLI header."""
    print("\n" + "="*60)
    print(f"       ngtranslate-extract v{VERSION}")
    print("       angular-translate id extraction")
    print("="*60)


def collect_files(inputs: List[str], extractor: TranslationExtractor) -> List[Path]:
    """Expand files and directories into the scannable files, sorted by path."""
    files = set()
    for entry in inputs:
        path = Path(entry)
        if path.is_file():
            files.add(path)
            continue
        if not path.is_dir():
            logger.warning(f"Path not found: {path}")
            continue
        for root, dirs, names in os.walk(path):
            dirs[:] = [d for d in dirs if d not in SKIP_DIRS]
            for name in names:
                candidate = Path(root) / name
                if extractor.kind_for(str(candidate)) is not None:
                    files.add(candidate)
    # lexical path order keeps "first seen" reproducible between builds
    return sorted(files, key=lambda p: p.as_posix())


def load_artifacts(files: List[Path], extractor: TranslationExtractor) -> List[Artifact]:
    artifacts = []
    for path in files:
        source = read_text_safely(path)
        if source is None:
            continue
        artifact = extractor.artifact(path.as_posix(), source)
        if artifact is None:
            logger.warning(f"Skipping {path}: unknown file type")
            continue
        artifacts.append(artifact)
    return artifacts


def print_result(build: BuildResult):
    for error in build.parse_errors:
        print(f"[ERROR] {error}")
    for diagnostic in build.result.diagnostics:
        print(f"[{diagnostic.severity.value.upper()}] {diagnostic.message}")

    result = build.result
    print("\n" + "="*60)
    print("FAILED" if build.failed else "SUCCESS")
    print(f"  Translations: {len(result.catalog)}")
    print(f"  Errors:       {len(result.errors) + len(build.parse_errors)}")
    print(f"  Warnings:     {len(result.warnings)}")
    print("="*60)


def run_extract_command(args) -> int:
    """Scan sources and write the translations asset."""
    config = ConfigManager(args.config or DEFAULT_CONFIG_FILE)
    try:
        config.load_config()
    except ConfigError as e:
        print(f"Error: {e}")
        return 2

    output = config.output_settings
    if args.workers is not None:
        output.workers = args.workers

    extractor = TranslationExtractor(config.markup_settings, config.script_settings, output)
    files = collect_files(args.inputs, extractor)
    if not files:
        print("Error: No HTML or JavaScript files found")
        return 2

    artifacts = load_artifacts(files, extractor)
    build = extractor.extract(artifacts)

    serializer = CatalogSerializer(output.asset_name, output.indent)
    try:
        asset = serializer.write(build.result.catalog, args.output or output.output_directory)
    except (OSError, SerializationError) as e:
        print(f"Error writing translations: {e}")
        return 2

    report_file = args.report or output.report_file
    if report_file:
        report = ExtractionReport.build(build.result.records, build.result.diagnostics,
                                        project=", ".join(args.inputs))
        report.write(report_file)

    if not args.quiet:
        print_result(build)
        print(f"Output: {asset}")
    return 1 if build.failed else 0


def run_init_config_command(args) -> int:
    """Write a config file holding the default settings."""
    config = ConfigManager(args.config or DEFAULT_CONFIG_FILE)
    if config.config_file.exists() and not args.force:
        print(f"Error: {config.config_file} already exists (use --force to overwrite)")
        return 1
    return 0 if config.save_config() else 1


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description=f"ngtranslate-extract v{VERSION}")
    subparsers = parser.add_subparsers(dest='command', help='Available commands')

    extract_parser = subparsers.add_parser('extract', help='Extract translations into translations.js')
    extract_parser.add_argument("inputs", nargs='+', help="HTML/JS files or directories to scan")
    extract_parser.add_argument("--output", "-o", help="Output directory (default from config: dist)")
    extract_parser.add_argument("--config", "-c", help="Path to JSON configuration file")
    extract_parser.add_argument("--report", help="Write a JSON extraction report to this file")
    extract_parser.add_argument("--workers", "-w", type=int, help="Number of scan threads")
    extract_parser.add_argument("--quiet", "-q", action="store_true", help="Only set the exit code")
    extract_parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")

    init_parser = subparsers.add_parser('init-config', help='Write the default configuration file')
    init_parser.add_argument("--config", "-c", help=f"Config file to create (default: {DEFAULT_CONFIG_FILE})")
    init_parser.add_argument("--force", action="store_true", help="Overwrite an existing file")
    init_parser.add_argument("--verbose", "-v", action="store_true", help="Enable verbose logging")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 2

    setup_logging(args.verbose)
    if args.command == 'init-config':
        return run_init_config_command(args)

    if not args.quiet:
        print_header()
    return run_extract_command(args)
