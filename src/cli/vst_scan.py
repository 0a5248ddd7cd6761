# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Command line entry point for scanning VST3 plugin directories."""

import argparse
import logging
import platform
import sys
from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

from vstscan.codec import DocumentCodec, DocumentError
from vstscan.discovery import DiscoveryError, PluginDiscoverer, platform_filter
from vstscan.extractor import MetadataExtractor, ModuleHost
from vstscan.hosts import ModuleInfoHost
from vstscan.scanner import ConfigurationError, ScanConfig, ScanPipeline

logger = logging.getLogger(__name__)

EXAMPLES: str = """Examples:
  vst-scan C:\\VSTPlugins
  vst-scan C:\\VSTPlugins -o scan_results.json
  vst-scan C:\\VSTPlugins -c cumulative_scan.json
"""


def configure_logging(level: int = logging.INFO) -> None:
    """Configure application logging with Rich handler.

    Args:
        level: Logging severity threshold.
    """
    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[
            RichHandler(
                console=Console(stderr=True), rich_tracebacks=True, show_path=False
            )
        ],
    )


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI parser.

    Returns:
        Configured argument parser instance.
    """
    parser = argparse.ArgumentParser(
        prog="vst-scan",
        description="Scan a directory for VST3 plugins and write a JSON report.",
        epilog=EXAMPLES,
        formatter_class=argparse.RawDescriptionHelpFormatter,
        add_help=False,
    )
    parser.add_argument("directory", nargs="?", help="Directory to scan.")
    parser.add_argument(
        "-o",
        dest="output",
        metavar="OUTPUT_FILE",
        help="Output to file (default: stdout).",
    )
    parser.add_argument(
        "-c",
        dest="cumulative",
        metavar="CUMULATIVE_FILE",
        help="Merge into an existing cumulative file.",
    )
    parser.add_argument(
        "-j",
        "--jobs",
        type=int,
        default=1,
        help="Number of plugins scanned concurrently.",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true", help="Enable debug logging."
    )
    parser.add_argument(
        "-h", "--help", action="store_true", help="Show this help message."
    )
    return parser


def run(
    argv: list[str],
    stdout: TextIO,
    stderr: TextIO,
    host: ModuleHost | None = None,
) -> int:
    """Run the scan command.

    Args:
        argv: CLI arguments.
        stdout: Standard output stream.
        stderr: Standard error stream.
        host: Module host override; defaults to :func:`build_module_host`.

    Returns:
        Exit code.
    """
    parser = build_parser()
    try:
        args = parser.parse_args(argv)
    except SystemExit:
        logger.warning(f"Argument parsing failed (argv={argv})")
        return 1
    if args.help:
        parser.print_help(file=stdout)
        return 0
    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    config = ScanConfig(
        directory=args.directory or "",
        output_path=Path(args.output) if args.output else None,
        cumulative_path=Path(args.cumulative) if args.cumulative else None,
        jobs=args.jobs,
    )
    try:
        config.validate()
    except ConfigurationError as exc:
        logger.warning(f"Invalid configuration (error={exc})")
        stderr.write(f"Error: {exc}\n")
        return 1

    pipeline = ScanPipeline(
        discoverer=PluginDiscoverer(file_filter=platform_filter(platform.system())),
        extractor=MetadataExtractor(host=host or build_module_host()),
        codec=DocumentCodec(),
    )
    try:
        summary = pipeline.run(config=config, stdout=stdout)
    except DocumentError as exc:
        logger.warning(f"Failed to load cumulative file (error={exc})")
        stderr.write(f"Error: Could not load cumulative file: {exc}\n")
        return 1
    except OSError as exc:
        logger.warning(f"Failed to write scan document (error={exc})")
        stderr.write(f"Error: Could not write output file: {exc}\n")
        return 1

    _write_errors(errors=summary.discovery_errors, stderr=stderr)
    if summary.destination != "<stdout>":
        console = Console(file=stdout, force_terminal=False, color_system="truecolor")
        console.print(
            f"Results written to: {summary.destination} "
            f"(total={summary.total} valid={summary.valid} added={summary.added})",
            markup=False,
            highlight=False,
            soft_wrap=True,
        )
    return 0


def build_module_host() -> ModuleHost:
    """Create the default module host.

    Returns:
        Host reading bundle ``moduleinfo.json`` metadata.
    """
    return ModuleInfoHost()


def _write_errors(errors: list[DiscoveryError], stderr: TextIO) -> None:
    """Write discovery errors to stderr.

    Args:
        errors: Recoverable discovery errors.
        stderr: Standard error stream.
    """
    for error in errors:
        stderr.write(f"discovery_error: {error.path}: {error.message}\n")


def main() -> None:
    """Run the CLI application and exit."""
    configure_logging()
    exit_code = run(sys.argv[1:], stdout=sys.stdout, stderr=sys.stderr)
    raise SystemExit(exit_code)


if __name__ == "__main__":
    main()
