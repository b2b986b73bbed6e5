"""
CLI interface for section extraction.

Usage:
    python -m section_extract extract data/raw/S100XXXX/PublicDoc out/income_statement.html
    python -m section_extract extract page.htm out.html --config configs/default.yaml
    python -m section_extract extract pages/ out.html --start "【貸借対照表】" --end "【損益計算書】"
    python -m section_extract locate pages/
    python -m section_extract show-config --config configs/default.yaml
"""

import argparse
import json
import logging
import sys
from typing import Optional

from .config import (
    ExtractorConfig,
    dump_config,
    load_config,
    validate_config,
)

logger = logging.getLogger(__name__)


def configure_logging(verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def build_config(args) -> ExtractorConfig:
    """Load the config file and apply command-line overrides."""
    config = load_config(args.config)

    if getattr(args, "start", None):
        config.markers.start = args.start
    if getattr(args, "end", None):
        config.markers.end = args.end
    if getattr(args, "title", None):
        config.output.title = args.title
    if getattr(args, "no_start_heading", False):
        config.output.include_start = False

    for warning in validate_config(config):
        logger.warning(f"Config warning: {warning}")

    return config


def cmd_extract(args) -> int:
    """Extract the section and write the output document."""
    from .session import extract_section

    config = build_config(args)

    print(f"\n{'='*60}")
    print("EXTRACTING SECTION")
    print(f"{'='*60}")
    print(f"Input: {args.input}")
    print(f"Output: {args.output}")
    print(f"Markers: {config.markers.start} -> {config.markers.end}")
    print(f"Config hash: {config.config_hash()}")
    print()

    result = extract_section(args.input, args.output, config)
    summary = result.summarize()

    print(f"\n{'='*60}")
    print("EXTRACTION COMPLETE" if result.success else "EXTRACTION FAILED")
    print(f"{'='*60}")
    print(f"Final state: {summary['state']}")
    print(f"Documents: {summary['documents_processed']}/{summary['documents_total']} processed")
    print(f"Fragments: {summary['fragments']} ({summary['fragment_chars']:,} chars)")
    print(f"Style rules: {summary['style_rules']}")

    if summary["warnings"]:
        print("\nWarnings:")
        for warning in summary["warnings"]:
            print(f"  - {warning}")

    if result.success:
        print(f"\nOutput: {result.output_path}")
        return 0

    print(f"\nError: {result.error}")
    return 1


def cmd_locate(args) -> int:
    """Report where the markers are found, page by page, without extracting."""
    from .errors import DocumentProcessingError, InputNotFoundError
    from .extract.inputs import resolve_documents
    from .parse.document import FilingDocument
    from .parse.locator import MarkerLocator

    config = build_config(args)
    locator = MarkerLocator(config.locator.candidate_tags)

    try:
        paths = resolve_documents(args.input, config.parsing.file_suffixes)
    except InputNotFoundError as e:
        print(f"Error: {e}")
        return 1

    rows = []
    for path in paths:
        row = {"document": path.name, "start": None, "end": None, "error": None}
        try:
            document = FilingDocument.from_file(
                path,
                parser=config.parsing.parser,
                encoding=config.parsing.encoding,
            )
        except DocumentProcessingError as e:
            row["error"] = e.reason
            rows.append(row)
            continue

        for key, marker in (("start", config.markers.start), ("end", config.markers.end)):
            elem = locator.locate(document, marker)
            if elem is not None:
                row[key] = f"<{elem.name}> node {document.node_index(elem)}"
        rows.append(row)

    if args.json:
        print(json.dumps(rows, ensure_ascii=False, indent=2))
        return 0

    print(f"{'Document':<40} {'Start':<22} {'End':<22}")
    print("-" * 86)
    for row in rows:
        if row["error"]:
            print(f"{row['document']:<40} ERROR: {row['error']}")
            continue
        print(f"{row['document']:<40} {row['start'] or '-':<22} {row['end'] or '-':<22}")
    return 0


def cmd_show_config(args) -> int:
    """Print the resolved config."""
    config = build_config(args)
    print(dump_config(config), end="")
    print(f"# hash: {config.config_hash()}")
    for warning in validate_config(config):
        print(f"# warning: {warning}")
    return 0


def _add_marker_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--config",
        help="Path to YAML config (defaults built in if omitted)",
    )
    parser.add_argument(
        "--start",
        help="Start heading text (overrides config)",
    )
    parser.add_argument(
        "--end",
        help="End heading text (overrides config)",
    )


def main(argv: Optional[list[str]] = None) -> int:
    parser = argparse.ArgumentParser(
        prog="section_extract",
        description="Extract one section from a filing split across HTML pages",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Debug logging",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Extract command
    extract_parser = subparsers.add_parser("extract", help="Extract the section to a file")
    extract_parser.add_argument("input", help="HTML file or directory of numbered pages")
    extract_parser.add_argument("output", help="Output HTML path")
    _add_marker_arguments(extract_parser)
    extract_parser.add_argument(
        "--title",
        help="Title of the output document",
    )
    extract_parser.add_argument(
        "--no-start-heading",
        action="store_true",
        help="Leave the start heading itself out of the output",
    )

    # Locate command
    locate_parser = subparsers.add_parser("locate", help="Show where markers are found")
    locate_parser.add_argument("input", help="HTML file or directory of numbered pages")
    _add_marker_arguments(locate_parser)
    locate_parser.add_argument(
        "--json",
        action="store_true",
        help="Print JSON instead of a table",
    )

    # Show-config command
    config_parser = subparsers.add_parser("show-config", help="Print the resolved config")
    config_parser.add_argument(
        "--config",
        help="Path to YAML config",
    )

    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    if args.command == "extract":
        return cmd_extract(args)
    elif args.command == "locate":
        return cmd_locate(args)
    elif args.command == "show-config":
        return cmd_show_config(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
