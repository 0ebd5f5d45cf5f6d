"""
Convert a Green Button XML feed to CSV.

Usage:
    python -m greenbuttonlogic <feed.xml> [-o out.csv] [--metadata] [--preview [N]] [--summary]
"""

from __future__ import annotations
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional, Sequence

from . import export, ingest, summary, transform
from .config import default_options
from .exceptions import GreenButtonError

logger = logging.getLogger(__name__)


def _print_preview(rows: list, n: int) -> None:
    p = summary.preview(rows, n)
    print("\t".join(p["headers"]))
    for row in p["rows"]:
        print("\t".join("" if row[h] is None else str(row[h]) for h in p["headers"]))
    if p["is_preview"]:
        print(f"... and {p['total_rows'] - len(p['rows'])} more rows")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="greenbuttonlogic",
        description="Convert a Green Button (ESPI Atom) XML feed to CSV",
    )
    parser.add_argument("file", help="Path to Green Button XML file")
    parser.add_argument("-o", "--output", help="CSV path (default: timestamped name)")
    parser.add_argument(
        "--metadata", action="store_true", help="Prefix CSV with '#' feed metadata"
    )
    parser.add_argument(
        "--preview",
        type=int,
        nargs="?",
        const=default_options().preview_rows,
        default=0,
        metavar="N",
        help="Print the first N rows (default N: %(const)s)",
    )
    parser.add_argument(
        "--summary", action="store_true", help="Print summary statistics as JSON"
    )
    parser.add_argument("-v", "--verbose", action="count", default=0)
    return parser


def main(argv: Optional[Sequence[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    level = logging.WARNING
    if args.verbose == 1:
        level = logging.INFO
    elif args.verbose > 1:
        level = logging.DEBUG
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    path = Path(args.file)
    if path.suffix.lower() != ".xml":
        print(f"Not an XML file: {path}", file=sys.stderr)
        return 1

    try:
        doc = ingest.parse_file(path)
    except (OSError, GreenButtonError) as e:
        print(str(e), file=sys.stderr)
        return 1

    output = Path(args.output) if args.output else Path(export.default_filename())
    options = default_options()
    options.filename = output.name
    options.include_metadata_comments = args.metadata
    result = export.export_data(doc, options)
    if not result["success"]:
        print(result["error"], file=sys.stderr)
        return 1

    output.write_text(result["csv_content"], encoding="utf-8")
    logger.info("wrote %s (%d bytes)", output, result["stats"]["file_size"])

    if args.preview or args.summary:
        rows = transform.flatten(doc)
        if args.preview:
            _print_preview(rows, args.preview)
        if args.summary:
            print(json.dumps(summary.summarise(rows), indent=2))
    return 0
