# tools/parse_workbook.py
"""
Normalize a local workbook and print the chart payload as JSON.

Usage:
    python tools/parse_workbook.py uploads/20240301-140500_launch.xlsx
    python tools/parse_workbook.py report.xlsx --sheet-summary
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path

from services.excel import OpenPyXLFileHandler
from services.exceptions import WorkbookReadError
from services.normalizer import normalize_workbook


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Convert spreadsheet rows into chart-ready JSON.")
    parser.add_argument("path", type=Path, help="Path to an .xlsx workbook")
    parser.add_argument("--sheet-summary", action="store_true", help="Print kept-row counts per sheet instead")
    parser.add_argument("--indent", type=int, default=2)
    parser.add_argument("-v", "--verbose", action="store_true")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if not args.path.is_file():
        print(f"Not found: {args.path}", file=sys.stderr)
        return 2

    try:
        file_handler = OpenPyXLFileHandler.from_file(args.path)
    except WorkbookReadError as exc:
        print(f"Failed to parse {args.path}: {exc}", file=sys.stderr)
        return 1
    try:
        parsed = normalize_workbook(file_handler)
    finally:
        file_handler.close()

    if args.sheet_summary:
        out = parsed.sheet_counts
    else:
        out = parsed.to_payload(args.path.name)
    print(json.dumps(out, indent=args.indent, ensure_ascii=False))
    return 0


if __name__ == "__main__":
    sys.exit(main())
