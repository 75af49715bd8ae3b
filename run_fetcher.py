#!/usr/bin/env python3
"""
CLI script to run instruction-driven extraction over local files.

Reads an instructions JSON file and one or more HTML/XML files, prints (or
saves) the extracted records as JSON.

The instructions file holds either a page layout
    {"block": {...}, "entity": [...], "last_page": {...}}
or a bare entity instruction list [...]. Function instructions name their
callable by import path: {"type": "function", "function": "mypkg.rules:vote_diff"}.

Usage:
    python run_fetcher.py -i instructions.json page1.html page2.html
    python run_fetcher.py -i instructions.json feed.xml --xml -o records.json
    python run_fetcher.py -i item.json product.html --single
"""

import argparse
import json
import sys
from pathlib import Path

from bs4.element import Tag
from dotenv import load_dotenv

from html_entry.config import Settings
from html_entry.entity_fetcher import EntityFetcher
from html_entry.exceptions import HtmlEntryError
from html_entry.main import HtmlEntry
from html_entry.selector_cache import SelectorCache

PAGE_KEYS = ("block", "entity", "last_page")


def load_instructions(path: Path):
    """Read instructions JSON; a bare entity list becomes a page layout."""
    data = json.loads(path.read_text(encoding="utf-8"))
    if isinstance(data, dict) and any(key in data for key in PAGE_KEYS):
        return data
    return {"entity": data}


def to_json(value):
    """json.dumps fallback: nodes are written as their markup."""
    if isinstance(value, Tag):
        return str(value)
    return repr(value)


def main(argv=None):
    # Environment first, so HTML_ENTRY_* from .env apply as defaults
    load_dotenv()

    parser = argparse.ArgumentParser(description="Extract records from HTML/XML files")
    parser.add_argument("files", nargs="+", help="HTML/XML files to process")
    parser.add_argument("--instructions", "-i", required=True, help="Instructions JSON file")
    parser.add_argument("--output", "-o", help="Output JSON file")
    parser.add_argument("--single", "-s", action="store_true",
                        help="Fetch one record per file instead of a list")
    parser.add_argument("--xml", action="store_true", help="Parse files as XML")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    args = parser.parse_args(argv)

    overrides = {}
    if args.xml:
        overrides["parser"] = "xml"
    if args.verbose:
        overrides["log_level"] = "DEBUG"
    elif not args.output:
        # Records go to stdout; keep routine logs out of them
        overrides["log_level"] = "WARNING"
    settings = Settings(**overrides)

    try:
        layout = load_instructions(Path(args.instructions))
        # One cache per run: files are independent, but block and last_page
        # selectors repeat within a file
        entry = HtmlEntry(layout, cache=SelectorCache(), settings=settings)
    except (OSError, ValueError, HtmlEntryError) as e:
        print(f"✗ Cannot load instructions: {e}", file=sys.stderr)
        return 2

    results = []

    for filepath in args.files:
        path = Path(filepath)
        print(f"Fetching: {path.name}", file=sys.stderr)

        try:
            if args.single:
                document = entry.load(path.read_bytes())
                record = EntityFetcher(entry.page_fetcher.instructions.entity).fetch(document, plenty=False)
                results.append({"file": path.name, "status": "success", "record": record})
                print(f"  ✓ 1 record", file=sys.stderr)
            else:
                records = entry.parse_file(path)
                result = {"file": path.name, "status": "success", "records": records}
                if entry.page_fetcher.instructions.last_page is not None:
                    result["last_page"] = entry.is_last_page(path.read_bytes())
                results.append(result)
                print(f"  ✓ {len(records)} records", file=sys.stderr)

        except (OSError, HtmlEntryError) as e:
            results.append({
                "file": path.name,
                "status": "error",
                "error": str(e)
            })
            print(f"  ✗ Error: {e}", file=sys.stderr)

    # ensure_ascii=False preserves unicode characters in the JSON
    output = json.dumps(results, indent=2, ensure_ascii=False, default=to_json)

    if args.output:
        Path(args.output).write_text(output, encoding="utf-8")
        print(f"\nSaved to: {args.output}", file=sys.stderr)
    else:
        print(output)
    return 0


if __name__ == "__main__":
    sys.exit(main())
