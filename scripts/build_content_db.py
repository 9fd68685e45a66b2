#!/usr/bin/env python3
"""Build a DuckDB content store from plain-text statutes.

Reads every ``*.txt`` file in the input directory (law name = file stem),
stores the full text, and chunks each statute into per-article rows with
the segmenter. An optional ``_categories.json`` in the input directory maps
law names to ``{"category": ..., "region": ...}``.

Usage:
    python3 scripts/build_content_db.py \
        --input-dir statutes/ \
        --output data/content.duckdb

    # Replace an existing database:
    python3 scripts/build_content_db.py \
        --input-dir statutes/ \
        --output data/content.duckdb --force
"""
from __future__ import annotations

import argparse
import logging
import sys
import time
from collections.abc import Iterator
from pathlib import Path
from typing import Any

from lawview.content_store import StatuteRecord, write_content_db
from lawview.io_utils import dump_json, load_json

log = logging.getLogger("build_content_db")

CATEGORIES_FILE = "_categories.json"


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Build a DuckDB content store from plain-text statutes.",
    )
    parser.add_argument(
        "--input-dir",
        type=Path,
        required=True,
        help="Directory containing statute text files (*.txt)",
    )
    parser.add_argument(
        "--output",
        type=Path,
        required=True,
        help="Path to output DuckDB file",
    )
    parser.add_argument(
        "--force",
        action="store_true",
        help="Overwrite output file if it exists",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging",
    )
    return parser


def _load_categories(input_dir: Path) -> dict[str, dict[str, Any]]:
    path = input_dir / CATEGORIES_FILE
    if not path.exists():
        return {}
    payload = load_json(path)
    if not isinstance(payload, dict):
        log.warning("%s is not a JSON object; ignoring", path)
        return {}
    return {str(k): v for k, v in payload.items() if isinstance(v, dict)}


def discover_statutes(input_dir: Path) -> list[Path]:
    """Statute files under *input_dir*, sorted by name."""
    return sorted(p for p in input_dir.glob("*.txt") if p.is_file())


def iter_records(
    paths: list[Path],
    categories: dict[str, dict[str, Any]],
) -> Iterator[StatuteRecord]:
    for i, path in enumerate(paths, 1):
        law_name = path.stem
        meta = categories.get(law_name, {})
        text = path.read_text(encoding="utf-8", errors="replace")
        log.info("[%d/%d] %s (%d chars)", i, len(paths), law_name, len(text))
        yield StatuteRecord(
            law_name=law_name,
            full_text=text,
            category=str(meta.get("category", "")),
            region=str(meta.get("region", "")),
        )


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )

    if not args.input_dir.is_dir():
        print(f"Error: input directory not found: {args.input_dir}", file=sys.stderr)
        return 1
    if args.output.exists():
        if not args.force:
            print(
                f"Error: {args.output} already exists (use --force to overwrite)",
                file=sys.stderr,
            )
            return 1
        args.output.unlink()

    paths = discover_statutes(args.input_dir)
    if not paths:
        print(f"Error: no *.txt statutes in {args.input_dir}", file=sys.stderr)
        return 1

    t0 = time.time()
    counts = write_content_db(
        args.output, iter_records(paths, _load_categories(args.input_dir)),
    )
    elapsed = time.time() - t0
    log.info(
        "Wrote %d statutes / %d articles to %s in %.1fs",
        counts["statutes"], counts["chunks"], args.output, elapsed,
    )
    dump_json({
        "output": str(args.output),
        "statutes": counts["statutes"],
        "chunks": counts["chunks"],
        "elapsed_s": round(elapsed, 3),
    })
    return 0


if __name__ == "__main__":
    sys.exit(main())
