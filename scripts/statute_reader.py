#!/usr/bin/env python3
"""Parse a statute and print its outline, articles, and citations as JSON.

Reads the statute from a text file or from a content store, runs the
segmenter, TOC builder, and citation extractor, and prints a JSON report
to stdout. With ``--html`` the rendered document is written as well
(search markers applied when ``--query`` is given).

Usage:
    # From a text file (law name defaults to the file stem)
    python3 scripts/statute_reader.py --file statutes/中华人民共和国民法典.txt

    # From a content store, with rendered HTML and search markers
    python3 scripts/statute_reader.py --db data/content.duckdb \
        --law 中华人民共和国民法典 --html out/民法典.html --query 合同
"""
from __future__ import annotations

import argparse
import logging
import sys
from collections import Counter
from pathlib import Path
from typing import Any

from lawview.citations import extract_citations
from lawview.content_store import (
    ContentStoreError,
    DocumentNotFoundError,
    DuckDBContentStore,
    SchemaVersionError,
    source_id_to_law_name,
)
from lawview.io_utils import dump_json
from lawview.render import apply_search_highlights, render_document
from lawview.segmenter import segment_document
from lawview.toc import build_toc
from lawview.types import StatuteDocument, citation_to_dict, toc_entry_to_dict

log = logging.getLogger("statute_reader")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Parse a statute and print its outline and citations as JSON.",
    )
    source = parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--file", type=Path, help="Statute text file")
    source.add_argument("--db", type=Path, help="Path to content.duckdb")
    parser.add_argument(
        "--law",
        default=None,
        help="Law name (or source id) to read from --db",
    )
    parser.add_argument(
        "--name",
        default=None,
        help="Document name (default: file stem or --law)",
    )
    parser.add_argument(
        "--html",
        type=Path,
        default=None,
        help="Write the rendered document to this path",
    )
    parser.add_argument(
        "--query",
        default=None,
        help="Wrap matches of this query in search markers (with --html)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Debug logging",
    )
    return parser


def build_report(doc: StatuteDocument) -> dict[str, Any]:
    """Outline JSON for a segmented document."""
    kinds = Counter(b.kind for b in doc.blocks)
    articles: list[dict[str, Any]] = []
    citations: list[dict[str, Any]] = []
    for article in doc.articles:
        article_citations = [
            c for para in article.paragraphs for c in extract_citations(para, doc.name)
        ]
        articles.append({
            "label": article.label,
            "id": article.element_id,
            "line_index": article.line_index,
            "paragraphs": len(article.paragraphs),
            "citations": len(article_citations),
        })
        citations.extend(
            {"article": article.label, **citation_to_dict(c)} for c in article_citations
        )
    return {
        "name": doc.name,
        "first_article_line": doc.first_article_line,
        "block_counts": dict(sorted(kinds.items())),
        "toc": [toc_entry_to_dict(e) for e in build_toc(doc)],
        "articles": articles,
        "citations": citations,
    }


def _read_source(args: argparse.Namespace) -> tuple[str, str]:
    """Return (document name, raw text)."""
    if args.file is not None:
        text = args.file.read_text(encoding="utf-8", errors="replace")
        return args.name or args.file.stem, text
    with DuckDBContentStore(args.db) as store:
        text = store.read_full_text(args.law)
    return args.name or source_id_to_law_name(args.law), text


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        stream=sys.stderr,
    )
    if args.db is not None and not args.law:
        parser.error("--db requires --law")
    if args.file is not None and not args.file.exists():
        print(f"Error: file not found: {args.file}", file=sys.stderr)
        return 1
    if args.db is not None and not args.db.exists():
        print(f"Error: database not found: {args.db}", file=sys.stderr)
        return 1

    try:
        name, text = _read_source(args)
    except DocumentNotFoundError:
        print(f"Error: statute not found: {args.law}", file=sys.stderr)
        return 1
    except (ContentStoreError, SchemaVersionError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    doc = segment_document(text, name)
    log.debug("segmented %s: %d nodes, %d articles", name, len(doc.nodes), len(doc.articles))
    report = build_report(doc)

    if args.html is not None:
        rendered = render_document(doc)
        matches = apply_search_highlights(rendered.soup, args.query or "")
        args.html.parent.mkdir(parents=True, exist_ok=True)
        args.html.write_text(rendered.html(), encoding="utf-8")
        report["html"] = {"path": str(args.html), "search_matches": matches}
        log.info("Wrote %s (%d search matches)", args.html, matches)

    dump_json(report)
    return 0


if __name__ == "__main__":
    sys.exit(main())
