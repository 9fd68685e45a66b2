"""Table-of-contents builder.

Statutes often open with a printed 目录 that repeats every header before
the first article. Those pre-body copies are pruned to the chain of
headers directly enclosing the first article; everything from the first
article on is kept as-is.
"""
from __future__ import annotations

from collections.abc import Sequence

from lawview.types import HEADER_LEVELS, StatuteDocument, TocEntry

_NO_LIMIT = 100.0


def prune_pre_body_headers(headers: Sequence[TocEntry]) -> list[TocEntry]:
    """Keep the strictly-more-senior chain scanning backward from the body.

    A header survives if its level is lower (more senior) than every header
    kept after it; the scan stops once a part-level (1) header is kept.
    Returned in original order: levels [3, 2, 1, 2] prune to [1, 2].
    """
    kept: list[TocEntry] = []
    limit = _NO_LIMIT
    for entry in reversed(headers):
        if entry.level < limit:
            kept.append(entry)
            limit = entry.level
        if limit == 1:
            break
    kept.reverse()
    return kept


def build_toc(doc: StatuteDocument) -> list[TocEntry]:
    """Derive the pruned outline of *doc*.

    Without any article header every header is kept.
    """
    entries = [
        TocEntry(
            id=block.element_id,
            text=block.text,
            level=HEADER_LEVELS[block.kind],
            line_index=block.line_index,
        )
        for block in doc.headers
    ]
    if doc.first_article_line < 0:
        return entries

    pre_body = [e for e in entries if e.line_index < doc.first_article_line]
    post_body = [e for e in entries if e.line_index >= doc.first_article_line]
    return prune_pre_body_headers(pre_body) + post_body
