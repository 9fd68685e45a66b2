"""Structural segmenter for plain-text PRC statutes.

Turns a flat newline-delimited statute into a StatuteDocument: header
blocks (编/分编/章/节), preamble blocks, and Articles owning their contiguous
body lines.

Single pass over the lines:
    1. Classify each nonblank trimmed line by priority: part > subpart >
       chapter > section > article header > continuation of the open
       article > preamble sub-classification > orphan.
    2. Buffer continuation lines into the open article.
    3. Flush the buffered article on any header, on the next article
       header, and at end of input.

Preamble sub-classification only runs until the first article header has
been seen; after that, lines outside any article are orphans.

Segmentation is lossless: the emitted blocks, in order, are exactly the
nonblank trimmed input lines.
"""
from __future__ import annotations

import re

from lawview.numerals import (
    ARTICLE_HEADER_RE,
    CHAPTER_RE,
    PART_RE,
    SECTION_RE,
    SUBPART_RE,
)
from lawview.types import Article, Block, BlockKind, DocumentNode, StatuteDocument

_TOC_TITLE_RE = re.compile(r"^目\s*录$")
_BRACKETED_RE = re.compile(r"^[（(].*[）)]$")
_SENTENCE_PUNCT_RE = re.compile(r"[，。；]")

TITLE_MAX_LEN = 30

# Header patterns in priority order.
_HEADER_PATTERNS: tuple[tuple[BlockKind, re.Pattern[str]], ...] = (
    ("part", PART_RE),
    ("subpart", SUBPART_RE),
    ("chapter", CHAPTER_RE),
    ("section", SECTION_RE),
)


# ---------------------------------------------------------------------------
# Line classification
# ---------------------------------------------------------------------------


def classify_header(line: str) -> BlockKind | None:
    """Return the header kind of a trimmed line, or None."""
    for kind, pattern in _HEADER_PATTERNS:
        if pattern.match(line):
            return kind
    return None


def classify_preamble(line: str, doc_name: str = "") -> BlockKind:
    """Sub-classify a line that appears before the first article."""
    if _TOC_TITLE_RE.match(line):
        return "toc_title"
    if _BRACKETED_RE.match(line) or line.endswith("通过"):
        return "doc_meta"
    if (doc_name and line == doc_name) or (
        len(line) < TITLE_MAX_LEN and not _SENTENCE_PUNCT_RE.search(line)
    ):
        return "title"
    return "preamble"


def classify_line(
    line: str,
    *,
    in_article: bool = False,
    seen_article: bool = False,
    doc_name: str = "",
) -> BlockKind:
    """Classify one trimmed, nonblank line given the segmenter state.

    Args:
        line: The trimmed line.
        in_article: An article is currently open (continuations go to it).
        seen_article: At least one article header has appeared; preamble
            sub-classification is disabled from then on.
        doc_name: Declared document name, used to spot the title line.
    """
    header = classify_header(line)
    if header is not None:
        return header
    if ARTICLE_HEADER_RE.match(line):
        return "article_header"
    if in_article:
        return "article_body"
    if not seen_article:
        return classify_preamble(line, doc_name)
    return "orphan"


# ---------------------------------------------------------------------------
# Segmentation
# ---------------------------------------------------------------------------


def segment_document(text: str, doc_name: str = "") -> StatuteDocument:
    """Segment raw statute text into a StatuteDocument.

    Never raises on string input; empty or blank text yields an empty
    document.
    """
    nodes: list[DocumentNode] = []
    open_label: str | None = None
    buffer: list[Block] = []
    first_article_line = -1

    def flush() -> None:
        nonlocal open_label, buffer
        if open_label is not None and buffer:
            nodes.append(Article(label=open_label, blocks=tuple(buffer)))
        open_label = None
        buffer = []

    for index, raw_line in enumerate(text.split("\n")):
        line = raw_line.strip()
        if not line:
            continue

        kind = classify_line(
            line,
            in_article=open_label is not None,
            seen_article=first_article_line >= 0,
            doc_name=doc_name,
        )
        block = Block(kind=kind, text=line, line_index=index)
        article_match = ARTICLE_HEADER_RE.match(line) if kind == "article_header" else None

        if block.is_header:
            flush()
            nodes.append(block)
        elif article_match is not None:
            flush()
            open_label = article_match.group(1)
            buffer.append(block)
            if first_article_line < 0:
                first_article_line = index
        elif kind == "article_body":
            buffer.append(block)
        else:
            nodes.append(block)

    flush()
    return StatuteDocument(
        name=doc_name,
        nodes=tuple(nodes),
        first_article_line=first_article_line,
    )
