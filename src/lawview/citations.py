"""Citation extraction and law-name resolution within a paragraph.

Grammar (left-to-right, non-overlapping):

    [law-name group] 第<numerals>条[之<numerals>]

where the optional law-name group is one of
    - a bracket-quoted title        《中华人民共和国民法典》
    - the self-reference marker     本法
    - a run of 2-25 CJK characters ending in 法 ("刑法" counts), not
      immediately preceded by an exclusion word (依照, 根据, ...) and never
      starting on an article label, so an earlier citation is not swallowed.

Each match is resolved in order:
    1. Clean the raw group (lawname.resolve_law_name_context).
    2. Inherit the previous citation's law name when this one names none
       and only separator punctuation (、，,和及) sits between the two.
    3. Decide whether the target is the current document.

Extraction never raises; text without a match yields no citations.
"""
from __future__ import annotations

import re
from typing import TypeAlias

from lawview.lawname import (
    EXCLUSION_LEXICON,
    is_self_reference,
    resolve_law_name_context,
)
from lawview.numerals import ARTICLE_LABEL_SRC
from lawview.types import Citation

ParagraphSegment: TypeAlias = str | Citation

_CJK = "\u4e00-\u9fa5"
_EXCLUDED = "|".join(EXCLUSION_LEXICON)

_LAW_RUN_SRC = rf"(?<!{_EXCLUDED})(?!{ARTICLE_LABEL_SRC})[{_CJK}]{{1,24}}法"

CITATION_RE = re.compile(
    rf"(?P<law>《[^《》]+》|本法|{_LAW_RUN_SRC})?"
    rf"(?P<article>{ARTICLE_LABEL_SRC})"
)

# Text allowed between two citations for the second to inherit the first's law.
_INHERIT_GAP_RE = re.compile(r"^[、，,和及\s]+$")


def _split_display(
    raw_law: str | None, cleaned: str | None, article: str,
) -> tuple[str, str] | None:
    """Return (prefix, display_text) when filler precedes the cleaned name."""
    if not raw_law or not cleaned or raw_law == cleaned or raw_law.startswith("《"):
        return None
    idx = raw_law.rfind(cleaned)
    if idx <= 0:
        return None
    return raw_law[:idx], cleaned + article


def extract_citations(paragraph: str, doc_name: str = "") -> list[Citation]:
    """Find and resolve every citation in *paragraph*, in text order.

    Args:
        paragraph: One paragraph of article text (no newlines expected).
        doc_name: Title of the document being read, for the self-reference
            test.
    """
    citations: list[Citation] = []
    last_context: str | None = None
    prev_end: int | None = None

    for m in CITATION_RE.finditer(paragraph):
        raw_law = m.group("law")
        article = m.group("article")
        referenced = resolve_law_name_context(raw_law)

        effective = referenced
        if referenced is None and prev_end is not None:
            gap = paragraph[prev_end:m.start()].strip()
            if _INHERIT_GAP_RE.match(gap):
                effective = last_context

        if referenced:
            last_context = referenced
        elif not effective:
            last_context = None

        split = _split_display(raw_law, referenced, article)
        prefix, display = split if split is not None else ("", m.group(0))

        citations.append(
            Citation(
                raw_match_text=m.group(0),
                raw_law_name=raw_law,
                referenced_law_name=referenced,
                article_number=article,
                effective_law_name=effective,
                char_start=m.start(),
                char_end=m.end(),
                prefix=prefix,
                display_text=display,
                targets_current=is_self_reference(effective, doc_name),
            )
        )
        prev_end = m.end()

    return citations


def split_paragraph(
    paragraph: str,
    citations: list[Citation] | None = None,
    doc_name: str = "",
) -> list[ParagraphSegment]:
    """Interleave plain text and citations for rendering.

    Filler in front of a cleaned law name ("根据" in "根据劳动法第十条") is
    emitted as its own plain-text segment directly before the citation.
    Joining the text of every segment (display_text for citations)
    reproduces *paragraph*.
    """
    if citations is None:
        citations = extract_citations(paragraph, doc_name)
    segments: list[ParagraphSegment] = []
    pos = 0
    for c in citations:
        if c.char_start > pos:
            segments.append(paragraph[pos:c.char_start])
        if c.prefix:
            segments.append(c.prefix)
        segments.append(c)
        pos = c.char_end
    if pos < len(paragraph):
        segments.append(paragraph[pos:])
    return segments
