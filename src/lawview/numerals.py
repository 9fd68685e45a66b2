"""Chinese-numeral character classes and the compiled structural patterns.

Statute labels ("第一百二十三条", "第三编", "第十条之一") are opaque strings:
nothing here converts them to integers. Ordering is always positional.

Shared by the segmenter (line classification) and the citation grammar so
that an article label recognised in a header line is spelled exactly the
same way when it is cited inside a paragraph.
"""
from __future__ import annotations

import re

# 一..十, 百, 千, 万, 零 -- the digits used by PRC statute numbering.
NUMERAL_CHARS = "一二三四五六七八九十百千万零"
_NUM = f"[{NUMERAL_CHARS}]+"

# "之一", "之二", ... appended to inserted articles (e.g. 第十条之一).
SUFFIX_RE_SRC = rf"(?:之[{NUMERAL_CHARS}]+)?"

ARTICLE_LABEL_SRC = rf"第{_NUM}条{SUFFIX_RE_SRC}"

# Header lines: the unit word is followed by whitespace (ASCII or U+3000)
# or by the end of the line, e.g. "第一编　总则", "第二章 一般规定", "第三节".
PART_RE = re.compile(rf"^第{_NUM}编(?:\s|$)")
SUBPART_RE = re.compile(rf"^第{_NUM}分编(?:\s|$)")
CHAPTER_RE = re.compile(rf"^第{_NUM}章(?:\s|$)")
SECTION_RE = re.compile(rf"^第{_NUM}节(?:\s|$)")

# Article header: label at line start, anything (or nothing) after it.
ARTICLE_HEADER_RE = re.compile(rf"^({ARTICLE_LABEL_SRC})(.*)$", re.DOTALL)

ARTICLE_LABEL_RE = re.compile(rf"^{ARTICLE_LABEL_SRC}$")


def is_article_label(label: str) -> bool:
    """Return True if *label* is a complete article label like "第十条之一"."""
    return bool(ARTICLE_LABEL_RE.match(label))
