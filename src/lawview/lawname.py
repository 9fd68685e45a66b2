"""Law-name cleaning for citation law-name groups.

A citation's optional law-name group is whatever the grammar captured in
front of "第X条": a bracket-quoted title, the marker "本法", or a greedy run
of CJK characters ending in "法". Greedy runs drag in descriptive filler
("根据劳动法", "违反道路交通安全法"), so the raw group is cleaned in three
passes before it is used as a lookup key:

    1. Bracketed titles: the last 《...》 segment wins.
    2. Strong separators: keep only what follows the verb/connective.
    3. Weak prefixes: peel single particles off the front until stable.

Every function here is total: any input string produces a result, never an
exception. The lexicons are hand-tuned; their current contents are the
reference behavior.
"""
from __future__ import annotations

import re

# ---------------------------------------------------------------------------
# Lexicons
# ---------------------------------------------------------------------------

SELF_REFERENCE_MARKERS: tuple[str, ...] = (
    "本法",
    "本实施条例",
    "本办法",
    "本规定",
    "本条例",
    "本细则",
    "本规则",
    "本办法实施细则",
    "本解释",
)

# Applied in this order; each hit keeps the text after its last occurrence.
STRONG_SEPARATORS: tuple[str, ...] = (
    "依据",
    "根据",
    "按照",
    "依照",
    "参照",
    "违反",
    "适用",
    "执行",
    "实施",
    "履行",
    "触犯",
    "属于",
    "计算",
    "包括",
    "包含",
    "以及",
)

WEAK_PREFIXES: tuple[str, ...] = (
    "关于",
    "对于",
    "与",
    "和",
    "及",
    "向",
    "对",
    "为",
    "是",
    "在",
    "的",
    "于",
    "照",
    "算",
    "含",
    "括",
    "犯",
)

# Words that may not sit immediately before a law-name run in the grammar.
EXCLUSION_LEXICON: tuple[str, ...] = (
    "依照",
    "根据",
    "违反",
    "适用",
    "参照",
    "按照",
    "执行",
    "属于",
    "计算",
    "触犯",
    "包括",
    "包含",
    "以及",
)

MIN_LAW_NAME_LEN = 2
MAX_LAW_NAME_LEN = 60

_BOOK_TITLE_RE = re.compile(r"《([^《》]+)》")


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def is_self_reference_marker(name: str) -> bool:
    """True if *name* is exactly one of the self-reference markers."""
    return name in SELF_REFERENCE_MARKERS


def is_self_reference(effective_law_name: str | None, current_doc_name: str) -> bool:
    """Decide whether a citation targets the document being read.

    True when the effective name is empty, is a self-reference marker, or
    is contained in the current document's title ("民法典" inside
    "中华人民共和国民法典").
    """
    if not effective_law_name:
        return True
    if is_self_reference_marker(effective_law_name):
        return True
    return effective_law_name in current_doc_name


# ---------------------------------------------------------------------------
# Cleaning
# ---------------------------------------------------------------------------


def _strip_strong_separators(text: str) -> str:
    for sep in STRONG_SEPARATORS:
        if sep in text:
            tail = text.rsplit(sep, 1)[1].strip()
            if tail:
                text = tail
    return text


def _strip_weak_prefixes(text: str) -> str:
    changed = True
    while changed:
        changed = False
        for prefix in WEAK_PREFIXES:
            if text.startswith(prefix):
                text = text[len(prefix):].strip()
                changed = True
                break
    return text


def resolve_law_name_context(raw: str | None) -> str | None:
    """Clean a raw law-name group into a lookup name.

    Returns None for "no usable name": empty input, a self-reference marker
    (the current document), or a cleaned result outside the 2..60 character
    window.

    >>> resolve_law_name_context("根据劳动法")
    '劳动法'
    >>> resolve_law_name_context("《民法典》")
    '民法典'
    >>> resolve_law_name_context("本法") is None
    True
    """
    if not raw:
        return None
    cleaned = raw.strip()
    if not cleaned:
        return None

    titles = _BOOK_TITLE_RE.findall(cleaned)
    if titles:
        return titles[-1]

    if is_self_reference_marker(cleaned):
        return None

    cleaned = _strip_strong_separators(cleaned)
    cleaned = _strip_weak_prefixes(cleaned)

    if not MIN_LAW_NAME_LEN <= len(cleaned) <= MAX_LAW_NAME_LEN:
        return None
    return cleaned
