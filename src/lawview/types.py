"""Core types for the statute reading pipeline.

Every stage shares these records. The segmenter produces Blocks and
Articles, the TOC builder produces TocEntries, the citation extractor
produces Citations; the renderer and the view only consume them.

Type hierarchy:
  BlockKind        -- tag of a classified source line
  Block            -- one nonblank source line with its tag and line index
  Article          -- an article label plus its contiguous blocks
  StatuteDocument  -- the ordered tree of headers, preamble blocks, articles
  TocLevel         -- 1 (编), 1.5 (分编), 2 (章), 3 (节)
  TocEntry         -- one outline entry
  Citation         -- an in-text reference to an article
  CitationTarget   -- a destination handed to the host for routing
  StatuteRef       -- what the host asks the view to open

All dataclasses are frozen; line indices are 0-based positions in the raw
text split on "\\n" (blank lines still count).
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

from lawview.lawname import is_self_reference_marker

FULL_TEXT_SENTINEL = "全文"
CURRENT_DOCUMENT_KEY = "CURRENT"

BlockKind: TypeAlias = Literal[
    "part",
    "subpart",
    "chapter",
    "section",
    "article_header",
    "article_body",
    "toc_title",
    "doc_meta",
    "title",
    "preamble",
    "orphan",
]

TocLevel: TypeAlias = float  # 1 (编), 1.5 (分编), 2 (章), 3 (节)

HEADER_KINDS: frozenset[str] = frozenset({"part", "subpart", "chapter", "section"})

HEADER_LEVELS: dict[str, float] = {
    "part": 1,
    "subpart": 1.5,
    "chapter": 2,
    "section": 3,
}


# ---------------------------------------------------------------------------
# Segmentation output
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Block:
    """A classified nonblank line (trimmed)."""

    kind: BlockKind
    text: str
    line_index: int

    def __post_init__(self) -> None:
        if self.line_index < 0:
            raise ValueError(f"line_index must be >= 0, got {self.line_index}")

    @property
    def is_header(self) -> bool:
        return self.kind in HEADER_KINDS

    @property
    def element_id(self) -> str:
        """Anchor id used by the renderer and the TOC ("chapter-12")."""
        return f"{self.kind}-{self.line_index}"


@dataclass(frozen=True, slots=True)
class Article:
    """An article: header block followed by its contiguous body blocks."""

    label: str                   # "第一条", "第十条之一"
    blocks: tuple[Block, ...]    # blocks[0] is the article_header

    def __post_init__(self) -> None:
        if not self.label:
            raise ValueError("article label cannot be empty")
        if not self.blocks or self.blocks[0].kind != "article_header":
            raise ValueError(f"article {self.label} must start with its header block")

    @property
    def element_id(self) -> str:
        return f"article-{self.label}"

    @property
    def line_index(self) -> int:
        return self.blocks[0].line_index

    @property
    def header_remainder(self) -> str:
        """Header line text after the label ("为了保护..." in "第一条 为了保护...")."""
        return self.blocks[0].text[len(self.label):]

    @property
    def text(self) -> str:
        """Full article text, one source line per paragraph."""
        return "\n".join(b.text for b in self.blocks)

    @property
    def paragraphs(self) -> tuple[str, ...]:
        """Citation-bearing paragraphs: header remainder, then each body line."""
        return (self.header_remainder, *(b.text for b in self.blocks[1:]))


DocumentNode: TypeAlias = Block | Article


@dataclass(frozen=True, slots=True)
class StatuteDocument:
    """Typed tree produced by the segmenter.

    ``nodes`` is in source order: header blocks and preamble/orphan blocks
    appear directly, article blocks only inside their Article.
    """

    name: str
    nodes: tuple[DocumentNode, ...]
    first_article_line: int = -1   # -1 when the text has no article header

    @property
    def blocks(self) -> tuple[Block, ...]:
        """All blocks flattened in source order."""
        out: list[Block] = []
        for node in self.nodes:
            if isinstance(node, Article):
                out.extend(node.blocks)
            else:
                out.append(node)
        return tuple(out)

    @property
    def articles(self) -> tuple[Article, ...]:
        return tuple(n for n in self.nodes if isinstance(n, Article))

    @property
    def headers(self) -> tuple[Block, ...]:
        return tuple(
            n for n in self.nodes if isinstance(n, Block) and n.is_header
        )

    @property
    def is_empty(self) -> bool:
        return not self.nodes

    def find_article(self, label: str) -> Article | None:
        """First article carrying *label*, or None."""
        for node in self.nodes:
            if isinstance(node, Article) and node.label == label:
                return node
        return None


# ---------------------------------------------------------------------------
# Outline
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class TocEntry:
    """One entry of the pruned table of contents."""

    id: str            # element id of the header ("part-3")
    text: str
    level: TocLevel
    line_index: int


# ---------------------------------------------------------------------------
# Citations
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class Citation:
    """An in-text reference to an article, resolved against its paragraph.

    ``referenced_law_name`` is the cleaned explicit name (None when the
    match names no usable law); ``effective_law_name`` additionally
    reflects context inheritance. ``targets_current`` is the outcome of
    the self-reference test against the document being read.
    """

    raw_match_text: str            # "根据劳动法第十条"
    raw_law_name: str | None       # "根据劳动法" (grammar group, uncleaned)
    referenced_law_name: str | None
    article_number: str            # "第十条"
    effective_law_name: str | None
    char_start: int                # offsets within the paragraph
    char_end: int
    prefix: str                    # filler emitted as plain text ("根据")
    display_text: str              # anchor text ("劳动法第十条")
    targets_current: bool

    @property
    def lookup_law_name(self) -> str | None:
        """Law name sent to the Content Store (None means current document)."""
        name = self.effective_law_name
        if not name or is_self_reference_marker(name):
            return None
        return name

    @property
    def cache_key(self) -> tuple[str, str]:
        return (self.lookup_law_name or CURRENT_DOCUMENT_KEY, self.article_number)


@dataclass(frozen=True, slots=True)
class CitationTarget:
    """Destination of a citation into another statute, routed by the host."""

    law_name: str
    article_number: str


# ---------------------------------------------------------------------------
# Host request
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StatuteRef:
    """What the host asks a view to open."""

    source_id: str                       # "中华人民共和国民法典.txt"
    display_name: str                    # "中华人民共和国民法典"
    target_article: str = FULL_TEXT_SENTINEL

    @property
    def has_target(self) -> bool:
        return bool(self.target_article) and self.target_article != FULL_TEXT_SENTINEL


# ---------------------------------------------------------------------------
# Serialization
# ---------------------------------------------------------------------------


def block_to_dict(block: Block) -> dict[str, Any]:
    return {"kind": block.kind, "text": block.text, "line_index": block.line_index}


def article_to_dict(article: Article) -> dict[str, Any]:
    return {
        "label": article.label,
        "id": article.element_id,
        "line_index": article.line_index,
        "blocks": [block_to_dict(b) for b in article.blocks],
    }


def toc_entry_to_dict(entry: TocEntry) -> dict[str, Any]:
    return {
        "id": entry.id,
        "text": entry.text,
        "level": entry.level,
        "line_index": entry.line_index,
    }


def citation_to_dict(citation: Citation) -> dict[str, Any]:
    return {
        "raw_match_text": citation.raw_match_text,
        "referenced_law_name": citation.referenced_law_name,
        "article_number": citation.article_number,
        "effective_law_name": citation.effective_law_name,
        "display_text": citation.display_text,
        "targets_current": citation.targets_current,
        "char_start": citation.char_start,
        "char_end": citation.char_end,
    }


def document_to_dict(doc: StatuteDocument) -> dict[str, Any]:
    """Convert a StatuteDocument to a JSON-serializable dict."""
    nodes: list[dict[str, Any]] = []
    for node in doc.nodes:
        if isinstance(node, Article):
            nodes.append({"type": "article", **article_to_dict(node)})
        else:
            nodes.append({"type": "block", **block_to_dict(node)})
    return {
        "name": doc.name,
        "first_article_line": doc.first_article_line,
        "nodes": nodes,
    }
