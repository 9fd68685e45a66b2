"""Stateless HTML renderer for segmented statutes.

Consumes a StatuteDocument and produces a BeautifulSoup tree. Nothing here
parses statute text: line classes come from the segmenter, citations from
the citation extractor.

Element ids match the TOC and navigation targets:
    headers   "part-3", "chapter-12" (kind + source line index)
    articles  "article-第十条"

Citation anchors are ``<a class="law-ref">`` carrying a ``data-cite-id``
that maps back to the Citation object in ``RenderedDocument.citations``.
Search markers (``<mark class="law-search-match">``) are inserted per text
node, so a match inside an anchor stays nested inside that anchor.
"""
from __future__ import annotations

from dataclasses import dataclass, field

from bs4 import BeautifulSoup
from bs4.element import NavigableString, Tag

from lawview.citations import extract_citations, split_paragraph
from lawview.search import query_pattern
from lawview.types import Article, Block, Citation, StatuteDocument

ANCHOR_CLASS = "law-ref"
MATCH_CLASS = "law-search-match"
ACTIVE_MATCH_CLASS = "law-search-match-active"

# kind -> (tag name, css class)
_BLOCK_TAGS: dict[str, tuple[str, str]] = {
    "part": ("h2", "law-part"),
    "subpart": ("h2", "law-subpart"),
    "chapter": ("h3", "law-chapter"),
    "section": ("h4", "law-section"),
    "toc_title": ("h2", "law-toc-title"),
    "doc_meta": ("div", "law-doc-meta"),
    "title": ("h1", "law-title"),
    "preamble": ("p", "law-preamble"),
    "orphan": ("p", "law-orphan"),
}


@dataclass(slots=True)
class RenderedDocument:
    """Rendered tree plus the citation behind each anchor."""

    soup: BeautifulSoup
    citations: dict[str, Citation] = field(default_factory=dict)

    @property
    def root(self) -> Tag:
        root = self.soup.find("div", class_="law-document")
        if not isinstance(root, Tag):
            raise RuntimeError("rendered tree has no law-document root")
        return root

    def html(self) -> str:
        return str(self.soup)


# ---------------------------------------------------------------------------
# Document rendering
# ---------------------------------------------------------------------------


def _render_block(soup: BeautifulSoup, block: Block) -> Tag:
    tag_name, css = _BLOCK_TAGS[block.kind]
    tag = soup.new_tag(tag_name, attrs={"id": block.element_id, "class": css})
    tag.string = block.text
    return tag


def _render_anchor(soup: BeautifulSoup, citation: Citation, cite_id: str) -> Tag:
    attrs = {
        "href": "#",
        "class": ANCHOR_CLASS,
        "data-cite-id": cite_id,
        "data-article": citation.article_number,
        "data-law": citation.lookup_law_name or "",
        "data-target": "current" if citation.targets_current else "external",
    }
    anchor = soup.new_tag("a", attrs=attrs)
    anchor.string = citation.display_text
    return anchor


def _fill_paragraph(
    soup: BeautifulSoup,
    para: Tag,
    text: str,
    doc_name: str,
    cite_prefix: str,
    registry: dict[str, Citation],
) -> None:
    citations = extract_citations(text, doc_name)
    for n, segment in enumerate(split_paragraph(text, citations)):
        if isinstance(segment, str):
            para.append(NavigableString(segment))
            continue
        cite_id = f"{cite_prefix}-{n}"
        registry[cite_id] = segment
        para.append(_render_anchor(soup, segment, cite_id))


def _render_article(
    soup: BeautifulSoup,
    article: Article,
    doc_name: str,
    registry: dict[str, Citation],
) -> Tag:
    container = soup.new_tag(
        "div",
        attrs={
            "id": article.element_id,
            "class": "law-article",
            "data-article": article.label,
        },
    )
    for idx, text in enumerate(article.paragraphs):
        para = soup.new_tag("p", attrs={"class": "law-paragraph"})
        if idx == 0:
            label = soup.new_tag("span", attrs={"class": "law-article-label"})
            label.string = article.label
            para.append(label)
        cite_prefix = f"{article.element_id}-{article.blocks[idx].line_index}"
        _fill_paragraph(soup, para, text, doc_name, cite_prefix, registry)
        container.append(para)
    return container


def render_document(doc: StatuteDocument) -> RenderedDocument:
    """Render *doc* into a fresh tree. An empty document renders an empty body."""
    soup = BeautifulSoup("", "html.parser")
    root = soup.new_tag("div", attrs={"class": "law-document", "data-law-name": doc.name})
    soup.append(root)
    rendered = RenderedDocument(soup=soup)
    for node in doc.nodes:
        if isinstance(node, Article):
            root.append(_render_article(soup, node, doc.name, rendered.citations))
        else:
            root.append(_render_block(soup, node))
    return rendered


def render_error_panel(message: str) -> BeautifulSoup:
    """Blocking error panel shown instead of the document body."""
    soup = BeautifulSoup("", "html.parser")
    panel = soup.new_tag("div", attrs={"class": "law-error", "role": "alert"})
    panel.string = message
    soup.append(panel)
    return soup


# ---------------------------------------------------------------------------
# Search markers
# ---------------------------------------------------------------------------


def _classes(tag: Tag) -> list[str]:
    value = tag.get("class")
    if value is None:
        return []
    if isinstance(value, str):
        return value.split()
    return [str(v) for v in value]


def apply_search_highlights(soup: BeautifulSoup, query: str) -> int:
    """Wrap every case-insensitive match of *query* in a marker.

    Works text node by text node, so markers never cross element
    boundaries and anchors stay intact around them. Returns the number of
    markers inserted.
    """
    pattern = query_pattern(query)
    if pattern is None:
        return 0
    count = 0
    for node in list(soup.find_all(string=True)):
        if not isinstance(node, NavigableString):
            continue
        text = str(node)
        spans = [m.span() for m in pattern.finditer(text)]
        if not spans:
            continue
        pieces: list[NavigableString | Tag] = []
        pos = 0
        for start, end in spans:
            if start > pos:
                pieces.append(NavigableString(text[pos:start]))
            mark = soup.new_tag("mark", attrs={"class": MATCH_CLASS})
            mark.string = text[start:end]
            pieces.append(mark)
            pos = end
        if pos < len(text):
            pieces.append(NavigableString(text[pos:]))
        node.replace_with(*pieces)
        count += len(spans)
    return count


def clear_search_highlights(soup: BeautifulSoup) -> None:
    """Remove all markers, merging the split text back together."""
    for mark in search_markers(soup):
        mark.unwrap()
    soup.smooth()


def search_markers(root: Tag) -> list[Tag]:
    """Markers in document order."""
    return [
        m for m in root.find_all("mark")
        if isinstance(m, Tag) and MATCH_CLASS in _classes(m)
    ]


def set_active_match(root: Tag, index: int) -> Tag | None:
    """Mark marker *index* active (and no other). Returns it, or None."""
    markers = search_markers(root)
    for marker in markers:
        marker["class"] = [c for c in _classes(marker) if c != ACTIVE_MATCH_CLASS]
    if not 0 <= index < len(markers):
        return None
    target = markers[index]
    target["class"] = [*_classes(target), ACTIVE_MATCH_CLASS]
    return target


# ---------------------------------------------------------------------------
# Emphasis and clipboard
# ---------------------------------------------------------------------------


def add_classes(root: Tag, element_id: str, classes: tuple[str, ...]) -> bool:
    """Add CSS classes to the element with *element_id*. False if absent."""
    el = root.find(id=element_id)
    if not isinstance(el, Tag):
        return False
    current = _classes(el)
    el["class"] = current + [c for c in classes if c not in current]
    return True


def article_clipboard_text(doc_name: str, article: Article) -> str:
    """Copy-to-clipboard text: "《民法典》第一条：\\n第一条 ..."."""
    return f"《{doc_name}》{article.label}：\n{article.text}"


def remove_classes(root: Tag, element_id: str, classes: tuple[str, ...]) -> bool:
    el = root.find(id=element_id)
    if not isinstance(el, Tag):
        return False
    el["class"] = [c for c in _classes(el) if c not in classes]
    return True
