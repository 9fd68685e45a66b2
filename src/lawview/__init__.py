"""Statute structural parsing, citation resolution, and reading views."""

from lawview.citations import extract_citations, split_paragraph
from lawview.content_store import (
    ContentStore,
    ContentStoreError,
    DocumentNotFoundError,
    DuckDBContentStore,
    StatuteRecord,
    write_content_db,
)
from lawview.geometry import Placement, Rect, Size, place_tooltip
from lawview.lawname import is_self_reference, resolve_law_name_context
from lawview.scheduler import LoopScheduler, ManualScheduler, Scheduler
from lawview.search import LiveSearch, find_matches
from lawview.segmenter import classify_line, segment_document
from lawview.settings import ViewerSettings, load_settings
from lawview.snippets import SnippetCache, TooltipController, TooltipState
from lawview.toc import build_toc, prune_pre_body_headers
from lawview.types import (
    FULL_TEXT_SENTINEL,
    Article,
    Block,
    Citation,
    CitationTarget,
    StatuteDocument,
    StatuteRef,
    TocEntry,
)
from lawview.view import ScrollRequest, StatuteView, ViewRegistry

__all__ = [
    "FULL_TEXT_SENTINEL",
    "Article",
    "Block",
    "Citation",
    "CitationTarget",
    "ContentStore",
    "ContentStoreError",
    "DocumentNotFoundError",
    "DuckDBContentStore",
    "LiveSearch",
    "LoopScheduler",
    "ManualScheduler",
    "Placement",
    "Rect",
    "Scheduler",
    "ScrollRequest",
    "Size",
    "SnippetCache",
    "StatuteDocument",
    "StatuteRecord",
    "StatuteRef",
    "StatuteView",
    "TocEntry",
    "TooltipController",
    "TooltipState",
    "ViewRegistry",
    "ViewerSettings",
    "build_toc",
    "classify_line",
    "extract_citations",
    "find_matches",
    "is_self_reference",
    "load_settings",
    "place_tooltip",
    "prune_pre_body_headers",
    "resolve_law_name_context",
    "segment_document",
    "split_paragraph",
    "write_content_db",
]
