"""View controller for one open statute, and the per-tab view arena.

A StatuteView owns everything built for one document: the segmented tree,
the TOC, the rendered HTML, the snippet cache, the search session, and the
emphasis timers. Nothing is shared between views.

Lifecycle:
    load()    fetch raw text -> segment -> build TOC -> render; then scroll
              to the requested article (if any) with a timed emphasis
    close()   cancel timers, drop caches

The view never touches a real DOM. Scrolling is expressed as ScrollRequest
records the host drains and performs; timers go through a Scheduler.
"""
from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Literal, TypeAlias

from lawview.content_store import ContentStore
from lawview.geometry import Rect
from lawview.render import (
    RenderedDocument,
    add_classes,
    apply_search_highlights,
    article_clipboard_text,
    remove_classes,
    render_document,
    render_error_panel,
    set_active_match,
)
from lawview.scheduler import Scheduler, TimerHandle
from lawview.search import LiveSearch, SearchState
from lawview.segmenter import segment_document
from lawview.settings import ViewerSettings
from lawview.snippets import TooltipController, TooltipState
from lawview.toc import build_toc
from lawview.types import (
    CitationTarget,
    StatuteDocument,
    StatuteRef,
    TocEntry,
)

logger = logging.getLogger(__name__)

ViewStatus: TypeAlias = Literal["idle", "loading", "ready", "error", "closed"]


@dataclass(frozen=True, slots=True)
class ScrollRequest:
    """A smooth scroll the host should perform."""

    element_id: str
    block: Literal["center", "start"] = "center"
    match_index: int | None = None   # set when scrolling to a search marker


class StatuteView:
    """View-model for one open statute tab."""

    def __init__(
        self,
        ref: StatuteRef,
        store: ContentStore,
        scheduler: Scheduler,
        *,
        settings: ViewerSettings | None = None,
        on_external_citation: Callable[[CitationTarget], None] | None = None,
    ) -> None:
        self.ref = ref
        self._store = store
        self._scheduler = scheduler
        self.settings = settings or ViewerSettings()
        self._on_external_citation = on_external_citation

        self.status: ViewStatus = "idle"
        self.error_message: str | None = None
        self.document: StatuteDocument | None = None
        self.toc: list[TocEntry] = []
        self.rendered: RenderedDocument | None = None
        self.scroll_requests: list[ScrollRequest] = []

        self._emphasis: dict[str, TimerHandle] = {}
        self._load_seq = 0
        self.tooltip = TooltipController(store, ref.display_name, scheduler, self.settings)
        self.search = LiveSearch(
            scheduler,
            self._render_with_query,
            debounce_s=self.settings.search_debounce_s,
            on_update=self._on_search_update,
        )

    # -- loading ----------------------------------------------------------

    @property
    def target_label(self) -> str | None:
        """Header label ("定位至：第十条"), or None for the whole document."""
        if not self.ref.has_target:
            return None
        return f"{self.settings.target_label_prefix}{self.ref.target_article}"

    def _reset_document(self) -> None:
        self.document = None
        self.toc = []
        self.rendered = None

    async def load(self) -> ViewStatus:
        """Fetch, segment, and render the document; then apply the initial target.

        The previous document is dropped before the fetch starts. A load that
        finishes after a newer load (or close) began leaves the view alone.
        """
        self._load_seq += 1
        token = self._load_seq
        ref = self.ref
        self._reset_document()
        self.status = "loading"
        self.error_message = None
        logger.debug("loading %s", ref.source_id)
        try:
            text = await self._store.get_full_text(ref.source_id)
        except (LookupError, OSError):
            if token != self._load_seq:
                logger.debug("dropping stale load failure for %s", ref.source_id)
                return self.status
            logger.warning("failed to load %s", ref.source_id, exc_info=True)
            self.status = "error"
            self.error_message = self.settings.fetch_error_text
            return self.status

        if token != self._load_seq:
            logger.debug("dropping stale load of %s", ref.source_id)
            return self.status

        self.document = segment_document(text, ref.display_name)
        self.toc = build_toc(self.document)
        self._render_with_query(self.search.active_query)
        self.status = "ready"

        if self.ref.has_target:
            if not self.scroll_to_article(self.ref.target_article):
                logger.debug(
                    "target %s not found in %s", self.ref.target_article, self.ref.display_name,
                )
        return self.status

    async def switch_to(self, ref: StatuteRef) -> ViewStatus:
        """Replace the open document; per-document state starts fresh."""
        self._cancel_emphasis()
        self.tooltip.close()
        self.search.close()
        self.scroll_requests.clear()
        self.ref = ref
        self.tooltip = TooltipController(
            self._store, ref.display_name, self._scheduler, self.settings,
        )
        return await self.load()

    # -- rendering --------------------------------------------------------

    def _render_with_query(self, query: str) -> int:
        if self.document is None:
            return 0
        self.rendered = render_document(self.document)
        count = apply_search_highlights(self.rendered.soup, query)
        for element_id in self._emphasis:
            add_classes(self.rendered.root, element_id, self.settings.emphasis_classes)
        return count

    def html(self) -> str:
        """Current markup: error panel, empty string while loading, or the body."""
        if self.status == "error":
            return str(render_error_panel(self.error_message or self.settings.fetch_error_text))
        if self.status == "loading" or self.rendered is None:
            return ""
        return self.rendered.html()

    def drain_scroll_requests(self) -> list[ScrollRequest]:
        requests, self.scroll_requests = self.scroll_requests, []
        return requests

    # -- navigation and emphasis -------------------------------------------

    def is_emphasized(self, element_id: str) -> bool:
        return element_id in self._emphasis

    def emphasize(self, element_id: str) -> None:
        """Apply the emphasis style now and remove it after the flash duration.

        Re-emphasizing an element restarts its timer.
        """
        previous = self._emphasis.pop(element_id, None)
        if previous is not None:
            previous.cancel()
        self._emphasis[element_id] = self._scheduler.call_later(
            self.settings.flash_duration_s, lambda: self._end_emphasis(element_id),
        )
        if self.rendered is not None:
            add_classes(self.rendered.root, element_id, self.settings.emphasis_classes)

    def _end_emphasis(self, element_id: str) -> None:
        self._emphasis.pop(element_id, None)
        if self.rendered is None:
            return
        remove_classes(self.rendered.root, element_id, self.settings.emphasis_classes)

    def _cancel_emphasis(self) -> None:
        for handle in self._emphasis.values():
            handle.cancel()
        self._emphasis.clear()

    def scroll_to_article(self, label: str) -> bool:
        """Center *label* and flash it. False when the article is absent."""
        if self.document is None or self.document.find_article(label) is None:
            return False
        element_id = f"article-{label}"
        self.scroll_requests.append(ScrollRequest(element_id, "center"))
        self.emphasize(element_id)
        return True

    def navigate_to(self, element_id: str) -> None:
        """TOC navigation: scroll the header to the top, no emphasis."""
        self.scroll_requests.append(ScrollRequest(element_id, "start"))

    def copy_article(self, label: str) -> str | None:
        if self.document is None:
            return None
        article = self.document.find_article(label)
        if article is None:
            return None
        return article_clipboard_text(self.ref.display_name, article)

    # -- citations --------------------------------------------------------

    def click_citation(self, cite_id: str) -> CitationTarget | None:
        """Follow a citation anchor.

        Citations into the current document scroll and flash in place.
        Others are handed to the host callback and returned.
        """
        if self.rendered is None:
            return None
        citation = self.rendered.citations.get(cite_id)
        if citation is None:
            return None
        if citation.targets_current:
            self.scroll_to_article(citation.article_number)
            return None
        target = CitationTarget(
            law_name=citation.lookup_law_name or citation.effective_law_name or "",
            article_number=citation.article_number,
        )
        if self._on_external_citation is not None:
            self._on_external_citation(target)
        return target

    async def hover_citation(
        self,
        cite_id: str,
        anchor: Rect,
        container: Rect,
        *,
        scroll_left: float = 0.0,
        scroll_top: float = 0.0,
        viewport_height: float,
    ) -> TooltipState | None:
        if self.rendered is None:
            return None
        citation = self.rendered.citations.get(cite_id)
        if citation is None:
            return None
        return await self.tooltip.hover(
            citation,
            anchor,
            container,
            scroll_left=scroll_left,
            scroll_top=scroll_top,
            viewport_height=viewport_height,
        )

    def leave_citation(self) -> None:
        self.tooltip.leave()

    def enter_tooltip(self) -> None:
        self.tooltip.enter_tooltip()

    def leave_tooltip(self) -> None:
        self.tooltip.leave()

    # -- search -----------------------------------------------------------

    def open_search(self) -> None:
        self.search.open()

    def close_search(self) -> None:
        self.search.close()

    def set_search_query(self, query: str) -> None:
        self.search.set_query(query)

    def next_match(self) -> int:
        return self.search.next()

    def previous_match(self) -> int:
        return self.search.previous()

    def _on_search_update(self, state: SearchState) -> None:
        if self.rendered is None or state.match_count == 0:
            return
        marker = set_active_match(self.rendered.soup, state.current_index)
        if marker is None:
            return
        container = marker.find_parent(id=True)
        element_id = str(container["id"]) if container is not None else ""
        self.scroll_requests.append(
            ScrollRequest(element_id, "center", match_index=state.current_index)
        )

    # -- teardown ---------------------------------------------------------

    def close(self) -> None:
        self._load_seq += 1
        self._cancel_emphasis()
        self.search.cancel()
        self.tooltip.close()
        self.scroll_requests.clear()
        self.status = "closed"


class ViewRegistry:
    """One StatuteView per open tab, keyed by tab id."""

    def __init__(
        self,
        store: ContentStore,
        scheduler: Scheduler,
        *,
        settings: ViewerSettings | None = None,
        on_external_citation: Callable[[CitationTarget], None] | None = None,
    ) -> None:
        self._store = store
        self._scheduler = scheduler
        self._settings = settings or ViewerSettings()
        self._on_external_citation = on_external_citation
        self._views: dict[str, StatuteView] = {}

    async def open(self, tab_id: str, ref: StatuteRef) -> StatuteView:
        """Open *ref* in *tab_id*, reusing the tab's view if it exists."""
        view = self._views.get(tab_id)
        if view is not None:
            await view.switch_to(ref)
            return view
        view = StatuteView(
            ref,
            self._store,
            self._scheduler,
            settings=self._settings,
            on_external_citation=self._on_external_citation,
        )
        self._views[tab_id] = view
        await view.load()
        return view

    def get(self, tab_id: str) -> StatuteView | None:
        return self._views.get(tab_id)

    def close(self, tab_id: str) -> bool:
        view = self._views.pop(tab_id, None)
        if view is None:
            return False
        view.close()
        return True

    def close_all(self) -> None:
        for tab_id in list(self._views):
            self.close(tab_id)

    @property
    def tab_ids(self) -> list[str]:
        return list(self._views)

    def __len__(self) -> int:
        return len(self._views)
