"""Citation hover previews: snippet cache and tooltip session control.

Every hover opens a new tooltip *session*. The snippet request started by a
hover resolves into whatever session is active when it completes: if a
newer hover or a hide has superseded it, the response is dropped (it is
still cached if it succeeded). Requests are never cancelled.

Hiding is debounced so the pointer can travel from the anchor onto the
tooltip without the tooltip closing underneath it.
"""
from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, replace
from typing import TypeAlias

from lawview.content_store import ContentStore
from lawview.geometry import Placement, Rect, Size, place_tooltip
from lawview.scheduler import Scheduler, TimerHandle
from lawview.settings import ViewerSettings
from lawview.types import Citation

logger = logging.getLogger(__name__)

SnippetKey: TypeAlias = tuple[str, str]


class SnippetCache:
    """Resolved snippet text keyed by (law name | "CURRENT", article number).

    Lives as long as one open view; only successful lookups are stored.
    """

    def __init__(self) -> None:
        self._entries: dict[SnippetKey, str] = {}

    def get(self, key: SnippetKey) -> str | None:
        return self._entries.get(key)

    def put(self, key: SnippetKey, text: str) -> None:
        self._entries[key] = text

    def clear(self) -> None:
        self._entries.clear()

    def __contains__(self, key: object) -> bool:
        return key in self._entries

    def __len__(self) -> int:
        return len(self._entries)


@dataclass(frozen=True, slots=True)
class TooltipState:
    visible: bool = False
    content: str = ""
    top: float = 0.0
    left: float = 0.0
    flipped: bool = False
    session: int = 0


class TooltipController:
    """Owns the hover tooltip of one statute view."""

    def __init__(
        self,
        store: ContentStore,
        doc_name: str,
        scheduler: Scheduler,
        settings: ViewerSettings | None = None,
    ) -> None:
        self._store = store
        self._doc_name = doc_name
        self._scheduler = scheduler
        self._settings = settings or ViewerSettings()
        self.cache = SnippetCache()
        self._state = TooltipState()
        self._hide_timer: TimerHandle | None = None
        self._inflight: dict[SnippetKey, asyncio.Future[str | None]] = {}

    @property
    def state(self) -> TooltipState:
        return self._state

    # -- placement --------------------------------------------------------

    def placement_for(
        self,
        anchor: Rect,
        container: Rect,
        *,
        scroll_left: float = 0.0,
        scroll_top: float = 0.0,
        viewport_height: float,
    ) -> Placement:
        s = self._settings
        return place_tooltip(
            anchor,
            container,
            Size(s.tooltip_width, s.tooltip_height),
            scroll_left=scroll_left,
            scroll_top=scroll_top,
            viewport_height=viewport_height,
            padding=s.tooltip_padding,
            offset=s.tooltip_offset,
            margin=s.viewport_margin,
        )

    # -- snippet lookup ---------------------------------------------------

    async def _load(self, citation: Citation) -> str | None:
        key = citation.cache_key
        try:
            text = await self._store.get_article_snippet(
                citation.lookup_law_name, citation.article_number, self._doc_name,
            )
        except Exception:
            logger.warning(
                "snippet fetch failed for %s %s", key[0], key[1], exc_info=True,
            )
            return None
        self.cache.put(key, text)
        return text

    async def fetch(self, citation: Citation) -> str | None:
        """Snippet text for *citation*, or None when the lookup failed.

        Served from the cache when possible; concurrent requests for the
        same key share one store call. Cancelling one caller leaves the
        shared call running for the others.
        """
        key = citation.cache_key
        cached = self.cache.get(key)
        if cached is not None:
            return cached
        pending = self._inflight.get(key)
        if pending is None:
            pending = asyncio.ensure_future(self._load(citation))
            self._inflight[key] = pending
            pending.add_done_callback(lambda _f: self._inflight.pop(key, None))
        return await asyncio.shield(pending)

    # -- pointer events ---------------------------------------------------

    def _cancel_hide(self) -> None:
        if self._hide_timer is not None:
            self._hide_timer.cancel()
            self._hide_timer = None

    async def hover(
        self,
        citation: Citation,
        anchor: Rect,
        container: Rect,
        *,
        scroll_left: float = 0.0,
        scroll_top: float = 0.0,
        viewport_height: float,
    ) -> TooltipState:
        """Open a tooltip for *citation* and fill it once the snippet arrives."""
        self._cancel_hide()
        placement = self.placement_for(
            anchor,
            container,
            scroll_left=scroll_left,
            scroll_top=scroll_top,
            viewport_height=viewport_height,
        )
        session = self._state.session + 1
        self._state = TooltipState(
            visible=True,
            content=self._settings.loading_text,
            top=placement.top,
            left=placement.left,
            flipped=placement.flipped,
            session=session,
        )

        text = await self.fetch(citation)
        if text is None:
            text = self._settings.snippet_failure_text

        if self._state.session != session or not self._state.visible:
            logger.debug("discarding stale snippet for %s", citation.display_text)
            return self._state
        self._state = replace(self._state, content=text)
        return self._state

    def leave(self) -> None:
        """Pointer left the anchor or the tooltip: hide after the delay."""
        self._cancel_hide()
        self._hide_timer = self._scheduler.call_later(
            self._settings.hide_delay_s, self._hide,
        )

    def enter_tooltip(self) -> None:
        """Pointer reached the tooltip: keep it open."""
        self._cancel_hide()

    def _hide(self) -> None:
        self._hide_timer = None
        self._state = replace(self._state, visible=False, session=self._state.session + 1)

    def close(self) -> None:
        """Tear down: cancel the hide timer, hide, and drop the cache."""
        self._cancel_hide()
        if self._state.visible:
            self._hide()
        self.cache.clear()
