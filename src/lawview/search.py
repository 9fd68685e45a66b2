"""Live in-document search: debounced query, match count, circular navigation.

Matching is a case-insensitive literal substring search. The search state
does not know how text is rendered; the owner supplies a ``count_matches``
callable (the view re-renders, wraps the markers and counts them; a blank
query must count 0) and reacts to updates through ``on_update``.
"""
from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass

from lawview.scheduler import Scheduler, TimerHandle


def query_pattern(query: str) -> re.Pattern[str] | None:
    """Compiled matcher for *query*, or None for a blank query."""
    if not query.strip():
        return None
    return re.compile(re.escape(query), re.IGNORECASE)


def find_matches(text: str, query: str) -> list[tuple[int, int]]:
    """Non-overlapping (start, end) spans of *query* in *text*, ignoring case."""
    pattern = query_pattern(query)
    if pattern is None:
        return []
    return [m.span() for m in pattern.finditer(text)]


@dataclass(frozen=True, slots=True)
class SearchState:
    is_open: bool
    query: str            # what the user typed
    active_query: str     # query applied after the debounce
    match_count: int
    current_index: int

    @property
    def counter_label(self) -> str:
        if self.match_count > 0:
            return f"{self.current_index + 1} / {self.match_count}"
        return "0 / 0"


class LiveSearch:
    """Search session state for one view."""

    def __init__(
        self,
        scheduler: Scheduler,
        count_matches: Callable[[str], int],
        *,
        debounce_s: float = 0.3,
        on_update: Callable[[SearchState], None] | None = None,
    ) -> None:
        self._scheduler = scheduler
        self._count_matches = count_matches
        self._debounce_s = debounce_s
        self._on_update = on_update
        self._timer: TimerHandle | None = None
        self.is_open = False
        self.query = ""
        self.active_query = ""
        self.match_count = 0
        self.current_index = 0

    @property
    def state(self) -> SearchState:
        return SearchState(
            is_open=self.is_open,
            query=self.query,
            active_query=self.active_query,
            match_count=self.match_count,
            current_index=self.current_index,
        )

    @property
    def counter_label(self) -> str:
        return self.state.counter_label

    def _notify(self) -> None:
        if self._on_update is not None:
            self._on_update(self.state)

    def _cancel_timer(self) -> None:
        if self._timer is not None:
            self._timer.cancel()
            self._timer = None

    # -- session ----------------------------------------------------------

    def open(self) -> None:
        self.is_open = True
        self._notify()

    def close(self) -> None:
        """Close the search box; the query is cleared without debounce."""
        self.is_open = False
        self._cancel_timer()
        self.query = ""
        self._apply("")

    def cancel(self) -> None:
        """Drop any pending debounce (view teardown)."""
        self._cancel_timer()

    # -- query ------------------------------------------------------------

    def set_query(self, query: str) -> None:
        """Record a keystroke; the query applies after the debounce."""
        self.query = query
        self._cancel_timer()
        self._timer = self._scheduler.call_later(self._debounce_s, self._fire)

    def _fire(self) -> None:
        self._timer = None
        self._apply(self.query)

    def _apply(self, query: str) -> None:
        self.active_query = query
        self.match_count = self._count_matches(query)
        self.current_index = 0
        self._notify()

    # -- navigation -------------------------------------------------------

    def go_to(self, index: int) -> int:
        """Activate match *index*, wrapping circularly. Returns the new index."""
        if self.match_count == 0:
            return self.current_index
        if index >= self.match_count:
            index = 0
        elif index < 0:
            index = self.match_count - 1
        self.current_index = index
        self._notify()
        return index

    def next(self) -> int:
        return self.go_to(self.current_index + 1)

    def previous(self) -> int:
        return self.go_to(self.current_index - 1)
