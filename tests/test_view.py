"""Tests for lawview.view module (StatuteView and ViewRegistry)."""
from __future__ import annotations

import asyncio

from lawview.content_store import DocumentNotFoundError
from lawview.geometry import Rect
from lawview.scheduler import ManualScheduler
from lawview.types import CitationTarget, StatuteRef
from lawview.view import ScrollRequest, StatuteView, ViewRegistry

from conftest import SAMPLE_NAME, SAMPLE_TEXT

SOURCE_ID = f"{SAMPLE_NAME}.txt"


class FakeStore:
    def __init__(self, texts: dict[str, str] | None = None) -> None:
        self.texts = texts if texts is not None else {SOURCE_ID: SAMPLE_TEXT}
        self.broken: set[str] = set()
        self.gates: dict[str, asyncio.Event] = {}
        self.snippet_calls: list[tuple[str | None, str]] = []

    async def get_full_text(self, source_id: str) -> str:
        gate = self.gates.get(source_id)
        if gate is not None:
            await gate.wait()
        if source_id in self.broken:
            raise OSError("disk error")
        try:
            return self.texts[source_id]
        except KeyError:
            raise DocumentNotFoundError(source_id) from None

    async def get_article_snippet(
        self, law_name: str | None, article_number: str, current_law_name: str,
    ) -> str:
        self.snippet_calls.append((law_name, article_number))
        return f"{law_name or current_law_name}{article_number}"


def _ref(target: str = "全文", source_id: str = SOURCE_ID) -> StatuteRef:
    return StatuteRef(source_id=source_id, display_name=SAMPLE_NAME, target_article=target)


def _loaded(
    target: str = "全文",
    store: FakeStore | None = None,
    sched: ManualScheduler | None = None,
    targets: list[CitationTarget] | None = None,
) -> tuple[StatuteView, ManualScheduler]:
    sched = sched or ManualScheduler()
    view = StatuteView(
        _ref(target),
        store or FakeStore(),
        sched,
        on_external_citation=targets.append if targets is not None else None,
    )
    asyncio.run(view.load())
    return view, sched


def _cite_id(view: StatuteView, display_text: str) -> str:
    assert view.rendered is not None
    for cite_id, citation in view.rendered.citations.items():
        if citation.display_text == display_text:
            return cite_id
    raise AssertionError(f"no citation {display_text!r}")


class TestLoad:
    def test_ready(self) -> None:
        view, _ = _loaded()
        assert view.status == "ready"
        assert [e.id for e in view.toc] == ["chapter-5", "chapter-10"]
        assert 'id="article-第三条"' in view.html()
        assert view.drain_scroll_requests() == []

    def test_missing_document(self) -> None:
        view, _ = _loaded(store=FakeStore(texts={}))
        assert view.status == "error"
        assert view.rendered is None
        assert "加载全文失败，请稍后再试。" in view.html()

    def test_storage_failure(self) -> None:
        store = FakeStore()
        store.broken.add(SOURCE_ID)
        view, _ = _loaded(store=store)
        assert view.status == "error"
        assert 'role="alert"' in view.html()

    def test_empty_document(self) -> None:
        view, _ = _loaded(store=FakeStore(texts={SOURCE_ID: "\n\n"}))
        assert view.status == "ready"
        assert view.document is not None and view.document.is_empty
        assert view.toc == []

    def test_html_empty_before_load(self) -> None:
        view = StatuteView(_ref(), FakeStore(), ManualScheduler())
        assert view.status == "idle"
        assert view.html() == ""


class TestTargetArticle:
    def test_scroll_and_flash(self) -> None:
        view, sched = _loaded("第二条")
        assert view.drain_scroll_requests() == [ScrollRequest("article-第二条", "center")]
        assert view.is_emphasized("article-第二条")
        assert "law-article-flash" in view.html()
        sched.advance(1.0)
        assert view.is_emphasized("article-第二条")
        sched.advance(2.0)
        assert not view.is_emphasized("article-第二条")
        assert "law-article-flash" not in view.html()

    def test_full_text_sentinel(self) -> None:
        view, sched = _loaded("全文")
        assert view.target_label is None
        assert view.drain_scroll_requests() == []
        assert sched.pending == 0

    def test_target_label(self) -> None:
        view, _ = _loaded("第十条")
        assert view.target_label == "定位至：第十条"

    def test_missing_target_is_ignored(self) -> None:
        view, _ = _loaded("第十条")
        assert view.status == "ready"
        assert view.drain_scroll_requests() == []

    def test_emphasis_survives_search_rerender(self) -> None:
        view, sched = _loaded("第二条")
        view.set_search_query("本法")
        sched.advance(0.5)
        assert view.search.match_count == 3
        assert "law-article-flash" in view.html()


class TestNavigation:
    def test_navigate_to_header(self) -> None:
        view, sched = _loaded()
        view.navigate_to("chapter-10")
        assert view.drain_scroll_requests() == [ScrollRequest("chapter-10", "start")]
        assert sched.pending == 0

    def test_scroll_to_missing_article(self) -> None:
        view, _ = _loaded()
        assert not view.scroll_to_article("第九十九条")

    def test_copy_article(self) -> None:
        view, _ = _loaded()
        assert view.copy_article("第三条") == (
            "《中华人民共和国测试法》第三条：\n第三条 本法自公布之日起施行。"
        )
        assert view.copy_article("第九十九条") is None


class TestCitations:
    def test_current_document_citation_scrolls(self) -> None:
        targets: list[CitationTarget] = []
        view, _ = _loaded(targets=targets)
        assert view.click_citation(_cite_id(view, "本法第一条")) is None
        assert view.drain_scroll_requests() == [ScrollRequest("article-第一条", "center")]
        assert view.is_emphasized("article-第一条")
        assert targets == []

    def test_external_citation_routed_to_host(self) -> None:
        targets: list[CitationTarget] = []
        view, _ = _loaded(targets=targets)
        target = view.click_citation(_cite_id(view, "《中华人民共和国民法典》第十条"))
        assert target == CitationTarget("中华人民共和国民法典", "第十条")
        assert targets == [target]
        assert view.drain_scroll_requests() == []

    def test_inherited_law_name(self) -> None:
        targets: list[CitationTarget] = []
        view, _ = _loaded(targets=targets)
        view.click_citation(_cite_id(view, "第十一条"))
        assert targets == [CitationTarget("中华人民共和国民法典", "第十一条")]

    def test_cleaned_law_name(self) -> None:
        view, _ = _loaded()
        assert view.click_citation(_cite_id(view, "劳动法第十条")) == CitationTarget(
            "劳动法", "第十条",
        )

    def test_unknown_cite_id(self) -> None:
        view, _ = _loaded()
        assert view.click_citation("nope") is None

    def test_hover_uses_cache(self) -> None:
        store = FakeStore()
        view, _ = _loaded(store=store)
        cite_id = _cite_id(view, "《中华人民共和国民法典》第十条")

        async def run() -> None:
            for _ in range(2):
                state = await view.hover_citation(
                    cite_id, Rect(100, 100, 60, 20), Rect(0, 0, 800, 600),
                    viewport_height=900,
                )
                assert state is not None
                assert state.content == "中华人民共和国民法典第十条"

        asyncio.run(run())
        assert store.snippet_calls == [("中华人民共和国民法典", "第十条")]

    def test_hover_then_leave(self) -> None:
        view, sched = _loaded()
        cite_id = _cite_id(view, "本法第一条")
        asyncio.run(view.hover_citation(
            cite_id, Rect(100, 100, 60, 20), Rect(0, 0, 800, 600), viewport_height=900,
        ))
        view.leave_citation()
        view.enter_tooltip()
        sched.advance(1.0)
        assert view.tooltip.state.visible
        view.leave_tooltip()
        sched.advance(1.0)
        assert not view.tooltip.state.visible


class TestSearch:
    def test_matches_and_navigation(self) -> None:
        view, sched = _loaded()
        view.open_search()
        view.set_search_query("本法")
        sched.advance(1.0)
        assert view.search.match_count == 3
        assert view.search.counter_label == "1 / 3"
        assert view.drain_scroll_requests() == [
            ScrollRequest("article-第一条", "center", match_index=0),
        ]
        assert view.next_match() == 1
        assert view.drain_scroll_requests() == [
            ScrollRequest("article-第二条", "center", match_index=1),
        ]
        assert view.previous_match() == 0
        assert view.previous_match() == 2
        assert view.drain_scroll_requests()[-1].element_id == "article-第三条"

    def test_active_marker_inside_anchor(self) -> None:
        view, sched = _loaded()
        view.set_search_query("本法")
        sched.advance(1.0)
        view.next_match()
        assert view.rendered is not None
        active = view.rendered.root.select_one("mark.law-search-match-active")
        assert active is not None
        assert active.parent is not None and active.parent.name == "a"

    def test_close_clears_markers(self) -> None:
        view, sched = _loaded()
        view.set_search_query("本法")
        sched.advance(1.0)
        assert "<mark" in view.html()
        view.close_search()
        assert "<mark" not in view.html()
        assert view.search.counter_label == "0 / 0"


class TestReload:
    OTHER = "other.txt"

    def _store(self) -> FakeStore:
        return FakeStore({
            SOURCE_ID: SAMPLE_TEXT,
            "slow.txt": SAMPLE_TEXT,
            self.OTHER: "第一条 其他。",
        })

    def test_previous_document_cleared_while_switching(self) -> None:
        store = self._store()
        view, _ = _loaded(store=store)
        assert "article-第三条" in view.html()

        async def run() -> tuple[str, str, bool, int]:
            gate = asyncio.Event()
            store.gates[self.OTHER] = gate
            task = asyncio.create_task(view.switch_to(_ref(source_id=self.OTHER)))
            await asyncio.sleep(0)
            snapshot = (view.html(), view.status, view.document is None, len(view.toc))
            gate.set()
            await task
            return snapshot

        html, status, no_document, toc_len = asyncio.run(run())
        assert html == ""
        assert status == "loading"
        assert no_document
        assert toc_len == 0
        assert view.status == "ready"
        assert "其他" in view.html()
        assert "article-第三条" not in view.html()

    def test_older_slow_load_does_not_overwrite_newer(self) -> None:
        store = self._store()
        registry = ViewRegistry(store, ManualScheduler())

        async def run() -> StatuteView:
            await registry.open("tab", _ref())
            gate = asyncio.Event()
            store.gates["slow.txt"] = gate
            slow = asyncio.create_task(registry.open("tab", _ref(source_id="slow.txt")))
            await asyncio.sleep(0)
            view = await registry.open("tab", _ref(source_id=self.OTHER))
            gate.set()
            await slow
            return view

        view = asyncio.run(run())
        assert view.ref.source_id == self.OTHER
        assert view.status == "ready"
        assert view.document is not None
        assert [a.label for a in view.document.articles] == ["第一条"]
        assert "其他" in view.html()

    def test_close_during_load(self) -> None:
        store = self._store()
        view = StatuteView(_ref(source_id="slow.txt"), store, ManualScheduler())

        async def run() -> None:
            gate = asyncio.Event()
            store.gates["slow.txt"] = gate
            task = asyncio.create_task(view.load())
            await asyncio.sleep(0)
            view.close()
            gate.set()
            await task

        asyncio.run(run())
        assert view.status == "closed"
        assert view.document is None
        assert view.html() == ""


class TestViewRegistry:
    def test_open_and_reuse(self) -> None:
        other = "other.txt"
        store = FakeStore({SOURCE_ID: SAMPLE_TEXT, other: "第一条 其他。"})
        registry = ViewRegistry(store, ManualScheduler())

        async def run() -> None:
            first = await registry.open("tab-1", _ref())
            second = await registry.open("tab-1", _ref(source_id=other))
            assert first is second
            assert second.ref.source_id == other
            assert second.document is not None
            assert [a.label for a in second.document.articles] == ["第一条"]

        asyncio.run(run())
        assert registry.tab_ids == ["tab-1"]
        assert len(registry) == 1

    def test_views_are_independent(self) -> None:
        registry = ViewRegistry(FakeStore(), ManualScheduler())

        async def run() -> None:
            await registry.open("a", _ref())
            await registry.open("b", _ref())

        asyncio.run(run())
        a, b = registry.get("a"), registry.get("b")
        assert a is not None and b is not None and a is not b
        assert a.tooltip.cache is not b.tooltip.cache

    def test_close_cancels_timers(self) -> None:
        sched = ManualScheduler()
        registry = ViewRegistry(FakeStore(), sched)
        view = asyncio.run(registry.open("tab", _ref("第二条")))
        assert sched.pending == 1
        assert registry.close("tab")
        assert view.status == "closed"
        assert sched.pending == 0
        assert registry.get("tab") is None
        assert not registry.close("tab")

    def test_close_all(self) -> None:
        registry = ViewRegistry(FakeStore(), ManualScheduler())

        async def run() -> None:
            await registry.open("a", _ref())
            await registry.open("b", _ref())

        asyncio.run(run())
        registry.close_all()
        assert len(registry) == 0
