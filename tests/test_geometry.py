"""Tests for lawview.geometry module."""
from __future__ import annotations

import pytest

from lawview.geometry import Rect, Size, place_tooltip

CONTAINER = Rect(0, 0, 800, 600)
TOOLTIP = Size(384, 300)


class TestHorizontalPlacement:
    def test_clamped_to_left_padding(self) -> None:
        p = place_tooltip(Rect(100, 100, 60, 20), CONTAINER, TOOLTIP, viewport_height=900)
        assert p.left == 10
        assert p.top == 130
        assert not p.flipped

    def test_clamped_to_right_edge(self) -> None:
        p = place_tooltip(Rect(700, 100, 60, 20), CONTAINER, TOOLTIP, viewport_height=900)
        assert p.left == 406

    def test_centered_on_anchor(self) -> None:
        p = place_tooltip(Rect(400, 100, 40, 20), CONTAINER, TOOLTIP, viewport_height=900)
        assert p.left == 228

    def test_custom_padding(self) -> None:
        p = place_tooltip(
            Rect(0, 100, 10, 20), CONTAINER, TOOLTIP, viewport_height=900, padding=0,
        )
        assert p.left == 0


class TestVerticalPlacement:
    def test_flips_above_near_viewport_bottom(self) -> None:
        p = place_tooltip(
            Rect(100, 700, 60, 20), CONTAINER, TOOLTIP,
            scroll_top=50, viewport_height=900,
        )
        assert p.flipped
        assert p.top == 440

    def test_boundary_does_not_flip(self) -> None:
        # bottom 580 + 300 == 880 == viewport - margin
        p = place_tooltip(Rect(100, 560, 60, 20), CONTAINER, TOOLTIP, viewport_height=900)
        assert not p.flipped
        assert p.top == 590

    def test_container_offset_and_scroll(self) -> None:
        p = place_tooltip(
            Rect(450, 300, 40, 20),
            Rect(50, 100, 800, 600),
            TOOLTIP,
            scroll_left=5,
            scroll_top=200,
            viewport_height=1000,
        )
        assert p.left == 233
        assert p.top == 430
        assert not p.flipped


class TestValidation:
    def test_negative_rect(self) -> None:
        with pytest.raises(ValueError):
            Rect(0, 0, -1, 10)

    def test_negative_size(self) -> None:
        with pytest.raises(ValueError):
            Size(10, -5)

    def test_rect_edges(self) -> None:
        r = Rect(10, 20, 30, 40)
        assert (r.right, r.bottom) == (40, 60)
