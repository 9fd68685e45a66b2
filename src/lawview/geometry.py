"""Tooltip placement geometry.

Pure arithmetic over viewport-relative rectangles: no rendering backend is
involved, so placement can be tested without a browser or window system.

Coordinates follow the DOM convention: origin at the top-left, y grows
downward, and every rectangle is relative to the viewport (as returned by
getBoundingClientRect). The returned Placement is relative to the scroll
container's content box, i.e. already offset by the container's scroll
position.
"""
from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Rect:
    """Viewport-relative rectangle."""

    left: float
    top: float
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Rect size must be non-negative, got {self.width}x{self.height}"
            )

    @property
    def right(self) -> float:
        return self.left + self.width

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass(frozen=True, slots=True)
class Size:
    width: float
    height: float

    def __post_init__(self) -> None:
        if self.width < 0 or self.height < 0:
            raise ValueError(
                f"Size must be non-negative, got {self.width}x{self.height}"
            )


@dataclass(frozen=True, slots=True)
class Placement:
    """Tooltip position inside the scroll container."""

    top: float
    left: float
    flipped: bool   # True when shown above the anchor


def place_tooltip(
    anchor: Rect,
    container: Rect,
    tooltip: Size,
    *,
    scroll_left: float = 0.0,
    scroll_top: float = 0.0,
    viewport_height: float,
    padding: float = 10.0,
    offset: float = 10.0,
    margin: float = 20.0,
) -> Placement:
    """Position a tooltip next to *anchor* inside *container*.

    Horizontal: centered on the anchor, clamped to
    ``[padding, container.width - tooltip.width - padding]``.
    Vertical: *offset* below the anchor, or *offset* above it when the
    tooltip would run past ``viewport_height - margin``.
    """
    left = anchor.left - container.left + anchor.width / 2 - tooltip.width / 2
    if left < padding:
        left = padding
    elif left + tooltip.width > container.width - padding:
        left = container.width - tooltip.width - padding
    left += scroll_left

    flipped = anchor.bottom + tooltip.height > viewport_height - margin
    if flipped:
        top = anchor.top - container.top + scroll_top - tooltip.height - offset
    else:
        top = anchor.bottom - container.top + scroll_top + offset

    return Placement(top=top, left=left, flipped=flipped)
