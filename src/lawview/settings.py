"""Viewer settings: timings, tooltip geometry, and user-facing strings.

Loaded from JSON. Unknown keys are ignored, ``_``-prefixed keys are treated
as private annotations and stripped, and JSON lists become tuples so the
frozen dataclass stays hashable.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, fields
from pathlib import Path
from typing import Any

from lawview.io_utils import load_json, save_json


@dataclass(frozen=True, slots=True)
class ViewerSettings:
    """Tunables for one statute view. Defaults match the desktop reader."""

    # Timers (seconds)
    search_debounce_s: float = 0.3
    hide_delay_s: float = 0.2
    flash_duration_s: float = 2.5

    # Tooltip geometry (pixels)
    tooltip_width: float = 384
    tooltip_height: float = 300
    tooltip_padding: float = 10
    tooltip_offset: float = 10
    viewport_margin: float = 20

    # Display strings
    loading_text: str = "加载中..."
    snippet_failure_text: str = "加载失败"
    fetch_error_text: str = "加载全文失败，请稍后再试。"
    target_label_prefix: str = "定位至："

    # CSS classes added to an article while it is emphasized
    emphasis_classes: tuple[str, ...] = ("law-article-flash",)

    def __post_init__(self) -> None:
        for name in ("search_debounce_s", "hide_delay_s", "flash_duration_s"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")
        for name in ("tooltip_width", "tooltip_height"):
            if getattr(self, name) <= 0:
                raise ValueError(f"{name} must be > 0, got {getattr(self, name)}")
        for name in ("tooltip_padding", "tooltip_offset", "viewport_margin"):
            if getattr(self, name) < 0:
                raise ValueError(f"{name} must be >= 0, got {getattr(self, name)}")


def _strip_private_fields(payload: dict[str, Any]) -> dict[str, Any]:
    return {
        k: v for k, v in payload.items()
        if not (isinstance(k, str) and k.startswith("_"))
    }


def settings_to_dict(s: ViewerSettings) -> dict[str, Any]:
    d = asdict(s)
    d["emphasis_classes"] = list(s.emphasis_classes)
    return d


def settings_from_dict(d: dict[str, Any]) -> ViewerSettings:
    """Create ViewerSettings from a dict (e.g., loaded from JSON)."""
    settings_fields = fields(ViewerSettings)
    valid_fields = {f.name for f in settings_fields}
    tuple_fields = {
        f.name for f in settings_fields
        if str(f.type).startswith("tuple[")
    }

    converted: dict[str, Any] = {}
    for key, val in _strip_private_fields(d).items():
        if key not in valid_fields:
            continue
        if key in tuple_fields and isinstance(val, list):
            converted[key] = tuple(str(v) for v in val)
        else:
            converted[key] = val
    return ViewerSettings(**converted)


def load_settings(path: Path | None = None) -> ViewerSettings:
    """Load settings from a JSON file; defaults when *path* is None."""
    if path is None:
        return ViewerSettings()
    payload = load_json(path)
    if not isinstance(payload, dict):
        raise ValueError(f"settings file {path} must contain a JSON object")
    return settings_from_dict(payload)


def save_settings(s: ViewerSettings, path: Path) -> None:
    save_json(settings_to_dict(s), path)
