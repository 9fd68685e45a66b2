"""Tests for lawview.settings module."""
from __future__ import annotations

from pathlib import Path

import orjson
import pytest

from lawview.settings import (
    ViewerSettings,
    load_settings,
    save_settings,
    settings_from_dict,
    settings_to_dict,
)


class TestViewerSettings:
    def test_defaults(self) -> None:
        s = ViewerSettings()
        assert s.search_debounce_s == 0.3
        assert s.hide_delay_s == 0.2
        assert s.flash_duration_s == 2.5
        assert (s.tooltip_width, s.tooltip_height) == (384, 300)
        assert s.emphasis_classes == ("law-article-flash",)

    @pytest.mark.parametrize(
        "kwargs",
        [
            {"search_debounce_s": -0.1},
            {"flash_duration_s": -1},
            {"tooltip_width": 0},
            {"viewport_margin": -5},
        ],
    )
    def test_validation(self, kwargs: dict[str, float]) -> None:
        with pytest.raises(ValueError):
            ViewerSettings(**kwargs)


class TestSerialization:
    def test_from_dict_ignores_unknown_and_private(self) -> None:
        s = settings_from_dict({
            "_comment": "tuned for tablets",
            "hide_delay_s": 0.5,
            "no_such_field": 1,
        })
        assert s.hide_delay_s == 0.5
        assert s == ViewerSettings(hide_delay_s=0.5)

    def test_list_becomes_tuple(self) -> None:
        s = settings_from_dict({"emphasis_classes": ["flash", "ring"]})
        assert s.emphasis_classes == ("flash", "ring")
        hash(s)

    def test_to_dict(self) -> None:
        d = settings_to_dict(ViewerSettings())
        assert d["emphasis_classes"] == ["law-article-flash"]
        assert d["loading_text"] == "加载中..."


class TestLoadSave:
    def test_default_without_path(self) -> None:
        assert load_settings() == ViewerSettings()

    def test_round_trip(self, tmp_path: Path) -> None:
        original = ViewerSettings(flash_duration_s=4.0, emphasis_classes=("a", "b"))
        path = tmp_path / "conf" / "viewer.json"
        save_settings(original, path)
        assert load_settings(path) == original

    def test_non_object_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "viewer.json"
        path.write_bytes(orjson.dumps([1, 2]))
        with pytest.raises(ValueError):
            load_settings(path)

    def test_invalid_value_rejected(self, tmp_path: Path) -> None:
        path = tmp_path / "viewer.json"
        path.write_bytes(orjson.dumps({"hide_delay_s": -1}))
        with pytest.raises(ValueError):
            load_settings(path)
