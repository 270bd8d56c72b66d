"""Tests for the panel layout codec and search history helpers."""

from __future__ import annotations

import json

import pytest

from ccw.models.layout import PanelLayout
from ccw.workspace import layout as keys
from ccw.workspace.layout import (
    MAX_SEARCH_HISTORY,
    encode_layout_changes,
    parse_layout,
    parse_search_history,
    push_search_history,
)


class TestParseLayout:
    def test_empty_settings_give_defaults(self) -> None:
        assert parse_layout({}) == PanelLayout(
            left_panel_collapsed=False,
            right_panel_collapsed=False,
            left_panel_width=300,
            right_panel_width=300,
            discovered_projects_collapsed=True,
        )

    def test_full_settings(self) -> None:
        layout = parse_layout(
            {
                keys.LEFT_PANEL_COLLAPSED: "true",
                keys.RIGHT_PANEL_COLLAPSED: "false",
                keys.LEFT_PANEL_WIDTH: "250",
                keys.RIGHT_PANEL_WIDTH: "420",
                keys.DISCOVERED_PROJECTS_COLLAPSED: "false",
            }
        )
        assert layout.left_panel_collapsed is True
        assert layout.right_panel_collapsed is False
        assert layout.left_panel_width == 250
        assert layout.right_panel_width == 420
        assert layout.discovered_projects_collapsed is False

    @pytest.mark.parametrize("raw", ["TRUE", "1", "yes", ""])
    def test_collapsed_flag_requires_exact_true(self, raw: str) -> None:
        assert parse_layout({keys.LEFT_PANEL_COLLAPSED: raw}).left_panel_collapsed is False

    @pytest.mark.parametrize(("raw", "expected"), [("false", False), ("no", True), ("", True)])
    def test_discovered_group_expands_only_on_false(self, raw: str, expected: bool) -> None:
        layout = parse_layout({keys.DISCOVERED_PROJECTS_COLLAPSED: raw})
        assert layout.discovered_projects_collapsed is expected

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [("320px", 320), (" 180", 180), ("abc", 300), ("", 300), ("0", 300), ("-40", 300)],
    )
    def test_width_parsing(self, raw: str, expected: int) -> None:
        assert parse_layout({keys.RIGHT_PANEL_WIDTH: raw}).right_panel_width == expected


class TestEncodeLayoutChanges:
    def test_only_given_fields(self) -> None:
        assert encode_layout_changes(left_panel_width=250) == {keys.LEFT_PANEL_WIDTH: "250"}

    def test_bools_encode_lowercase(self) -> None:
        encoded = encode_layout_changes(
            right_panel_collapsed=True, discovered_projects_collapsed=False
        )
        assert encoded == {
            keys.RIGHT_PANEL_COLLAPSED: "true",
            keys.DISCOVERED_PROJECTS_COLLAPSED: "false",
        }

    def test_encoded_values_parse_back(self) -> None:
        layout = PanelLayout(left_panel_collapsed=True, left_panel_width=222)
        encoded = encode_layout_changes(**layout.model_dump())
        assert parse_layout(encoded) == layout

    def test_unknown_field(self) -> None:
        with pytest.raises(ValueError, match="Unknown layout field"):
            encode_layout_changes(middle_panel_width=10)


class TestSearchHistory:
    def test_parse_valid(self) -> None:
        assert parse_search_history(json.dumps(["api", "web"])) == ["api", "web"]

    @pytest.mark.parametrize("raw", [None, "", "not json", '{"a": 1}'])
    def test_parse_invalid(self, raw: str | None) -> None:
        assert parse_search_history(raw) == []

    def test_parse_drops_blank_and_non_strings(self) -> None:
        assert parse_search_history(json.dumps(["a", " ", 3, "b"])) == ["a", "b"]

    def test_push_moves_to_front_without_duplicates(self) -> None:
        assert push_search_history(["a", "b", "c"], "b") == ["b", "a", "c"]

    def test_push_caps_length(self) -> None:
        history = [f"q{i}" for i in range(MAX_SEARCH_HISTORY)]
        pushed = push_search_history(history, "new")
        assert len(pushed) == MAX_SEARCH_HISTORY
        assert pushed[0] == "new"
        assert f"q{MAX_SEARCH_HISTORY - 1}" not in pushed

    def test_push_ignores_blank(self) -> None:
        history = ["a"]
        assert push_search_history(history, "  ") == ["a"]
