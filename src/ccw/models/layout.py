"""Persisted panel layout."""

from __future__ import annotations

from pydantic import BaseModel

DEFAULT_PANEL_WIDTH = 300


class PanelLayout(BaseModel):
    """Collapse flags and widths of the workspace side panels."""

    left_panel_collapsed: bool = False
    right_panel_collapsed: bool = False
    left_panel_width: int = DEFAULT_PANEL_WIDTH
    right_panel_width: int = DEFAULT_PANEL_WIDTH
    discovered_projects_collapsed: bool = True
