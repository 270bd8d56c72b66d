"""Panel layout codec for the settings store.

Widths are stored as decimal strings and flags as ``"true"``/``"false"``.
Reads happen once, batched; writes carry only the keys that changed.
"""

from __future__ import annotations

import json
import logging
import re

from ccw.models.layout import PanelLayout

logger = logging.getLogger(__name__)

LEFT_PANEL_COLLAPSED = "ui.leftPanel.collapsed"
RIGHT_PANEL_COLLAPSED = "ui.rightPanel.collapsed"
LEFT_PANEL_WIDTH = "ui.leftPanel.width"
RIGHT_PANEL_WIDTH = "ui.rightPanel.width"
DISCOVERED_PROJECTS_COLLAPSED = "ui.claudeProjects.collapsed"
CURRENT_PROJECT_ID = "ui.currentProject.id"
CURRENT_SESSION_ID = "ui.currentSession.id"
PROJECT_SEARCH_HISTORY = "ui.projectSearch.history"

_FIELD_KEYS = {
    "left_panel_collapsed": LEFT_PANEL_COLLAPSED,
    "right_panel_collapsed": RIGHT_PANEL_COLLAPSED,
    "left_panel_width": LEFT_PANEL_WIDTH,
    "right_panel_width": RIGHT_PANEL_WIDTH,
    "discovered_projects_collapsed": DISCOVERED_PROJECTS_COLLAPSED,
}

LAYOUT_KEYS = list(_FIELD_KEYS.values())
STARTUP_KEYS = [*LAYOUT_KEYS, CURRENT_PROJECT_ID, CURRENT_SESSION_ID, PROJECT_SEARCH_HISTORY]

MAX_SEARCH_HISTORY = 10

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def parse_layout(settings: dict[str, str]) -> PanelLayout:
    """Build a layout from raw settings, substituting defaults per key."""
    defaults = PanelLayout()
    return PanelLayout(
        left_panel_collapsed=settings.get(LEFT_PANEL_COLLAPSED) == "true",
        right_panel_collapsed=settings.get(RIGHT_PANEL_COLLAPSED) == "true",
        left_panel_width=_parse_width(settings.get(LEFT_PANEL_WIDTH), defaults.left_panel_width),
        right_panel_width=_parse_width(
            settings.get(RIGHT_PANEL_WIDTH), defaults.right_panel_width
        ),
        # Default is collapsed, so only an explicit "false" expands it.
        discovered_projects_collapsed=settings.get(DISCOVERED_PROJECTS_COLLAPSED) != "false",
    )


def encode_layout_changes(**changes: bool | int) -> dict[str, str]:
    """Settings entries for exactly the given PanelLayout fields."""
    encoded: dict[str, str] = {}
    for name, value in changes.items():
        key = _FIELD_KEYS.get(name)
        if key is None:
            msg = f"Unknown layout field: {name}"
            raise ValueError(msg)
        if isinstance(value, bool):
            encoded[key] = "true" if value else "false"
        else:
            encoded[key] = str(int(value))
    return encoded


def parse_search_history(raw: str | None) -> list[str]:
    if not raw:
        return []
    try:
        value = json.loads(raw)
    except json.JSONDecodeError:
        logger.warning("Ignoring malformed search history setting")
        return []
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str) and item.strip()][:MAX_SEARCH_HISTORY]


def push_search_history(history: list[str], query: str) -> list[str]:
    """Most recent first, distinct, capped."""
    query = query.strip()
    if not query:
        return list(history)
    rest = [item for item in history if item != query]
    return [query, *rest][:MAX_SEARCH_HISTORY]


def _parse_width(raw: str | None, default: int) -> int:
    if raw is None:
        return default
    match = _LEADING_INT.match(raw)
    if match is None:
        return default
    width = int(match.group(1))
    return width if width > 0 else default
