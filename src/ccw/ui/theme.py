"""Theme colors, QSS stylesheet, and display formatting for the workspace."""

from __future__ import annotations

from datetime import UTC, datetime

# ── Color palette: light theme with orange accents ──

COLORS = {
    "primary": "#E67E22",
    "primary_light": "#FFF3E0",
    "bg": "#FFFFFF",
    "panel_bg": "#FAFAFA",
    "border": "#E0E0E0",
    "text": "#1A1A1A",
    "text_muted": "#999999",
    "placeholder": "#F0A35E",
    "error": "#E74C3C",
}

FONT_FAMILY = "-apple-system, 'SF Pro Text', 'Helvetica Neue', 'Segoe UI', Roboto, sans-serif"
MONO_FAMILY = "'SF Mono', Menlo, Consolas, 'Liberation Mono', monospace"

COLLAPSED_PANEL_WIDTH = 40


def build_stylesheet() -> str:
    """Build the application-wide QSS stylesheet."""
    c = COLORS
    return f"""
QWidget {{
    font-family: {FONT_FAMILY};
    font-size: 13px;
    color: {c["text"]};
    background-color: {c["bg"]};
}}

QSplitter::handle {{
    background-color: {c["border"]};
    width: 1px;
}}

QListView {{
    border: none;
    background-color: {c["panel_bg"]};
    outline: none;
}}

QListView::item {{
    padding: 6px 10px;
    border-radius: 6px;
}}

QListView::item:selected {{
    background-color: {c["primary_light"]};
    color: {c["text"]};
    border-left: 3px solid {c["primary"]};
}}

QLineEdit {{
    border-radius: 8px;
    padding: 6px 10px;
    border: 1px solid {c["border"]};
}}

QPushButton {{
    border: 1px solid {c["border"]};
    border-radius: 6px;
    padding: 4px 10px;
    background-color: {c["bg"]};
}}

QPushButton:hover {{
    border-color: {c["primary"]};
    color: {c["primary"]};
}}
"""


def panel_header_style() -> str:
    return (
        f"font-weight: 700; font-size: 14px; padding: 10px 12px; "
        f"background-color: {COLORS['panel_bg']}; "
        f"border-bottom: 1px solid {COLORS['border']};"
    )


def format_relative_time(value: datetime | None) -> str:
    """Format a datetime as relative time (e.g. '2h ago', '3d ago')."""
    if value is None:
        return ""
    dt = value if value.tzinfo else value.replace(tzinfo=UTC)
    seconds = int((datetime.now(tz=UTC) - dt).total_seconds())
    if seconds < 60:
        return "just now"
    minutes = seconds // 60
    if minutes < 60:
        return f"{minutes}m ago"
    hours = minutes // 60
    if hours < 24:
        return f"{hours}h ago"
    days = hours // 24
    if days < 30:
        return f"{days}d ago"
    months = days // 30
    if months < 12:
        return f"{months}mo ago"
    return f"{days // 365}y ago"
