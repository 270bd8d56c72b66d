"""Pydantic models for CCW."""

from ccw.models.layout import DEFAULT_PANEL_WIDTH, PanelLayout
from ccw.models.projects import Project, ProjectListing, ProjectOrigin, project_name_from_path
from ccw.models.sessions import ConversationProps, Session, SessionStatus

__all__ = [
    "ConversationProps",
    "DEFAULT_PANEL_WIDTH",
    "PanelLayout",
    "Project",
    "ProjectListing",
    "ProjectOrigin",
    "Session",
    "SessionStatus",
    "project_name_from_path",
]
