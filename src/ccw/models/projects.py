"""Project-level models."""

from __future__ import annotations

from datetime import datetime
from enum import StrEnum

from pydantic import BaseModel, Field


class ProjectOrigin(StrEnum):
    """Where a project entry came from."""

    REGISTERED = "user-registered"
    DISCOVERED = "discovered"


class Project(BaseModel):
    """A filesystem directory the user can converse about."""

    id: str
    path: str
    name: str = ""
    origin: ProjectOrigin
    internal_id: int | None = None
    session_count: int = 0
    description: str = ""
    created_at: datetime | None = None

    @property
    def key(self) -> tuple[ProjectOrigin, str]:
        """Selection identity; ids from the two origins are not unified."""
        return (self.origin, self.id)

    @property
    def display_name(self) -> str:
        return self.name or project_name_from_path(self.path) or self.id

    @property
    def is_registered(self) -> bool:
        return self.origin is ProjectOrigin.REGISTERED


class ProjectListing(BaseModel):
    """Two-group presentation list: registered entries, then discovered ones."""

    registered: list[Project] = Field(default_factory=list)
    discovered: list[Project] = Field(default_factory=list)

    @property
    def merged(self) -> list[Project]:
        return [*self.registered, *self.discovered]


def project_name_from_path(path: str) -> str:
    """Last path component, or an empty string for an empty path."""
    parts = [part for part in path.replace("\\", "/").rstrip("/").split("/") if part]
    return parts[-1] if parts else ""
