"""Merge and filter the two project sources into one presentation list."""

from __future__ import annotations

from collections.abc import Sequence

from ccw.models.projects import Project, ProjectListing


def merge_projects(registered: Sequence[Project], discovered: Sequence[Project]) -> list[Project]:
    """Registered entries first, then discovered ones, each in source order."""
    return [*registered, *discovered]


def filter_projects(projects: Sequence[Project], query: str) -> list[Project]:
    """Case-insensitive substring match against path and id.

    Returns a new list; the input is never modified.
    """
    needle = query.strip().lower()
    if not needle:
        return list(projects)
    return [p for p in projects if needle in p.path.lower() or needle in p.id.lower()]


def build_listing(
    registered: Sequence[Project], discovered: Sequence[Project], query: str = ""
) -> ProjectListing:
    """Filter each group independently, keeping the two-group structure."""
    return ProjectListing(
        registered=filter_projects(registered, query),
        discovered=filter_projects(discovered, query),
    )


def find_project(projects: Sequence[Project], project_id: str) -> Project | None:
    """First project with ``project_id``; registered entries win a collision."""
    for project in projects:
        if project.id == project_id:
            return project
    return None
