"""Discovery service: read-only view of projects and sessions the engine knows."""

from __future__ import annotations

import asyncio
import logging

from result import Err, Ok, Result

from ccw.config import Config
from ccw.data.discovery import (
    DiscoveredProject,
    DiscoveredSession,
    discover_projects,
    discover_sessions,
    parse_timestamp,
)
from ccw.models.projects import Project, ProjectOrigin
from ccw.models.sessions import Session, SessionStatus
from ccw.services.errors import ServiceError, adapter_failure

logger = logging.getLogger(__name__)


class DiscoveryService:
    """Service for engine-discovered projects and their session history."""

    def __init__(self, config: Config) -> None:
        self._config = config

    async def list_discovered_projects(self) -> Result[list[Project], ServiceError]:
        """List discovered projects, most recently active first."""
        try:
            discovered = await asyncio.to_thread(discover_projects, self._config)
        except Exception as exc:
            logger.exception("Failed to discover projects in %s", self._config.projects_dir)
            return Err(adapter_failure("Discovering projects", exc))
        return Ok([_to_project(project) for project in discovered])

    async def list_sessions(self, project_id: str) -> Result[list[Session], ServiceError]:
        """List the confirmed sessions recorded for a project id, newest first."""
        try:
            discovered = await asyncio.to_thread(discover_sessions, self._config, project_id)
        except Exception as exc:
            logger.exception("Failed to list sessions for %s", project_id)
            return Err(adapter_failure("Listing sessions", exc))
        return Ok([_to_session(session) for session in discovered])


def _to_project(project: DiscoveredProject) -> Project:
    return Project(
        id=project.project_id,
        path=project.project_path,
        name=project.project_name,
        origin=ProjectOrigin.DISCOVERED,
        session_count=project.session_count,
    )


def _to_session(session: DiscoveredSession) -> Session:
    preview = " ".join(session.first_prompt.split()) or None
    return Session(
        id=session.session_id,
        project_id=session.project_id,
        project_path=session.project_path,
        created_at=parse_timestamp(session.created, fallback_ms=session.mtime_ms),
        status=SessionStatus.CONFIRMED,
        first_message_preview=preview,
    )
