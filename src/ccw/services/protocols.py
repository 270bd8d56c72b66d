"""Protocol definitions for the services the workspace orchestrator consumes."""

from __future__ import annotations

from typing import Protocol

from result import Result

from ccw.models.projects import Project
from ccw.models.sessions import Session
from ccw.services.errors import ServiceError


class DiscoveryAdapter(Protocol):
    """Read-only access to projects and sessions the engine already has."""

    async def list_discovered_projects(self) -> Result[list[Project], ServiceError]: ...

    async def list_sessions(self, project_id: str) -> Result[list[Session], ServiceError]: ...


class RegistryAdapter(Protocol):
    """CRUD over user-registered projects."""

    async def list_registered_projects(self) -> Result[list[Project], ServiceError]: ...

    async def create_registered_project(
        self, path: str, name: str | None = None
    ) -> Result[Project, ServiceError]: ...

    async def remove_registered_project(self, internal_id: int) -> Result[None, ServiceError]: ...


class SettingsAdapter(Protocol):
    """Batched read, incremental write key/value store."""

    async def get_settings(self, keys: list[str]) -> Result[dict[str, str], ServiceError]: ...

    async def set_settings(self, values: dict[str, str]) -> Result[None, ServiceError]: ...
