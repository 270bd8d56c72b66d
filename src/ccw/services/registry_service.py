"""Registry service: CRUD over user-registered projects."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

from result import Err, Ok, Result

from ccw.data.discovery import encode_project_path
from ccw.data.repositories import UserProjectRepository
from ccw.models.projects import Project, ProjectOrigin, project_name_from_path
from ccw.services._row_helpers import (
    row_datetime,
    row_flag,
    row_int,
    row_optional_int,
    row_str,
)
from ccw.services.errors import ErrorKind, ServiceError, adapter_failure

if TYPE_CHECKING:
    from ccw.data.protocols import DatabaseProtocol

logger = logging.getLogger(__name__)

DEFAULT_PROJECT_NAME = "Unnamed Project"


class RegistryService:
    """Service for the user project registry."""

    def __init__(self, db: DatabaseProtocol) -> None:
        self._repo = UserProjectRepository(db)

    async def list_registered_projects(self) -> Result[list[Project], ServiceError]:
        """List active user projects, newest first."""
        try:
            rows = await self._repo.list_active_rows()
        except Exception as exc:
            logger.exception("Failed to list user projects")
            return Err(adapter_failure("Listing user projects", exc))
        return Ok([_row_to_project(row) for row in rows])

    async def create_registered_project(
        self, path: str, name: str | None = None
    ) -> Result[Project, ServiceError]:
        """Register a directory as a user project.

        Returns:
            Ok with the new project, or Err with DUPLICATE_PATH when an active
            record already has this exact path, or INACCESSIBLE_PATH when the
            path is missing or not a directory.
        """
        project_path = normalize_project_path(path)
        if not project_path:
            return Err(ServiceError(ErrorKind.INACCESSIBLE_PATH, "Project path cannot be empty"))
        display_name = (name or "").strip() or project_name_from_path(project_path)
        display_name = display_name or DEFAULT_PROJECT_NAME

        try:
            if await self._repo.active_path_exists(project_path):
                return Err(
                    ServiceError(ErrorKind.DUPLICATE_PATH, "Project already exists in the list")
                )

            target = Path(project_path)
            if not target.exists() or not target.is_dir():
                return Err(
                    ServiceError(
                        ErrorKind.INACCESSIBLE_PATH,
                        f"Cannot access the directory: {project_path}",
                    )
                )

            description = f"User project: {display_name}"
            previous = await self._repo.get_row_by_path(project_path)
            if previous is not None:
                project_id = row_int(dict(previous), "id")
                await self._repo.update(
                    project_id, name=display_name, description=description, is_active=True
                )
                logger.info("Reactivated user project %d at %s", project_id, project_path)
            else:
                project_id = await self._repo.create(
                    name=display_name, path=project_path, description=description
                )
                logger.info("Created user project %d at %s", project_id, project_path)

            row = await self._repo.get_row(project_id)
        except Exception as exc:
            logger.exception("Failed to create user project for %s", project_path)
            return Err(adapter_failure("Creating user project", exc))

        if row is None:
            return Err(ServiceError(ErrorKind.NOT_FOUND, f"User project {project_id} not found"))
        return Ok(_row_to_project(row))

    async def update_registered_project(
        self,
        internal_id: int,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> Result[Project, ServiceError]:
        """Rename or re-describe an active user project."""
        try:
            row = await self._repo.get_row(internal_id)
            if row is None or not row_flag(dict(row), "is_active"):
                return Err(_not_found(internal_id))
            await self._repo.update(internal_id, name=name, description=description)
            row = await self._repo.get_row(internal_id)
        except Exception as exc:
            logger.exception("Failed to update user project %d", internal_id)
            return Err(adapter_failure("Updating user project", exc))
        if row is None:
            return Err(_not_found(internal_id))
        return Ok(_row_to_project(row))

    async def remove_registered_project(self, internal_id: int) -> Result[None, ServiceError]:
        """Soft-delete a user project by its registry id."""
        try:
            row = await self._repo.get_row(internal_id)
            if row is None or not row_flag(dict(row), "is_active"):
                return Err(_not_found(internal_id))
            await self._repo.soft_delete(internal_id)
        except Exception as exc:
            logger.exception("Failed to remove user project %d", internal_id)
            return Err(adapter_failure("Removing user project", exc))
        logger.info("Removed user project %d", internal_id)
        return Ok(None)


def normalize_project_path(path: str) -> str:
    raw = path.strip()
    if not raw:
        return ""
    return str(Path(raw).expanduser().absolute())


def _not_found(internal_id: int) -> ServiceError:
    return ServiceError(ErrorKind.NOT_FOUND, f"User project with ID {internal_id} not found")


def _row_to_project(row: object) -> Project:
    r: dict[str, object] = dict(row)  # type: ignore[call-overload]
    path = row_str(r, "path")
    return Project(
        id=encode_project_path(path),
        path=path,
        name=row_str(r, "name") or project_name_from_path(path) or DEFAULT_PROJECT_NAME,
        origin=ProjectOrigin.REGISTERED,
        internal_id=row_optional_int(r, "id"),
        description=row_str(r, "description"),
        created_at=row_datetime(r, "created_at"),
    )
