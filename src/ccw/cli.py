"""Typer CLI for CCW: launch the workspace and manage user projects."""

from __future__ import annotations

import asyncio
import logging
from pathlib import Path
from typing import TYPE_CHECKING, Annotated

import typer
from result import Err

from ccw.config import Config

if TYPE_CHECKING:
    from ccw.services.container import ServiceContainer

app = typer.Typer(
    name="ccw",
    help="Claude Code Workspace: Multi-project desktop shell for Claude Code sessions.",
    invoke_without_command=True,
)

ClaudeDirOption = Annotated[
    Path | None,
    typer.Option("--claude-dir", help="Path to Claude data directory"),
]
DataDirOption = Annotated[
    Path | None,
    typer.Option("--data-dir", help="Directory holding the workspace database"),
]


def _make_config(claude_dir: Path | None, data_dir: Path | None) -> Config:
    defaults = Config()
    return Config(
        claude_dir=claude_dir or defaults.claude_dir,
        data_dir=data_dir or defaults.data_dir,
    )


@app.callback(invoke_without_command=True)
def serve(
    ctx: typer.Context,
    claude_dir: ClaudeDirOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Start the CCW desktop application."""
    if ctx.invoked_subcommand is not None:
        return
    config = _make_config(claude_dir, data_dir)
    from ccw.ui.app import run_app

    run_app(config)


@app.command()
def projects(
    claude_dir: ClaudeDirOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """List user-registered and discovered projects."""
    config = _make_config(claude_dir, data_dir)
    if not asyncio.run(_do_list_projects(config)):
        raise typer.Exit(code=1)


@app.command()
def add(
    path: Annotated[str, typer.Argument(help="Project directory")],
    name: Annotated[str | None, typer.Option("--name", help="Display name")] = None,
    claude_dir: ClaudeDirOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Register a directory as a user project."""
    config = _make_config(claude_dir, data_dir)
    if not asyncio.run(_do_add_project(config, path, name)):
        raise typer.Exit(code=1)


@app.command()
def remove(
    project_id: Annotated[str, typer.Argument(help="Project id as shown by `ccw projects`")],
    claude_dir: ClaudeDirOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Remove a user project from the list. Files on disk are not touched."""
    config = _make_config(claude_dir, data_dir)
    if not asyncio.run(_do_remove_project(config, project_id)):
        raise typer.Exit(code=1)


@app.command()
def rename(
    project_id: Annotated[str, typer.Argument(help="Project id as shown by `ccw projects`")],
    name: Annotated[str, typer.Argument(help="New display name")],
    claude_dir: ClaudeDirOption = None,
    data_dir: DataDirOption = None,
) -> None:
    """Rename a user project."""
    config = _make_config(claude_dir, data_dir)
    if not asyncio.run(_do_rename_project(config, project_id, name)):
        raise typer.Exit(code=1)


def _configure_logging() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")


async def _do_list_projects(config: Config) -> bool:
    """Print both project groups."""
    from ccw.services.container import ServiceContainer

    _configure_logging()
    services = await ServiceContainer.create(config)
    try:
        registered = await services.registry_service.list_registered_projects()
        discovered = await services.discovery_service.list_discovered_projects()
    finally:
        await services.close()

    if isinstance(registered, Err) or isinstance(discovered, Err):
        error = registered.err_value if isinstance(registered, Err) else discovered.err_value
        typer.echo(f"Error: {error}", err=True)
        return False

    typer.echo("User Projects:")
    if not registered.ok_value:
        typer.echo("  (none)")
    for project in registered.ok_value:
        typer.echo(f"  {project.id}  {project.display_name}  {project.path}")

    typer.echo("Claude Projects:")
    if not discovered.ok_value:
        typer.echo("  (none)")
    for project in discovered.ok_value:
        typer.echo(f"  {project.id}  {project.display_name}  ({project.session_count} sessions)")
    return True


async def _do_add_project(config: Config, path: str, name: str | None) -> bool:
    """Register ``path``."""
    from ccw.services.container import ServiceContainer

    _configure_logging()
    services = await ServiceContainer.create(config)
    try:
        result = await services.registry_service.create_registered_project(path, name)
    finally:
        await services.close()

    if isinstance(result, Err):
        typer.echo(f"Error: {result.err_value}", err=True)
        return False
    project = result.ok_value
    typer.echo(f"Added {project.display_name} ({project.id})")
    return True


async def _do_remove_project(config: Config, project_id: str) -> bool:
    """Soft-remove the registered project with external id ``project_id``."""
    from ccw.services.container import ServiceContainer

    _configure_logging()
    services = await ServiceContainer.create(config)
    try:
        internal_id = await _resolve_internal_id(services, project_id)
        if internal_id is None:
            return False
        result = await services.registry_service.remove_registered_project(internal_id)
    finally:
        await services.close()

    if isinstance(result, Err):
        typer.echo(f"Error: {result.err_value}", err=True)
        return False
    typer.echo(f"Removed {project_id}")
    return True


async def _do_rename_project(config: Config, project_id: str, name: str) -> bool:
    """Give a registered project a new display name."""
    from ccw.services.container import ServiceContainer

    new_name = name.strip()
    if not new_name:
        typer.echo("Error: Project name cannot be empty", err=True)
        return False

    _configure_logging()
    services = await ServiceContainer.create(config)
    try:
        internal_id = await _resolve_internal_id(services, project_id)
        if internal_id is None:
            return False
        result = await services.registry_service.update_registered_project(
            internal_id, name=new_name
        )
    finally:
        await services.close()

    if isinstance(result, Err):
        typer.echo(f"Error: {result.err_value}", err=True)
        return False
    typer.echo(f"Renamed {project_id} to {new_name}")
    return True


async def _resolve_internal_id(services: ServiceContainer, project_id: str) -> int | None:
    result = await services.registry_service.list_registered_projects()
    if isinstance(result, Err):
        typer.echo(f"Error: {result.err_value}", err=True)
        return None
    for project in result.ok_value:
        if project.id == project_id and project.internal_id is not None:
            return project.internal_id
    typer.echo(f"Error: No user project with id {project_id}", err=True)
    return None
