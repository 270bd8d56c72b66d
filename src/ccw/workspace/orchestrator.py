"""Workspace orchestrator: project lists, selection, session lifecycle and layout.

The orchestrator owns all workspace state. Views read it through ``state`` and
the projection helpers and change it only through the public coroutines here.
Adapter failures never propagate: they are logged and degrade to empty lists
or default layout values.
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from typing import TypeVar

from result import Err, Ok, Result

from ccw.models.layout import PanelLayout
from ccw.models.projects import Project, ProjectListing, ProjectOrigin
from ccw.models.sessions import ConversationProps, Session, SessionStatus
from ccw.services.errors import ErrorKind, ServiceError, adapter_failure
from ccw.services.protocols import DiscoveryAdapter, RegistryAdapter, SettingsAdapter
from ccw.workspace import layout as layout_keys
from ccw.workspace.layout import (
    encode_layout_changes,
    parse_layout,
    parse_search_history,
    push_search_history,
)
from ccw.workspace.merge import build_listing, find_project, merge_projects
from ccw.workspace.sessions import (
    create_placeholder,
    is_placeholder_id,
    make_preview,
    view_key,
)

T = TypeVar("T")

logger = logging.getLogger(__name__)

ChangeListener = Callable[[], None]


@dataclass
class WorkspaceState:
    """Everything the workspace views render from."""

    registered_projects: list[Project] = field(default_factory=list)
    discovered_projects: list[Project] = field(default_factory=list)
    sessions: list[Session] = field(default_factory=list)
    current_project: Project | None = None
    current_session: Session | None = None
    layout: PanelLayout = field(default_factory=PanelLayout)
    search_query: str = ""
    search_history: list[str] = field(default_factory=list)
    loading_projects: bool = False
    loading_sessions: bool = False
    last_error: ServiceError | None = None


class WorkspaceOrchestrator:
    """Single owner of the multi-project workspace state."""

    def __init__(
        self,
        *,
        registry: RegistryAdapter,
        discovery: DiscoveryAdapter,
        settings: SettingsAdapter,
    ) -> None:
        self._registry = registry
        self._discovery = discovery
        self._settings = settings
        self._state = WorkspaceState()
        self._placeholders: dict[tuple[ProjectOrigin, str], Session] = {}
        self._listeners: list[ChangeListener] = []
        self._project_request_generation = 0
        self._session_request_generation = 0

    # ── Read accessors ──

    @property
    def state(self) -> WorkspaceState:
        return self._state

    def listing(self) -> ProjectListing:
        """The filtered two-group project list."""
        return build_listing(
            self._state.registered_projects,
            self._state.discovered_projects,
            self._state.search_query,
        )

    def merged_projects(self) -> list[Project]:
        return merge_projects(self._state.registered_projects, self._state.discovered_projects)

    def session_list(self) -> list[Session]:
        """Sessions of the current project, its placeholder (if any) first."""
        project = self._state.current_project
        if project is None:
            return []
        sessions = list(self._state.sessions)
        placeholder = self._placeholders.get(project.key)
        if placeholder is not None and all(s.id != placeholder.id for s in sessions):
            sessions.insert(0, placeholder)
        return sessions

    def placeholder_for(self, project: Project) -> Session | None:
        return self._placeholders.get(project.key)

    def view_key(self) -> str | None:
        return view_key(self._state.current_project, self._state.current_session)

    def conversation_props(self) -> ConversationProps | None:
        """Props for the conversation renderer, or None when nothing is selected."""
        project = self._state.current_project
        session = self._state.current_session
        key = view_key(project, session)
        if project is None or session is None or key is None:
            return None
        return ConversationProps(
            key=key,
            session=None if session.is_pending else session,
            project_path=project.path,
        )

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ── Startup ──

    async def initialize(self) -> None:
        """Load layout in one batched read, then projects, then restore selection."""
        result = await self._call(
            "Reading layout settings", self._settings.get_settings(layout_keys.STARTUP_KEYS)
        )
        values = result.ok_value if isinstance(result, Ok) else {}
        self._state.layout = parse_layout(values)
        self._state.search_history = parse_search_history(
            values.get(layout_keys.PROJECT_SEARCH_HISTORY)
        )
        self._notify()

        if await self.load_projects():
            await self._restore_selection(
                values.get(layout_keys.CURRENT_PROJECT_ID, ""),
                values.get(layout_keys.CURRENT_SESSION_ID, ""),
            )

    async def load_projects(self) -> bool:
        """Reload both project sources; all-or-nothing.

        Returns True when the reload was applied with data from both sources.
        """
        self._project_request_generation += 1
        generation = self._project_request_generation
        self._state.loading_projects = True
        self._notify()

        registered, discovered = await asyncio.gather(
            self._call("Listing user projects", self._registry.list_registered_projects()),
            self._call("Discovering projects", self._discovery.list_discovered_projects()),
        )
        if generation != self._project_request_generation:
            logger.debug("Discarding superseded project list load")
            return False

        self._state.loading_projects = False
        if not isinstance(registered, Ok) or not isinstance(discovered, Ok):
            error = registered.err_value if isinstance(registered, Err) else None
            if error is None and isinstance(discovered, Err):
                error = discovered.err_value
            logger.warning("Project lists unavailable: %s", error)
            self._state.registered_projects = []
            self._state.discovered_projects = []
            self._state.last_error = error
            self._notify()
            return False

        self._state.registered_projects = registered.ok_value
        self._state.discovered_projects = discovered.ok_value
        self._rebind_current_project()
        self._notify()
        return True

    # ── Selection ──

    async def select_project(self, project: Project) -> None:
        """Select a project, clear the session selection and load its sessions."""
        generation = self._begin_project_switch(project)
        self._notify()
        await self._write_settings({layout_keys.CURRENT_PROJECT_ID: project.id})
        await self._load_sessions(project, generation)

    async def select_session(self, session: Session) -> None:
        """Select a session of the current project.

        Only confirmed sessions are persisted; a placeholder means nothing
        after a restart.
        """
        project = self._state.current_project
        if project is None or session.project_id != project.id:
            logger.debug("Ignoring selection of session %s outside current project", session.id)
            return
        self._state.current_session = session
        self._notify()
        if session.status is SessionStatus.CONFIRMED:
            await self._persist_selection(project, session)

    def set_search_query(self, query: str) -> None:
        self._state.search_query = query
        self._notify()

    async def remember_search(self, query: str) -> None:
        history = push_search_history(self._state.search_history, query)
        if history == self._state.search_history:
            return
        self._state.search_history = history
        self._notify()
        await self._write_settings({layout_keys.PROJECT_SEARCH_HISTORY: json.dumps(history)})

    # ── Session lifecycle ──

    async def new_session(self, project: Project | None = None) -> Session | None:
        """Open a placeholder session and select it before any engine call.

        An existing placeholder for the same project is replaced.
        """
        generation: int | None = None
        if project is not None and not self._is_current(project):
            generation = self._begin_project_switch(project)
        target = self._state.current_project
        if target is None:
            return None

        placeholder = create_placeholder(target)
        replaced = self._placeholders.get(target.key)
        if replaced is not None:
            logger.debug("Replacing placeholder %s for %s", replaced.id, target.id)
        self._placeholders[target.key] = placeholder
        self._state.current_session = placeholder
        self._notify()

        if generation is not None:
            await self._write_settings({layout_keys.CURRENT_PROJECT_ID: target.id})
            await self._load_sessions(target, generation)
        return placeholder

    def begin_reconciliation(self, first_message: str, placeholder_id: str | None = None) -> bool:
        """The first message of the current placeholder was dispatched to the engine."""
        session = self._state.current_session
        if session is None or session.status is not SessionStatus.PLACEHOLDER:
            return False
        if placeholder_id is not None and placeholder_id != session.id:
            return False
        session.status = SessionStatus.RECONCILING
        session.first_message_preview = make_preview(first_message)
        self._notify()
        return True

    async def on_session_created(self, real_id: str, placeholder_id: str | None = None) -> bool:
        """Swap the selected placeholder's id for the engine-assigned one.

        The selected session object is updated in place so the conversation
        view keeps its render key. Callbacks that no longer match the
        selection are dropped. Returns True when a reconciliation happened.
        """
        real_id = real_id.strip()
        project = self._state.current_project
        session = self._state.current_session
        if not real_id or project is None or session is None or not session.is_pending:
            logger.debug("Dropping stale session-created callback for %r", real_id)
            return False
        if placeholder_id is not None and placeholder_id != session.id:
            logger.debug(
                "Dropping session-created callback for replaced placeholder %s", placeholder_id
            )
            return False
        if self._placeholders.get(project.key) is not session:
            logger.debug("Dropping session-created callback; %s is not tracked", session.id)
            return False
        if is_placeholder_id(real_id):
            logger.warning("Engine reported a placeholder-shaped session id %s", real_id)
            return False

        del self._placeholders[project.key]
        session.id = real_id
        session.status = SessionStatus.CONFIRMED
        already_listed = any(s.id == real_id for s in self._state.sessions)
        self._state.sessions = [session, *(s for s in self._state.sessions if s.id != real_id)]
        if not already_listed:
            project.session_count += 1
        logger.info("Session %s confirmed for project %s", real_id, project.id)
        self._notify()

        await self._persist_selection(project, session)
        return True

    # ── Layout ──

    async def toggle_left_panel(self) -> None:
        await self._update_layout(left_panel_collapsed=not self._state.layout.left_panel_collapsed)

    async def toggle_right_panel(self) -> None:
        await self._update_layout(
            right_panel_collapsed=not self._state.layout.right_panel_collapsed
        )

    async def toggle_discovered_projects(self) -> None:
        await self._update_layout(
            discovered_projects_collapsed=not self._state.layout.discovered_projects_collapsed
        )

    async def resize_left_panel(self, width: int) -> None:
        if width > 0 and width != self._state.layout.left_panel_width:
            await self._update_layout(left_panel_width=width)

    async def resize_right_panel(self, width: int) -> None:
        if width > 0 and width != self._state.layout.right_panel_width:
            await self._update_layout(right_panel_width=width)

    # ── Registry mutation ──

    async def add_project(self, path: str, name: str | None = None) -> Result[Project, ServiceError]:
        """Register a directory; the project list is reloaded on success."""
        result = await self._call(
            "Creating user project", self._registry.create_registered_project(path, name)
        )
        if isinstance(result, Err):
            logger.warning("Could not add project %s: %s", path, result.err_value)
            self._state.last_error = result.err_value
            self._notify()
            return result
        self._state.last_error = None
        await self.load_projects()
        return result

    async def remove_project(self, project: Project) -> Result[None, ServiceError]:
        """Soft-remove a registered project, resolving its registry id first."""
        if project.origin is not ProjectOrigin.REGISTERED:
            error = ServiceError(
                ErrorKind.INVALID_OPERATION, "Discovered projects cannot be removed"
            )
            self._state.last_error = error
            self._notify()
            return Err(error)

        internal_id = self._resolve_internal_id(project)
        if internal_id is None:
            error = ServiceError(
                ErrorKind.ORPHANED_INTERNAL_ID,
                f"No registry id found for project {project.id}",
            )
            logger.error("Cannot remove project %s: %s", project.path, error)
            self._state.last_error = error
            self._notify()
            return Err(error)

        result = await self._call(
            "Removing user project", self._registry.remove_registered_project(internal_id)
        )
        if isinstance(result, Err):
            logger.warning("Could not remove project %s: %s", project.path, result.err_value)
            self._state.last_error = result.err_value
            self._notify()
            return result

        self._state.last_error = None
        self._placeholders.pop(project.key, None)
        if self._is_current(project):
            self._clear_selection()
            await self._write_settings(
                {layout_keys.CURRENT_PROJECT_ID: "", layout_keys.CURRENT_SESSION_ID: ""}
            )
        await self.load_projects()
        return result

    def clear_error(self) -> None:
        if self._state.last_error is not None:
            self._state.last_error = None
            self._notify()

    # ── Internals ──

    def _notify(self) -> None:
        for listener in list(self._listeners):
            listener()

    def _is_current(self, project: Project) -> bool:
        current = self._state.current_project
        return current is not None and current.key == project.key

    def _begin_project_switch(self, project: Project) -> int:
        self._session_request_generation += 1
        self._state.current_project = project
        self._state.current_session = None
        self._state.sessions = []
        self._state.loading_sessions = True
        return self._session_request_generation

    def _clear_selection(self) -> None:
        self._session_request_generation += 1
        self._state.current_project = None
        self._state.current_session = None
        self._state.sessions = []
        self._state.loading_sessions = False

    def _rebind_current_project(self) -> None:
        """Point the selection at the freshly loaded project object, or drop it."""
        current = self._state.current_project
        if current is None:
            return
        source = (
            self._state.registered_projects
            if current.origin is ProjectOrigin.REGISTERED
            else self._state.discovered_projects
        )
        fresh = next((p for p in source if p.key == current.key), None)
        if fresh is None:
            logger.info("Selected project %s is gone; clearing selection", current.id)
            self._placeholders.pop(current.key, None)
            self._clear_selection()
            return
        self._state.current_project = fresh

    async def _load_sessions(self, project: Project, generation: int) -> bool:
        result = await self._call("Listing sessions", self._discovery.list_sessions(project.id))
        if generation != self._session_request_generation:
            logger.debug("Discarding sessions of %s; selection moved on", project.id)
            return False

        self._state.loading_sessions = False
        if isinstance(result, Ok):
            loaded = result.ok_value
            loaded_ids = {s.id for s in loaded}
            # Sessions confirmed while the load was in flight are not on disk yet.
            local = [
                s
                for s in self._state.sessions
                if s.created_locally and s.project_id == project.id and s.id not in loaded_ids
            ]
            self._state.sessions = [*local, *loaded]
        else:
            logger.warning("Sessions unavailable for %s: %s", project.id, result.err_value)
            self._state.sessions = []
        self._notify()
        return True

    async def _restore_selection(self, project_id: str, session_id: str) -> None:
        if not project_id or self._state.current_project is not None:
            return
        project = find_project(self.merged_projects(), project_id)
        if project is None:
            logger.info("Last used project %s is no longer listed", project_id)
            return

        generation = self._begin_project_switch(project)
        self._notify()
        if not await self._load_sessions(project, generation) or not session_id:
            return
        if self._state.current_session is not None:
            return
        session = next((s for s in self._state.sessions if s.id == session_id), None)
        if session is not None:
            self._state.current_session = session
            self._notify()

    def _resolve_internal_id(self, project: Project) -> int | None:
        if project.internal_id is not None:
            return project.internal_id
        for registered in self._state.registered_projects:
            if registered.id == project.id and registered.internal_id is not None:
                return registered.internal_id
        return None

    async def _persist_selection(self, project: Project, session: Session) -> None:
        await self._write_settings(
            {
                layout_keys.CURRENT_PROJECT_ID: project.id,
                layout_keys.CURRENT_SESSION_ID: session.id,
            }
        )

    async def _update_layout(self, **changes: bool | int) -> None:
        self._state.layout = self._state.layout.model_copy(update=changes)
        self._notify()
        await self._write_settings(encode_layout_changes(**changes))

    async def _write_settings(self, values: dict[str, str]) -> None:
        result = await self._call("Writing settings", self._settings.set_settings(values))
        if isinstance(result, Err):
            logger.warning("Settings %s not saved: %s", sorted(values), result.err_value)

    async def _call(
        self, operation: str, call: Awaitable[Result[T, ServiceError]]
    ) -> Result[T, ServiceError]:
        try:
            return await call
        except Exception as exc:
            logger.exception("%s failed", operation)
            return Err(adapter_failure(operation, exc))
