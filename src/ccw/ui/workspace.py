"""Three-panel workspace: the single mount point the host shell embeds."""

from __future__ import annotations

import logging
from collections.abc import Callable

from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import QHBoxLayout, QLabel, QPushButton, QSplitter, QVBoxLayout, QWidget

from ccw.models.projects import Project
from ccw.models.sessions import Session
from ccw.ui.async_bridge import async_slot, schedule
from ccw.ui.dialogs import confirm_project_removal, pick_project_directory, show_error
from ccw.ui.panels.conversation_host import ConversationHost, ViewFactory
from ccw.ui.panels.project_panel import ProjectPanel
from ccw.ui.panels.session_panel import SessionPanel
from ccw.ui.theme import COLLAPSED_PANEL_WIDTH
from ccw.workspace.orchestrator import WorkspaceOrchestrator

logger = logging.getLogger(__name__)

_RESIZE_DEBOUNCE_MS = 400


class WorkspaceWidget(QWidget):
    """Projects on the left, conversation in the centre, sessions on the right."""

    def __init__(
        self,
        orchestrator: WorkspaceOrchestrator,
        *,
        go_back: Callable[[], None],
        view_factory: ViewFactory | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._orchestrator = orchestrator
        self._go_back = go_back
        self._started = False

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        header = QWidget(self)
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(12, 8, 12, 8)
        back_btn = QPushButton("← Back to Home")
        back_btn.clicked.connect(self._go_back)
        header_layout.addWidget(back_btn)
        title = QLabel("Projects Workspace")
        title.setStyleSheet("font-size: 18px; font-weight: 700;")
        header_layout.addWidget(title)
        header_layout.addStretch()
        layout.addWidget(header)

        self._splitter = QSplitter(Qt.Orientation.Horizontal)
        self._project_panel = ProjectPanel()
        self._host = ConversationHost(view_factory)
        self._session_panel = SessionPanel()
        self._splitter.addWidget(self._project_panel)
        self._splitter.addWidget(self._host)
        self._splitter.addWidget(self._session_panel)
        self._splitter.setStretchFactor(0, 0)
        self._splitter.setStretchFactor(1, 1)
        self._splitter.setStretchFactor(2, 0)
        self._splitter.setChildrenCollapsible(False)
        layout.addWidget(self._splitter, 1)

        self._resize_timer = QTimer(self)
        self._resize_timer.setSingleShot(True)
        self._resize_timer.setInterval(_RESIZE_DEBOUNCE_MS)
        self._resize_timer.timeout.connect(self._commit_panel_widths)
        self._applying_sizes = False

        # ── Wire signals ──
        self._project_panel.project_selected.connect(self._on_project_selected)
        self._project_panel.new_session_requested.connect(self._on_new_session_for_project)
        self._project_panel.remove_requested.connect(self._on_remove_project)
        self._project_panel.add_requested.connect(self._on_add_project)
        self._project_panel.filter_changed.connect(self._orchestrator.set_search_query)
        self._project_panel.filter_committed.connect(self._on_filter_committed)
        self._project_panel.collapse_toggled.connect(self._on_toggle_left)
        self._project_panel.discovered_toggled.connect(self._on_toggle_discovered)
        self._session_panel.session_selected.connect(self._on_session_selected)
        self._session_panel.new_session_requested.connect(self._on_new_session)
        self._session_panel.collapse_toggled.connect(self._on_toggle_right)
        self._host.session_created.connect(self._on_session_created)
        self._host.first_message_sent.connect(self._on_first_message_sent)
        self._splitter.splitterMoved.connect(self._on_splitter_moved)

        self._unsubscribe = self._orchestrator.subscribe(self._refresh)
        self._refresh()

    def start(self) -> None:
        """Load layout and projects once."""
        if self._started:
            return
        self._started = True
        logger.info("Opening projects workspace")
        schedule(self._orchestrator.initialize(), name="workspace-initialize")

    def dispose(self) -> None:
        self._unsubscribe()
        self._host.dispose()

    # ── Rendering ──

    def _refresh(self) -> None:
        orchestrator = self._orchestrator
        state = orchestrator.state
        self._project_panel.render(orchestrator.listing(), state.current_project, state.layout)
        self._session_panel.render(
            orchestrator.session_list(),
            state.current_session,
            has_project=state.current_project is not None,
            loading=state.loading_sessions,
            layout=state.layout,
        )
        session = state.current_session
        self._host.show_props(
            orchestrator.conversation_props(),
            pending_id=session.id if session is not None and session.is_pending else "",
            has_project=state.current_project is not None,
        )
        self._apply_panel_sizes()

        error = state.last_error
        if error is not None and error.user_visible:
            orchestrator.clear_error()
            # Deferred so the modal box never opens inside an orchestrator update.
            QTimer.singleShot(0, lambda: show_error(self, "Projects", error.message))

    def _apply_panel_sizes(self) -> None:
        layout = self._orchestrator.state.layout
        left = COLLAPSED_PANEL_WIDTH if layout.left_panel_collapsed else layout.left_panel_width
        right = COLLAPSED_PANEL_WIDTH if layout.right_panel_collapsed else layout.right_panel_width
        sizes = self._splitter.sizes()
        total = sum(sizes) or (left + right + 600)
        centre = max(1, total - left - right)
        if sizes == [left, centre, right]:
            return
        self._applying_sizes = True
        try:
            self._splitter.setSizes([left, centre, right])
        finally:
            self._applying_sizes = False

    # ── Slots ──

    @async_slot
    async def _on_project_selected(self, project: Project) -> None:
        await self._orchestrator.select_project(project)

    @async_slot
    async def _on_session_selected(self, session: Session) -> None:
        await self._orchestrator.select_session(session)

    @async_slot
    async def _on_new_session(self) -> None:
        await self._orchestrator.new_session()

    @async_slot
    async def _on_new_session_for_project(self, project: Project) -> None:
        await self._orchestrator.new_session(project)

    @async_slot
    async def _on_session_created(self, real_id: str, placeholder_id: str) -> None:
        await self._orchestrator.on_session_created(real_id, placeholder_id or None)

    def _on_first_message_sent(self, text: str, placeholder_id: str) -> None:
        self._orchestrator.begin_reconciliation(text, placeholder_id or None)

    @async_slot
    async def _on_add_project(self) -> None:
        path = pick_project_directory(self)
        if path is None:
            return
        await self._orchestrator.add_project(path)

    @async_slot
    async def _on_remove_project(self, project: Project) -> None:
        if confirm_project_removal(self, project):
            await self._orchestrator.remove_project(project)

    @async_slot
    async def _on_filter_committed(self, query: str) -> None:
        await self._orchestrator.remember_search(query)

    @async_slot
    async def _on_toggle_left(self) -> None:
        await self._orchestrator.toggle_left_panel()

    @async_slot
    async def _on_toggle_right(self) -> None:
        await self._orchestrator.toggle_right_panel()

    @async_slot
    async def _on_toggle_discovered(self) -> None:
        await self._orchestrator.toggle_discovered_projects()

    def _on_splitter_moved(self, _pos: int, _index: int) -> None:
        if not self._applying_sizes:
            self._resize_timer.start()

    @async_slot
    async def _commit_panel_widths(self) -> None:
        left, _centre, right = self._splitter.sizes()
        layout = self._orchestrator.state.layout
        if not layout.left_panel_collapsed:
            await self._orchestrator.resize_left_panel(left)
        if not layout.right_panel_collapsed:
            await self._orchestrator.resize_right_panel(right)
