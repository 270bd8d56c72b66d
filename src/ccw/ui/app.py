"""PySide6 application bootstrap: main window, service init, run_app()."""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Callable
from typing import TYPE_CHECKING

from PySide6.QtCore import QSettings, Qt, QTimer
from PySide6.QtGui import QCloseEvent
from PySide6.QtWidgets import (
    QApplication,
    QLabel,
    QMainWindow,
    QPushButton,
    QStackedWidget,
    QStatusBar,
    QVBoxLayout,
    QWidget,
)

from ccw.services.container import ServiceContainer
from ccw.ui.async_bridge import cancel_all_tasks, create_event_loop, schedule
from ccw.ui.theme import COLORS, build_stylesheet
from ccw.ui.workspace import WorkspaceWidget
from ccw.workspace.orchestrator import WorkspaceOrchestrator

if TYPE_CHECKING:
    from ccw.config import Config

logger = logging.getLogger(__name__)


class HomePage(QWidget):
    """Landing page with the entry into the projects workspace."""

    def __init__(
        self, on_open_workspace: Callable[[], None], parent: QWidget | None = None
    ) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setAlignment(Qt.AlignmentFlag.AlignCenter)

        title = QLabel("Claude Code Workspace")
        title.setStyleSheet("font-size: 22px; font-weight: 700;")
        title.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(title)

        subtitle = QLabel("Browse projects and their sessions in one place")
        subtitle.setStyleSheet(f"font-size: 13px; color: {COLORS['text_muted']};")
        subtitle.setAlignment(Qt.AlignmentFlag.AlignCenter)
        layout.addWidget(subtitle)

        self._open_btn = QPushButton("Open Projects Workspace")
        self._open_btn.setEnabled(False)
        self._open_btn.clicked.connect(on_open_workspace)
        layout.addWidget(self._open_btn, alignment=Qt.AlignmentFlag.AlignCenter)

    def set_ready(self, ready: bool) -> None:
        self._open_btn.setEnabled(ready)


class CCWMainWindow(QMainWindow):
    """Home page and projects workspace in one stacked window."""

    def __init__(self, config: Config) -> None:
        super().__init__()
        self._config = config
        self._services: ServiceContainer | None = None
        self._workspace: WorkspaceWidget | None = None

        self.setWindowTitle("Claude Code Workspace")
        self.setMinimumSize(1100, 700)

        self._stack = QStackedWidget()
        self.setCentralWidget(self._stack)
        self._home = HomePage(self._show_workspace)
        self._stack.addWidget(self._home)

        self._status_bar = QStatusBar()
        self.setStatusBar(self._status_bar)
        self._status_label = QLabel("Loading...")
        self._status_bar.addWidget(self._status_label)
        self._shutdown_in_progress = False
        self._force_exit_timer = QTimer(self)
        self._force_exit_timer.setSingleShot(True)
        self._force_exit_timer.timeout.connect(lambda: os._exit(0))

        self._restore_state()

    async def initialize(self) -> None:
        """Open the database and build the workspace."""
        try:
            logger.info("Starting CCW, building service container...")
            self._services = await ServiceContainer.create(self._config)
            orchestrator = WorkspaceOrchestrator(
                registry=self._services.registry_service,
                discovery=self._services.discovery_service,
                settings=self._services.settings_service,
            )
            self._workspace = WorkspaceWidget(orchestrator, go_back=self._show_home)
            self._stack.addWidget(self._workspace)
            self._home.set_ready(True)
            self._status_label.setText(f"Data: {self._config.db_path}")
        except Exception:
            logger.exception("Application startup failed")
            self._status_label.setText("Startup failed. Check terminal logs.")

    def _show_workspace(self) -> None:
        if self._workspace is None:
            return
        self._stack.setCurrentWidget(self._workspace)
        self._workspace.start()

    def _show_home(self) -> None:
        self._stack.setCurrentWidget(self._home)

    def _restore_state(self) -> None:
        """Restore window geometry from QSettings."""
        settings = QSettings("CCW", "ClaudeCodeWorkspace")
        geometry = settings.value("geometry")
        if geometry:
            self.restoreGeometry(geometry)  # type: ignore[arg-type]

    def closeEvent(self, event: QCloseEvent) -> None:
        """Save geometry, then close services before quitting."""
        settings = QSettings("CCW", "ClaudeCodeWorkspace")
        settings.setValue("geometry", self.saveGeometry())
        settings.sync()

        if self._shutdown_in_progress:
            event.accept()
            return

        if self._services is None:
            event.accept()
            app = QApplication.instance()
            if app is not None:
                app.quit()
            return

        self._shutdown_in_progress = True
        event.ignore()
        self._status_label.setText("Shutting down...")

        self._force_exit_timer.start(2500)
        schedule(self._shutdown_and_quit(), name="shutdown")

    async def _shutdown_and_quit(self) -> None:
        """Best-effort cleanup before quitting the Qt app."""
        try:
            cancel_all_tasks()
            if self._workspace is not None:
                self._workspace.dispose()
            if self._services is not None:
                await self._services.close()
                self._services = None
        except Exception:
            logger.exception("Error while shutting down services")
        finally:
            self._force_exit_timer.stop()
            app = QApplication.instance()
            if app is not None:
                app.quit()


def run_app(config: Config) -> None:
    """Entry point: create QApplication, event loop, main window, and run."""
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")

    app = QApplication(sys.argv)
    app.setApplicationName("Claude Code Workspace")
    app.setOrganizationName("CCW")
    app.setStyleSheet(build_stylesheet())

    loop = create_event_loop(app)

    window = CCWMainWindow(config)
    window.show()

    schedule(window.initialize(), name="initialize")

    with loop:
        loop.run_forever()
