"""Centre panel: hosts the conversation view for the selected session.

A view instance lives as long as its render key. Reconciling a placeholder
keeps the key, so the live view is updated in place instead of rebuilt.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from PySide6.QtCore import Qt, Signal
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QPlainTextEdit,
    QPushButton,
    QStackedWidget,
    QVBoxLayout,
    QWidget,
)

from ccw.models.sessions import ConversationProps
from ccw.ui.theme import COLORS, MONO_FAMILY

logger = logging.getLogger(__name__)


class ConversationView(QWidget):
    """Base class for conversation renderers.

    Emits ``first_message_sent`` when the user's first message goes to the
    engine and ``session_created`` with the engine id once it answers.
    """

    session_created = Signal(str)
    first_message_sent = Signal(str)

    def set_props(self, props: ConversationProps) -> None:
        raise NotImplementedError


ViewFactory = Callable[[ConversationProps], ConversationView]


class SessionSummaryView(ConversationView):
    """Default renderer: session header plus a composer for new sessions."""

    def __init__(self, props: ConversationProps, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._sent = False

        layout = QVBoxLayout(self)
        layout.setContentsMargins(16, 16, 16, 16)
        layout.setSpacing(8)

        self._heading = QLabel()
        self._heading.setStyleSheet("font-weight: 700; font-size: 15px;")
        layout.addWidget(self._heading)

        self._path = QLabel()
        self._path.setStyleSheet(
            f"font-family: {MONO_FAMILY}; font-size: 11px; color: {COLORS['text_muted']};"
        )
        layout.addWidget(self._path)

        self._preview = QLabel()
        self._preview.setWordWrap(True)
        self._preview.setAlignment(Qt.AlignmentFlag.AlignTop)
        layout.addWidget(self._preview, 1)

        composer = QHBoxLayout()
        self._input = QPlainTextEdit()
        self._input.setPlaceholderText("Message...")
        self._input.setFixedHeight(72)
        composer.addWidget(self._input, 1)
        self._send_btn = QPushButton("Send")
        self._send_btn.clicked.connect(self._on_send)
        composer.addWidget(self._send_btn)
        layout.addLayout(composer)

        self.set_props(props)

    def set_props(self, props: ConversationProps) -> None:
        session = props.session
        self._path.setText(props.project_path)
        if session is None:
            self._heading.setText("New Session")
            self._preview.setText("Start typing to begin...")
        else:
            self._heading.setText(f"Session {session.id}")
            self._preview.setText(session.first_message_preview or "")
        self._input.setEnabled(not self._sent)
        self._send_btn.setEnabled(not self._sent)

    def _on_send(self) -> None:
        text = self._input.toPlainText().strip()
        if not text or self._sent:
            return
        self._sent = True
        self._input.setEnabled(False)
        self._send_btn.setEnabled(False)
        self.first_message_sent.emit(text)


class ConversationHost(QStackedWidget):
    """Swaps conversation views by render key and relays their callbacks.

    ``session_created`` carries ``(real_id, placeholder_id)`` and is relayed
    at most once per placeholder.
    """

    session_created = Signal(str, str)
    first_message_sent = Signal(str, str)

    def __init__(
        self,
        view_factory: ViewFactory | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._view_factory: ViewFactory = view_factory or SessionSummaryView
        self._view: ConversationView | None = None
        self._key: str | None = None
        self._pending_id = ""

        self._empty = QLabel("Select a project to start")
        self._empty.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._empty.setStyleSheet(f"font-size: 13px; color: {COLORS['text_muted']};")
        self.addWidget(self._empty)
        self.setCurrentWidget(self._empty)

    @property
    def current_key(self) -> str | None:
        return self._key

    def show_props(
        self,
        props: ConversationProps | None,
        *,
        pending_id: str = "",
        has_project: bool = False,
    ) -> None:
        """Show ``props``; a new view is built only when the render key changes."""
        self._pending_id = pending_id
        if props is None:
            self._unmount()
            self._empty.setText(
                "Select a session to view or create a new one"
                if has_project
                else "Select a project to start"
            )
            self.setCurrentWidget(self._empty)
            return

        if self._view is not None and props.key == self._key:
            self._view.set_props(props)
            return

        self._unmount()
        view = self._view_factory(props)
        view.session_created.connect(self._on_session_created)
        view.first_message_sent.connect(self._on_first_message_sent)
        self._view = view
        self._key = props.key
        self.addWidget(view)
        self.setCurrentWidget(view)
        logger.debug("Mounted conversation view %s", props.key)

    def dispose(self) -> None:
        self._unmount()

    def _unmount(self) -> None:
        if self._view is None:
            return
        self.removeWidget(self._view)
        self._view.deleteLater()
        self._view = None
        self._key = None

    def _on_session_created(self, real_id: str) -> None:
        if not self._pending_id:
            logger.debug("Ignoring repeated session-created signal %s", real_id)
            return
        placeholder_id, self._pending_id = self._pending_id, ""
        self.session_created.emit(real_id, placeholder_id)

    def _on_first_message_sent(self, text: str) -> None:
        if self._pending_id:
            self.first_message_sent.emit(text, self._pending_id)
