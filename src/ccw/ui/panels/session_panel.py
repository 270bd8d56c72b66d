"""Right panel: session history of the selected project."""

from __future__ import annotations

from PySide6.QtCore import QAbstractListModel, QModelIndex, QPersistentModelIndex, Qt, Signal
from PySide6.QtGui import QColor
from PySide6.QtWidgets import QHBoxLayout, QLabel, QListView, QPushButton, QVBoxLayout, QWidget

from ccw.models.layout import PanelLayout
from ccw.models.sessions import Session
from ccw.ui.theme import COLORS, format_relative_time, panel_header_style


class SessionListModel(QAbstractListModel):
    """Model backing the sessions QListView."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._sessions: list[Session] = []

    def set_sessions(self, sessions: list[Session]) -> None:
        self.beginResetModel()
        self._sessions = sessions
        self.endResetModel()

    def session_at(self, index: int) -> Session | None:
        if 0 <= index < len(self._sessions):
            return self._sessions[index]
        return None

    def row_of(self, session: Session | None) -> int:
        if session is None:
            return -1
        for row, candidate in enumerate(self._sessions):
            if candidate is session or candidate.id == session.id:
                return row
        return -1

    def rowCount(self, parent: QModelIndex | QPersistentModelIndex = QModelIndex()) -> int:
        return len(self._sessions)

    def data(
        self, index: QModelIndex | QPersistentModelIndex, role: int = Qt.ItemDataRole.DisplayRole
    ) -> object:
        if not index.isValid() or index.row() >= len(self._sessions):
            return None
        s = self._sessions[index.row()]
        if role == Qt.ItemDataRole.DisplayRole:
            when = format_relative_time(s.created_at)
            if s.is_pending:
                hint = s.first_message_preview or "Start typing to begin..."
                return f"New Session · {when}\n{hint}"
            title = s.first_message_preview or s.id[:12]
            return f"{title}\n{when}"
        if role == Qt.ItemDataRole.ForegroundRole and s.is_pending:
            return QColor(COLORS["placeholder"])
        if role == Qt.ItemDataRole.ToolTipRole:
            return s.id
        if role == Qt.ItemDataRole.UserRole:
            return s.id
        return None


class SessionPanel(QWidget):
    """Session list with a new-session action."""

    session_selected = Signal(object)  # Session
    new_session_requested = Signal()
    collapse_toggled = Signal()

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        header = QWidget(self)
        header.setStyleSheet(panel_header_style())
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(4, 4, 8, 4)
        self._collapse_btn = QPushButton("›")
        self._collapse_btn.setFixedSize(24, 24)
        self._collapse_btn.clicked.connect(self.collapse_toggled.emit)
        header_layout.addWidget(self._collapse_btn)
        self._title = QLabel("Session History")
        header_layout.addWidget(self._title)
        header_layout.addStretch()
        self._new_btn = QPushButton("+")
        self._new_btn.setFixedSize(22, 22)
        self._new_btn.setToolTip("New Session")
        self._new_btn.clicked.connect(self.new_session_requested.emit)
        header_layout.addWidget(self._new_btn)
        layout.addWidget(header)

        self._model = SessionListModel(self)
        self._list = QListView()
        self._list.setModel(self._model)
        self._list.setWordWrap(True)
        self._list.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        self._list.clicked.connect(self._on_item_clicked)
        layout.addWidget(self._list, 1)

        self._empty = QLabel("Select a project first")
        self._empty.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._empty.setStyleSheet(f"font-size: 11px; color: {COLORS['text_muted']};")
        layout.addWidget(self._empty, 1)

        self.setStyleSheet(f"background-color: {COLORS['panel_bg']};")

    def render(
        self,
        sessions: list[Session],
        current: Session | None,
        *,
        has_project: bool,
        loading: bool,
        layout: PanelLayout,
    ) -> None:
        collapsed = layout.right_panel_collapsed
        self._collapse_btn.setText("‹" if collapsed else "›")
        self._title.setVisible(not collapsed)
        self._new_btn.setVisible(has_project and not collapsed)

        self._model.set_sessions(sessions)
        show_list = bool(sessions) and not collapsed
        self._list.setVisible(show_list)
        self._empty.setVisible(not show_list and not collapsed)
        if not has_project:
            self._empty.setText("Select a project first")
        elif loading:
            self._empty.setText("Loading sessions...")
        else:
            self._empty.setText("No sessions found\nClick + to create a new session")

        row = self._model.row_of(current)
        if row < 0:
            self._list.clearSelection()
        else:
            self._list.setCurrentIndex(self._model.index(row))

    def _on_item_clicked(self, index: QModelIndex) -> None:
        session = self._model.session_at(index.row())
        if session is not None:
            self.session_selected.emit(session)
