"""Left panel: filter box, user projects, and the collapsible discovered projects list."""

from __future__ import annotations

from PySide6.QtCore import (
    QAbstractListModel,
    QModelIndex,
    QPersistentModelIndex,
    QPoint,
    Qt,
    Signal,
)
from PySide6.QtWidgets import (
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QListView,
    QMenu,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ccw.models.layout import PanelLayout
from ccw.models.projects import Project, ProjectListing, ProjectOrigin
from ccw.ui.dialogs import reveal_in_file_manager
from ccw.ui.theme import COLORS, panel_header_style


class ProjectRoles:
    """Named Qt UserRole offsets for Project data in list models."""

    ID = Qt.ItemDataRole.UserRole
    PATH = Qt.ItemDataRole.UserRole + 1
    SESSION_COUNT = Qt.ItemDataRole.UserRole + 2


class ProjectListModel(QAbstractListModel):
    """Model backing one of the project QListViews."""

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._projects: list[Project] = []

    def set_projects(self, projects: list[Project]) -> None:
        self.beginResetModel()
        self._projects = projects
        self.endResetModel()

    def project_at(self, index: int) -> Project | None:
        if 0 <= index < len(self._projects):
            return self._projects[index]
        return None

    def row_of(self, key: tuple[ProjectOrigin, str] | None) -> int:
        for row, project in enumerate(self._projects):
            if project.key == key:
                return row
        return -1

    def rowCount(self, parent: QModelIndex | QPersistentModelIndex = QModelIndex()) -> int:
        return len(self._projects)

    def data(
        self, index: QModelIndex | QPersistentModelIndex, role: int = Qt.ItemDataRole.DisplayRole
    ) -> object:
        if not index.isValid() or index.row() >= len(self._projects):
            return None
        project = self._projects[index.row()]
        if role == Qt.ItemDataRole.DisplayRole:
            if project.session_count:
                return f"{project.display_name}  ({project.session_count})"
            return project.display_name
        if role == Qt.ItemDataRole.ToolTipRole:
            return project.path
        if role == ProjectRoles.ID:
            return project.id
        if role == ProjectRoles.PATH:
            return project.path
        if role == ProjectRoles.SESSION_COUNT:
            return project.session_count
        return None


class ProjectPanel(QWidget):
    """Project browser for the workspace."""

    project_selected = Signal(object)  # Project
    new_session_requested = Signal(object)  # Project
    remove_requested = Signal(object)  # Project
    add_requested = Signal()
    filter_changed = Signal(str)
    filter_committed = Signal(str)
    collapse_toggled = Signal()
    discovered_toggled = Signal()

    def __init__(self, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._collapsed = False

        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        layout.setSpacing(0)

        header = QWidget(self)
        header.setStyleSheet(panel_header_style())
        header_layout = QHBoxLayout(header)
        header_layout.setContentsMargins(8, 4, 4, 4)
        self._title = QLabel("Projects")
        header_layout.addWidget(self._title)
        header_layout.addStretch()
        self._collapse_btn = QPushButton("‹")
        self._collapse_btn.setFixedSize(24, 24)
        self._collapse_btn.setToolTip("Collapse panel")
        self._collapse_btn.clicked.connect(self.collapse_toggled.emit)
        header_layout.addWidget(self._collapse_btn)
        layout.addWidget(header)

        self._body = QWidget(self)
        body_layout = QVBoxLayout(self._body)
        body_layout.setContentsMargins(8, 8, 8, 8)
        body_layout.setSpacing(6)

        self._filter_input = QLineEdit()
        self._filter_input.setPlaceholderText("Search projects...")
        self._filter_input.textChanged.connect(self.filter_changed.emit)
        self._filter_input.editingFinished.connect(
            lambda: self.filter_committed.emit(self._filter_input.text())
        )
        body_layout.addWidget(self._filter_input)

        user_row = QHBoxLayout()
        user_title = QLabel("User Projects")
        user_title.setStyleSheet(f"font-size: 11px; color: {COLORS['text_muted']};")
        user_row.addWidget(user_title)
        user_row.addStretch()
        add_btn = QPushButton("+")
        add_btn.setFixedSize(22, 22)
        add_btn.setToolTip("Add Project")
        add_btn.clicked.connect(self.add_requested.emit)
        user_row.addWidget(add_btn)
        body_layout.addLayout(user_row)

        self._registered_model = ProjectListModel(self)
        self._registered_list = self._make_list(self._registered_model)
        body_layout.addWidget(self._registered_list, 1)

        self._registered_empty = QLabel("No user projects")
        self._registered_empty.setAlignment(Qt.AlignmentFlag.AlignCenter)
        self._registered_empty.setStyleSheet(f"font-size: 11px; color: {COLORS['text_muted']};")
        body_layout.addWidget(self._registered_empty)

        self._discovered_toggle = QPushButton("Claude Projects")
        self._discovered_toggle.setFlat(True)
        self._discovered_toggle.clicked.connect(self.discovered_toggled.emit)
        body_layout.addWidget(self._discovered_toggle)

        self._discovered_model = ProjectListModel(self)
        self._discovered_list = self._make_list(self._discovered_model)
        body_layout.addWidget(self._discovered_list, 1)

        layout.addWidget(self._body, 1)
        self.setStyleSheet(f"background-color: {COLORS['panel_bg']};")

    def render(
        self,
        listing: ProjectListing,
        current: Project | None,
        layout: PanelLayout,
    ) -> None:
        """Show ``listing`` and highlight ``current``."""
        self._collapsed = layout.left_panel_collapsed
        self._body.setVisible(not self._collapsed)
        self._title.setVisible(not self._collapsed)
        self._collapse_btn.setText("›" if self._collapsed else "‹")
        self._collapse_btn.setToolTip("Expand panel" if self._collapsed else "Collapse panel")

        self._registered_model.set_projects(listing.registered)
        self._registered_empty.setVisible(not listing.registered)

        has_discovered = bool(listing.discovered)
        collapsed = layout.discovered_projects_collapsed
        arrow = "▾" if collapsed else "▴"
        self._discovered_toggle.setText(f"Claude Projects  {arrow}")
        self._discovered_toggle.setVisible(has_discovered)
        self._discovered_model.set_projects(listing.discovered)
        self._discovered_list.setVisible(has_discovered and not collapsed)

        key = current.key if current is not None else None
        self._highlight(self._registered_list, self._registered_model, key)
        self._highlight(self._discovered_list, self._discovered_model, key)

    def filter_text(self) -> str:
        return self._filter_input.text()

    def _make_list(self, model: ProjectListModel) -> QListView:
        view = QListView(self)
        view.setModel(model)
        view.setHorizontalScrollBarPolicy(Qt.ScrollBarPolicy.ScrollBarAlwaysOff)
        view.setMouseTracking(True)
        view.clicked.connect(lambda index, m=model: self._on_item_clicked(m, index))
        view.setContextMenuPolicy(Qt.ContextMenuPolicy.CustomContextMenu)
        view.customContextMenuRequested.connect(
            lambda pos, v=view, m=model: self._on_context_menu(v, m, pos)
        )
        return view

    def _highlight(
        self,
        view: QListView,
        model: ProjectListModel,
        key: tuple[ProjectOrigin, str] | None,
    ) -> None:
        row = model.row_of(key)
        if row < 0:
            view.clearSelection()
            return
        view.setCurrentIndex(model.index(row))

    def _on_item_clicked(self, model: ProjectListModel, index: QModelIndex) -> None:
        project = model.project_at(index.row())
        if project is not None:
            self.project_selected.emit(project)

    def _on_context_menu(self, view: QListView, model: ProjectListModel, pos: QPoint) -> None:
        index = view.indexAt(pos)
        if not index.isValid():
            return
        project = model.project_at(index.row())
        if project is None:
            return

        menu = QMenu(self)
        new_action = menu.addAction("New Session")
        show_action = menu.addAction("Show in Finder")
        remove_action = menu.addAction("Remove Project") if project.is_registered else None
        selected = menu.exec(view.viewport().mapToGlobal(pos))
        if selected is None:
            return
        if selected == new_action:
            self.new_session_requested.emit(project)
        elif selected == show_action:
            reveal_in_file_manager(project.path)
        elif remove_action is not None and selected == remove_action:
            self.remove_requested.emit(project)
