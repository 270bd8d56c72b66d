"""Directory picker, confirmations, error boxes and file-manager reveal."""

from __future__ import annotations

import subprocess
import sys
from pathlib import Path

from PySide6.QtCore import QUrl
from PySide6.QtGui import QDesktopServices
from PySide6.QtWidgets import QFileDialog, QMessageBox, QWidget

from ccw.models.projects import Project


def pick_project_directory(parent: QWidget | None = None) -> str | None:
    """Ask for a project directory; None when cancelled."""
    selected = QFileDialog.getExistingDirectory(
        parent,
        "Select Project Directory",
        str(Path.home()),
        QFileDialog.Option.ShowDirsOnly,
    )
    return selected or None


def confirm_project_removal(parent: QWidget | None, project: Project) -> bool:
    answer = QMessageBox.question(
        parent,
        "Remove Project",
        f"Remove {project.display_name} from the list?\n\nFiles on disk are not touched.",
        QMessageBox.StandardButton.Yes | QMessageBox.StandardButton.No,
        QMessageBox.StandardButton.No,
    )
    return answer == QMessageBox.StandardButton.Yes


def show_error(parent: QWidget | None, title: str, message: str) -> None:
    QMessageBox.warning(parent, title, message)


def reveal_in_file_manager(path: str) -> bool:
    """Open a project directory in the system file manager."""
    raw = path.strip()
    if not raw:
        return False

    target = Path(raw).expanduser()
    if not target.is_dir():
        return False

    if sys.platform == "darwin":
        subprocess.Popen(["open", str(target)])
        return True

    return QDesktopServices.openUrl(QUrl.fromLocalFile(str(target)))
