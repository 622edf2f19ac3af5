"""
editor/script_dock.py

Dock widget showing the generated Lua script with export, copy and
download actions.
"""

from __future__ import annotations

import logging
import os

from PyQt6.QtCore import pyqtSignal
from PyQt6.QtGui import QFont, QGuiApplication
from PyQt6.QtWidgets import (
    QDockWidget,
    QFileDialog,
    QHBoxLayout,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from editor.highlighter import LuaHighlighter
from layout.session import DesignerSession
from lua_export import suggested_filename, write_script
from settings import get_settings

log = logging.getLogger(__name__)


class ScriptDock(QDockWidget):
    """
    Read-only view of the last exported script.

    Copy and Download are enabled only while the exported text is
    non-empty.
    """

    # Emitted with a short status-bar message after copy/download
    status_message = pyqtSignal(str)

    def __init__(self, session: DesignerSession, parent=None):
        super().__init__("Generated Lua", parent)
        self.session = session
        w = QWidget()
        self.setWidget(w)
        layout = QVBoxLayout(w)

        self.text = QPlainTextEdit()
        self.text.setReadOnly(True)
        self.text.setPlaceholderText("Press Export (Ctrl+E) to generate the script...")
        # Font from settings. Defaults: family=Consolas, size=10
        font_cfg = get_settings().settings.editor.font
        font = QFont(font_cfg.family, font_cfg.size)
        font.setStyleHint(QFont.StyleHint.Monospace)
        self.text.setFont(font)
        layout.addWidget(self.text)

        self._highlighter = LuaHighlighter(self.text.document())

        bar = QHBoxLayout()
        self.export_btn = QPushButton("Export")
        self.export_btn.setToolTip("Generate the Lua script (Ctrl+E)")
        self.export_btn.clicked.connect(lambda: self.session.export_script())
        bar.addWidget(self.export_btn)

        self.copy_btn = QPushButton("Copy")
        self.copy_btn.clicked.connect(self.copy_to_clipboard)
        bar.addWidget(self.copy_btn)

        self.download_btn = QPushButton("Download…")
        self.download_btn.clicked.connect(self.download)
        bar.addWidget(self.download_btn)
        bar.addStretch()
        layout.addLayout(bar)

        session.add_listener(self.refresh)
        self.refresh()

    def refresh(self) -> None:
        if self.text.toPlainText() != self.session.script:
            self.text.setPlainText(self.session.script)
        enabled = self.session.export_enabled
        self.copy_btn.setEnabled(enabled)
        self.download_btn.setEnabled(enabled)

    def copy_to_clipboard(self) -> None:
        text = self.session.script.strip()
        if not text:
            return
        QGuiApplication.clipboard().setText(text)
        self.status_message.emit("Copied.")

    def download(self) -> None:
        text = self.session.script.strip()
        if not text:
            return
        default_dir = str(get_settings().get_workspace_dir())
        default_path = os.path.join(default_dir, suggested_filename(self.session.project))
        path, _ = QFileDialog.getSaveFileName(self, "Save Lua script", default_path, "Lua (*.lua);;All files (*)")
        if not path:
            return
        try:
            write_script(text, path)
        except OSError as e:
            log.warning("script write failed: %s", e)
            QMessageBox.critical(self, "Save failed", f"Could not write {path}:\n{e}")
            return
        self.status_message.emit(f"Saved {os.path.basename(path)}.")
