"""
main.py

GuiForge - Roblox ScreenGui layout designer

PyQt6 application for assembling a GUI layout on a fixed canvas with:
- A toolbox of placeable instance kinds
- Drag to move, handles to resize, drop onto containers to reparent
- Explorer hierarchy with drag-and-drop reordering
- Property editing, extension objects and project settings
- Lua script export, copy and download

Usage:
    python main.py

Environment:
    GUIFORGE_TRACE=1 (optional, writes a debug trace log)
"""

from __future__ import annotations

import logging
import sys
import traceback

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QAction, QKeySequence
from PyQt6.QtWidgets import (
    QApplication,
    QLabel,
    QMainWindow,
    QMessageBox,
    QToolBar,
)

from canvas import DesignScene, DesignView
from debug_trace import close_log, install_log_handler, trace, trace_call, trace_exception
from editor import ScriptDock
from explorer import ExplorerDock
from help_dialog import HelpDialog, show_about_dialog
from layout.session import DesignerSession
from layout.snapshot import SnapshotStorage
from models import NODE_KINDS
from properties.dock import PropertyDock
from settings import SettingsManager, get_settings

log = logging.getLogger(__name__)


class MainWindow(QMainWindow):
    """Main application window.

    Args:
        settings_manager: The SettingsManager instance for application settings.
        session: Optional session to show; built from settings when omitted.
    """

    def __init__(self, settings_manager: SettingsManager, session: DesignerSession = None):
        super().__init__()
        self.settings_manager = settings_manager
        self.session = session or DesignerSession.from_settings(settings_manager)
        self.storage = SnapshotStorage.from_settings(settings_manager)

        # Canvas
        self.scene = DesignScene(self.session)
        self.view = DesignView(self.scene)
        self.setCentralWidget(self.view)

        # Docks
        self.explorer = ExplorerDock(self.session, self)
        self.addDockWidget(Qt.DockWidgetArea.LeftDockWidgetArea, self.explorer)

        self.props = PropertyDock(self.session, self)
        self.addDockWidget(Qt.DockWidgetArea.RightDockWidgetArea, self.props)

        self.script_dock = ScriptDock(self.session, self)
        self.addDockWidget(Qt.DockWidgetArea.BottomDockWidgetArea, self.script_dock)
        self.script_dock.status_message.connect(lambda msg: self.statusBar().showMessage(msg))

        # Status bar: notice on the left, geometry detail and zoom on the right
        self.detail_label = QLabel("")
        self.zoom_label = QLabel("")
        self.statusBar().addPermanentWidget(self.detail_label)
        self.statusBar().addPermanentWidget(self.zoom_label)

        self._build_menus()
        self._build_toolbox()

        self.session.add_notice_listener(self._on_notice)
        self.session.add_listener(self._on_session_changed)
        self._on_notice(*self.session.status)
        self._on_session_changed()

    def _build_menus(self):
        """Build the application menu bar."""
        menubar = self.menuBar()

        # File menu
        file_menu = menubar.addMenu("&File")

        new_act = QAction("New Project", self)
        new_act.setShortcut(QKeySequence.StandardKey.New)
        new_act.triggered.connect(self.new_project)
        file_menu.addAction(new_act)

        file_menu.addSeparator()

        save_act = QAction("Save", self)
        save_act.setShortcut(QKeySequence.StandardKey.Save)
        save_act.triggered.connect(self.save_project)
        file_menu.addAction(save_act)

        load_act = QAction("Load", self)
        load_act.setShortcut(QKeySequence.StandardKey.Open)
        load_act.triggered.connect(self.load_project)
        file_menu.addAction(load_act)

        file_menu.addSeparator()

        export_act = QAction("Export Lua", self)
        export_act.setShortcut(QKeySequence("Ctrl+E"))
        export_act.triggered.connect(lambda: self.session.export_script())
        file_menu.addAction(export_act)

        file_menu.addSeparator()

        exit_act = QAction("E&xit", self)
        exit_act.triggered.connect(self.close)
        file_menu.addAction(exit_act)

        # Edit menu
        edit_menu = menubar.addMenu("&Edit")

        delete_act = QAction("Delete", self)
        delete_act.setShortcut(QKeySequence(Qt.Key.Key_Delete))
        delete_act.triggered.connect(lambda: self.session.delete_selected())
        edit_menu.addAction(delete_act)

        dup_act = QAction("Duplicate", self)
        dup_act.setShortcut(QKeySequence("Ctrl+D"))
        dup_act.triggered.connect(lambda: self.session.duplicate_selected())
        edit_menu.addAction(dup_act)

        edit_menu.addSeparator()

        up_act = QAction("Move Up", self)
        up_act.setShortcut(QKeySequence("Ctrl+Up"))
        up_act.triggered.connect(lambda: self.session.move_up_selected())
        edit_menu.addAction(up_act)

        down_act = QAction("Move Down", self)
        down_act.setShortcut(QKeySequence("Ctrl+Down"))
        down_act.triggered.connect(lambda: self.session.move_down_selected())
        edit_menu.addAction(down_act)

        self._selection_actions = [delete_act, dup_act, up_act, down_act]

        # View menu
        view_menu = menubar.addMenu("&View")

        zoom_in_act = QAction("Zoom In", self)
        zoom_in_act.setShortcut(QKeySequence.StandardKey.ZoomIn)
        zoom_in_act.triggered.connect(lambda: self.view.zoom_in())
        view_menu.addAction(zoom_in_act)

        zoom_out_act = QAction("Zoom Out", self)
        zoom_out_act.setShortcut(QKeySequence.StandardKey.ZoomOut)
        zoom_out_act.triggered.connect(lambda: self.view.zoom_out())
        view_menu.addAction(zoom_out_act)

        zoom_reset_act = QAction("Zoom 100%", self)
        zoom_reset_act.setShortcut(QKeySequence("Ctrl+0"))
        zoom_reset_act.triggered.connect(lambda: self.view.zoom_reset())
        view_menu.addAction(zoom_reset_act)

        view_menu.addSeparator()

        self.safe_area_act = QAction("Show Safe Area", self)
        self.safe_area_act.setCheckable(True)
        self.safe_area_act.toggled.connect(lambda on: self.session.set_show_safe_area(on))
        view_menu.addAction(self.safe_area_act)

        view_menu.addSeparator()
        for dock in (self.explorer, self.props, self.script_dock):
            view_menu.addAction(dock.toggleViewAction())

        # Help menu
        help_menu = menubar.addMenu("&Help")

        help_contents_act = QAction("Help Contents", self)
        help_contents_act.setShortcut(QKeySequence(Qt.Key.Key_F1))
        help_contents_act.triggered.connect(lambda: self._show_help_dialog())
        help_menu.addAction(help_contents_act)

        shortcuts_act = QAction("Keyboard Shortcuts", self)
        shortcuts_act.triggered.connect(lambda: self._show_help_dialog(tab=2))
        help_menu.addAction(shortcuts_act)

        help_menu.addSeparator()

        about_act = QAction("About GuiForge", self)
        about_act.triggered.connect(lambda: show_about_dialog(self))
        help_menu.addAction(about_act)

    def _build_toolbox(self):
        """Build the toolbox: one action per placeable kind."""
        tb = QToolBar("Toolbox")
        tb.setObjectName("toolbox")
        self.addToolBar(Qt.ToolBarArea.TopToolBarArea, tb)

        for kind in NODE_KINDS:
            act = QAction(kind, self)
            act.setToolTip(f"Add a {kind} at the canvas centre")
            act.triggered.connect(lambda _checked=False, k=kind: self.session.create_node(k))
            tb.addAction(act)

    # -- session observers --------------------------------------------------

    def _on_notice(self, message: str, detail: str):
        self.statusBar().showMessage(message)
        self.detail_label.setText(detail)

    def _on_session_changed(self):
        has_selection = self.session.selected is not None
        for act in self._selection_actions:
            act.setEnabled(has_selection)
        self.zoom_label.setText(f"{round(self.session.zoom * 100)}%")
        if self.safe_area_act.isChecked() != self.session.show_safe_area:
            self.safe_area_act.blockSignals(True)
            self.safe_area_act.setChecked(self.session.show_safe_area)
            self.safe_area_act.blockSignals(False)
        self.setWindowTitle(f"GuiForge - {self.session.project.gui_name}")

    # -- file commands ------------------------------------------------------

    def new_project(self):
        if self.session.store.nodes():
            reply = QMessageBox.question(
                self, "New Project",
                "Discard the current layout and start a new project?",
            )
            if reply != QMessageBox.StandardButton.Yes:
                return
        self.session.new_project()

    @trace_call("FILE")
    def save_project(self):
        try:
            self.session.save(self.storage)
        except OSError as e:
            log.warning("save failed: %s", e)
            QMessageBox.critical(self, "Save failed", f"Could not write {self.storage.path}:\n{e}")

    @trace_call("FILE")
    def load_project(self):
        self.session.load(self.storage)

    def _show_help_dialog(self, tab: int = 0):
        HelpDialog(self, initial_tab=tab).exec()


def main():
    """Application entry point."""
    trace("Application starting", "MAIN")
    install_log_handler(logging.INFO)
    app = QApplication(sys.argv)

    trace("Loading settings", "MAIN")
    settings_manager = get_settings()
    settings_manager.ensure_file_complete()

    def save_on_quit():
        trace("Saving settings on quit", "MAIN")
        settings_manager.save()
        close_log()

    app.aboutToQuit.connect(save_on_quit)

    trace("Creating MainWindow", "MAIN")
    w = MainWindow(settings_manager)
    w.session.new_project()
    w.resize(1500, 950)
    w.show()
    trace("Entering event loop", "MAIN")
    sys.exit(app.exec())


if __name__ == "__main__":
    # Route uncaught exceptions into the trace log before the default hook
    def excepthook(exc_type, exc_value, exc_tb):
        trace("UNCAUGHT EXCEPTION:", "CRASH")
        trace("".join(traceback.format_exception(exc_type, exc_value, exc_tb)), "CRASH")
        close_log()
        sys.__excepthook__(exc_type, exc_value, exc_tb)

    sys.excepthook = excepthook

    try:
        main()
    except Exception as e:
        trace(f"FATAL: {type(e).__name__}: {e}", "CRASH")
        trace_exception("Fatal exception")
        close_log()
        raise
