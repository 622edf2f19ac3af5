"""
help_dialog.py

Help system dialogs for GuiForge.

Provides a tabbed help browser (Quick Start, Instances, Keyboard Shortcuts)
and an About dialog.
"""

from __future__ import annotations

from PyQt6.QtWidgets import (
    QDialog,
    QDialogButtonBox,
    QMessageBox,
    QTabWidget,
    QTextBrowser,
    QVBoxLayout,
)

from models import NODE_KINDS

__version__ = "1.0"


class HelpDialog(QDialog):
    """Tabbed help dialog.

    Args:
        parent: Parent widget.
        initial_tab: Index of the tab to display on open
            (0=Quick Start, 1=Instances, 2=Keyboard Shortcuts).
    """

    def __init__(self, parent=None, initial_tab: int = 0):
        super().__init__(parent)
        self.setWindowTitle("GuiForge Help")
        self.setMinimumSize(600, 480)
        self.resize(680, 560)

        layout = QVBoxLayout(self)

        self.tabs = QTabWidget()
        self.tabs.addTab(self._browser(_QUICK_START_HTML), "Quick Start")
        self.tabs.addTab(self._browser(instances_html()), "Instances")
        self.tabs.addTab(self._browser(_SHORTCUTS_HTML), "Keyboard Shortcuts")
        self.tabs.setCurrentIndex(initial_tab)
        layout.addWidget(self.tabs)

        buttons = QDialogButtonBox(QDialogButtonBox.StandardButton.Close)
        buttons.rejected.connect(self.reject)
        layout.addWidget(buttons)

    @staticmethod
    def _browser(html: str) -> QTextBrowser:
        browser = QTextBrowser()
        browser.setOpenExternalLinks(True)
        browser.setHtml(html)
        return browser


def instances_html() -> str:
    """Reference table of the placeable kinds, built from the kind table."""
    rows = []
    for desc in NODE_KINDS.values():
        caps = []
        if desc.is_container:
            caps.append("container")
        if desc.is_textual:
            caps.append("text")
        if desc.is_image_like:
            caps.append("image")
        if desc.is_scrollable:
            caps.append("scrolling canvas")
        rows.append(
            f"<tr><td><b>{desc.name}</b></td>"
            f"<td>{desc.size[0]} × {desc.size[1]}</td>"
            f"<td>{', '.join(caps) or '-'}</td></tr>"
        )
    return (
        "<h2>Instances</h2>"
        "<p>Only containers accept children. Dragging a node onto a container "
        "on the canvas or in the Explorer reparents it.</p>"
        '<table cellpadding="6" cellspacing="0" border="1" '
        'style="border-collapse:collapse; width:100%;">'
        '<tr style="background:#f0f0f0;"><th>Kind</th><th>Default size</th>'
        "<th>Capabilities</th></tr>"
        + "".join(rows)
        + "</table>"
    )


def show_about_dialog(parent=None):
    """Show the About GuiForge dialog."""
    QMessageBox.about(
        parent,
        "About GuiForge",
        "<h2>GuiForge</h2>"
        f"<p><b>v{__version__}</b> - Roblox ScreenGui layout designer</p>"
        "<p>Lay out GUI instances on a canvas and export a Lua script that "
        "rebuilds them at runtime.</p>"
        "<p>Built with PyQt6.</p>",
    )


_QUICK_START_HTML = """\
<h2>Quick Start</h2>

<h3>1. Add Instances</h3>
<p>Click a kind in the <b>Toolbox</b> toolbar. The new instance appears at
the centre of the canvas and is selected.</p>

<h3>2. Arrange</h3>
<p>Drag an instance to move it, or drag one of its eight handles to resize.
Drop it over a Frame or ScrollingFrame to make it a child. The
<b>Explorer</b> shows the hierarchy; its order is the ZIndex order.</p>

<h3>3. Edit Properties</h3>
<p>The <b>Properties</b> dock edits the selected instance: name, parent,
position, size, anchor, colours, text and extension objects such as
UICorner or UIStroke. Project settings (ScreenGui name, parent, output
mode) sit at the bottom.</p>

<h3>4. Export</h3>
<p>Press <b>Export</b> (Ctrl+E) to generate the Lua script. Copy it to the
clipboard or download it as a <code>.lua</code> file.</p>

<h3>5. Save &amp; Load</h3>
<p><b>File &rarr; Save</b> writes the design to the workspace directory;
<b>File &rarr; Load</b> restores it.</p>
"""

_SHORTCUTS_HTML = """\
<h2>Keyboard Shortcuts</h2>

<table cellpadding="6" cellspacing="0" border="1"
       style="border-collapse:collapse; width:100%;">
  <tr style="background:#f0f0f0;">
    <th>Category</th><th>Shortcut</th><th>Action</th>
  </tr>
  <tr><td rowspan="3"><b>File</b></td>
      <td><code>Ctrl+N</code></td><td>New project</td></tr>
  <tr><td><code>Ctrl+S</code></td><td>Save design</td></tr>
  <tr><td><code>Ctrl+O</code></td><td>Load design</td></tr>

  <tr><td rowspan="5"><b>Editing</b></td>
      <td><code>Delete</code></td><td>Delete selected instance</td></tr>
  <tr><td><code>Ctrl+D</code></td><td>Duplicate</td></tr>
  <tr><td><code>Ctrl+Up</code></td><td>Move up (raise ZIndex)</td></tr>
  <tr><td><code>Ctrl+Down</code></td><td>Move down (lower ZIndex)</td></tr>
  <tr><td><code>Ctrl+E</code></td><td>Export Lua</td></tr>

  <tr><td rowspan="4"><b>View</b></td>
      <td><code>Ctrl+Wheel</code></td><td>Zoom</td></tr>
  <tr><td><code>Ctrl++</code></td><td>Zoom in</td></tr>
  <tr><td><code>Ctrl+-</code></td><td>Zoom out</td></tr>
  <tr><td><code>Ctrl+0</code></td><td>Zoom 100%</td></tr>

  <tr><td><b>Help</b></td>
      <td><code>F1</code></td><td>Open this Help dialog</td></tr>
</table>
"""
