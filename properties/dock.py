"""
properties/dock.py

Property panel for the selected node, its extension objects and the
project-level settings.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QColor
from PyQt6.QtWidgets import (
    QCheckBox,
    QColorDialog,
    QComboBox,
    QDockWidget,
    QDoubleSpinBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QScrollArea,
    QSpinBox,
    QVBoxLayout,
    QWidget,
)

from models import EXTENSION_DEFAULTS, FONTS, OutputMode, RuntimeParent
from layout.session import DesignerSession
from utils import format_number, rgb_to_hex

compact_btn_style = "padding: 2px 6px; font-size: 10px; min-width: 40px;"


def _hbox(*widgets, stretch: bool = True) -> QWidget:
    """Pack widgets into a margin-less row widget."""
    row = QWidget()
    lay = QHBoxLayout(row)
    lay.setContentsMargins(0, 0, 0, 0)
    lay.setSpacing(4)
    for w in widgets:
        lay.addWidget(w)
    if stretch:
        lay.addStretch(1)
    return row


def _format_prop(value: Any) -> str:
    if isinstance(value, dict) and {"r", "g", "b"} <= set(value):
        return rgb_to_hex(value["r"], value["g"], value["b"])
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        return format_number(value)
    return str(value)


class ExtensionEditor(QGroupBox):
    """Editor for one extension object: a field per documented property."""

    def __init__(self, session: DesignerSession, node_id: str, ext: Dict[str, Any], parent=None):
        super().__init__(ext["type"], parent)
        self.session = session
        self.node_id = node_id
        self.ext_id = ext["id"]
        self.edits: Dict[str, QLineEdit] = {}

        form = QFormLayout(self)
        form.setContentsMargins(6, 4, 6, 4)
        for key in EXTENSION_DEFAULTS.get(ext["type"], {}):
            edit = QLineEdit()
            edit.editingFinished.connect(lambda k=key, e=edit: self._commit(k, e.text()))
            self.edits[key] = edit
            form.addRow(f"{key}:", edit)

        remove_btn = QPushButton("Remove")
        remove_btn.setStyleSheet(compact_btn_style)
        remove_btn.clicked.connect(lambda: self.session.remove_extension(self.node_id, self.ext_id))
        form.addRow(_hbox(remove_btn))
        self.set_values(ext)

    def set_values(self, ext: Dict[str, Any]) -> None:
        props = ext.get("props", {})
        for key, edit in self.edits.items():
            if edit.hasFocus():
                continue
            edit.blockSignals(True)
            edit.setText(_format_prop(props.get(key, EXTENSION_DEFAULTS[ext["type"]][key])))
            edit.blockSignals(False)

    def _commit(self, key: str, text: str) -> None:
        self.session.set_extension_prop(self.node_id, self.ext_id, key, text)


class PropertyPanel(QWidget):
    """
    Property panel bound to a DesignerSession.

    Displays:
    - Node fields (name, parent, geometry, anchor, z, colours, border)
    - Kind-specific rows: text/font for textual kinds, image for image
      kinds, canvas size and scrollbar for scrolling frames
    - Extension objects attached to the node
    - Project settings (ScreenGui name, reset-on-spawn, parent, output mode)

    Every edit goes through the session, which coerces the value and
    clamps the node; the panel then re-reads the node on refresh.
    """

    def __init__(self, session: DesignerSession, parent=None):
        super().__init__(parent)
        self.session = session
        self._extension_editors: List[ExtensionEditor] = []
        self._extension_key: Optional[Tuple] = None
        self._node_key: Optional[Tuple] = None

        outer = QVBoxLayout(self)
        outer.setContentsMargins(0, 0, 0, 0)
        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        scroll.setFrameShape(QScrollArea.Shape.NoFrame)
        outer.addWidget(scroll)
        body = QWidget()
        scroll.setWidget(body)
        layout = QVBoxLayout(body)

        self._build_node_group(layout)
        self._build_extension_group(layout)
        self._build_project_group(layout)
        layout.addStretch(1)

        session.add_listener(self.refresh)
        self.refresh()

    # -- construction -------------------------------------------------------

    def _build_node_group(self, layout: QVBoxLayout) -> None:
        self.node_group = QGroupBox("Instance")
        form = QFormLayout(self.node_group)
        self.node_form = form

        self.kind_label = QLabel("-")
        form.addRow("Kind:", self.kind_label)

        self.name_edit = QLineEdit()
        self.name_edit.editingFinished.connect(lambda: self._commit("name", self.name_edit.text()))
        form.addRow("Name:", self.name_edit)

        self.parent_combo = QComboBox()
        self.parent_combo.activated.connect(self._on_parent_chosen)
        form.addRow("Parent:", self.parent_combo)

        self.geom_edits: Dict[str, QLineEdit] = {}
        for field in ("x", "y", "w", "h"):
            edit = QLineEdit()
            edit.setMaximumWidth(70)
            edit.editingFinished.connect(lambda f=field, e=edit: self._commit(f, e.text()))
            self.geom_edits[field] = edit
        form.addRow("Position:", _hbox(QLabel("X"), self.geom_edits["x"], QLabel("Y"), self.geom_edits["y"]))
        form.addRow("Size:", _hbox(QLabel("W"), self.geom_edits["w"], QLabel("H"), self.geom_edits["h"]))

        self.anchor_edit = QLineEdit()
        self.anchor_edit.setPlaceholderText("ax,ay")
        self.anchor_edit.setToolTip("Anchor point as two numbers in 0..1, e.g. 0.5,0.5")
        self.anchor_edit.editingFinished.connect(lambda: self._commit("anchor", self.anchor_edit.text()))
        form.addRow("Anchor:", self.anchor_edit)

        self.z_spin = QSpinBox()
        self.z_spin.setRange(1, 100000)
        self.z_spin.editingFinished.connect(lambda: self._commit("z_index", self.z_spin.value()))
        form.addRow("ZIndex:", self.z_spin)

        self.bg_color_btn = QPushButton("Pick")
        self.bg_color_btn.setStyleSheet(compact_btn_style)
        self.bg_color_preview = self._make_preview()
        self.bg_color_btn.clicked.connect(lambda: self._pick_color("bg_color", "Pick Background Color"))
        self.bg_alpha_spin = QDoubleSpinBox()
        self.bg_alpha_spin.setRange(0.0, 1.0)
        self.bg_alpha_spin.setSingleStep(0.05)
        self.bg_alpha_spin.setDecimals(2)
        self.bg_alpha_spin.setToolTip("Opacity (1 = opaque)")
        self.bg_alpha_spin.valueChanged.connect(lambda v: self._commit("bg_alpha", v))
        form.addRow("Background:", _hbox(self.bg_color_btn, self.bg_color_preview, QLabel("Alpha"), self.bg_alpha_spin))

        self.border_check = QCheckBox("Show border")
        self.border_check.toggled.connect(lambda on: self._commit("border", on))
        form.addRow("Border:", self.border_check)

        # Textual kinds
        self.text_edit = QLineEdit()
        self.text_edit.editingFinished.connect(lambda: self._commit("text", self.text_edit.text()))
        form.addRow("Text:", self.text_edit)

        self.text_color_btn = QPushButton("Pick")
        self.text_color_btn.setStyleSheet(compact_btn_style)
        self.text_color_preview = self._make_preview()
        self.text_color_btn.clicked.connect(lambda: self._pick_color("text_color", "Pick Text Color"))
        self.text_scaled_check = QCheckBox("Scaled")
        self.text_scaled_check.toggled.connect(lambda on: self._commit("text_scaled", on))
        self.text_style_row = _hbox(self.text_color_btn, self.text_color_preview, self.text_scaled_check)
        form.addRow("Text color:", self.text_style_row)

        self.font_combo = QComboBox()
        self.font_combo.addItems(FONTS)
        self.font_combo.activated.connect(lambda _i: self._commit("font", self.font_combo.currentText()))
        form.addRow("Font:", self.font_combo)

        # Image kinds
        self.image_edit = QLineEdit()
        self.image_edit.setPlaceholderText("rbxassetid://...")
        self.image_edit.editingFinished.connect(lambda: self._commit("image", self.image_edit.text()))
        form.addRow("Image:", self.image_edit)

        # ScrollingFrame
        self.scroll_spins: Dict[str, QSpinBox] = {}
        for field in ("canvas_w", "canvas_h", "scrollbar_thickness"):
            spin = QSpinBox()
            spin.setRange(0, 100000)
            spin.setSuffix(" px")
            spin.editingFinished.connect(lambda f=field, s=spin: self._commit(f, s.value()))
            self.scroll_spins[field] = spin
        self.canvas_row = _hbox(self.scroll_spins["canvas_w"], QLabel("×"), self.scroll_spins["canvas_h"])
        form.addRow("Canvas size:", self.canvas_row)
        form.addRow("Scrollbar:", self.scroll_spins["scrollbar_thickness"])

        self._text_rows = [self.text_edit, self.text_style_row, self.font_combo]
        self._image_rows = [self.image_edit]
        self._scroll_rows = [self.canvas_row, self.scroll_spins["scrollbar_thickness"]]

        layout.addWidget(self.node_group)

    def _build_extension_group(self, layout: QVBoxLayout) -> None:
        self.ext_group = QGroupBox("Extensions")
        ext_layout = QVBoxLayout(self.ext_group)

        self.ext_add_combo = QComboBox()
        self.ext_add_combo.addItems(sorted(EXTENSION_DEFAULTS))
        self.ext_add_btn = QPushButton("Add")
        self.ext_add_btn.setStyleSheet(compact_btn_style)
        self.ext_add_btn.clicked.connect(lambda: self.session.add_extension(self.ext_add_combo.currentText()))
        ext_layout.addWidget(_hbox(self.ext_add_combo, self.ext_add_btn))

        self.ext_list = QVBoxLayout()
        self.ext_list.setContentsMargins(0, 0, 0, 0)
        ext_layout.addLayout(self.ext_list)
        layout.addWidget(self.ext_group)

    def _build_project_group(self, layout: QVBoxLayout) -> None:
        group = QGroupBox("Project")
        form = QFormLayout(group)

        self.gui_name_edit = QLineEdit()
        self.gui_name_edit.editingFinished.connect(
            lambda: self.session.set_project_field("gui_name", self.gui_name_edit.text()))
        form.addRow("ScreenGui:", self.gui_name_edit)

        self.reset_check = QCheckBox("ResetOnSpawn")
        self.reset_check.toggled.connect(lambda on: self.session.set_project_field("reset_on_spawn", on))
        form.addRow("", self.reset_check)

        self.runtime_parent_combo = QComboBox()
        self.runtime_parent_combo.addItems([RuntimeParent.PLAYER_GUI, RuntimeParent.CORE_GUI])
        self.runtime_parent_combo.activated.connect(
            lambda _i: self.session.set_project_field("runtime_parent", self.runtime_parent_combo.currentText()))
        form.addRow("Parent:", self.runtime_parent_combo)

        self.output_mode_combo = QComboBox()
        self.output_mode_combo.addItem("Variables", OutputMode.VARIABLES)
        self.output_mode_combo.addItem("Nested", OutputMode.NESTED)
        self.output_mode_combo.activated.connect(
            lambda _i: self.session.set_project_field("output_mode", self.output_mode_combo.currentData()))
        form.addRow("Output:", self.output_mode_combo)

        layout.addWidget(group)

    @staticmethod
    def _make_preview() -> QLabel:
        lbl = QLabel()
        lbl.setFixedSize(24, 24)
        lbl.setAutoFillBackground(True)
        return lbl

    # -- refresh ------------------------------------------------------------

    def _set_preview(self, lbl: QLabel, hex_color: str) -> None:
        """Update a color preview label."""
        lbl.setStyleSheet(f"background-color: {hex_color}; border: 1px solid #444;")
        lbl.update()

    def _set_rows_visible(self, widgets, visible: bool) -> None:
        for w in widgets:
            self.node_form.setRowVisible(w, visible)

    def _set_text(self, edit: QLineEdit, text: str) -> None:
        # Leave a field alone while the user is typing in it
        if edit.hasFocus() or edit.text() == text:
            return
        edit.setText(text)

    def refresh(self) -> None:
        """Re-read the selected node and project into the widgets."""
        values = self.session.property_values()
        self.node_group.setEnabled(values is not None)
        self.ext_group.setEnabled(values is not None)

        widgets = [
            self.name_edit, self.parent_combo, self.anchor_edit, self.z_spin,
            self.bg_alpha_spin, self.border_check, self.text_edit, self.text_scaled_check,
            self.font_combo, self.image_edit, self.gui_name_edit, self.reset_check,
            self.runtime_parent_combo, self.output_mode_combo,
            *self.geom_edits.values(), *self.scroll_spins.values(),
        ]
        for w in widgets:
            w.blockSignals(True)
        try:
            self._refresh_node(values)
            self._refresh_project()
        finally:
            for w in widgets:
                w.blockSignals(False)
        self._refresh_extensions(values)

    def _refresh_node(self, values: Optional[Dict[str, Any]]) -> None:
        if values is None:
            self.kind_label.setText("-")
            for edit in (self.name_edit, self.anchor_edit, self.text_edit, self.image_edit,
                         *self.geom_edits.values()):
                edit.clear()
            self.parent_combo.clear()
            self._node_key = None
            self._set_rows_visible(self._text_rows + self._image_rows + self._scroll_rows, False)
            return

        self.kind_label.setText(values["kind"])
        self._set_text(self.name_edit, values["name"])
        for field, edit in self.geom_edits.items():
            self._set_text(edit, format_number(values[field]))
        self._set_text(self.anchor_edit, values["anchor"])
        self.z_spin.setValue(int(values["z_index"]))
        self._set_preview(self.bg_color_preview, values["bg_color"])
        self.bg_alpha_spin.setValue(float(values["bg_alpha"]))
        self.border_check.setChecked(bool(values["border"]))

        # Parent choices only change with structure; rebuild on demand
        key = (values["id"], tuple(values["parent_choices"]))
        if key != self._node_key:
            self._node_key = key
            self.parent_combo.clear()
            for choice_id, label in values["parent_choices"]:
                self.parent_combo.addItem(label, choice_id)
        idx = self.parent_combo.findData(values["parent"])
        self.parent_combo.setCurrentIndex(max(idx, 0))

        self._set_rows_visible(self._text_rows, values["is_textual"])
        self._set_rows_visible(self._image_rows, values["is_image_like"])
        self._set_rows_visible(self._scroll_rows, values["is_scrollable"])

        if values["is_textual"]:
            self._set_text(self.text_edit, values["text"])
            self._set_preview(self.text_color_preview, values["text_color"])
            self.text_scaled_check.setChecked(bool(values["text_scaled"]))
            idx = self.font_combo.findText(values["font"])
            self.font_combo.setCurrentIndex(max(idx, 0))
        if values["is_image_like"]:
            self._set_text(self.image_edit, values["image"])
        if values["is_scrollable"]:
            for field, spin in self.scroll_spins.items():
                spin.setValue(int(values[field]))

    def _refresh_project(self) -> None:
        project = self.session.project_values()
        self._set_text(self.gui_name_edit, project["gui_name"])
        self.reset_check.setChecked(bool(project["reset_on_spawn"]))
        self.runtime_parent_combo.setCurrentText(project["runtime_parent"])
        idx = self.output_mode_combo.findData(project["output_mode"])
        self.output_mode_combo.setCurrentIndex(max(idx, 0))

    def _refresh_extensions(self, values: Optional[Dict[str, Any]]) -> None:
        exts = values["extensions"] if values else []
        node_id = values["id"] if values else None
        key = (node_id, tuple((e["id"], e["type"]) for e in exts))
        if key == self._extension_key:
            for editor, ext in zip(self._extension_editors, exts):
                editor.set_values(ext)
            return

        self._extension_key = key
        for editor in self._extension_editors:
            self.ext_list.removeWidget(editor)
            editor.deleteLater()
        self._extension_editors = []
        for ext in exts:
            editor = ExtensionEditor(self.session, node_id, ext)
            self.ext_list.addWidget(editor)
            self._extension_editors.append(editor)

    # -- edits --------------------------------------------------------------

    def _commit(self, field: str, value: Any) -> None:
        if self.session.selected is None:
            return
        self.session.set_property(field, value)

    def _on_parent_chosen(self, index: int) -> None:
        parent_id = self.parent_combo.itemData(index)
        if parent_id is not None:
            self._commit("parent", parent_id)

    def _pick_color(self, field: str, title: str) -> None:
        """Show the colour dialog and apply the chosen colour to *field*."""
        values = self.session.property_values()
        if values is None:
            return
        c = QColorDialog.getColor(QColor(values[field]), self, title)
        if not c.isValid():
            return
        self._commit(field, c.name())


class PropertyDock(QDockWidget):
    """Dock wrapper around :class:`PropertyPanel`."""

    def __init__(self, session: DesignerSession, parent=None):
        super().__init__("Properties", parent)
        self.panel = PropertyPanel(session)
        self.setWidget(self.panel)
        self.setAllowedAreas(Qt.DockWidgetArea.LeftDockWidgetArea | Qt.DockWidgetArea.RightDockWidgetArea)
