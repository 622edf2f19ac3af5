"""
canvas/scene.py

QGraphicsScene that renders a DesignerSession and feeds mouse input into
its pointer state machine.
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QAction, QBrush, QColor, QPen
from PyQt6.QtWidgets import QGraphicsScene, QMenu

from canvas.items import NodeItem
from layout.geometry import absolute_top_left, handle_at, node_at, paint_order
from layout.interaction import PointerEvent
from layout.session import DesignerSession
from settings import get_settings

# Height of the top bar the safe-area guide keeps clear
SAFE_AREA_TOP_INSET = 36

GRID_STEP = 20

SCENE_MARGIN = 40

_BUTTONS = {
    Qt.MouseButton.LeftButton: 0,
    Qt.MouseButton.MiddleButton: 1,
    Qt.MouseButton.RightButton: 2,
}


def _modifier_names(mods) -> frozenset:
    names = set()
    if mods & Qt.KeyboardModifier.ShiftModifier:
        names.add("shift")
    if mods & Qt.KeyboardModifier.ControlModifier:
        names.add("ctrl")
    if mods & Qt.KeyboardModifier.AltModifier:
        names.add("alt")
    if mods & Qt.KeyboardModifier.MetaModifier:
        names.add("meta")
    return frozenset(names)


class DesignScene(QGraphicsScene):
    """
    Scene mirroring one session's store.

    Scene coordinates are canvas (world) coordinates; the view applies the
    zoom as its transform. Mouse positions are handed to the session as raw
    screen offsets from the canvas origin, i.e. world * zoom.
    """

    def __init__(self, session: DesignerSession, parent=None):
        super().__init__(parent)
        self.session = session
        self._items: Dict[str, NodeItem] = {}
        w, h = session.store.canvas_w, session.store.canvas_h
        self.setSceneRect(QRectF(-SCENE_MARGIN, -SCENE_MARGIN, w + 2 * SCENE_MARGIN, h + 2 * SCENE_MARGIN))
        session.add_listener(self.refresh)

    # -- rendering ----------------------------------------------------------

    def node_item(self, node_id: str) -> Optional[NodeItem]:
        return self._items.get(node_id)

    def refresh(self) -> None:
        """Re-sync every item with the store (add, update, remove)."""
        store = self.session.store
        order = paint_order(store)
        live = set(order)

        for node_id in list(self._items):
            if node_id not in live:
                self.removeItem(self._items.pop(node_id))

        for z, node_id in enumerate(order):
            node = store.get(node_id)
            item = self._items.get(node_id)
            if item is None:
                item = NodeItem(node_id)
                self.addItem(item)
                self._items[node_id] = item
            x, y = absolute_top_left(store, node_id)
            item.sync(node, QPointF(x, y), z + 1, node_id == self.session.selected_id)
        self.update()

    def drawBackground(self, painter, rect):
        super().drawBackground(painter, rect)
        store = self.session.store
        canvas = QRectF(0, 0, store.canvas_w, store.canvas_h)

        painter.setPen(QPen(QColor(70, 70, 80), 1))
        painter.setBrush(QBrush(QColor(18, 18, 22)))
        painter.drawRect(canvas)

        painter.setPen(QPen(QColor(32, 32, 38), 1))
        x = GRID_STEP
        while x < store.canvas_w:
            painter.drawLine(QPointF(x, 0), QPointF(x, store.canvas_h))
            x += GRID_STEP
        y = GRID_STEP
        while y < store.canvas_h:
            painter.drawLine(QPointF(0, y), QPointF(store.canvas_w, y))
            y += GRID_STEP

        if self.session.show_safe_area:
            painter.setPen(QPen(QColor(255, 196, 0), 1, Qt.PenStyle.DashLine))
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(canvas.adjusted(0, SAFE_AREA_TOP_INSET, 0, 0))

    # -- picking ------------------------------------------------------------

    def pick(self, world: Tuple[float, float]) -> Tuple[Optional[str], Optional[str]]:
        """Node id and resize handle under a canvas point.

        Handles belong to the selected node only and win over bodies.
        """
        store = self.session.store
        selected = self.session.selected
        if selected is not None:
            tlx, tly = absolute_top_left(store, selected.id)
            size = get_settings().settings.canvas.handles.size
            handle = handle_at(selected.w, selected.h, world[0] - tlx, world[1] - tly, size)
            if handle is not None:
                return selected.id, handle
        return node_at(store, world), None

    def _pointer_event(self, event, with_target: bool = False) -> PointerEvent:
        pos = event.scenePos()
        zoom = self.session.zoom
        target_id, handle = self.pick((pos.x(), pos.y())) if with_target else (None, None)
        return PointerEvent(
            x=pos.x() * zoom,
            y=pos.y() * zoom,
            pointer_id=0,
            button=_BUTTONS.get(event.button(), 0),
            modifiers=_modifier_names(event.modifiers()),
            target_id=target_id,
            handle=handle,
        )

    # -- mouse --------------------------------------------------------------

    def mousePressEvent(self, event):
        if event.button() == Qt.MouseButton.RightButton:
            event.accept()
            return
        self.session.pointer_down(self._pointer_event(event, with_target=True))
        event.accept()

    def mouseMoveEvent(self, event):
        if self.session.controller.is_dragging:
            self.session.pointer_move(self._pointer_event(event))
            event.accept()
            return
        super().mouseMoveEvent(event)

    def mouseReleaseEvent(self, event):
        if self.session.controller.is_dragging and event.button() != Qt.MouseButton.RightButton:
            self.session.pointer_up(self._pointer_event(event))
            event.accept()
            return
        super().mouseReleaseEvent(event)

    def contextMenuEvent(self, event):
        pos = event.scenePos()
        node_id = node_at(self.session.store, (pos.x(), pos.y()))
        if node_id is None:
            return
        self.session.select(node_id)
        self._show_context_menu(event.screenPos())
        event.accept()

    def _show_context_menu(self, screen_pos):
        """Show the node context menu."""
        menu = QMenu()

        delete_act = QAction("Delete", menu)
        delete_act.triggered.connect(lambda: self.session.delete_selected())
        menu.addAction(delete_act)

        duplicate_act = QAction("Duplicate", menu)
        duplicate_act.triggered.connect(lambda: self.session.duplicate_selected())
        menu.addAction(duplicate_act)

        menu.addSeparator()

        up_act = QAction("Move Up", menu)
        up_act.triggered.connect(lambda: self.session.move_up_selected())
        menu.addAction(up_act)

        down_act = QAction("Move Down", menu)
        down_act.triggered.connect(lambda: self.session.move_down_selected())
        menu.addAction(down_act)

        menu.exec(screen_pos)
