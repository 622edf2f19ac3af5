"""
canvas/items.py

QGraphicsItem that paints one layout node.

Items are plain views of the store: they never move themselves. Position,
size and stacking are pushed in by the scene after every session change.
"""

from __future__ import annotations

from typing import Dict, Optional

from PyQt6.QtCore import QPointF, QRectF, Qt
from PyQt6.QtGui import QBrush, QColor, QFont, QPainter, QPen
from PyQt6.QtWidgets import QGraphicsRectItem

from models import Node
from layout.geometry import handle_rects
from settings import get_settings

# Qt font families approximating the Roblox fonts
FONT_FAMILIES = {
    "Gotham": "Helvetica",
    "GothamBold": "Helvetica",
    "Arial": "Arial",
    "Code": "Courier New",
}


def _get_handle_size() -> float:
    """Get handle size from settings. Default: 8.0 pixels."""
    return get_settings().settings.canvas.handles.size


def _get_handle_border_color() -> QColor:
    """Get handle border color from settings. Default: #0078D7."""
    return QColor(get_settings().settings.canvas.handles.border_color)


def _get_handle_fill_color() -> QColor:
    """Get handle fill color from settings. Default: #FFFFFF."""
    return QColor(get_settings().settings.canvas.handles.fill_color)


def qcolor(rgb, alpha: float = 1.0) -> QColor:
    c = QColor(int(rgb[0]), int(rgb[1]), int(rgb[2]))
    c.setAlphaF(max(0.0, min(1.0, float(alpha))))
    return c


def qfont_for(node: Node, box_h: float) -> QFont:
    """Font for a textual node; scaled text follows the box height."""
    font = QFont(FONT_FAMILIES.get(node.font.replace("Bold", ""), "Arial"))
    font.setBold(node.font.endswith("Bold"))
    if node.text_scaled:
        font.setPixelSize(max(6, int(box_h * 0.45)))
    else:
        font.setPixelSize(14)
    return font


def draw_handles(painter: QPainter, w: float, h: float, handle_size: Optional[float] = None):
    """Draw the 8 resize handles of a ``w`` x ``h`` box."""
    if handle_size is None:
        handle_size = _get_handle_size()
    painter.setPen(QPen(_get_handle_border_color(), 1))
    painter.setBrush(QBrush(_get_handle_fill_color()))
    for rx, ry, rw, rh in handle_rects(w, h, handle_size).values():
        painter.drawRect(QRectF(rx, ry, rw, rh))


class NodeItem(QGraphicsRectItem):
    """Renders one node in canvas coordinates.

    The item's local origin is the node's top-left corner, so handle and
    hit-test maths can use node-local coordinates directly.
    """

    def __init__(self, node_id: str, parent=None):
        super().__init__(parent)
        self.node_id = node_id
        self.kind = ""
        self._node: Optional[Node] = None
        self._selected = False
        self.setAcceptHoverEvents(False)

    def sync(self, node: Node, top_left: QPointF, z: float, selected: bool) -> None:
        """Copy display state from *node*."""
        self.prepareGeometryChange()
        self._node = node.copy()
        self.kind = node.kind
        self._selected = selected
        self.setRect(QRectF(0, 0, node.w, node.h))
        self.setPos(top_left)
        self.setZValue(z)
        self.setToolTip(f"{node.display_name} ({node.kind})")
        self.update()

    def boundingRect(self) -> QRectF:
        """Expand bounding rect to include resize handles."""
        r = super().boundingRect()
        margin = _get_handle_size() / 2 + 1
        return r.adjusted(-margin, -margin, margin, margin)

    def paint(self, painter: QPainter, option, widget=None):
        node = self._node
        if node is None:
            return
        r = self.rect()

        painter.setBrush(QBrush(qcolor(node.bg_color, node.bg_alpha)))
        if node.border:
            painter.setPen(QPen(QColor(0, 0, 0), 1))
        else:
            painter.setPen(Qt.PenStyle.NoPen)
        painter.drawRect(r)

        if node.is_textual:
            painter.setPen(QPen(qcolor(node.text_color)))
            painter.setFont(qfont_for(node, r.height()))
            painter.drawText(r, Qt.AlignmentFlag.AlignCenter.value | Qt.TextFlag.TextWordWrap.value, node.text)
        elif node.is_image_like:
            painter.setPen(QPen(QColor(160, 160, 170)))
            label = node.image.strip() or node.kind
            painter.drawText(r, Qt.AlignmentFlag.AlignCenter.value | Qt.TextFlag.TextWrapAnywhere.value, label)
        elif node.is_scrollable:
            bar = float(node.scrollbar_thickness)
            painter.setPen(Qt.PenStyle.NoPen)
            painter.setBrush(QBrush(QColor(90, 90, 100)))
            painter.drawRect(QRectF(r.right() - bar, r.top(), bar, r.height()))

        if self._selected:
            painter.setPen(QPen(_get_handle_border_color(), 1, Qt.PenStyle.DashLine))
            painter.setBrush(Qt.BrushStyle.NoBrush)
            painter.drawRect(r)
            draw_handles(painter, r.width(), r.height())

    def display_state(self) -> Dict[str, float]:
        """Current rect and stacking value in scene coordinates."""
        p = self.pos()
        r = self.rect()
        return {"x": p.x(), "y": p.y(), "w": r.width(), "h": r.height(), "z": self.zValue()}
