"""
canvas/view.py

QGraphicsView showing the design canvas at the session's zoom.
"""

from __future__ import annotations

from PyQt6.QtCore import Qt
from PyQt6.QtGui import QPainter
from PyQt6.QtWidgets import QGraphicsView

from canvas.scene import DesignScene
from settings import get_settings


class DesignView(QGraphicsView):
    """
    Graphics view over a DesignScene.

    The view transform is always a pure scale equal to the session zoom.
    Ctrl + mouse wheel steps the zoom; losing focus mid-drag ends the drag.
    """

    def __init__(self, scene: DesignScene, parent=None):
        super().__init__(scene, parent)
        self.session = scene.session
        self.setRenderHint(QPainter.RenderHint.Antialiasing, True)
        self.setDragMode(QGraphicsView.DragMode.NoDrag)
        self.setTransformationAnchor(QGraphicsView.ViewportAnchor.AnchorUnderMouse)
        self.setBackgroundBrush(Qt.GlobalColor.darkGray)
        self._applied_zoom = None
        self.session.add_listener(self.sync_zoom)
        self.sync_zoom()

    def sync_zoom(self) -> None:
        """Apply the session zoom to the view transform if it changed."""
        zoom = self.session.zoom
        if zoom == self._applied_zoom:
            return
        self.resetTransform()
        self.scale(zoom, zoom)
        self._applied_zoom = zoom

    def wheelEvent(self, event):
        """Ctrl + wheel zooms; plain wheel scrolls."""
        if not (event.modifiers() & Qt.KeyboardModifier.ControlModifier):
            super().wheelEvent(event)
            return
        # Zoom step from settings. Default: 0.1 per scroll step
        step = get_settings().settings.canvas.zoom.wheel_step
        delta = event.angleDelta().y()
        self.session.set_zoom(self.session.zoom + (step if delta > 0 else -step))
        event.accept()

    def focusOutEvent(self, event):
        if self.session.controller.is_dragging:
            self.session.lose_pointer()
        super().focusOutEvent(event)

    def zoom_reset(self):
        """Reset zoom to 100%."""
        self.session.set_zoom(1.0)

    def zoom_in(self):
        step = get_settings().settings.canvas.zoom.wheel_step
        self.session.set_zoom(self.session.zoom + step)

    def zoom_out(self):
        step = get_settings().settings.canvas.zoom.wheel_step
        self.session.set_zoom(self.session.zoom - step)
