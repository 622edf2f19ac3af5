"""
canvas package

PyQt6 graphics item, scene, and view for the design canvas.
"""

from canvas.items import NodeItem
from canvas.scene import DesignScene
from canvas.view import DesignView

__all__ = [
    "NodeItem",
    "DesignScene",
    "DesignView",
]
