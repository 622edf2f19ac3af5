"""
layout/interaction.py

Pointer state machine that turns host pointer events into move, resize and
drop-to-reparent edits.

States:
    IDLE -> DRAG_MOVE    pointer-down on a node body
    IDLE -> DRAG_RESIZE  pointer-down on one of a node's 8 handles
    DRAG_* -> IDLE       pointer-up, or pointer tracking lost

Pointer positions arrive as raw canvas-relative screen coordinates. They
are divided by the zoom factor and converted into the dragged node's
*parent-local* space once at pointer-down, so every later delta is a plain
subtraction regardless of nesting depth or zoom.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, FrozenSet, Optional, Tuple

from models import MIN_NODE_SIZE
from layout.geometry import (
    GeometrySnapshot,
    apply_move,
    apply_resize,
    clamp_subtree,
    find_drop_container,
    parent_local,
)
from layout.hierarchy import ABOVE, BELOW, INSIDE, reparent
from layout.store import NodeStore
from utils import clamp

log = logging.getLogger(__name__)

Point = Tuple[float, float]

ZOOM_MIN = 0.5
ZOOM_MAX = 2.0

RIGHT_BUTTON = 2


class DragMode:
    """Interaction states."""
    IDLE = "idle"
    MOVE = "move"
    RESIZE = "resize"


@dataclass(frozen=True)
class PointerEvent:
    """Host-independent pointer input.

    Attributes:
        x, y: Raw pointer position relative to the canvas origin, in screen
            pixels (before zoom is removed).
        pointer_id: Identifier of the pointer (mouse, touch contact).
        button: 0 primary, 1 middle, 2 secondary.
        modifiers: Names of held modifier keys.
        target_id: Node whose body or handle is under the pointer, if any.
        handle: Resize handle id under the pointer, if any.
    """
    x: float
    y: float
    pointer_id: int = 0
    button: int = 0
    modifiers: FrozenSet[str] = field(default_factory=frozenset)
    target_id: Optional[str] = None
    handle: Optional[str] = None


@dataclass
class DragState:
    """Everything captured at pointer-down for one gesture."""
    mode: str = DragMode.IDLE
    node_id: Optional[str] = None
    handle: Optional[str] = None
    parent_id: Optional[str] = None
    start: Optional[GeometrySnapshot] = None
    start_pointer: Point = (0.0, 0.0)
    pointer_id: Optional[int] = None
    # Descendant geometry at resize start, restored before each re-clamp
    descendant_starts: Dict[str, GeometrySnapshot] = field(default_factory=dict)


class InteractionController:
    """Drag/resize state machine over one NodeStore.

    Args:
        store: The store being edited.
        on_select: Called with the picked node id (or None) on pointer-down.
        drop_target_finder: ``(store, world_point, dragged_id) -> parent id``
            hit-test used when a move ends; defaults to a geometric hit-test
            of the rendered scene.
        zoom_range: Allowed ``(min, max)`` zoom.
        min_size: Minimum node width/height.
    """

    def __init__(
        self,
        store: NodeStore,
        on_select: Optional[Callable[[Optional[str]], None]] = None,
        drop_target_finder: Optional[Callable[[NodeStore, Point, str], str]] = None,
        zoom_range: Tuple[float, float] = (ZOOM_MIN, ZOOM_MAX),
        min_size: float = MIN_NODE_SIZE,
    ):
        self.store = store
        self.on_select = on_select
        self.drop_target_finder = drop_target_finder or find_drop_container
        self.zoom_range = zoom_range
        self.min_size = min_size
        self._zoom = 1.0
        self.drag = DragState()

    # -- zoom ---------------------------------------------------------------

    @property
    def zoom(self) -> float:
        return self._zoom

    @zoom.setter
    def zoom(self, value: float) -> None:
        self._zoom = clamp(float(value), self.zoom_range[0], self.zoom_range[1])

    def to_world(self, raw: Point) -> Point:
        """Remove zoom from a raw canvas-relative pointer position."""
        return (raw[0] / self._zoom, raw[1] / self._zoom)

    # -- state --------------------------------------------------------------

    @property
    def state(self) -> str:
        return self.drag.mode

    @property
    def is_dragging(self) -> bool:
        return self.drag.mode != DragMode.IDLE

    def _local_pointer(self, event: PointerEvent) -> Point:
        return parent_local(self.store, self.to_world((event.x, event.y)), self.drag.parent_id)

    def _end(self) -> None:
        self.drag = DragState()

    # -- events -------------------------------------------------------------

    def pointer_down(self, event: PointerEvent) -> bool:
        """Start a move or resize gesture on the picked node.

        Returns:
            True if a drag started.
        """
        if event.button == RIGHT_BUTTON:
            return False
        if self.is_dragging:
            self._end()

        node = self.store.get(event.target_id)
        if node is None:
            if self.on_select:
                self.on_select(None)
            return False
        if self.on_select:
            self.on_select(node.id)

        self.drag = DragState(
            mode=DragMode.RESIZE if event.handle else DragMode.MOVE,
            node_id=node.id,
            handle=event.handle,
            parent_id=node.parent_id,
            start=GeometrySnapshot.of(node),
            pointer_id=event.pointer_id,
        )
        self.drag.start_pointer = self._local_pointer(event)
        if self.drag.mode == DragMode.RESIZE:
            self.drag.descendant_starts = {
                nid: GeometrySnapshot.of(self.store.get(nid))
                for nid in self.store.descendants(node.id)
            }
        log.debug("drag %s start on %s", self.drag.mode, node.id)
        return True

    def pointer_move(self, event: PointerEvent) -> bool:
        """Apply the tentative geometry for the latest pointer position.

        Returns:
            True if the dragged node's geometry was updated.
        """
        if not self.is_dragging or event.pointer_id != self.drag.pointer_id:
            return False
        node = self.store.get(self.drag.node_id)
        if node is None:
            self._end()
            return False

        lx, ly = self._local_pointer(event)
        dx = lx - self.drag.start_pointer[0]
        dy = ly - self.drag.start_pointer[1]
        psize = self.store.parent_size(node.parent_id)

        if self.drag.mode == DragMode.MOVE:
            apply_move(node, self.drag.start, dx, dy, psize, self.min_size)
        else:
            apply_resize(node, self.drag.start, dx, dy, self.drag.handle, psize, self.min_size)
            for nid, snap in self.drag.descendant_starts.items():
                child = self.store.get(nid)
                if child is not None:
                    child.x, child.y, child.w, child.h = snap.x, snap.y, snap.w, snap.h
            clamp_subtree(self.store, node.id, self.min_size)
        return True

    def pointer_up(self, event: PointerEvent) -> bool:
        """Finish the gesture; a move dropped over another container reparents.

        Returns:
            True if the node was reparented.
        """
        if not self.is_dragging or event.pointer_id != self.drag.pointer_id:
            return False
        mode = self.drag.mode
        node = self.store.get(self.drag.node_id)
        self._end()
        if node is None or mode != DragMode.MOVE:
            return False

        world = self.to_world((event.x, event.y))
        drop_parent = self.drop_target_finder(self.store, world, node.id)
        if (drop_parent != node.parent_id
                and drop_parent != node.id
                and not self.store.is_descendant(drop_parent, node.id)):
            return reparent(self.store, node.id, drop_parent)
        return False

    def lose_pointer(self) -> None:
        """Pointer tracking lost: end the drag and keep the last geometry."""
        if self.is_dragging:
            log.debug("pointer lost during %s of %s", self.drag.mode, self.drag.node_id)
        self._end()


def row_drop_position(row_height: float, y: float, can_contain: bool) -> str:
    """Where a hierarchy-row drop lands: "above", "below" or "inside".

    The middle half of a container's row means "inside"; otherwise the
    upper half is "above" and the lower half "below".
    """
    edge = row_height * 0.25
    if can_contain and edge < y < row_height - edge:
        return INSIDE
    return ABOVE if y <= row_height / 2 else BELOW
