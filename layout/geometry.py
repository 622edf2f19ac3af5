"""
layout/geometry.py

Pure geometry for anchor-relative boxes: coordinate-space conversion,
containment clamping, move/resize application and hit-testing.

Coordinates:
    - A node's ``x, y`` is its anchor point in the parent's local space.
    - Its top-left in the parent's local space is ``x - anchor_x*w``.
    - Canvas (world) space composes those top-left offsets up to ROOT.
"""

from __future__ import annotations

from collections import deque
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from models import MIN_NODE_SIZE, ROOT, Node
from layout.store import NodeStore
from utils import clamp, round_half_up

Point = Tuple[float, float]
Rect = Tuple[float, float, float, float]


@dataclass(frozen=True)
class GeometrySnapshot:
    """Start-of-drag copy of a node's anchor position and size."""
    x: float
    y: float
    w: float
    h: float

    @classmethod
    def of(cls, node: Node) -> "GeometrySnapshot":
        return cls(node.x, node.y, node.w, node.h)


# ---------------------------------------------------------------------------
# Coordinate spaces
# ---------------------------------------------------------------------------

def local_top_left(node: Node) -> Point:
    """Top-left of *node*'s box in its parent's local space."""
    return (node.x - node.anchor_x * node.w, node.y - node.anchor_y * node.h)


def absolute_top_left(store: NodeStore, node_id: str) -> Point:
    """Canvas-space top-left of *node_id*, composing every ancestor's offset.

    ROOT and unknown ids resolve to the canvas origin.
    """
    node = store.get(node_id)
    if node is None:
        return (0.0, 0.0)
    ax, ay = local_top_left(node)
    for pid in store.ancestors(node_id):
        px, py = local_top_left(store.get(pid))
        ax += px
        ay += py
    return (ax, ay)


def absolute_anchor(store: NodeStore, node_id: str) -> Point:
    """Canvas-space position of *node_id*'s anchor point (its world anchor)."""
    node = store.get(node_id)
    if node is None:
        return (0.0, 0.0)
    px, py = absolute_top_left(store, node.parent_id) if node.parent_id != ROOT else (0.0, 0.0)
    return (px + node.x, py + node.y)


def parent_local(store: NodeStore, world: Point, parent_id: str) -> Point:
    """Convert a canvas-space point into *parent_id*'s local space."""
    px, py = absolute_top_left(store, parent_id) if parent_id != ROOT else (0.0, 0.0)
    return (world[0] - px, world[1] - py)


def absolute_rect(store: NodeStore, node_id: str) -> Rect:
    """Canvas-space ``(x, y, w, h)`` of *node_id*'s box."""
    node = store.get(node_id)
    if node is None:
        return (0.0, 0.0, float(store.canvas_w), float(store.canvas_h))
    x, y = absolute_top_left(store, node_id)
    return (x, y, node.w, node.h)


# ---------------------------------------------------------------------------
# Containment
# ---------------------------------------------------------------------------

def clamp_in_parent(node: Node, parent_w: float, parent_h: float,
                    min_size: float = MIN_NODE_SIZE) -> Node:
    """Force *node* inside a ``parent_w`` x ``parent_h`` box.

    Size is rounded and clamped into ``[min_size, parent dim]`` first, then
    the anchor position is rounded and clamped into the anchor-aware range
    ``[anchor*w, parent - (1-anchor)*w]``. Never fails, only saturates.
    """
    node.w = clamp(round_half_up(node.w), min_size, parent_w)
    node.h = clamp(round_half_up(node.h), min_size, parent_h)

    min_x = node.anchor_x * node.w
    max_x = parent_w - (1 - node.anchor_x) * node.w
    min_y = node.anchor_y * node.h
    max_y = parent_h - (1 - node.anchor_y) * node.h

    node.x = clamp(round_half_up(node.x), min_x, max_x)
    node.y = clamp(round_half_up(node.y), min_y, max_y)
    return node


def clamp_node(store: NodeStore, node: Node, min_size: float = MIN_NODE_SIZE) -> Node:
    """Clamp *node* into its current parent's box."""
    pw, ph = store.parent_size(node.parent_id)
    return clamp_in_parent(node, pw, ph, min_size)


def clamp_subtree(store: NodeStore, node_id: str, min_size: float = MIN_NODE_SIZE) -> None:
    """Clamp *node_id* and then its descendants, parents before children.

    With ``ROOT`` every node in the store is clamped.
    """
    children = store.children_map()
    queue = deque(children.get(ROOT, []) if node_id == ROOT else [node_id])
    while queue:
        node = store.get(queue.popleft())
        if node is None:
            continue
        clamp_node(store, node, min_size)
        queue.extend(children.get(node.id, []))


# ---------------------------------------------------------------------------
# Move / resize
# ---------------------------------------------------------------------------

def apply_move(node: Node, start: GeometrySnapshot, dx: float, dy: float,
               parent_size: Tuple[float, float], min_size: float = MIN_NODE_SIZE) -> Node:
    """Place *node* at its drag-start position plus the delta, then clamp."""
    node.x = start.x + dx
    node.y = start.y + dy
    return clamp_in_parent(node, parent_size[0], parent_size[1], min_size)


def apply_resize(node: Node, start: GeometrySnapshot, dx: float, dy: float, handle: str,
                 parent_size: Tuple[float, float], min_size: float = MIN_NODE_SIZE) -> Node:
    """Drag the edges named by *handle* by ``(dx, dy)`` from the start box.

    Only the implicated edges move. If the box would fall under
    ``min_size`` the moved edge is pinned ``min_size`` away from the
    opposite one. The anchor *fraction* is kept: ``x, y`` are reprojected
    from the new top-left, so the anchor point itself may shift.
    """
    tlx0 = start.x - node.anchor_x * start.w
    tly0 = start.y - node.anchor_y * start.h
    tlx, tly = tlx0, tly0
    brx, bry = tlx0 + start.w, tly0 + start.h

    move_left = "w" in handle
    move_right = "e" in handle
    move_top = "n" in handle
    move_bottom = "s" in handle

    if move_left:
        tlx = tlx0 + dx
    if move_right:
        brx = tlx0 + start.w + dx
    if move_top:
        tly = tly0 + dy
    if move_bottom:
        bry = tly0 + start.h + dy

    if brx - tlx < min_size:
        if move_left:
            tlx = brx - min_size
        else:
            brx = tlx + min_size
    if bry - tly < min_size:
        if move_top:
            tly = bry - min_size
        else:
            bry = tly + min_size

    node.w = round_half_up(brx - tlx)
    node.h = round_half_up(bry - tly)
    node.x = tlx + node.anchor_x * node.w
    node.y = tly + node.anchor_y * node.h
    return clamp_in_parent(node, parent_size[0], parent_size[1], min_size)


# ---------------------------------------------------------------------------
# Resize handles
# ---------------------------------------------------------------------------

def handle_rects(w: float, h: float, size: float = 8.0) -> Dict[str, Rect]:
    """Node-local ``(x, y, w, h)`` squares for the 8 resize handles."""
    half = size / 2.0
    centres = {
        "nw": (0.0, 0.0),
        "n": (w / 2.0, 0.0),
        "ne": (w, 0.0),
        "e": (w, h / 2.0),
        "se": (w, h),
        "s": (w / 2.0, h),
        "sw": (0.0, h),
        "w": (0.0, h / 2.0),
    }
    return {k: (cx - half, cy - half, size, size) for k, (cx, cy) in centres.items()}


def handle_at(w: float, h: float, local_x: float, local_y: float, size: float = 8.0) -> Optional[str]:
    """Handle id under a node-local point, or None. Corners win over edges."""
    rects = handle_rects(w, h, size)
    for name in ("nw", "ne", "se", "sw", "n", "e", "s", "w"):
        rx, ry, rw, rh = rects[name]
        if rx <= local_x <= rx + rw and ry <= local_y <= ry + rh:
            return name
    return None


# ---------------------------------------------------------------------------
# Hit testing
# ---------------------------------------------------------------------------

def paint_order(store: NodeStore, skip_subtree_of: Optional[str] = None) -> List[str]:
    """Node ids in draw order (parents under children, low z first)."""
    children = store.children_map()
    order: List[str] = []
    stack = list(reversed(children.get(ROOT, [])))
    while stack:
        node_id = stack.pop()
        if node_id == skip_subtree_of:
            continue
        order.append(node_id)
        stack.extend(reversed(children.get(node_id, [])))
    return order


def node_at(store: NodeStore, world: Point, skip_subtree_of: Optional[str] = None) -> Optional[str]:
    """Top-most rendered node whose box contains *world*, or None."""
    wx, wy = world
    for node_id in reversed(paint_order(store, skip_subtree_of)):
        x, y, w, h = absolute_rect(store, node_id)
        if x <= wx < x + w and y <= wy < y + h:
            return node_id
    return None


def find_drop_container(store: NodeStore, world: Point, exclude_id: Optional[str] = None) -> str:
    """Container that would receive a drop at *world*.

    The top-most rendered node under the point is found first (the dragged
    node's subtree is transparent), then the nearest container-capable
    node among it and its ancestors is returned; ROOT if there is none.
    """
    hit = node_at(store, world, skip_subtree_of=exclude_id)
    if hit is None:
        return ROOT
    for candidate in [hit] + store.ancestors(hit):
        node = store.get(candidate)
        if node is not None and node.is_container:
            return candidate
    return ROOT
