"""
layout/hierarchy.py

Structural edits of the node tree: create, reparent, sibling reorder,
neighbour swap, subtree delete and duplicate.

Every function leaves the store satisfying the tree, containment and dense
z-order invariants. Rejected edits are silent no-ops reported through the
return value, never exceptions.
"""

from __future__ import annotations

import logging
from typing import Optional, Set

from models import ROOT, ExtensionObject, Node
from layout.geometry import absolute_anchor, absolute_top_left, clamp_node, clamp_subtree
from layout.store import NodeStore
from utils import clamp

log = logging.getLogger(__name__)

ABOVE = "above"
BELOW = "below"
INSIDE = "inside"

UP = "up"
DOWN = "down"


def create_node(store: NodeStore, kind: str, node_id: str, parent_id: str = ROOT) -> Node:
    """Create a *kind* node centred in *parent_id*, on top of its siblings."""
    node = Node.create(
        kind,
        node_id,
        parent_id=parent_id,
        parent_size=store.parent_size(parent_id),
        z_index=store.next_z_index(parent_id),
    )
    clamp_node(store, node)
    store.add(node)
    return node


def can_reparent(store: NodeStore, node_id: str, new_parent_id: str) -> bool:
    """Whether moving *node_id* under *new_parent_id* is a legal, real change."""
    node = store.get(node_id)
    if node is None:
        return False
    if node.parent_id == new_parent_id or new_parent_id == node_id:
        return False
    if new_parent_id != ROOT:
        target = store.get(new_parent_id)
        if target is None or not target.is_container:
            return False
        if store.is_descendant(new_parent_id, node_id):
            return False
    return True


def reparent(store: NodeStore, node_id: str, new_parent_id: str) -> bool:
    """Move *node_id* under *new_parent_id* keeping its world anchor fixed.

    The node goes to the front of the new parent's draw order and is
    clamped (with its subtree) into the new box; both sibling sets are
    renormalised.

    Returns:
        True if the node moved; False for a rejected or no-op request.
    """
    if not can_reparent(store, node_id, new_parent_id):
        log.debug("reparent %s -> %s rejected", node_id, new_parent_id)
        return False

    node = store.get(node_id)
    old_parent = node.parent_id
    world_x, world_y = absolute_anchor(store, node_id)

    node.parent_id = new_parent_id
    new_tl = absolute_top_left(store, new_parent_id) if new_parent_id != ROOT else (0.0, 0.0)
    node.x = world_x - new_tl[0]
    node.y = world_y - new_tl[1]
    node.z_index = store.next_z_index(new_parent_id)

    clamp_subtree(store, node.id)
    store.normalize_z(new_parent_id)
    store.normalize_z(old_parent)
    return True


def reorder_relative(store: NodeStore, dragged_id: str, target_id: str, position: str) -> bool:
    """Drop *dragged_id* directly above or below *target_id* in draw order.

    "above" means immediately before the target in the post-removal
    sequence, "below" immediately after. A dragged node from another
    parent is reparented to the target's parent first.
    """
    dragged = store.get(dragged_id)
    target = store.get(target_id)
    if dragged is None or target is None or dragged_id == target_id:
        return False

    pid = target.parent_id
    if dragged.parent_id != pid:
        reparent(store, dragged_id, pid)

    siblings = store.children_of(pid)
    ids = [n.id for n in siblings]
    if dragged_id not in ids or target_id not in ids:
        return False
    d_idx = ids.index(dragged_id)
    t_idx = ids.index(target_id)

    item = siblings.pop(d_idx)
    if position == ABOVE:
        insert_at = t_idx + (-1 if d_idx < t_idx else 0)
    else:
        insert_at = t_idx + (0 if d_idx < t_idx else 1)
    insert_at = int(clamp(insert_at, 0, len(siblings)))
    siblings.insert(insert_at, item)

    for i, node in enumerate(siblings):
        node.z_index = i + 1
    return True


def swap_with_neighbor(store: NodeStore, node_id: str, direction: str) -> bool:
    """Exchange z with the adjacent sibling; "up" is the lower-z neighbour."""
    node = store.get(node_id)
    if node is None:
        return False
    siblings = store.children_of(node.parent_id)
    idx = [n.id for n in siblings].index(node_id)
    other_idx = idx - 1 if direction == UP else idx + 1
    if other_idx < 0 or other_idx >= len(siblings):
        return False
    other = siblings[other_idx]
    node.z_index, other.z_index = other.z_index, node.z_index
    store.normalize_z(node.parent_id)
    return True


def subtree_ids(store: NodeStore, node_id: str) -> Set[str]:
    """*node_id* plus every descendant, by fixed-point expansion."""
    closure = {node_id}
    changed = True
    while changed:
        changed = False
        for node in store.nodes():
            if node.parent_id in closure and node.id not in closure:
                closure.add(node.id)
                changed = True
    return closure


def delete_subtree(store: NodeStore, node_id: str) -> Set[str]:
    """Remove *node_id* and all of its descendants in one step.

    Returns:
        The removed ids (empty if *node_id* is unknown).
    """
    node = store.get(node_id)
    if node is None:
        return set()
    old_parent = node.parent_id
    closure = subtree_ids(store, node_id)
    store.remove_many(closure)
    store.normalize_z(old_parent)
    return closure


def duplicate(store: NodeStore, node_id: str, new_id: str, offset: float = 12,
              ext_id_factory=None) -> Optional[Node]:
    """Copy *node_id* (not its children) next to the original, on top.

    Args:
        store: Store to insert into.
        node_id: Node to copy.
        new_id: Id for the copy.
        offset: Position offset applied on both axes.
        ext_id_factory: Callable returning fresh extension ids; the copy's
            extensions keep their ids when omitted.
    """
    node = store.get(node_id)
    if node is None:
        return None
    dup = node.copy()
    dup.id = new_id
    dup.name = node.display_name + "Copy"
    dup.z_index = store.next_z_index(dup.parent_id)
    dup.x += offset
    dup.y += offset
    if ext_id_factory is not None:
        dup.extensions = [
            ExtensionObject(id=ext_id_factory(), kind=e.kind, props=e.props)
            for e in dup.extensions
        ]
    clamp_node(store, dup)
    store.add(dup)
    return dup
