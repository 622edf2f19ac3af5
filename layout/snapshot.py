"""
layout/snapshot.py

Serialize a layout to a JSON-ready snapshot and load one back, repairing
whatever a hand-edited or older save gets wrong.

Snapshot shape::

    {"version": 1,
     "project": {"guiName", "resetOnSpawn", "parent", "outputMode"},
     "nodes": [<node record>, ...],
     "selectedId": "<id>" | null,
     "zoom": 1.0,
     "showSafeArea": false}

Structural problems (not an object, ``nodes`` missing or not an array) fail
the whole load. Problems inside individual records are repaired or the
record is dropped.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from models import MIN_NODE_SIZE, ROOT, Node, ProjectMeta
from layout.geometry import absolute_anchor, clamp_subtree
from layout.interaction import ZOOM_MAX, ZOOM_MIN
from layout.store import NodeStore
from schemas import validate_node_record, validate_snapshot
from utils import clamp, sort_node_keys, to_number

log = logging.getLogger(__name__)

SNAPSHOT_VERSION = 1

LOAD_FAILED_NOTICE = "Load failed (corrupt save)."
NOTHING_SAVED_NOTICE = "Nothing saved yet."


class SnapshotError(ValueError):
    """A snapshot is structurally unusable; nothing was loaded."""


@dataclass
class SnapshotLoad:
    """Result of a successful :func:`deserialize`.

    Attributes:
        store: Repaired store, ready to swap in.
        project: Project metadata.
        selected_id: Saved selection, None if it no longer exists.
        zoom: Saved zoom, clamped to the allowed range.
        dropped: One message per record that had to be discarded.
        rehomed: Ids whose parent link was broken and reset to ROOT.
        show_safe_area: Whether the safe-area guide was visible.
    """
    store: NodeStore
    project: ProjectMeta
    selected_id: Optional[str] = None
    zoom: float = 1.0
    dropped: List[str] = field(default_factory=list)
    rehomed: List[str] = field(default_factory=list)
    show_safe_area: bool = False


# ---------------------------------------------------------------------------
# Serialize
# ---------------------------------------------------------------------------

def serialize(store: NodeStore, project: ProjectMeta, selected_id: Optional[str] = None,
              zoom: float = 1.0, show_safe_area: bool = False) -> Dict[str, Any]:
    """Build the snapshot document for *store* (nodes in store order)."""
    return {
        "version": SNAPSHOT_VERSION,
        "project": project.to_dict(),
        "nodes": [sort_node_keys(n.to_dict()) for n in store.nodes()],
        "selectedId": selected_id if selected_id in store else None,
        "zoom": zoom,
        "showSafeArea": show_safe_area,
    }


# ---------------------------------------------------------------------------
# Deserialize / repair
# ---------------------------------------------------------------------------

def _parse_records(records: List[Any]) -> Tuple[List[Node], List[str]]:
    nodes: List[Node] = []
    dropped: List[str] = []
    seen = set()
    for i, rec in enumerate(records):
        ok, errors = validate_node_record(rec)
        if not ok:
            dropped.append(f"nodes[{i}]: {errors[0]}")
            continue
        try:
            node = Node.from_dict(rec)
        except ValueError as e:
            dropped.append(f"nodes[{i}]: {e}")
            continue
        if node.id in seen:
            dropped.append(f"nodes[{i}]: duplicate id {node.id!r}")
            continue
        seen.add(node.id)
        nodes.append(node)
    return nodes, dropped


def _on_cycle(store: NodeStore, node_id: str) -> bool:
    """True if following parent links from *node_id* leads back to it."""
    seen = set()
    node = store.get(node_id)
    pid = node.parent_id if node else ROOT
    while pid != ROOT and pid not in seen:
        if pid == node_id:
            return True
        seen.add(pid)
        parent = store.get(pid)
        if parent is None:
            return False
        pid = parent.parent_id
    return False


def repair_store(store: NodeStore, min_size: float = MIN_NODE_SIZE) -> List[str]:
    """Restore the tree, containment and z-order invariants in place.

    Dangling parent links and cycles are reset to ROOT (local position
    kept, since no meaningful world anchor exists); children of nodes that
    cannot contain others are moved to ROOT keeping their world anchor.
    Every node is then clamped top-down and every sibling set is
    renumbered 1..N.

    Returns:
        Ids whose parent was changed.
    """
    rehomed: List[str] = []

    for node in store.nodes():
        if node.parent_id != ROOT and node.parent_id not in store:
            node.parent_id = ROOT
            rehomed.append(node.id)

    for node in store.nodes():
        if node.parent_id != ROOT and _on_cycle(store, node.id):
            node.parent_id = ROOT
            rehomed.append(node.id)

    for node in store.nodes():
        parent = store.get(node.parent_id)
        if parent is not None and not parent.is_container:
            wx, wy = absolute_anchor(store, node.id)
            node.parent_id = ROOT
            node.x, node.y = wx, wy
            rehomed.append(node.id)

    clamp_subtree(store, ROOT, min_size)

    store.normalize_z(ROOT)
    for node in store.nodes():
        store.normalize_z(node.id)

    if rehomed:
        log.debug("re-homed %d node(s) to ROOT: %s", len(rehomed), ", ".join(rehomed))
    return rehomed


def deserialize(
    data: Any,
    canvas_size: Tuple[float, float] = (980, 620),
    fallback_project: Optional[ProjectMeta] = None,
    min_size: float = MIN_NODE_SIZE,
) -> SnapshotLoad:
    """Validate and repair a snapshot document.

    Args:
        data: Parsed JSON.
        canvas_size: ROOT box size for the new store.
        fallback_project: Metadata used for missing project fields.
        min_size: Minimum node size for clamping.

    Returns:
        The repaired layout; the caller decides whether to apply it.

    Raises:
        SnapshotError: If the document is structurally invalid.
    """
    ok, errors = validate_snapshot(data)
    if not ok:
        raise SnapshotError("; ".join(errors))

    nodes, dropped = _parse_records(data["nodes"])
    store = NodeStore(canvas_size[0], canvas_size[1])
    store.replace_all(nodes)
    rehomed = repair_store(store, min_size)

    selected = data.get("selectedId")
    zoom = data.get("zoom")
    for msg in dropped:
        log.debug("dropped %s", msg)

    return SnapshotLoad(
        store=store,
        project=ProjectMeta.from_dict(data.get("project"), fallback_project),
        selected_id=selected if selected in store else None,
        zoom=clamp(to_number(zoom, 1.0), ZOOM_MIN, ZOOM_MAX) if zoom is not None else 1.0,
        dropped=dropped,
        rehomed=rehomed,
        show_safe_area=bool(data.get("showSafeArea", False)),
    )


# ---------------------------------------------------------------------------
# Storage
# ---------------------------------------------------------------------------

class SnapshotStorage:
    """A snapshot kept as one JSON file.

    Args:
        path: File location; its directory is created on first write.
    """

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    @classmethod
    def from_settings(cls, manager) -> "SnapshotStorage":
        """Storage at the configured workspace snapshot path."""
        return cls(manager.get_snapshot_path())

    def exists(self) -> bool:
        return self.path.is_file()

    def read(self) -> Optional[Any]:
        """Parsed document, or None when nothing has been saved.

        Raises:
            SnapshotError: If the file exists but is not valid JSON.
        """
        if not self.exists():
            return None
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise SnapshotError(f"{self.path}: {e}") from e

    def write(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with open(self.path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2, ensure_ascii=False)
            f.write("\n")
