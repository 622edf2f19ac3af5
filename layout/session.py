"""
layout/session.py

DesignerSession: the command surface the application shell talks to.

A session owns one NodeStore, the project metadata, the selection, the
pointer state machine and the last generated script. Each public command
runs to completion and then notifies listeners exactly once, so observers
never see a half-applied edit. Status text goes out separately through
notice listeners as ``(message, detail)``.
"""

from __future__ import annotations

import copy
import functools
import logging
import uuid
from collections import namedtuple
from typing import Any, Callable, Dict, List, Optional, Tuple

from models import EXTENSION_DEFAULTS, NODE_KINDS, ROOT, ExtensionObject, Node, ProjectMeta
from layout import hierarchy
from layout.interaction import InteractionController, PointerEvent
from layout.snapshot import (
    LOAD_FAILED_NOTICE,
    NOTHING_SAVED_NOTICE,
    SnapshotError,
    SnapshotStorage,
    deserialize,
    serialize,
)
from layout.store import NodeStore
from lua_export import generate_lua
from properties import fields
from utils import format_number

log = logging.getLogger(__name__)

TreeRow = namedtuple("TreeRow", ["id", "kind", "name", "z_index", "depth"])

DEFAULT_NODE_TEXT = "hello world"


def _new_id() -> str:
    return uuid.uuid4().hex


def command(func):
    """Run a session command, then notify listeners once."""
    @functools.wraps(func)
    def wrapper(self, *args, **kwargs):
        result = func(self, *args, **kwargs)
        self._notify()
        return result
    return wrapper


class DesignerSession:
    """One open design.

    Args:
        canvas_size: Size of the ROOT container.
        min_size: Minimum node width/height.
        duplicate_offset: Offset applied to duplicated nodes.
        zoom_range: Allowed zoom range.
        project_defaults: Metadata for new projects.
        id_factory: Returns fresh node and extension ids.
    """

    def __init__(
        self,
        canvas_size: Tuple[float, float] = (980, 620),
        min_size: float = 20,
        duplicate_offset: float = 12,
        zoom_range: Tuple[float, float] = (0.5, 2.0),
        project_defaults: Optional[ProjectMeta] = None,
        id_factory: Optional[Callable[[], str]] = None,
    ):
        self.store = NodeStore(canvas_size[0], canvas_size[1])
        self.min_size = min_size
        self.duplicate_offset = duplicate_offset
        self.project_defaults = project_defaults or ProjectMeta()
        self.project = copy.copy(self.project_defaults)
        self.new_id = id_factory or _new_id
        self.selected_id: Optional[str] = None
        self.show_safe_area = False
        self.script = ""
        self.status: Tuple[str, str] = ("Ready.", "")
        self.controller = InteractionController(
            self.store,
            on_select=self._select_quiet,
            zoom_range=zoom_range,
            min_size=min_size,
        )
        self._listeners: List[Callable[[], None]] = []
        self._notice_listeners: List[Callable[[str, str], None]] = []

    @classmethod
    def from_settings(cls, manager, id_factory=None) -> "DesignerSession":
        """Build a session from the application settings."""
        s = manager.settings
        p = s.project
        return cls(
            canvas_size=(s.canvas.size.width, s.canvas.size.height),
            min_size=s.canvas.edit.min_size,
            duplicate_offset=s.canvas.edit.duplicate_offset,
            zoom_range=(s.canvas.zoom.minimum, s.canvas.zoom.maximum),
            project_defaults=ProjectMeta.from_dict({
                "guiName": p.gui_name,
                "resetOnSpawn": p.reset_on_spawn,
                "parent": p.runtime_parent,
                "outputMode": p.output_mode,
            }),
            id_factory=id_factory,
        )

    # -- observers ----------------------------------------------------------

    def add_listener(self, callback: Callable[[], None]) -> None:
        self._listeners.append(callback)

    def add_notice_listener(self, callback: Callable[[str, str], None]) -> None:
        self._notice_listeners.append(callback)

    def _notify(self) -> None:
        for cb in list(self._listeners):
            cb()

    def _notice(self, message: str, detail: str = "") -> None:
        self.status = (message, detail)
        for cb in list(self._notice_listeners):
            cb(message, detail)

    # -- read-only views ----------------------------------------------------

    @property
    def selected(self) -> Optional[Node]:
        return self.store.get(self.selected_id)

    @property
    def zoom(self) -> float:
        return self.controller.zoom

    @property
    def export_enabled(self) -> bool:
        return bool(self.script.strip())

    def tree_rows(self) -> List[TreeRow]:
        """Hierarchy rows in pre-order, siblings in ascending z."""
        children = self.store.children_map()
        rows: List[TreeRow] = []
        stack = [(node_id, 0) for node_id in reversed(children.get(ROOT, []))]
        while stack:
            node_id, depth = stack.pop()
            node = self.store.get(node_id)
            rows.append(TreeRow(node.id, node.kind, node.display_name, node.z_index, depth))
            stack.extend((cid, depth + 1) for cid in reversed(children.get(node_id, [])))
        return rows

    def property_values(self) -> Optional[Dict[str, Any]]:
        return fields.field_values(self.store, self.selected)

    def project_values(self) -> Dict[str, Any]:
        return {
            "gui_name": self.project.gui_name,
            "reset_on_spawn": self.project.reset_on_spawn,
            "runtime_parent": self.project.runtime_parent,
            "output_mode": self.project.output_mode,
        }

    # -- selection ----------------------------------------------------------

    def _select_quiet(self, node_id: Optional[str]) -> None:
        node = self.store.get(node_id)
        self.selected_id = node.id if node else None
        if node is None:
            self._notice("Ready.")
        else:
            self._notice(f"Selected: {node.kind} ({node.display_name})", self._geometry_detail(node, z=True))

    @staticmethod
    def _geometry_detail(node: Node, z: bool = False) -> str:
        text = " ".join(
            f"{k}:{format_number(v)}" for k, v in (("x", node.x), ("y", node.y), ("w", node.w), ("h", node.h))
        )
        return f"{text} z:{node.z_index}" if z else text

    @command
    def select(self, node_id: Optional[str]) -> None:
        self._select_quiet(node_id)

    @command
    def clear_selection(self) -> None:
        self._select_quiet(None)

    # -- project ------------------------------------------------------------

    @command
    def new_project(self) -> None:
        """Reset to a single centred TextLabel and fresh project metadata."""
        self.controller.lose_pointer()
        self.store.clear()
        self.project = copy.copy(self.project_defaults)
        node = hierarchy.create_node(self.store, "TextLabel", self.new_id())
        node.text = DEFAULT_NODE_TEXT
        self.selected_id = node.id
        self.controller.zoom = 1.0
        self.show_safe_area = False
        self.script = generate_lua(self.store, self.project)
        self._notice("New project created.")

    @command
    def set_project_field(self, field: str, value: Any) -> bool:
        return fields.apply_project_field(self.project, field, value)

    @command
    def set_zoom(self, value: float) -> None:
        self.controller.zoom = value

    @command
    def set_show_safe_area(self, visible: bool) -> None:
        self.show_safe_area = bool(visible)

    # -- nodes --------------------------------------------------------------

    @command
    def create_node(self, kind: str) -> Optional[Node]:
        """Add a *kind* node at the centre of the canvas and select it."""
        if kind not in NODE_KINDS:
            return None
        node = hierarchy.create_node(self.store, kind, self.new_id())
        self._select_quiet(node.id)
        return node

    @command
    def delete_selected(self) -> int:
        """Delete the selection with its subtree; returns the removed count."""
        if self.selected_id is None:
            return 0
        removed = hierarchy.delete_subtree(self.store, self.selected_id)
        self.selected_id = None
        self._notice("Ready.")
        return len(removed)

    @command
    def duplicate_selected(self) -> Optional[Node]:
        if self.selected_id is None:
            return None
        dup = hierarchy.duplicate(
            self.store, self.selected_id, self.new_id(),
            offset=self.duplicate_offset, ext_id_factory=self.new_id,
        )
        if dup is not None:
            self._select_quiet(dup.id)
        return dup

    @command
    def move_up_selected(self) -> bool:
        if self.selected_id is None:
            return False
        return hierarchy.swap_with_neighbor(self.store, self.selected_id, hierarchy.UP)

    @command
    def move_down_selected(self) -> bool:
        if self.selected_id is None:
            return False
        return hierarchy.swap_with_neighbor(self.store, self.selected_id, hierarchy.DOWN)

    @command
    def reorder_drop(self, dragged_id: str, target_id: str, position: str) -> bool:
        """Handle a hierarchy-view drop of *dragged_id* onto *target_id*.

        ``"inside"`` reparents (the target must be a container, or ROOT);
        ``"above"``/``"below"`` reorder next to the target.
        """
        dragged = self.store.get(dragged_id)
        if dragged is None or dragged_id == target_id:
            return False
        if self.store.is_descendant(target_id, dragged_id):
            return False

        if position == hierarchy.INSIDE:
            if target_id == ROOT:
                target_label = "ROOT"
            else:
                target = self.store.get(target_id)
                if target is None or not target.is_container:
                    return False
                target_label = target.display_name
            if not hierarchy.reparent(self.store, dragged_id, target_id):
                return False
            self._notice(f"Parented {dragged.display_name} → {target_label}")
            return True

        if position not in (hierarchy.ABOVE, hierarchy.BELOW):
            return False
        if not hierarchy.reorder_relative(self.store, dragged_id, target_id, position):
            return False
        self._notice("Reordered (Explorer order = ZIndex).")
        return True

    @command
    def set_property(self, field: str, value: Any) -> bool:
        """Apply a property-panel edit to the selected node."""
        node = self.selected
        if node is None:
            return False
        if field == "parent":
            return hierarchy.reparent(self.store, node.id, str(value))
        if not fields.apply_field(self.store, node, field, value):
            return False
        self._notice(f"Editing: {node.kind}", self._geometry_detail(node))
        return True

    # -- extensions ---------------------------------------------------------

    @command
    def add_extension(self, kind: str) -> Optional[ExtensionObject]:
        if kind not in EXTENSION_DEFAULTS:
            return None
        node = self.selected
        if node is None:
            self._notice("Select an instance first.")
            return None
        ext = ExtensionObject.create(kind, self.new_id())
        node.extensions.append(ext)
        self._notice(f"Added {kind}.")
        return ext

    @command
    def remove_extension(self, node_id: str, ext_id: str) -> bool:
        node = self.store.get(node_id)
        if node is None:
            return False
        before = len(node.extensions)
        node.extensions = [e for e in node.extensions if e.id != ext_id]
        return len(node.extensions) != before

    @command
    def set_extension_prop(self, node_id: str, ext_id: str, key: str, value: Any) -> bool:
        """Set one documented property of an extension object."""
        node = self.store.get(node_id)
        if node is None:
            return False
        for ext in node.extensions:
            if ext.id == ext_id:
                defaults = EXTENSION_DEFAULTS.get(ext.kind, {})
                if key not in defaults:
                    return False
                ext.props[key] = fields.coerce_extension_prop(defaults[key], value)
                return True
        return False

    # -- pointer ------------------------------------------------------------

    @command
    def pointer_down(self, event: PointerEvent) -> bool:
        return self.controller.pointer_down(event)

    @command
    def pointer_move(self, event: PointerEvent) -> bool:
        moved = self.controller.pointer_move(event)
        node = self.store.get(self.controller.drag.node_id)
        if moved and node is not None:
            self._notice(f"Editing: {node.kind}", self._geometry_detail(node))
        return moved

    @command
    def pointer_up(self, event: PointerEvent) -> bool:
        node_id = self.controller.drag.node_id
        reparented = self.controller.pointer_up(event)
        node = self.store.get(node_id)
        if reparented and node is not None:
            parent = self.store.get(node.parent_id)
            label = parent.display_name if parent else "ROOT"
            self._notice(f"Parented {node.display_name} → {label}")
        return reparented

    @command
    def lose_pointer(self) -> None:
        self.controller.lose_pointer()

    # -- export -------------------------------------------------------------

    @command
    def export_script(self) -> str:
        self.script = generate_lua(self.store, self.project)
        self._notice("Exported Lua.")
        return self.script

    # -- persistence --------------------------------------------------------

    def snapshot(self) -> Dict[str, Any]:
        return serialize(self.store, self.project, self.selected_id,
                         self.controller.zoom, self.show_safe_area)

    @command
    def load_snapshot(self, data: Any) -> bool:
        """Replace the design with a parsed snapshot.

        A structurally broken snapshot leaves everything unchanged and
        raises the load-failed notice instead of an exception.
        """
        try:
            loaded = deserialize(
                data,
                canvas_size=(self.store.canvas_w, self.store.canvas_h),
                fallback_project=self.project,
                min_size=self.min_size,
            )
        except SnapshotError as e:
            log.warning("snapshot rejected: %s", e)
            self._notice(LOAD_FAILED_NOTICE)
            return False

        self.controller.lose_pointer()
        self.store.replace_all(loaded.store.nodes())
        self.project = loaded.project
        self.selected_id = loaded.selected_id
        self.controller.zoom = loaded.zoom
        self.show_safe_area = loaded.show_safe_area
        detail = f"{len(loaded.dropped)} record(s) dropped" if loaded.dropped else ""
        self._notice("Loaded.", detail)
        return True

    def save(self, storage: SnapshotStorage) -> None:
        """Write the snapshot; I/O errors propagate to the caller."""
        storage.write(self.snapshot())
        self._notice("Saved.")
        self._notify()

    def load(self, storage: SnapshotStorage) -> bool:
        try:
            data = storage.read()
        except SnapshotError as e:
            log.warning("snapshot unreadable: %s", e)
            self._notice(LOAD_FAILED_NOTICE)
            self._notify()
            return False
        if data is None:
            self._notice(NOTHING_SAVED_NOTICE)
            self._notify()
            return False
        return self.load_snapshot(data)
