"""
properties/fields.py

Coercion and application of property-panel edits.

Every value arrives as whatever the widget produced (usually text) and is
coerced rather than rejected: non-numeric numbers become 0 (or the field's
default for integer kind fields), bad colours become white, an anchor is
parsed from ``"ax,ay"``. Each edit ends by clamping the node, and then its
descendants, back into their parents.
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Tuple

from models import DEFAULT_FONT, ROOT, Node, OutputMode, ProjectMeta, RuntimeParent
from layout.geometry import clamp_subtree
from layout.store import NodeStore
from utils import clamp, format_number, hex_to_rgb, parse_bool, rgb_to_hex, round_half_up, to_number

# Fields that apply to every kind
COMMON_FIELDS = (
    "name", "x", "y", "w", "h", "anchor", "z_index",
    "bg_color", "bg_alpha", "border",
)
TEXT_FIELDS = ("text", "text_color", "text_scaled", "font")
IMAGE_FIELDS = ("image",)
SCROLL_FIELDS = ("canvas_w", "canvas_h", "scrollbar_thickness")

NODE_FIELDS = COMMON_FIELDS + TEXT_FIELDS + IMAGE_FIELDS + SCROLL_FIELDS

PROJECT_FIELDS = ("gui_name", "reset_on_spawn", "runtime_parent", "output_mode")


def parse_anchor(value: Any) -> Tuple[float, float]:
    """Parse ``"ax,ay"`` (or a 2-sequence); each bad part becomes 0."""
    if isinstance(value, str):
        parts = value.split(",")
    elif isinstance(value, (list, tuple)):
        parts = list(value)
    else:
        parts = []
    parts = (parts + [None, None])[:2]
    return (
        clamp(to_number(parts[0], 0.0), 0.0, 1.0),
        clamp(to_number(parts[1], 0.0), 0.0, 1.0),
    )


def format_anchor(node: Node) -> str:
    return f"{format_number(node.anchor_x)},{format_number(node.anchor_y)}"


def field_applies(node: Node, field: str) -> bool:
    """Whether *field* exists for *node*'s kind."""
    if field in COMMON_FIELDS:
        return True
    if field in TEXT_FIELDS:
        return node.is_textual
    if field in IMAGE_FIELDS:
        return node.is_image_like
    if field in SCROLL_FIELDS:
        return node.is_scrollable
    return False


def apply_field(store: NodeStore, node: Node, field: str, value: Any) -> bool:
    """Write one coerced field value into *node* and clamp its subtree.

    Returns:
        False if the field is unknown or does not exist for the kind.
    """
    if not field_applies(node, field):
        return False

    if field == "name":
        node.name = str(value or "").strip() or node.kind
    elif field in ("x", "y", "w", "h"):
        setattr(node, field, to_number(value, 0.0))
    elif field == "anchor":
        node.anchor_x, node.anchor_y = parse_anchor(value)
    elif field == "z_index":
        node.z_index = max(1, round_half_up(to_number(value, 1)))
        store.normalize_z(node.parent_id)
    elif field == "bg_color":
        node.bg_color = hex_to_rgb(str(value or ""))
    elif field == "bg_alpha":
        node.bg_alpha = clamp(to_number(value, 0.0), 0.0, 1.0)
    elif field == "border":
        node.border = parse_bool(value)
    elif field == "text":
        node.text = "" if value is None else str(value)
    elif field == "text_color":
        node.text_color = hex_to_rgb(str(value or ""))
    elif field == "text_scaled":
        node.text_scaled = parse_bool(value)
    elif field == "font":
        node.font = str(value or "").strip() or DEFAULT_FONT
    elif field == "image":
        node.image = "" if value is None else str(value)
    elif field in SCROLL_FIELDS:
        setattr(node, field, max(0, round_half_up(to_number(value, 0))))

    clamp_subtree(store, node.id)
    return True


def parent_choices(store: NodeStore, node: Node) -> List[Tuple[str, str]]:
    """``(id, label)`` pairs the node may be parented to.

    ROOT first, then every container except the node and its descendants.
    """
    choices = [(ROOT, "ROOT (Canvas)")]
    for other in store.containers():
        if other.id == node.id or store.is_descendant(other.id, node.id):
            continue
        choices.append((other.id, f"{other.display_name} ({other.kind})"))
    return choices


def field_values(store: NodeStore, node: Optional[Node]) -> Optional[Dict[str, Any]]:
    """Mirror of *node* for the property panel (None when nothing is selected)."""
    if node is None:
        return None
    return {
        "id": node.id,
        "kind": node.kind,
        "name": node.name,
        "parent": node.parent_id,
        "parent_choices": parent_choices(store, node),
        "x": node.x,
        "y": node.y,
        "w": node.w,
        "h": node.h,
        "anchor": format_anchor(node),
        "z_index": node.z_index,
        "bg_color": rgb_to_hex(*node.bg_color),
        "bg_alpha": node.bg_alpha,
        "border": node.border,
        "text": node.text,
        "text_color": rgb_to_hex(*node.text_color),
        "text_scaled": node.text_scaled,
        "font": node.font,
        "image": node.image,
        "canvas_w": node.canvas_w,
        "canvas_h": node.canvas_h,
        "scrollbar_thickness": node.scrollbar_thickness,
        "extensions": [ext.to_dict() for ext in node.extensions],
        "is_container": node.is_container,
        "is_textual": node.is_textual,
        "is_image_like": node.is_image_like,
        "is_scrollable": node.is_scrollable,
    }


def apply_project_field(project: ProjectMeta, field: str, value: Any) -> bool:
    """Apply one project-level edit; unknown fields or values are ignored."""
    if field == "gui_name":
        project.gui_name = str(value or "").strip() or "ScreenGui"
    elif field == "reset_on_spawn":
        project.reset_on_spawn = parse_bool(value)
    elif field == "runtime_parent":
        if value not in (RuntimeParent.PLAYER_GUI, RuntimeParent.CORE_GUI):
            return False
        project.runtime_parent = value
    elif field == "output_mode":
        if value not in (OutputMode.VARIABLES, OutputMode.NESTED):
            return False
        project.output_mode = value
    else:
        return False
    return True


def coerce_extension_prop(default: Any, value: Any) -> Any:
    """Coerce an extension property edit to the type of its default value."""
    if isinstance(default, bool):
        return parse_bool(value)
    if isinstance(default, int):
        return round_half_up(to_number(value, default))
    if isinstance(default, float):
        return to_number(value, default)
    if isinstance(default, dict) and {"r", "g", "b"} <= set(default):
        if isinstance(value, dict):
            return value
        r, g, b = hex_to_rgb(str(value or ""))
        return {"r": r, "g": g, "b": b}
    return value
