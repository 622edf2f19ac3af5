"""
lua_export.py

Export a layout to a Roblox Lua script that rebuilds the ScreenGui tree.

Output is deterministic: parents are always created before their
children, siblings follow ascending z-order, and identical store state
yields byte-identical text.
"""

from __future__ import annotations

import logging
import re
from collections import deque
from typing import Any, Dict, List, Set

from models import ROOT, ExtensionObject, Node, OutputMode, ProjectMeta, RuntimeParent
from layout.store import NodeStore
from utils import (
    RGB,
    clamp,
    color_from_record,
    escape_lua_string,
    format_number,
    round_half_up,
    safe_lua_ident,
    to_number,
)

log = logging.getLogger(__name__)

SCREEN_GUI_VAR = "screenGui"

# Names the generated script already uses at top level.
RESERVED_NAMES = ("game", "workspace", "script", "player", SCREEN_GUI_VAR)


def lua_bool(b: Any) -> str:
    return "true" if b else "false"


def format_color3(rgb: RGB) -> str:
    return f"Color3.fromRGB({rgb[0]}, {rgb[1]}, {rgb[2]})"


def udim2(w: Any, h: Any) -> str:
    return f"UDim2.new(0, {round_half_up(w)}, 0, {round_half_up(h)})"


def udim(v: Any) -> str:
    return f"UDim.new(0, {round_half_up(v)})"


# ---------------------------------------------------------------------------
# Extension objects
# ---------------------------------------------------------------------------

def _extension_lines(ext: ExtensionObject) -> List[str]:
    """Property assignments for one extension; ``{v}`` stands for its variable.

    Only the documented keys of each kind are read; anything else in the
    property bag is ignored.
    """
    p = ext.props if isinstance(ext.props, dict) else {}

    def num(key, default):
        return to_number(p.get(key), default)

    if ext.kind == "UICorner":
        return [f"{{v}}.CornerRadius = {udim(num('cornerRadius', 8))}"]
    if ext.kind == "UIStroke":
        color = color_from_record(p.get("color"), (255, 255, 255))
        transparency = clamp(num("transparency", 0.2), 0.0, 1.0)
        return [
            f"{{v}}.Thickness = {round_half_up(num('thickness', 2))}",
            f"{{v}}.Color = {format_color3(color)}",
            f"{{v}}.Transparency = {transparency:.2f}",
        ]
    if ext.kind == "UIAspectRatioConstraint":
        return [f"{{v}}.AspectRatio = {format_number(num('aspectRatio', 1.0))}"]
    if ext.kind == "UITextSizeConstraint":
        return [
            f"{{v}}.MinTextSize = {round_half_up(num('minTextSize', 8))}",
            f"{{v}}.MaxTextSize = {round_half_up(num('maxTextSize', 48))}",
        ]
    if ext.kind == "UISizeConstraint":
        return [
            f"{{v}}.MinSize = Vector2.new({round_half_up(num('minW', 0))}, {round_half_up(num('minH', 0))})",
            f"{{v}}.MaxSize = Vector2.new({round_half_up(num('maxW', 0))}, {round_half_up(num('maxH', 0))})",
        ]
    if ext.kind == "UIScale":
        return [f"{{v}}.Scale = {format_number(num('scale', 1.0))}"]
    if ext.kind == "UIPadding":
        return [
            f"{{v}}.PaddingLeft = {udim(num('left', 0))}",
            f"{{v}}.PaddingRight = {udim(num('right', 0))}",
            f"{{v}}.PaddingTop = {udim(num('top', 0))}",
            f"{{v}}.PaddingBottom = {udim(num('bottom', 0))}",
        ]
    # Layout objects (list/grid/page/table) and gradients export bare.
    return []


# ---------------------------------------------------------------------------
# Naming
# ---------------------------------------------------------------------------

class _Namer:
    """Hands out unique Lua locals for one export run."""

    def __init__(self, mode: str):
        self.mode = mode
        self.taken: Set[str] = set(RESERVED_NAMES)
        self.by_id: Dict[str, str] = {}
        self._counter = 0

    def _claim(self, base: str) -> str:
        name, i = base, 2
        while name in self.taken:
            name = f"{base}{i}"
            i += 1
        self.taken.add(name)
        return name

    def node_var(self, node: Node) -> str:
        if node.id in self.by_id:
            return self.by_id[node.id]
        if self.mode == OutputMode.VARIABLES:
            base = safe_lua_ident(re.sub(r"\s+", "", node.display_name))
            base = base[:1].lower() + base[1:]
        else:
            self._counter += 1
            base = f"{node.kind.lower()}_{self._counter}"
        name = self._claim(base)
        self.by_id[node.id] = name
        return name

    def extension_var(self, owner_var: str, ext: ExtensionObject) -> str:
        kind = safe_lua_ident(ext.kind).lower()
        if self.mode == OutputMode.VARIABLES:
            return self._claim(f"{owner_var}_{kind}")
        return self._claim(f"ui_{kind}")


# ---------------------------------------------------------------------------
# Emission order
# ---------------------------------------------------------------------------

def emission_order(store: NodeStore) -> List[str]:
    """Breadth-first from ROOT, siblings in ascending (z, id) order."""
    children = store.children_map()
    order: List[str] = []
    queue = deque(children.get(ROOT, []))
    seen: Set[str] = set()
    while queue:
        node_id = queue.popleft()
        if node_id in seen:
            continue
        seen.add(node_id)
        order.append(node_id)
        queue.extend(children.get(node_id, []))
    return order


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------

def generate_lua(store: NodeStore, project: ProjectMeta) -> str:
    """Build the Lua script that recreates *store*'s tree at runtime.

    Args:
        store: Layout to export.
        project: Project metadata (root gui name, reset flag, runtime
            parent, output mode).

    Returns:
        Script text without trailing whitespace.
    """
    use_vars = project.output_mode != OutputMode.NESTED
    gui_name = (project.gui_name or "").strip() or "ScreenGui"
    pfx = "" if use_vars else "  "
    namer = _Namer(OutputMode.VARIABLES if use_vars else OutputMode.NESTED)

    lines: List[str] = []

    def emit(s: str = "") -> None:
        lines.append(f"{pfx}{s}" if s else "")

    if not use_vars:
        lines.append("do")
    emit(f'local {SCREEN_GUI_VAR} = Instance.new("ScreenGui")')
    emit(f'{SCREEN_GUI_VAR}.Name = "{escape_lua_string(gui_name)}"')
    emit(f"{SCREEN_GUI_VAR}.ResetOnSpawn = {lua_bool(project.reset_on_spawn)}")
    if project.runtime_parent == RuntimeParent.CORE_GUI:
        emit(f'{SCREEN_GUI_VAR}.Parent = game:GetService("CoreGui")')
    else:
        emit("local player = game.Players.LocalPlayer")
        emit(f'{SCREEN_GUI_VAR}.Parent = player:WaitForChild("PlayerGui")')
    emit()

    emitted: Set[str] = {ROOT}

    def emit_node(node_id: str) -> None:
        if node_id in emitted:
            return
        node = store.get(node_id)
        if node is None:
            return
        emitted.add(node_id)
        if node.parent_id not in emitted:
            emit_node(node.parent_id)

        v = namer.node_var(node)
        emit(f'local {v} = Instance.new("{node.kind}")')
        emit(f'{v}.Name = "{escape_lua_string(node.display_name)}"')
        emit(f"{v}.Size = {udim2(node.w, node.h)}")
        pos_x = node.x - node.anchor_x * node.w
        pos_y = node.y - node.anchor_y * node.h
        emit(f"{v}.Position = {udim2(pos_x, pos_y)}")
        emit(f"{v}.AnchorPoint = Vector2.new({format_number(node.anchor_x)}, {format_number(node.anchor_y)})")
        emit(f"{v}.ZIndex = {round_half_up(node.z_index)}")
        emit(f"{v}.BackgroundColor3 = {format_color3(node.bg_color)}")
        emit(f"{v}.BackgroundTransparency = {clamp(1 - node.bg_alpha, 0.0, 1.0):.2f}")
        emit(f"{v}.BorderSizePixel = {1 if node.border else 0}")

        if node.is_textual:
            emit(f"{v}.TextColor3 = {format_color3(node.text_color)}")
            emit(f'{v}.Text = "{escape_lua_string(node.text)}"')
            emit(f"{v}.TextScaled = {lua_bool(node.text_scaled)}")
            emit(f"{v}.Font = Enum.Font.{node.font or 'SourceSansBold'}")

        if node.is_image_like:
            img = (node.image or "").strip()
            if img:
                emit(f'{v}.Image = "{escape_lua_string(img)}"')

        if node.is_scrollable:
            emit(f"{v}.CanvasSize = {udim2(node.canvas_w, node.canvas_h)}")
            emit(f"{v}.ScrollBarThickness = {round_half_up(node.scrollbar_thickness)}")

        for ext in node.extensions:
            ev = namer.extension_var(v, ext)
            emit(f'local {ev} = Instance.new("{ext.kind}")')
            for line in _extension_lines(ext):
                emit(line.replace("{v}", ev))
            emit(f"{ev}.Parent = {v}")

        parent_var = SCREEN_GUI_VAR if node.parent_id == ROOT else namer.by_id.get(node.parent_id, SCREEN_GUI_VAR)
        emit(f"{v}.Parent = {parent_var}")
        emit()

    for node_id in emission_order(store):
        emit_node(node_id)

    if not use_vars:
        lines.append("end")

    text = "\n".join(lines).rstrip()
    log.debug("generated %d lines for %d nodes", text.count("\n") + 1, len(store))
    return text


def suggested_filename(project: ProjectMeta) -> str:
    """File name offered when the script is downloaded."""
    return re.sub(r"[^\w\-]+", "_", project.gui_name or "ui") + ".lua"


def write_script(text: str, path: str) -> None:
    """Write generated script text to *path* as UTF-8."""
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)
