"""
models.py

Data models and constants for the GuiForge layout designer.

Element kinds are described by a kind -> descriptor table so geometry,
rendering, the property panel and the Lua exporter all consult the same
capability flags instead of branching on kind names.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from utils import RGB, clamp, color_from_record, color_to_record, parse_bool, round_half_up, to_number

# Parent id of top-level nodes: the implicit, fixed-size design canvas.
ROOT = "ROOT"

MIN_NODE_SIZE = 20


# ----------------------------
# Element kind descriptors
# ----------------------------

@dataclass(frozen=True)
class KindDescriptor:
    """Capability flags and default-construction data for one element kind."""
    name: str
    is_container: bool = False
    is_textual: bool = False
    is_image_like: bool = False
    is_scrollable: bool = False
    size: Tuple[int, int] = (240, 90)
    bg_color: RGB = (50, 50, 55)
    border: bool = False
    text: str = ""
    canvas_size: Tuple[int, int] = (0, 0)
    scrollbar_thickness: int = 8


NODE_KINDS: Dict[str, KindDescriptor] = {
    "Frame": KindDescriptor(
        "Frame", is_container=True, size=(320, 180), bg_color=(38, 38, 44)),
    "ScrollingFrame": KindDescriptor(
        "ScrollingFrame", is_container=True, is_scrollable=True, size=(360, 220),
        bg_color=(35, 35, 42), canvas_size=(520, 360), scrollbar_thickness=10),
    "TextLabel": KindDescriptor(
        "TextLabel", is_textual=True, size=(300, 100), bg_color=(30, 30, 30),
        text="TextLabel"),
    "TextButton": KindDescriptor(
        "TextButton", is_textual=True, size=(280, 90), bg_color=(48, 48, 58),
        border=True, text="Button"),
    "TextBox": KindDescriptor(
        "TextBox", is_textual=True, size=(320, 80), bg_color=(28, 28, 34),
        border=True, text="Type here…"),
    "ImageLabel": KindDescriptor(
        "ImageLabel", is_image_like=True, size=(280, 180), bg_color=(26, 26, 32)),
    "ImageButton": KindDescriptor(
        "ImageButton", is_image_like=True, size=(280, 180), bg_color=(26, 26, 32),
        border=True),
    "ViewportFrame": KindDescriptor(
        "ViewportFrame", size=(320, 220), bg_color=(22, 22, 28), border=True),
}


def kind_descriptor(kind: str) -> KindDescriptor:
    """Look up the descriptor for *kind*; raises KeyError for unknown kinds."""
    return NODE_KINDS[kind]


FONTS = (
    "SourceSans", "SourceSansBold", "Gotham", "GothamBold", "Arial", "Code",
)
DEFAULT_FONT = "SourceSansBold"


# ----------------------------
# Extension objects
# ----------------------------

# Default property bag per extension kind.  The keys listed here are also
# the only keys the Lua exporter reads.
EXTENSION_DEFAULTS: Dict[str, Dict[str, Any]] = {
    "UIAspectRatioConstraint": {"aspectRatio": 1.0},
    "UICorner": {"cornerRadius": 8},
    "UIGradient": {},
    "UIGridLayout": {},
    "UIListLayout": {},
    "UIPadding": {"left": 0, "right": 0, "top": 0, "bottom": 0},
    "UIPageLayout": {},
    "UIScale": {"scale": 1.0},
    "UISizeConstraint": {"minW": 0, "minH": 0, "maxW": 0, "maxH": 0},
    "UIStroke": {"thickness": 2, "color": {"r": 255, "g": 255, "b": 255}, "transparency": 0.2},
    "UITableLayout": {},
    "UITextSizeConstraint": {"minTextSize": 8, "maxTextSize": 48},
}


@dataclass
class ExtensionObject:
    """A typed property-bag attachment with no geometry of its own."""
    id: str
    kind: str
    props: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def create(cls, kind: str, ext_id: str) -> "ExtensionObject":
        """Create an extension with the default property bag for *kind*."""
        if kind not in EXTENSION_DEFAULTS:
            raise KeyError(f"Unknown extension kind: {kind}")
        return cls(id=ext_id, kind=kind, props=copy.deepcopy(EXTENSION_DEFAULTS[kind]))

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "ExtensionObject":
        """Create from a persisted record (``{"id", "type", "props"}``)."""
        kind = d.get("type", d.get("kind"))
        if kind not in EXTENSION_DEFAULTS:
            raise ValueError(f"Unknown extension kind: {kind!r}")
        props = d.get("props")
        return cls(
            id=str(d.get("id") or ""),
            kind=kind,
            props=copy.deepcopy(props) if isinstance(props, dict) else {},
        )

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "type": self.kind, "props": copy.deepcopy(self.props)}


# ----------------------------
# Node model
# ----------------------------

@dataclass
class Node:
    """One placed element.

    ``x, y`` is the anchor point's position in the parent's local space;
    ``anchor_x, anchor_y`` are fractions of the node's own box.
    """
    id: str
    kind: str
    name: str
    parent_id: str = ROOT
    x: float = 0.0
    y: float = 0.0
    w: float = 240.0
    h: float = 90.0
    anchor_x: float = 0.5
    anchor_y: float = 0.5
    z_index: int = 1
    bg_color: RGB = (50, 50, 55)
    bg_alpha: float = 1.0
    border: bool = False
    text: str = ""
    text_color: RGB = (255, 255, 255)
    text_scaled: bool = True
    font: str = DEFAULT_FONT
    image: str = ""
    canvas_w: int = 0
    canvas_h: int = 0
    scrollbar_thickness: int = 8
    extensions: List[ExtensionObject] = field(default_factory=list)

    @property
    def descriptor(self) -> KindDescriptor:
        return NODE_KINDS[self.kind]

    @property
    def is_container(self) -> bool:
        return self.descriptor.is_container

    @property
    def is_textual(self) -> bool:
        return self.descriptor.is_textual

    @property
    def is_image_like(self) -> bool:
        return self.descriptor.is_image_like

    @property
    def is_scrollable(self) -> bool:
        return self.descriptor.is_scrollable

    @property
    def display_name(self) -> str:
        return self.name or self.kind

    @classmethod
    def create(
        cls,
        kind: str,
        node_id: str,
        parent_id: str = ROOT,
        parent_size: Tuple[float, float] = (980, 620),
        z_index: int = 1,
    ) -> "Node":
        """Build a node with the kind's defaults, centred in its parent.

        The result is not clamped; callers place it through the hierarchy
        editor, which clamps into the parent.
        """
        desc = kind_descriptor(kind)
        pw, ph = parent_size
        return cls(
            id=node_id,
            kind=kind,
            name=kind,
            parent_id=parent_id,
            x=round_half_up(pw * 0.5),
            y=round_half_up(ph * 0.5),
            w=desc.size[0],
            h=desc.size[1],
            z_index=z_index,
            bg_color=desc.bg_color,
            border=desc.border,
            text=desc.text,
            canvas_w=desc.canvas_size[0],
            canvas_h=desc.canvas_size[1],
            scrollbar_thickness=desc.scrollbar_thickness,
        )

    def copy(self) -> "Node":
        """Deep copy (extension objects included)."""
        return copy.deepcopy(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> "Node":
        """Create a Node from a persisted record.

        Lenient: unknown keys are ignored and missing or non-numeric values
        fall back to the kind's defaults.

        Raises:
            ValueError: If the record is not a dict, has no id, or names an
                unknown kind.
        """
        if not isinstance(d, dict):
            raise ValueError("node record is not an object")
        kind = d.get("type")
        if kind not in NODE_KINDS:
            raise ValueError(f"unknown node type: {kind!r}")
        node_id = d.get("id")
        if not node_id or not isinstance(node_id, str):
            raise ValueError("node record has no id")

        base = cls.create(kind, node_id)
        canvas = d.get("canvasSize") if isinstance(d.get("canvasSize"), dict) else {}
        extensions = []
        for rec in d.get("uiObjects") or []:
            if isinstance(rec, dict):
                try:
                    extensions.append(ExtensionObject.from_dict(rec))
                except ValueError:
                    continue

        parent_id = d.get("parentId")
        return cls(
            id=node_id,
            kind=kind,
            name=str(d.get("name") or kind),
            parent_id=parent_id if isinstance(parent_id, str) and parent_id else ROOT,
            x=to_number(d.get("x"), base.x),
            y=to_number(d.get("y"), base.y),
            w=to_number(d.get("w"), base.w),
            h=to_number(d.get("h"), base.h),
            anchor_x=clamp(to_number(d.get("anchorX"), 0.5), 0.0, 1.0),
            anchor_y=clamp(to_number(d.get("anchorY"), 0.5), 0.0, 1.0),
            z_index=max(1, round_half_up(to_number(d.get("zIndex"), 1))),
            bg_color=color_from_record(d.get("bgColor"), base.bg_color),
            bg_alpha=clamp(to_number(d.get("bgAlpha"), 1.0), 0.0, 1.0),
            border=parse_bool(d.get("border", base.border)),
            text=str(d.get("text") if d.get("text") is not None else base.text),
            text_color=color_from_record(d.get("textColor"), base.text_color),
            text_scaled=parse_bool(d.get("textScaled", base.text_scaled)),
            font=str(d.get("font") or DEFAULT_FONT),
            image=str(d.get("image") or ""),
            canvas_w=round_half_up(to_number(canvas.get("w"), base.canvas_w)),
            canvas_h=round_half_up(to_number(canvas.get("h"), base.canvas_h)),
            scrollbar_thickness=round_half_up(
                to_number(d.get("scrollBarThickness"), base.scrollbar_thickness)),
            extensions=extensions,
        )

    def to_dict(self) -> Dict[str, Any]:
        """Serialize with the persisted (camel-case) field names."""
        return {
            "id": self.id,
            "type": self.kind,
            "name": self.name,
            "parentId": self.parent_id,
            "x": self.x,
            "y": self.y,
            "w": self.w,
            "h": self.h,
            "anchorX": self.anchor_x,
            "anchorY": self.anchor_y,
            "zIndex": self.z_index,
            "bgColor": color_to_record(self.bg_color),
            "bgAlpha": self.bg_alpha,
            "border": self.border,
            "text": self.text,
            "textColor": color_to_record(self.text_color),
            "textScaled": self.text_scaled,
            "font": self.font,
            "image": self.image,
            "canvasSize": {"w": self.canvas_w, "h": self.canvas_h},
            "scrollBarThickness": self.scrollbar_thickness,
            "uiObjects": [ext.to_dict() for ext in self.extensions],
        }


# ----------------------------
# Project metadata
# ----------------------------

class OutputMode:
    """Naming modes of the Lua exporter."""
    VARIABLES = "variables"  # one meaningful local per node
    NESTED = "nested"        # everything inside a single do ... end block


class RuntimeParent:
    """Where the generated ScreenGui is parented at runtime."""
    PLAYER_GUI = "PlayerGui"
    CORE_GUI = "CoreGui"


@dataclass
class ProjectMeta:
    """Project-level settings stored alongside the node list."""
    gui_name: str = "HelloWorldGui"
    reset_on_spawn: bool = False
    runtime_parent: str = RuntimeParent.PLAYER_GUI
    output_mode: str = OutputMode.VARIABLES

    @classmethod
    def from_dict(cls, d: Any, fallback: Optional["ProjectMeta"] = None) -> "ProjectMeta":
        base = fallback or cls()
        if not isinstance(d, dict):
            return copy.copy(base)
        parent = d.get("parent", base.runtime_parent)
        mode = d.get("outputMode", base.output_mode)
        return cls(
            gui_name=str(d.get("guiName") or base.gui_name),
            reset_on_spawn=parse_bool(d.get("resetOnSpawn", base.reset_on_spawn)),
            runtime_parent=parent if parent in (RuntimeParent.PLAYER_GUI, RuntimeParent.CORE_GUI)
            else base.runtime_parent,
            output_mode=mode if mode in (OutputMode.VARIABLES, OutputMode.NESTED)
            else base.output_mode,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "guiName": self.gui_name,
            "resetOnSpawn": self.reset_on_spawn,
            "parent": self.runtime_parent,
            "outputMode": self.output_mode,
        }


# ----------------------------
# Resize handle constants
# ----------------------------

# Handle ids name the compass edges/corners they drag.
HANDLES = ("nw", "n", "ne", "e", "se", "s", "sw", "w")
