"""
utils.py

Utility functions for the GuiForge application.
"""

from __future__ import annotations

import math
import re
from typing import Any, Dict, Tuple

RGB = Tuple[int, int, int]


def clamp(v: float, lo: float, hi: float) -> float:
    """Clamp *v* into ``[lo, hi]``; *lo* wins when the range is empty."""
    return max(lo, min(hi, v))


def to_number(value: Any, default: float = 0.0) -> float:
    """
    Coerce an arbitrary field value to a finite float.

    Non-numeric input (empty strings, ``None``, garbage text, NaN) becomes
    *default* instead of raising.

    Args:
        value: Value typed into a property field or read from a snapshot
        default: Value used when coercion fails

    Returns:
        A finite float
    """
    if isinstance(value, bool):
        return float(value)
    try:
        num = float(value)
    except (TypeError, ValueError):
        return float(default)
    if math.isnan(num) or math.isinf(num):
        return float(default)
    return num


def round_half_up(value: Any) -> int:
    """Round to the nearest integer with halves going up (``2.5 -> 3``, ``-2.5 -> -2``)."""
    return int(math.floor(to_number(value) + 0.5))


def parse_bool(value: Any) -> bool:
    """Booleans pass through; strings are true only for "true"/"1"/"yes"/"on"."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes", "on")
    return bool(value)


def hex_to_rgb(s: str, fallback: RGB = (255, 255, 255)) -> RGB:
    """
    Parse a hex string to an (r, g, b) tuple.

    Args:
        s: Hex string like "#RRGGBB" or "RRGGBB"
        fallback: Color to return if parsing fails

    Returns:
        Parsed color or fallback
    """
    m = re.match(r"^#?([0-9a-fA-F]{2})([0-9a-fA-F]{2})([0-9a-fA-F]{2})$", (s or "").strip())
    if not m:
        return fallback
    return (int(m.group(1), 16), int(m.group(2), 16), int(m.group(3), 16))


def rgb_to_hex(r: Any, g: Any, b: Any) -> str:
    """Convert color channels to a lower-case "#rrggbb" string."""
    def h(x):
        return "{:02x}".format(int(clamp(round_half_up(x), 0, 255)))
    return f"#{h(r)}{h(g)}{h(b)}"


def color_from_record(value: Any, fallback: RGB) -> RGB:
    """
    Read a color stored as ``{"r", "g", "b"}``, a 3-sequence or a hex string.

    Channels are rounded and clamped to 0..255.
    """
    if isinstance(value, dict):
        channels = [value.get("r"), value.get("g"), value.get("b")]
    elif isinstance(value, (list, tuple)) and len(value) == 3:
        channels = list(value)
    elif isinstance(value, str):
        return hex_to_rgb(value, fallback)
    else:
        return fallback
    out = []
    for ch, fb in zip(channels, fallback):
        out.append(int(clamp(round_half_up(to_number(ch, fb)), 0, 255)))
    return (out[0], out[1], out[2])


def color_to_record(rgb: RGB) -> Dict[str, int]:
    """Serialize an (r, g, b) tuple as ``{"r", "g", "b"}``."""
    return {"r": int(rgb[0]), "g": int(rgb[1]), "b": int(rgb[2])}


# ----------------------------
# Lua text helpers
# ----------------------------

def escape_lua_string(s: Any) -> str:
    """
    Escape text for a double-quoted Lua string literal.

    Backslash, double quote, carriage return and newline become escape
    sequences; everything else is passed through.
    """
    text = "" if s is None else str(s)
    return (
        text.replace("\\", "\\\\")
        .replace('"', '\\"')
        .replace("\r", "\\r")
        .replace("\n", "\\n")
    )


def safe_lua_ident(name: Any) -> str:
    """
    Turn a display name into a Lua identifier.

    Non-word characters become ``_`` and a leading digit gets a ``_``
    prefix. Empty input yields ``"node"``.
    """
    cleaned = re.sub(r"[^\w]", "_", str(name or ""), flags=re.ASCII)
    cleaned = re.sub(r"^(\d)", r"_\1", cleaned)
    return cleaned or "node"


def format_number(value: Any) -> str:
    """
    Format a number the way the generated script expects.

    Integral values print without a decimal point (``1`` not ``1.0``);
    others use the shortest round-trip representation (``0.5``).
    """
    num = to_number(value)
    if num == int(num) and abs(num) < 1e15:
        return str(int(num))
    return repr(num)


# Canonical key order for persisted node records
NODE_KEY_ORDER = [
    "id", "type", "name", "parentId",
    "x", "y", "w", "h", "anchorX", "anchorY", "zIndex",
    "bgColor", "bgAlpha", "border",
    "text", "textColor", "textScaled", "font",
    "image", "canvasSize", "scrollBarThickness",
    "uiObjects",
]


def sort_node_keys(rec: dict) -> dict:
    """
    Sort a node record's keys in canonical order.

    Any keys not in NODE_KEY_ORDER are appended at the end in their
    original order.

    Args:
        rec: The node record dict

    Returns:
        New dict with keys sorted in canonical order
    """
    result = {}
    for key in NODE_KEY_ORDER:
        if key in rec:
            result[key] = rec[key]
    for key in rec:
        if key not in result:
            result[key] = rec[key]
    return result
