"""
editor package

Generated-script view: Lua syntax highlighter and the export dock.
"""

from editor.highlighter import LuaHighlighter
from editor.script_dock import ScriptDock

__all__ = [
    "LuaHighlighter",
    "ScriptDock",
]
