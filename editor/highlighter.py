"""
editor/highlighter.py

Lua syntax highlighter for the generated-script view.
"""

from __future__ import annotations

from typing import List, Tuple

from PyQt6.QtCore import QRegularExpression
from PyQt6.QtGui import QSyntaxHighlighter, QTextCharFormat, QColor

from settings import get_settings

LUA_KEYWORDS = (
    "and", "break", "do", "else", "elseif", "end", "false", "for",
    "function", "if", "in", "local", "nil", "not", "or", "repeat",
    "return", "then", "true", "until", "while",
)

# Roblox globals and constructors that appear in generated scripts
LUA_BUILTINS = (
    "game", "Instance", "UDim2", "UDim", "Vector2", "Color3", "Enum",
)


class LuaHighlighter(QSyntaxHighlighter):
    """
    Syntax highlighter for Lua source.

    Highlights:
    - Keywords (orange, bold)
    - Roblox builtins (blue)
    - Numbers (purple)
    - Strings (green)
    - ``--`` comments (gray)
    """

    def __init__(self, parent):
        super().__init__(parent)

        self.rules: List[Tuple[QRegularExpression, QTextCharFormat]] = []

        # Defaults: keyword=#D35400, builtin=#2E86C1, number=#8E44AD, string=#27AE60, comment=#808B96
        syntax = get_settings().settings.editor.syntax

        def fmt(color_hex: str, bold: bool = False) -> QTextCharFormat:
            f = QTextCharFormat()
            f.setForeground(QColor(color_hex))
            if bold:
                f.setFontWeight(700)
            return f

        kw_fmt = fmt(syntax.keyword_color, bold=syntax.keyword_bold)
        self.rules.append((QRegularExpression(r"\b(" + "|".join(LUA_KEYWORDS) + r")\b"), kw_fmt))

        builtin_fmt = fmt(syntax.builtin_color)
        self.rules.append((QRegularExpression(r"\b(" + "|".join(LUA_BUILTINS) + r")\b"), builtin_fmt))

        num_fmt = fmt(syntax.number_color)
        self.rules.append((QRegularExpression(r"\b-?\d+(?:\.\d+)?(?:[eE][+-]?\d+)?\b"), num_fmt))

        # Strings after numbers so digits inside literals stay green
        str_fmt = fmt(syntax.string_color)
        self.rules.append((QRegularExpression(r'"[^"\\]*(?:\\.[^"\\]*)*"'), str_fmt))

        comment_fmt = fmt(syntax.comment_color)
        self.rules.append((QRegularExpression(r"--[^\n]*"), comment_fmt))

    def highlightBlock(self, text: str) -> None:
        """Apply highlighting rules to a block of text."""
        for regex, f in self.rules:
            it = regex.globalMatch(text)
            while it.hasNext():
                m = it.next()
                self.setFormat(m.capturedStart(), m.capturedLength(), f)
