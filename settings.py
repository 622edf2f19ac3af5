"""
settings.py

Persistent settings management for GuiForge.

Handles cross-platform settings storage using TOML format with platformdirs
for proper user config directory detection.

Settings file location:
    - Windows: %APPDATA%/guiforge/settings.toml
    - macOS: ~/Library/Application Support/guiforge/settings.toml
    - Linux: ~/.config/guiforge/settings.toml

Default values are documented in comments throughout this file.
If settings.toml is corrupted, these defaults will be used.
"""

from __future__ import annotations

import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import platformdirs

# TOML reading - use tomllib for Python 3.11+, tomli for earlier versions
if sys.version_info >= (3, 11):
    import tomllib
else:
    import tomli as tomllib

import tomli_w

APP_NAME = "guiforge"

# Global settings manager instance (singleton)
_settings_manager: Optional["SettingsManager"] = None


def get_settings() -> "SettingsManager":
    """Get the global settings manager instance.

    Returns:
        The singleton SettingsManager instance.
    """
    global _settings_manager
    if _settings_manager is None:
        _settings_manager = SettingsManager()
    return _settings_manager


# =============================================================================
# Canvas Settings
# =============================================================================

@dataclass
class CanvasSizeSettings:
    """Design surface size (the implicit ROOT container).

    Defaults:
        width: 980
        height: 620
    """
    width: int = 980   # Default: 980 pixels
    height: int = 620  # Default: 620 pixels


@dataclass
class CanvasHandleSettings:
    """Resize handle settings.

    Defaults:
        size: 8.0
        border_color: "#0078D7"
        fill_color: "#FFFFFF"
    """
    size: float = 8.0                 # Default: 8.0 pixels
    border_color: str = "#0078D7"     # Default: blue
    fill_color: str = "#FFFFFF"       # Default: white


@dataclass
class CanvasEditSettings:
    """Editing behaviour settings.

    Defaults:
        min_size: 20
        duplicate_offset: 12
    """
    min_size: int = 20          # Default: 20 pixels
    duplicate_offset: int = 12  # Default: 12 pixels


@dataclass
class CanvasZoomSettings:
    """Zoom behavior settings.

    Defaults:
        minimum: 0.5
        maximum: 2.0
        wheel_step: 0.1
    """
    minimum: float = 0.5     # Default: 50%
    maximum: float = 2.0     # Default: 200%
    wheel_step: float = 0.1  # Default: 10% per scroll step


@dataclass
class CanvasSettings:
    """All canvas-related settings."""
    size: CanvasSizeSettings = field(default_factory=CanvasSizeSettings)
    handles: CanvasHandleSettings = field(default_factory=CanvasHandleSettings)
    edit: CanvasEditSettings = field(default_factory=CanvasEditSettings)
    zoom: CanvasZoomSettings = field(default_factory=CanvasZoomSettings)


# =============================================================================
# Editor Settings
# =============================================================================

@dataclass
class EditorFontSettings:
    """Generated-script editor font settings.

    Defaults:
        family: "Consolas"
        size: 10
    """
    family: str = "Consolas"  # Default: "Consolas"
    size: int = 10            # Default: 10 points


@dataclass
class EditorSyntaxSettings:
    """Lua syntax highlighting colors.

    Defaults:
        keyword_color: "#D35400"
        keyword_bold: True
        string_color: "#27AE60"
        number_color: "#8E44AD"
        builtin_color: "#2E86C1"
        comment_color: "#808B96"
    """
    keyword_color: str = "#D35400"   # Default: orange
    keyword_bold: bool = True        # Default: True
    string_color: str = "#27AE60"    # Default: green
    number_color: str = "#8E44AD"    # Default: purple
    builtin_color: str = "#2E86C1"   # Default: blue
    comment_color: str = "#808B96"   # Default: gray


@dataclass
class EditorSettings:
    """All editor-related settings."""
    font: EditorFontSettings = field(default_factory=EditorFontSettings)
    syntax: EditorSyntaxSettings = field(default_factory=EditorSyntaxSettings)


# =============================================================================
# Project Defaults
# =============================================================================

@dataclass
class ProjectDefaultSettings:
    """Defaults applied to a new project.

    Defaults:
        gui_name: "HelloWorldGui"
        reset_on_spawn: False
        runtime_parent: "PlayerGui"
        output_mode: "variables"
    """
    gui_name: str = "HelloWorldGui"    # Default: "HelloWorldGui"
    reset_on_spawn: bool = False       # Default: False
    runtime_parent: str = "PlayerGui"  # Default: "PlayerGui" (or "CoreGui")
    output_mode: str = "variables"     # Default: "variables" (or "nested")


# =============================================================================
# Main App Settings
# =============================================================================

@dataclass
class AppSettings:
    """Application settings with default values.

    Attributes:
        workspace_dir: Directory for the saved project snapshot.
        autosave_file: File name of the snapshot inside workspace_dir.
        canvas: Canvas-related settings.
        editor: Editor-related settings.
        project: New-project defaults.
    """
    # Workspace directory for project save/load (empty = platform data dir)
    workspace_dir: str = ""

    # Snapshot file name used by Save/Load
    autosave_file: str = "project.json"

    # Nested settings categories
    canvas: CanvasSettings = field(default_factory=CanvasSettings)
    editor: EditorSettings = field(default_factory=EditorSettings)
    project: ProjectDefaultSettings = field(default_factory=ProjectDefaultSettings)


# =============================================================================
# Settings Manager
# =============================================================================

class SettingsManager:
    """Manages loading, saving, and accessing application settings.

    Settings are stored in a TOML file at the platform-appropriate location.
    If the settings file doesn't exist, defaults are used and the file is
    created on first save.

    Args:
        app_name: Application name used for the config directory.
        settings_dir: Optional explicit directory (used by tests).
    """

    def __init__(self, app_name: str = APP_NAME, settings_dir: Optional[Path] = None):
        self.app_name = app_name
        if settings_dir is None:
            settings_dir = Path(platformdirs.user_config_dir(app_name))
        self.settings_dir = Path(settings_dir)
        self.settings_file = self.settings_dir / "settings.toml"
        self.settings = self.load()
        self._needs_save = not self.settings_file.exists()  # Save if file didn't exist

    def ensure_file_complete(self) -> None:
        """Ensure settings file exists with all sections. Call once at startup."""
        if self._needs_save or not self.settings_file.exists():
            self.save()
            self._needs_save = False

    def load(self) -> AppSettings:
        """Load settings from the TOML file.

        Returns:
            AppSettings instance with values from file or defaults if file
            doesn't exist or is invalid.
        """
        if not self.settings_file.exists():
            return AppSettings()

        try:
            with open(self.settings_file, "rb") as f:
                data = tomllib.load(f)

            return self._parse_toml(data)
        except (OSError, tomllib.TOMLDecodeError, AttributeError, TypeError):
            # If file is corrupted or invalid, return defaults
            return AppSettings()

    def _parse_toml(self, data: Dict[str, Any]) -> AppSettings:
        """Parse TOML data into AppSettings.

        Args:
            data: Parsed TOML dictionary.

        Returns:
            AppSettings instance populated from TOML data.
        """
        settings = AppSettings()

        # General section
        general = data.get("general", {})
        settings.workspace_dir = general.get("workspace_dir", settings.workspace_dir)
        settings.autosave_file = general.get("autosave_file", settings.autosave_file)

        # Canvas section
        canvas = data.get("canvas", {})
        if "size" in canvas:
            sz = canvas["size"]
            settings.canvas.size.width = sz.get("width", settings.canvas.size.width)
            settings.canvas.size.height = sz.get("height", settings.canvas.size.height)
        if "handles" in canvas:
            h = canvas["handles"]
            settings.canvas.handles.size = h.get("size", settings.canvas.handles.size)
            settings.canvas.handles.border_color = h.get("border_color", settings.canvas.handles.border_color)
            settings.canvas.handles.fill_color = h.get("fill_color", settings.canvas.handles.fill_color)
        if "edit" in canvas:
            e = canvas["edit"]
            settings.canvas.edit.min_size = e.get("min_size", settings.canvas.edit.min_size)
            settings.canvas.edit.duplicate_offset = e.get("duplicate_offset", settings.canvas.edit.duplicate_offset)
        if "zoom" in canvas:
            zm = canvas["zoom"]
            settings.canvas.zoom.minimum = zm.get("minimum", settings.canvas.zoom.minimum)
            settings.canvas.zoom.maximum = zm.get("maximum", settings.canvas.zoom.maximum)
            settings.canvas.zoom.wheel_step = zm.get("wheel_step", settings.canvas.zoom.wheel_step)

        # Editor section
        editor = data.get("editor", {})
        if "font" in editor:
            font = editor["font"]
            settings.editor.font.family = font.get("family", settings.editor.font.family)
            settings.editor.font.size = font.get("size", settings.editor.font.size)
        if "syntax" in editor:
            syn = editor["syntax"]
            settings.editor.syntax.keyword_color = syn.get("keyword_color", settings.editor.syntax.keyword_color)
            settings.editor.syntax.keyword_bold = syn.get("keyword_bold", settings.editor.syntax.keyword_bold)
            settings.editor.syntax.string_color = syn.get("string_color", settings.editor.syntax.string_color)
            settings.editor.syntax.number_color = syn.get("number_color", settings.editor.syntax.number_color)
            settings.editor.syntax.builtin_color = syn.get("builtin_color", settings.editor.syntax.builtin_color)
            settings.editor.syntax.comment_color = syn.get("comment_color", settings.editor.syntax.comment_color)

        # Project defaults section
        project = data.get("project", {})
        settings.project.gui_name = project.get("gui_name", settings.project.gui_name)
        settings.project.reset_on_spawn = project.get("reset_on_spawn", settings.project.reset_on_spawn)
        settings.project.runtime_parent = project.get("runtime_parent", settings.project.runtime_parent)
        settings.project.output_mode = project.get("output_mode", settings.project.output_mode)

        return settings

    def save(self) -> None:
        """Save current settings to the TOML file.

        Creates the settings directory if it doesn't exist.
        """
        # Ensure directory exists
        self.settings_dir.mkdir(parents=True, exist_ok=True)

        # Convert settings to TOML structure
        data = self._to_toml_dict()

        with open(self.settings_file, "wb") as f:
            tomli_w.dump(data, f)

    def _to_toml_dict(self) -> Dict[str, Any]:
        """Convert settings to a TOML-compatible dictionary structure.

        Returns:
            Dictionary organized by TOML sections.
        """
        s = self.settings
        return {
            "general": {
                "workspace_dir": s.workspace_dir,
                "autosave_file": s.autosave_file,
            },
            "canvas": {
                "size": {
                    "width": s.canvas.size.width,
                    "height": s.canvas.size.height,
                },
                "handles": {
                    "size": s.canvas.handles.size,
                    "border_color": s.canvas.handles.border_color,
                    "fill_color": s.canvas.handles.fill_color,
                },
                "edit": {
                    "min_size": s.canvas.edit.min_size,
                    "duplicate_offset": s.canvas.edit.duplicate_offset,
                },
                "zoom": {
                    "minimum": s.canvas.zoom.minimum,
                    "maximum": s.canvas.zoom.maximum,
                    "wheel_step": s.canvas.zoom.wheel_step,
                },
            },
            "editor": {
                "font": {
                    "family": s.editor.font.family,
                    "size": s.editor.font.size,
                },
                "syntax": {
                    "keyword_color": s.editor.syntax.keyword_color,
                    "keyword_bold": s.editor.syntax.keyword_bold,
                    "string_color": s.editor.syntax.string_color,
                    "number_color": s.editor.syntax.number_color,
                    "builtin_color": s.editor.syntax.builtin_color,
                    "comment_color": s.editor.syntax.comment_color,
                },
            },
            "project": {
                "gui_name": s.project.gui_name,
                "reset_on_spawn": s.project.reset_on_spawn,
                "runtime_parent": s.project.runtime_parent,
                "output_mode": s.project.output_mode,
            },
        }

    def to_toml(self) -> str:
        """Convert current settings to a TOML-formatted string.

        Returns:
            TOML representation of the current settings.
        """
        data = self._to_toml_dict()
        return tomli_w.dumps(data)

    def get_workspace_dir(self) -> Path:
        """Get the resolved workspace directory path.

        Returns:
            Path to workspace directory. Falls back to the platform user
            data directory if workspace_dir setting is empty.
        """
        if self.settings.workspace_dir:
            return Path(self.settings.workspace_dir)
        return Path(platformdirs.user_data_dir(self.app_name))

    def get_snapshot_path(self) -> Path:
        """Get the path of the project snapshot used by Save/Load."""
        return self.get_workspace_dir() / self.settings.autosave_file

    def get_settings_path(self) -> Path:
        """Get the path to the settings file.

        Returns:
            Path object pointing to the settings file location.
        """
        return self.settings_file
