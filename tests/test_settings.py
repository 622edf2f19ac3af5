"""Tests for settings.py: TOML persistence of application settings."""
from __future__ import annotations

from settings import AppSettings, SettingsManager


class TestDefaults:
    def test_missing_file_gives_defaults(self, tmp_path):
        manager = SettingsManager(settings_dir=tmp_path)
        assert manager.settings == AppSettings()
        assert manager.settings.canvas.size.width == 980
        assert manager.settings.project.gui_name == "HelloWorldGui"
        assert not manager.get_settings_path().exists()

    def test_ensure_file_complete_writes_once(self, tmp_path):
        manager = SettingsManager(settings_dir=tmp_path)
        manager.ensure_file_complete()
        assert manager.get_settings_path().exists()
        assert "[canvas.zoom]" in manager.get_settings_path().read_text(encoding="utf-8")

    def test_corrupt_file_gives_defaults(self, tmp_path):
        (tmp_path / "settings.toml").write_text("[canvas\nwidth = ", encoding="utf-8")
        assert SettingsManager(settings_dir=tmp_path).settings == AppSettings()


class TestRoundTrip:
    def test_save_and_reload(self, tmp_path):
        manager = SettingsManager(settings_dir=tmp_path)
        manager.settings.canvas.size.height = 700
        manager.settings.canvas.edit.duplicate_offset = 20
        manager.settings.editor.syntax.keyword_bold = False
        manager.settings.project.output_mode = "nested"
        manager.save()

        reloaded = SettingsManager(settings_dir=tmp_path).settings
        assert reloaded.canvas.size.height == 700
        assert reloaded.canvas.edit.duplicate_offset == 20
        assert reloaded.editor.syntax.keyword_bold is False
        assert reloaded.project.output_mode == "nested"

    def test_partial_file_keeps_other_defaults(self, tmp_path):
        (tmp_path / "settings.toml").write_text(
            '[general]\nautosave_file = "menu.json"\n\n[canvas.zoom]\nmaximum = 3.0\n',
            encoding="utf-8",
        )
        settings = SettingsManager(settings_dir=tmp_path).settings
        assert settings.autosave_file == "menu.json"
        assert settings.canvas.zoom.maximum == 3.0
        assert settings.canvas.zoom.minimum == 0.5

    def test_to_toml_has_every_section(self, tmp_path):
        text = SettingsManager(settings_dir=tmp_path).to_toml()
        for section in ("[general]", "[canvas.size]", "[editor.font]", "[project]"):
            assert section in text


class TestPaths:
    def test_snapshot_path_in_workspace(self, tmp_path):
        manager = SettingsManager(settings_dir=tmp_path)
        manager.settings.workspace_dir = str(tmp_path / "work")
        assert manager.get_snapshot_path() == tmp_path / "work" / "project.json"

    def test_default_workspace_is_user_data_dir(self, tmp_path):
        manager = SettingsManager(settings_dir=tmp_path)
        assert manager.get_workspace_dir().name == "guiforge"
