"""Tests for properties/fields.py: coercion of property-panel edits."""
from __future__ import annotations

import pytest

from conftest import add_node
from models import DEFAULT_FONT, ROOT, ProjectMeta
from properties import fields


class TestParsers:
    @pytest.mark.parametrize("value,expected", [
        ("0.2,0.8", (0.2, 0.8)),
        ("0.2,abc", (0.2, 0.0)),
        ("5,-1", (1.0, 0.0)),
        ("", (0.0, 0.0)),
        ([0.5, 1], (0.5, 1.0)),
        (None, (0.0, 0.0)),
    ])
    def test_parse_anchor(self, value, expected):
        assert fields.parse_anchor(value) == expected

    @pytest.mark.parametrize("value,expected", [
        (True, True), ("true", True), ("Yes", True), ("0", False), ("", False), (0, False),
    ])
    def test_parse_bool(self, value, expected):
        assert fields.parse_bool(value) is expected


class TestApplyField:
    def test_geometry_coerced_and_clamped(self, store):
        node = add_node(store, "f")
        assert fields.apply_field(store, node, "w", "9999")
        assert node.w == 980
        fields.apply_field(store, node, "h", "")
        assert node.h == 20

    def test_name_falls_back_to_kind(self, store):
        node = add_node(store, "t", "TextLabel")
        fields.apply_field(store, node, "name", "   ")
        assert node.name == "TextLabel"

    def test_bad_colour_becomes_white(self, store):
        node = add_node(store, "f")
        fields.apply_field(store, node, "bg_color", "#12345")
        assert node.bg_color == (255, 255, 255)
        fields.apply_field(store, node, "bg_color", "#0a0B0c")
        assert node.bg_color == (10, 11, 12)

    def test_alpha_clamped(self, store):
        node = add_node(store, "f")
        fields.apply_field(store, node, "bg_alpha", "1.7")
        assert node.bg_alpha == 1.0

    def test_z_edit_renormalises_siblings(self, store):
        for name in ("a", "b", "c"):
            add_node(store, name, "TextLabel")
        fields.apply_field(store, store.get("c"), "z_index", "0")
        zs = sorted(n.z_index for n in store.children_of(ROOT))
        assert zs == [1, 2, 3]

    def test_kind_specific_fields(self, store):
        frame = add_node(store, "f")
        label = add_node(store, "t", "TextLabel")
        scroll = add_node(store, "s", "ScrollingFrame")
        assert not fields.apply_field(store, frame, "text", "x")
        assert not fields.apply_field(store, frame, "image", "x")
        assert fields.apply_field(store, label, "font", "")
        assert label.font == DEFAULT_FONT
        assert fields.apply_field(store, scroll, "canvas_w", "-4")
        assert scroll.canvas_w == 0
        assert fields.apply_field(store, scroll, "scrollbar_thickness", "6.5")
        assert scroll.scrollbar_thickness == 7

    def test_unknown_field(self, store):
        assert not fields.apply_field(store, add_node(store, "f"), "rotation", 45)


class TestParentChoices:
    def test_excludes_self_descendants_and_non_containers(self, store):
        add_node(store, "a")
        add_node(store, "b", parent_id="a", w=100, h=50)
        add_node(store, "c")
        add_node(store, "t", "TextLabel")
        ids = [cid for cid, _ in fields.parent_choices(store, store.get("a"))]
        assert ids == [ROOT, "c"]

    def test_values_none_without_node(self, store):
        assert fields.field_values(store, None) is None

    def test_values_mirror_node(self, store):
        node = add_node(store, "t", "TextLabel")
        values = fields.field_values(store, node)
        assert values["anchor"] == "0.5,0.5"
        assert values["text_color"] == "#ffffff"
        assert values["is_textual"] and not values["is_container"]


class TestProjectFields:
    def test_gui_name_fallback(self):
        project = ProjectMeta()
        assert fields.apply_project_field(project, "gui_name", "")
        assert project.gui_name == "ScreenGui"

    def test_invalid_choice_rejected(self):
        project = ProjectMeta()
        assert not fields.apply_project_field(project, "runtime_parent", "Workspace")
        assert fields.apply_project_field(project, "runtime_parent", "CoreGui")
        assert project.runtime_parent == "CoreGui"

    def test_reset_on_spawn_from_text(self):
        project = ProjectMeta()
        fields.apply_project_field(project, "reset_on_spawn", "true")
        assert project.reset_on_spawn is True


class TestExtensionPropCoercion:
    @pytest.mark.parametrize("default,value,expected", [
        (8, "12.4", 12),
        (8, "abc", 8),
        (1.0, "1.25", 1.25),
        (True, "false", False),
        ({"r": 1, "g": 2, "b": 3}, "#000000", {"r": 0, "g": 0, "b": 0}),
    ])
    def test_coerce(self, default, value, expected):
        assert fields.coerce_extension_prop(default, value) == expected
