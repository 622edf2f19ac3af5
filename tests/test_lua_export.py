"""Tests for lua_export.py: generated script content, ordering and naming."""
from __future__ import annotations

from conftest import add_node
from layout import hierarchy
from layout.store import NodeStore
from lua_export import emission_order, generate_lua, suggested_filename, write_script
from models import ExtensionObject, OutputMode, ProjectMeta, RuntimeParent

HEADER = [
    'local screenGui = Instance.new("ScreenGui")',
    'screenGui.Name = "HelloWorldGui"',
    "screenGui.ResetOnSpawn = false",
    "local player = game.Players.LocalPlayer",
    'screenGui.Parent = player:WaitForChild("PlayerGui")',
]


def _label_store(text="hello world") -> NodeStore:
    store = NodeStore()
    node = hierarchy.create_node(store, "TextLabel", "t")
    node.text = text
    return store


class TestHeader:
    def test_empty_store_is_header_only(self):
        assert generate_lua(NodeStore(), ProjectMeta()) == "\n".join(HEADER)

    def test_core_gui_parent(self):
        project = ProjectMeta(runtime_parent=RuntimeParent.CORE_GUI, reset_on_spawn=True)
        text = generate_lua(NodeStore(), project)
        assert 'screenGui.Parent = game:GetService("CoreGui")' in text
        assert "LocalPlayer" not in text
        assert "screenGui.ResetOnSpawn = true" in text

    def test_blank_gui_name_falls_back(self):
        text = generate_lua(NodeStore(), ProjectMeta(gui_name="  "))
        assert 'screenGui.Name = "ScreenGui"' in text


class TestNodeBlocks:
    def test_single_text_label(self):
        text = generate_lua(_label_store(), ProjectMeta())
        assert text.splitlines() == HEADER + [
            "",
            'local textLabel = Instance.new("TextLabel")',
            'textLabel.Name = "TextLabel"',
            "textLabel.Size = UDim2.new(0, 300, 0, 100)",
            "textLabel.Position = UDim2.new(0, 340, 0, 260)",
            "textLabel.AnchorPoint = Vector2.new(0.5, 0.5)",
            "textLabel.ZIndex = 1",
            "textLabel.BackgroundColor3 = Color3.fromRGB(30, 30, 30)",
            "textLabel.BackgroundTransparency = 0.00",
            "textLabel.BorderSizePixel = 0",
            "textLabel.TextColor3 = Color3.fromRGB(255, 255, 255)",
            'textLabel.Text = "hello world"',
            "textLabel.TextScaled = true",
            "textLabel.Font = Enum.Font.SourceSansBold",
            "textLabel.Parent = screenGui",
        ]

    def test_text_is_escaped(self):
        text = generate_lua(_label_store('say "hi"\\\nbye'), ProjectMeta())
        assert 'textLabel.Text = "say \\"hi\\"\\\\\\nbye"' in text

    def test_transparency_two_decimals(self):
        store = _label_store()
        store.get("t").bg_alpha = 0.333
        assert "BackgroundTransparency = 0.67" in generate_lua(store, ProjectMeta())

    def test_image_only_when_set(self):
        store = NodeStore()
        img = hierarchy.create_node(store, "ImageLabel", "i")
        assert ".Image =" not in generate_lua(store, ProjectMeta())
        img.image = "rbxassetid://123"
        assert 'imageLabel.Image = "rbxassetid://123"' in generate_lua(store, ProjectMeta())

    def test_scrolling_frame_canvas(self):
        store = NodeStore()
        hierarchy.create_node(store, "ScrollingFrame", "s")
        text = generate_lua(store, ProjectMeta())
        assert "scrollingFrame.CanvasSize = UDim2.new(0, 520, 0, 360)" in text
        assert "scrollingFrame.ScrollBarThickness = 10" in text
        assert "TextColor3" not in text


class TestOrderingAndNames:
    def test_parent_before_child(self):
        store = NodeStore()
        add_node(store, "f")
        hierarchy.create_node(store, "TextLabel", "t", parent_id="f")
        lines = generate_lua(store, ProjectMeta()).splitlines()
        assert lines.index('local frame = Instance.new("Frame")') < lines.index(
            'local textLabel = Instance.new("TextLabel")')
        assert "textLabel.Parent = frame" in lines

    def test_breadth_first_by_z(self):
        store = NodeStore()
        add_node(store, "a")
        add_node(store, "b")
        hierarchy.create_node(store, "TextLabel", "a1", parent_id="a")
        assert emission_order(store) == ["a", "b", "a1"]

    def test_duplicate_names_get_suffixes(self):
        store = NodeStore()
        hierarchy.create_node(store, "TextLabel", "t1")
        hierarchy.create_node(store, "TextLabel", "t2")
        text = generate_lua(store, ProjectMeta())
        assert 'local textLabel = Instance.new("TextLabel")' in text
        assert 'local textLabel2 = Instance.new("TextLabel")' in text

    def test_names_are_sanitised(self):
        store = _label_store()
        store.get("t").name = "1 Play Button!"
        text = generate_lua(store, ProjectMeta())
        assert 'local _1PlayButton_ = Instance.new("TextLabel")' in text
        assert '_1PlayButton_.Name = "1 Play Button!"' in text

    def test_reserved_names_avoided(self):
        store = _label_store()
        store.get("t").name = "player"
        assert 'local player2 = Instance.new("TextLabel")' in generate_lua(store, ProjectMeta())

    def test_nested_mode(self):
        store = NodeStore()
        add_node(store, "f")
        hierarchy.create_node(store, "TextLabel", "t", parent_id="f")
        lines = generate_lua(store, ProjectMeta(output_mode=OutputMode.NESTED)).splitlines()
        assert lines[0] == "do"
        assert lines[-1] == "end"
        assert '  local frame_1 = Instance.new("Frame")' in lines
        assert '  local textlabel_2 = Instance.new("TextLabel")' in lines
        assert "  textlabel_2.Parent = frame_1" in lines

    def test_deterministic_across_insertion_order(self):
        a, b = NodeStore(), NodeStore()
        add_node(a, "x", "TextLabel", z_index=1)
        add_node(a, "y", "TextButton", z_index=2)
        add_node(b, "y", "TextButton", z_index=2)
        add_node(b, "x", "TextLabel", z_index=1)
        assert generate_lua(a, ProjectMeta()) == generate_lua(b, ProjectMeta())
        assert generate_lua(a, ProjectMeta()) == generate_lua(a, ProjectMeta())


class TestExtensions:
    def test_extension_emitted_before_owner_parent_line(self):
        store = _label_store()
        store.get("t").extensions.append(ExtensionObject.create("UICorner", "e1"))
        lines = generate_lua(store, ProjectMeta()).splitlines()
        ext_line = lines.index('local textLabel_uicorner = Instance.new("UICorner")')
        assert lines[ext_line + 1] == "textLabel_uicorner.CornerRadius = UDim.new(0, 8)"
        assert lines[ext_line + 2] == "textLabel_uicorner.Parent = textLabel"
        assert lines[ext_line + 3] == "textLabel.Parent = screenGui"

    def test_stroke_properties(self):
        store = _label_store()
        ext = ExtensionObject.create("UIStroke", "e1")
        ext.props["color"] = {"r": 255, "g": 0, "b": 0}
        store.get("t").extensions.append(ext)
        text = generate_lua(store, ProjectMeta())
        assert "textLabel_uistroke.Thickness = 2" in text
        assert "textLabel_uistroke.Color = Color3.fromRGB(255, 0, 0)" in text
        assert "textLabel_uistroke.Transparency = 0.20" in text

    def test_two_extensions_of_same_kind_get_unique_vars(self):
        store = _label_store()
        node = store.get("t")
        node.extensions.append(ExtensionObject.create("UIPadding", "e1"))
        node.extensions.append(ExtensionObject.create("UIPadding", "e2"))
        text = generate_lua(store, ProjectMeta())
        assert 'local textLabel_uipadding = Instance.new("UIPadding")' in text
        assert 'local textLabel_uipadding2 = Instance.new("UIPadding")' in text

    def test_layout_objects_export_bare(self):
        store = _label_store()
        store.get("t").extensions.append(ExtensionObject.create("UIListLayout", "e1"))
        lines = generate_lua(store, ProjectMeta()).splitlines()
        i = lines.index('local textLabel_uilistlayout = Instance.new("UIListLayout")')
        assert lines[i + 1] == "textLabel_uilistlayout.Parent = textLabel"


class TestFiles:
    def test_suggested_filename(self):
        assert suggested_filename(ProjectMeta(gui_name="My Gui!")) == "My_Gui_.lua"
        assert suggested_filename(ProjectMeta(gui_name="")) == "ui.lua"

    def test_write_script(self, tmp_path):
        path = tmp_path / "out.lua"
        write_script("print(1)", str(path))
        assert path.read_text(encoding="utf-8") == "print(1)"
