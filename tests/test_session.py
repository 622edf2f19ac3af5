"""Tests for layout/session.py: the command surface the shell drives."""
from __future__ import annotations

import pytest

from conftest import add_node
from layout.interaction import PointerEvent
from layout.session import DEFAULT_NODE_TEXT, DesignerSession
from layout.snapshot import LOAD_FAILED_NOTICE, NOTHING_SAVED_NOTICE, SnapshotStorage
from models import ROOT
from settings import SettingsManager


def _recorder(session: DesignerSession):
    """Attach listeners; returns (change_count_list, notices_list)."""
    changes, notices = [], []
    session.add_listener(lambda: changes.append(1))
    session.add_notice_listener(lambda msg, detail: notices.append((msg, detail)))
    return changes, notices


class TestProjectLifecycle:
    def test_new_project(self, session):
        changes, notices = _recorder(session)
        session.new_project()
        nodes = session.store.nodes()
        assert len(nodes) == 1
        assert nodes[0].kind == "TextLabel"
        assert nodes[0].text == DEFAULT_NODE_TEXT
        assert session.selected_id == nodes[0].id
        assert session.zoom == 1.0
        assert session.export_enabled
        assert notices[-1] == ("New project created.", "")
        assert changes == [1]

    def test_new_project_resets_project_meta(self, session):
        session.set_project_field("gui_name", "Shop")
        session.new_project()
        assert session.project.gui_name == "HelloWorldGui"

    def test_from_settings(self, tmp_path):
        manager = SettingsManager(settings_dir=tmp_path)
        manager.settings.canvas.size.width = 800
        manager.settings.project.gui_name = "FromSettings"
        session = DesignerSession.from_settings(manager)
        assert session.store.canvas_w == 800
        assert session.project.gui_name == "FromSettings"


class TestNodeCommands:
    def test_create_selects_and_stacks(self, session):
        a = session.create_node("Frame")
        b = session.create_node("TextButton")
        assert session.selected_id == b.id
        assert (a.z_index, b.z_index) == (1, 2)
        assert session.status[0] == "Selected: TextButton (TextButton)"

    def test_create_unknown_kind(self, session):
        assert session.create_node("Sprite") is None
        assert len(session.store) == 0

    def test_delete_selected_subtree(self, session):
        frame = session.create_node("Frame")
        session.create_node("TextLabel")
        label = session.selected
        session.set_property("parent", frame.id)
        session.select(frame.id)
        assert session.delete_selected() == 2
        assert session.selected_id is None
        assert session.status == ("Ready.", "")
        assert label.id not in session.store

    def test_delete_without_selection(self, session):
        assert session.delete_selected() == 0

    def test_duplicate(self, session):
        session.create_node("TextLabel")
        dup = session.duplicate_selected()
        assert session.selected_id == dup.id == "n2"
        assert dup.name == "TextLabelCopy"

    def test_move_up_down(self, session):
        a = session.create_node("Frame")
        b = session.create_node("Frame")
        session.select(b.id)
        assert session.move_up_selected()
        assert (b.z_index, a.z_index) == (1, 2)
        assert not session.move_up_selected()
        assert session.move_down_selected()
        assert (a.z_index, b.z_index) == (1, 2)

    def test_each_command_notifies_once(self, session):
        changes, _ = _recorder(session)
        session.create_node("Frame")
        session.duplicate_selected()
        session.move_down_selected()
        assert len(changes) == 3


class TestExplorerDrop:
    def test_inside_container(self, session):
        frame = session.create_node("Frame")
        label = session.create_node("TextLabel")
        assert session.reorder_drop(label.id, frame.id, "inside")
        assert label.parent_id == frame.id
        assert session.status[0] == "Parented TextLabel → Frame"

    def test_inside_non_container_rejected(self, session):
        a = session.create_node("TextLabel")
        b = session.create_node("TextLabel")
        assert not session.reorder_drop(a.id, b.id, "inside")
        assert a.parent_id == ROOT

    def test_inside_root(self, session):
        frame = session.create_node("Frame")
        label = session.create_node("TextLabel")
        session.reorder_drop(label.id, frame.id, "inside")
        assert session.reorder_drop(label.id, ROOT, "inside")
        assert label.parent_id == ROOT
        assert session.status[0] == "Parented TextLabel → ROOT"

    def test_onto_own_descendant_rejected(self, session):
        outer = session.create_node("Frame")
        inner = session.create_node("Frame")
        session.reorder_drop(inner.id, outer.id, "inside")
        assert not session.reorder_drop(outer.id, inner.id, "above")
        assert not session.reorder_drop(outer.id, inner.id, "inside")

    def test_above(self, session):
        a = session.create_node("TextLabel")
        b = session.create_node("TextLabel")
        assert session.reorder_drop(b.id, a.id, "above")
        assert (b.z_index, a.z_index) == (1, 2)
        assert session.status[0] == "Reordered (Explorer order = ZIndex)."

    def test_tree_rows(self, session):
        frame = session.create_node("Frame")
        label = session.create_node("TextLabel")
        other = session.create_node("ImageLabel")
        session.reorder_drop(label.id, frame.id, "inside")
        rows = session.tree_rows()
        assert [(r.id, r.depth) for r in rows] == [(frame.id, 0), (label.id, 1), (other.id, 0)]
        assert rows[2].z_index == 2

    def test_tree_rows_on_deep_nesting(self, session):
        parent = ROOT
        for i in range(1500):
            add_node(session.store, f"d{i}", parent_id=parent, w=20, h=20)
            parent = f"d{i}"
        rows = session.tree_rows()
        assert len(rows) == 1500
        assert (rows[0].depth, rows[-1].depth) == (0, 1499)
        assert rows[-1].id == "d1499"


class TestPropertyEdits:
    def test_non_numeric_becomes_zero_then_clamps(self, session):
        node = session.create_node("TextLabel")
        assert session.set_property("x", "abc")
        assert node.x == 150
        assert session.status == ("Editing: TextLabel", "x:150 y:310 w:300 h:100")

    def test_shrinking_container_keeps_children_inside(self, session):
        frame = session.create_node("Frame")
        label = session.create_node("TextLabel")
        session.reorder_drop(label.id, frame.id, "inside")
        session.select(frame.id)
        assert session.set_property("w", 40)
        assert frame.w == 40
        assert (label.w, label.x) == (40, 20)
        assert label.x - label.anchor_x * label.w >= 0

    def test_kind_specific_field_rejected(self, session):
        session.create_node("Frame")
        assert not session.set_property("text", "nope")

    def test_no_selection(self, session):
        assert not session.set_property("name", "x")

    def test_parent_field_reparents(self, session):
        frame = session.create_node("Frame")
        label = session.create_node("TextLabel")
        assert session.set_property("parent", frame.id)
        assert label.parent_id == frame.id
        assert not session.set_property("parent", label.id)

    def test_property_values(self, session):
        frame = session.create_node("Frame")
        values = session.property_values()
        assert values["id"] == frame.id
        assert values["is_container"]
        assert values["parent_choices"] == [(ROOT, "ROOT (Canvas)")]
        assert values["bg_color"] == "#26262c"

    def test_project_field(self, session):
        assert session.set_project_field("output_mode", "nested")
        assert not session.set_project_field("output_mode", "flat")
        assert session.project_values()["output_mode"] == "nested"


class TestExtensions:
    def test_add_requires_selection(self, session):
        assert session.add_extension("UICorner") is None
        assert session.status[0] == "Select an instance first."

    def test_add_and_edit(self, session):
        node = session.create_node("TextLabel")
        ext = session.add_extension("UIStroke")
        assert session.status[0] == "Added UIStroke."
        assert session.set_extension_prop(node.id, ext.id, "thickness", "4.6")
        assert session.set_extension_prop(node.id, ext.id, "color", "#ff0000")
        assert ext.props["thickness"] == 5
        assert ext.props["color"] == {"r": 255, "g": 0, "b": 0}
        assert not session.set_extension_prop(node.id, ext.id, "bogus", 1)

    def test_remove(self, session):
        node = session.create_node("TextLabel")
        ext = session.add_extension("UICorner")
        assert session.remove_extension(node.id, ext.id)
        assert node.extensions == []
        assert not session.remove_extension(node.id, ext.id)

    def test_unknown_extension_kind(self, session):
        session.create_node("TextLabel")
        assert session.add_extension("UIBlur") is None


class TestPointer:
    def test_drag_into_frame_reports_parenting(self, session):
        frame = session.create_node("Frame")
        label = session.create_node("TextLabel")
        session.clear_selection()
        assert session.pointer_down(PointerEvent(490, 310, target_id=label.id))
        assert session.selected_id == label.id
        session.pointer_move(PointerEvent(500, 320))
        assert session.status[0] == "Editing: TextLabel"
        assert session.pointer_up(PointerEvent(500, 320))
        assert label.parent_id == frame.id
        assert session.status[0] == "Parented TextLabel → Frame"

    def test_zoom_clamped(self, session):
        session.set_zoom(9)
        assert session.zoom == 2.0


class TestPersistence:
    def test_save_and_load(self, session, tmp_path):
        storage = SnapshotStorage(tmp_path / "project.json")
        session.create_node("Frame")
        session.set_show_safe_area(True)
        before = session.export_script()
        session.save(storage)
        assert session.status[0] == "Saved."

        other = DesignerSession()
        assert other.load(storage)
        assert other.export_script() == before
        assert other.show_safe_area
        assert other.selected_id == session.selected_id

    def test_load_nothing_saved(self, session, tmp_path):
        assert not session.load(SnapshotStorage(tmp_path / "none.json"))
        assert session.status[0] == NOTHING_SAVED_NOTICE

    def test_corrupt_load_leaves_store_unchanged(self, session, tmp_path):
        session.new_project()
        store = session.store
        ids = store.ids()
        path = tmp_path / "project.json"
        path.write_text("[1, 2", encoding="utf-8")
        _, notices = _recorder(session)
        assert not session.load(SnapshotStorage(path))
        assert session.store is store
        assert store.ids() == ids
        assert notices[-1][0] == LOAD_FAILED_NOTICE

    def test_structurally_invalid_snapshot(self, session):
        session.new_project()
        ids = session.store.ids()
        assert not session.load_snapshot({"nodes": "x"})
        assert session.store.ids() == ids
        assert session.status[0] == LOAD_FAILED_NOTICE

    def test_load_keeps_store_identity(self, session):
        store = session.store
        assert session.load_snapshot({"nodes": [{"id": "a", "type": "Frame"}]})
        assert session.store is store
        assert session.controller.store is store
        assert store.ids() == ["a"]

    def test_save_error_propagates(self, session, tmp_path):
        blocker = tmp_path / "file"
        blocker.write_text("", encoding="utf-8")
        with pytest.raises(OSError):
            session.save(SnapshotStorage(blocker / "project.json"))
