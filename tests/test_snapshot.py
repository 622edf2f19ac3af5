"""Tests for layout/snapshot.py and schemas/: serialize, validate, repair, storage."""
from __future__ import annotations

import json

import pytest

from conftest import add_node
from layout import hierarchy
from layout.snapshot import (
    SNAPSHOT_VERSION,
    SnapshotError,
    SnapshotStorage,
    deserialize,
    serialize,
)
from layout.store import NodeStore
from lua_export import generate_lua
from models import ROOT, ExtensionObject, OutputMode, ProjectMeta
from schemas import validate_node_record, validate_snapshot


def _design() -> NodeStore:
    store = NodeStore()
    add_node(store, "f")
    t = hierarchy.create_node(store, "TextLabel", "t", parent_id="f")
    t.text = "Play"
    t.extensions.append(ExtensionObject.create("UIStroke", "e1"))
    hierarchy.create_node(store, "ImageButton", "i")
    return store


def _rec(node_id, kind="Frame", **extra):
    rec = {"id": node_id, "type": kind}
    rec.update(extra)
    return rec


# ─────────────────────────────────────────────────────────
# Schema
# ─────────────────────────────────────────────────────────


class TestSchema:
    def test_minimal_snapshot_valid(self):
        assert validate_snapshot({"nodes": []}) == (True, [])

    @pytest.mark.parametrize("data", [None, [], "x", {}, {"nodes": {}}, {"nodes": 3}])
    def test_structural_errors(self, data):
        ok, errors = validate_snapshot(data)
        assert not ok
        assert errors

    def test_node_record_requires_known_type(self):
        assert validate_node_record(_rec("a"))[0]
        assert not validate_node_record(_rec("a", "Sprite"))[0]
        assert not validate_node_record({"type": "Frame"})[0]
        assert not validate_node_record("Frame")[0]


# ─────────────────────────────────────────────────────────
# Round trip
# ─────────────────────────────────────────────────────────


class TestRoundTrip:
    def test_same_script_after_round_trip(self):
        store = _design()
        project = ProjectMeta(gui_name="Menu", output_mode=OutputMode.NESTED)
        data = json.loads(json.dumps(serialize(store, project, "t", 1.5, True)))

        loaded = deserialize(data)
        assert loaded.dropped == []
        assert loaded.rehomed == []
        assert loaded.selected_id == "t"
        assert loaded.zoom == 1.5
        assert loaded.show_safe_area is True
        assert loaded.project == project
        assert generate_lua(loaded.store, loaded.project) == generate_lua(store, project)

    def test_serialize_shape(self):
        data = serialize(_design(), ProjectMeta(), selected_id="gone")
        assert data["version"] == SNAPSHOT_VERSION
        assert data["selectedId"] is None
        assert [n["id"] for n in data["nodes"]] == ["f", "t", "i"]
        assert list(data["nodes"][0])[:4] == ["id", "type", "name", "parentId"]
        assert data["nodes"][1]["uiObjects"][0]["type"] == "UIStroke"


# ─────────────────────────────────────────────────────────
# Load repair
# ─────────────────────────────────────────────────────────


class TestRepair:
    def test_structural_failure_raises(self):
        with pytest.raises(SnapshotError):
            deserialize({"nodes": "oops"})
        with pytest.raises(SnapshotError):
            deserialize([1, 2, 3])

    def test_bad_records_dropped(self):
        loaded = deserialize({"nodes": [
            _rec("a"),
            _rec("a", "TextLabel"),
            _rec("b", "Sprite"),
            {"type": "Frame"},
            42,
        ]})
        assert loaded.store.ids() == ["a"]
        assert len(loaded.dropped) == 4

    def test_dangling_parent_rehomed(self):
        loaded = deserialize({"nodes": [_rec("a", parentId="ghost", x=100, y=80)]})
        a = loaded.store.get("a")
        assert a.parent_id == ROOT
        assert (a.x, a.y) == (160, 90)
        assert loaded.rehomed == ["a"]

    def test_cycle_broken(self):
        loaded = deserialize({"nodes": [
            _rec("a", parentId="b", w=100, h=100),
            _rec("b", parentId="a", w=100, h=100),
        ]})
        store = loaded.store
        assert store.get("a").parent_id == ROOT
        assert store.get("b").parent_id == "a"

    def test_child_of_non_container_moves_to_root_keeping_world_anchor(self):
        loaded = deserialize({"nodes": [
            _rec("lbl", "TextLabel", x=490, y=310, w=300, h=100),
            _rec("c", "TextLabel", parentId="lbl", x=150, y=50, w=100, h=40),
        ]})
        c = loaded.store.get("c")
        assert c.parent_id == ROOT
        assert (c.x, c.y) == (490, 310)
        assert "c" in loaded.rehomed

    def test_nodes_clamped_and_z_renormalised(self):
        loaded = deserialize({"nodes": [
            _rec("a", zIndex=9, w=5000, h=3),
            _rec("b", zIndex=4),
        ]})
        a, b = loaded.store.get("a"), loaded.store.get("b")
        assert (a.w, a.h) == (980, 20)
        assert (b.z_index, a.z_index) == (1, 2)

    def test_zoom_clamped_and_missing_selection_cleared(self):
        loaded = deserialize({"nodes": [], "zoom": 10, "selectedId": "x"})
        assert loaded.zoom == 2.0
        assert loaded.selected_id is None

    def test_missing_project_uses_fallback(self):
        fallback = ProjectMeta(gui_name="Fallback")
        loaded = deserialize({"nodes": []}, fallback_project=fallback)
        assert loaded.project.gui_name == "Fallback"

    def test_non_numeric_fields_use_kind_defaults(self):
        loaded = deserialize({"nodes": [_rec("t", "TextLabel", w="wide", bgColor="nope")]})
        t = loaded.store.get("t")
        assert t.w == 300
        assert t.bg_color == (30, 30, 30)

    def test_boolean_fields_read_from_text(self):
        loaded = deserialize({"nodes": [
            _rec("t", "TextButton", border="false", textScaled="False"),
            _rec("u", "TextLabel", border="true", textScaled=0),
        ]})
        t, u = loaded.store.get("t"), loaded.store.get("u")
        assert (t.border, t.text_scaled) == (False, False)
        assert (u.border, u.text_scaled) == (True, False)


# ─────────────────────────────────────────────────────────
# Storage
# ─────────────────────────────────────────────────────────


class TestStorage:
    def test_missing_file_reads_none(self, tmp_path):
        storage = SnapshotStorage(tmp_path / "nothing.json")
        assert not storage.exists()
        assert storage.read() is None

    def test_write_then_read(self, tmp_path):
        storage = SnapshotStorage(tmp_path / "sub" / "project.json")
        data = serialize(_design(), ProjectMeta())
        storage.write(data)
        assert storage.read() == data
        assert storage.path.read_text(encoding="utf-8").endswith("\n")

    def test_corrupt_file_raises(self, tmp_path):
        path = tmp_path / "project.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(SnapshotError):
            SnapshotStorage(path).read()
