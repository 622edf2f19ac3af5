"""Tests for layout/hierarchy.py and the NodeStore tree indices."""
from __future__ import annotations

import pytest

from conftest import add_node
from layout import hierarchy
from layout.geometry import absolute_anchor
from layout.store import NodeStore
from models import ROOT, ExtensionObject


def _z(store: NodeStore, *ids):
    return [store.get(i).z_index for i in ids]


def _assert_dense(store: NodeStore, parent_id: str):
    zs = sorted(n.z_index for n in store.children_of(parent_id))
    assert zs == list(range(1, len(zs) + 1))


# ─────────────────────────────────────────────────────────
# NodeStore
# ─────────────────────────────────────────────────────────


class TestNodeStore:
    def test_duplicate_id_rejected(self, store):
        add_node(store, "a")
        with pytest.raises(ValueError):
            add_node(store, "a")

    def test_children_sorted_by_z_then_id(self, store):
        add_node(store, "b", z_index=1)
        add_node(store, "a", z_index=1)
        add_node(store, "c", z_index=0)
        assert [n.id for n in store.children_of(ROOT)] == ["c", "a", "b"]

    def test_ancestors_bounded_on_cycle(self, store):
        add_node(store, "a", parent_id="b")
        add_node(store, "b", parent_id="a")
        assert store.ancestors("a") == ["b"]

    def test_parent_size_of_dangling_parent_is_canvas(self, store):
        assert store.parent_size("nope") == (980, 620)


# ─────────────────────────────────────────────────────────
# Create / reparent
# ─────────────────────────────────────────────────────────


class TestCreateAndReparent:
    def test_create_stacks_on_top(self, store):
        for i in range(3):
            hierarchy.create_node(store, "TextLabel", f"t{i}")
        assert _z(store, "t0", "t1", "t2") == [1, 2, 3]

    def test_create_inside_container_is_centred_and_clamped(self, store):
        add_node(store, "f")
        node = hierarchy.create_node(store, "TextLabel", "t", parent_id="f")
        assert node.parent_id == "f"
        assert (node.x, node.y) == (160, 90)

    def test_reparent_keeps_world_anchor(self, store):
        add_node(store, "f")
        add_node(store, "t", "TextLabel")
        before = absolute_anchor(store, "t")
        assert hierarchy.reparent(store, "t", "f")
        assert store.get("t").parent_id == "f"
        assert (store.get("t").x, store.get("t").y) == (160, 90)
        assert absolute_anchor(store, "t") == before

    def test_reparent_goes_on_top_and_renormalises(self, store):
        add_node(store, "f")
        add_node(store, "a", "TextLabel")
        add_node(store, "b", "TextLabel")
        add_node(store, "inner", "TextLabel", parent_id="f", w=50, h=20)
        assert hierarchy.reparent(store, "a", "f")
        assert _z(store, "inner", "a") == [1, 2]
        assert _z(store, "f", "b") == [1, 2]

    def test_reparent_to_non_container_rejected(self, store):
        add_node(store, "a", "TextLabel")
        add_node(store, "b", "TextLabel")
        assert not hierarchy.reparent(store, "a", "b")
        assert store.get("a").parent_id == ROOT

    def test_reparent_into_own_descendant_rejected(self, store):
        add_node(store, "outer")
        add_node(store, "inner", parent_id="outer", w=100, h=50)
        assert not hierarchy.reparent(store, "outer", "inner")
        assert not hierarchy.reparent(store, "outer", "outer")
        assert store.get("outer").parent_id == ROOT

    def test_reparent_to_same_parent_is_noop(self, store):
        add_node(store, "a")
        assert not hierarchy.reparent(store, "a", ROOT)

    def test_reparent_clamps_into_small_container(self, store):
        add_node(store, "f", w=100, h=60)
        add_node(store, "t", "TextLabel")
        assert hierarchy.reparent(store, "t", "f")
        t = store.get("t")
        assert (t.w, t.h) == (100, 60)

    def test_reparent_clamps_the_moved_subtree(self, store):
        add_node(store, "s", w=100, h=60)
        add_node(store, "b", w=300, h=200)
        add_node(store, "k", "TextLabel", parent_id="b", w=250, h=80, x=150, y=100)
        assert hierarchy.reparent(store, "b", "s")
        b, k = store.get("b"), store.get("k")
        assert (b.w, b.h) == (100, 60)
        assert (k.w, k.h, k.x, k.y) == (100, 60, 50, 30)


# ─────────────────────────────────────────────────────────
# Sibling order
# ─────────────────────────────────────────────────────────


class TestReorder:
    @pytest.fixture()
    def abc(self, store):
        for name in ("a", "b", "c"):
            add_node(store, name, "TextLabel")
        return store

    def test_drop_above_first(self, abc):
        assert hierarchy.reorder_relative(abc, "c", "a", hierarchy.ABOVE)
        assert _z(abc, "c", "a", "b") == [1, 2, 3]

    def test_drop_below_last(self, abc):
        assert hierarchy.reorder_relative(abc, "a", "c", hierarchy.BELOW)
        assert _z(abc, "b", "c", "a") == [1, 2, 3]

    def test_drop_above_later_sibling(self, abc):
        assert hierarchy.reorder_relative(abc, "a", "c", hierarchy.ABOVE)
        assert _z(abc, "b", "a", "c") == [1, 2, 3]

    def test_drop_from_other_parent_reparents_first(self, store):
        add_node(store, "f")
        add_node(store, "t", "TextLabel")
        add_node(store, "inner", "TextLabel", parent_id="f", w=50, h=20)
        assert hierarchy.reorder_relative(store, "t", "inner", hierarchy.ABOVE)
        assert store.get("t").parent_id == "f"
        assert _z(store, "t", "inner") == [1, 2]
        _assert_dense(store, ROOT)

    def test_swap_up_and_down(self, abc):
        assert hierarchy.swap_with_neighbor(abc, "b", hierarchy.UP)
        assert _z(abc, "b", "a", "c") == [1, 2, 3]
        assert hierarchy.swap_with_neighbor(abc, "b", hierarchy.DOWN)
        assert _z(abc, "a", "b", "c") == [1, 2, 3]

    def test_swap_at_edge_is_noop(self, abc):
        assert not hierarchy.swap_with_neighbor(abc, "a", hierarchy.UP)
        assert not hierarchy.swap_with_neighbor(abc, "c", hierarchy.DOWN)
        assert _z(abc, "a", "b", "c") == [1, 2, 3]


# ─────────────────────────────────────────────────────────
# Delete / duplicate
# ─────────────────────────────────────────────────────────


class TestDeleteDuplicate:
    def test_delete_removes_subtree_and_renormalises(self, store):
        add_node(store, "a", "TextLabel")
        add_node(store, "f")
        add_node(store, "c", parent_id="f", w=100, h=50)
        add_node(store, "gc", "TextLabel", parent_id="c", w=40, h=20)
        add_node(store, "b", "TextLabel")
        removed = hierarchy.delete_subtree(store, "f")
        assert removed == {"f", "c", "gc"}
        assert store.ids() == ["a", "b"]
        assert _z(store, "a", "b") == [1, 2]

    def test_delete_unknown_is_empty(self, store):
        assert hierarchy.delete_subtree(store, "missing") == set()

    def test_duplicate_offsets_and_stacks_on_top(self, store):
        add_node(store, "t", "TextLabel")
        add_node(store, "u", "TextLabel")
        dup = hierarchy.duplicate(store, "t", "t2", offset=12)
        assert dup.name == "TextLabelCopy"
        assert (dup.x, dup.y) == (502, 322)
        assert dup.z_index == 3
        assert store.children_of(ROOT)[-1].id == "t2"

    def test_duplicate_does_not_copy_children(self, store):
        add_node(store, "f")
        add_node(store, "c", "TextLabel", parent_id="f", w=50, h=20)
        hierarchy.duplicate(store, "f", "f2")
        assert store.children_of("f2") == []

    def test_duplicate_gives_extensions_fresh_ids(self, store):
        node = add_node(store, "t", "TextLabel")
        node.extensions.append(ExtensionObject.create("UICorner", "e1"))
        ids = iter(["e2"])
        dup = hierarchy.duplicate(store, "t", "t2", ext_id_factory=lambda: next(ids))
        assert [e.id for e in dup.extensions] == ["e2"]
        dup.extensions[0].props["cornerRadius"] = 99
        assert node.extensions[0].props["cornerRadius"] == 8
