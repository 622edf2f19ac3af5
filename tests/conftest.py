"""Shared fixtures and helpers for the GuiForge tests."""
from __future__ import annotations

import os
import sys

import pytest

sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# Widget tests run without a display
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from layout.session import DesignerSession  # noqa: E402
from layout.store import NodeStore  # noqa: E402
from models import ROOT, Node  # noqa: E402


def counter_ids(prefix: str = "n"):
    """Id factory yielding ``n1, n2, ...`` so test output is predictable."""
    state = {"i": 0}

    def next_id() -> str:
        state["i"] += 1
        return f"{prefix}{state['i']}"
    return next_id


def add_node(store: NodeStore, node_id: str, kind: str = "Frame", parent_id: str = ROOT, **fields) -> Node:
    """Insert a node with the kind's defaults and selected overrides (no clamping)."""
    node = Node.create(kind, node_id, parent_id=parent_id,
                       parent_size=store.parent_size(parent_id),
                       z_index=store.next_z_index(parent_id))
    for key, value in fields.items():
        setattr(node, key, value)
    store.add(node)
    return node


@pytest.fixture(scope="session")
def qapp():
    """Provide a single QApplication for the entire test session."""
    from PyQt6.QtWidgets import QApplication
    app = QApplication.instance() or QApplication(sys.argv)
    yield app


@pytest.fixture()
def store():
    return NodeStore()


@pytest.fixture()
def session():
    """A session with deterministic ids and no nodes."""
    return DesignerSession(id_factory=counter_ids())
