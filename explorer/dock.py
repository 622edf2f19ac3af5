"""
explorer/dock.py

Hierarchy dock: a tree of the layout in draw order, with click-to-select
and drag-and-drop to reorder or reparent.
"""

from __future__ import annotations

from typing import Dict, List, Optional

from PyQt6.QtCore import Qt, QTimer
from PyQt6.QtWidgets import (
    QAbstractItemView,
    QDockWidget,
    QTreeWidget,
    QTreeWidgetItem,
)

from models import ROOT
from layout.hierarchy import INSIDE
from layout.interaction import row_drop_position
from layout.session import DesignerSession

ID_ROLE = Qt.ItemDataRole.UserRole


class ExplorerTree(QTreeWidget):
    """
    Tree of the session's nodes.

    Children appear in ascending z-order, matching the draw order. The top
    row stands for the ScreenGui itself; dropping onto it moves a node to
    the top level.
    """

    def __init__(self, session: DesignerSession, parent=None):
        super().__init__(parent)
        self.session = session
        self._refreshing = False
        self._last_key = None
        self.setHeaderLabels(["Name", "Type", "Z"])
        self.setColumnWidth(0, 160)
        self.setColumnWidth(1, 110)
        self.setSelectionMode(QAbstractItemView.SelectionMode.SingleSelection)
        self.setDragEnabled(True)
        self.setAcceptDrops(True)
        self.setDropIndicatorShown(True)
        self.setDragDropMode(QAbstractItemView.DragDropMode.InternalMove)
        self.itemSelectionChanged.connect(self._on_selection_changed)

    def refresh(self) -> None:
        """Rebuild the tree from the session's tree rows when they changed."""
        rows = self.session.tree_rows()
        key = (tuple(rows), self.session.project.gui_name, self.session.selected_id)
        if key == self._last_key:
            return
        self._last_key = key
        self._refreshing = True
        try:
            self.clear()
            root_item = QTreeWidgetItem([self.session.project.gui_name, "ScreenGui", ""])
            root_item.setData(0, ID_ROLE, ROOT)
            self.addTopLevelItem(root_item)

            # Pre-order rows: the last item seen at depth d is the parent of depth d+1
            stack: List[QTreeWidgetItem] = [root_item]
            by_id: Dict[str, QTreeWidgetItem] = {}
            for row in rows:
                del stack[row.depth + 1:]
                item = QTreeWidgetItem([row.name, row.kind, str(row.z_index)])
                item.setData(0, ID_ROLE, row.id)
                stack[-1].addChild(item)
                stack.append(item)
                by_id[row.id] = item

            self.expandAll()
            selected = by_id.get(self.session.selected_id)
            if selected is not None:
                self.setCurrentItem(selected)
            else:
                self.clearSelection()
        finally:
            self._refreshing = False

    @staticmethod
    def item_id(item: Optional[QTreeWidgetItem]) -> Optional[str]:
        return item.data(0, ID_ROLE) if item is not None else None

    def _on_selection_changed(self) -> None:
        if self._refreshing:
            return
        node_id = self.item_id(self.currentItem())
        if node_id is None or node_id == ROOT:
            self.session.clear_selection()
        else:
            self.session.select(node_id)

    def dragMoveEvent(self, event):
        target = self.itemAt(event.position().toPoint())
        if target is None:
            event.ignore()
            return
        event.accept()

    def dropEvent(self, event):
        """Translate the drop into one session command."""
        target = self.itemAt(event.position().toPoint())
        dragged_id = self.item_id(self.currentItem())
        target_id = self.item_id(target)
        event.setDropAction(Qt.DropAction.IgnoreAction)
        event.accept()
        if dragged_id in (None, ROOT) or target_id is None or dragged_id == target_id:
            return

        if target_id == ROOT:
            position = INSIDE
        else:
            rect = self.visualItemRect(target)
            y = event.position().y() - rect.top()
            node = self.session.store.get(target_id)
            position = row_drop_position(rect.height(), y, bool(node and node.is_container))

        # The tree is rebuilt by the command; let the drag finish first.
        QTimer.singleShot(0, lambda: self.session.reorder_drop(dragged_id, target_id, position))


class ExplorerDock(QDockWidget):
    """Dock wrapper around :class:`ExplorerTree`."""

    def __init__(self, session: DesignerSession, parent=None):
        super().__init__("Explorer", parent)
        self.tree = ExplorerTree(session)
        self.setWidget(self.tree)
        session.add_listener(self.tree.refresh)
        self.tree.refresh()
