"""
explorer package

Hierarchy dock listing nodes in draw order.
"""

from explorer.dock import ExplorerDock, ExplorerTree

__all__ = ["ExplorerDock", "ExplorerTree"]
