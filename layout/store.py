"""
layout/store.py

NodeStore: the entity table of a layout plus its tree indices.

Nodes live in a flat id-keyed map; ``parent_id`` is only a back-reference
used for lookup. Every ancestor walk is bounded by the node count so a
corrupted parent chain can never loop forever.
"""

from __future__ import annotations

from typing import Dict, Iterable, Iterator, List, Optional, Set, Tuple

from models import ROOT, Node


class NodeStore:
    """Id -> Node table for one design canvas.

    Each instance is independent; the editor threads one store through
    every operation instead of sharing module state.

    Args:
        canvas_w: Width of the implicit ROOT container.
        canvas_h: Height of the implicit ROOT container.
    """

    def __init__(self, canvas_w: float = 980, canvas_h: float = 620):
        self.canvas_w = canvas_w
        self.canvas_h = canvas_h
        self._nodes: Dict[str, Node] = {}

    # -- lookup -------------------------------------------------------------

    def __contains__(self, node_id: object) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[Node]:
        return iter(list(self._nodes.values()))

    def get(self, node_id: Optional[str]) -> Optional[Node]:
        if node_id is None:
            return None
        return self._nodes.get(node_id)

    def nodes(self) -> List[Node]:
        """All nodes in insertion order."""
        return list(self._nodes.values())

    def ids(self) -> List[str]:
        return list(self._nodes.keys())

    # -- mutation -----------------------------------------------------------

    def add(self, node: Node) -> Node:
        if node.id in self._nodes:
            raise ValueError(f"Duplicate node id: {node.id}")
        self._nodes[node.id] = node
        return node

    def remove_many(self, node_ids: Iterable[str]) -> List[Node]:
        """Remove every listed node in one step; unknown ids are ignored."""
        removed = []
        for node_id in list(node_ids):
            node = self._nodes.pop(node_id, None)
            if node is not None:
                removed.append(node)
        return removed

    def clear(self) -> None:
        self._nodes.clear()

    def replace_all(self, nodes: Iterable[Node]) -> None:
        """Swap in a complete node set (used by load and new-project)."""
        table: Dict[str, Node] = {}
        for node in nodes:
            table[node.id] = node
        self._nodes = table

    # -- tree indices -------------------------------------------------------

    @staticmethod
    def _sibling_key(node: Node) -> Tuple[int, str]:
        return (node.z_index, node.id)

    def children_of(self, parent_id: str) -> List[Node]:
        """Direct children of *parent_id* in ascending draw order."""
        kids = [n for n in self._nodes.values() if n.parent_id == parent_id]
        kids.sort(key=self._sibling_key)
        return kids

    def children_map(self) -> Dict[str, List[str]]:
        """parent id -> child ids in ascending draw order."""
        buckets: Dict[str, List[Node]] = {}
        for node in self._nodes.values():
            buckets.setdefault(node.parent_id, []).append(node)
        return {
            pid: [n.id for n in sorted(kids, key=self._sibling_key)]
            for pid, kids in buckets.items()
        }

    def parent_size(self, parent_id: str) -> Tuple[float, float]:
        """Box size of *parent_id*; the canvas size for ROOT or a dangling id."""
        if parent_id == ROOT:
            return (self.canvas_w, self.canvas_h)
        parent = self._nodes.get(parent_id)
        if parent is None:
            return (self.canvas_w, self.canvas_h)
        return (parent.w, parent.h)

    def next_z_index(self, parent_id: str) -> int:
        """One past the current max z among *parent_id*'s children."""
        return max((n.z_index for n in self._nodes.values() if n.parent_id == parent_id), default=0) + 1

    def normalize_z(self, parent_id: str) -> None:
        """Rewrite the children's z to the dense sequence 1..N."""
        for i, node in enumerate(self.children_of(parent_id)):
            node.z_index = i + 1

    def ancestors(self, node_id: str) -> List[str]:
        """Parent chain of *node_id* from nearest to farthest (ROOT excluded)."""
        chain: List[str] = []
        seen: Set[str] = {node_id}
        node = self._nodes.get(node_id)
        while node is not None and node.parent_id != ROOT:
            pid = node.parent_id
            if pid in seen:
                break
            seen.add(pid)
            parent = self._nodes.get(pid)
            if parent is None:
                break
            chain.append(pid)
            node = parent
        return chain

    def is_descendant(self, maybe_child_id: Optional[str], maybe_ancestor_id: Optional[str]) -> bool:
        """True if *maybe_ancestor_id* appears on *maybe_child_id*'s parent chain."""
        if maybe_child_id is None or maybe_ancestor_id is None:
            return False
        if maybe_ancestor_id == ROOT:
            return maybe_child_id in self._nodes
        return maybe_ancestor_id in self.ancestors(maybe_child_id)

    def depth_of(self, node_id: str) -> int:
        """Number of node ancestors (0 for top-level nodes)."""
        return len(self.ancestors(node_id))

    def descendants(self, node_id: str) -> Set[str]:
        """All ids below *node_id* (not including it)."""
        return {n.id for n in self._nodes.values() if self.is_descendant(n.id, node_id)}

    def containers(self) -> List[Node]:
        return [n for n in self._nodes.values() if n.is_container]
