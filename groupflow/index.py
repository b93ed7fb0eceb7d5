"""
Graph index - O(1) lookups for a single node list.

An index is built once at the start of a top-level call and shared by
every sub-computation of that call. It is never cached across calls.
"""

from typing import TYPE_CHECKING, Iterable, Optional

if TYPE_CHECKING:
    from .models import Node


class GraphIndex:
    """
    Lookup tables for one snapshot of nodes.

    - node_id -> Node
    - parent_group_id -> child node ids (input order)
    - memoized descendant lists per group
    """

    def __init__(self, nodes: Iterable["Node"]):
        self.nodes: list["Node"] = list(nodes)
        self._node_index: dict[str, "Node"] = {}
        self._children: dict[str, list[str]] = {}
        self._descendants: dict[str, list[str]] = {}

        for node in self.nodes:
            self._node_index[node.id] = node
            if node.parent_group_id:
                self._children.setdefault(node.parent_group_id, []).append(node.id)

    @classmethod
    def build(cls, nodes: Iterable["Node"]) -> "GraphIndex":
        return cls(nodes)

    def __contains__(self, node_id: str) -> bool:
        return node_id in self._node_index

    def get(self, node_id: Optional[str]) -> Optional["Node"]:
        if node_id is None:
            return None
        return self._node_index.get(node_id)

    def children(self, node_id: str) -> list[str]:
        """Direct members of a group (by parentGroupId)."""
        return self._children.get(node_id, [])

    def descendants(self, node_id: str) -> list[str]:
        """
        All transitive members of a node, depth-first.

        A visited set stops the walk on cyclic parentGroupId data; in that
        case the result is best-effort and may include the node itself.
        """
        if node_id not in self._node_index:
            return []
        if node_id in self._descendants:
            return self._descendants[node_id]

        visited: set[str] = {node_id}
        result: list[str] = []
        # One child iterator per open level keeps pre-order without recursion
        stack = [iter(self.children(node_id))]

        while stack:
            child_id = next(stack[-1], None)
            if child_id is None:
                stack.pop()
                continue
            result.append(child_id)
            if child_id not in visited:
                visited.add(child_id)
                stack.append(iter(self.children(child_id)))

        self._descendants[node_id] = result
        return result

    def descendant_set(self, node_id: str) -> set[str]:
        return set(self.descendants(node_id))
