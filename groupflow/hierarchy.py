"""
Group hierarchy resolution over the `parentGroupId` relation.

Every traversal here is cycle-safe: upstream data is not guaranteed to be
acyclic, so visited sets stop walks that would otherwise loop forever.
"""

from typing import TYPE_CHECKING, Optional

from .index import GraphIndex

if TYPE_CHECKING:
    from .models import Node


def get_group_descendants(
    node_id: str,
    nodes: list["Node"],
    index: Optional[GraphIndex] = None
) -> list[str]:
    """
    Collect all transitive members of a node via parentGroupId.

    Args:
        node_id: The group (or any node) to start from
        nodes: All nodes in the flow
        index: Prebuilt index for the same nodes, if the caller has one

    Returns:
        Descendant ids in depth-first order ([] for an unknown id)
    """
    index = index or GraphIndex.build(nodes)
    return list(index.descendants(node_id))


def detect_circular_reference(
    node_id: str,
    potential_parent_id: str,
    nodes: list["Node"]
) -> bool:
    """True if making `potential_parent_id` the parent of `node_id` would form a cycle."""
    index = GraphIndex.build(nodes)
    if node_id not in index or potential_parent_id not in index:
        return False
    return potential_parent_id in index.descendant_set(node_id)


def compute_ancestor_hidden_set(
    nodes: list["Node"],
    index: Optional[GraphIndex] = None
) -> set[str]:
    """
    Find every node hidden because some ancestor group is collapsed.

    Each chain walk records its result for all nodes it passed through, so
    later lookups sharing an ancestor chain resolve in O(1). The memo table
    lives only for this call.
    """
    index = index or GraphIndex.build(nodes)
    memo: dict[str, bool] = {}

    def resolve(node: "Node") -> bool:
        if node.id in memo:
            return memo[node.id]

        path = [node.id]
        on_path = {node.id}
        result = False
        current = node

        while current.parent_group_id:
            parent = index.get(current.parent_group_id)
            if parent is None:
                break
            if parent.is_collapsed is True:
                result = True
                break
            if parent.id in memo:
                result = memo[parent.id]
                break
            if parent.id in on_path:
                # Cycle with no collapsed member
                break
            path.append(parent.id)
            on_path.add(parent.id)
            current = parent

        for node_id in path:
            memo[node_id] = result
        return result

    return {node.id for node in index.nodes if resolve(node)}


def find_group_cycles(nodes: list["Node"]) -> list[list[str]]:
    """
    Find parentGroupId cycles.

    Returns:
        List of cycles, each a list of node ids in parent order
    """
    index = GraphIndex.build(nodes)
    cycles: list[list[str]] = []
    settled: set[str] = set()

    for node in index.nodes:
        if node.id in settled:
            continue

        path: list[str] = []
        position: dict[str, int] = {}
        current = node
        while current is not None and current.id not in settled:
            if current.id in position:
                cycles.append(path[position[current.id]:])
                break
            position[current.id] = len(path)
            path.append(current.id)
            current = index.get(current.parent_group_id)

        settled.update(path)

    return cycles
