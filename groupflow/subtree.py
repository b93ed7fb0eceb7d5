"""
Subtree collapse by edge reachability.

Independent of group collapse: collapsing a node hides everything
reachable from it along outgoing edges and marks those nodes with
`subtreeHidden`. Group visibility is NOT applied here; callers that work
with groups wrap the result with `apply_group_visibility`.
"""

from typing import Callable, Optional, Union

from .models import Flow, Node, Edge


DescendantsFn = Callable[[str, list[Node], list[Edge]], list[Union[str, Node]]]


def get_all_descendants(node_id: str, nodes: list[Node], edges: list[Edge]) -> list[Node]:
    """
    Find every node reachable from `node_id` along outgoing edges.

    Args:
        node_id: ID of the root node
        nodes: All nodes in the flow
        edges: All edges in the flow

    Returns:
        Reachable nodes in depth-first order, each listed once (cycles
        in the edge graph terminate)
    """
    node_index = {n.id: n for n in nodes}
    if node_id not in node_index:
        return []

    outgoing: dict[str, list[str]] = {}
    for edge in edges:
        outgoing.setdefault(edge.source, []).append(edge.target)

    visited: set[str] = {node_id}
    descendants: list[Node] = []

    stack = [iter(outgoing.get(node_id, []))]

    while stack:
        target_id = next(stack[-1], None)
        if target_id is None:
            stack.pop()
            continue
        if target_id in visited or target_id not in node_index:
            continue
        visited.add(target_id)
        descendants.append(node_index[target_id])
        stack.append(iter(outgoing.get(target_id, [])))

    return descendants


def collapse_subtree_by_handles(
    flow: Flow,
    node_id: str,
    collapsed: bool,
    descendants_fn: Optional[DescendantsFn] = None
) -> Flow:
    """
    Collapse or expand the subtree reachable from a node.

    Sets `data.collapsed` on the node, toggles `hidden`/`subtreeHidden` on
    its descendants and `hidden` on edges touching them.

    Args:
        flow: Current flow
        node_id: Node whose subtree is collapsed/expanded
        collapsed: True to collapse, False to expand
        descendants_fn: Custom descendant getter returning ids or nodes
            (defaults to get_all_descendants)

    Returns:
        Updated flow (the input flow when node_id is unknown)
    """
    if flow.get_node(node_id) is None:
        return flow

    getter = descendants_fn or get_all_descendants
    descendant_set = {
        entry if isinstance(entry, str) else entry.id
        for entry in getter(node_id, flow.nodes, flow.edges)
    }

    updated_nodes = []
    for node in flow.nodes:
        if node.id == node_id:
            node = node.model_copy(update={"data": {**node.data, "collapsed": collapsed}})
        elif node.id in descendant_set:
            node = node.model_copy(update={
                "hidden": collapsed,
                "subtree_hidden": True if collapsed else None,
            })
        updated_nodes.append(node)

    updated_edges = [
        edge.model_copy(update={"hidden": collapsed})
        if edge.source in descendant_set or edge.target in descendant_set
        else edge
        for edge in flow.edges
    ]

    return Flow(nodes=updated_nodes, edges=updated_edges)
