"""
Group mutation operations.

Each operation returns a new flow and ends by running the visibility
pipeline, so results are always internally consistent and operations can
be composed in sequence. Operations addressed by id return the input flow
unchanged when the id does not resolve.
"""

from typing import Callable, Optional, Union

from .models import Flow, Node, Edge, NodeType
from .subtree import DescendantsFn, collapse_subtree_by_handles as collapse_subtree_core
from .visibility import apply_group_visibility


ChildFactory = Callable[[Node], tuple[Node, Edge]]


class GroupConstructionError(ValueError):
    """Raised for structurally invalid create_group calls."""


def _find_group(flow: Flow, group_id: str) -> Optional[Node]:
    for node in flow.nodes:
        if node.id == group_id and node.is_group:
            return node
    return None


def create_group(
    flow: Flow,
    group_node: Union[Node, dict, None],
    member_ids: list[str],
    collapse: bool = True
) -> Flow:
    """
    Make `group_node` the parent of `member_ids` and add it to the flow.

    Membership is not validated here; call validate_group_membership first.

    Args:
        flow: Current flow
        group_node: The new group node (Node or dict); must carry an id
        member_ids: Nodes to place directly inside the group
        collapse: Start collapsed (default) or keep the node's own state

    Raises:
        GroupConstructionError: if group_node or its id is missing
    """
    if isinstance(group_node, dict):
        if not group_node.get("id"):
            raise GroupConstructionError("group_node with valid id is required")
        group_node = Node.model_validate(group_node)
    if group_node is None or not group_node.id:
        raise GroupConstructionError("group_node with valid id is required")

    group_id = group_node.id
    member_set = set(member_ids)

    updated_nodes = [
        node.model_copy(update={"parent_group_id": group_id}) if node.id in member_set else node
        for node in flow.nodes
    ]

    normalized_group = group_node.model_copy(update={
        "type": NodeType.GROUP.value,
        "is_collapsed": True if collapse else (group_node.is_collapsed or False),
        "hidden": False,
        "group_hidden": False,
    })

    return apply_group_visibility(updated_nodes + [normalized_group], flow.edges)


def toggle_group_expansion(
    flow: Flow,
    group_id: str,
    collapse_state: Optional[bool] = None
) -> Flow:
    """
    Flip a group's collapsed state, or set it when `collapse_state` is given.
    """
    group_node = _find_group(flow, group_id)
    if group_node is None:
        return flow

    current_collapsed = group_node.is_collapsed is True
    next_collapsed = (not current_collapsed) if collapse_state is None else collapse_state

    updated_nodes = [
        node.model_copy(update={
            "is_collapsed": next_collapsed,
            "hidden": False,
            "group_hidden": False,
        }) if node.id == group_id else node
        for node in flow.nodes
    ]

    return apply_group_visibility(updated_nodes, flow.edges)


def ungroup(flow: Flow, group_id: str) -> Flow:
    """
    Remove a group node and promote its direct members one level up.

    Members move to the removed group's own parent (or to the root), with
    hidden/groupHidden reset and subtreeHidden cleared.

    Going beyond a pure re-parenting, real edges attached to the group node
    itself are dropped rather than left pointing at a node that no longer
    exists. Its synthetic edges disappear anyway because the group is gone
    when they are regenerated.
    """
    group_node = _find_group(flow, group_id)
    if group_node is None:
        return flow

    promoted_parent = group_node.parent_group_id

    updated_nodes = []
    for node in flow.nodes:
        if node.id == group_id:
            continue
        if node.parent_group_id == group_id:
            node = node.model_copy(update={
                "parent_group_id": promoted_parent,
                "hidden": False,
                "group_hidden": False,
                "subtree_hidden": None,
            })
        updated_nodes.append(node)

    updated_edges = [
        edge for edge in flow.edges
        if edge.source != group_id and edge.target != group_id
    ]

    return apply_group_visibility(updated_nodes, updated_edges)


def add_child_node(flow: Flow, parent_id: str, factory: ChildFactory) -> Flow:
    """
    Append the node and edge produced by `factory(parent)`.

    Args:
        flow: Current flow
        parent_id: Existing node the child hangs off
        factory: Called with the parent node; returns `(node, edge)`
    """
    parent = flow.get_node(parent_id)
    if parent is None:
        return flow

    new_node, new_edge = factory(parent)

    return apply_group_visibility(flow.nodes + [new_node], flow.edges + [new_edge])


def collapse_subtree_by_handles(
    flow: Flow,
    node_id: str,
    collapsed: bool,
    descendants_fn: Optional[DescendantsFn] = None
) -> Flow:
    """
    Collapse/expand an edge-reachable subtree, then reapply group visibility.
    """
    if flow.get_node(node_id) is None:
        return flow

    result = collapse_subtree_core(flow, node_id, collapsed, descendants_fn)
    return apply_group_visibility(result.nodes, result.edges)


def apply_flow_visibility(flow: Flow) -> Flow:
    """Run the visibility pipeline over a whole flow."""
    return apply_group_visibility(flow.nodes, flow.edges)
