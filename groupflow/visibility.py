"""
Visibility pipeline - derives hidden flags and synthetic edges.

Every mutation operation ends here, so a returned flow never carries
stale derived state. The pipeline is pure and idempotent: applying it to
its own output yields an equal flow.
"""

from typing import TYPE_CHECKING

from .hierarchy import compute_ancestor_hidden_set
from .index import GraphIndex
from .models import Flow
from .synthetic_edges import compute_synthetic_edges, strip_synthetic_edges

if TYPE_CHECKING:
    from .models import Node, Edge


def compute_node_visibility(node: "Node", hidden_by_ancestor: bool) -> "Node":
    """
    Compute visibility state for a single node.

    Group nodes: visible when collapsed, hidden when expanded (the halo and
    members render instead).
    Regular nodes: hidden inside a collapsed ancestor, or when hidden by the
    user. A previous hide counts as a user hide only if it was not itself
    caused by an ancestor (groupHidden false), so expanding the ancestor
    brings group-hidden nodes back while manual hides stay.
    """
    subtree_hidden = node.subtree_hidden is True

    if node.is_group:
        node_specific_hidden = node.is_collapsed is not True
    else:
        node_specific_hidden = node.hidden and not node.group_hidden

    return node.model_copy(update={
        "group_hidden": hidden_by_ancestor,
        "hidden": hidden_by_ancestor or subtree_hidden or node_specific_hidden,
        # None drops the key on serialization
        "subtree_hidden": True if subtree_hidden else None,
    })


def apply_edge_visibility(
    edges: list["Edge"],
    node_visibility: dict[str, tuple[bool, bool]]
) -> list["Edge"]:
    """
    Hide every edge with a hidden endpoint.

    Args:
        edges: Edges to update
        node_visibility: node_id -> (hidden, group_hidden)
    """
    result = []
    for edge in edges:
        source_hidden, source_group_hidden = node_visibility.get(edge.source, (False, False))
        target_hidden, target_group_hidden = node_visibility.get(edge.target, (False, False))
        result.append(edge.model_copy(update={
            "group_hidden": source_group_hidden or target_group_hidden,
            "hidden": source_hidden or target_hidden,
        }))
    return result


def apply_group_visibility(nodes: list["Node"], edges: list["Edge"]) -> Flow:
    """
    Recompute node/edge visibility and synthetic edges for a flow.

    1. Find nodes hidden by collapsed ancestor groups
    2. Compute each node's hidden/groupHidden flags
    3. Strip old synthetic edges and generate fresh ones
    4. Hide edges whose endpoints are hidden
    """
    index = GraphIndex.build(nodes)
    ancestor_hidden = compute_ancestor_hidden_set(nodes, index)

    next_nodes = []
    node_visibility: dict[str, tuple[bool, bool]] = {}
    for node in nodes:
        next_node = compute_node_visibility(node, node.id in ancestor_hidden)
        next_nodes.append(next_node)
        node_visibility[next_node.id] = (next_node.hidden, next_node.group_hidden)

    real_edges = strip_synthetic_edges(edges)
    # Membership is unchanged by the visibility pass, so the index still applies
    synthetic_edges = compute_synthetic_edges(next_nodes, real_edges, index)

    next_edges = apply_edge_visibility(real_edges + synthetic_edges, node_visibility)
    return Flow(nodes=next_nodes, edges=next_edges)
