"""
Synthetic boundary edges for collapsed groups.

When a group is collapsed, edges crossing its boundary are represented by
one edge between the group box and each external endpoint, per direction.
Synthetic edges are derived state: they are stripped from the input and
regenerated on every pass, never persisted.
"""

from typing import TYPE_CHECKING, Optional

from .index import GraphIndex
from .models import Edge

if TYPE_CHECKING:
    from .models import Node


GROUP_EDGE_PREFIX = "group-edge-"


def create_synthetic_edge(source: str, target: str) -> Edge:
    """Create the boundary edge `source -> target` with a deterministic id."""
    return Edge(
        id=f"{GROUP_EDGE_PREFIX}{source}->{target}",
        source=source,
        target=target,
        type="smoothstep",
        data={"isSyntheticGroupEdge": True},
    )


def strip_synthetic_edges(edges: list[Edge]) -> list[Edge]:
    """Drop previously generated synthetic edges."""
    return [e for e in edges if not e.is_synthetic]


def compute_synthetic_edges(
    nodes: list["Node"],
    edges: list[Edge],
    index: Optional[GraphIndex] = None
) -> list[Edge]:
    """
    Compute boundary edges for every collapsed group.

    Generation does not look at whether the group itself is hidden by an
    outer collapsed group; those edges are suppressed later by edge
    visibility.

    Args:
        nodes: All nodes in the flow
        edges: Real edges (synthetic ones are ignored)
        index: Prebuilt index for the same nodes, if the caller has one

    Returns:
        Synthetic edges, grouped by collapsed group in node order
    """
    index = index or GraphIndex.build(nodes)
    synthetic: list[Edge] = []

    collapsed_groups = [n for n in nodes if n.is_group and n.is_collapsed is True]

    for group_node in collapsed_groups:
        group_id = group_node.id
        member_set = index.descendant_set(group_id)

        # Keyed by (source, target) so several members bridging to the same
        # external node produce a single edge
        boundary: dict[tuple[str, str], Edge] = {}

        for edge in edges:
            if edge.is_synthetic:
                continue

            source_is_member = edge.source in member_set
            target_is_member = edge.target in member_set

            if source_is_member and not target_is_member:
                key = (group_id, edge.target)
            elif target_is_member and not source_is_member:
                key = (edge.source, group_id)
            else:
                continue

            if key not in boundary:
                boundary[key] = create_synthetic_edge(*key)

        synthetic.extend(boundary.values())

    return synthetic
