"""
Groupflow - group visibility and synthetic-edge derivation for node/edge diagrams.

This package provides the group engine used by both the HTTP API and the
MCP tools, ensuring a single source of truth for all group logic.
"""

from .models import (
    # Enums
    NodeType,
    # Core models
    Position,
    Node,
    Edge,
    Flow,
    NodeBounds,
    HaloBounds,
    GroupHalo,
)

from .index import GraphIndex
from .hierarchy import (
    get_group_descendants,
    detect_circular_reference,
    compute_ancestor_hidden_set,
)
from .synthetic_edges import GROUP_EDGE_PREFIX, compute_synthetic_edges
from .visibility import apply_group_visibility
from .halos import (
    HaloAxisPadding,
    HaloPadding,
    normalize_halo_padding_config,
    compute_halo_padding_for_depth,
    compute_node_bounds,
    get_expanded_group_halos,
)
from .validation import (
    validate_group_membership,
    validate_flow,
    ValidationIssue,
    IssueSeverity,
)
from .operations import (
    GroupConstructionError,
    create_group,
    toggle_group_expansion,
    ungroup,
    add_child_node,
    collapse_subtree_by_handles,
)
from .tools import execute_tool, ToolResult

__all__ = [
    # Enums
    "NodeType",
    # Models
    "Position",
    "Node",
    "Edge",
    "Flow",
    "NodeBounds",
    "HaloBounds",
    "GroupHalo",
    # Hierarchy
    "GraphIndex",
    "get_group_descendants",
    "detect_circular_reference",
    "compute_ancestor_hidden_set",
    # Visibility
    "GROUP_EDGE_PREFIX",
    "compute_synthetic_edges",
    "apply_group_visibility",
    # Halos
    "HaloAxisPadding",
    "HaloPadding",
    "normalize_halo_padding_config",
    "compute_halo_padding_for_depth",
    "compute_node_bounds",
    "get_expanded_group_halos",
    # Validation
    "validate_group_membership",
    "validate_flow",
    "ValidationIssue",
    "IssueSeverity",
    # Operations
    "GroupConstructionError",
    "create_group",
    "toggle_group_expansion",
    "ungroup",
    "add_child_node",
    "collapse_subtree_by_handles",
    # Tools
    "execute_tool",
    "ToolResult",
]
