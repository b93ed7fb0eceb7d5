"""
Tool executor - named group commands shared by the HTTP and MCP layers.

Both layers dispatch through `execute_tool`, so a command behaves the same
whether it came from the UI or from an agent. Engine operations are silent
no-ops for unknown ids; this layer turns those into "not found" errors for
the caller.
"""

import logging
from dataclasses import dataclass
from typing import Any, Callable, Optional

from .models import (
    Flow, Node, Edge, NodeType, Position,
    generate_edge_id, generate_group_id, generate_node_id,
)
from .operations import (
    add_child_node,
    collapse_subtree_by_handles,
    create_group,
    toggle_group_expansion,
    ungroup,
)
from .theme import CHILD_VERTICAL_GAP, GROUP_LABEL_PREFIX, NODE_HEIGHT
from .validation import validate_group_membership

logger = logging.getLogger(__name__)


@dataclass
class ToolResult:
    """Outcome of a single tool execution."""
    tool: str
    success: bool
    flow: Optional[Flow] = None
    error: Optional[str] = None
    did_change: bool = False
    group_id: Optional[str] = None
    node_id: Optional[str] = None
    not_found: bool = False

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result: dict[str, Any] = {"success": self.success, "tool": self.tool}
        if self.flow is not None:
            result["flow"] = self.flow.to_json_dict()
            result["didChange"] = self.did_change
        if self.error:
            result["error"] = self.error
        if self.group_id:
            result["groupId"] = self.group_id
        if self.node_id:
            result["nodeId"] = self.node_id
        return result


class ToolError(Exception):
    """A tool could not run with the given parameters."""

    def __init__(self, message: str, not_found: bool = False):
        super().__init__(message)
        self.not_found = not_found


def _require(params: dict, key: str) -> Any:
    value = params.get(key)
    if value is None or value == "":
        raise ToolError(f"{key} is required")
    return value


def _next_group_label(flow: Flow) -> str:
    group_count = sum(1 for n in flow.nodes if n.is_group)
    return f"{GROUP_LABEL_PREFIX} {group_count + 1}"


def _members_origin(members: list[Node]) -> Position:
    """Top-left corner of the members' positions."""
    return Position(
        x=min(m.position.x for m in members),
        y=min(m.position.y for m in members),
    )


def _execute_create_group(params: dict, flow: Flow) -> ToolResult:
    member_ids = params.get("memberIds")
    if not isinstance(member_ids, list) or len(member_ids) < 2:
        raise ToolError("At least 2 memberIds are required")

    validation = validate_group_membership(member_ids, flow.nodes)
    if not validation.valid:
        raise ToolError(validation.error)

    members = [flow.get_node(member_id) for member_id in member_ids]
    position = params.get("position")
    group_node = Node(
        id=generate_group_id(),
        type=NodeType.GROUP.value,
        position=Position.model_validate(position) if position else _members_origin(members),
        data={"label": params.get("label") or _next_group_label(flow)},
    )

    updated = create_group(
        flow,
        group_node,
        member_ids,
        collapse=params.get("collapse", True) is not False,
    )
    return ToolResult(tool="createGroup", success=True, flow=updated, group_id=group_node.id)


def _execute_ungroup(params: dict, flow: Flow) -> ToolResult:
    group_id = _require(params, "groupId")
    updated = ungroup(flow, group_id)
    if updated is flow:
        raise ToolError(f"Group {group_id} not found", not_found=True)
    return ToolResult(tool="ungroup", success=True, flow=updated, group_id=group_id)


def _execute_toggle_group_expansion(params: dict, flow: Flow) -> ToolResult:
    group_id = _require(params, "groupId")

    collapsed = params.get("collapsed")
    if collapsed is None and params.get("expand") is not None:
        collapsed = not params["expand"]
    if collapsed is not None and not isinstance(collapsed, bool):
        raise ToolError("collapsed must be a boolean")

    updated = toggle_group_expansion(flow, group_id, collapsed)
    if updated is flow:
        raise ToolError(f"Group {group_id} not found", not_found=True)
    return ToolResult(tool="toggleGroupExpansion", success=True, flow=updated, group_id=group_id)


def _execute_add_child_node(params: dict, flow: Flow) -> ToolResult:
    parent_id = _require(params, "parentId")
    label = params.get("label") or "New Node"
    created: dict[str, str] = {}

    def factory(parent: Node) -> tuple[Node, Edge]:
        child = Node(
            id=generate_node_id(),
            position=Position(
                x=parent.position.x,
                y=parent.position.y + NODE_HEIGHT + CHILD_VERTICAL_GAP,
            ),
            data={"label": label},
            parent_group_id=parent.parent_group_id,
        )
        created["node_id"] = child.id
        edge = Edge(id=generate_edge_id(), source=parent.id, target=child.id, type="smoothstep")
        return child, edge

    updated = add_child_node(flow, parent_id, factory)
    if updated is flow:
        raise ToolError(f"Node {parent_id} not found", not_found=True)
    return ToolResult(tool="addChildNode", success=True, flow=updated, node_id=created["node_id"])


def _execute_toggle_subtree_collapse(params: dict, flow: Flow) -> ToolResult:
    node_id = _require(params, "nodeId")
    collapsed = params.get("collapsed")
    if not isinstance(collapsed, bool):
        raise ToolError("collapsed must be a boolean")

    updated = collapse_subtree_by_handles(flow, node_id, collapsed)
    if updated is flow:
        raise ToolError(f"Node {node_id} not found", not_found=True)
    return ToolResult(tool="toggleSubtreeCollapse", success=True, flow=updated, node_id=node_id)


TOOL_HANDLERS: dict[str, Callable[[dict, Flow], ToolResult]] = {
    "createGroup": _execute_create_group,
    "ungroup": _execute_ungroup,
    "toggleGroupExpansion": _execute_toggle_group_expansion,
    "addChildNode": _execute_add_child_node,
    "toggleSubtreeCollapse": _execute_toggle_subtree_collapse,
}


def execute_tool(tool_name: str, params: Optional[dict], flow: Flow) -> ToolResult:
    """
    Run one named tool against a flow.

    Args:
        tool_name: One of TOOL_HANDLERS
        params: Tool parameters (camelCase keys)
        flow: Current flow (never mutated)

    Returns:
        ToolResult; failures are reported via `success`/`error`, not raised
    """
    handler = TOOL_HANDLERS.get(tool_name)
    if handler is None:
        return ToolResult(tool=tool_name, success=False, error=f"Unknown tool: {tool_name}")

    try:
        result = handler(params or {}, flow)
    except ToolError as e:
        logger.info("Tool %s rejected: %s", tool_name, e)
        return ToolResult(tool=tool_name, success=False, error=str(e), not_found=e.not_found)
    except ValueError as e:
        logger.warning("Tool %s failed: %s", tool_name, e)
        return ToolResult(tool=tool_name, success=False, error=str(e))

    result.did_change = result.flow != flow
    logger.debug("Tool %s succeeded (changed=%s)", tool_name, result.did_change)
    return result

