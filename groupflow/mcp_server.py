#!/usr/bin/env python3
"""
Groupflow MCP Server

Provides MCP tools for AI agents to group, ungroup and collapse parts of
the flow. Every tool goes through the HTTP API, so agents and the UI run
exactly the same commands.
"""

import json
import logging
from typing import Any, Optional

import httpx
from mcp.server.fastmcp import FastMCP

from .config import API_BASE, configure_logging

logger = logging.getLogger(__name__)

mcp = FastMCP("groupflow")


# --- HTTP Client Helper ---

def api_request(method: str, endpoint: str, **kwargs) -> dict:
    """Make a request to the Groupflow backend."""
    url = f"{API_BASE}{endpoint}"
    with httpx.Client(timeout=30.0) as client:
        if method == "GET":
            response = client.get(url, params=kwargs.get("params"))
        elif method == "POST":
            response = client.post(url, json=kwargs.get("json"))
        elif method == "PUT":
            response = client.put(url, json=kwargs.get("json"))
        elif method == "DELETE":
            response = client.delete(url)
        else:
            raise ValueError(f"Unknown method: {method}")

        if response.status_code >= 400:
            error = response.json().get("detail", "Unknown error")
            logger.warning("%s %s failed: %s", method, endpoint, error)
            raise Exception(f"API error: {error}")

        return response.json()


# ============================================================================
# INSPECTION TOOLS
# ============================================================================

@mcp.tool()
def flow_get_current() -> str:
    """
    Get the full current flow state.

    Returns all nodes (with group membership, collapse state and derived
    hidden flags) and edges, including synthetic group boundary edges.
    """
    result = api_request("GET", "/flow")
    return json.dumps(result, indent=2)


@mcp.tool()
def flow_validate() -> str:
    """
    Check the current flow for structural problems.

    Reports dangling or circular group membership and edges pointing at
    missing nodes.
    """
    result = api_request("GET", "/flow/validate")
    return json.dumps(result, indent=2)


@mcp.tool()
def flow_get_halos(padding: Optional[Any] = None) -> str:
    """
    Get halo outlines for expanded groups.

    Args:
        padding: Optional padding config - a number, {base, increment,
            decay, minStep}, or {x: ..., y: ...}

    Returns one bounding box per expanded group with visible members.
    """
    result = api_request("POST", "/flow/halos", json={"padding": padding})
    return json.dumps(result, indent=2)


# ============================================================================
# GROUP TOOLS
# ============================================================================

@mcp.tool()
def flow_create_group(
    member_ids: list[str],
    label: Optional[str] = None,
    collapse: bool = True
) -> str:
    """
    Group two or more nodes under a new group node.

    Args:
        member_ids: IDs of the nodes to group (at least 2, none nested in another)
        label: Group label (defaults to "Group N")
        collapse: Start collapsed (members hidden, boundary edges shown)

    Returns the updated flow and the new group's ID.
    """
    payload = {"memberIds": member_ids, "label": label, "collapse": collapse}
    result = api_request("POST", "/flow/group", json=payload)
    return json.dumps(result, indent=2)


@mcp.tool()
def flow_ungroup(group_id: str) -> str:
    """
    Remove a group node; its members move up to the group's parent.

    Args:
        group_id: ID of the group to remove
    """
    result = api_request("DELETE", f"/flow/group/{group_id}")
    return json.dumps(result, indent=2)


@mcp.tool()
def flow_toggle_group(group_id: str, collapsed: Optional[bool] = None) -> str:
    """
    Collapse or expand a group.

    Args:
        group_id: ID of the group
        collapsed: True to collapse, False to expand, omit to toggle
    """
    result = api_request("PUT", f"/flow/group/{group_id}/expand", json={"collapsed": collapsed})
    return json.dumps(result, indent=2)


@mcp.tool()
def flow_add_child(parent_id: str, label: Optional[str] = None) -> str:
    """
    Add a new node below an existing node, connected by an edge.

    Args:
        parent_id: ID of the existing node
        label: Label for the new node
    """
    result = api_request("POST", f"/flow/node/{parent_id}/child", json={"label": label})
    return json.dumps(result, indent=2)


@mcp.tool()
def flow_toggle_subtree(node_id: str, collapsed: bool) -> str:
    """
    Hide or show everything reachable from a node along its outgoing edges.

    Args:
        node_id: ID of the subtree root
        collapsed: True to hide the subtree, False to show it
    """
    result = api_request("PUT", f"/flow/subtree/{node_id}/collapse", json={"collapsed": collapsed})
    return json.dumps(result, indent=2)


def main():
    configure_logging()
    mcp.run()


if __name__ == "__main__":
    main()
