"""
Groupflow Backend - FastAPI Application

HTTP command layer over the group engine. It provides:
- Flow state (get, replace, validate)
- One endpoint per group command (create, ungroup, toggle, add child,
  subtree collapse), all dispatched through the shared tool executor
- Halo geometry for expanded groups
- Undo/redo
- CORS configuration for local frontend development
"""

import logging
from typing import Any

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import CORS_ORIGINS, HOST, PORT, configure_logging
from .flow_manager import flow_manager
from .models import (
    AddChildRequest, CreateGroupRequest, HaloRequest,
    SubtreeCollapseRequest, ToggleGroupRequest,
)
from .tools import ToolResult
from .validation import validation_summary

logger = logging.getLogger(__name__)


app = FastAPI(
    title="Groupflow API",
    description="Group visibility and synthetic-edge commands for node/edge diagrams",
    version="1.0.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _tool_response(result: ToolResult) -> dict:
    """Map a tool result onto an HTTP response."""
    if result.success:
        return result.to_dict()
    status_code = 404 if result.not_found else 400
    raise HTTPException(status_code=status_code, detail=result.error)


# --- Health Check ---

@app.get("/api/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok"}


# --- Flow State ---

@app.get("/api/flow")
async def get_flow():
    """Get the current flow state."""
    return flow_manager.get_state()


@app.put("/api/flow")
async def replace_flow(flow: dict[str, Any]):
    """Replace the current flow (visibility is re-derived)."""
    try:
        updated = flow_manager.load_flow(flow)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "flow": updated.to_json_dict()}


@app.get("/api/flow/validate")
async def validate_flow():
    """Check the current flow for structural issues."""
    issues = flow_manager.validate()
    return {
        "issues": [i.to_dict() for i in issues],
        "summary": validation_summary(issues),
    }


# --- Group Operations ---

@app.post("/api/flow/group")
async def create_group(request: CreateGroupRequest):
    """Group existing nodes under a new group node."""
    params = {
        "memberIds": request.member_ids,
        "label": request.label,
        "collapse": request.collapse,
    }
    if request.position is not None:
        params["position"] = request.position.model_dump()
    return _tool_response(flow_manager.apply_tool("createGroup", params))


@app.delete("/api/flow/group/{group_id}")
async def ungroup(group_id: str):
    """Remove a group, promoting its members."""
    return _tool_response(flow_manager.apply_tool("ungroup", {"groupId": group_id}))


@app.put("/api/flow/group/{group_id}/expand")
async def toggle_group(group_id: str, request: ToggleGroupRequest):
    """Collapse/expand a group (toggles when no state is given)."""
    params = {"groupId": group_id, "collapsed": request.collapsed, "expand": request.expand}
    return _tool_response(flow_manager.apply_tool("toggleGroupExpansion", params))


@app.post("/api/flow/node/{node_id}/child")
async def add_child(node_id: str, request: AddChildRequest):
    """Add a child node below an existing node."""
    params = {"parentId": node_id, "label": request.label}
    return _tool_response(flow_manager.apply_tool("addChildNode", params))


@app.put("/api/flow/subtree/{node_id}/collapse")
async def toggle_subtree(node_id: str, request: SubtreeCollapseRequest):
    """Collapse/expand everything reachable from a node."""
    params = {"nodeId": node_id, "collapsed": request.collapsed}
    return _tool_response(flow_manager.apply_tool("toggleSubtreeCollapse", params))


# --- Halos ---

@app.post("/api/flow/halos")
async def get_halos(request: HaloRequest):
    """Halo geometry for the expanded groups in the current flow."""
    halos = flow_manager.get_halos(request.padding)
    return {"halos": [h.to_json_dict() for h in halos]}


# --- Undo/Redo ---

@app.post("/api/undo")
async def undo():
    """Undo the last action."""
    flow = flow_manager.undo()
    if flow is not None:
        return {"success": True, "flow": flow.to_json_dict()}
    return {"success": False, "message": "Nothing to undo"}


@app.post("/api/redo")
async def redo():
    """Redo the last undone action."""
    flow = flow_manager.redo()
    if flow is not None:
        return {"success": True, "flow": flow.to_json_dict()}
    return {"success": False, "message": "Nothing to redo"}


def main():
    import uvicorn
    configure_logging()
    logger.info("Starting Groupflow API on %s:%s", HOST, PORT)
    uvicorn.run(app, host=HOST, port=PORT)


if __name__ == "__main__":
    main()
