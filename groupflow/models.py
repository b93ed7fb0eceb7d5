"""
Core data models for group-aware flows.

These models define the canonical schema for a flow snapshot:
- Nodes, optionally owned by a group node via `parentGroupId`
- Edges connecting nodes (using source/target naming convention)
- Halo geometry produced for expanded groups

Field Naming Convention:
- Python attributes are snake_case, JSON keys are camelCase
  (`parentGroupId`, `isCollapsed`, `groupHidden`, `subtreeHidden`)
- Both spellings are accepted on input
- Optional markers that are unset are dropped from JSON output, so the
  absence of `subtreeHidden` or `parentGroupId` is preserved on the wire
- For backward compatibility, `isExpanded` on nodes and `from`/`to` on
  edges are accepted on input and converted
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Any
from pydantic import BaseModel, ConfigDict, Field, model_validator
import uuid


class NodeType(str, Enum):
    """Variant tag for nodes."""
    DEFAULT = "default"
    GROUP = "group"


def generate_node_id() -> str:
    """Generate a unique node ID."""
    return f"n{uuid.uuid4().hex[:8]}"


def generate_edge_id() -> str:
    """Generate a unique edge ID."""
    return f"e{uuid.uuid4().hex[:8]}"


def generate_group_id() -> str:
    """Generate a unique group node ID."""
    return f"group-{uuid.uuid4().hex[:8]}"


class Position(BaseModel):
    """Canvas coordinates of a node's top-left corner."""
    x: float = 0
    y: float = 0


class Node(BaseModel):
    """A node in the flow (a plain node or a group)."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(default_factory=generate_node_id)
    type: str = NodeType.DEFAULT.value
    position: Position = Field(default_factory=Position)
    data: dict[str, Any] = Field(default_factory=dict)
    # Group membership (weak reference by id, None = root level)
    parent_group_id: Optional[str] = Field(default=None, alias="parentGroupId")
    # Group nodes only
    is_collapsed: Optional[bool] = Field(default=None, alias="isCollapsed")
    # Derived by the visibility pipeline
    hidden: bool = False
    group_hidden: bool = Field(default=False, alias="groupHidden")
    subtree_hidden: Optional[bool] = Field(default=None, alias="subtreeHidden")

    @model_validator(mode='before')
    @classmethod
    def convert_legacy_fields(cls, data: Any) -> Any:
        """Convert legacy 'isExpanded' into 'isCollapsed'."""
        if isinstance(data, dict) and 'isExpanded' in data:
            data = dict(data)
            expanded = data.pop('isExpanded')
            if 'isCollapsed' not in data and 'is_collapsed' not in data:
                data['isCollapsed'] = expanded is False
        return data

    @property
    def is_group(self) -> bool:
        return self.type == NodeType.GROUP.value

    @property
    def label(self) -> Optional[str]:
        return self.data.get("label")

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict with camelCase keys."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Edge(BaseModel):
    """
    A directed edge connecting two nodes.

    Uses `source` and `target` as canonical field names.
    Accepts `from`/`to` on input for backward compatibility.
    """
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    id: str = Field(default_factory=generate_edge_id)
    source: str
    target: str
    type: Optional[str] = None
    data: dict[str, Any] = Field(default_factory=dict)
    hidden: bool = False
    group_hidden: bool = Field(default=False, alias="groupHidden")

    @model_validator(mode='before')
    @classmethod
    def convert_legacy_fields(cls, data: Any) -> Any:
        """Convert legacy 'from'/'to' fields to 'source'/'target'."""
        if isinstance(data, dict):
            data = dict(data)
            if 'from' in data and 'source' not in data:
                data['source'] = data.pop('from')
            if 'to' in data and 'target' not in data:
                data['target'] = data.pop('to')
        return data

    @property
    def is_synthetic(self) -> bool:
        """True for derived group boundary edges."""
        return bool(self.data.get("isSyntheticGroupEdge"))

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict with camelCase keys."""
        return self.model_dump(by_alias=True, exclude_none=True)


class Flow(BaseModel):
    """
    A flow snapshot: the `{nodes, edges}` pair every operation transforms.

    Operations never mutate a Flow in place; they return a new one.
    """
    nodes: list[Node] = Field(default_factory=list)
    edges: list[Edge] = Field(default_factory=list)

    def to_json_dict(self) -> dict:
        """Convert to JSON-serializable dict with proper field names."""
        return {
            "nodes": [n.to_json_dict() for n in self.nodes],
            "edges": [e.to_json_dict() for e in self.edges],
        }

    @classmethod
    def from_json_dict(cls, data: dict) -> "Flow":
        """Create a Flow from a JSON dict (handles legacy formats)."""
        return cls(
            nodes=[Node.model_validate(n) for n in data.get('nodes', [])],
            edges=[Edge.model_validate(e) for e in data.get('edges', [])],
        )

    def get_node(self, node_id: str) -> Optional[Node]:
        """Get a node by ID (O(n) - use GraphIndex for repeated lookups)."""
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def get_edge(self, edge_id: str) -> Optional[Edge]:
        """Get an edge by ID (O(n))."""
        for edge in self.edges:
            if edge.id == edge_id:
                return edge
        return None


@dataclass(frozen=True)
class NodeBounds:
    """Axis-aligned bounding box over a set of nodes."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float


class HaloBounds(BaseModel):
    x: float
    y: float
    width: float
    height: float


class GroupHalo(BaseModel):
    """Outline drawn around an expanded group's visible members."""
    model_config = ConfigDict(populate_by_name=True)

    group_id: str = Field(alias="groupId")
    label: str = "Group"
    bounds: HaloBounds

    def to_json_dict(self) -> dict:
        return self.model_dump(by_alias=True)


# --- API Request Models ---

class CreateGroupRequest(BaseModel):
    """Request to group existing nodes."""
    model_config = ConfigDict(populate_by_name=True)

    member_ids: list[str] = Field(alias="memberIds")
    label: Optional[str] = None
    position: Optional[Position] = None
    collapse: bool = True


class ToggleGroupRequest(BaseModel):
    """Request to collapse/expand a group (omit both fields to toggle)."""
    collapsed: Optional[bool] = None
    expand: Optional[bool] = None


class AddChildRequest(BaseModel):
    """Request to add a child node below an existing node."""
    label: Optional[str] = None


class SubtreeCollapseRequest(BaseModel):
    """Request to collapse/expand everything reachable from a node."""
    collapsed: bool


class HaloRequest(BaseModel):
    """Request for halo geometry; padding accepts any normalizable form."""
    padding: Optional[Any] = None
