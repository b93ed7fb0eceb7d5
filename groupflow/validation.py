"""
Flow validation - group membership checks and structural integrity.

`validate_group_membership` guards group creation and returns a result
value the caller can surface directly. `validate_flow` reports structural
issues in a snapshot received from upstream.
"""

from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .hierarchy import find_group_cycles
from .index import GraphIndex

if TYPE_CHECKING:
    from .models import Flow, Node


class IssueSeverity(str, Enum):
    """Severity levels for validation issues."""
    ERROR = "error"      # Invalid state, must be fixed
    WARNING = "warning"  # Potential problem, should review
    INFO = "info"        # Informational, may be intentional


@dataclass
class ValidationIssue:
    """A single validation issue found in a flow."""
    severity: IssueSeverity
    message: str
    node_id: str | None = None
    edge_id: str | None = None

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON serialization."""
        result = {
            "type": self.severity.value,
            "message": self.message
        }
        if self.node_id:
            result["node_id"] = self.node_id
        if self.edge_id:
            result["edge_id"] = self.edge_id
        return result


@dataclass
class GroupValidation:
    """Outcome of a group membership check."""
    valid: bool
    error: Optional[str] = None

    def to_dict(self) -> dict:
        result = {"valid": self.valid}
        if self.error:
            result["error"] = self.error
        return result


def validate_group_membership(selected_ids: list[str], nodes: list["Node"]) -> GroupValidation:
    """
    Check that a selection of nodes can be grouped together.

    Fails for fewer than 2 ids, duplicate ids, unknown ids, or a pair
    where one node is a descendant of the other.
    """
    if len(selected_ids) < 2:
        return GroupValidation(valid=False, error="Group must contain at least 2 nodes")

    if len(set(selected_ids)) != len(selected_ids):
        return GroupValidation(valid=False, error="Cannot group duplicate nodes")

    index = GraphIndex.build(nodes)
    for node_id in selected_ids:
        if node_id not in index:
            return GroupValidation(valid=False, error=f"Node {node_id} not found")

    # Descendants computed once per node; pairwise checks are then O(1)
    descendant_map = {node_id: index.descendant_set(node_id) for node_id in selected_ids}

    for i, first in enumerate(selected_ids):
        for second in selected_ids[i + 1:]:
            if second in descendant_map[first] or first in descendant_map[second]:
                return GroupValidation(valid=False, error="Cannot group node with its descendant")

    return GroupValidation(valid=True)


def validate_flow(flow: "Flow") -> list[ValidationIssue]:
    """
    Validate a flow snapshot and return a list of issues.

    Checks for:
    - Empty flow - INFO
    - parentGroupId referencing a missing node - WARNING
    - parentGroupId referencing a non-group node - WARNING
    - parentGroupId cycles - ERROR
    - Edges referencing missing nodes - ERROR
    - Synthetic edges present in the input - INFO
    """
    issues: list[ValidationIssue] = []

    if not flow.nodes:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message="Flow has no nodes"
        ))
        return issues

    index = GraphIndex.build(flow.nodes)

    for node in flow.nodes:
        if not node.parent_group_id:
            continue
        parent = index.get(node.parent_group_id)
        if parent is None:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Node references missing group: {node.parent_group_id}",
                node_id=node.id
            ))
        elif not parent.is_group:
            issues.append(ValidationIssue(
                severity=IssueSeverity.WARNING,
                message=f"Node's parentGroupId is not a group: {parent.id}",
                node_id=node.id
            ))

    for cycle in find_group_cycles(flow.nodes):
        issues.append(ValidationIssue(
            severity=IssueSeverity.ERROR,
            message=f"Circular group membership: {' -> '.join(cycle + cycle[:1])}",
            node_id=cycle[0]
        ))

    synthetic_count = 0
    for edge in flow.edges:
        if edge.is_synthetic:
            synthetic_count += 1
            continue
        if edge.source not in index:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Edge references non-existent source node: {edge.source}",
                edge_id=edge.id
            ))
        if edge.target not in index:
            issues.append(ValidationIssue(
                severity=IssueSeverity.ERROR,
                message=f"Edge references non-existent target node: {edge.target}",
                edge_id=edge.id
            ))

    if synthetic_count:
        issues.append(ValidationIssue(
            severity=IssueSeverity.INFO,
            message=f"{synthetic_count} synthetic group edge(s) will be regenerated"
        ))

    return issues


def validation_summary(issues: list[ValidationIssue]) -> dict:
    """
    Create a summary of validation issues.

    Args:
        issues: List of validation issues

    Returns:
        Dictionary with counts by severity
    """
    errors = len([i for i in issues if i.severity == IssueSeverity.ERROR])
    return {
        "total": len(issues),
        "errors": errors,
        "warnings": len([i for i in issues if i.severity == IssueSeverity.WARNING]),
        "info": len([i for i in issues if i.severity == IssueSeverity.INFO]),
        "valid": errors == 0
    }
