"""
Flow Manager - current flow state and undo/redo history.

This module implements:
- Single flow state (one flow open at a time), held in memory
- Linear undo/redo history using snapshots
- Tool execution through the shared executor, committing only changes
- Change callbacks for real-time sync

Persisting the flow is the caller's concern; callers read `flow` after a
change and store it wherever they keep snapshots.
"""

import logging
from typing import Callable, Optional

from .config import MAX_HISTORY
from .halos import get_expanded_group_halos
from .models import Flow, GroupHalo
from .operations import apply_flow_visibility
from .theme import default_node_dimensions
from .tools import ToolResult, execute_tool
from .validation import ValidationIssue, validate_flow

logger = logging.getLogger(__name__)


class FlowManager:
    """
    Manages a single flow's state and history.

    The history system works via snapshots:
    - Each committed mutation stores the previous flow as a JSON snapshot
    - Undo restores the previous snapshot
    - Redo re-applies a snapshot from the future stack
    """

    def __init__(self, max_history: int = MAX_HISTORY):
        self._flow: Flow = Flow()
        self._history: list[dict] = []  # Past states (snapshots)
        self._future: list[dict] = []   # Future states (for redo)
        self._max_history = max_history
        self._on_change_callbacks: list[Callable] = []

    # --- Properties ---

    @property
    def flow(self) -> Flow:
        """Get the current flow."""
        return self._flow

    @property
    def can_undo(self) -> bool:
        """Check if undo is available."""
        return len(self._history) > 0

    @property
    def can_redo(self) -> bool:
        """Check if redo is available."""
        return len(self._future) > 0

    # --- Change Callbacks ---

    def on_change(self, callback: Callable):
        """Register a callback for flow changes."""
        self._on_change_callbacks.append(callback)

    def _notify_change(self):
        """Notify all registered callbacks of a change."""
        for callback in self._on_change_callbacks:
            callback()

    # --- History Management ---

    def _save_to_history(self):
        """Save current state to history before a mutation."""
        # New action invalidates redo stack
        self._future.clear()
        self._history.append(self._flow.to_json_dict())

        if len(self._history) > self._max_history:
            self._history.pop(0)

    def _commit(self, flow: Flow):
        self._save_to_history()
        self._flow = flow
        self._notify_change()

    # --- State ---

    def load_flow(self, flow: Flow | dict) -> Flow:
        """
        Replace the current flow with a snapshot from the caller.

        The snapshot is re-derived through the visibility pipeline, so stale
        hidden flags and synthetic edges in the input are corrected.
        """
        if isinstance(flow, dict):
            flow = Flow.from_json_dict(flow)
        self._commit(apply_flow_visibility(flow))
        logger.info("Loaded flow (%d nodes, %d edges)", len(self._flow.nodes), len(self._flow.edges))
        return self._flow

    def reset(self):
        """Drop the current flow and all history."""
        self._flow = Flow()
        self._history.clear()
        self._future.clear()
        self._notify_change()

    def get_state(self) -> dict:
        """Get the full current state for API responses."""
        return {
            "flow": self._flow.to_json_dict(),
            "can_undo": self.can_undo,
            "can_redo": self.can_redo,
        }

    # --- Tools ---

    def apply_tool(self, tool_name: str, params: Optional[dict] = None) -> ToolResult:
        """Run a tool against the current flow and commit it if it changed anything."""
        result = execute_tool(tool_name, params, self._flow)
        if result.success and result.did_change:
            self._commit(result.flow)
            logger.info("Applied %s", tool_name)
        return result

    # --- Undo/Redo ---

    def undo(self) -> Optional[Flow]:
        """Undo the last action."""
        if not self.can_undo:
            return None

        self._future.append(self._flow.to_json_dict())
        self._flow = Flow.from_json_dict(self._history.pop())
        self._notify_change()
        return self._flow

    def redo(self) -> Optional[Flow]:
        """Redo the last undone action."""
        if not self.can_redo:
            return None

        self._history.append(self._flow.to_json_dict())
        self._flow = Flow.from_json_dict(self._future.pop())
        self._notify_change()
        return self._flow

    # --- Derived Views ---

    def get_halos(self, padding=None) -> list[GroupHalo]:
        """Halo geometry for the current flow using the standard node dimensions."""
        return get_expanded_group_halos(self._flow.nodes, default_node_dimensions, padding)

    def validate(self) -> list[ValidationIssue]:
        """Validate the current flow."""
        return validate_flow(self._flow)


# Global instance for the application
flow_manager = FlowManager()
