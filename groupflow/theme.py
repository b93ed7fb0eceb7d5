"""
Theme defaults consumed by the halo calculator and the command layer.

Halo padding grows with nesting depth on the vertical axis:
each level adds `increment * decay**level` (rounded, at least `minStep`).
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .models import Node


# Spacing scale (4px base unit)
SPACING_2 = 8
SPACING_3 = 12

# Used when neither the caller nor the theme specifies an axis field
DEFAULT_AXIS_PADDING = {
    "base": 16,
    "increment": 0,
    "decay": 1,
    "minStep": 0,
}

GROUP_HALO_PADDING = {
    "x": {
        "base": 18,
    },
    "y": {
        "base": SPACING_3,
        "increment": SPACING_2,
        "decay": 0.7,
        "minStep": 1,
    },
}

# Standard node dimensions shared with the renderer
NODE_WIDTH = 172
NODE_HEIGHT = 70

# Vertical gap used when placing a new child below its parent
CHILD_VERTICAL_GAP = 80

GROUP_LABEL_PREFIX = "Group"


def default_node_dimensions(node: "Node") -> dict:
    """Width/height of a node, honouring explicit sizes set by the renderer."""
    extra = node.model_extra or {}
    width = extra.get("width")
    height = extra.get("height")
    return {
        "width": width if isinstance(width, (int, float)) and not isinstance(width, bool) else NODE_WIDTH,
        "height": height if isinstance(height, (int, float)) and not isinstance(height, bool) else NODE_HEIGHT,
    }
