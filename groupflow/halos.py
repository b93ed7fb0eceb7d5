"""
Halo geometry for expanded groups.

An expanded group is drawn as a halo around its visible members instead of
a box. The halo is the members' bounding box outset by a padding that
grows with how many eligible groups are nested inside it:

    pad(depth) = base                                            if depth <= 0
    pad(depth) = base + sum(max(minStep, round(increment * decay**level))
                            for level in range(depth))           otherwise

Horizontal padding is always computed at depth 0; vertical padding uses
the real nesting depth.
"""

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Callable, Optional

from .index import GraphIndex
from .models import GroupHalo, HaloBounds, NodeBounds
from .theme import DEFAULT_AXIS_PADDING, GROUP_HALO_PADDING

if TYPE_CHECKING:
    from .models import Node


DimensionLookup = Callable[["Node"], Optional[dict]]


@dataclass(frozen=True)
class HaloAxisPadding:
    """Padding parameters for one axis."""
    base: float = 0
    increment: float = 0
    decay: float = 1
    min_step: float = 0

    @classmethod
    def from_dict(cls, data: dict) -> "HaloAxisPadding":
        return cls(
            base=data.get("base", 0),
            increment=data.get("increment", 0),
            decay=data.get("decay", 1),
            min_step=data.get("minStep", 0),
        )


@dataclass(frozen=True)
class HaloPadding:
    x: HaloAxisPadding
    y: HaloAxisPadding


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _round_half_up(value: float) -> int:
    # Halves round toward +inf, unlike Python's round()
    return math.floor(value + 0.5)


def normalize_axis_config(value: Any, fallback: HaloAxisPadding) -> HaloAxisPadding:
    """
    Normalize one axis config, filling missing or non-numeric fields from fallback.

    A bare number replaces only `base`.
    """
    if _is_number(value):
        return HaloAxisPadding(
            base=value,
            increment=fallback.increment,
            decay=fallback.decay,
            min_step=fallback.min_step,
        )
    if isinstance(value, HaloAxisPadding):
        return value
    if not isinstance(value, dict):
        return fallback

    def pick(key: str, default: float) -> float:
        candidate = value.get(key)
        return candidate if _is_number(candidate) else default

    return HaloAxisPadding(
        base=pick("base", fallback.base),
        increment=pick("increment", fallback.increment),
        decay=pick("decay", fallback.decay),
        min_step=pick("minStep", fallback.min_step),
    )


def _extract_axis_pair(config: Any, defaults: HaloPadding) -> HaloPadding:
    """
    Resolve x/y configs: explicit x/y key, then the flat config, then defaults.

    A flat dict is a full axis config for both axes: every numeric field it
    carries is used, not just `base`, so `{"base": 20, "increment": 4}`
    sets the vertical increment to 4 rather than keeping the theme's.
    """
    if isinstance(config, HaloPadding):
        return config
    if isinstance(config, dict):
        x_value = config["x"] if config.get("x") is not None else config
        y_value = config["y"] if config.get("y") is not None else config
    else:
        x_value = y_value = config

    return HaloPadding(
        x=normalize_axis_config(x_value, defaults.x),
        y=normalize_axis_config(y_value, defaults.y),
    )


def normalize_halo_padding_config(
    config: Any = None,
    theme_padding: Optional[dict] = None
) -> HaloPadding:
    """
    Normalize a padding config into per-axis parameters.

    Accepted forms:
    - a number: base padding for both axes
    - a flat dict {base, increment, decay, minStep}: both axes
    - a dict with `x`/`y` keys, each in either of the forms above

    Args:
        config: Caller-supplied config (None uses the theme only)
        theme_padding: Fallback padding (defaults to the theme's halo padding)
    """
    default_axis = HaloAxisPadding.from_dict(DEFAULT_AXIS_PADDING)
    theme = theme_padding if theme_padding is not None else GROUP_HALO_PADDING

    theme_defaults = _extract_axis_pair(theme, HaloPadding(x=default_axis, y=default_axis))
    return _extract_axis_pair(config, theme_defaults)


def compute_halo_padding_for_depth(depth: float, config: Any) -> float:
    """
    Padding for a halo with `depth` eligible groups nested inside it.

    Each step is rounded before being clamped to `min_step`.
    """
    if not isinstance(config, HaloAxisPadding):
        config = normalize_axis_config(config, HaloAxisPadding())

    if not _is_number(depth) or not math.isfinite(depth) or depth <= 0:
        return config.base

    padding = config.base
    for level in range(int(depth)):
        try:
            step = config.increment * math.pow(config.decay, level)
        except OverflowError:
            step = math.inf
        if math.isfinite(step):
            padding += max(config.min_step, _round_half_up(step))
        else:
            padding += config.min_step
    return padding


def compute_node_bounds(
    nodes: list["Node"],
    get_node_dimensions: Optional[DimensionLookup] = None
) -> Optional[NodeBounds]:
    """
    Compute the axis-aligned bounding box for a collection of nodes.

    Returns:
        NodeBounds, or None if nodes is empty or any coordinate or
        dimension is non-finite
    """
    if not nodes:
        return None

    min_x = min_y = math.inf
    max_x = max_y = -math.inf

    for node in nodes:
        dimensions = (get_node_dimensions(node) if get_node_dimensions else None) or {}
        width = dimensions.get("width") or 0
        height = dimensions.get("height") or 0
        x = node.position.x
        y = node.position.y

        if not all(math.isfinite(v) for v in (x, y, width, height)):
            return None

        min_x = min(min_x, x)
        min_y = min(min_y, y)
        max_x = max(max_x, x + width)
        max_y = max(max_y, y + height)

    if not all(math.isfinite(v) for v in (min_x, min_y, max_x, max_y)):
        return None

    return NodeBounds(min_x=min_x, min_y=min_y, max_x=max_x, max_y=max_y)


def build_eligible_group_child_map(
    nodes: list["Node"],
    eligible_group_ids: set[str]
) -> dict[str, list[str]]:
    """Map each eligible group to the eligible groups directly inside it."""
    child_map: dict[str, list[str]] = {group_id: [] for group_id in eligible_group_ids}

    for node in nodes:
        if not node.is_group or node.id not in eligible_group_ids:
            continue
        parent_id = node.parent_group_id
        if parent_id and parent_id in eligible_group_ids:
            child_map[parent_id].append(node.id)

    return child_map


def compute_eligible_group_depth_map(child_map: dict[str, list[str]]) -> dict[str, int]:
    """
    Longest chain of eligible groups nested inside each group.

    A group revisited while its own walk is still open is a cycle and
    counts as depth 0.
    """
    memo: dict[str, int] = {}

    for root_id in child_map:
        if root_id in memo:
            continue

        on_stack: set[str] = set()
        # (group_id, exiting): children are scored before their parent exits
        work: list[tuple[str, bool]] = [(root_id, False)]

        while work:
            group_id, exiting = work.pop()
            children = child_map.get(group_id, [])

            if exiting:
                on_stack.discard(group_id)
                max_depth = max((memo.get(child_id, 0) for child_id in children), default=0)
                memo[group_id] = max_depth + 1 if children else 0
                continue

            if group_id in memo:
                continue
            if group_id in on_stack:
                memo[group_id] = 0
                continue

            on_stack.add(group_id)
            work.append((group_id, True))
            for child_id in reversed(children):
                work.append((child_id, False))

    return memo


def get_expanded_group_halos(
    nodes: list["Node"],
    get_node_dimensions: Optional[DimensionLookup] = None,
    padding_config: Any = None
) -> list[GroupHalo]:
    """
    Compute halos for every expanded, non-hidden group with visible members.

    Args:
        nodes: All nodes in the flow, with visibility already applied
        get_node_dimensions: Renderer lookup `node -> {width, height}`
        padding_config: Padding in any form accepted by
            normalize_halo_padding_config (None uses the theme)

    Returns:
        One GroupHalo per eligible group, in node order
    """
    if not nodes:
        return []

    config = normalize_halo_padding_config(padding_config)
    index = GraphIndex.build(nodes)
    candidates: list[tuple["Node", NodeBounds]] = []

    for group_node in nodes:
        if not group_node.is_group:
            continue
        # An expanded group's own `hidden` is always set; only an ancestor hide counts
        if group_node.group_hidden:
            continue
        if group_node.is_collapsed is True:
            continue

        descendant_ids = index.descendants(group_node.id)
        if not descendant_ids:
            continue

        descendants = [
            node for node in (index.get(node_id) for node_id in descendant_ids)
            if node is not None and not node.hidden and not node.group_hidden
        ]
        if not descendants:
            continue

        bounds = compute_node_bounds(descendants, get_node_dimensions)
        if bounds is None:
            continue

        candidates.append((group_node, bounds))

    if not candidates:
        return []

    eligible_group_ids = {node.id for node, _ in candidates}
    child_map = build_eligible_group_child_map(nodes, eligible_group_ids)
    depth_map = compute_eligible_group_depth_map(child_map)

    halos = []
    for node, bounds in candidates:
        nested_depth = depth_map.get(node.id, 0)
        horizontal_padding = compute_halo_padding_for_depth(0, config.x)
        vertical_padding = compute_halo_padding_for_depth(nested_depth, config.y)

        label = node.data.get("label")
        halos.append(GroupHalo(
            group_id=node.id,
            label=str(label) if label is not None else "Group",
            bounds=HaloBounds(
                x=bounds.min_x - horizontal_padding,
                y=bounds.min_y - vertical_padding,
                width=(bounds.max_x - bounds.min_x) + horizontal_padding * 2,
                height=(bounds.max_y - bounds.min_y) + vertical_padding * 2,
            ),
        ))

    return halos
