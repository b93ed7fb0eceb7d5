"""Pytest configuration and shared fixtures for groupflow tests."""

import pytest

from groupflow import Edge, Flow, Node
from groupflow.flow_manager import flow_manager


def make_node(node_id, x=0, y=0, **kwargs):
    """Build a plain node at (x, y)."""
    return Node(id=node_id, position={"x": x, "y": y}, data={"label": node_id}, **kwargs)


def make_group(group_id, collapsed=True, **kwargs):
    """Build a group node."""
    return Node(id=group_id, type="group", is_collapsed=collapsed, data={"label": group_id}, **kwargs)


def make_edge(source, target):
    return Edge(id=f"{source}-{target}", source=source, target=target)


@pytest.fixture
def flat_flow():
    """Three root-level nodes: X -> Z <- Y, plus W unconnected."""
    return Flow(
        nodes=[make_node("X"), make_node("Y", x=200), make_node("Z", y=200), make_node("W", x=400)],
        edges=[make_edge("X", "Z"), make_edge("Y", "Z")],
    )


@pytest.fixture
def collapsed_group_flow():
    """Collapsed group G1 holding X and Y, both pointing at external Z."""
    return Flow(
        nodes=[
            make_node("X", parent_group_id="G1"),
            make_node("Y", x=200, parent_group_id="G1"),
            make_node("Z", y=300),
            make_group("G1"),
        ],
        edges=[make_edge("X", "Z"), make_edge("Y", "Z")],
    )


@pytest.fixture
def nested_flow():
    """
    Outer group G1 containing A and inner group G2; G2 contains B and C.

        A -> B, B -> C, C -> D (D external)
    """
    return Flow(
        nodes=[
            make_group("G1", collapsed=False),
            make_group("G2", collapsed=False, parent_group_id="G1"),
            make_node("A", x=0, y=0, parent_group_id="G1"),
            make_node("B", x=0, y=200, parent_group_id="G2"),
            make_node("C", x=200, y=200, parent_group_id="G2"),
            make_node("D", x=600, y=600),
        ],
        edges=[make_edge("A", "B"), make_edge("B", "C"), make_edge("C", "D")],
    )


@pytest.fixture
def manager():
    """The application's flow manager, reset around each test."""
    flow_manager.reset()
    yield flow_manager
    flow_manager.reset()


LONG_CHAIN = 1500


@pytest.fixture
def long_chain_flow():
    """Edge chain n0 -> n1 -> ... -> n1499."""
    return Flow(
        nodes=[make_node(f"n{i}", y=i * 150) for i in range(LONG_CHAIN)],
        edges=[make_edge(f"n{i}", f"n{i + 1}") for i in range(LONG_CHAIN - 1)],
    )


@pytest.fixture
def deep_group_nodes():
    """Expanded groups g0..g1499, each inside the previous, with one leaf in g1499."""
    nodes = [make_group("g0", collapsed=False)]
    for i in range(1, LONG_CHAIN):
        nodes.append(make_group(f"g{i}", collapsed=False, parent_group_id=f"g{i - 1}"))
    nodes.append(make_node("leaf", parent_group_id=f"g{LONG_CHAIN - 1}"))
    return nodes
