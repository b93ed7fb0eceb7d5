"""Unit tests for group mutation operations."""

import pytest
from conftest import make_edge, make_group, make_node

from groupflow import (
    Edge,
    Flow,
    GroupConstructionError,
    Node,
    add_child_node,
    apply_group_visibility,
    collapse_subtree_by_handles,
    create_group,
    get_group_descendants,
    toggle_group_expansion,
    ungroup,
)


def by_id(items):
    return {item.id: item for item in items}


class TestCreateGroup:
    """Tests for create_group."""

    def test_members_become_descendants(self, flat_flow):
        result = create_group(flat_flow, {"id": "G1", "data": {"label": "Mine"}}, ["X", "Y"])
        assert sorted(get_group_descendants("G1", result.nodes)) == ["X", "Y"]

    def test_collapsed_by_default(self, flat_flow):
        result = create_group(flat_flow, Node(id="G1"), ["X", "Y"])
        nodes = by_id(result.nodes)
        assert nodes["G1"].type == "group"
        assert nodes["G1"].is_collapsed is True
        assert nodes["G1"].hidden is False
        assert nodes["X"].hidden and nodes["Y"].hidden

    def test_synthetic_edge_generated(self, flat_flow):
        result = create_group(flat_flow, Node(id="G1"), ["X", "Y"])
        synthetic = [e for e in result.edges if e.is_synthetic]
        assert [(e.source, e.target) for e in synthetic] == [("G1", "Z")]

    def test_keep_expanded(self, flat_flow):
        result = create_group(flat_flow, Node(id="G1", is_collapsed=False), ["X", "Y"], collapse=False)
        nodes = by_id(result.nodes)
        assert nodes["G1"].is_collapsed is False
        assert not nodes["X"].hidden
        assert not any(e.is_synthetic for e in result.edges)

    def test_group_appended_last(self, flat_flow):
        result = create_group(flat_flow, Node(id="G1"), ["X", "Y"])
        assert result.nodes[-1].id == "G1"
        assert [n.id for n in result.nodes[:-1]] == ["X", "Y", "Z", "W"]

    def test_input_flow_untouched(self, flat_flow):
        create_group(flat_flow, Node(id="G1"), ["X", "Y"])
        assert all(n.parent_group_id is None for n in flat_flow.nodes)
        assert len(flat_flow.nodes) == 4

    @pytest.mark.parametrize("group_node", [None, {}, {"id": ""}, Node(id="")])
    def test_group_node_requires_id(self, flat_flow, group_node):
        with pytest.raises(GroupConstructionError):
            create_group(flat_flow, group_node, ["X", "Y"])

    def test_construction_error_is_value_error(self, flat_flow):
        with pytest.raises(ValueError):
            create_group(flat_flow, None, ["X", "Y"])

    def test_nested_group(self, flat_flow):
        inner = create_group(flat_flow, Node(id="G1"), ["X", "Y"])
        outer = create_group(inner, Node(id="G2"), ["G1", "Z"])
        assert sorted(get_group_descendants("G2", outer.nodes)) == ["G1", "X", "Y", "Z"]
        assert by_id(outer.nodes)["G1"].hidden is True


class TestToggleGroupExpansion:
    """Tests for toggle_group_expansion."""

    def test_flip(self, collapsed_group_flow):
        flow = apply_group_visibility(collapsed_group_flow.nodes, collapsed_group_flow.edges)
        expanded = toggle_group_expansion(flow, "G1")
        nodes = by_id(expanded.nodes)
        assert nodes["G1"].is_collapsed is False
        assert not nodes["X"].hidden and not nodes["Y"].hidden
        assert not any(e.is_synthetic for e in expanded.edges)

        collapsed = toggle_group_expansion(expanded, "G1")
        assert by_id(collapsed.nodes)["X"].hidden is True

    def test_explicit_state(self, collapsed_group_flow):
        result = toggle_group_expansion(collapsed_group_flow, "G1", True)
        assert by_id(result.nodes)["G1"].is_collapsed is True
        result = toggle_group_expansion(result, "G1", False)
        assert by_id(result.nodes)["G1"].is_collapsed is False

    def test_unset_flag_treated_as_expanded(self):
        flow = Flow(nodes=[Node(id="G", type="group"), make_node("a", parent_group_id="G")])
        result = toggle_group_expansion(flow, "G")
        assert by_id(result.nodes)["G"].is_collapsed is True

    def test_missing_group_returns_same_flow(self, collapsed_group_flow):
        assert toggle_group_expansion(collapsed_group_flow, "nope") is collapsed_group_flow

    def test_non_group_returns_same_flow(self, collapsed_group_flow):
        assert toggle_group_expansion(collapsed_group_flow, "X") is collapsed_group_flow

    def test_manual_hide_outside_group_untouched(self):
        nodes = [
            make_group("G"),
            make_node("a", parent_group_id="G"),
            make_node("b", hidden=True),
        ]
        flow = apply_group_visibility(nodes, [])
        flow = toggle_group_expansion(toggle_group_expansion(flow, "G"), "G")
        nodes = by_id(flow.nodes)
        assert nodes["b"].hidden is True
        assert nodes["a"].hidden is True


class TestUngroup:
    """Tests for ungroup."""

    def test_members_promoted_to_root(self, collapsed_group_flow):
        result = ungroup(collapsed_group_flow, "G1")
        nodes = by_id(result.nodes)
        assert "G1" not in nodes
        assert nodes["X"].parent_group_id is None
        assert not nodes["X"].hidden and not nodes["Y"].hidden

    def test_no_synthetic_edges_left(self, collapsed_group_flow):
        flow = apply_group_visibility(collapsed_group_flow.nodes, collapsed_group_flow.edges)
        result = ungroup(flow, "G1")
        assert not any("G1" in (e.source, e.target) for e in result.edges)
        assert not any(e.hidden for e in result.edges)

    def test_members_promoted_to_outer_group(self, nested_flow):
        result = ungroup(nested_flow, "G2")
        nodes = by_id(result.nodes)
        assert nodes["B"].parent_group_id == "G1"
        assert nodes["C"].parent_group_id == "G1"
        assert sorted(get_group_descendants("G1", result.nodes)) == ["A", "B", "C"]

    def test_subtree_marker_cleared(self):
        flow = Flow(nodes=[
            make_group("G"),
            make_node("a", parent_group_id="G", subtree_hidden=True, hidden=True),
        ])
        result = ungroup(flow, "G")
        node = by_id(result.nodes)["a"]
        assert node.subtree_hidden is None
        assert node.hidden is False

    def test_real_edges_on_group_dropped(self):
        flow = Flow(
            nodes=[make_group("G"), make_node("a", parent_group_id="G"), make_node("b")],
            edges=[make_edge("b", "G"), make_edge("a", "b")],
        )
        result = ungroup(flow, "G")
        assert [e.id for e in result.edges] == ["a-b"]

    def test_missing_group_returns_same_flow(self, flat_flow):
        assert ungroup(flat_flow, "nope") is flat_flow

    def test_ungroup_after_create(self, flat_flow):
        grouped = create_group(flat_flow, Node(id="G1"), ["X", "Y"])
        result = ungroup(grouped, "G1")
        assert [n.id for n in result.nodes] == ["X", "Y", "Z", "W"]
        assert [(e.source, e.target) for e in result.edges] == [("X", "Z"), ("Y", "Z")]


class TestAddChildNode:
    """Tests for add_child_node."""

    @staticmethod
    def factory(parent):
        child = Node(id="child", position={"x": parent.position.x, "y": parent.position.y + 150})
        return child, Edge(id="edge-child", source=parent.id, target="child")

    def test_appends_node_and_edge(self, flat_flow):
        result = add_child_node(flat_flow, "Z", self.factory)
        assert result.nodes[-1].id == "child"
        assert result.nodes[-1].position.y == 350
        assert result.edges[-1].id == "edge-child"

    def test_child_of_collapsed_member_gets_synthetic_edge(self, collapsed_group_flow):
        result = add_child_node(collapsed_group_flow, "X", self.factory)
        edges = by_id(result.edges)
        assert "group-edge-G1->child" in edges
        assert edges["edge-child"].hidden is True

    def test_missing_parent_returns_same_flow(self, flat_flow):
        assert add_child_node(flat_flow, "nope", self.factory) is flat_flow


class TestCollapseSubtreeByHandles:
    """Tests for the group-aware subtree collapse."""

    def test_collapse_hides_reachable_nodes(self, flat_flow):
        result = collapse_subtree_by_handles(flat_flow, "X", True)
        nodes = by_id(result.nodes)
        assert nodes["X"].data["collapsed"] is True
        assert nodes["Z"].hidden is True
        assert nodes["Z"].subtree_hidden is True
        assert not nodes["Y"].hidden
        assert all(e.hidden for e in result.edges)

    def test_expand_restores(self, flat_flow):
        collapsed = collapse_subtree_by_handles(flat_flow, "X", True)
        expanded = collapse_subtree_by_handles(collapsed, "X", False)
        nodes = by_id(expanded.nodes)
        assert nodes["Z"].hidden is False
        assert nodes["Z"].subtree_hidden is None
        assert not any(e.hidden for e in expanded.edges)

    def test_subtree_hide_survives_group_toggle(self, flat_flow):
        flow = collapse_subtree_by_handles(flat_flow, "X", True)
        flow = create_group(flow, Node(id="G1"), ["Z", "W"], collapse=False)
        flow = toggle_group_expansion(flow, "G1", True)
        flow = toggle_group_expansion(flow, "G1", False)
        assert by_id(flow.nodes)["Z"].hidden is True

    def test_missing_node_returns_same_flow(self, flat_flow):
        assert collapse_subtree_by_handles(flat_flow, "nope", True) is flat_flow


class TestIdempotence:
    """Every operation's output is a fixed point of the visibility pipeline."""

    def test_operations_yield_fixed_points(self, flat_flow):
        flow = create_group(flat_flow, Node(id="G1"), ["X", "Y"])
        flow = toggle_group_expansion(flow, "G1")
        flow = collapse_subtree_by_handles(flow, "Y", True)
        flow = ungroup(flow, "G1")
        assert apply_group_visibility(flow.nodes, flow.edges) == flow
