"""Tests for ego-graph construction."""

import pytest

from pipeline_graph.graph import DASHED, HISTORICAL_COLOR, NODE_COLORS, PROMPT_NODE_ID, SOLID, EgoGraphBuilder, edge_id
from pipeline_graph.models import (
    Cluster,
    EntityKind,
    Problem,
    Project,
    RelatedEntity,
    RelatedSet,
    RelationKind,
    Solution,
)


@pytest.fixture
def builder() -> EgoGraphBuilder:
    """Create a graph builder."""
    return EgoGraphBuilder()


def test_idle_state(builder: EgoGraphBuilder) -> None:
    """Test no focal entity yields a single prompt node."""
    graph = builder.build(None)

    assert graph.is_idle
    assert len(graph.nodes) == 1
    assert graph.nodes[0].id == PROMPT_NODE_ID
    assert not graph.nodes[0].interactive
    assert graph.edges == ()


def test_problem_to_cluster_points_at_cluster_from_either_side(builder: EgoGraphBuilder) -> None:
    """Test membership edges run problem -> cluster whichever end is focal."""
    problem = Problem(id="1", label="p", impact="high", cluster_id="C1")
    cluster = Cluster(id="C1", label="c", problem_count=1)

    from_problem = builder.build(
        problem, RelatedSet(problem, (RelatedEntity(cluster, RelationKind.PROBLEM_IN_CLUSTER),))
    )
    from_cluster = builder.build(
        cluster, RelatedSet(cluster, (RelatedEntity(problem, RelationKind.PROBLEM_IN_CLUSTER),))
    )

    for graph in (from_problem, from_cluster):
        (edge,) = graph.edges
        assert (edge.source, edge.target) == ("problem-1", "cluster-C1")
        assert edge.id == "edge-problem-1-cluster-C1"
        assert edge.style == SOLID


def test_focal_first_then_resolver_order(builder: EgoGraphBuilder) -> None:
    """Test node order follows the resolver without re-sorting."""
    cluster = Cluster(id="C1", label="c")
    related = tuple(
        RelatedEntity(Problem(id=str(i), label=f"p{i}", cluster_id="C1"), RelationKind.PROBLEM_IN_CLUSTER)
        for i in (9, 2, 5)
    )
    graph = builder.build(cluster, RelatedSet(cluster, related))

    assert [node.id for node in graph.nodes] == ["cluster-C1", "problem-9", "problem-2", "problem-5"]
    assert graph.nodes[0].is_focal
    assert not any(node.is_focal for node in graph.nodes[1:])
    assert graph.focal_id == "cluster-C1"


def test_subtitles_per_kind(builder: EgoGraphBuilder) -> None:
    """Test node subtitles for each entity kind."""
    solution = Solution(id="S", label="s", overall_viability=73.2)
    related = (
        RelatedEntity(Cluster(id="C1", label="c", problem_count=4), RelationKind.CLUSTER_PRODUCES_SOLUTION),
        RelatedEntity(Project(id="P", label="proj", solution_id="S"), RelationKind.SOLUTION_HAS_PROJECT),
        RelatedEntity(Problem(id="1", label="p", impact="low"), RelationKind.PROBLEM_DIRECTLY_ADDRESSES_SOLUTION),
    )
    graph = builder.build(solution, RelatedSet(solution, related))

    assert [node.subtitle for node in graph.nodes] == ["73% viability", "4 problems", "planned", "low impact"]


def test_solution_edges_styles(builder: EgoGraphBuilder) -> None:
    """Test structural relations are solid and derived ones dashed."""
    solution = Solution(id="S", label="s")
    related = (
        RelatedEntity(Cluster(id="C1", label="c"), RelationKind.CLUSTER_PRODUCES_SOLUTION),
        RelatedEntity(Project(id="P", label="proj"), RelationKind.SOLUTION_HAS_PROJECT),
        RelatedEntity(Problem(id="1", label="p"), RelationKind.PROBLEM_DIRECTLY_ADDRESSES_SOLUTION),
    )
    graph = builder.build(solution, RelatedSet(solution, related))

    assert graph.edge("cluster-C1", "solution-S").style == SOLID
    assert graph.edge("solution-S", "project-P").style == SOLID
    problem_edge = graph.edge("problem-1", "solution-S")
    assert problem_edge.style == DASHED
    assert problem_edge.animated


def test_historical_cluster_is_dashed(builder: EgoGraphBuilder) -> None:
    """Test the historical cluster edge and node styling."""
    problem = Problem(id="1", label="p", cluster_label="Old")
    placeholder = Cluster.historical_placeholder("Old")
    graph = builder.build(
        problem, RelatedSet(problem, (RelatedEntity(placeholder, RelationKind.PROBLEM_HISTORICALLY_IN_CLUSTER),))
    )

    (edge,) = graph.edges
    assert edge.source == "problem-1"
    assert edge.target == placeholder.node_id
    assert edge.dashed
    assert graph.nodes[1].historical
    assert graph.nodes[1].color == HISTORICAL_COLOR
    assert graph.nodes[1].subtitle == "historical cluster"
    assert graph.nodes[0].historical is False
    assert graph.nodes[0].color == NODE_COLORS[EntityKind.PROBLEM]


def test_project_indirect_edges_attach_to_solution(builder: EgoGraphBuilder) -> None:
    """Test indirect relations connect to the intervening solution, not the project."""
    project = Project(id="P", label="proj", solution_id="S", linear_project_id="LIN-9")
    related = (
        RelatedEntity(Solution(id="S", label="s"), RelationKind.SOLUTION_HAS_PROJECT),
        RelatedEntity(Cluster(id="C1", label="c"), RelationKind.CLUSTER_PRODUCES_SOLUTION, indirect=True, via="solution-S"),
        RelatedEntity(
            Problem(id="1", label="p"), RelationKind.PROBLEM_DIRECTLY_ADDRESSES_SOLUTION, indirect=True, via="solution-S"
        ),
    )
    graph = builder.build(project, RelatedSet(project, related))

    assert graph.nodes[0].subtitle == "active"
    assert [(e.source, e.target) for e in graph.edges] == [
        ("solution-S", "project-P"),
        ("cluster-C1", "solution-S"),
        ("problem-1", "solution-S"),
    ]
    assert graph.edges[0].style == SOLID
    assert graph.edges[1].style == DASHED and graph.edges[1].indirect
    assert graph.edges[2].style == DASHED
    assert all("project-P" not in (e.source, e.target) for e in graph.edges[1:])
    assert graph.node("cluster-C1").indirect


def test_no_dangling_edges(builder: EgoGraphBuilder) -> None:
    """Test an edge to a node missing from the graph is dropped."""
    project = Project(id="P", label="proj")
    related = (RelatedEntity(Cluster(id="C1", label="c"), RelationKind.CLUSTER_PRODUCES_SOLUTION, indirect=True, via="solution-X"),)
    graph = builder.build(project, RelatedSet(project, related))

    node_ids = {node.id for node in graph.nodes}
    assert graph.edges == ()
    assert node_ids == {"project-P", "cluster-C1"}


def test_node_colors_by_kind(builder: EgoGraphBuilder) -> None:
    """Test nodes are colored per entity kind."""
    problem = Problem(id="1", label="p")
    graph = builder.build(problem, RelatedSet(problem))
    assert graph.nodes[0].kind is EntityKind.PROBLEM
    assert graph.nodes[0].color == "#3b82f6"


def test_to_dict(builder: EgoGraphBuilder) -> None:
    """Test serialization for a renderer."""
    problem = Problem(id="1", label="p", cluster_id="C1")
    cluster = Cluster(id="C1", label="c")
    data = builder.build(problem, RelatedSet(problem, (RelatedEntity(cluster, RelationKind.PROBLEM_IN_CLUSTER),))).to_dict()

    assert data["focal"] == "problem-1"
    assert [node["id"] for node in data["nodes"]] == ["problem-1", "cluster-C1"]
    assert data["edges"][0] == {
        "id": edge_id("problem-1", "cluster-C1"),
        "source": "problem-1",
        "target": "cluster-C1",
        "relation": "problem_in_cluster",
        "style": "solid",
        "color": "#9333ea",
        "animated": False,
        "indirect": False,
    }
