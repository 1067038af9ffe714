"""Ego-graph construction from a focal entity and its related entities."""

from dataclasses import dataclass
from typing import Any

import structlog

from pipeline_graph.layout import Offset
from pipeline_graph.models import Entity, EntityKind, RelatedEntity, RelatedSet, RelationKind

logger = structlog.get_logger()

PROMPT_NODE_ID = "prompt"
PROMPT_LABEL = "Select an entity to explore its relationships"

SOLID = "solid"
DASHED = "dashed"

NODE_COLORS: dict[EntityKind, str] = {
    EntityKind.PROBLEM: "#3b82f6",
    EntityKind.CLUSTER: "#9333ea",
    EntityKind.SOLUTION: "#10b981",
    EntityKind.PROJECT: "#eab308",
}
HISTORICAL_COLOR = "#9ca3af"

# relation -> (style, color, animated)
EDGE_STYLES: dict[RelationKind, tuple[str, str, bool]] = {
    RelationKind.PROBLEM_IN_CLUSTER: (SOLID, "#9333ea", False),
    RelationKind.PROBLEM_HISTORICALLY_IN_CLUSTER: (DASHED, HISTORICAL_COLOR, False),
    RelationKind.CLUSTER_PRODUCES_SOLUTION: (SOLID, "#10b981", False),
    RelationKind.PROBLEM_DIRECTLY_ADDRESSES_SOLUTION: (DASHED, "#3b82f6", True),
    RelationKind.SOLUTION_HAS_PROJECT: (SOLID, "#eab308", True),
}


@dataclass(frozen=True)
class Node:
    """A graph node. ``kind`` is None only for the idle prompt node."""

    id: str
    kind: EntityKind | None
    label: str
    subtitle: str | None = None
    is_focal: bool = False
    interactive: bool = True
    indirect: bool = False
    historical: bool = False
    color: str = HISTORICAL_COLOR
    position: Offset | None = None
    entity: Entity | None = None

    def to_dict(self) -> dict[str, Any]:
        result: dict[str, Any] = {
            "id": self.id,
            "kind": self.kind.value if self.kind else None,
            "label": self.label,
            "subtitle": self.subtitle,
            "isFocal": self.is_focal,
            "interactive": self.interactive,
            "indirect": self.indirect,
            "historical": self.historical,
            "color": self.color,
        }
        if self.position is not None:
            result["position"] = self.position.to_dict()
        return result


@dataclass(frozen=True)
class Edge:
    """A directed, styled edge between two nodes."""

    id: str
    source: str
    target: str
    relation: RelationKind
    style: str
    color: str
    animated: bool = False
    indirect: bool = False

    @property
    def dashed(self) -> bool:
        return self.style == DASHED

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "source": self.source,
            "target": self.target,
            "relation": self.relation.value,
            "style": self.style,
            "color": self.color,
            "animated": self.animated,
            "indirect": self.indirect,
        }


@dataclass(frozen=True)
class EgoGraph:
    """Nodes and edges for one focal entity. The focal node, if any, comes first."""

    nodes: tuple[Node, ...] = ()
    edges: tuple[Edge, ...] = ()
    focal_id: str | None = None

    @property
    def is_idle(self) -> bool:
        return self.focal_id is None

    def node(self, node_id: str) -> Node | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def edge(self, source: str, target: str) -> Edge | None:
        for edge in self.edges:
            if edge.source == source and edge.target == target:
                return edge
        return None

    def to_dict(self) -> dict[str, Any]:
        return {
            "focal": self.focal_id,
            "nodes": [node.to_dict() for node in self.nodes],
            "edges": [edge.to_dict() for edge in self.edges],
        }


def edge_id(source: str, target: str) -> str:
    return f"edge-{source}-{target}"


def idle_graph() -> EgoGraph:
    """The graph shown when nothing is selected."""
    return EgoGraph(nodes=(Node(id=PROMPT_NODE_ID, kind=None, label=PROMPT_LABEL, interactive=False),))


class EgoGraphBuilder:
    """Turns a resolved related set into nodes and styled, directed edges."""

    def build(self, focal: Entity | None, related: RelatedSet | None = None) -> EgoGraph:
        """Build the ego-graph for ``focal``.

        Args:
            focal: Focal entity, or None for the idle prompt state
            related: Output of RelationshipResolver.resolve for ``focal``

        Returns:
            EgoGraph with the focal node first and related nodes in resolver order
        """
        if focal is None:
            return idle_graph()

        items = tuple(related) if related is not None else ()
        nodes = [self._node(focal, is_focal=True)]
        nodes.extend(self._node(item.entity, indirect=item.indirect) for item in items)
        node_ids = {node.id for node in nodes}

        edges = []
        for item in items:
            edge = self._edge(focal, item)
            if edge.source not in node_ids or edge.target not in node_ids:
                logger.debug("Dropping dangling edge", edge_id=edge.id)
                continue
            edges.append(edge)

        logger.debug("Built ego graph", focal=focal.node_id, nodes=len(nodes), edges=len(edges))
        return EgoGraph(nodes=tuple(nodes), edges=tuple(edges), focal_id=focal.node_id)

    def _node(self, entity: Entity, is_focal: bool = False, indirect: bool = False) -> Node:
        historical = entity.kind is EntityKind.CLUSTER and entity.historical
        return Node(
            id=entity.node_id,
            kind=entity.kind,
            label=entity.label,
            subtitle=entity.subtitle,
            is_focal=is_focal,
            indirect=indirect,
            historical=historical,
            color=HISTORICAL_COLOR if historical else NODE_COLORS[entity.kind],
            entity=entity,
        )

    def _edge(self, focal: Entity, item: RelatedEntity) -> Edge:
        anchor = item.via if item.indirect and item.via else focal.node_id
        other = item.entity.node_id
        # Direction is fixed by the relation, not by which end is focal
        if item.entity.kind is item.relation.source_kind:
            source, target = other, anchor
        else:
            source, target = anchor, other

        style, color, animated = EDGE_STYLES[item.relation]
        if item.indirect:
            style = DASHED
        return Edge(
            id=edge_id(source, target),
            source=source,
            target=target,
            relation=item.relation,
            style=style,
            color=color,
            animated=animated,
            indirect=item.indirect,
        )
