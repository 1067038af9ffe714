"""Data models for the pipeline graph explorer."""

from dataclasses import dataclass, field
from enum import Enum
from functools import cached_property
from typing import Any, ClassVar


class EntityKind(str, Enum):
    """The four pipeline stages."""

    PROBLEM = "problem"
    CLUSTER = "cluster"
    SOLUTION = "solution"
    PROJECT = "project"


class RelationKind(str, Enum):
    """Relationship kinds between pipeline entities.

    Each kind has a fixed direction: the edge always points from an entity of
    ``source_kind`` to an entity of ``target_kind``, whichever of the two is focal.
    """

    PROBLEM_IN_CLUSTER = "problem_in_cluster"
    PROBLEM_HISTORICALLY_IN_CLUSTER = "problem_historically_in_cluster"
    CLUSTER_PRODUCES_SOLUTION = "cluster_produces_solution"
    PROBLEM_DIRECTLY_ADDRESSES_SOLUTION = "problem_directly_addresses_solution"
    SOLUTION_HAS_PROJECT = "solution_has_project"

    @property
    def source_kind(self) -> EntityKind:
        return _RELATION_ENDPOINTS[self][0]

    @property
    def target_kind(self) -> EntityKind:
        return _RELATION_ENDPOINTS[self][1]


_RELATION_ENDPOINTS: dict[RelationKind, tuple[EntityKind, EntityKind]] = {
    RelationKind.PROBLEM_IN_CLUSTER: (EntityKind.PROBLEM, EntityKind.CLUSTER),
    RelationKind.PROBLEM_HISTORICALLY_IN_CLUSTER: (EntityKind.PROBLEM, EntityKind.CLUSTER),
    RelationKind.CLUSTER_PRODUCES_SOLUTION: (EntityKind.CLUSTER, EntityKind.SOLUTION),
    RelationKind.PROBLEM_DIRECTLY_ADDRESSES_SOLUTION: (EntityKind.PROBLEM, EntityKind.SOLUTION),
    RelationKind.SOLUTION_HAS_PROJECT: (EntityKind.SOLUTION, EntityKind.PROJECT),
}


def node_id(kind: EntityKind, entity_id: str) -> str:
    """Build a graph node id. Entity ids are only unique within a kind."""
    return f"{EntityKind(kind).value}-{entity_id}"


def _opt_str(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _opt_float(value: Any) -> float | None:
    if value is None or value == "":
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


class _EntityBase:
    kind: ClassVar[EntityKind]
    id: str

    @property
    def node_id(self) -> str:
        return node_id(self.kind, self.id)


@dataclass(frozen=True)
class Problem(_EntityBase):
    """A problem scraped into the pipeline."""

    kind: ClassVar[EntityKind] = EntityKind.PROBLEM

    id: str
    label: str
    impact: str | None = None
    cluster_id: str | None = None
    # Survives deletion of the cluster itself
    cluster_label: str | None = None
    industry: str | None = None
    business_size: str | None = None
    description: str = ""

    @property
    def subtitle(self) -> str | None:
        return f"{self.impact} impact" if self.impact else None

    @property
    def is_orphaned(self) -> bool:
        """The problem's cluster was deleted but its label is still on record."""
        return self.cluster_id is None and self.cluster_label is not None

    @property
    def is_unclustered(self) -> bool:
        return self.cluster_id is None and self.cluster_label is None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Problem":
        return cls(
            id=str(row["id"]),
            label=row.get("title") or row.get("label") or "",
            impact=_opt_str(row.get("impact")),
            cluster_id=_opt_str(row.get("cluster_id")),
            cluster_label=_opt_str(row.get("cluster_label")),
            industry=_opt_str(row.get("industry")),
            business_size=_opt_str(row.get("business_size")),
            description=row.get("description") or "",
        )


@dataclass(frozen=True)
class Cluster(_EntityBase):
    """A cluster of similar problems.

    ``historical`` marks the placeholder standing in for a deleted cluster that
    an orphaned problem still names.
    """

    kind: ClassVar[EntityKind] = EntityKind.CLUSTER

    id: str
    label: str
    problem_count: int = 0
    solution_count: int = 0
    historical: bool = False

    @property
    def subtitle(self) -> str | None:
        if self.historical:
            return "historical cluster"
        return f"{self.problem_count} problems"

    @classmethod
    def historical_placeholder(cls, cluster_label: str) -> "Cluster":
        return cls(id=f"historical-{cluster_label}", label=cluster_label, historical=True)

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Cluster":
        cluster_id = row.get("cluster_id")
        if cluster_id is None:
            cluster_id = row["id"]
        return cls(
            id=str(cluster_id),
            label=row.get("cluster_label") or row.get("label") or "",
            problem_count=int(row.get("problem_count") or 0),
            solution_count=int(row.get("solution_count") or 0),
        )


@dataclass(frozen=True)
class Solution(_EntityBase):
    """A solution generated for a cluster.

    ``problem_ids`` is kept in its raw encoding, either a brace-delimited string
    such as ``"{3,7,19}"`` or a list; see ``resolver.parse_problem_ids``.
    """

    kind: ClassVar[EntityKind] = EntityKind.SOLUTION

    id: str
    label: str
    overall_viability: float | None = None
    status: str | None = None
    source_cluster_id: str | None = None
    source_cluster_label: str | None = None
    problem_ids: Any = None
    description: str = ""

    @property
    def subtitle(self) -> str | None:
        if self.overall_viability is None:
            return None
        return f"{round(self.overall_viability)}% viability"

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Solution":
        problem_ids = row.get("problem_ids")
        if isinstance(problem_ids, list):
            problem_ids = tuple(problem_ids)
        return cls(
            id=str(row["id"]),
            label=row.get("title") or row.get("label") or "",
            overall_viability=_opt_float(row.get("overall_viability")),
            status=_opt_str(row.get("status")),
            source_cluster_id=_opt_str(row.get("source_cluster_id")),
            source_cluster_label=_opt_str(row.get("source_cluster_label")),
            problem_ids=problem_ids,
            description=row.get("description") or "",
        )


@dataclass(frozen=True)
class Project(_EntityBase):
    """A project built from a solution."""

    kind: ClassVar[EntityKind] = EntityKind.PROJECT

    id: str
    label: str
    name: str | None = None
    solution_id: str | None = None
    linear_project_id: str | None = None
    github_repo_url: str | None = None
    solution_title: str | None = None

    @property
    def is_active(self) -> bool:
        return self.linear_project_id is not None

    @property
    def subtitle(self) -> str | None:
        return "active" if self.is_active else "planned"

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> "Project":
        name = _opt_str(row.get("name"))
        solution_title = _opt_str(row.get("solution_title"))
        return cls(
            id=str(row["id"]),
            label=name or solution_title or "Unnamed Project",
            name=name,
            solution_id=_opt_str(row.get("solution_id")),
            linear_project_id=_opt_str(row.get("linear_project_id")),
            github_repo_url=_opt_str(row.get("github_repo_url")),
            solution_title=solution_title,
        )


Entity = Problem | Cluster | Solution | Project

ENTITY_TYPES: dict[EntityKind, type] = {
    EntityKind.PROBLEM: Problem,
    EntityKind.CLUSTER: Cluster,
    EntityKind.SOLUTION: Solution,
    EntityKind.PROJECT: Project,
}


@dataclass(frozen=True)
class Dataset:
    """Immutable snapshot of the four entity collections."""

    problems: tuple[Problem, ...] = ()
    clusters: tuple[Cluster, ...] = ()
    solutions: tuple[Solution, ...] = ()
    projects: tuple[Project, ...] = ()

    @classmethod
    def from_rows(
        cls,
        problems: list[dict[str, Any]] | None = None,
        clusters: list[dict[str, Any]] | None = None,
        solutions: list[dict[str, Any]] | None = None,
        projects: list[dict[str, Any]] | None = None,
    ) -> "Dataset":
        """Decode raw API rows into a dataset."""
        return cls(
            problems=tuple(Problem.from_row(row) for row in problems or []),
            clusters=tuple(Cluster.from_row(row) for row in clusters or []),
            solutions=tuple(Solution.from_row(row) for row in solutions or []),
            projects=tuple(Project.from_row(row) for row in projects or []),
        )

    def collection(self, kind: EntityKind) -> tuple[Entity, ...]:
        kind = EntityKind(kind)
        if kind is EntityKind.PROBLEM:
            return self.problems
        elif kind is EntityKind.CLUSTER:
            return self.clusters
        elif kind is EntityKind.SOLUTION:
            return self.solutions
        elif kind is EntityKind.PROJECT:
            return self.projects
        raise ValueError(f"Unknown entity kind: {kind}")

    @cached_property
    def _index(self) -> dict[str, Entity]:
        index: dict[str, Entity] = {}
        for kind in EntityKind:
            for entity in self.collection(kind):
                index.setdefault(entity.node_id, entity)
        return index

    def find(self, kind: EntityKind, entity_id: str) -> Entity | None:
        """Look up an entity by kind and id."""
        return self._index.get(node_id(kind, str(entity_id)))

    def find_node(self, node: str) -> Entity | None:
        """Look up an entity by its composite ``"{kind}-{id}"`` node id."""
        return self._index.get(node)

    def __len__(self) -> int:
        return len(self.problems) + len(self.clusters) + len(self.solutions) + len(self.projects)


@dataclass(frozen=True)
class RelatedEntity:
    """An entity related to the focal entity, and how.

    Indirect relations hang off an intervening node (``via``) rather than the
    focal node itself.
    """

    entity: Entity
    relation: RelationKind
    indirect: bool = False
    via: str | None = None


@dataclass(frozen=True)
class RelatedSet:
    """Resolver output for one focal entity, in resolution order."""

    focal: Entity
    related: tuple[RelatedEntity, ...] = field(default_factory=tuple)

    def __iter__(self):
        return iter(self.related)

    def __len__(self) -> int:
        return len(self.related)

    def entities(self) -> list[Entity]:
        return [item.entity for item in self.related]
