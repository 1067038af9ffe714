"""Relationship resolution for a focal entity."""

from typing import Any

import structlog

from pipeline_graph.cache import RelationshipCache
from pipeline_graph.models import (
    Cluster,
    Dataset,
    Entity,
    EntityKind,
    Problem,
    Project,
    RelatedEntity,
    RelatedSet,
    RelationKind,
    Solution,
)

logger = structlog.get_logger()

# Problems shown around a focal cluster; keeps the ring readable for large clusters.
CLUSTER_PROBLEM_LIMIT = 12


def parse_problem_ids(value: Any) -> list[str]:
    """Parse a solution's many-to-many ``problem_ids`` field.

    The field arrives either as a native list or as a brace-delimited string
    such as ``"{3, 7,19}"``. Malformed input yields an empty list.

    Args:
        value: Raw field value

    Returns:
        List of problem ids as strings
    """
    if isinstance(value, (list, tuple)):
        return [str(item) for item in value if item is not None]
    if not isinstance(value, str):
        return []

    text = value.strip()
    if text.startswith("{"):
        text = text[1:]
    if text.endswith("}"):
        text = text[:-1]
    return [token.strip() for token in text.split(",") if token.strip()]


class RelationshipResolver:
    """Computes the related-entity set for a focal entity.

    Solution-to-problem links are read through the ``RelationshipCache`` instead
    of being recomputed from the dataset, so a focal solution or project may
    suspend while the deep lookup is fetched.
    """

    def __init__(self, cache: RelationshipCache, cluster_problem_limit: int = CLUSTER_PROBLEM_LIMIT) -> None:
        """Initialize the resolver.

        Args:
            cache: Cache for solution -> directly-addressed problems lookups
            cluster_problem_limit: Maximum problems resolved around a focal cluster
        """
        if cluster_problem_limit < 0:
            raise ValueError(f"cluster_problem_limit must be non-negative, got {cluster_problem_limit}")
        self.cache = cache
        self.cluster_problem_limit = cluster_problem_limit

    async def resolve(self, focal: Entity, dataset: Dataset) -> RelatedSet:
        """Resolve every entity directly related to ``focal``.

        Args:
            focal: The focal entity
            dataset: Entity collections to resolve against

        Returns:
            RelatedSet in resolution order, without duplicate nodes
        """
        logger.debug("Resolving related entities", focal=focal.node_id)

        if focal.kind is EntityKind.PROBLEM:
            related = self._resolve_problem(focal, dataset)
        elif focal.kind is EntityKind.CLUSTER:
            related = self._resolve_cluster(focal, dataset)
        elif focal.kind is EntityKind.SOLUTION:
            related = await self._resolve_solution(focal, dataset)
        elif focal.kind is EntityKind.PROJECT:
            related = await self._resolve_project(focal, dataset)
        else:
            raise ValueError(f"Unknown entity kind: {focal.kind}")

        result = RelatedSet(focal=focal, related=tuple(_dedupe(focal, related)))
        logger.debug("Resolved related entities", focal=focal.node_id, count=len(result))
        return result

    def _resolve_problem(self, problem: Problem, dataset: Dataset) -> list[RelatedEntity]:
        related: list[RelatedEntity] = []

        cluster = dataset.find(EntityKind.CLUSTER, problem.cluster_id) if problem.cluster_id else None
        if cluster is not None:
            related.append(RelatedEntity(cluster, RelationKind.PROBLEM_IN_CLUSTER))
        elif problem.cluster_label is not None:
            related.append(
                RelatedEntity(
                    Cluster.historical_placeholder(problem.cluster_label),
                    RelationKind.PROBLEM_HISTORICALLY_IN_CLUSTER,
                )
            )

        for solution in dataset.solutions:
            if problem.id in parse_problem_ids(solution.problem_ids):
                related.append(RelatedEntity(solution, RelationKind.PROBLEM_DIRECTLY_ADDRESSES_SOLUTION))

        return related

    def _resolve_cluster(self, cluster: Cluster, dataset: Dataset) -> list[RelatedEntity]:
        members = [problem for problem in dataset.problems if problem.cluster_id == cluster.id]
        if len(members) > self.cluster_problem_limit:
            logger.debug(
                "Truncating cluster problems",
                cluster_id=cluster.id,
                total=len(members),
                limit=self.cluster_problem_limit,
            )
        related = [
            RelatedEntity(problem, RelationKind.PROBLEM_IN_CLUSTER)
            for problem in members[: self.cluster_problem_limit]
        ]
        related.extend(
            RelatedEntity(solution, RelationKind.CLUSTER_PRODUCES_SOLUTION)
            for solution in dataset.solutions
            if solution.source_cluster_id == cluster.id
        )
        return related

    async def _resolve_solution(self, solution: Solution, dataset: Dataset) -> list[RelatedEntity]:
        related: list[RelatedEntity] = []

        cluster = _source_cluster(solution, dataset)
        if cluster is not None:
            related.append(RelatedEntity(cluster, RelationKind.CLUSTER_PRODUCES_SOLUTION))

        related.extend(
            RelatedEntity(project, RelationKind.SOLUTION_HAS_PROJECT)
            for project in dataset.projects
            if project.solution_id == solution.id
        )

        for problem in await self.cache.get(solution.id):
            related.append(RelatedEntity(problem, RelationKind.PROBLEM_DIRECTLY_ADDRESSES_SOLUTION))

        return related

    async def _resolve_project(self, project: Project, dataset: Dataset) -> list[RelatedEntity]:
        if project.solution_id is None:
            return []
        solution = dataset.find(EntityKind.SOLUTION, project.solution_id)
        if solution is None:
            logger.debug("Project solution not found", project_id=project.id, solution_id=project.solution_id)
            return []

        related = [RelatedEntity(solution, RelationKind.SOLUTION_HAS_PROJECT)]

        cluster = _source_cluster(solution, dataset)
        if cluster is not None:
            related.append(
                RelatedEntity(cluster, RelationKind.CLUSTER_PRODUCES_SOLUTION, indirect=True, via=solution.node_id)
            )

        for problem in await self.cache.get(solution.id):
            related.append(
                RelatedEntity(
                    problem,
                    RelationKind.PROBLEM_DIRECTLY_ADDRESSES_SOLUTION,
                    indirect=True,
                    via=solution.node_id,
                )
            )

        return related


def _source_cluster(solution: Solution, dataset: Dataset) -> Entity | None:
    if solution.source_cluster_id is None:
        return None
    return dataset.find(EntityKind.CLUSTER, solution.source_cluster_id)


def _dedupe(focal: Entity, related: list[RelatedEntity]) -> list[RelatedEntity]:
    seen = {focal.node_id}
    unique = []
    for item in related:
        if item.entity.node_id in seen:
            continue
        seen.add(item.entity.node_id)
        unique.append(item)
    return unique
