"""Searchable catalog of pipeline entities with derived status badges."""

from dataclasses import dataclass, replace

import structlog

from pipeline_graph.models import Dataset, Entity, EntityKind, Problem
from pipeline_graph.resolver import parse_problem_ids

logger = structlog.get_logger()

CLUSTERED = "clustered"
ORPHANED = "orphaned"
PRESERVED = "preserved"
UNCLUSTERED = "unclustered"
ACTIVE = "active"
PLANNED = "planned"


@dataclass(frozen=True)
class CatalogItem:
    """One searchable entry in the catalog."""

    id: str
    kind: EntityKind
    label: str
    search_text: str
    badges: tuple[str, ...]
    entity: Entity


def preserved_problem_ids(dataset: Dataset) -> set[str]:
    """Ids of every problem some solution links to directly."""
    linked: set[str] = set()
    for solution in dataset.solutions:
        linked.update(parse_problem_ids(solution.problem_ids))
    return linked


def is_hidden_problem(problem: Problem, preserved: set[str]) -> bool:
    """Whether a problem is dropped when orphaned problems are excluded."""
    return (problem.is_orphaned or problem.is_unclustered) and problem.id not in preserved


class EntityCatalog:
    """Flat list of all entities for search and selection.

    Badges are derived once at construction. With ``include_orphaned`` off,
    orphaned and unclustered problems that no solution links to are left out
    of the catalog altogether, which also removes them from the resolver's
    candidate pool (see ``candidate_dataset``).
    """

    def __init__(self, dataset: Dataset, include_orphaned: bool = True) -> None:
        self.dataset = dataset
        self.include_orphaned = include_orphaned
        self._preserved = preserved_problem_ids(dataset)
        self._cluster_ids = {cluster.id for cluster in dataset.clusters}

        self._visible_problems = tuple(
            problem
            for problem in dataset.problems
            if include_orphaned or not is_hidden_problem(problem, self._preserved)
        )
        self.items: list[CatalogItem] = [self._item(problem) for problem in self._visible_problems]
        for kind in (EntityKind.CLUSTER, EntityKind.SOLUTION, EntityKind.PROJECT):
            self.items.extend(self._item(entity) for entity in dataset.collection(kind))
        self._by_id = {item.id: item for item in self.items}

        logger.debug(
            "Catalog built",
            items=len(self.items),
            hidden_problems=len(dataset.problems) - len(self._visible_problems),
            include_orphaned=include_orphaned,
        )

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self):
        return iter(self.items)

    def badges(self, entity: Entity) -> tuple[str, ...]:
        """Derive status badges for an entity."""
        if entity.kind is EntityKind.PROBLEM:
            return self._problem_badges(entity)
        elif entity.kind is EntityKind.CLUSTER:
            return ()
        elif entity.kind is EntityKind.SOLUTION:
            return (entity.status,) if entity.status else ()
        elif entity.kind is EntityKind.PROJECT:
            return (ACTIVE,) if entity.is_active else (PLANNED,)
        raise ValueError(f"Unknown entity kind: {entity.kind}")

    def _problem_badges(self, problem: Problem) -> tuple[str, ...]:
        badges = []
        if problem.impact:
            badges.append(problem.impact)
        # Re-checked against live clusters; the foreign key may be stale
        if problem.cluster_id is not None and problem.cluster_id in self._cluster_ids:
            badges.append(CLUSTERED)

        preserved = problem.id in self._preserved
        if problem.is_orphaned:
            badges.append(PRESERVED if preserved else ORPHANED)
        elif problem.is_unclustered and not preserved:
            badges.append(UNCLUSTERED)
        return tuple(badges)

    def _item(self, entity: Entity) -> CatalogItem:
        return CatalogItem(
            id=entity.node_id,
            kind=entity.kind,
            label=entity.label,
            search_text=_search_text(entity),
            badges=self.badges(entity),
            entity=entity,
        )

    def find(self, node_id: str) -> CatalogItem | None:
        return self._by_id.get(node_id)

    def filter_by_kind(self, kind: EntityKind | str | None) -> list[CatalogItem]:
        """Items of one kind; all items when ``kind`` is None."""
        if kind is None:
            return list(self.items)
        kind = EntityKind(kind)
        return [item for item in self.items if item.kind is kind]

    def search(self, term: str, kind: EntityKind | str | None = None) -> list[CatalogItem]:
        """Case-insensitive substring search, optionally restricted to one kind."""
        needle = term.lower()
        items = self.filter_by_kind(kind)
        if not needle:
            return items
        return [item for item in items if needle in item.search_text]

    def candidate_dataset(self) -> Dataset:
        """The dataset restricted to the problems present in this catalog."""
        if len(self._visible_problems) == len(self.dataset.problems):
            return self.dataset
        return replace(self.dataset, problems=self._visible_problems)


def _search_text(entity: Entity) -> str:
    if entity.kind is EntityKind.PROBLEM:
        parts = [entity.label, entity.description, entity.industry, entity.cluster_label]
    elif entity.kind is EntityKind.CLUSTER:
        parts = [entity.label]
    elif entity.kind is EntityKind.SOLUTION:
        parts = [entity.label, entity.description, entity.source_cluster_label]
    elif entity.kind is EntityKind.PROJECT:
        parts = [entity.label, entity.name, entity.solution_title]
    else:
        raise ValueError(f"Unknown entity kind: {entity.kind}")
    return " ".join(part for part in parts if part).lower()
