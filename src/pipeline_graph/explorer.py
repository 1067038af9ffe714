"""Interactive session tying selection, resolution, graph building and layout together."""

import itertools

import structlog

from pipeline_graph.backend import Backend
from pipeline_graph.cache import RelationshipCache
from pipeline_graph.catalog import EntityCatalog
from pipeline_graph.graph import EgoGraph, EgoGraphBuilder, idle_graph
from pipeline_graph.layout import BASE_RADIUS, MIN_SPACING, Offset, apply_layout
from pipeline_graph.models import Dataset, Entity
from pipeline_graph.resolver import CLUSTER_PROBLEM_LIMIT, RelationshipResolver

logger = structlog.get_logger()


class GraphExplorer:
    """Explorer session over one dataset.

    ``select`` follows "last selection wins": every selection is tagged when it
    is issued, and a resolution that finishes after a newer selection is
    discarded instead of rendered. In-flight fetches are not cancelled; their
    results still land in the relationship cache.
    """

    def __init__(
        self,
        backend: Backend,
        cache: RelationshipCache | None = None,
        include_orphaned: bool = True,
        base_radius: float = BASE_RADIUS,
        min_spacing: float = MIN_SPACING,
        cluster_problem_limit: int = CLUSTER_PROBLEM_LIMIT,
        center: Offset = Offset(0.0, 0.0),
    ) -> None:
        self.backend = backend
        if cache is None:
            cache = RelationshipCache(backend.fetch_problems_directly_addressed_by_solution)
        self.cache = cache
        self.resolver = RelationshipResolver(self.cache, cluster_problem_limit=cluster_problem_limit)
        self.builder = EgoGraphBuilder()
        self.include_orphaned = include_orphaned
        self.base_radius = base_radius
        self.min_spacing = min_spacing
        self.center = center

        self.dataset = Dataset()
        self.catalog = EntityCatalog(self.dataset, include_orphaned=include_orphaned)
        self.focal: Entity | None = None
        self.graph: EgoGraph = self._place(idle_graph())
        self._tags = itertools.count(1)
        self._current_tag = 0

    async def load(self) -> Dataset:
        """Fetch the base entity collections and re-validate the current selection."""
        dataset = await self.backend.load_dataset()
        self.set_dataset(dataset)
        return dataset

    def set_dataset(self, dataset: Dataset) -> None:
        """Replace the dataset snapshot.

        A focal entity that no longer exists in the new snapshot, or that its
        catalog now excludes, falls back to the idle state.
        """
        self.dataset = dataset
        self.catalog = EntityCatalog(dataset, include_orphaned=self.include_orphaned)
        logger.info("Dataset loaded", entities=len(dataset), catalog_items=len(self.catalog))

        if self.focal is not None and self.catalog.candidate_dataset().find(self.focal.kind, self.focal.id) is None:
            logger.info("Focal entity no longer exists", focal=self.focal.node_id)
            self._current_tag = next(self._tags)
            self.focal = None
            self.graph = self._place(idle_graph())

    async def select(self, focal: Entity | None) -> EgoGraph | None:
        """Select a focal entity and build its ego-graph.

        Args:
            focal: Entity to focus, or None to clear the selection

        Returns:
            The rendered graph, or None if a newer selection superseded this one
            while it was resolving
        """
        tag = next(self._tags)
        self._current_tag = tag

        candidates = self.catalog.candidate_dataset()
        if focal is not None:
            current = candidates.find(focal.kind, focal.id)
            if current is None:
                logger.info("Selected entity not in catalog, showing prompt", focal=focal.node_id)
            # Resolve against the current snapshot's copy of the entity
            focal = current

        self.focal = focal
        if focal is None:
            self.graph = self._place(idle_graph())
            return self.graph

        logger.debug("Selecting focal entity", focal=focal.node_id, tag=tag)
        related = await self.resolver.resolve(focal, candidates)

        if tag != self._current_tag:
            logger.debug("Discarding stale resolution", focal=focal.node_id, tag=tag, current_tag=self._current_tag)
            return None

        self.graph = self._place(self.builder.build(focal, related))
        logger.info("Rendered ego graph", focal=focal.node_id, nodes=len(self.graph.nodes))
        return self.graph

    async def select_node(self, node: str) -> EgoGraph | None:
        """Select by composite node id, e.g. when a graph node is clicked."""
        return await self.select(self.dataset.find_node(node))

    def _place(self, graph: EgoGraph) -> EgoGraph:
        return apply_layout(graph, self.center, self.base_radius, self.min_spacing)
