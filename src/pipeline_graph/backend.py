"""Backend interface for loading pipeline entities."""

import asyncio
from abc import ABC, abstractmethod
from typing import Any

import structlog

from pipeline_graph.models import Dataset, EntityKind

logger = structlog.get_logger()


class Backend(ABC):
    """Abstract base class for pipeline entity sources."""

    @abstractmethod
    async def fetch_all_entities(self, kind: EntityKind) -> list[dict[str, Any]]:
        """Fetch every raw row of one entity kind."""
        pass

    @abstractmethod
    async def fetch_problems_directly_addressed_by_solution(self, solution_id: str) -> Any:
        """Fetch the problems a solution links to directly.

        Returns:
            Either a list of problem rows or ``{"data": [...]}``; callers normalize both.
        """
        pass

    async def load_dataset(self) -> Dataset:
        """Fetch all four entity collections concurrently."""
        logger.debug("Loading dataset", backend=type(self).__name__)
        problems, clusters, solutions, projects = await asyncio.gather(
            self.fetch_all_entities(EntityKind.PROBLEM),
            self.fetch_all_entities(EntityKind.CLUSTER),
            self.fetch_all_entities(EntityKind.SOLUTION),
            self.fetch_all_entities(EntityKind.PROJECT),
        )
        dataset = Dataset.from_rows(problems=problems, clusters=clusters, solutions=solutions, projects=projects)
        logger.info(
            "Dataset loaded from backend",
            problems=len(dataset.problems),
            clusters=len(dataset.clusters),
            solutions=len(dataset.solutions),
            projects=len(dataset.projects),
        )
        return dataset
