"""Snapshot backend implementation reading a JSON export."""

import json
from pathlib import Path
from typing import Any

import structlog

from pipeline_graph.backend import Backend
from pipeline_graph.models import EntityKind
from pipeline_graph.resolver import parse_problem_ids

logger = structlog.get_logger()

COLLECTION_KEYS: dict[EntityKind, str] = {
    EntityKind.PROBLEM: "problems",
    EntityKind.CLUSTER: "clusters",
    EntityKind.SOLUTION: "solutions",
    EntityKind.PROJECT: "projects",
}


class SnapshotBackend(Backend):
    """Backend serving entities from a JSON file.

    The file holds one list of rows per kind::

        {"problems": [...], "clusters": [...], "solutions": [...], "projects": [...]}

    Solution -> problem lookups are answered from the solutions' ``problem_ids``.
    """

    def __init__(self, path: str | Path) -> None:
        """Initialize snapshot backend.

        Args:
            path: Path to the JSON snapshot
        """
        self.path = Path(path)
        logger.debug("Initializing snapshot backend", path=str(self.path))

        try:
            with open(self.path, "r") as f:
                self._data: dict[str, Any] = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load snapshot", path=str(self.path), error=str(e))
            raise ValueError(f"Failed to load snapshot from {self.path}: {e}") from e

        if not isinstance(self._data, dict):
            raise ValueError(f"Snapshot {self.path} must contain a JSON object")
        logger.info("Snapshot backend initialized", path=str(self.path), keys=list(self._data.keys()))

    def _rows(self, kind: EntityKind) -> list[dict[str, Any]]:
        rows = self._data.get(COLLECTION_KEYS[EntityKind(kind)]) or []
        return [row for row in rows if isinstance(row, dict)]

    async def fetch_all_entities(self, kind: EntityKind) -> list[dict[str, Any]]:
        rows = self._rows(kind)
        logger.debug("Read snapshot entities", kind=EntityKind(kind).value, count=len(rows))
        return rows

    async def fetch_problems_directly_addressed_by_solution(self, solution_id: str) -> Any:
        solution = next(
            (row for row in self._rows(EntityKind.SOLUTION) if str(row.get("id")) == str(solution_id)),
            None,
        )
        if solution is None:
            raise ValueError(f"Solution {solution_id} not found in snapshot")

        wanted = parse_problem_ids(solution.get("problem_ids"))
        by_id = {str(row.get("id")): row for row in self._rows(EntityKind.PROBLEM)}
        problems = [by_id[problem_id] for problem_id in wanted if problem_id in by_id]
        logger.debug("Resolved snapshot solution problems", solution_id=solution_id, count=len(problems))
        return {"data": problems}
