"""Shared fixtures for pipeline-graph tests."""

import asyncio
from typing import Any

import pytest

from pipeline_graph.backend import Backend
from pipeline_graph.models import Dataset, EntityKind


class MockBackend(Backend):
    """In-memory backend recording deep-lookup calls."""

    def __init__(
        self,
        rows: dict[EntityKind, list[dict[str, Any]]] | None = None,
        solution_problems: dict[str, Any] | None = None,
    ) -> None:
        self.rows = rows or {}
        self.solution_problems = solution_problems or {}
        self.deep_calls: list[str] = []
        self.gates: dict[str, asyncio.Event] = {}
        self.failures: dict[str, Exception] = {}

    async def fetch_all_entities(self, kind: EntityKind) -> list[dict[str, Any]]:
        return list(self.rows.get(kind, []))

    async def fetch_problems_directly_addressed_by_solution(self, solution_id: str) -> Any:
        self.deep_calls.append(solution_id)
        gate = self.gates.get(solution_id)
        if gate is not None:
            await gate.wait()
        if solution_id in self.failures:
            raise self.failures[solution_id]
        return self.solution_problems.get(solution_id, [])


PIPELINE_ROWS: dict[EntityKind, list[dict[str, Any]]] = {
    EntityKind.PROBLEM: [
        {"id": 1, "title": "Manual invoice matching", "impact": "high", "cluster_id": "C1", "cluster_label": "Finance ops"},
        {"id": 2, "title": "Late supplier payments", "impact": "medium", "cluster_id": None, "cluster_label": None},
        {"id": 3, "title": "Spreadsheet reconciliations", "impact": "low", "cluster_id": "C1", "cluster_label": "Finance ops"},
        {"id": 4, "title": "Lost shipping labels", "impact": None, "cluster_id": None, "cluster_label": "Logistics"},
        {"id": 5, "title": "Untracked returns", "impact": "low", "cluster_id": None, "cluster_label": None},
    ],
    EntityKind.CLUSTER: [
        {"cluster_id": "C1", "cluster_label": "Finance ops", "problem_count": 2, "solution_count": 1},
        {"cluster_id": "C2", "cluster_label": "Hiring", "problem_count": 0, "solution_count": 0},
    ],
    EntityKind.SOLUTION: [
        {
            "id": "S",
            "title": "Invoice autopilot",
            "overall_viability": 82,
            "status": "validated",
            "source_cluster_id": "C1",
            "source_cluster_label": "Finance ops",
            "problem_ids": "{1,2}",
        },
        {"id": "T", "title": "Returns portal", "overall_viability": 40.4, "status": "draft", "problem_ids": None},
    ],
    EntityKind.PROJECT: [
        {"id": 10, "name": "Autopilot MVP", "solution_id": "S", "linear_project_id": "LIN-1"},
        {"id": 11, "name": None, "solution_title": "Returns portal", "solution_id": "T"},
    ],
}


@pytest.fixture
def pipeline_rows() -> dict[EntityKind, list[dict[str, Any]]]:
    """Raw rows for a small pipeline."""
    return {kind: [dict(row) for row in rows] for kind, rows in PIPELINE_ROWS.items()}


@pytest.fixture
def dataset(pipeline_rows: dict[EntityKind, list[dict[str, Any]]]) -> Dataset:
    """Decoded dataset for the small pipeline."""
    return Dataset.from_rows(
        problems=pipeline_rows[EntityKind.PROBLEM],
        clusters=pipeline_rows[EntityKind.CLUSTER],
        solutions=pipeline_rows[EntityKind.SOLUTION],
        projects=pipeline_rows[EntityKind.PROJECT],
    )


@pytest.fixture
def mock_backend(pipeline_rows: dict[EntityKind, list[dict[str, Any]]]) -> MockBackend:
    """Backend serving the small pipeline; solution S addresses problems 1 and 2."""
    problems = pipeline_rows[EntityKind.PROBLEM]
    return MockBackend(
        rows=pipeline_rows,
        solution_problems={"S": {"data": [problems[0], problems[1]]}, "T": []},
    )


@pytest.fixture(autouse=True)
def _configure_logging() -> None:
    """Apply the CLI entry point's default logging setup for directly-called commands."""
    from pipeline_graph.cli import configure_logging

    configure_logging("critical")
