"""Tests for backend interface."""

import pytest

from pipeline_graph.backend import Backend
from pipeline_graph.models import EntityKind

from tests.conftest import MockBackend


def test_backend_is_abstract() -> None:
    """Test the interface cannot be instantiated."""
    with pytest.raises(TypeError):
        Backend()


@pytest.mark.asyncio
async def test_load_dataset(mock_backend: MockBackend) -> None:
    """Test loading all four collections into a dataset."""
    dataset = await mock_backend.load_dataset()

    assert len(dataset.problems) == 5
    assert len(dataset.clusters) == 2
    assert len(dataset.solutions) == 2
    assert len(dataset.projects) == 2
    assert dataset.find(EntityKind.CLUSTER, "C1").label == "Finance ops"


@pytest.mark.asyncio
async def test_load_empty_dataset() -> None:
    """Test a backend with no rows yields an empty dataset."""
    dataset = await MockBackend().load_dataset()
    assert len(dataset) == 0
