"""Backend implementations."""

from pipeline_graph.backends.api import ApiBackend
from pipeline_graph.backends.snapshot import SnapshotBackend

__all__ = ["ApiBackend", "SnapshotBackend"]
