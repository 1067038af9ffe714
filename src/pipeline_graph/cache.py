"""Session cache for solution -> directly-addressed problems lookups."""

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

import structlog

from pipeline_graph.models import Problem

logger = structlog.get_logger()

Fetcher = Callable[[str], Awaitable[Any]]


def normalize_problems_payload(payload: Any) -> list[Problem]:
    """Decode a deep-lookup response into problems.

    Accepts either a bare list of problem rows or an object of the form
    ``{"data": [...]}``.

    Raises:
        ValueError: If the payload has neither shape
    """
    if isinstance(payload, dict) and "data" in payload:
        payload = payload["data"]
    if not isinstance(payload, list):
        raise ValueError(f"Unexpected problems payload: {type(payload).__name__}")

    problems = []
    for row in payload:
        if isinstance(row, Problem):
            problems.append(row)
        elif isinstance(row, dict) and row.get("id") is not None:
            problems.append(Problem.from_row(row))
        else:
            logger.debug("Skipping malformed problem row", row=row)
    return problems


class RelationshipCache:
    """Memoizes the problems each solution directly addresses.

    Entries are keyed by solution id and live for the whole session. Concurrent
    requests for the same id share a single fetch. Failed fetches are cached as
    an empty list.
    """

    def __init__(self, fetcher: Fetcher) -> None:
        """Initialize the cache.

        Args:
            fetcher: Coroutine function returning the raw payload for a solution id
        """
        self._fetcher = fetcher
        self._entries: dict[str, tuple[Problem, ...]] = {}
        self._pending: dict[str, asyncio.Task] = {}

    async def get(self, solution_id: str) -> list[Problem]:
        """Get the problems directly addressed by a solution, fetching at most once."""
        solution_id = str(solution_id)
        if solution_id in self._entries:
            logger.debug("Relationship cache hit", solution_id=solution_id)
            return list(self._entries[solution_id])

        task = self._pending.get(solution_id)
        if task is not None and task.cancelled():
            # A cancelled fetch never stores a result; start over
            logger.debug("Discarding cancelled fetch", solution_id=solution_id)
            del self._pending[solution_id]
            task = None
        if task is None:
            logger.debug("Relationship cache miss, fetching", solution_id=solution_id)
            task = asyncio.ensure_future(self._load(solution_id))
            self._pending[solution_id] = task
        else:
            logger.debug("Joining pending fetch", solution_id=solution_id)

        # Shielded so one cancelled consumer does not abort the shared fetch
        return list(await asyncio.shield(task))

    async def _load(self, solution_id: str) -> list[Problem]:
        try:
            payload = await self._fetcher(solution_id)
            problems = normalize_problems_payload(payload)
        except asyncio.CancelledError:
            if self._pending.get(solution_id) is asyncio.current_task():
                del self._pending[solution_id]
            raise
        except Exception as e:
            logger.warning("Failed to fetch solution problems", solution_id=solution_id, error=str(e))
            problems = []

        # An invalidate() during the fetch drops this result
        if self._pending.get(solution_id) is asyncio.current_task():
            del self._pending[solution_id]
            self._entries[solution_id] = tuple(problems)
            logger.debug("Cached solution problems", solution_id=solution_id, count=len(problems))
        return problems

    def peek(self, solution_id: str) -> list[Problem] | None:
        """Return the cached problems without fetching, or None if not cached."""
        entry = self._entries.get(str(solution_id))
        return list(entry) if entry is not None else None

    def invalidate(self, solution_id: str) -> None:
        """Forget a cached entry so the next get() fetches again."""
        solution_id = str(solution_id)
        logger.debug("Invalidating relationship cache entry", solution_id=solution_id)
        self._entries.pop(solution_id, None)
        self._pending.pop(solution_id, None)

    def __contains__(self, solution_id: object) -> bool:
        return str(solution_id) in self._entries

    def __len__(self) -> int:
        return len(self._entries)
