"""Dashboard REST API backend implementation using httpx."""

from typing import Any

import httpx
import structlog

from pipeline_graph.backend import Backend
from pipeline_graph.models import EntityKind

logger = structlog.get_logger()

# kind -> (path, query params); limits match the dashboard's graph view
ENDPOINTS: dict[EntityKind, tuple[str, dict[str, Any]]] = {
    EntityKind.PROBLEM: ("/problems", {"limit": 200}),
    EntityKind.CLUSTER: ("/clusters", {"limit": 100}),
    EntityKind.SOLUTION: ("/solutions", {"limit": 100}),
    EntityKind.PROJECT: ("/projects", {}),
}


def unwrap_rows(payload: Any) -> list[dict[str, Any]]:
    """Accept a bare list of rows or an object wrapping them under ``data``."""
    if isinstance(payload, dict) and "data" in payload:
        payload = payload["data"]
    if not isinstance(payload, list):
        raise ValueError(f"Expected a list of rows, got {type(payload).__name__}")
    return payload


class ApiBackend(Backend):
    """Backend reading entities from the dashboard's REST API."""

    def __init__(
        self,
        base_url: str,
        token: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize API backend.

        Args:
            base_url: API root, e.g. http://localhost:3001/api
            token: Optional bearer token
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests)
        """
        if not base_url:
            raise ValueError("API base URL required")
        self.base_url = base_url.rstrip("/")
        self.token = token
        self.timeout = timeout
        self.transport = transport
        logger.debug("Initializing API backend", base_url=self.base_url)

    def _headers(self) -> dict[str, str]:
        headers = {"Content-Type": "application/json"}
        if self.token:
            headers["Authorization"] = f"Bearer {self.token}"
        return headers

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            headers=self._headers(),
            timeout=self.timeout,
            transport=self.transport,
        )

    async def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        async with self._client() as client:
            response = await client.get(path, params=params or None)
            response.raise_for_status()
            return response.json()

    async def fetch_all_entities(self, kind: EntityKind) -> list[dict[str, Any]]:
        """Fetch every row of one kind."""
        path, params = ENDPOINTS[EntityKind(kind)]
        logger.info("Fetching entities", kind=EntityKind(kind).value, path=path)
        rows = unwrap_rows(await self._get(path, params))
        logger.debug("Fetched entities", kind=EntityKind(kind).value, count=len(rows))
        return rows

    async def fetch_problems_directly_addressed_by_solution(self, solution_id: str) -> Any:
        """Fetch the raw problems payload for a solution."""
        logger.info("Fetching solution problems", solution_id=solution_id)
        return await self._get(f"/solutions/{solution_id}/problems")
