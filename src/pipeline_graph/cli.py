"""CLI for pipeline-graph."""

import asyncio
import json
from typing import Annotated, Literal

import structlog
from cyclopts import App, Parameter

from pipeline_graph.backend import Backend
from pipeline_graph.backends import ApiBackend, SnapshotBackend
from pipeline_graph.catalog_commands import catalog_app
from pipeline_graph.config import Config, get_config
from pipeline_graph.config_commands import config_app
from pipeline_graph.explorer import GraphExplorer
from pipeline_graph.graph import EgoGraph
from pipeline_graph.layout import BASE_RADIUS, MIN_SPACING, positions
from pipeline_graph.models import EntityKind
from pipeline_graph.resolver import CLUSTER_PROBLEM_LIMIT

logger = structlog.get_logger()

app = App(
    help="Pipeline Graph - Explore relationships between problems, clusters, solutions and projects",
)

app.command(catalog_app)
app.command(config_app)


def configure_logging(log_level: str) -> None:
    """Configure structlog with the specified log level."""
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(min_level=log_level.lower()))


def get_backend(config: Config | None = None) -> Backend:
    """Get the configured backend."""
    config = config or get_config()
    source = config.get("source", "api")

    if source == "api":
        base_url = config.get("api.base_url")
        if not base_url:
            raise ValueError(
                "API base URL not configured. Set it using:\n"
                "  pipeline-graph config set api.base_url http://localhost:3001/api"
            )
        return ApiBackend(base_url=base_url, token=config.get("api.token"))
    elif source == "snapshot":
        path = config.get("snapshot.path")
        if not path:
            raise ValueError(
                "Snapshot path not configured. Set it using:\n"
                "  pipeline-graph config set snapshot.path <file.json>"
            )
        return SnapshotBackend(path)
    else:
        raise ValueError(f"Unknown source: {source}")


def build_explorer(config: Config | None = None, include_orphaned: bool | None = None) -> GraphExplorer:
    """Create an explorer session from configuration."""
    config = config or get_config()
    if include_orphaned is None:
        include_orphaned = config.get_bool("catalog.include_orphaned", True)
    return GraphExplorer(
        get_backend(config),
        include_orphaned=include_orphaned,
        base_radius=config.get_float("graph.base_radius", BASE_RADIUS),
        min_spacing=config.get_float("graph.min_spacing", MIN_SPACING),
        cluster_problem_limit=config.get_int("graph.cluster_problem_limit", CLUSTER_PROBLEM_LIMIT),
    )


def format_graph(graph: EgoGraph) -> str:
    """Render an ego-graph as plain text."""
    lines = []
    for node in graph.nodes:
        marker = "*" if node.is_focal else ("~" if node.indirect else "-")
        subtitle = f" ({node.subtitle})" if node.subtitle else ""
        position = f" @ ({node.position.x:.0f}, {node.position.y:.0f})" if node.position else ""
        lines.append(f"{marker} {node.id}: {node.label}{subtitle}{position}")

    if graph.edges:
        lines.append("")
        for edge in graph.edges:
            arrow = "-->" if edge.style == "solid" else "..>"
            lines.append(f"  {edge.source} {arrow} {edge.target}  [{edge.relation.value}]")
    return "\n".join(lines)


async def _show(kind: EntityKind, entity_id: str) -> EgoGraph | None:
    explorer = build_explorer()
    await explorer.load()
    entity = explorer.catalog.candidate_dataset().find(kind, entity_id)
    if entity is None:
        return None
    return await explorer.select(entity)


@app.command
def show(kind: EntityKind, entity_id: str, json_: Annotated[bool, Parameter(name="--json")] = False) -> None:
    """Show the relationship graph around one entity."""
    graph = asyncio.run(_show(kind, entity_id))
    if graph is None:
        print(f"Unknown entity: {kind.value} {entity_id}")
        return

    if json_:
        print(json.dumps(graph.to_dict(), indent=2))
    else:
        print(format_graph(graph))


@app.command
def layout(n: int, base_radius: float = BASE_RADIUS, min_spacing: float = MIN_SPACING) -> None:
    """Print the offsets used to place n related nodes around the focal node."""
    for i, offset in enumerate(positions(n, base_radius, min_spacing)):
        print(f"{i}: ({offset.x:.1f}, {offset.y:.1f})")


@app.meta.default
def main(
    *tokens: Annotated[str, Parameter(show=False, allow_leading_hyphen=True)],
    log_level: Literal["debug", "info", "warning", "error", "critical"] = "critical",
) -> None:
    """Main entry point with global options."""
    configure_logging(log_level)
    app(tokens)


if __name__ == "__main__":
    app.meta()
