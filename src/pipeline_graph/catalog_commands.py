"""Catalog browsing commands for pipeline-graph CLI."""

import asyncio

from cyclopts import App

from pipeline_graph.catalog import CatalogItem, EntityCatalog
from pipeline_graph.models import EntityKind

catalog_app = App(name="catalog", help="Browse and search pipeline entities")


async def _load_catalog(exclude_orphaned: bool) -> EntityCatalog:
    from pipeline_graph.cli import build_explorer

    explorer = build_explorer(include_orphaned=False if exclude_orphaned else None)
    await explorer.load()
    return explorer.catalog


def _print_items(items: list[CatalogItem]) -> None:
    print(f"Found {len(items)} item(s):\n")
    for item in items:
        badges = f" [{', '.join(item.badges)}]" if item.badges else ""
        print(f"  {item.id}: {item.label}{badges}")


@catalog_app.command
def search(term: str, kind: EntityKind | None = None, exclude_orphaned: bool = False) -> None:
    """Search entities by case-insensitive substring."""
    catalog = asyncio.run(_load_catalog(exclude_orphaned))
    _print_items(catalog.search(term, kind=kind))


@catalog_app.command(name="list")
def list_items(kind: EntityKind | None = None, exclude_orphaned: bool = False) -> None:
    """List catalog entries with their badges."""
    catalog = asyncio.run(_load_catalog(exclude_orphaned))
    _print_items(catalog.filter_by_kind(kind))
