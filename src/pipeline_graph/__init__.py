"""Pipeline Graph - ego-graph explorer for the problem -> cluster -> solution -> project pipeline."""

from pipeline_graph.cache import RelationshipCache
from pipeline_graph.catalog import CatalogItem, EntityCatalog
from pipeline_graph.explorer import GraphExplorer
from pipeline_graph.graph import EgoGraph, EgoGraphBuilder
from pipeline_graph.layout import positions
from pipeline_graph.models import Cluster, Dataset, EntityKind, Problem, Project, RelationKind, Solution
from pipeline_graph.resolver import RelationshipResolver, parse_problem_ids

__all__ = [
    "CatalogItem",
    "Cluster",
    "Dataset",
    "EgoGraph",
    "EgoGraphBuilder",
    "EntityCatalog",
    "EntityKind",
    "GraphExplorer",
    "Problem",
    "Project",
    "RelationKind",
    "RelationshipCache",
    "RelationshipResolver",
    "Solution",
    "parse_problem_ids",
    "positions",
]
