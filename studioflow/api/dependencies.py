"""API dependencies.

Process-wide instances handed to the routes through FastAPI's dependency
injection, so tests can swap them with ``app.dependency_overrides``:
- the session's graph store
- the run coordinator bound to that store
- the catalog collaborator
"""

from __future__ import annotations

from functools import lru_cache

from fastapi import Depends, HTTPException

from studioflow.core.catalog import CatalogService
from studioflow.workflow import GraphStore, Node, WorkflowRunner


@lru_cache
def get_graph_store() -> GraphStore:
    return GraphStore()


@lru_cache
def get_catalog_service() -> CatalogService:
    return CatalogService()


@lru_cache
def get_runner() -> WorkflowRunner:
    return WorkflowRunner(get_graph_store())


def get_existing_node(node_id: str, store: GraphStore = Depends(get_graph_store)) -> Node:
    """Path dependency: 404 when the node id is unknown."""
    node = store.get_node(node_id)
    if node is None:
        raise HTTPException(status_code=404, detail=f"Node not found: {node_id}")
    return node
