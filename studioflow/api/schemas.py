"""API request/response models.

Pydantic v2 models for every endpoint body. Graph elements themselves
(Node, Edge) are reused from the workflow package.
"""

from __future__ import annotations

from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from studioflow.workflow.models import Edge, Node, NodeType, Port, Position


# ---------------------------------------------------------------------------
# Base model
# ---------------------------------------------------------------------------


class ApiModel(BaseModel):
    """Base class of request bodies.

    - extra="forbid": unknown fields are rejected instead of silently ignored
    - str_strip_whitespace: surrounding whitespace is removed from strings
    """

    model_config = ConfigDict(
        extra="forbid",
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# ---------------------------------------------------------------------------
# Common responses
# ---------------------------------------------------------------------------


class ErrorResponse(ApiModel):
    """Unified error payload used by every non-2xx response."""

    message: str = Field(..., description="Error message")
    code: str = Field(..., description="Error code")
    status: int = Field(..., ge=100, le=599, description="HTTP status code")
    request_id: str = Field(..., description="Request id")
    detail: Any | None = Field(default=None, description="Error detail")
    errors: Any | None = Field(default=None, description="Field level errors")


class HealthResponse(ApiModel):
    status: str = "ok"
    version: str


# ---------------------------------------------------------------------------
# Graph
# ---------------------------------------------------------------------------


class NodeTypeInfo(ApiModel):
    """Palette entry: a node type and its port template."""

    type: NodeType
    label: str
    inputs: List[Port]
    outputs: List[Port]


class GraphResponse(BaseModel):
    nodes: List[Node]
    edges: List[Edge]


class CreateNodeRequest(ApiModel):
    type: NodeType = Field(..., description="Node type")
    position: Position = Field(default_factory=Position, description="Canvas position")


class UpdateNodeRequest(ApiModel):
    """User edits; status and ports are owned by the engine."""

    content: Any | None = Field(default=None, description="User content (text, data URL, product record)")
    label: Optional[str] = Field(default=None, min_length=1, max_length=128)
    scale: Optional[float] = Field(default=None, ge=0.5, le=2.5)


class CreateEdgeRequest(ApiModel):
    source_node_id: str = Field(..., min_length=1)
    source_handle_id: str = Field(..., min_length=1)
    target_node_id: str = Field(..., min_length=1)
    target_handle_id: str = Field(..., min_length=1)


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------


class CancelRunResponse(ApiModel):
    cancelled: bool = Field(..., description="Whether an active run was signalled")
