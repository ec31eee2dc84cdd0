"""Workflow graph data model.

Nodes and edges are pydantic v2 models so the same objects are used by the
engine and serialized by the HTTP layer.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class NodeType(str, Enum):
    """Closed set of node variants."""

    TEXT_INPUT = "TEXT_INPUT"
    IMAGE_INPUT = "IMAGE_INPUT"
    TEXT_GENERATOR = "TEXT_GENERATOR"
    IMAGE_EDITOR = "IMAGE_EDITOR"
    VIDEO_GENERATOR = "VIDEO_GENERATOR"
    PRODUCT = "PRODUCT"
    SOCIAL_POST_GENERATOR = "SOCIAL_POST_GENERATOR"
    PRODUCT_IMAGE_LOADER = "PRODUCT_IMAGE_LOADER"
    EXPORTER = "EXPORTER"
    OUTPUT_DISPLAY = "OUTPUT_DISPLAY"


class NodeStatus(str, Enum):
    """Per-node state within one run: IDLE -> PROCESSING -> COMPLETED | ERROR."""

    IDLE = "IDLE"
    PROCESSING = "PROCESSING"
    COMPLETED = "COMPLETED"
    ERROR = "ERROR"


class DataKind(str, Enum):
    TEXT = "text"
    IMAGE = "image"
    VIDEO = "video"
    ANY = "any"


# Nodes whose content is entered by the user and survives a run reset
INPUT_CAPTURE_TYPES = frozenset(
    {NodeType.TEXT_INPUT, NodeType.IMAGE_INPUT, NodeType.PRODUCT}
)


# ---------------------------------------------------------------------------
# Graph elements
# ---------------------------------------------------------------------------


class Port(BaseModel):
    """Named, typed connection point (handle) of a node."""

    model_config = ConfigDict(frozen=True)

    id: str
    label: str
    data_kind: DataKind


class Position(BaseModel):
    x: float = 0.0
    y: float = 0.0


class NodeData(BaseModel):
    label: str
    inputs: List[Port] = Field(default_factory=list)
    outputs: List[Port] = Field(default_factory=list)
    # text, data URL, file path, structured record, {"progress": msg} or None
    content: Any = None
    status: NodeStatus = NodeStatus.IDLE
    error_message: Optional[str] = None
    scale: float = 1.0


class Node(BaseModel):
    id: str
    type: NodeType
    position: Position = Field(default_factory=Position)
    data: NodeData

    @property
    def is_input_capture(self) -> bool:
        return self.type in INPUT_CAPTURE_TYPES

    def port_id(self, suffix: str) -> str:
        """Port ids are derived from the node id: ``<node_id>-<suffix>``."""
        return f"{self.id}-{suffix}"

    def has_input(self, port_id: str) -> bool:
        return any(p.id == port_id for p in self.data.inputs)

    def has_output(self, port_id: str) -> bool:
        return any(p.id == port_id for p in self.data.outputs)


class Edge(BaseModel):
    """Directed connection from an output port to an input port."""

    model_config = ConfigDict(frozen=True)

    id: str
    source_node_id: str
    source_handle_id: str
    target_node_id: str
    target_handle_id: str
