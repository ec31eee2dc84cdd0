"""Graph store: nodes and edges keyed by id.

There is no delete path: once created, an element lives as long as the store.
Updates replace the stored Node object instead of mutating it, so a Node
reference obtained earlier is a stable snapshot.
"""

from __future__ import annotations

import threading
import uuid
from typing import Any, Dict, List, Mapping, Optional

from studioflow.core.utils.logger import setup_logger
from studioflow.workflow.models import Edge, Node, NodeData, NodeType, Position
from studioflow.workflow.templates import get_template

logger = setup_logger("graph_store")

_IMMUTABLE_DATA_FIELDS = ("inputs", "outputs")


class InvalidEdgeError(ValueError):
    """Edge endpoints do not match the nodes' ports"""

    pass


class GraphStore:
    """In-memory workflow graph, one per session"""

    def __init__(self) -> None:
        self._lock = threading.RLock()
        # Insertion order is the scheduler's tie-break order
        self._nodes: Dict[str, Node] = {}
        self._edges: Dict[str, Edge] = {}

    # ------------------------------------------------------------------
    # Nodes
    # ------------------------------------------------------------------

    def create_node(
        self, node_type: NodeType, position: Optional[Position] = None
    ) -> Node:
        """Create a node with the port template of its type.

        Raises:
            UnknownNodeTypeError: node_type is not a known variant
        """
        template = get_template(node_type)
        node_id = str(uuid.uuid4())
        inputs, outputs = template.build_ports(node_id)

        node = Node(
            id=node_id,
            type=NodeType(node_type),
            position=position or Position(),
            data=NodeData(label=template.label, inputs=inputs, outputs=outputs),
        )
        with self._lock:
            self._nodes[node_id] = node
        logger.debug(f"Node created: {node.type.value} {node_id}")
        return node

    def update_node_data(self, node_id: str, partial: Mapping[str, Any]) -> Optional[Node]:
        """Shallow-merge fields into a node's data.

        Unknown ids are ignored (returns None) so late async updates for a
        node that no longer exists never raise.

        Raises:
            ValueError: partial tries to replace the port lists or names a
                field NodeData does not have
        """
        for key in partial:
            if key in _IMMUTABLE_DATA_FIELDS:
                raise ValueError(f"Node ports are fixed at creation: {key}")
            if key not in NodeData.model_fields:
                raise ValueError(f"Unknown node data field: {key}")

        with self._lock:
            node = self._nodes.get(node_id)
            if node is None:
                return None
            data = node.data.model_copy(update=dict(partial))
            updated = node.model_copy(update={"data": data})
            self._nodes[node_id] = updated
            return updated

    def get_node(self, node_id: str) -> Optional[Node]:
        with self._lock:
            return self._nodes.get(node_id)

    def has_node(self, node_id: str) -> bool:
        with self._lock:
            return node_id in self._nodes

    @property
    def nodes(self) -> List[Node]:
        with self._lock:
            return list(self._nodes.values())

    @property
    def node_ids(self) -> List[str]:
        with self._lock:
            return list(self._nodes.keys())

    # ------------------------------------------------------------------
    # Edges
    # ------------------------------------------------------------------

    def add_edge(
        self,
        source_node_id: str,
        source_handle_id: str,
        target_node_id: str,
        target_handle_id: str,
    ) -> Edge:
        """Connect an output port to an input port.

        Raises:
            InvalidEdgeError: unknown node, handle not owned by the stated
                node, or a self-loop
        """
        with self._lock:
            source = self._nodes.get(source_node_id)
            target = self._nodes.get(target_node_id)
            if source is None:
                raise InvalidEdgeError(f"Source node does not exist: {source_node_id}")
            if target is None:
                raise InvalidEdgeError(f"Target node does not exist: {target_node_id}")
            if source_node_id == target_node_id:
                raise InvalidEdgeError("A node cannot be connected to itself")
            if not source.has_output(source_handle_id):
                raise InvalidEdgeError(
                    f"{source_handle_id} is not an output port of node {source_node_id}"
                )
            if not target.has_input(target_handle_id):
                raise InvalidEdgeError(
                    f"{target_handle_id} is not an input port of node {target_node_id}"
                )

            edge = Edge(
                id=str(uuid.uuid4()),
                source_node_id=source_node_id,
                source_handle_id=source_handle_id,
                target_node_id=target_node_id,
                target_handle_id=target_handle_id,
            )
            self._edges[edge.id] = edge
        return edge

    @property
    def edges(self) -> List[Edge]:
        with self._lock:
            return list(self._edges.values())

    def incoming_edges(self, node_id: str) -> List[Edge]:
        """Edges targeting node_id, in insertion order"""
        with self._lock:
            return [e for e in self._edges.values() if e.target_node_id == node_id]

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return {
                "nodes": [n.model_dump(mode="json") for n in self._nodes.values()],
                "edges": [e.model_dump(mode="json") for e in self._edges.values()],
            }

    def __repr__(self) -> str:
        return f"GraphStore(nodes={len(self._nodes)}, edges={len(self._edges)})"
