"""Workflow execution engine - graph store, scheduler and run coordinator"""

from studioflow.workflow.context import (
    CancellationToken,
    RunCancelledError,
    RunContext,
    TraceEvent,
)
from studioflow.workflow.graph import CyclicDependencyError, ExecutionGraph, InvalidGraphError
from studioflow.workflow.models import (
    INPUT_CAPTURE_TYPES,
    DataKind,
    Edge,
    Node,
    NodeData,
    NodeStatus,
    NodeType,
    Port,
    Position,
)
from studioflow.workflow.node_base import NodeExecutor, NodeValidationError, ProgressReporter
from studioflow.workflow.registry import (
    ExecutorNotFoundError,
    ExecutorRegistry,
    build_registry,
    get_default_registry,
)
from studioflow.workflow.runner import (
    RunEvent,
    RunInProgressError,
    RunResult,
    RunStatus,
    WorkflowRunner,
)
from studioflow.workflow.store import GraphStore, InvalidEdgeError
from studioflow.workflow.templates import NODE_TEMPLATES, UnknownNodeTypeError

__all__ = [
    "CancellationToken",
    "CyclicDependencyError",
    "DataKind",
    "Edge",
    "ExecutionGraph",
    "ExecutorNotFoundError",
    "ExecutorRegistry",
    "GraphStore",
    "INPUT_CAPTURE_TYPES",
    "InvalidEdgeError",
    "InvalidGraphError",
    "NODE_TEMPLATES",
    "Node",
    "NodeData",
    "NodeExecutor",
    "NodeStatus",
    "NodeType",
    "NodeValidationError",
    "Port",
    "Position",
    "ProgressReporter",
    "RunCancelledError",
    "RunContext",
    "RunEvent",
    "RunInProgressError",
    "RunResult",
    "RunStatus",
    "TraceEvent",
    "UnknownNodeTypeError",
    "WorkflowRunner",
    "build_registry",
    "get_default_registry",
]
