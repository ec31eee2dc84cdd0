"""Run coordinator - executes a workflow graph in topological order"""

from __future__ import annotations

import asyncio
import time
from enum import Enum
from typing import Any, Callable, List, Optional

from pydantic import BaseModel, Field

from studioflow.core.llm.context import clear_request_context, set_request_context
from studioflow.core.utils.logger import setup_logger
from studioflow.settings import WorkflowSettings, get_workflow_settings
from studioflow.workflow.context import (
    CancellationToken,
    RunCancelledError,
    RunContext,
    TraceEvent,
)
from studioflow.workflow.graph import ExecutionGraph
from studioflow.workflow.models import Node, NodeStatus
from studioflow.workflow.node_base import NodeInputs, NodeValidationError, ProgressReporter
from studioflow.workflow.registry import ExecutorRegistry, get_default_registry
from studioflow.workflow.store import GraphStore

logger = setup_logger("workflow_runner")

STARTING_MESSAGE = "Starting..."
CYCLE_MESSAGE = "Cycle detected: this node depends on itself through its inputs"
BLOCKED_BY_CYCLE_MESSAGE = "Blocked by a cycle upstream"


class RunInProgressError(Exception):
    """A run is already active on this runner"""

    pass


class RunStatus(str, Enum):
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"


class RunResult(BaseModel):
    run_id: str
    status: RunStatus
    execution_order: List[str] = Field(default_factory=list)
    failed_node_id: Optional[str] = None
    error: Optional[str] = None
    # validation | service | cycle | cancelled
    error_kind: Optional[str] = None
    starved_node_ids: List[str] = Field(default_factory=list)
    trace: List[TraceEvent] = Field(default_factory=list)


class RunEvent(BaseModel):
    """Status or progress change pushed to run listeners"""

    run_id: str
    node_id: str
    status: NodeStatus
    message: Optional[str] = None


RunListener = Callable[[RunEvent], None]


def _classify_error(exc: BaseException) -> str:
    if isinstance(exc, RunCancelledError):
        return "cancelled"
    if isinstance(exc, NodeValidationError):
        return "validation"
    return "service"


class WorkflowRunner:
    """
    Run coordinator

    One pass = reset, schedule, then execute nodes strictly one after another:
    - inputs are gathered from the run's output cache by port id
    - the first failure marks that node ERROR and aborts the run
    - nodes never reached stay IDLE
    """

    def __init__(
        self,
        store: GraphStore,
        registry: Optional[ExecutorRegistry] = None,
        settings: Optional[WorkflowSettings] = None,
        listeners: Optional[List[RunListener]] = None,
    ):
        """
        Args:
            store: Graph to execute, shared with whoever edits it
            registry: Executors, defaults to the process-wide registry
            settings: Cycle policy, defaults to environment settings
            listeners: Called for every node status/progress change
        """
        self.store = store
        self.registry = registry or get_default_registry()
        self.settings = settings or get_workflow_settings()
        self.listeners: List[RunListener] = list(listeners or [])
        self._active: Optional[RunContext] = None

    @property
    def is_running(self) -> bool:
        return self._active is not None

    def cancel(self) -> bool:
        """Request cancellation of the active run; False when idle"""
        if self._active is None:
            return False
        self._active.cancel_token.cancel()
        return True

    async def run(self, cancel_token: Optional[CancellationToken] = None) -> RunResult:
        """
        Execute the whole graph once

        Raises:
            RunInProgressError: Another run is active on this runner
        """
        if self._active is not None:
            raise RunInProgressError(f"Run {self._active.run_id} is still in progress")

        ctx = RunContext(cancel_token=cancel_token or CancellationToken())
        self._active = ctx
        try:
            return await self._run(ctx)
        finally:
            self._active = None
            clear_request_context()

    # ------------------------------------------------------------------
    # Phases
    # ------------------------------------------------------------------

    def reset(self) -> None:
        """Back to IDLE; user-entered content of input nodes is kept"""
        for node in self.store.nodes:
            update: dict[str, Any] = {"status": NodeStatus.IDLE, "error_message": None}
            if not node.is_input_capture:
                update["content"] = None
            self.store.update_node_data(node.id, update)

    async def _run(self, ctx: RunContext) -> RunResult:
        self.reset()

        graph = ExecutionGraph(self.store.node_ids, self.store.edges)
        order = graph.topological_sort()
        starved = graph.starved_nodes(order)

        logger.info(
            f"Run {ctx.run_id} started: {len(order)} node(s) scheduled, "
            f"{len(starved)} starved"
        )

        if starved:
            if self.settings.cycle_policy == "error":
                return self._fail_cycle(ctx, graph, order, starved)
            logger.warning(
                f"Run {ctx.run_id}: nodes in a cycle will not run: {', '.join(starved)}"
            )

        for node_id in order:
            exc = await self._execute_node(ctx, node_id)
            if exc is not None:
                status = RunStatus.CANCELLED if isinstance(exc, RunCancelledError) else RunStatus.FAILED
                logger.info(f"Run {ctx.run_id} aborted at node {node_id}: {exc}")
                return RunResult(
                    run_id=ctx.run_id,
                    status=status,
                    execution_order=order,
                    failed_node_id=node_id,
                    error=str(exc),
                    error_kind=_classify_error(exc),
                    starved_node_ids=starved,
                    trace=list(ctx.trace),
                )

        logger.info(f"Run {ctx.run_id} completed")
        return RunResult(
            run_id=ctx.run_id,
            status=RunStatus.COMPLETED,
            execution_order=order,
            starved_node_ids=starved,
            trace=list(ctx.trace),
        )

    def _fail_cycle(
        self, ctx: RunContext, graph: ExecutionGraph, order: List[str], starved: List[str]
    ) -> RunResult:
        members = set(graph.cycle_members(starved))
        for node_id in starved:
            message = CYCLE_MESSAGE if node_id in members else BLOCKED_BY_CYCLE_MESSAGE
            self._set_status(ctx, node_id, NodeStatus.ERROR, error_message=message)
            node = self.store.get_node(node_id)
            ctx.add_trace(
                node_id=node_id,
                node_type=node.type.value if node else "",
                status="failed",
                error=message,
            )
        logger.error(f"Run {ctx.run_id} aborted, cycle among: {', '.join(starved)}")
        return RunResult(
            run_id=ctx.run_id,
            status=RunStatus.FAILED,
            execution_order=order,
            failed_node_id=next((n for n in starved if n in members), starved[0]),
            error=f"Cycle detected among {len(starved)} node(s)",
            error_kind="cycle",
            starved_node_ids=starved,
            trace=list(ctx.trace),
        )

    async def _execute_node(self, ctx: RunContext, node_id: str) -> Optional[BaseException]:
        """Run one node; returns the exception that should abort the run"""
        node = self.store.get_node(node_id)
        if node is None:
            return None

        start_time = time.time()
        self._set_status(ctx, node_id, NodeStatus.PROCESSING, content={"progress": STARTING_MESSAGE})

        try:
            ctx.cancel_token.raise_if_cancelled()
            inputs = self._gather_inputs(ctx, node_id)
            executor = self.registry.get(node.type)
            progress = ProgressReporter(
                node_id,
                lambda nid, message: self._report_progress(ctx, nid, message),
                ctx.cancel_token,
            )
            set_request_context(ctx.run_id, node_id, node.type.value)
            output = await executor.execute(node, inputs, progress)
        except asyncio.CancelledError:
            self._record_failure(ctx, node, RunCancelledError(), start_time)
            raise
        except Exception as e:
            if isinstance(e, RunCancelledError):
                logger.warning(f"Node {node_id} cancelled")
            else:
                logger.exception(f"Node {node_id} ({node.type.value}) failed: {e}")
            self._record_failure(ctx, node, e, start_time)
            return e

        self._set_status(ctx, node_id, NodeStatus.COMPLETED, content=output)
        ports = self._publish_outputs(ctx, node, output)
        ctx.add_trace(
            node_id=node_id,
            node_type=node.type.value,
            status="completed",
            elapsed_ms=int((time.time() - start_time) * 1000),
            output_ports=ports,
        )
        return None

    def _record_failure(
        self, ctx: RunContext, node: Node, exc: BaseException, start_time: float
    ) -> None:
        message = str(exc) or exc.__class__.__name__
        self._set_status(ctx, node.id, NodeStatus.ERROR, error_message=message)
        ctx.add_trace(
            node_id=node.id,
            node_type=node.type.value,
            status="cancelled" if isinstance(exc, RunCancelledError) else "failed",
            elapsed_ms=int((time.time() - start_time) * 1000),
            error=message,
        )

    # ------------------------------------------------------------------
    # Data flow
    # ------------------------------------------------------------------

    def _gather_inputs(self, ctx: RunContext, node_id: str) -> NodeInputs:
        """Later edges into the same port overwrite earlier ones"""
        inputs: NodeInputs = {}
        for edge in self.store.incoming_edges(node_id):
            inputs[edge.target_handle_id] = ctx.read(edge.source_handle_id)
        return inputs

    @staticmethod
    def _is_composite(node: Node, output: Any) -> bool:
        ports = node.data.outputs
        if len(ports) < 2 or len({p.data_kind for p in ports}) < 2:
            return False
        if not isinstance(output, dict):
            return False
        return all(p.data_kind.value in output for p in ports)

    def _publish_outputs(self, ctx: RunContext, node: Node, output: Any) -> List[str]:
        """
        Publish a node's output to each declared output port

        Composite outputs ({"image": ..., "text": ...}) on nodes whose ports
        have different data kinds are split by kind; otherwise every port
        gets the full value.
        """
        composite = self._is_composite(node, output)
        for port in node.data.outputs:
            ctx.publish(port.id, output[port.data_kind.value] if composite else output)
        return [p.id for p in node.data.outputs]

    # ------------------------------------------------------------------
    # Status updates
    # ------------------------------------------------------------------

    def _set_status(
        self,
        ctx: RunContext,
        node_id: str,
        status: NodeStatus,
        *,
        content: Any = None,
        error_message: Optional[str] = None,
    ) -> None:
        update: dict[str, Any] = {"status": status, "error_message": error_message}
        if status != NodeStatus.ERROR:
            update["content"] = content
        self.store.update_node_data(node_id, update)
        self._emit(RunEvent(run_id=ctx.run_id, node_id=node_id, status=status, message=error_message))

    def _report_progress(self, ctx: RunContext, node_id: str, message: str) -> None:
        self.store.update_node_data(node_id, {"content": {"progress": message}})
        self._emit(
            RunEvent(run_id=ctx.run_id, node_id=node_id, status=NodeStatus.PROCESSING, message=message)
        )

    def _emit(self, event: RunEvent) -> None:
        for listener in self.listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(f"Run listener failed for node {event.node_id}")
