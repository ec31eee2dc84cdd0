"""Executor strategy base class"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, ClassVar, Dict, Optional

from studioflow.workflow.context import CancellationToken
from studioflow.workflow.models import Node, NodeType

# Input port id -> value read from the output cache
NodeInputs = Dict[str, Any]


class NodeValidationError(ValueError):
    """Required inputs are missing when the node is dispatched"""

    pass


class ProgressReporter:
    """Progress channel handed to an executor for one node.

    Every report is also a cancellation checkpoint.
    """

    def __init__(
        self,
        node_id: str,
        callback: Callable[[str, str], None],
        cancel_token: Optional[CancellationToken] = None,
    ):
        self.node_id = node_id
        self._callback = callback
        self.cancel_token = cancel_token

    def __call__(self, message: str) -> None:
        if self.cancel_token is not None:
            self.cancel_token.raise_if_cancelled()
        self._callback(self.node_id, message)


class NodeExecutor(ABC):
    """Execution strategy for one node type, all instances stateless"""

    node_type: ClassVar[NodeType]

    @abstractmethod
    async def execute(
        self, node: Node, inputs: NodeInputs, progress: ProgressReporter
    ) -> Any:
        """
        Run the node and return its output

        Args:
            node: Node snapshot taken before the node entered PROCESSING
            inputs: Values keyed by this node's input port ids
            progress: Transient status updates, does not change the status

        Raises:
            NodeValidationError: Required inputs missing
        """
        pass

    @staticmethod
    def input_value(node: Node, inputs: NodeInputs, suffix: str) -> Any:
        return inputs.get(node.port_id(suffix))

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(node_type={self.node_type.value!r})"
