"""Run context: per-run transient state"""

from __future__ import annotations

import threading
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class RunCancelledError(Exception):
    """The run was cancelled through its CancellationToken"""

    def __init__(self, message: str = "Run cancelled"):
        super().__init__(message)


class CancellationToken:
    """Cooperative cancellation flag checked at every suspension point"""

    def __init__(self) -> None:
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise RunCancelledError()


class TraceEvent(BaseModel):
    """One node's outcome within a run"""

    node_id: str
    node_type: str
    status: str
    elapsed_ms: Optional[int] = None
    error: Optional[str] = None
    output_ports: Optional[List[str]] = None


@dataclass
class RunContext:
    """State owned by one run and discarded afterwards"""

    run_id: str = field(default_factory=lambda: uuid.uuid4().hex[:12])

    # Output port id -> value published by the port's node
    output_cache: Dict[str, Any] = field(default_factory=dict)

    trace: List[TraceEvent] = field(default_factory=list)

    cancel_token: CancellationToken = field(default_factory=CancellationToken)

    def publish(self, port_id: str, value: Any) -> None:
        self.output_cache[port_id] = value

    def read(self, port_id: str) -> Any:
        """Unpublished ports read as None rather than failing"""
        return self.output_cache.get(port_id)

    def add_trace(
        self,
        node_id: str,
        node_type: str,
        status: str,
        elapsed_ms: Optional[int] = None,
        error: Optional[str] = None,
        output_ports: Optional[List[str]] = None,
    ) -> None:
        self.trace.append(
            TraceEvent(
                node_id=node_id,
                node_type=node_type,
                status=status,
                elapsed_ms=elapsed_ms,
                error=error,
                output_ports=output_ports,
            )
        )
