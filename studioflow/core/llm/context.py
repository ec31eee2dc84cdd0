"""Generation request context

Keeps track of which run and node issued a generation call, so the request log
can be correlated with the workflow trace. Blocking SDK calls run in worker
threads (asyncio.to_thread), which is why a module-level variable guarded by a
lock is used instead of relying on the caller's task context.
"""

import threading
from dataclasses import dataclass
from typing import Optional


@dataclass
class RequestContext:
    """Run/node that issued the current generation call"""

    run_id: str
    node_id: str
    node_type: str


_lock = threading.Lock()
_current_context: Optional[RequestContext] = None


def set_request_context(run_id: str, node_id: str, node_type: str) -> None:
    global _current_context
    with _lock:
        _current_context = RequestContext(
            run_id=run_id, node_id=node_id, node_type=node_type
        )


def get_request_context() -> Optional[RequestContext]:
    with _lock:
        return _current_context


def clear_request_context() -> None:
    global _current_context
    with _lock:
        _current_context = None
