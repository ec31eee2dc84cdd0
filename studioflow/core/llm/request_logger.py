import json
import threading
import time
from datetime import datetime
from typing import Any, Dict

import httpx

from studioflow.config import GENERATION_LOG_FILE, LOG_PATH
from studioflow.core.llm.context import get_request_context

MAX_LOG_SIZE = 10 * 1024 * 1024  # 10MB

# Endpoints worth recording; binary downloads are skipped
_LOGGED_ENDPOINTS = ("/chat/completions", "/images/edits", "/videos")

_log_lock = threading.Lock()
_pending_requests: Dict[int, Dict[str, Any]] = {}  # request info waiting for its response


# ==================== Log writing ====================


def _rotate_if_needed() -> None:
    if not GENERATION_LOG_FILE.exists():
        return
    if GENERATION_LOG_FILE.stat().st_size < MAX_LOG_SIZE:
        return

    backup = GENERATION_LOG_FILE.with_suffix(".jsonl.old")
    if backup.exists():
        backup.unlink()
    GENERATION_LOG_FILE.rename(backup)


def _write_log(entry: Dict[str, Any]) -> None:
    LOG_PATH.mkdir(parents=True, exist_ok=True)
    with _log_lock:
        _rotate_if_needed()
        with open(GENERATION_LOG_FILE, "a", encoding="utf-8") as f:
            f.write(json.dumps(entry, ensure_ascii=False) + "\n")


def _is_logged(url: str) -> bool:
    return any(endpoint in url for endpoint in _LOGGED_ENDPOINTS) and "/content" not in url


def _summarize_body(request: httpx.Request) -> Any:
    content_type = request.headers.get("content-type", "")
    if "multipart" in content_type:
        # Image uploads: keep the size only
        return {"multipart_bytes": len(request.content)}
    try:
        return json.loads(request.content.decode("utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError):
        return {"raw": request.content.decode("utf-8", errors="replace")}


# ==================== HTTPX Hooks ====================


def _on_request(request: httpx.Request) -> None:
    """Stash request info before it is sent"""
    url = str(request.url)
    if not _is_logged(url):
        return

    _pending_requests[id(request)] = {
        "start_time": time.time(),
        "method": request.method,
        "url": url,
        "request": _summarize_body(request),
    }


def _on_response(response: httpx.Response) -> None:
    """Write one JSON line once the response status is known"""
    pending = _pending_requests.pop(id(response.request), None)
    if not pending:
        return

    ctx = get_request_context()
    entry = {
        "time": datetime.now().strftime("%Y-%m-%d %H:%M:%S"),
        "run_id": ctx.run_id if ctx else "",
        "node_id": ctx.node_id if ctx else "",
        "node_type": ctx.node_type if ctx else "",
        "method": pending["method"],
        "url": pending["url"],
        "status": response.status_code,
        "duration_ms": int((time.time() - pending["start_time"]) * 1000),
        "request": pending["request"],
    }
    _write_log(entry)


# ==================== Public API ====================


def create_logging_http_client() -> httpx.Client:
    """Create an HTTPX client that records generation requests"""
    return httpx.Client(
        event_hooks={
            "request": [_on_request],
            "response": [_on_response],
        }
    )
