from __future__ import annotations

import uuid
from typing import List, Literal, Optional

from fastapi import Depends, FastAPI, HTTPException, Query, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from starlette.exceptions import HTTPException as StarletteHTTPException

from studioflow.api.dependencies import (
    get_catalog_service,
    get_existing_node,
    get_graph_store,
    get_runner,
)
from studioflow.api.schemas import (
    CancelRunResponse,
    CreateEdgeRequest,
    CreateNodeRequest,
    ErrorResponse,
    GraphResponse,
    HealthResponse,
    NodeTypeInfo,
    UpdateNodeRequest,
)
from studioflow.config import APP_NAME, VERSION
from studioflow.core.catalog import Catalog, CatalogError, CatalogService
from studioflow.core.export import default_export_filename, export_items, normalize_items
from studioflow.core.utils.logger import setup_logger
from studioflow.workflow import (
    NODE_TEMPLATES,
    Edge,
    GraphStore,
    InvalidEdgeError,
    Node,
    RunInProgressError,
    RunResult,
    WorkflowRunner,
)

app = FastAPI(title=f"{APP_NAME} API", version=VERSION)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    # allow_origins="*" cannot be combined with credentials
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


logger = setup_logger("api")

# Documented error bodies (OpenAPI)
_ERRORS = {status: {"model": ErrorResponse} for status in (400, 404, 409, 503)}


_STATUS_ERROR_CODE_MAP = {
    400: "BAD_REQUEST",
    404: "NOT_FOUND",
    405: "METHOD_NOT_ALLOWED",
    409: "CONFLICT",
    422: "VALIDATION_ERROR",
    500: "INTERNAL_SERVER_ERROR",
    503: "SERVICE_UNAVAILABLE",
}


def _error_code_for_status(status_code: int) -> str:
    return _STATUS_ERROR_CODE_MAP.get(status_code, f"HTTP_{status_code}")


def _get_or_create_request_id(request: Request) -> str:
    existing = getattr(request.state, "request_id", None)
    if existing:
        return existing

    request_id = request.headers.get("x-request-id")
    if request_id:
        request.state.request_id = request_id
        return request_id

    request_id = f"req_{uuid.uuid4().hex}"
    request.state.request_id = request_id
    return request_id


def _build_error_payload(
    *,
    request: Request,
    status: int,
    message: str,
    code: str,
    detail=None,
    errors=None,
) -> dict:
    payload = {
        "message": message,
        "code": code,
        "status": status,
        "request_id": _get_or_create_request_id(request),
    }
    if detail is not None:
        payload["detail"] = detail
    if errors is not None:
        payload["errors"] = errors
    return payload


@app.middleware("http")
async def request_id_middleware(request: Request, call_next):
    request_id = _get_or_create_request_id(request)
    response = await call_next(request)
    response.headers["x-request-id"] = request_id
    return response


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    detail = exc.detail
    message = detail if isinstance(detail, str) else "Request failed"
    payload = _build_error_payload(
        request=request,
        status=exc.status_code,
        message=message,
        code=_error_code_for_status(exc.status_code),
        detail=detail if not isinstance(detail, str) else None,
    )
    return JSONResponse(status_code=exc.status_code, content=payload)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    payload = _build_error_payload(
        request=request,
        status=422,
        message="Request validation failed",
        code="VALIDATION_ERROR",
        errors=jsonable_errors(exc),
    )
    return JSONResponse(status_code=422, content=payload)


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    request_id = _get_or_create_request_id(request)
    logger.exception("unhandled_exception request_id=%s", request_id, exc_info=exc)
    payload = _build_error_payload(
        request=request,
        status=500,
        message="Internal server error",
        code="INTERNAL_SERVER_ERROR",
    )
    return JSONResponse(status_code=500, content=payload)


def jsonable_errors(exc: RequestValidationError) -> list:
    """Validation errors without the raw ``ctx`` objects (not JSON serializable)."""
    return [{k: v for k, v in err.items() if k != "ctx"} for err in exc.errors()]


# ---------------------------------------------------------------------------
# Health / palette
# ---------------------------------------------------------------------------


@app.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    return HealthResponse(version=VERSION)


@app.get("/node-types", response_model=List[NodeTypeInfo])
async def list_node_types() -> List[NodeTypeInfo]:
    """Palette; port ids are shown for a placeholder node id."""
    result = []
    for node_type, template in NODE_TEMPLATES.items():
        inputs, outputs = template.build_ports("<node_id>")
        result.append(
            NodeTypeInfo(type=node_type, label=template.label, inputs=inputs, outputs=outputs)
        )
    return result


# ---------------------------------------------------------------------------
# Graph editing
# ---------------------------------------------------------------------------


@app.get("/graph", response_model=GraphResponse)
async def get_graph(store: GraphStore = Depends(get_graph_store)) -> GraphResponse:
    return GraphResponse(nodes=store.nodes, edges=store.edges)


@app.post("/nodes", response_model=Node, status_code=201, responses=_ERRORS)
async def create_node(
    body: CreateNodeRequest,
    store: GraphStore = Depends(get_graph_store),
    runner: WorkflowRunner = Depends(get_runner),
) -> Node:
    if runner.is_running:
        raise HTTPException(status_code=409, detail="A run is in progress")
    node = store.create_node(body.type, body.position)
    logger.info(f"Node created: {node.type.value} {node.id}")
    return node


@app.patch("/nodes/{node_id}", response_model=Node, responses=_ERRORS)
async def update_node(
    body: UpdateNodeRequest,
    node: Node = Depends(get_existing_node),
    store: GraphStore = Depends(get_graph_store),
    runner: WorkflowRunner = Depends(get_runner),
) -> Node:
    if runner.is_running:
        raise HTTPException(status_code=409, detail="A run is in progress")
    updated = store.update_node_data(node.id, body.model_dump(exclude_unset=True))
    if updated is None:
        raise HTTPException(status_code=404, detail=f"Node not found: {node.id}")
    return updated


@app.post("/edges", response_model=Edge, status_code=201, responses=_ERRORS)
async def create_edge(
    body: CreateEdgeRequest,
    store: GraphStore = Depends(get_graph_store),
    runner: WorkflowRunner = Depends(get_runner),
) -> Edge:
    if runner.is_running:
        raise HTTPException(status_code=409, detail="A run is in progress")
    try:
        return store.add_edge(
            body.source_node_id,
            body.source_handle_id,
            body.target_node_id,
            body.target_handle_id,
        )
    except InvalidEdgeError as e:
        raise HTTPException(status_code=400, detail=str(e)) from e


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------


@app.post("/runs", response_model=RunResult, responses=_ERRORS)
async def run_workflow(runner: WorkflowRunner = Depends(get_runner)) -> RunResult:
    """Execute the graph once; node failures are reported in the result."""
    try:
        return await runner.run()
    except RunInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e)) from e


@app.post("/runs/cancel", response_model=CancelRunResponse)
async def cancel_run(runner: WorkflowRunner = Depends(get_runner)) -> CancelRunResponse:
    return CancelRunResponse(cancelled=runner.cancel())


# ---------------------------------------------------------------------------
# Catalog / export
# ---------------------------------------------------------------------------


@app.get("/catalog", response_model=Catalog, responses=_ERRORS)
async def get_catalog(catalog: CatalogService = Depends(get_catalog_service)) -> Catalog:
    try:
        return catalog.get_catalog()
    except CatalogError as e:
        logger.error(f"Catalog unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e)) from e


@app.get("/nodes/{node_id}/export", responses=_ERRORS)
async def export_node(
    node: Node = Depends(get_existing_node),
    format: Literal["json", "csv"] = Query(default="json"),
    filename: Optional[str] = Query(default=None, max_length=128),
) -> Response:
    """Download a node's records (typically an exporter) as JSON or CSV."""
    items = normalize_items(node.data.content, unwrap_items=True)
    if not items:
        raise HTTPException(status_code=400, detail="Nothing to export for this node")

    payload = export_items(items, format)
    name = f"{filename or default_export_filename()}.{payload.extension}"
    return Response(
        content=payload.content,
        media_type=payload.media_type,
        headers={"Content-Disposition": f'attachment; filename="{name}"'},
    )


def run_server(host: str = "0.0.0.0", port: int = 8765, reload: bool = False) -> None:
    """Start the API server

    Args:
        host: Bind address
        port: Bind port
        reload: Hot reload (development)
    """
    import uvicorn

    uvicorn.run("studioflow.api.main:app", host=host, port=port, reload=reload)


if __name__ == "__main__":
    run_server()
