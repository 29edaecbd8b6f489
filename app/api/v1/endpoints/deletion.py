from datetime import datetime, timezone
from typing import Any, Optional

from fastapi import APIRouter, Depends, Form, Query, Request
from fastapi.responses import JSONResponse
from sqlmodel import Session

from app.api.rendering import render_status
from app.core.config import settings
from app.core.rate_limit import limiter
from app.db.schema import DeletionTableSchema
from app.db.session import get_deletion_table_schema, get_session
from app.schemas.deletion import DeletionCallbackResponse, HealthResponse
from app.services.app_registry import AppRegistry, get_app_registry
from app.services.deletion_service import DeletionCallbackService
from app.services.deletion_store import DeletionRequestStore
from app.services.status_service import DeletionStatusService

router = APIRouter()


def get_deletion_store(
    db: Session = Depends(get_session),
    table_schema: DeletionTableSchema = Depends(get_deletion_table_schema),
) -> DeletionRequestStore:
    return DeletionRequestStore(db, table_schema)


def get_deletion_callback_service(
    store: DeletionRequestStore = Depends(get_deletion_store),
    registry: AppRegistry = Depends(get_app_registry),
) -> DeletionCallbackService:
    return DeletionCallbackService(store, registry)


def get_status_service(
    store: DeletionRequestStore = Depends(get_deletion_store),
    registry: AppRegistry = Depends(get_app_registry),
) -> DeletionStatusService:
    return DeletionStatusService(store, registry)


def health_payload() -> HealthResponse:
    return HealthResponse(ok=True, ts=datetime.now(timezone.utc).isoformat(timespec="seconds"))


def status_url_base(request: Request) -> str:
    """Absolute URL of the status endpoint, built from the public base URL or the Host header."""
    if settings.public_base_url:
        base = settings.public_base_url.rstrip("/")
    else:
        base = f"https://{request.headers.get('host') or settings.default_host}"
    return f"{base}{settings.route_prefix}/status"


@router.post("/", response_model=DeletionCallbackResponse)
@limiter.limit(settings.rate_limit)
def receive_deletion_callback(
    request: Request,
    signed_request: Optional[str] = Form(None),
    app: Optional[str] = Query(None, description="App slug or id the callback is expected for"),
    service: DeletionCallbackService = Depends(get_deletion_callback_service),
) -> Any:
    """
    Data deletion callback.
    Verifies the platform's signed request and returns the confirmation URL and code.
    """
    return service.handle_callback(signed_request, status_url_base(request), requested_app=app)


@router.api_route(
    "/",
    methods=["GET", "HEAD", "PUT", "PATCH", "DELETE", "OPTIONS"],
    response_model=HealthResponse,
    include_in_schema=False,
)
def deletion_callback_other_methods(request: Request):
    """Only POST is accepted, apart from the `?health` check."""
    if request.method == "GET" and "health" in request.query_params:
        return health_payload()
    return JSONResponse({"error": "method_not_allowed"}, status_code=405, headers={"Allow": "POST"})


@router.get("/status")
@limiter.limit(settings.rate_limit)
def read_deletion_status(
    request: Request,
    id: Optional[str] = Query(None, description="Confirmation code"),
    app: Optional[str] = Query(None, description="App slug or id"),
    format: Optional[str] = Query(None, description="Set to 'json' for a JSON response"),
    service: DeletionStatusService = Depends(get_status_service),
):
    """
    Status of a deletion request, as JSON or as an HTML page.
    """
    view = service.lookup(id, app)
    return render_status(request, view)
