import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.api.rendering import is_status_page, render_error
from app.api.v1.api import api_router
from app.api.v1.endpoints.deletion import health_payload
from app.core.config import settings
from app.core.exceptions import ClientInputError, ConfigurationError, PersistenceError
from app.core.logging import setup_logging
from app.core.rate_limit import limiter
from app.db.session import get_deletion_table_schema
from app.schemas.deletion import HealthResponse
from app.services.app_registry import get_app_registry

setup_logging()
logger = logging.getLogger(__name__)

SERVER_ERROR_BODY = {"error": "server_error", "msg": "Please check server logs."}
HTTP_ERROR_CODES = {404: "not_found", 405: "method_not_allowed"}


# Create FastAPI app
app = FastAPI(
    title=settings.app_name,
    description="Receiver and status lookup for platform data deletion callbacks",
    version="1.0.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url=None,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

# Status pages may be polled from the platform's own pages
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=False,
    allow_methods=["GET", "POST"],
    allow_headers=["Accept", "Content-Type"],
)


@app.on_event("startup")
async def startup_event():
    """
    Application startup event.
    Loads the app registry and probes the deletion table once, before traffic.
    Failures are logged and surface later as 500s instead of stopping the process.
    """
    try:
        get_app_registry()
    except ConfigurationError:
        logger.error("Starting without a usable app registry")
    try:
        get_deletion_table_schema()
    except SQLAlchemyError as e:
        logger.error(f"Could not probe the deletion table at startup: {e}")


# Include API routes
app.include_router(api_router, prefix=settings.route_prefix)


@app.get("/health", response_model=HealthResponse)
async def health_check():
    """Health check endpoint."""
    return health_payload()


@app.exception_handler(ClientInputError)
async def client_input_exception_handler(request: Request, exc: ClientInputError):
    logger.info(f"{request.method} {request.url.path} rejected: {exc.error_code}")
    return render_error(request, exc.status_code, exc.to_dict())


@app.exception_handler(PersistenceError)
async def persistence_exception_handler(request: Request, exc: PersistenceError):
    logger.error(f"Persistence failure on {request.method} {request.url.path}: {exc}")
    return render_error(request, 500, SERVER_ERROR_BODY)


@app.exception_handler(ConfigurationError)
async def configuration_exception_handler(request: Request, exc: ConfigurationError):
    logger.error(f"Configuration error on {request.method} {request.url.path}: {exc}")
    return render_error(request, 500, {"error": "configuration_error"})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    """Routing errors (unknown path, wrong method) in the service's error format."""
    error_code = HTTP_ERROR_CODES.get(exc.status_code, "server_error" if exc.status_code >= 500 else "bad_request")
    return render_error(request, exc.status_code, {"error": error_code}, headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    error_code = "missing_or_invalid_id" if is_status_page(request) else "invalid_payload"
    logger.info(f"{request.method} {request.url.path} rejected: {error_code} ({len(exc.errors())} invalid fields)")
    return render_error(request, 400, {"error": error_code})


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Global exception handler for unhandled errors."""
    logger.error(f"Uncaught error on {request.method} {request.url.path}: {exc}", exc_info=exc)
    return render_error(request, 500, SERVER_ERROR_BODY)


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.debug
    )
