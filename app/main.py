"""
Chennai Civic Network API - FastAPI Application Entry Point

Citizens report civic issues; each report is routed to the responsible
ward by geolocation and tracked through a status lifecycle.

DESIGN PRINCIPLES:
- Ward boundaries and the ward -> department table are loaded once at
  startup and shared read-only by every request
- Every response uses the {"success": ..., "message": ...} envelope
- Store failures are logged in full and reported to callers opaquely
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from app.core.errors import CivicNetworkError, StoreError
from app.core.logging_config import setup_logging
from app.core.settings import settings
from app.routes import analytics, health, reports

logger = logging.getLogger(__name__)


# Initialize FastAPI app
app = FastAPI(
    title=settings.APP_NAME,
    version=settings.APP_VERSION,
    description="Civic issue reporting with geolocation-based ward routing",
    debug=settings.DEBUG
)


def _envelope(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "message": message})


@app.exception_handler(CivicNetworkError)
async def civic_error_handler(request: Request, exc: CivicNetworkError):
    """Domain errors: validation (400), not found (404), store (500)."""
    if isinstance(exc, StoreError):
        logger.error(f"Store error on {request.method} {request.url.path}: {exc.message}", exc_info=exc)
        return _envelope(exc.status_code, "Internal server error")
    return _envelope(exc.status_code, exc.message)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException):
    # Starlette's own 404 for unmatched paths, distinct from "Report not found"
    if exc.status_code == status.HTTP_404_NOT_FOUND and exc.detail == "Not Found":
        return _envelope(exc.status_code, "Route not found")
    return _envelope(exc.status_code, str(exc.detail))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed request bodies (e.g. non-numeric latitude) become a 400 envelope."""
    problems = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
        problems.append(f"{location}: {error.get('msg')}" if location else error.get("msg"))
    logger.info(f"Request validation failed on {request.url.path}: {problems}")
    return _envelope(status.HTTP_400_BAD_REQUEST, "Invalid request: " + "; ".join(problems))


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    """Catch all unhandled exceptions and log them with full traceback."""
    logger.error(f"Unhandled error on {request.method} {request.url.path}", exc_info=exc)
    return _envelope(status.HTTP_500_INTERNAL_SERVER_ERROR, "Internal server error")


app.add_middleware(
    CORSMiddleware,
    allow_origins=[origin.strip() for origin in settings.CORS_ORIGINS.split(",") if origin.strip()],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)


# Application lifecycle events
@app.on_event("startup")
async def startup_event():
    """
    Build the shared, read-only configuration and the report service.
    Startup fails if ward data or the store cannot be loaded.
    """
    from app.config.firebase import create_report_store
    from app.services.coordinate_validator import BoundingBox, CoordinateValidator
    from app.services.query_planner import QueryPlanner
    from app.services.report_service import ReportService
    from app.services.ward_resolver import WardResolver, load_ward_map

    setup_logging(settings.LOG_LEVEL)
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")

    try:
        ward_map = load_ward_map(settings.WARD_GEOJSON_PATH, settings.WARD_ZONES_PATH)
        store = create_report_store()
    except Exception:
        logger.error("Startup failed: could not load ward data or report store", exc_info=True)
        raise

    app.state.report_service = ReportService(
        store=store,
        ward_resolver=WardResolver(ward_map),
        coordinate_validator=CoordinateValidator(BoundingBox.from_settings(settings)),
        query_planner=QueryPlanner(
            default_limit=settings.DEFAULT_LIST_LIMIT,
            default_ward_limit=settings.DEFAULT_WARD_LIST_LIMIT,
        ),
        max_text_length=settings.MAX_TEXT_LENGTH,
    )
    logger.info(f"📍 Monitoring {len(ward_map.ward_names)} Chennai wards")


@app.on_event("shutdown")
async def shutdown_event():
    logger.info(f"Shutting down {settings.APP_NAME}")


# Include routers
app.include_router(health.router)
app.include_router(reports.router)
app.include_router(analytics.router)
