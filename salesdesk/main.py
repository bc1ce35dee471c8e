# salesdesk/main.py
"""
Main application file for SalesDesk.
"""

from fastapi import FastAPI, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from fastapi.encoders import jsonable_encoder
import logging
import json
from datetime import datetime

from salesdesk.api.api import api_router
from salesdesk.core.config import settings
from salesdesk.core.events import setup_event_handlers
from salesdesk.core.exceptions import (
    BusinessRuleException,
    ConcurrentModificationException,
    DatabaseException,
    DuplicateEntityException,
    EntityNotFoundException,
    InvalidArgumentException,
    SalesDeskException,
    ValidationException,
)
from salesdesk.db.session import init_db

# --- Logging Configuration ---
logging.basicConfig(
    level=settings.LOG_LEVEL, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
)
logger = logging.getLogger("salesdesk")
logger.setLevel(settings.LOG_LEVEL)

# Initialize FastAPI app
app = FastAPI(
    title=settings.PROJECT_NAME,
    description="API for recording sales with per-product volume discounts",
    version=settings.VERSION,
    openapi_url=f"{settings.API_V1_STR}/openapi.json",
    docs_url=f"{settings.API_V1_STR}/docs",
    redoc_url=f"{settings.API_V1_STR}/redoc",
)

# Set up CORS
origins = [str(origin) for origin in settings.BACKEND_CORS_ORIGINS if origin]
if origins:
    logger.info(f"CORS origins: {origins}")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Total-Count"],
        max_age=86400,
    )


# --- Error Handlers ---
ERROR_STATUS_CODES = {
    ValidationException: status.HTTP_422_UNPROCESSABLE_ENTITY,
    EntityNotFoundException: status.HTTP_404_NOT_FOUND,
    InvalidArgumentException: status.HTTP_400_BAD_REQUEST,
    BusinessRuleException: status.HTTP_400_BAD_REQUEST,
    DuplicateEntityException: status.HTTP_409_CONFLICT,
    ConcurrentModificationException: status.HTTP_409_CONFLICT,
    DatabaseException: status.HTTP_500_INTERNAL_SERVER_ERROR,
    SalesDeskException: status.HTTP_500_INTERNAL_SERVER_ERROR,
}


async def salesdesk_exception_handler(request: Request, exc: SalesDeskException):
    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    for exc_type in type(exc).__mro__:
        if exc_type in ERROR_STATUS_CODES:
            status_code = ERROR_STATUS_CODES[exc_type]
            break

    if status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc.code} {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} rejected: {exc.code} {exc.message}")

    return JSONResponse(status_code=status_code, content={"detail": jsonable_encoder(exc.to_dict())})


for _exc_type in ERROR_STATUS_CODES:
    app.add_exception_handler(_exc_type, salesdesk_exception_handler)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    error_details = jsonable_encoder(exc.errors())
    logger.error(f"Request validation error on {request.method} {request.url.path}")
    logger.error(f"Validation Errors:\n{json.dumps(error_details, indent=2)}")
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content={"detail": error_details},
    )


# Log requests
@app.middleware("http")
async def log_requests(request: Request, call_next):
    start_time = datetime.now()
    logger.info(f"-> Request: {request.method} {request.url.path}")
    try:
        response = await call_next(request)
        process_time = (datetime.now() - start_time).total_seconds()
        logger.info(f"<- Response: {response.status_code} ({process_time:.4f}s)")
        return response
    except Exception as e:
        process_time = (datetime.now() - start_time).total_seconds()
        logger.exception(
            f"!! Error during request processing for {request.method} {request.url.path} ({process_time:.4f}s): {e}"
        )
        raise


# Set up event handlers
setup_event_handlers(app)


@app.on_event("startup")
async def create_tables_on_startup():
    """Create any missing tables before serving requests."""
    init_db()


# Include the API router
app.include_router(api_router, prefix=settings.API_V1_STR)


# Root and Health Check Endpoints
@app.get("/", tags=["Root"], summary="API Root Endpoint")
def read_root():
    """Provides basic API information and links to documentation."""
    return {
        "message": "Welcome to SalesDesk API",
        "project_name": settings.PROJECT_NAME,
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT,
        "docs_url": app.docs_url,
        "openapi_url": app.openapi_url,
    }


@app.get("/health", tags=["Health"], summary="API Health Check")
def health_check():
    """Returns the operational status of the API."""
    return {"status": "ok", "timestamp": datetime.now().isoformat()}
