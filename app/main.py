"""
Campus Job Portal - Main Application

FastAPI backend with:
- MongoDB for students, the roll number allow-list, jobs and applications
- Student self-registration with allow-list auto-approval
- Admin approval, job management and application views
- JWT sessions in http-only cookies

Run: uvicorn app.main:app --reload
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.api.routes import api_router
from app.core.config import get_settings
from app.core.errors import ServiceError
from app.core.logging_config import configure_logging
from app.db.mongodb import close_mongo_client, init_mongo_indexes, test_mongo_connection

settings = get_settings()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI):
    """Configure logging and MongoDB indexes on startup, close the client on shutdown."""
    configure_logging()
    try:
        init_mongo_indexes()
        logger.info("MongoDB indexes initialized")
    except Exception as e:
        # never serve without the unique indexes
        logger.error("MongoDB index initialization failed: %s", e)
        raise

    yield

    close_mongo_client()


# Create FastAPI app
app = FastAPI(
    title="Campus Job Portal",
    description="""
    College job board with student registration and admin approval.

    ## Features
    - **Students**: Register (auto-approved when the roll number is on the
      approved list), login once approved, manage profile, apply to jobs
    - **Admins**: Approve/unapprove students singly or in bulk, delete
      students, manage jobs, review applications
    """,
    version="1.0.0",
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
    lifespan=lifespan,
)

# CORS middleware - cookies need credentials and an explicit origin
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ============================================================
# ERROR HANDLERS
# Every failure leaves as {"error": "..."}; the client shows the text as-is.
# ============================================================

@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError):
    return JSONResponse(
        status_code=exc.status_code,
        content={"error": exc.message, "code": exc.error_code},
    )


def _validation_message(exc: RequestValidationError) -> str:
    errors = exc.errors()
    if any(err.get("type") == "missing" for err in errors):
        return "All fields are required"
    if not errors:
        return "Invalid request"

    first = errors[0]
    if first.get("type") == "json_invalid":
        return "Invalid request body"
    field = first.get("loc", ["value"])[-1]
    return f"Invalid {field}: {first.get('msg', 'invalid value')}"


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError):
    return JSONResponse(
        status_code=400,
        content={"error": _validation_message(exc), "code": "VALIDATION_ERROR"},
    )


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Server error", "code": "SERVER_ERROR"})


# Include API routes
app.include_router(api_router, prefix="/api")


@app.get("/", tags=["Health"])
async def root():
    return {"status": "running", "app": "Campus Job Portal"}


@app.get("/health", tags=["Health"])
def health_check():
    """Detailed health check."""
    mongo_ok = test_mongo_connection()
    return {
        "status": "healthy" if mongo_ok else "degraded",
        "mongodb": "connected" if mongo_ok else "disconnected",
    }
